"""
Game state machine for the arena.

Orchestrates phases: Lobby -> InProgress -> Finished -> (reset) -> Lobby.
GameEngine is the only way to change the game. Every operation either
applies completely or raises ValidationError with nothing changed. The
engine performs no I/O and is not thread-safe: callers must feed it one
request at a time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .actions import ActionOutcome, ActionRequest, ActionResolver, ActionType
from .config import GameConfig
from .entities import EntityRegistry, Obstacle, Player, PlayerStatus, new_id
from .errors import InvariantError, Reason, ValidationError
from .grid import Grid, Position
from .turn import TurnSequencer
from .victory import GameResult, WinDetector

logger = logging.getLogger(__name__)


class Phase(Enum):
    LOBBY = "Lobby"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"


@dataclass(frozen=True)
class PlayerView:
    """Read-only copy of a player."""
    id: str
    pseudo: str
    color: str
    health: int
    obstacle_charges: int
    position: Optional[Position]
    status: PlayerStatus

    @classmethod
    def of(cls, player: Player) -> "PlayerView":
        return cls(
            id=player.id,
            pseudo=player.pseudo,
            color=player.color,
            health=player.health,
            obstacle_charges=player.obstacle_charges,
            position=player.position,
            status=player.status,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pseudo": self.pseudo,
            "couleur": self.color,
            "pdv": self.health,
            "obstaclesRestants": self.obstacle_charges,
            "status": self.status.value,
            "position": self.position.to_dict() if self.position else None,
        }


@dataclass(frozen=True)
class ObstacleView:
    """Read-only copy of an obstacle."""
    id: str
    position: Position
    health: int

    @classmethod
    def of(cls, obstacle: Obstacle) -> "ObstacleView":
        return cls(id=obstacle.id, position=obstacle.position, health=obstacle.health)

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position.to_dict(), "pdv": self.health}


@dataclass(frozen=True)
class GameSnapshot:
    """Immutable copy of the whole game, as broadcast to observers."""
    grid_size: Optional[int]
    phase: Phase
    players: tuple[PlayerView, ...]
    obstacles: tuple[ObstacleView, ...]
    current_player_turn: Optional[str]
    winner_id: Optional[str]
    winner_pseudo: Optional[str]

    def get_player(self, player_id: str) -> Optional[PlayerView]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def to_dict(self) -> dict:
        return {
            "gridSize": self.grid_size,
            "gameStatus": self.phase.value,
            "players": [p.to_dict() for p in self.players],
            "obstacles": [o.to_dict() for o in self.obstacles],
            "currentPlayerTurn": self.current_player_turn,
            "winner": self.winner_pseudo,
            "winnerId": self.winner_id,
        }


class GameEngine:
    """Authoritative state of a single game."""

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = (config or GameConfig()).validate()
        self.registry = EntityRegistry()
        self.sequencer = TurnSequencer()
        self.resolver = ActionResolver(self.registry, self.sequencer, self.config)
        self.win_detector = WinDetector(self.registry)

        self.phase = Phase.LOBBY
        self.grid: Optional[Grid] = None
        self.result: Optional[GameResult] = None

    # State queries

    @property
    def grid_size(self) -> Optional[int]:
        return self.grid.size if self.grid else None

    @property
    def current_player_turn(self) -> Optional[str]:
        return self.sequencer.current

    @property
    def player_count(self) -> int:
        return len(self.registry.players)

    def can_join(self) -> bool:
        """True while the lobby is open and has room."""
        return self.phase == Phase.LOBBY and self.player_count < self.config.max_players

    def get_snapshot(self) -> GameSnapshot:
        result = self.result or GameResult()
        return GameSnapshot(
            grid_size=self.grid_size,
            phase=self.phase,
            players=tuple(PlayerView.of(p) for p in self.registry.players.values()),
            obstacles=tuple(ObstacleView.of(o) for o in self.registry.obstacles.values()),
            current_player_turn=self.sequencer.current,
            winner_id=result.winner_id,
            winner_pseudo=result.winner_pseudo,
        )

    # Lobby

    def add_player(self, pseudo: str, color: Optional[str] = None, grid_size: Optional[int] = None) -> PlayerView:
        """Join a player to the lobby and start the game once enough have joined."""
        pseudo = pseudo.strip() if isinstance(pseudo, str) else ""
        if not pseudo:
            raise ValidationError(Reason.INVALID_PSEUDO)
        if self.registry.get_player_by_pseudo(pseudo) is not None:
            raise ValidationError(Reason.DUPLICATE_PSEUDO, pseudo)
        if self.player_count >= self.config.max_players:
            raise ValidationError(Reason.LOBBY_FULL)
        if self.phase != Phase.LOBBY:
            raise ValidationError(Reason.LOBBY_CLOSED)

        grid = self.grid
        if grid is None:
            size = grid_size if grid_size is not None else self.config.default_grid_size
            if size not in self.config.allowed_grid_sizes:
                raise ValidationError(Reason.INVALID_GRID_SIZE, str(size))
            grid = Grid(size, self.registry.positions)
        elif grid_size is not None and grid_size != grid.size:
            logger.debug(f"Grid already fixed at {grid.size}, ignoring requested size {grid_size}")

        spawn = grid.find_spawn_cell()
        if spawn is None:
            raise ValidationError(Reason.NO_SPAWN_CELL)

        player = Player(
            id=new_id(),
            pseudo=pseudo,
            color=color or self.config.default_color,
            health=self.config.max_health,
            obstacle_charges=self.config.obstacle_charges,
            position=spawn,
        )
        self.registry.add_player(player)
        self.sequencer.add(player.id)
        self.grid = grid
        logger.info(f"{pseudo} joined at ({spawn.x}, {spawn.y}) on a {grid.size}x{grid.size} grid")

        if self.player_count >= self.config.min_players:
            self._start()

        self._verify()
        return PlayerView.of(player)

    # Actions

    def dispatch(self, player_id: str, request: ActionRequest) -> ActionOutcome:
        """Single entry point for every player action."""
        try:
            outcome = self.resolver.resolve(
                player_id, request, self.grid, self.phase == Phase.IN_PROGRESS
            )
        except ValidationError as e:
            logger.debug(f"Rejected {request.action_type} from {player_id}: {e}")
            raise

        result = self.win_detector.evaluate()
        if result is not None:
            self._finish(result)
        else:
            self.sequencer.advance()

        self._verify()
        return outcome

    def execute_move(self, player_id: str, target: Position) -> ActionOutcome:
        return self.dispatch(player_id, ActionRequest(ActionType.MOVE.value, target))

    def execute_attack(self, player_id: str, target: Position) -> ActionOutcome:
        return self.dispatch(player_id, ActionRequest(ActionType.ATTACK.value, target))

    def execute_place_obstacle(self, player_id: str, target: Position) -> ActionOutcome:
        return self.dispatch(player_id, ActionRequest(ActionType.PLACE_OBSTACLE.value, target))

    # Lifecycle

    def remove_player(self, player_id: str):
        """Handle a disconnect."""
        player = self.registry.get_player(player_id)
        if player is None:
            logger.warning(f"Ignoring removal of unknown player {player_id}")
            return

        if self.phase == Phase.LOBBY:
            self.registry.remove_player(player_id)
            self.sequencer.forget(player_id)
            if not self.registry.players:
                self.grid = None
            logger.info(f"{player.pseudo} left the lobby")

        elif self.phase == Phase.IN_PROGRESS:
            if not player.is_active:
                return
            self.registry.defeat_player(player_id)
            self.sequencer.on_player_removed(player_id)
            logger.info(f"{player.pseudo} disconnected and is out of the game")

            result = self.win_detector.evaluate()
            if result is not None:
                self._finish(result)

        else:
            logger.debug(f"{player.pseudo} left a finished game")

        self._verify()

    def reset_game(self):
        if self.phase != Phase.FINISHED:
            raise ValidationError(Reason.RESET_NOT_ALLOWED)

        self.registry.clear()
        self.sequencer.reset()
        self.grid = None
        self.result = None
        self.phase = Phase.LOBBY
        logger.info("Game reset, lobby open")
        self._verify()

    def _start(self):
        self.phase = Phase.IN_PROGRESS
        first = self.sequencer.start()
        logger.info(f"Game started with {self.player_count} players, {first} to play")

    def _finish(self, result: GameResult):
        self.phase = Phase.FINISHED
        self.result = result
        self.sequencer.stop()
        if result.is_draw:
            logger.info("Game over: draw")
        else:
            logger.info(f"Game over: {result.winner_pseudo} wins")

    def _verify(self):
        """Raise InvariantError if the engine state is inconsistent."""
        try:
            self.registry.check_consistency()

            if self.player_count > self.config.max_players:
                raise InvariantError("Player cap exceeded")

            current = self.sequencer.current
            if self.phase == Phase.IN_PROGRESS:
                player = self.registry.get_player(current) if current else None
                if player is None or not player.is_active:
                    raise InvariantError(f"Turn held by non-active player {current}")
            elif current is not None:
                raise InvariantError(f"Turn set to {current} outside of play")
        except InvariantError as e:
            logger.error(f"Engine invariant violated: {e}")
            raise
