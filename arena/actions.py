"""
Action validation and execution.

Each action is checked completely before anything is mutated, so a rejected
action leaves the game exactly as it was.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import GameConfig
from .entities import EntityRegistry, Obstacle, Player
from .errors import Reason, ValidationError
from .grid import Grid, Position
from .turn import TurnSequencer

logger = logging.getLogger(__name__)


class ActionType(Enum):
    MOVE = "MOVE"
    ATTACK = "ATTACK"
    PLACE_OBSTACLE = "PLACE_OBSTACLE"


@dataclass(frozen=True)
class ActionRequest:
    """
    A parsed action request.

    action_type is kept as the raw string from the client so that an
    unrecognized type reaches the engine and is rejected there.
    """
    action_type: str
    target: Position

    @property
    def kind(self) -> Optional[ActionType]:
        try:
            return ActionType(self.action_type)
        except ValueError:
            return None


@dataclass(frozen=True)
class ActionOutcome:
    """What an accepted action did."""
    action: ActionType
    actor_id: str
    target: Position
    target_id: Optional[str] = None
    remaining_health: Optional[int] = None
    destroyed: bool = False


class ActionResolver:
    """Validates and applies player actions against the registry."""

    def __init__(self, registry: EntityRegistry, sequencer: TurnSequencer, config: GameConfig):
        self.registry = registry
        self.sequencer = sequencer
        self.config = config

    def resolve(self, actor_id: str, request: ActionRequest, grid: Optional[Grid], in_progress: bool) -> ActionOutcome:
        actor = self.check_turn(actor_id, in_progress)
        kind = request.kind
        if kind is None:
            raise ValidationError(Reason.UNKNOWN_ACTION, request.action_type)

        if kind == ActionType.MOVE:
            return self.move(actor, request.target, grid)
        elif kind == ActionType.ATTACK:
            return self.attack(actor, request.target, grid)
        else:
            return self.place_obstacle(actor, request.target, grid)

    def check_turn(self, actor_id: str, in_progress: bool) -> Player:
        """Preconditions shared by every action."""
        if not in_progress:
            raise ValidationError(Reason.GAME_NOT_IN_PROGRESS)
        actor = self.registry.get_player(actor_id)
        if actor is None:
            raise ValidationError(Reason.UNKNOWN_PLAYER)
        if not actor.is_active:
            raise ValidationError(Reason.PLAYER_DEFEATED)
        if self.sequencer.current != actor_id:
            raise ValidationError(Reason.NOT_YOUR_TURN)
        return actor

    def move(self, actor: Player, target: Position, grid: Grid) -> ActionOutcome:
        self._check_reach(actor, target, grid)
        if not grid.is_empty(target):
            raise ValidationError(Reason.OCCUPIED)

        self.registry.move_player(actor.id, target)
        logger.debug(f"{actor.pseudo} moved to ({target.x}, {target.y})")
        return ActionOutcome(action=ActionType.MOVE, actor_id=actor.id, target=target)

    def attack(self, actor: Player, target: Position, grid: Grid) -> ActionOutcome:
        if not grid.in_bounds(target):
            raise ValidationError(Reason.OUT_OF_BOUNDS)
        if target == actor.position:
            raise ValidationError(Reason.SELF_TARGET)
        if not grid.is_adjacent(actor.position, target):
            raise ValidationError(Reason.NOT_ADJACENT)

        occupant = grid.occupant_at(target)
        if occupant is None:
            raise ValidationError(Reason.EMPTY_TARGET)

        damage = self.config.attack_damage
        if isinstance(occupant, Obstacle):
            remaining = self.registry.damage_obstacle(occupant.id, damage)
            destroyed = remaining == 0
            if destroyed:
                self.registry.remove_obstacle(occupant.id)
                logger.info(f"{actor.pseudo} destroyed obstacle at ({target.x}, {target.y})")
        else:
            remaining = self.registry.damage_player(occupant.id, damage)
            destroyed = remaining == 0
            if destroyed:
                self.registry.defeat_player(occupant.id)
                self.sequencer.on_player_removed(occupant.id)
                logger.info(f"{actor.pseudo} defeated {occupant.pseudo}")

        return ActionOutcome(
            action=ActionType.ATTACK,
            actor_id=actor.id,
            target=target,
            target_id=occupant.id,
            remaining_health=remaining,
            destroyed=destroyed,
        )

    def place_obstacle(self, actor: Player, target: Position, grid: Grid) -> ActionOutcome:
        if actor.obstacle_charges <= 0:
            raise ValidationError(Reason.NO_CHARGES)
        self._check_reach(actor, target, grid)
        if not grid.is_empty(target):
            raise ValidationError(Reason.OCCUPIED)

        obstacle = self.registry.add_obstacle(target, self.config.obstacle_health)
        actor.obstacle_charges -= 1
        logger.debug(
            f"{actor.pseudo} placed obstacle at ({target.x}, {target.y}), "
            f"{actor.obstacle_charges} charges left"
        )
        return ActionOutcome(
            action=ActionType.PLACE_OBSTACLE,
            actor_id=actor.id,
            target=target,
            target_id=obstacle.id,
            remaining_health=obstacle.health,
        )

    @staticmethod
    def _check_reach(actor: Player, target: Position, grid: Grid):
        if not grid.in_bounds(target):
            raise ValidationError(Reason.OUT_OF_BOUNDS)
        if not grid.is_adjacent(actor.position, target):
            raise ValidationError(Reason.NOT_ADJACENT)
