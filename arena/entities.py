"""
Entity state management for the arena.

Holds players and obstacles plus a position index so occupancy queries are
O(1). Every mutation updates the entities and the index together.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

from .errors import InvariantError
from .grid import Position

logger = logging.getLogger(__name__)


class PlayerStatus(Enum):
    ACTIVE = "Active"
    DEFEATED = "Defeated"


@dataclass
class Player:
    """A joined player."""
    id: str
    pseudo: str
    color: str
    health: int
    obstacle_charges: int
    position: Optional[Position]
    status: PlayerStatus = PlayerStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == PlayerStatus.ACTIVE


@dataclass
class Obstacle:
    """A placed obstacle. Removed from the board when health reaches 0."""
    id: str
    position: Position
    health: int


Entity = Union[Player, Obstacle]


def new_id() -> str:
    return uuid.uuid4().hex


class EntityRegistry:
    """Owns all players and obstacles in the game."""

    def __init__(self):
        self.players: dict[str, Player] = {}  # Insertion order is join order
        self.obstacles: dict[str, Obstacle] = {}
        self._index: dict[Position, Entity] = {}
        self.positions = MappingProxyType(self._index)

    # Players

    def add_player(self, player: Player):
        if player.id in self.players:
            raise InvariantError(f"Duplicate player id {player.id}")
        if player.position is not None:
            self._claim(player.position, player)
        self.players[player.id] = player

    def remove_player(self, player_id: str) -> Player:
        player = self._require_player(player_id)
        if player.position is not None:
            self._release(player.position, player)
        del self.players[player_id]
        return player

    def move_player(self, player_id: str, target: Position):
        player = self._require_player(player_id)
        if player.position is None:
            raise InvariantError(f"Player {player.pseudo} has no position to move from")
        if target == player.position:
            return
        self._claim(target, player)
        self._release(player.position, player)
        player.position = target

    def damage_player(self, player_id: str, amount: int) -> int:
        """Apply damage clamped at zero. Returns remaining health."""
        player = self._require_player(player_id)
        player.health = max(0, player.health - amount)
        return player.health

    def defeat_player(self, player_id: str):
        """Mark a player Defeated and free its cell. The record is kept."""
        player = self._require_player(player_id)
        if player.position is not None:
            self._release(player.position, player)
            player.position = None
        player.status = PlayerStatus.DEFEATED

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def get_player_by_pseudo(self, pseudo: str) -> Optional[Player]:
        for player in self.players.values():
            if player.pseudo == pseudo:
                return player
        return None

    def get_active_players(self) -> list[Player]:
        return [p for p in self.players.values() if p.is_active]

    # Obstacles

    def add_obstacle(self, position: Position, health: int) -> Obstacle:
        obstacle = Obstacle(id=new_id(), position=position, health=health)
        self._claim(position, obstacle)
        self.obstacles[obstacle.id] = obstacle
        return obstacle

    def remove_obstacle(self, obstacle_id: str) -> Obstacle:
        obstacle = self.obstacles.get(obstacle_id)
        if obstacle is None:
            raise InvariantError(f"Unknown obstacle {obstacle_id}")
        self._release(obstacle.position, obstacle)
        del self.obstacles[obstacle_id]
        return obstacle

    def damage_obstacle(self, obstacle_id: str, amount: int) -> int:
        """Apply damage clamped at zero. Returns remaining health."""
        obstacle = self.obstacles.get(obstacle_id)
        if obstacle is None:
            raise InvariantError(f"Unknown obstacle {obstacle_id}")
        obstacle.health = max(0, obstacle.health - amount)
        return obstacle.health

    # Index

    def occupant_at(self, pos: Position) -> Optional[Entity]:
        return self._index.get(pos)

    def clear(self):
        self.players.clear()
        self.obstacles.clear()
        self._index.clear()

    def check_consistency(self):
        """Raise InvariantError if the position index disagrees with the entities."""
        expected: dict[Position, Entity] = {}
        for entity in list(self.players.values()) + list(self.obstacles.values()):
            if entity.position is None:
                continue
            if entity.position in expected:
                raise InvariantError(f"Two entities share cell {entity.position}")
            expected[entity.position] = entity

        if expected.keys() != self._index.keys():
            raise InvariantError("Position index is out of sync with entities")
        for pos, entity in expected.items():
            if self._index[pos] is not entity:
                raise InvariantError(f"Position index holds the wrong entity at {pos}")

    def _claim(self, pos: Position, entity: Entity):
        current = self._index.get(pos)
        if current is not None and current is not entity:
            logger.error(f"Refusing to place {entity.id} on occupied cell {pos}")
            raise InvariantError(f"Cell {pos} is already occupied")
        self._index[pos] = entity

    def _release(self, pos: Position, entity: Entity):
        if self._index.get(pos) is not entity:
            logger.error(f"Position index does not hold {entity.id} at {pos}")
            raise InvariantError(f"Position index desynchronized at {pos}")
        del self._index[pos]

    def _require_player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise InvariantError(f"Unknown player {player_id}")
        return player
