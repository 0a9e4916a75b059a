"""
Turn sequencing for the arena.

Rotation follows join order. A player dropped from the rotation (defeated or
disconnected) is skipped for the rest of the game.
"""

import logging
from typing import Optional

from .errors import InvariantError

logger = logging.getLogger(__name__)


class TurnSequencer:
    """Tracks whose turn it is."""

    def __init__(self):
        self.order: list[str] = []  # Every player id, join order
        self.removed: set[str] = set()
        self.current: Optional[str] = None

    @property
    def active_order(self) -> list[str]:
        return [pid for pid in self.order if pid not in self.removed]

    def add(self, player_id: str):
        if player_id in self.order:
            raise InvariantError(f"Player {player_id} is already in the rotation")
        self.order.append(player_id)

    def forget(self, player_id: str):
        """Drop a player that left before the game started."""
        if player_id == self.current:
            raise InvariantError("Cannot forget the player whose turn it is")
        if player_id in self.order:
            self.order.remove(player_id)
        self.removed.discard(player_id)

    def start(self) -> Optional[str]:
        """Give the turn to the first player in join order still in rotation."""
        active = self.active_order
        self.current = active[0] if active else None
        return self.current

    def stop(self):
        self.current = None

    def advance(self) -> Optional[str]:
        """Move the turn to the next player in rotation after the current one."""
        if self.current is None:
            return None

        start = self.order.index(self.current)
        count = len(self.order)
        for step in range(1, count + 1):
            candidate = self.order[(start + step) % count]
            if candidate not in self.removed:
                self.current = candidate
                return self.current

        self.current = None
        return None

    def on_player_removed(self, player_id: str):
        """Take a player out of rotation permanently."""
        if player_id not in self.order:
            raise InvariantError(f"Player {player_id} is not in the rotation")
        self.removed.add(player_id)
        if player_id == self.current:
            self.advance()
            logger.debug(f"Removed player held the turn, now {self.current}")

    def reset(self):
        self.order.clear()
        self.removed.clear()
        self.current = None
