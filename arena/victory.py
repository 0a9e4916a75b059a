"""
Victory detection.
"""

from dataclasses import dataclass
from typing import Optional

from .entities import EntityRegistry


@dataclass(frozen=True)
class GameResult:
    """Terminal result. winner_id is None for a draw."""
    winner_id: Optional[str] = None
    winner_pseudo: Optional[str] = None

    @property
    def is_draw(self) -> bool:
        return self.winner_id is None


class WinDetector:
    """Decides whether the game is over after a state change."""

    def __init__(self, registry: EntityRegistry):
        self.registry = registry

    def evaluate(self) -> Optional[GameResult]:
        """Return a result if the game is over, else None."""
        active = self.registry.get_active_players()
        if len(active) == 1:
            return GameResult(winner_id=active[0].id, winner_pseudo=active[0].pseudo)
        if not active:
            return GameResult()
        return None
