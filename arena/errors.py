"""
Error taxonomy for the arena engine.

ValidationError covers every rejected request: it is recoverable, reported
only to the requester, and never leaves a partial mutation behind.
InvariantError signals a broken internal contract and must never be caught
and ignored.
"""

from enum import Enum
from typing import Optional


class Reason(Enum):
    """Rejection reasons. The value is the message shown to the client."""
    GAME_NOT_IN_PROGRESS = "game not in progress"
    NOT_YOUR_TURN = "not your turn"
    PLAYER_DEFEATED = "player is defeated"
    UNKNOWN_PLAYER = "unknown player"
    OUT_OF_BOUNDS = "out of bounds"
    NOT_ADJACENT = "not adjacent"
    OCCUPIED = "cell occupied"
    EMPTY_TARGET = "empty target"
    SELF_TARGET = "cannot target yourself"
    NO_CHARGES = "no obstacle charges remaining"
    UNKNOWN_ACTION = "unknown action"
    INVALID_PSEUDO = "pseudo is required"
    DUPLICATE_PSEUDO = "pseudo already in use"
    LOBBY_FULL = "lobby is full"
    LOBBY_CLOSED = "game already started"
    INVALID_GRID_SIZE = "invalid grid size"
    NO_SPAWN_CELL = "no free spawn cell"
    RESET_NOT_ALLOWED = "game is not finished"
    MALFORMED_MESSAGE = "malformed message"
    UNKNOWN_MESSAGE = "unknown message type"
    ALREADY_JOINED = "already joined as a player"
    SPECTATOR_ACTION = "spectators cannot act"


class ValidationError(Exception):
    """A request was rejected; game state is unchanged."""

    def __init__(self, reason: Reason, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class InvariantError(RuntimeError):
    """Internal state no longer satisfies an engine invariant."""
