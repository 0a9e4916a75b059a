"""
Wire protocol between clients and the server.

Every message is a JSON object {"type": ..., "payload": {...}}. Inbound
messages are parsed into one of JoinRequest, ActionRequest or ResetRequest;
anything that does not match exactly is rejected before it reaches the
engine.

Inbound:
- JOIN_GAME:      {pseudo: str, couleur: str, gridSize: int}
- REQUEST_ACTION: {actionType: str, target: {x: int, y: int}}
- RESET_GAME:     {}

Outbound:
- GAME_STATE_UPDATE:   snapshot dict
- ACTION_INVALID:      {message: str}
- JOINED_AS_PLAYER:    {playerId: str}
- JOINED_AS_SPECTATOR: {message: str}
- GAME_OVER:           {winnerPseudo: str | null}
- GAME_RESET:          {message: str}
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from .actions import ActionRequest
from .errors import Reason, ValidationError
from .grid import Position


class MessageType(Enum):
    # Inbound
    JOIN_GAME = "JOIN_GAME"
    REQUEST_ACTION = "REQUEST_ACTION"
    RESET_GAME = "RESET_GAME"
    # Outbound
    GAME_STATE_UPDATE = "GAME_STATE_UPDATE"
    ACTION_INVALID = "ACTION_INVALID"
    JOINED_AS_PLAYER = "JOINED_AS_PLAYER"
    JOINED_AS_SPECTATOR = "JOINED_AS_SPECTATOR"
    GAME_OVER = "GAME_OVER"
    GAME_RESET = "GAME_RESET"


INBOUND_TYPES = (MessageType.JOIN_GAME, MessageType.REQUEST_ACTION, MessageType.RESET_GAME)


class ProtocolError(ValidationError):
    """Inbound message does not have the expected shape."""


@dataclass(frozen=True)
class JoinRequest:
    pseudo: str
    color: Optional[str] = None
    grid_size: Optional[int] = None


@dataclass(frozen=True)
class ResetRequest:
    pass


InboundMessage = Union[JoinRequest, ActionRequest, ResetRequest]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_message(raw: Union[str, bytes]) -> InboundMessage:
    """Parse and validate one inbound frame."""
    try:
        msg = json.loads(raw)
    except (ValueError, RecursionError):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "invalid JSON")

    if not isinstance(msg, dict):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "expected a JSON object")

    msg_type = msg.get("type")
    try:
        kind = MessageType(msg_type)
    except ValueError:
        raise ProtocolError(Reason.UNKNOWN_MESSAGE, str(msg_type))
    if kind not in INBOUND_TYPES:
        raise ProtocolError(Reason.UNKNOWN_MESSAGE, kind.value)

    payload = msg.get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "payload must be an object")

    if kind == MessageType.JOIN_GAME:
        return parse_join(payload)
    elif kind == MessageType.REQUEST_ACTION:
        return parse_action(payload)
    return ResetRequest()


def parse_join(payload: dict) -> JoinRequest:
    pseudo = payload.get("pseudo")
    if not isinstance(pseudo, str) or not pseudo.strip():
        raise ProtocolError(Reason.INVALID_PSEUDO)

    color = payload.get("couleur") or payload.get("color")
    if color is not None and not isinstance(color, str):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "color must be a string")

    grid_size = payload.get("gridSize")
    if isinstance(grid_size, str):
        digits = grid_size.strip()
        if digits.isascii() and digits.isdigit():
            grid_size = int(digits)
    if grid_size is not None and not _is_int(grid_size):
        raise ProtocolError(Reason.INVALID_GRID_SIZE, repr(grid_size))

    return JoinRequest(pseudo=pseudo.strip(), color=color, grid_size=grid_size)


def parse_action(payload: dict) -> ActionRequest:
    action_type = payload.get("actionType")
    if not isinstance(action_type, str):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "actionType must be a string")

    return ActionRequest(action_type=action_type, target=parse_position(payload.get("target")))


def parse_position(target: Any) -> Position:
    if not isinstance(target, dict):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "target must be an object")
    x, y = target.get("x"), target.get("y")
    if not (_is_int(x) and _is_int(y)):
        raise ProtocolError(Reason.MALFORMED_MESSAGE, "target coordinates must be integers")
    return Position(x, y)


def encode(msg_type: MessageType, payload: Optional[dict] = None) -> str:
    return json.dumps({"type": msg_type.value, "payload": payload or {}})
