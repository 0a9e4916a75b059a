import json

import pytest

from arena import ActionRequest, Position, Reason
from arena.protocol import (
    JoinRequest, MessageType, ProtocolError, ResetRequest, encode, parse_message,
)


def frame(msg_type, payload=None) -> str:
    return json.dumps({"type": msg_type, "payload": payload})


def test_join_is_parsed() -> None:
    msg = parse_message(frame("JOIN_GAME", {"pseudo": " Ana ", "couleur": "#123456", "gridSize": 8}))
    assert msg == JoinRequest(pseudo="Ana", color="#123456", grid_size=8)


def test_join_accepts_color_alias_and_numeric_string() -> None:
    msg = parse_message(frame("JOIN_GAME", {"pseudo": "Bo", "color": "blue", "gridSize": "10"}))
    assert msg.color == "blue"
    assert msg.grid_size == 10


def test_join_without_grid_size() -> None:
    msg = parse_message(frame("JOIN_GAME", {"pseudo": "Bo"}))
    assert msg.grid_size is None
    assert msg.color is None


@pytest.mark.parametrize(
    "payload, reason",
    [
        ({}, Reason.INVALID_PSEUDO),
        ({"pseudo": 42}, Reason.INVALID_PSEUDO),
        ({"pseudo": "Ana", "gridSize": "big"}, Reason.INVALID_GRID_SIZE),
        ({"pseudo": "Ana", "gridSize": True}, Reason.INVALID_GRID_SIZE),
        ({"pseudo": "Ana", "gridSize": "\u00b2"}, Reason.INVALID_GRID_SIZE),
        ({"pseudo": "Ana", "couleur": 7}, Reason.MALFORMED_MESSAGE),
    ],
)
def test_bad_join_payloads(payload, reason) -> None:
    with pytest.raises(ProtocolError) as exc:
        parse_message(frame("JOIN_GAME", payload))
    assert exc.value.reason == reason


def test_action_is_parsed() -> None:
    msg = parse_message(frame("REQUEST_ACTION", {"actionType": "ATTACK", "target": {"x": 2, "y": 3}}))
    assert msg == ActionRequest(action_type="ATTACK", target=Position(2, 3))


def test_unknown_action_type_still_parses() -> None:
    msg = parse_message(frame("REQUEST_ACTION", {"actionType": "DANCE", "target": {"x": 0, "y": 0}}))
    assert msg.kind is None


@pytest.mark.parametrize(
    "payload",
    [
        {"target": {"x": 1, "y": 1}},
        {"actionType": "MOVE"},
        {"actionType": "MOVE", "target": [1, 1]},
        {"actionType": "MOVE", "target": {"x": 1}},
        {"actionType": "MOVE", "target": {"x": "1", "y": 1}},
        {"actionType": "MOVE", "target": {"x": 1.5, "y": 1}},
    ],
)
def test_bad_action_payloads(payload) -> None:
    with pytest.raises(ProtocolError) as exc:
        parse_message(frame("REQUEST_ACTION", payload))
    assert exc.value.reason == Reason.MALFORMED_MESSAGE


def test_reset_is_parsed() -> None:
    assert parse_message(frame("RESET_GAME", {})) == ResetRequest()
    assert parse_message(json.dumps({"type": "RESET_GAME"})) == ResetRequest()


@pytest.mark.parametrize(
    "raw, reason",
    [
        ("not json", Reason.MALFORMED_MESSAGE),
        ("[1, 2]", Reason.MALFORMED_MESSAGE),
        (frame("JOIN_GAME", [1]), Reason.MALFORMED_MESSAGE),
        (frame("SHOUT", {}), Reason.UNKNOWN_MESSAGE),
        (frame("GAME_OVER", {}), Reason.UNKNOWN_MESSAGE),
        ("[" * 30000, Reason.MALFORMED_MESSAGE),
        ('{"type": "REQUEST_ACTION", "payload": {"actionType": "MOVE", "target": {"x": ' + "1" * 5000 + ', "y": 0}}}', Reason.MALFORMED_MESSAGE),
    ],
)
def test_bad_envelopes(raw, reason) -> None:
    with pytest.raises(ProtocolError) as exc:
        parse_message(raw)
    assert exc.value.reason == reason


def test_encode_envelope() -> None:
    assert json.loads(encode(MessageType.ACTION_INVALID, {"message": "nope"})) == {
        "type": "ACTION_INVALID",
        "payload": {"message": "nope"},
    }
    assert json.loads(encode(MessageType.GAME_RESET)) == {"type": "GAME_RESET", "payload": {}}
