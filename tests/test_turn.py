import pytest

from arena import InvariantError, TurnSequencer


def sequencer_with(*ids: str) -> TurnSequencer:
    seq = TurnSequencer()
    for pid in ids:
        seq.add(pid)
    return seq


def test_start_gives_turn_to_first_joined() -> None:
    seq = sequencer_with("a", "b", "c")
    assert seq.start() == "a"


def test_advance_cycles_in_join_order() -> None:
    seq = sequencer_with("a", "b", "c")
    seq.start()
    assert [seq.advance() for _ in range(4)] == ["b", "c", "a", "b"]


def test_removed_player_is_skipped_forever() -> None:
    seq = sequencer_with("a", "b", "c")
    seq.start()
    seq.on_player_removed("b")

    assert [seq.advance() for _ in range(4)] == ["c", "a", "c", "a"]
    assert seq.active_order == ["a", "c"]


def test_removing_current_player_passes_the_turn() -> None:
    seq = sequencer_with("a", "b", "c")
    seq.start()
    seq.on_player_removed("a")
    assert seq.current == "b"

    seq.advance()
    seq.on_player_removed("c")
    assert seq.current == "b"


def test_removing_everyone_clears_the_turn() -> None:
    seq = sequencer_with("a", "b")
    seq.start()
    seq.on_player_removed("b")
    seq.on_player_removed("a")
    assert seq.current is None


def test_unknown_player_removal_is_an_invariant_error() -> None:
    seq = sequencer_with("a")
    with pytest.raises(InvariantError):
        seq.on_player_removed("zzz")


def test_reset_forgets_everything() -> None:
    seq = sequencer_with("a", "b")
    seq.start()
    seq.reset()
    assert seq.order == []
    assert seq.current is None
