import pytest

from arena import GameConfig, GameEngine


@pytest.fixture
def engine() -> GameEngine:
    return GameEngine(GameConfig())


@pytest.fixture
def three_player_engine() -> GameEngine:
    return GameEngine(GameConfig(min_players=3))
