from arena import GameEngine, Position


def join(engine: GameEngine, *pseudos: str, grid_size: int = 8) -> list[str]:
    """Join players in order and return their ids."""
    return [engine.add_player(p, "#ff0000", grid_size).id for p in pseudos]


def teleport(engine: GameEngine, player_id: str, x: int, y: int):
    """Reposition a player directly through the registry, keeping the index in sync."""
    engine.registry.move_player(player_id, Position(x, y))


def player(engine: GameEngine, player_id: str):
    return engine.get_snapshot().get_player(player_id)
