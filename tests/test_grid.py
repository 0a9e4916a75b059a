from arena import Grid, Position


def test_in_bounds_edges() -> None:
    grid = Grid(8)
    assert grid.in_bounds(Position(0, 0))
    assert grid.in_bounds(Position(7, 7))
    assert not grid.in_bounds(Position(8, 0))
    assert not grid.in_bounds(Position(0, -1))


def test_adjacency_is_orthogonal_only() -> None:
    center = Position(3, 3)
    assert Grid.is_adjacent(center, Position(3, 2))
    assert Grid.is_adjacent(center, Position(4, 3))
    assert not Grid.is_adjacent(center, Position(4, 4))
    assert not Grid.is_adjacent(center, Position(3, 5))
    assert not Grid.is_adjacent(center, center)


def test_neighbors_are_clipped_at_corners() -> None:
    grid = Grid(8)
    assert grid.neighbors(Position(0, 0)) == [Position(1, 0), Position(0, 1)]
    assert len(grid.neighbors(Position(4, 4))) == 4


def test_occupant_lookup_uses_given_index() -> None:
    occupancy = {Position(1, 1): "someone"}
    grid = Grid(4, occupancy)
    assert grid.occupant_at(Position(1, 1)) == "someone"
    assert grid.is_empty(Position(2, 2))


def test_spawn_order_starts_with_corners() -> None:
    order = list(Grid(4).spawn_order())
    assert order[:4] == [Position(0, 0), Position(3, 3), Position(3, 0), Position(0, 3)]
    assert len(order) == 16
    assert len(set(order)) == 16


def test_find_spawn_cell_skips_occupied_cells() -> None:
    occupancy = {Position(0, 0): "a", Position(1, 1): "b"}
    assert Grid(2, occupancy).find_spawn_cell() == Position(1, 0)

    full = {cell: "x" for cell in Grid(2).cells()}
    assert Grid(2, full).find_spawn_cell() is None
