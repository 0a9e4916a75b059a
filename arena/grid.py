"""
Square grid geometry for the arena.

Cells are addressed by integer (x, y) pairs with the origin at the top-left
corner. Adjacency is the orthogonal 4-neighbour relation: diagonals are not
adjacent.
"""

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Any


@dataclass(frozen=True)
class Position:
    """A cell coordinate."""
    x: int
    y: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


ORTHOGONAL_STEPS = ((0, -1), (1, 0), (0, 1), (-1, 0))


class Grid:
    """
    Bounds and adjacency for a size x size board.

    Occupancy is answered from the entity registry's position index, which is
    passed in as a read-only mapping; the grid keeps no entity state itself.
    """

    def __init__(self, size: int, occupancy: Optional[Mapping[Position, Any]] = None):
        if size < 1:
            raise ValueError(f"Grid size must be positive, got {size}")
        self.size = size
        self._occupancy = occupancy if occupancy is not None else {}

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.size and 0 <= pos.y < self.size

    @staticmethod
    def is_adjacent(a: Position, b: Position) -> bool:
        """True iff a and b differ by exactly one step along exactly one axis."""
        return abs(a.x - b.x) + abs(a.y - b.y) == 1

    def occupant_at(self, pos: Position):
        """Return the player or obstacle on a cell, or None."""
        return self._occupancy.get(pos)

    def is_empty(self, pos: Position) -> bool:
        return self.occupant_at(pos) is None

    def neighbors(self, pos: Position) -> list[Position]:
        """In-bounds orthogonal neighbours, clockwise from north."""
        result = []
        for dx, dy in ORTHOGONAL_STEPS:
            cell = pos.offset(dx, dy)
            if self.in_bounds(cell):
                result.append(cell)
        return result

    def cells(self) -> Iterator[Position]:
        """All cells in row-major order."""
        for y in range(self.size):
            for x in range(self.size):
                yield Position(x, y)

    def spawn_order(self) -> Iterator[Position]:
        """
        Deterministic spawn candidates.

        Corners first (top-left, bottom-right, top-right, bottom-left) so the
        first players start as far apart as possible, then every other cell
        in row-major order.
        """
        last = self.size - 1
        corners = [
            Position(0, 0),
            Position(last, last),
            Position(last, 0),
            Position(0, last),
        ]
        seen = set()
        for cell in corners:
            if cell not in seen:
                seen.add(cell)
                yield cell
        for cell in self.cells():
            if cell not in seen:
                yield cell

    def find_spawn_cell(self) -> Optional[Position]:
        """First free spawn candidate, or None if the board is full."""
        for cell in self.spawn_order():
            if self.is_empty(cell):
                return cell
        return None
