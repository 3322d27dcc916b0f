"""Grid model for the pursuit simulation."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Sequence

import numpy as np
from scipy.ndimage import label


class CellType(IntEnum):
    """Contents of a single grid cell."""
    EMPTY = 0
    OBSTACLE = 1
    SEEKER = 2
    CHASER = 3
    GOAL = 4

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "CellType":
        for cell_type, sym in _SYMBOLS.items():
            if sym == symbol:
                return cell_type
        raise ValueError(f"Unknown cell symbol: {symbol!r}")


_SYMBOLS = {
    CellType.EMPTY: '.',
    CellType.OBSTACLE: '#',
    CellType.SEEKER: 'N',
    CellType.CHASER: 'A',
    CellType.GOAL: 'T',
}

# Neighbour exploration order: down, up, right, left
NEIGHBOR_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True)
class Position:
    """Immutable (row, col) coordinate."""
    row: int
    col: int

    def manhattan_distance(self, other: "Position") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def is_adjacent(self, other: "Position") -> bool:
        return self.manhattan_distance(other) == 1

    def move(self, drow: int, dcol: int) -> "Position":
        return Position(self.row + drow, self.col + dcol)

    def __iter__(self) -> Iterator[int]:
        yield self.row
        yield self.col

    def __repr__(self) -> str:
        return f"({self.row}, {self.col})"


class GridMap:
    """
    Square grid of cell types.

    Cells are stored in a numpy int8 array indexed [row, col]. The grid
    only checks bounds; keeping the occupancy consistent with the tracked
    entity positions is the engine's job.
    """

    def __init__(self, size: int):
        if size < 2:
            raise ValueError(f"Grid size must be at least 2, got {size}")
        self.size = size
        self.cells = np.full((size, size), CellType.EMPTY, dtype=np.int8)

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "GridMap":
        """Build a grid from symbol rows such as ``["N..", ".#.", "..T"]``."""
        rows = [r.strip() for r in rows if r.strip()]
        size = len(rows)
        if any(len(r) != size for r in rows):
            raise ValueError("Layout rows must form a square grid")
        grid = cls(size)
        for r, line in enumerate(rows):
            for c, symbol in enumerate(line):
                grid.cells[r, c] = CellType.from_symbol(symbol)
        return grid

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.size and 0 <= pos.col < self.size

    def get(self, pos: Position) -> CellType:
        if not self.in_bounds(pos):
            raise IndexError(f"Position {pos} outside {self.size}x{self.size} grid")
        return CellType(int(self.cells[pos.row, pos.col]))

    def set(self, pos: Position, cell_type: CellType) -> None:
        if not self.in_bounds(pos):
            raise IndexError(f"Position {pos} outside {self.size}x{self.size} grid")
        self.cells[pos.row, pos.col] = cell_type

    def is_blocked(self, pos: Position) -> bool:
        """Out of bounds, obstacle and chaser cells cannot be entered."""
        if not self.in_bounds(pos):
            return True
        return self.get(pos) in (CellType.OBSTACLE, CellType.CHASER)

    def neighbors(self, pos: Position) -> List[Position]:
        """In-bounds 4-connected neighbours (down, up, right, left)."""
        result = []
        for drow, dcol in NEIGHBOR_OFFSETS:
            candidate = pos.move(drow, dcol)
            if self.in_bounds(candidate):
                result.append(candidate)
        return result

    def positions_of(self, cell_type: CellType) -> List[Position]:
        rows, cols = np.where(self.cells == cell_type)
        return [Position(int(r), int(c)) for r, c in zip(rows, cols)]

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cells == cell_type))

    def passable_mask(self) -> np.ndarray:
        """Boolean mask, True where the cell is not an obstacle."""
        return self.cells != CellType.OBSTACLE

    def connected(self, a: Position, b: Position) -> bool:
        """
        Check whether two cells share a 4-connected region of non-obstacle
        cells. Entities are ignored, only the static layout matters.
        """
        labels, _ = label(self.passable_mask())
        la = labels[a.row, a.col]
        return bool(la != 0 and la == labels[b.row, b.col])

    def copy(self) -> "GridMap":
        clone = GridMap.__new__(GridMap)
        clone.size = self.size
        clone.cells = self.cells.copy()
        return clone

    def to_rows(self) -> List[str]:
        return [
            ''.join(CellType(int(v)).symbol for v in row)
            for row in self.cells
        ]
