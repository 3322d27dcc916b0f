"""Movement strategies for seeker and chasers."""

from abc import ABC, abstractmethod
from collections import deque
from typing import List, Optional, Sequence, Set

from .grid import CellType, GridMap, NEIGHBOR_OFFSETS, Position

DEFAULT_ADJACENCY_PENALTY = -100

_BFS_IMPASSABLE = (CellType.OBSTACLE, CellType.SEEKER, CellType.CHASER)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def is_near_chaser(pos: Position, chasers: Sequence[Position]) -> bool:
    """True when pos is exactly one step away from some chaser."""
    return any(pos.is_adjacent(c) for c in chasers)


class MovementStrategy(ABC):
    """
    Computes a single next step for an entity.

    Implementations are pure functions of their inputs: they read the grid
    and never mutate it or keep state between calls.
    """

    def __init__(self, adjacency_penalty: int = DEFAULT_ADJACENCY_PENALTY):
        self.adjacency_penalty = adjacency_penalty

    @abstractmethod
    def next_step(self, current: Position, target: Position,
                  grid: GridMap, chasers: Sequence[Position]) -> Position:
        """Return the next position, or ``current`` to stay put."""

    def fallback_step(self, current: Position, target: Position,
                      grid: GridMap, chasers: Sequence[Position]) -> Position:
        """
        Greedy Manhattan approach used when no planned path is available.

        1. The combined direct step (sign of drow, sign of dcol).
        2. The row-axis or column-axis step; when both are viable the one
           closer to the target wins, row-axis on ties.
        3. The best scoring axis neighbour, scored as -distance plus the
           adjacency penalty next to a chaser. Stays put if all are blocked.
        """
        if current == target:
            return current

        drow = _sign(target.row - current.row)
        dcol = _sign(target.col - current.col)

        direct = current.move(drow, dcol)
        if self._is_viable(direct, grid, chasers):
            return direct

        move_row = current.move(drow, 0)
        move_col = current.move(0, dcol)
        can_row = self._is_viable(move_row, grid, chasers)
        can_col = self._is_viable(move_col, grid, chasers)
        if can_row and can_col:
            if (move_row.manhattan_distance(target)
                    <= move_col.manhattan_distance(target)):
                return move_row
            return move_col
        if can_row:
            return move_row
        if can_col:
            return move_col

        best = current
        best_score: Optional[int] = None
        for d_r, d_c in NEIGHBOR_OFFSETS:
            candidate = current.move(d_r, d_c)
            if grid.is_blocked(candidate):
                continue
            score = -candidate.manhattan_distance(target)
            if is_near_chaser(candidate, chasers):
                score += self.adjacency_penalty
            if best_score is None or score > best_score:
                best_score = score
                best = candidate
        return best

    @staticmethod
    def _is_viable(pos: Position, grid: GridMap,
                   chasers: Sequence[Position]) -> bool:
        return not grid.is_blocked(pos) and not is_near_chaser(pos, chasers)


class ShortestPathStrategy(MovementStrategy):
    """Breadth-first search towards the target, greedy fallback otherwise."""

    def next_step(self, current: Position, target: Position,
                  grid: GridMap, chasers: Sequence[Position]) -> Position:
        path = self.find_path(current, target, grid, chasers)
        if path is not None:
            return path[1] if len(path) > 1 else current
        return self.fallback_step(current, target, grid, chasers)

    @staticmethod
    def find_path(start: Position, target: Position, grid: GridMap,
                  chasers: Sequence[Position]) -> Optional[List[Position]]:
        """
        Shortest 4-connected path from start to target, both inclusive.

        Obstacles, seeker and chaser cells and every listed chaser position
        are impassable. Returns None when the target cannot be reached.
        """
        if start == target:
            return [start]

        chaser_set: Set[Position] = set(chasers)
        visited = {start}
        queue = deque([[start]])

        while queue:
            path = queue.popleft()
            node = path[-1]
            if node == target:
                return path
            for neighbor in grid.neighbors(node):
                if neighbor in visited:
                    continue
                if grid.get(neighbor) in _BFS_IMPASSABLE or neighbor in chaser_set:
                    continue
                visited.add(neighbor)
                queue.append(path + [neighbor])

        return None


class HeuristicDirectStrategy(MovementStrategy):
    """Reactive pursuit: always the greedy ladder, never a planned path."""

    def next_step(self, current: Position, target: Position,
                  grid: GridMap, chasers: Sequence[Position]) -> Position:
        return self.fallback_step(current, target, grid, chasers)
