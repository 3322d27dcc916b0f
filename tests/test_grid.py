import numpy as np
import pytest

from grid_pursuit.model.grid import CellType, GridMap, Position


def test_position_value_semantics():
    a = Position(1, 2)
    assert a == Position(1, 2)
    assert len({a, Position(1, 2)}) == 1
    assert a.manhattan_distance(Position(4, 0)) == 5
    assert a.move(-1, 1) == Position(0, 3)
    assert a.is_adjacent(Position(1, 3))
    assert not a.is_adjacent(Position(2, 3))
    assert tuple(a) == (1, 2)


def test_new_grid_is_empty():
    grid = GridMap(4)
    assert grid.count(CellType.EMPTY) == 16
    assert grid.cells.dtype == np.int8


def test_grid_rejects_tiny_size():
    with pytest.raises(ValueError):
        GridMap(1)


def test_from_rows_round_trips_symbols():
    rows = ["N.#", ".A.", "..T"]
    grid = GridMap.from_rows(rows)
    assert grid.get(Position(0, 0)) == CellType.SEEKER
    assert grid.get(Position(0, 2)) == CellType.OBSTACLE
    assert grid.get(Position(1, 1)) == CellType.CHASER
    assert grid.get(Position(2, 2)) == CellType.GOAL
    assert grid.to_rows() == rows


def test_from_rows_validates_shape_and_symbols():
    with pytest.raises(ValueError):
        GridMap.from_rows(["...", ".."])
    with pytest.raises(ValueError):
        GridMap.from_rows(["..", ".x"])


def test_bounds_checked_access():
    grid = GridMap(3)
    assert grid.in_bounds(Position(2, 2))
    assert not grid.in_bounds(Position(3, 0))
    assert not grid.in_bounds(Position(0, -1))
    with pytest.raises(IndexError):
        grid.get(Position(-1, 0))
    with pytest.raises(IndexError):
        grid.set(Position(0, 3), CellType.OBSTACLE)


def test_is_blocked():
    grid = GridMap.from_rows(["N#", "AT"])
    assert grid.is_blocked(Position(0, 1))
    assert grid.is_blocked(Position(1, 0))
    assert grid.is_blocked(Position(2, 0))
    assert not grid.is_blocked(Position(0, 0))
    assert not grid.is_blocked(Position(1, 1))


def test_neighbors_order_down_up_right_left():
    grid = GridMap(3)
    assert grid.neighbors(Position(1, 1)) == [
        Position(2, 1), Position(0, 1), Position(1, 2), Position(1, 0),
    ]
    assert grid.neighbors(Position(0, 0)) == [Position(1, 0), Position(0, 1)]


def test_positions_of_is_row_major():
    grid = GridMap.from_rows(["A.A", "...", "A.."])
    assert grid.positions_of(CellType.CHASER) == [
        Position(0, 0), Position(0, 2), Position(2, 0),
    ]


def test_connected_ignores_entities_but_not_obstacles():
    grid = GridMap.from_rows([
        "N.A",
        "###",
        "..T",
    ])
    assert grid.connected(Position(0, 0), Position(0, 2))
    assert not grid.connected(Position(0, 0), Position(2, 2))


def test_copy_is_independent():
    grid = GridMap(3)
    clone = grid.copy()
    clone.set(Position(0, 0), CellType.OBSTACLE)
    assert grid.get(Position(0, 0)) == CellType.EMPTY
