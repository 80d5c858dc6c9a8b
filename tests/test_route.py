# tests/test_route.py
"""
Tests for routing to a product zone and for path post-processing.
"""

import numpy as np
import pytest

from store_nav.errors import InvalidPointError
from store_nav.generate_grid import CoordinateGridConverter
from store_nav.models import Coordinate
from store_nav.route import is_line_of_sight, path_to_coords, route_to_zone, smooth_path


@pytest.fixture
def converter(sample_layout):
    return CoordinateGridConverter(*sample_layout, cell_size=1)


def test_route_reaches_nearest_zone_cell(converter) -> None:
    grid = converter.generate_grid()
    path = route_to_zone(converter, grid, 3, 0, 7)

    assert path[0] == (1, 4)
    assert path[-1] == (3, 6)
    assert len(path) == 5


def test_blocked_start_is_snapped(converter) -> None:
    grid = converter.generate_grid()
    # (0, 5) sits on the wall at (6, 1); the first free neighbour is (6, 2)
    path = route_to_zone(converter, grid, 0, 5, 7)

    assert path[0] == (6, 2)
    assert grid[path[-1][1], path[-1][0]] == 7


def test_unknown_zone_gives_empty_path(converter, log_messages) -> None:
    grid = converter.generate_grid()

    assert route_to_zone(converter, grid, 3, 0, 12345) == []
    assert any("no cells" in m for m in log_messages)


def test_route_rejects_non_finite_start(converter) -> None:
    with pytest.raises(InvalidPointError):
        route_to_zone(converter, converter.generate_grid(), float("nan"), 0, 7)


def test_path_to_coords(converter) -> None:
    path = [(1, 4), (2, 4)]

    assert path_to_coords(converter, path) == [Coordinate(3, 0), Coordinate(3, 1)]
    assert path_to_coords(converter, path, center=True) == [Coordinate(3.5, 0.5), Coordinate(3.5, 1.5)]


def _walkable(grid):
    def is_walkable(x, y):
        return 0 <= y < grid.shape[0] and 0 <= x < grid.shape[1] and grid[y, x] == 0
    return is_walkable


def test_line_of_sight() -> None:
    grid = np.zeros((5, 5), dtype=int)
    grid[1, 1] = 1
    is_walkable = _walkable(grid)

    assert is_line_of_sight((0, 0), (0, 1), is_walkable)
    assert is_line_of_sight((0, 0), (4, 0), is_walkable)
    assert not is_line_of_sight((0, 0), (2, 2), is_walkable)


def test_line_of_sight_does_not_cut_blocked_corners() -> None:
    grid = np.zeros((5, 5), dtype=int)
    grid[0, 1] = 1
    grid[1, 0] = 1
    is_walkable = _walkable(grid)

    assert not is_line_of_sight((0, 0), (1, 1), is_walkable)
    assert not is_line_of_sight((0, 0), (2, 2), is_walkable)
    assert is_line_of_sight((1, 1), (3, 3), is_walkable)


def test_smooth_straight_path_keeps_endpoints() -> None:
    is_walkable = _walkable(np.zeros((5, 5), dtype=int))
    path = [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]

    assert smooth_path(path, is_walkable) == [(0, 0), (4, 0)]


def test_smooth_path_keeps_corner_around_obstacle() -> None:
    grid = np.zeros((5, 5), dtype=int)
    grid[1, 1] = 1
    path = [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]

    assert smooth_path(path, _walkable(grid)) == [(0, 0), (0, 2), (2, 2)]


def test_smooth_short_paths_unchanged() -> None:
    is_walkable = _walkable(np.zeros((2, 2), dtype=int))

    assert smooth_path([], is_walkable) == []
    assert smooth_path([(0, 0), (1, 0)], is_walkable) == [(0, 0), (1, 0)]
