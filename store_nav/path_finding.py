"""
path_finding.py: A* over an occupancy grid.

The grid uses the converter's encoding (0 = walkable, anything else blocked)
and (x, y) = (column, row) cell addressing.
"""

import heapq

import numpy as np
from loguru import logger

from .config import FREE

# Expansion order; together with the discovery counter this fixes the output
DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]


def heuristic(a, b):
    """Manhattan distance between two (x, y) cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class PathFinder:
    """
    Shortest 4-directional paths over one immutable grid snapshot.

    The snapshot is a read-only boolean walkability array; set_grid swaps in
    a new one rather than editing the old, so readers never see a partial
    update. Cells can be forced walkable per query with with_cleared_cells.
    """

    def __init__(self, grid=None):
        self._walkable = None
        self._cleared = frozenset()
        if grid is not None:
            self.set_grid(grid)

    def set_grid(self, grid):
        grid = np.asarray(grid)
        if grid.size == 0:
            grid = grid.reshape(0, 0)
        if grid.ndim != 2:
            raise ValueError(f"Grid must be two-dimensional, got shape {grid.shape}")

        walkable = grid == FREE
        walkable.setflags(write=False)
        self._walkable = walkable
        self._cleared = frozenset()

    @property
    def shape(self):
        """(height, width) of the current snapshot, (0, 0) if none."""
        return (0, 0) if self._walkable is None else self._walkable.shape

    def with_cleared_cells(self, cells):
        """New finder over the same snapshot with `cells` treated as walkable."""
        patched = PathFinder()
        patched._walkable = self._walkable
        patched._cleared = self._cleared | frozenset((int(x), int(y)) for x, y in cells)
        return patched

    def in_bounds(self, x, y):
        height, width = self.shape
        return 0 <= x < width and 0 <= y < height

    def is_walkable(self, x, y):
        if not self.in_bounds(x, y):
            return False
        return (x, y) in self._cleared or bool(self._walkable[y, x])

    def find_path(self, start_x, start_y, end_x, end_y):
        """
        Shortest path from (start_x, start_y) to (end_x, end_y), inclusive.

        Cells are (x, y) = (column, row): x ranges over [0, width) and y over
        [0, height), and the grid is read as grid[y, x]. On a grid of 2 rows
        and 5 columns, (3, 1) is in range and (1, 3) is not.

        Returns [] when there is no grid, an endpoint is outside the grid or
        blocked, or the goal is unreachable.
        """
        if self._walkable is None:
            return []

        start, goal = (start_x, start_y), (end_x, end_y)
        if not (self.in_bounds(*start) and self.in_bounds(*goal)):
            return []
        if not (self.is_walkable(*start) and self.is_walkable(*goal)):
            return []

        return self._astar(start, goal)

    def _astar(self, start, goal):
        # Heap entries are (f, discovery order, cell): equal f pops the
        # earliest discovered cell first.
        discovered = {start: 0}
        gscore = {start: 0}
        came_from = {}
        closed = set()
        open_heap = [(heuristic(start, goal), 0, start)]
        nodes_explored = 0

        while open_heap:
            _, _, current = heapq.heappop(open_heap)
            if current in closed:
                continue
            nodes_explored += 1

            if current == goal:
                path = [current]
                while current in came_from:
                    current = came_from[current]
                    path.append(current)
                path.reverse()
                logger.debug(f"A* found path of {len(path)} cells, explored {nodes_explored} nodes")
                return path

            closed.add(current)
            x, y = current
            for dx, dy in DIRECTIONS:
                neighbor = (x + dx, y + dy)
                if neighbor in closed or not self.is_walkable(*neighbor):
                    continue

                tentative_g = gscore[current] + 1
                if tentative_g < gscore.get(neighbor, float("inf")):
                    came_from[neighbor] = current
                    gscore[neighbor] = tentative_g
                    order = discovered.setdefault(neighbor, len(discovered))
                    f = tentative_g + heuristic(neighbor, goal)
                    heapq.heappush(open_heap, (f, order, neighbor))

        logger.debug(f"A* exhausted open set from {start} to {goal}, explored {nodes_explored} nodes")
        return []


def zone_cells(grid, zone_value):
    """All (x, y) cells holding `zone_value`, in row-major order."""
    rows, cols = np.nonzero(np.asarray(grid) == zone_value)
    return [(int(c), int(r)) for r, c in zip(rows, cols)]


def find_path_to_nearest(pathfinder, start, candidates):
    """
    Shortest path from `start` to whichever candidate cell is closest.

    Each candidate is tried on its own patched view of the grid in which only
    that cell is cleared, so a path may end on a zone cell but never pass
    through one. Ties go to the earlier candidate. Returns [] if none is
    reachable.
    """
    best_path = []
    for x, y in candidates:
        if not pathfinder.in_bounds(x, y):
            continue
        path = pathfinder.with_cleared_cells([(x, y)]).find_path(start[0], start[1], x, y)
        if path and (not best_path or len(path) < len(best_path)):
            best_path = path

    if not best_path:
        logger.warning(f"No candidate reachable from {start}")
    return best_path
