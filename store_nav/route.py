"""
Routing on top of the converter and the pathfinder: send a shopper from a
map point to the nearest cell of a product zone, and turn the resulting cell
path back into map coordinates.
"""

import numpy as np
from loguru import logger

from .config import FREE
from .models import Coordinate
from .path_finding import PathFinder, find_path_to_nearest, zone_cells


def route_to_zone(converter, grid, start_lat, start_lng, zone_value):
    """
    Shortest cell path from a map point to the closest cell of a zone.

    A start that lands on a blocked cell is snapped to the nearest empty one.
    Returns [] if the zone has no cells, the start cannot be snapped, or no
    zone cell is reachable. Raises InvalidPointError for a non-finite start.
    """
    grid = np.asarray(grid)
    start = converter.coord_to_grid(start_lat, start_lng)

    if grid[start[1], start[0]] != FREE:
        nearest = converter.find_nearest_empty_cell(start_lat, start_lng, grid)
        if nearest is None:
            logger.warning(f"Start {start} is blocked and has no free cell nearby")
            return []
        logger.info(f"Start {start} is blocked, snapped to ({nearest.x}, {nearest.y})")
        start = (nearest.x, nearest.y)

    candidates = zone_cells(grid, zone_value)
    if not candidates:
        logger.warning(f"Zone {zone_value} has no cells in the grid")
        return []

    return find_path_to_nearest(PathFinder(grid), start, candidates)


def path_to_coords(converter, path, center=False):
    """Map coordinates for each cell of `path` (origin corners unless `center`)."""
    offset = converter.cell_size / 2 if center else 0.0
    coords = []
    for x, y in path:
        corner = converter.grid_to_coord(x, y)
        coords.append(Coordinate(lat=corner.lat + offset, lng=corner.lng + offset))
    return coords


# === Waypoint smoothing ===

def _step_clear(prev_x, prev_y, x, y, is_walkable):
    if not is_walkable(x, y):
        return False
    if prev_x != x and prev_y != y:
        return is_walkable(prev_x, y) and is_walkable(x, prev_y)
    return True


def is_line_of_sight(p1, p2, is_walkable):
    """
    True if the straight grid line from p1 to p2 only crosses walkable cells.
    p1 itself is not checked. A diagonal step also needs both cells beside
    it walkable, so the line never squeezes between two blocked corners.
    """
    x1, y1 = p1
    x2, y2 = p2

    # Handle adjacent points quickly
    if abs(x1 - x2) + abs(y1 - y2) <= 1:
        return True

    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    s_x = 1 if x1 < x2 else -1
    s_y = 1 if y1 < y2 else -1

    x, y = x1, y1

    if dx >= dy:
        err = dx / 2.0
        for _ in range(dx):
            prev_x, prev_y = x, y
            x += s_x
            err -= dy
            if err < 0:
                y += s_y
                err += dx
            if not _step_clear(prev_x, prev_y, x, y, is_walkable):
                return False
    else:
        err = dy / 2.0
        for _ in range(dy):
            prev_x, prev_y = x, y
            y += s_y
            err -= dx
            if err < 0:
                x += s_x
                err += dy
            if not _step_clear(prev_x, prev_y, x, y, is_walkable):
                return False

    return True


def smooth_path(path, is_walkable):
    """
    Prune a cell path down to the waypoints where line of sight breaks.
    The first and last cells are always kept.
    """
    if not path or len(path) <= 2:
        return list(path)

    smoothed = [path[0]]
    anchor = path[0]

    for i in range(2, len(path)):
        if is_line_of_sight(anchor, path[i], is_walkable):
            continue
        # Obstacle in the way: finalize the segment at the previous cell
        if path[i - 1] != anchor:
            smoothed.append(path[i - 1])
        anchor = path[i - 1]

    if smoothed[-1] != path[-1]:
        smoothed.append(path[-1])

    return smoothed
