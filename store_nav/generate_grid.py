# === generate_grid.py ===
"""
Rasterize wall rectangles and product zones into an occupancy grid.

Cell codes: 0 = free, 1 = wall, any other positive integer = a product zone.
Cells are addressed as (x, y) = (column, row); the grid is indexed grid[y, x].
"""

import math
import re
import warnings
from collections import deque
from numbers import Integral

import cv2
import numpy as np
from loguru import logger

from .config import (
    CELL_SIZE,
    DEFAULT_BOUNDS,
    DEFAULT_CONVERT_CELL_SIZE,
    FREE,
    LARGE_SPAN_THRESHOLD,
    MAX_GRID_SIZE,
    MIN_CELL_SIZE,
    WALL,
    ZONE_FALLBACK_BASE,
)
from .errors import GridTooLargeError, InvalidBoundsError, InvalidPointError, LargeSpanWarning
from .models import Bounds, ConversionResult, Coordinate, GridInfo, NearestEmptyCell

GRID_DTYPE = np.int32
MAX_CELL_VALUE = int(np.iinfo(GRID_DTYPE).max)

# BFS expansion order for the nearest-empty-cell search
NEIGHBOURS = [(1, 0), (-1, 0), (0, 1), (0, -1)]

# Leading integer of a zone id string: "12abc" -> 12, "3.5" -> 3
LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _is_finite_number(value):
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _is_finite_coordinate(point):
    return (_is_finite_number(getattr(point, "lat", None))
            and _is_finite_number(getattr(point, "lng", None)))


def _require_finite(a, b, what):
    try:
        a, b = float(a), float(b)
    except (TypeError, ValueError):
        raise InvalidPointError(f"Invalid {what}: {a!r}, {b!r}") from None
    if not (math.isfinite(a) and math.isfinite(b)):
        raise InvalidPointError(f"Invalid {what}: {a}, {b}")
    return a, b


def resolve_zone_value(zone_id, index):
    """
    Integer written into the grid for the zone at position `index`.

    Ints and integral floats are used as-is; strings contribute their leading
    integer, so "12abc" resolves to 12. Anything else, or a value that would
    alias FREE/WALL or overflow the grid dtype, falls back to
    ZONE_FALLBACK_BASE + index.
    """
    value = None
    if isinstance(zone_id, bool):
        value = None
    elif isinstance(zone_id, Integral):
        value = int(zone_id)
    elif isinstance(zone_id, float):
        if math.isfinite(zone_id) and zone_id.is_integer():
            value = int(zone_id)
    elif isinstance(zone_id, str):
        match = LEADING_INT.match(zone_id)
        if match:
            value = int(match.group(1))

    if value is None or value <= WALL or value > MAX_CELL_VALUE:
        return ZONE_FALLBACK_BASE + index
    return value


class CoordinateGridConverter:
    """
    Snapshot of a floor layout as a discrete grid.

    Built once from the finished wall/zone lists; never mutated afterwards.
    Bounds are the union of all finite geometry padded by max(cell_size, 1),
    and every transform is a pure function of that snapshot.

    Raises:
        InvalidBoundsError: bounds or derived dimensions are non-finite/degenerate
        GridTooLargeError: dimensions exceed MAX_GRID_SIZE
    """

    def __init__(self, walls, zones, cell_size=CELL_SIZE):
        self.walls = tuple(walls or ())
        self.zones = tuple(zones or ())

        if not _is_finite_number(cell_size) or cell_size <= 0:
            logger.warning(f"Invalid cell size {cell_size!r}, using {CELL_SIZE}")
            cell_size = CELL_SIZE
        self.cell_size = max(float(cell_size), MIN_CELL_SIZE)

        self.bounds = self._calculate_bounds()
        self._validate_bounds()

        self.grid_width = self._cells_along(self.bounds.max_lng - self.bounds.min_lng)
        self.grid_height = self._cells_along(self.bounds.max_lat - self.bounds.min_lat)
        self._validate_grid_dimensions()

    # === Bounds ===

    def _iter_points(self):
        for wall in self.walls:
            yield getattr(wall, "corner1", None)
            yield getattr(wall, "corner2", None)
        for zone in self.zones:
            for section in getattr(zone, "sections", None) or ():
                if isinstance(section, (list, tuple)):
                    yield from section

    def _calculate_bounds(self):
        points = [p for p in self._iter_points() if _is_finite_coordinate(p)]
        if not points:
            logger.warning("No valid coordinate data found, using default bounds")
            return Bounds(*DEFAULT_BOUNDS)

        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        padding = max(self.cell_size, 1)
        return Bounds(
            min_lat=min(lats) - padding,
            max_lat=max(lats) + padding,
            min_lng=min(lngs) - padding,
            max_lng=max(lngs) + padding,
        )

    def _validate_bounds(self):
        b = self.bounds
        if not all(math.isfinite(v) for v in (b.min_lat, b.max_lat, b.min_lng, b.max_lng)):
            raise InvalidBoundsError(f"Invalid bounds: contains non-finite values {b}")
        if b.max_lat <= b.min_lat or b.max_lng <= b.min_lng:
            raise InvalidBoundsError(f"Invalid bounds: max values must be greater than min values {b}")

        lat_range = b.max_lat - b.min_lat
        lng_range = b.max_lng - b.min_lng
        if lat_range > LARGE_SPAN_THRESHOLD or lng_range > LARGE_SPAN_THRESHOLD:
            message = (f"Very large coordinate range ({lat_range:g} x {lng_range:g}); "
                       f"consider a larger cell size")
            logger.warning(message)
            warnings.warn(message, LargeSpanWarning, stacklevel=3)

    def _cells_along(self, span):
        cells = span / self.cell_size
        if not math.isfinite(cells):
            raise InvalidBoundsError(f"Invalid grid dimension for span {span}")
        return math.ceil(cells)

    def _validate_grid_dimensions(self):
        w, h = self.grid_width, self.grid_height
        if w <= 0 or h <= 0:
            raise InvalidBoundsError(f"Invalid grid dimensions: {w}x{h}")
        if w > MAX_GRID_SIZE or h > MAX_GRID_SIZE:
            raise GridTooLargeError(
                f"Grid too large: {w}x{h}. Maximum allowed: {MAX_GRID_SIZE}x{MAX_GRID_SIZE}")
        if w * h > MAX_GRID_SIZE * MAX_GRID_SIZE:
            raise GridTooLargeError(f"Grid too large: {w * h} total cells")

    # === Coordinate transforms ===

    def coord_to_grid(self, lat, lng):
        """Cell (x, y) containing the point; points outside the bounds snap to the edge."""
        lat, lng = _require_finite(lat, lng, "coordinates")
        x = math.floor((lng - self.bounds.min_lng) / self.cell_size)
        y = math.floor((lat - self.bounds.min_lat) / self.cell_size)
        x = max(0, min(x, self.grid_width - 1))
        y = max(0, min(y, self.grid_height - 1))
        return (x, y)

    def grid_to_coord(self, x, y):
        """
        Origin (min) corner of cell (x, y), not its center.
        Add cell_size / 2 to each axis for the center.
        """
        x, y = _require_finite(x, y, "grid position")
        return Coordinate(
            lat=self.bounds.min_lat + y * self.cell_size,
            lng=self.bounds.min_lng + x * self.cell_size,
        )

    # === Rasterization ===

    def _fill_rectangle(self, grid, corners, value):
        """Fill the bounding box of `corners`. Returns False if nothing was drawn."""
        if not isinstance(corners, (list, tuple)):
            return False
        valid = [c for c in corners if _is_finite_coordinate(c)]
        if not valid:
            return False

        lats = [c.lat for c in valid]
        lngs = [c.lng for c in valid]
        x0, y0 = self.coord_to_grid(min(lats), min(lngs))
        x1, y1 = self.coord_to_grid(max(lats), max(lngs))
        cv2.rectangle(grid, (x0, y0), (x1, y1), color=int(value), thickness=cv2.FILLED)
        return True

    def _fill_wall(self, grid, wall):
        corners = [getattr(wall, "corner1", None), getattr(wall, "corner2", None)]
        if not all(_is_finite_coordinate(c) for c in corners):
            raise ValueError(f"invalid wall corners {corners}")
        self._fill_rectangle(grid, corners, WALL)

    def generate_grid(self):
        """
        Build a fresh height x width occupancy grid.

        Walls are drawn first, then zones, each in list order; later fills
        overwrite earlier ones. A wall or zone that fails to rasterize is
        logged and skipped.
        """
        grid = np.zeros((self.grid_height, self.grid_width), dtype=GRID_DTYPE)

        for index, wall in enumerate(self.walls):
            try:
                self._fill_wall(grid, wall)
            except Exception as e:
                logger.warning(f"Failed to process wall {index}: {e}")

        for index, zone in enumerate(self.zones):
            try:
                value = resolve_zone_value(zone.zone_id, index)
                for s, section in enumerate(zone.sections or ()):
                    if not self._fill_rectangle(grid, section, value):
                        logger.warning(f"Zone {index} section {s} has no usable corners, skipped")
            except Exception as e:
                logger.warning(f"Failed to process zone {index}: {e}")

        return grid

    def get_grid_info(self):
        return GridInfo(
            width=self.grid_width,
            height=self.grid_height,
            cell_size=self.cell_size,
            bounds=self.bounds,
            total_cells=self.grid_width * self.grid_height,
        )

    # === Queries ===

    def find_nearest_empty_cell(self, lat, lng, grid):
        """
        Flood outwards (4-neighbour BFS) from the cell containing (lat, lng)
        until a free cell is found. Search depth is capped at
        max(width, height). Returns NearestEmptyCell or None.
        """
        try:
            start_x, start_y = self.coord_to_grid(lat, lng)
        except InvalidPointError as e:
            logger.warning(f"Cannot search for an empty cell: {e}")
            return None

        grid = np.asarray(grid)
        if grid.shape != (self.grid_height, self.grid_width):
            raise ValueError(f"Grid shape {grid.shape} does not match converter "
                             f"({self.grid_height}, {self.grid_width})")

        max_distance = max(self.grid_width, self.grid_height)
        queue = deque([(start_x, start_y, 0)])
        seen = {(start_x, start_y)}

        while queue:
            x, y, distance = queue.popleft()
            if distance > max_distance:
                break
            if grid[y, x] == FREE:
                return NearestEmptyCell(x=x, y=y, distance=distance)

            for dx, dy in NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < self.grid_width and 0 <= ny < self.grid_height and (nx, ny) not in seen:
                    seen.add((nx, ny))
                    queue.append((nx, ny, distance + 1))

        logger.warning(f"No empty cell within {max_distance} cells of ({lat}, {lng})")
        return None


def convert_to_grid(walls, zones, cell_size=DEFAULT_CONVERT_CELL_SIZE):
    """
    One-shot conversion: build the converter, rasterize, and describe the grid.
    Construction errors propagate to the caller.
    """
    if not isinstance(walls, (list, tuple)):
        walls = []
    if not isinstance(zones, (list, tuple)):
        zones = []
    if not _is_finite_number(cell_size) or cell_size <= 0:
        cell_size = DEFAULT_CONVERT_CELL_SIZE

    converter = CoordinateGridConverter(walls, zones, cell_size)
    grid = converter.generate_grid()
    info = converter.get_grid_info()

    logger.info(f"Grid generated: {info.width}x{info.height} "
                f"({info.total_cells} cells), bounds={info.bounds}")
    return ConversionResult(grid=grid, info=info, converter=converter)
