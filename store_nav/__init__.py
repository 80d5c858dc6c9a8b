"""
store_nav: turn a drawn floor layout into an occupancy grid and route
shoppers to products over it.

Provides:
- CoordinateGridConverter / convert_to_grid: geometry -> grid, point transforms
- PathFinder / find_path_to_nearest: 4-directional A* and the multi-target query
- route_to_zone / path_to_coords / smooth_path: routing helpers
"""

from .errors import (
    GridError,
    GridTooLargeError,
    InvalidBoundsError,
    InvalidPointError,
    LargeSpanWarning,
    LayoutError,
)
from .generate_grid import CoordinateGridConverter, convert_to_grid, resolve_zone_value
from .models import (
    Bounds,
    ConversionResult,
    Coordinate,
    GridInfo,
    NearestEmptyCell,
    ProductZone,
    WallSegment,
)
from .path_finding import PathFinder, find_path_to_nearest, heuristic, zone_cells
from .route import path_to_coords, route_to_zone, smooth_path

__all__ = [
    "Bounds",
    "ConversionResult",
    "Coordinate",
    "CoordinateGridConverter",
    "GridError",
    "GridInfo",
    "GridTooLargeError",
    "InvalidBoundsError",
    "InvalidPointError",
    "LargeSpanWarning",
    "LayoutError",
    "NearestEmptyCell",
    "PathFinder",
    "ProductZone",
    "WallSegment",
    "convert_to_grid",
    "find_path_to_nearest",
    "heuristic",
    "path_to_coords",
    "resolve_zone_value",
    "route_to_zone",
    "smooth_path",
    "zone_cells",
]
