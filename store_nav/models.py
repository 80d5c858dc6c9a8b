"""
Plain data types shared by the converter and the pathfinder.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Tuple, Union

import numpy as np

if TYPE_CHECKING:
    from .generate_grid import CoordinateGridConverter

GridCell = Tuple[int, int]  # (x, y) == (column, row)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class WallSegment:
    """Axis-aligned obstacle given by two opposite corners (any order)."""

    corner1: Coordinate
    corner2: Coordinate


@dataclass(frozen=True)
class ProductZone:
    """
    A product area made of one or more sections.

    Each section is a list of corners; only its bounding box is rasterized.
    zone_id is usually the numeric product id, but may be any string.
    """

    zone_id: Union[int, str, None]
    sections: List[List[Coordinate]] = field(default_factory=list)


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


@dataclass(frozen=True)
class GridInfo:
    width: int
    height: int
    cell_size: float
    bounds: Bounds
    total_cells: int


@dataclass(frozen=True)
class NearestEmptyCell:
    x: int
    y: int
    distance: int


@dataclass
class ConversionResult:
    grid: np.ndarray
    info: GridInfo
    converter: "CoordinateGridConverter"
