"""
Shared fixtures.

The sample layout (cell size 1) pads to bounds lat/lng -1..10, an 11x11 grid:
  - wall along lat 0, lng 0..9  -> row y=1, x 1..10
  - product "7"                 -> x 3..4, y 6..7
  - product "abc" (fallback)    -> x 9..10, y 9..10, value 1000
"""

import pytest
from loguru import logger

from store_nav.models import Coordinate, ProductZone, WallSegment


def make_wall(lat1, lng1, lat2, lng2):
    return WallSegment(Coordinate(lat1, lng1), Coordinate(lat2, lng2))


def make_zone(zone_id, *sections):
    return ProductZone(zone_id=zone_id,
                       sections=[[Coordinate(lat, lng) for lat, lng in s] for s in sections])


@pytest.fixture
def sample_layout():
    walls = [make_wall(0, 0, 0, 9)]
    zones = [
        make_zone("7", [(5, 2), (5, 3), (6, 3), (6, 2)]),
        make_zone("abc", [(8, 8), (8, 9), (9, 9), (9, 8)]),
    ]
    return walls, zones


@pytest.fixture
def log_messages():
    """Collects loguru WARNING+ messages emitted during the test."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="WARNING")
    yield messages
    logger.remove(handler_id)
