"""
Shared settings for grid conversion and pathfinding.
"""

# === CONFIG ===
CELL_SIZE = 20                   # default cell edge, in map units
DEFAULT_CONVERT_CELL_SIZE = 10   # fallback used by convert_to_grid
MIN_CELL_SIZE = 0.1

MAX_GRID_SIZE = 10000            # per axis; total cells capped at MAX_GRID_SIZE ** 2
LARGE_SPAN_THRESHOLD = 1000

# (min_lat, max_lat, min_lng, max_lng) used when there is no geometry at all
DEFAULT_BOUNDS = (0.0, 100.0, 0.0, 100.0)

# === Cell codes ===
FREE = 0
WALL = 1
ZONE_FALLBACK_BASE = 999         # zone code = base + index when zone_id is unusable

OUT_DIR = "public/data"
