#!/usr/bin/env python3
"""
Store navigator: build the occupancy grid for a drawn floor layout and find
the shortest walk from a start point to a product zone.

Usage: python -m store_nav <layout.json> <cell_size> <start_lat,start_lng> <zone_id>
"""

import json
import os
import sys

import numpy as np
from loguru import logger

from .config import OUT_DIR
from .errors import GridError, LayoutError
from .generate_grid import convert_to_grid, resolve_zone_value
from .models import Coordinate, ProductZone, WallSegment
from .path_finding import PathFinder
from .route import path_to_coords, route_to_zone, smooth_path

USAGE = "Usage: python -m store_nav <layout.json> <cell_size> <start_lat,start_lng> <zone_id>"


# =============================================================
# === LAYOUT LOADING ===
# =============================================================

def _parse_point(raw):
    """[lat, lng] or {"lat": .., "lng": ..} -> Coordinate, None if malformed."""
    try:
        if isinstance(raw, dict):
            return Coordinate(lat=float(raw["lat"]), lng=float(raw["lng"]))
        if isinstance(raw, (list, tuple)) and len(raw) >= 2:
            return Coordinate(lat=float(raw[0]), lng=float(raw[1]))
    except (KeyError, TypeError, ValueError):
        pass
    return None


def _parse_wall(item):
    latlngs = item.get("latlngs") if isinstance(item, dict) else None
    if not isinstance(latlngs, list) or len(latlngs) < 2:
        return None
    corner1, corner2 = _parse_point(latlngs[0]), _parse_point(latlngs[1])
    if corner1 is None or corner2 is None:
        return None
    return WallSegment(corner1=corner1, corner2=corner2)


def _parse_zone(item):
    if not isinstance(item, dict):
        return None
    zone_id = item.get("productId", item.get("zoneId"))
    raw_sections = item.get("latlngs")
    if raw_sections is None:
        raw_sections = []
    if not isinstance(raw_sections, list):
        return None
    sections = []
    for raw_section in raw_sections:
        if not isinstance(raw_section, list):
            continue
        points = [_parse_point(p) for p in raw_section]
        sections.append([p for p in points if p is not None])
    return ProductZone(zone_id=zone_id, sections=sections)


def _entries(raw, key, path):
    """Top-level shape list under `key`; a missing key means no shapes."""
    entries = raw.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise LayoutError(f"Layout {path}: \"{key}\" must be a list")
    return entries


def load_layout(path):
    """
    Read the editor's drawn shapes from a JSON file.
    Returns (walls, zones); malformed entries are logged and skipped.
    """
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LayoutError(f"Could not read layout {path}: {e}") from e

    if not isinstance(raw, dict):
        raise LayoutError(f"Layout {path} must be a JSON object")

    walls = []
    for index, item in enumerate(_entries(raw, "walls", path)):
        wall = _parse_wall(item)
        if wall is None:
            logger.warning(f"Skipping malformed wall {index} in {path}")
            continue
        walls.append(wall)

    zones = []
    for index, item in enumerate(_entries(raw, "products", path)):
        zone = _parse_zone(item)
        if zone is None:
            logger.warning(f"Skipping malformed product {index} in {path}")
            continue
        zones.append(zone)

    return walls, zones


# =============================================================
# === OUTPUT ===
# =============================================================

def save_outputs(out_dir, grid, info, path, coords, waypoints):
    """Writes the grid (.npy), its bounds (meta.json) and the path (final_path.json)."""
    os.makedirs(out_dir, exist_ok=True)

    np.save(os.path.join(out_dir, "floorplan_grid.npy"), grid)

    meta = {
        "min_lat": info.bounds.min_lat,
        "max_lat": info.bounds.max_lat,
        "min_lng": info.bounds.min_lng,
        "max_lng": info.bounds.max_lng,
        "cell_size": info.cell_size,
        "width": info.width,
        "height": info.height,
    }
    with open(os.path.join(out_dir, "meta.json"), "w") as f:
        json.dump(meta, f, indent=2)

    final_path = {
        "cells": [list(step) for step in path],
        "coords": [[c.lat, c.lng] for c in coords],
        "waypoints": [list(step) for step in waypoints],
    }
    out_path = os.path.join(out_dir, "final_path.json")
    with open(out_path, "w") as f:
        json.dump(final_path, f, indent=2)
    print(f"Saved final path array to {out_path}")


# =============================================================
# === MAIN ===
# =============================================================

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 4:
        print(USAGE)
        sys.exit(1)

    layout_path, cell_size_str, start_str, zone_str = argv

    # --- 1. Parse input ---
    try:
        cell_size = float(cell_size_str)
    except ValueError:
        print(f"Invalid cell size '{cell_size_str}'.")
        sys.exit(1)

    try:
        start_lat, start_lng = [float(v) for v in start_str.split(",")]
    except ValueError:
        print("Invalid start coordinate format. Use: <lat,lng> (e.g. 120.5,80.0)")
        sys.exit(1)

    try:
        walls, zones = load_layout(layout_path)
    except LayoutError as e:
        print(f"Layout loading failed: {e}")
        sys.exit(1)

    # --- 2. Resolve the target zone ---
    zone_value = None
    for index, zone in enumerate(zones):
        if str(zone.zone_id).strip() == zone_str.strip():
            zone_value = resolve_zone_value(zone.zone_id, index)
            break
    if zone_value is None:
        print(f"Unknown product '{zone_str}' in layout {layout_path}.")
        sys.exit(1)

    # --- 3. Grid + route ---
    try:
        result = convert_to_grid(walls, zones, cell_size)
        info = result.info
        print(f"Grid {info.width}x{info.height} ({info.total_cells} cells), cell size {info.cell_size}")

        path = route_to_zone(result.converter, result.grid, start_lat, start_lng, zone_value)
    except GridError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not path:
        print("No path found!")
        sys.exit(1)

    finder = PathFinder(result.grid).with_cleared_cells([path[-1]])
    waypoints = smooth_path(path, finder.is_walkable)
    coords = path_to_coords(result.converter, path, center=True)

    print(f"Raw path found: {len(path)} steps")
    print(f"Smoothed path: {len(waypoints)} key steps")
    save_outputs(OUT_DIR, result.grid, info, path, coords, waypoints)

    if len(path) > 20:
        print("First 10 path cells:", path[:10], "...")
    else:
        print("Full path:", path)


if __name__ == "__main__":
    main()
