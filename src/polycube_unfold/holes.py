"""Hole detection on a traced plane polycube."""

from __future__ import annotations

import logging
from typing import List, Set

from polycube_unfold.lattice import Direction2, Position2
from polycube_unfold.plane import PlanePolycube

logger = logging.getLogger(__name__)


def classify_holes(plane: PlanePolycube) -> List[Set[Position2]]:
    """Partition the enclosed empty cells into 4-connected holes.

    A hole is seeded from any empty neighbour behind a side that the boundary
    walk did not flag, then flood-filled without entering occupied cells.
    """
    if not plane.traced:
        raise ValueError("Circumference must be traced before classifying holes")

    plane.holes = []
    plane.hole_cubes = set()
    plane.holes_classified = True
    if not plane.cubes:
        return plane.holes

    min_x, min_y, max_x, max_y = plane.bounds()
    for pos in plane.positions():
        cube = plane.cubes[pos]
        for direction in Direction2:
            if cube.circumference[direction]:
                continue
            seed = pos.neighbor(direction)
            if seed in plane.cubes or seed in plane.hole_cubes:
                continue
            hole = _flood_empty(plane, seed, (min_x, min_y, max_x, max_y))
            plane.holes.append(hole)
            plane.hole_cubes |= hole

    logger.info(
        "Found %d holes covering %d cells", len(plane.holes), len(plane.hole_cubes)
    )
    return plane.holes


def big_holes(plane: PlanePolycube) -> bool:
    """True iff every hole cell has a hole neighbour on both axes (no 1-wide channel)."""
    for pos in plane.hole_cubes:
        horizontal = pos.left() in plane.hole_cubes or pos.right() in plane.hole_cubes
        vertical = pos.up() in plane.hole_cubes or pos.down() in plane.hole_cubes
        if not (horizontal and vertical):
            return False
    return True


# ─── Internal helpers ────────────────────────────────────────────────────────

def _flood_empty(plane: PlanePolycube, seed: Position2, bounds) -> Set[Position2]:
    min_x, min_y, max_x, max_y = bounds
    hole = {seed}
    stack = [seed]
    while stack:
        pos = stack.pop()
        if not (min_x < pos.x < max_x and min_y < pos.y < max_y):
            raise ValueError(
                f"Hole flood fill escaped the bounding box at {pos}; "
                "plane polycube is not connected"
            )
        for nb in pos.neighbors():
            if nb not in plane.cubes and nb not in hole:
                hole.add(nb)
                stack.append(nb)
    return hole
