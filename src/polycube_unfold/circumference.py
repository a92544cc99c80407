"""
Outer boundary walk of a plane polycube.

The walk starts on the left side of the lexicographically smallest cell and
keeps the occupied region on its left (counter-clockwise). State is a cell and
a cursor direction pointing at an empty neighbour:

- while the cursor neighbour is empty, record (cell, cursor), flag that side
  and turn the cursor one step (up -> left -> down -> right);
- otherwise step into the occupied neighbour and turn the cursor back one
  step; if that side is occupied too (inside corner), step once more.

Cells that touch only at a corner are walked around separately, so an empty
cell that reaches the outside diagonally stays outside.
"""

from __future__ import annotations

import logging
from typing import List

from polycube_unfold.lattice import Direction2
from polycube_unfold.plane import CircumferenceEntry, PlanePolycube

logger = logging.getLogger(__name__)


def trace_circumference(plane: PlanePolycube) -> List[CircumferenceEntry]:
    """Walk the outer boundary, fill ``plane.circumference`` and the side flags."""
    plane.circumference = []
    for cube in plane.cubes.values():
        cube.circumference = [False] * 4
    plane.traced = True

    if not plane.cubes:
        return plane.circumference

    start = min(plane.cubes)
    cell, cursor = start, Direction2.LEFT
    entries = plane.circumference
    limit = 4 * plane.n

    while True:
        while cell.neighbor(cursor) not in plane.cubes:
            if entries and cell == start and cursor == Direction2.LEFT:
                logger.debug("Boundary walk closed after %d sides", len(entries))
                return entries
            if len(entries) >= limit:
                raise RuntimeError("Boundary walk did not close")
            entries.append((cell, cursor))
            plane.cubes[cell].circumference[cursor] = True
            cursor = cursor.next()

        cell = cell.neighbor(cursor)
        cursor = cursor.prev()
        if cell.neighbor(cursor) in plane.cubes:
            cell = cell.neighbor(cursor)
            cursor = cursor.prev()


def perimeter(plane: PlanePolycube) -> int:
    """Number of exposed unit edges, outer and hole boundaries together."""
    return sum(
        1
        for pos in plane.cubes
        for nb in pos.neighbors()
        if nb not in plane.cubes
    )
