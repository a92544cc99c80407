"""
Planar projection of a single-layer polycube.

The PlanePolycube is derived once from a Polycube and then enriched in place:
boundary tracing fills ``circumference`` and the per-cube side flags, hole
classification fills ``holes`` / ``hole_cubes``. Each pass writes its own
fields only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from polycube_unfold.lattice import Direction2, Position2, Position3
from polycube_unfold.polycube import AXIS_NONE, AXIS_X, AXIS_Y, AXIS_Z, Polycube

logger = logging.getLogger(__name__)

CircumferenceEntry = Tuple[Position2, Direction2]


@dataclass
class PlaneCube:
    """Projected voxel with per-side outer-boundary flags (indexed by Direction2)."""

    index: int
    pos: Position2
    circumference: List[bool] = field(default_factory=lambda: [False] * 4)

    @property
    def on_boundary(self) -> bool:
        return any(self.circumference)


@dataclass
class PlanePolycube:
    """2D voxel set plus the boundary walk and hole partition computed on it."""

    cubes: Dict[Position2, PlaneCube] = field(default_factory=dict)
    axis: int = AXIS_Z
    level: int = 0
    circumference: List[CircumferenceEntry] = field(default_factory=list)
    holes: List[Set[Position2]] = field(default_factory=list)
    hole_cubes: Set[Position2] = field(default_factory=set)
    traced: bool = False
    holes_classified: bool = False

    @property
    def n(self) -> int:
        return len(self.cubes)

    def __contains__(self, pos: object) -> bool:
        return pos in self.cubes

    def positions(self) -> List[Position2]:
        return sorted(self.cubes)

    def add(self, pos: Position2, index: Optional[int] = None) -> PlaneCube:
        cube = PlaneCube(index=len(self.cubes) if index is None else index, pos=pos)
        self.cubes[pos] = cube
        return cube

    def degree(self, pos: Position2) -> int:
        """Number of occupied 4-neighbours."""
        return sum(1 for nb in pos.neighbors() if nb in self.cubes)

    def orthotree(self) -> bool:
        """True iff the 4-neighbour adjacency graph is a tree."""
        if not self.cubes:
            return True
        start = min(self.cubes)
        visited = {start}
        stack: List[Tuple[Position2, Optional[Position2]]] = [(start, None)]
        while stack:
            pos, parent = stack.pop()
            for nb in pos.neighbors():
                if nb not in self.cubes or nb == parent:
                    continue
                if nb in visited:
                    return False
                visited.add(nb)
                stack.append((nb, pos))
        return len(visited) == len(self.cubes)

    def bounds(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) of the occupied cells."""
        if not self.cubes:
            raise ValueError("Empty plane polycube has no bounds")
        xs = [p.x for p in self.cubes]
        ys = [p.y for p in self.cubes]
        return min(xs), min(ys), max(xs), max(ys)

    def is_boundary_side(self, pos: Position2, direction: Direction2) -> bool:
        return self.cubes[pos].circumference[direction]

    def unit_holes(self) -> bool:
        """True iff every hole is a single empty cell."""
        return len(self.holes) == len(self.hole_cubes)

    def lift(self, pos: Position2) -> Position3:
        return lift_position(pos, self.axis, self.level)


def project_position(pos: Position3, axis: int) -> Position2:
    """Drop the coordinate named by *axis* (1=x, 2=y, 3=z)."""
    if axis == AXIS_X:
        return Position2(pos.y, pos.z)
    if axis == AXIS_Y:
        return Position2(pos.x, pos.z)
    if axis == AXIS_Z:
        return Position2(pos.x, pos.y)
    raise ValueError(f"Unknown projection axis: {axis}")


def lift_position(pos: Position2, axis: int, level: int) -> Position3:
    """Re-attach the dropped coordinate; inverse of project_position."""
    if axis == AXIS_X:
        return Position3(level, pos.x, pos.y)
    if axis == AXIS_Y:
        return Position3(pos.x, level, pos.y)
    if axis == AXIS_Z:
        return Position3(pos.x, pos.y, level)
    raise ValueError(f"Unknown projection axis: {axis}")


def project_polycube(polycube: Polycube) -> PlanePolycube:
    """Collapse a single-layer polycube onto the plane of its constant axis."""
    axis = polycube.one_layer()
    if axis == AXIS_NONE:
        raise ValueError("Cannot project a multi-layer polycube onto a plane")

    level = 0
    if polycube.n:
        first = min(polycube.cubes)
        level = first.as_tuple()[axis - 1]

    plane = PlanePolycube(axis=axis, level=level)
    for pos, cube in sorted(polycube.cubes.items()):
        plane.add(project_position(pos, axis), index=cube.index)

    logger.debug("Projected %d voxels along axis %d at level %d", plane.n, axis, level)
    return plane
