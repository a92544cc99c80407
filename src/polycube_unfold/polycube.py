"""
The 3D voxel set ("polycube") and its shape classifiers.

Traversals keep their visited state in a local set keyed by position, so a
Polycube can be queried any number of times without resetting anything.
All flood fills use an explicit work-list; depth never grows with voxel count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, TextIO, Tuple

from polycube_unfold.lattice import Position3

logger = logging.getLogger(__name__)

# one_layer() axis codes
AXIS_NONE = 0
AXIS_X = 1
AXIS_Y = 2
AXIS_Z = 3


@dataclass(frozen=True)
class Cube:
    """One voxel: stable insertion index plus its lattice position."""

    index: int
    pos: Position3


class Polycube:
    """A set of unit cubes keyed by position."""

    def __init__(self, positions: Optional[Iterable[Position3]] = None):
        self.cubes: Dict[Position3, Cube] = {}
        if positions is not None:
            for pos in positions:
                self.add(pos)

    @property
    def n(self) -> int:
        return len(self.cubes)

    def __len__(self) -> int:
        return len(self.cubes)

    def __contains__(self, pos: object) -> bool:
        return pos in self.cubes

    def __iter__(self) -> Iterator[Position3]:
        return iter(sorted(self.cubes))

    def add(self, pos: Position3) -> Cube:
        """Insert a voxel; a repeated position returns the existing cube.

        Keeping the first index or overwriting with the last gives the same
        position set and the same ``n``; only the stored index differs, and
        the first one is kept so indices follow order of first appearance.
        """
        existing = self.cubes.get(pos)
        if existing is not None:
            logger.debug("Duplicate voxel %s ignored (index %d)", pos, existing.index)
            return existing
        cube = Cube(index=len(self.cubes), pos=pos)
        self.cubes[pos] = cube
        return cube

    def positions(self) -> List[Position3]:
        """Positions in lexicographic order."""
        return sorted(self.cubes)

    def neighbors(self, pos: Position3) -> List[Position3]:
        """Occupied 6-neighbours of *pos*."""
        return [nb for nb in pos.neighbors() if nb in self.cubes]

    def connected(self) -> bool:
        """True iff every voxel is reachable from the first one (vacuous for n=0)."""
        if not self.cubes:
            return True
        start = min(self.cubes)
        visited: Set[Position3] = {start}
        stack = [start]
        while stack:
            pos = stack.pop()
            for nb in self.neighbors(pos):
                if nb not in visited:
                    visited.add(nb)
                    stack.append(nb)
        logger.debug("Flood fill reached %d of %d voxels", len(visited), self.n)
        return len(visited) == self.n

    def one_layer(self) -> int:
        """Return the constant axis (1=x, 2=y, 3=z) or 0 for a multi-layer solid.

        The empty polycube counts as planar along x and returns 1.
        """
        if not self.cubes:
            return AXIS_X
        first = min(self.cubes)
        same_x = all(p.x == first.x for p in self.cubes)
        same_y = all(p.y == first.y for p in self.cubes)
        same_z = all(p.z == first.z for p in self.cubes)
        if same_x:
            return AXIS_X
        if same_y:
            return AXIS_Y
        if same_z:
            return AXIS_Z
        return AXIS_NONE

    def orthotree(self) -> bool:
        """True iff the 6-neighbour adjacency graph is a tree.

        Depth-first walk that skips the edge back to the immediate parent and
        fails on any other already-visited voxel. Voxels the walk never
        reaches also fail the check, since a tree is connected.
        """
        if not self.cubes:
            return True
        start = min(self.cubes)
        visited: Set[Position3] = {start}
        stack: List[Tuple[Position3, Optional[Position3]]] = [(start, None)]
        while stack:
            pos, parent = stack.pop()
            for nb in self.neighbors(pos):
                if nb == parent:
                    continue
                if nb in visited:
                    logger.debug("Cycle closed at %s -> %s", pos, nb)
                    return False
                visited.add(nb)
                stack.append((nb, pos))
        return len(visited) == self.n

    def polyhedron(self) -> bool:
        """Validity of the boundary surface as a polyhedron.

        Not supported yet: there is no agreed contract for this check.
        """
        raise NotImplementedError("polyhedron validity check is not supported")


def parse_polycube(text: str) -> Polycube:
    """Build a Polycube from whitespace-separated integer triples.

    Reading stops at the first token that is not an integer; an incomplete
    trailing triple is dropped. Voxels read before that point are kept.
    """
    polycube = Polycube()
    triple: List[int] = []
    for token in text.split():
        try:
            value = int(token)
        except ValueError:
            logger.warning(
                "Stopped reading at non-integer token %r after %d voxels",
                token, polycube.n,
            )
            break
        triple.append(value)
        if len(triple) == 3:
            polycube.add(Position3(*triple))
            triple = []
    if triple:
        logger.warning("Dropped incomplete trailing coordinates %s", triple)
    logger.info("Read %d voxels", polycube.n)
    return polycube


def read_polycube(stream: TextIO) -> Polycube:
    """Read coordinate triples from a text stream until it is exhausted."""
    return parse_polycube(stream.read())
