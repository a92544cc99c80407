"""
Boundary surface graph of a polycube.

Every exposed unit face is linked, across each of its four edges, to the
exposed face on the other side of that edge. For a face of cube ``c`` with
outward normal ``n`` and an edge lying towards ``e``:

1. concave fold: cube ``c+e+n`` exists -> face ``(c+e+n, -e)``
2. flat seam:    cube ``c+e`` exists   -> face ``(c+e, n)``
3. wraparound:   otherwise             -> face ``(c, e)`` on the same cube

Links are stored as reciprocal pairs, so the graph can be walked both ways.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from polycube_unfold.lattice import Direction2, Direction3, Position3
from polycube_unfold.polycube import Polycube

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Face:
    """One unit square of a cube's boundary."""

    pos: Position3
    direction: Direction3


# For each face normal: the 3D direction of the edge stored in each planar
# slot, in Direction2 order (up, left, down, right), seen from outside.
EDGE_SLOTS: Dict[Direction3, Tuple[Direction3, Direction3, Direction3, Direction3]] = {
    Direction3.LEFT: (Direction3.UP, Direction3.BACK, Direction3.DOWN, Direction3.FRONT),
    Direction3.RIGHT: (Direction3.UP, Direction3.FRONT, Direction3.DOWN, Direction3.BACK),
    Direction3.DOWN: (Direction3.BACK, Direction3.LEFT, Direction3.FRONT, Direction3.RIGHT),
    Direction3.UP: (Direction3.FRONT, Direction3.LEFT, Direction3.BACK, Direction3.RIGHT),
    Direction3.FRONT: (Direction3.UP, Direction3.LEFT, Direction3.DOWN, Direction3.RIGHT),
    Direction3.BACK: (Direction3.UP, Direction3.RIGHT, Direction3.DOWN, Direction3.LEFT),
}


def edge_slot(normal: Direction3, edge: Direction3) -> Direction2:
    """Planar slot under which a face with *normal* stores its *edge* neighbour."""
    return Direction2(EDGE_SLOTS[normal].index(edge))


class SurfaceGraph:
    """Face -> four neighbouring faces, one per Direction2 slot."""

    def __init__(self) -> None:
        self._adjacency: Dict[Face, List[Optional[Face]]] = {}
        self.link_counts: Counter = Counter()

    def __len__(self) -> int:
        return len(self._adjacency)

    def __contains__(self, face: object) -> bool:
        return face in self._adjacency

    def __iter__(self) -> Iterator[Face]:
        return iter(sorted(self._adjacency))

    @property
    def faces(self) -> List[Face]:
        return sorted(self._adjacency)

    def add_face(self, face: Face) -> None:
        self._adjacency.setdefault(face, [None, None, None, None])

    def neighbors(self, face: Face) -> List[Optional[Face]]:
        return list(self._adjacency[face])

    def neighbor(self, face: Face, slot: Direction2) -> Optional[Face]:
        return self._adjacency[face][slot]

    def link(self, a: Face, slot_a: Direction2, b: Face, slot_b: Direction2) -> None:
        """Record the edge a[slot_a] <-> b[slot_b] in both directions."""
        self.add_face(a)
        self.add_face(b)
        self._adjacency[a][slot_a] = b
        self._adjacency[b][slot_b] = a

    def is_symmetric(self) -> bool:
        for face, slots in self._adjacency.items():
            for other in slots:
                if other is None:
                    continue
                if face not in self._adjacency.get(other, ()):
                    return False
        return True

    def is_closed(self) -> bool:
        """True when every stored face has all four edge slots populated."""
        return all(None not in slots for slots in self._adjacency.values())


def build_surface_graph(polycube: Polycube) -> SurfaceGraph:
    """Build the exposed-face adjacency graph of *polycube*."""
    graph = SurfaceGraph()
    for pos in polycube.positions():
        for normal in Direction3:
            if pos.step(normal) in polycube:
                continue
            face = Face(pos, normal)
            graph.add_face(face)
            for slot, edge in enumerate(EDGE_SLOTS[normal]):
                if graph.neighbor(face, Direction2(slot)) is not None:
                    continue
                other, other_edge, kind = _across_edge(polycube, pos, normal, edge)
                graph.link(
                    face, Direction2(slot),
                    other, edge_slot(other.direction, other_edge),
                )
                graph.link_counts[kind] += 1

    logger.info(
        "Surface graph: %d faces (%d wraparound, %d flat, %d concave links)",
        len(graph),
        graph.link_counts["wraparound"],
        graph.link_counts["flat"],
        graph.link_counts["concave"],
    )
    return graph


# ─── Internal helpers ────────────────────────────────────────────────────────

def _across_edge(
    polycube: Polycube,
    pos: Position3,
    normal: Direction3,
    edge: Direction3,
) -> Tuple[Face, Direction3, str]:
    """Face on the far side of an edge, the edge as seen from it, and the link kind."""
    diagonal = pos.step(edge).step(normal)
    if diagonal in polycube:
        return Face(diagonal, edge.opposite()), normal.opposite(), "concave"
    beside = pos.step(edge)
    if beside in polycube:
        return Face(beside, normal), edge.opposite(), "flat"
    return Face(pos, edge), normal, "wraparound"
