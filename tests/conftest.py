"""
Shared test fixtures for polycube classification and unfolding tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from polycube_unfold.circumference import trace_circumference
from polycube_unfold.holes import classify_holes
from polycube_unfold.lattice import Direction2, Direction3, Position2, Position3
from polycube_unfold.plane import PlanePolycube, project_polycube
from polycube_unfold.polycube import Polycube
from polycube_unfold.surface import EDGE_SLOTS, Face, build_surface_graph
from polycube_unfold.unfolding import SquareType


def flat_polycube(mask) -> Polycube:
    """Polycube in the z=0 plane from a boolean mask (row index = y)."""
    ys, xs = np.nonzero(np.asarray(mask, dtype=bool))
    return Polycube(Position3(int(x), int(y), 0) for x, y in zip(xs, ys))


def prepared_plane(polycube: Polycube) -> PlanePolycube:
    """Project, trace and classify holes, ready for unfolding."""
    plane = project_polycube(polycube)
    trace_circumference(plane)
    classify_holes(plane)
    return plane


def surface_face(plane: PlanePolycube, square) -> Face:
    """The face of the lifted solid that a square of an unfolding stands for."""
    cube = plane.lift(square.cell)
    if square.side is None:
        positive = square.type is SquareType.TOP_BASE
        return Face(cube, Direction3(2 * (plane.axis - 1) + int(positive)))
    moved = plane.lift(square.cell.neighbor(square.side))
    delta = (moved.x - cube.x, moved.y - cube.y, moved.z - cube.z)
    return Face(cube, next(d for d in Direction3 if d.offset == delta))


def _ccw_index(normal: Direction3, edge: Direction3) -> int:
    """Position of *edge* in the counter-clockwise cycle around *normal*."""
    axis = np.array(normal.offset)
    vec = np.array(next(d for d in Direction3 if d.axis != normal.axis).offset)
    for i in range(4):
        if tuple(int(v) for v in vec) == edge.offset:
            return i
        vec = np.cross(axis, vec)
    raise AssertionError(f"{edge} does not lie around {normal}")


def _step(here: Position2, there: Position2) -> Direction2:
    return next(d for d in Direction2 if here.neighbor(d) == there)


def assert_foldable(unfolding, plane: PlanePolycube) -> None:
    """The net covers every exposed face once and folds back into one piece.

    Each hinge must join two faces that share an edge on the solid, and every
    square must turn its hinges the same way round as its face does, with one
    handedness for the whole net.
    """
    solid = Polycube(plane.lift(pos) for pos in plane.cubes)
    graph = build_surface_graph(solid)
    faces = {pos: surface_face(plane, square) for pos, square in unfolding.items()}
    assert sorted(faces.values()) == graph.faces

    turns = {}
    for a, b in unfolding.hinges:
        for here, there in ((a, b), (b, a)):
            slots = graph.neighbors(faces[here])
            assert faces[there] in slots, f"{here}-{there} is not an edge of the solid"
            normal = faces[here].direction
            edge = EDGE_SLOTS[normal][slots.index(faces[there])]
            turns.setdefault(here, []).append(
                (_ccw_index(normal, edge), int(_step(here, there)))
            )
    assert any(
        all(len({(e - sign * t) % 4 for e, t in pairs}) == 1 for pairs in turns.values())
        for sign in (1, -1)
    )
    assert unfolding.piece_count() == 1


def polycube_text(polycube: Polycube) -> str:
    return "\n".join(
        f"{cube.pos.x} {cube.pos.y} {cube.pos.z}"
        for cube in sorted(polycube.cubes.values(), key=lambda c: c.index)
    ) + "\n"


@pytest.fixture
def single_voxel():
    """One voxel at the origin."""
    return Polycube([Position3(0, 0, 0)])


@pytest.fixture
def square_2x2():
    """A flat 2x2 slab in the x-y plane."""
    return flat_polycube(np.ones((2, 2)))


@pytest.fixture
def ring_3x3():
    """3x3 slab with the centre removed: one unit hole."""
    mask = np.ones((3, 3), dtype=bool)
    mask[1, 1] = False
    return flat_polycube(mask)


@pytest.fixture
def frame_5x5():
    """5x5 slab with the centre 3x3 removed: one wide hole."""
    mask = np.ones((5, 5), dtype=bool)
    mask[1:4, 1:4] = False
    return flat_polycube(mask)


@pytest.fixture
def sieve_7x7():
    """7x7 slab with nine unit holes on the odd lattice points."""
    mask = np.ones((7, 7), dtype=bool)
    mask[1::2, 1::2] = False
    return flat_polycube(mask)


@pytest.fixture
def line_3():
    """Three voxels in a row along x."""
    return Polycube([Position3(x, 0, 0) for x in range(3)])


@pytest.fixture
def plus_shape():
    """Five-voxel plus sign: one cell with four neighbours."""
    return Polycube(
        Position3(x, y, 0) for x, y in [(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)]
    )


@pytest.fixture
def comb():
    """Tree with two four-way junctions joined by a long spine."""
    mask = np.zeros((5, 9), dtype=bool)
    mask[2, :] = True
    mask[:, 2] = True
    mask[:, 6] = True
    return flat_polycube(mask)


@pytest.fixture
def mixed_holes():
    """One unit hole beside one 3x3 hole."""
    mask = np.ones((5, 7), dtype=bool)
    mask[2, 1] = False
    mask[1:4, 3:6] = False
    return flat_polycube(mask)


@pytest.fixture
def disconnected_pair():
    """Two voxels far apart."""
    return Polycube([Position3(0, 0, 0), Position3(5, 5, 5)])


@pytest.fixture
def voxel_file(tmp_path, ring_3x3):
    """The 3x3 ring written as a triples file."""
    path = tmp_path / "ring.txt"
    path.write_text(polycube_text(ring_3x3), encoding="utf-8")
    return str(path)
