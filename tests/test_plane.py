"""Tests for planar projection and the plane polycube helpers."""
import pytest

from polycube_unfold.lattice import Position2, Position3
from polycube_unfold.plane import (
    PlanePolycube,
    lift_position,
    project_polycube,
    project_position,
)
from polycube_unfold.polycube import AXIS_X, AXIS_Y, AXIS_Z, Polycube


class TestProjection:
    def test_drops_constant_axis(self, square_2x2):
        plane = project_polycube(square_2x2)
        assert plane.axis == AXIS_Z
        assert plane.level == 0
        assert set(plane.cubes) == {
            Position2(0, 0), Position2(1, 0), Position2(0, 1), Position2(1, 1)
        }

    def test_preserves_insertion_index(self):
        cube = Polycube([Position3(2, 7, 0), Position3(2, 7, 1), Position3(2, 8, 1)])
        plane = project_polycube(cube)
        assert plane.axis == AXIS_X
        assert plane.cubes[Position2(7, 0)].index == 0
        assert plane.cubes[Position2(7, 1)].index == 1
        assert plane.cubes[Position2(8, 1)].index == 2

    @pytest.mark.parametrize(
        "positions",
        [
            [(3, 0, 0), (3, 1, 0), (3, 1, 1)],
            [(0, -2, 0), (1, -2, 0), (1, -2, 5)],
            [(4, 4, 9), (5, 4, 9), (5, 3, 9)],
        ],
    )
    def test_lift_reverses_projection(self, positions):
        cube = Polycube(Position3(*p) for p in positions)
        plane = project_polycube(cube)
        lifted = {plane.lift(pos) for pos in plane.cubes}
        assert lifted == set(cube.cubes)

    def test_multi_layer_rejected(self):
        cube = Polycube([Position3(0, 0, 0), Position3(1, 0, 0), Position3(1, 1, 1)])
        with pytest.raises(ValueError, match="multi-layer"):
            project_polycube(cube)

    def test_position_helpers_round_trip(self):
        p = Position3(1, 2, 3)
        for axis in (AXIS_X, AXIS_Y, AXIS_Z):
            level = p.as_tuple()[axis - 1]
            assert lift_position(project_position(p, axis), axis, level) == p

    def test_unknown_axis(self):
        with pytest.raises(ValueError):
            project_position(Position3(0, 0, 0), 0)


class TestPlaneHelpers:
    def test_degree(self, plus_shape):
        plane = project_polycube(plus_shape)
        assert plane.degree(Position2(1, 1)) == 4
        assert plane.degree(Position2(1, 0)) == 1

    def test_orthotree_matches_3d(self, plus_shape, square_2x2):
        assert project_polycube(plus_shape).orthotree() is True
        assert project_polycube(square_2x2).orthotree() is False

    def test_bounds(self, ring_3x3):
        assert project_polycube(ring_3x3).bounds() == (0, 0, 2, 2)

    def test_empty_bounds_rejected(self):
        with pytest.raises(ValueError):
            PlanePolycube().bounds()

    def test_positions_sorted(self, ring_3x3):
        plane = project_polycube(ring_3x3)
        assert plane.positions() == sorted(plane.cubes)
        assert Position2(1, 1) not in plane
        assert plane.n == 8
