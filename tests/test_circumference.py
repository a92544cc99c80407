"""Tests for the outer boundary walk."""
import numpy as np
import pytest

from conftest import flat_polycube
from polycube_unfold.circumference import perimeter, trace_circumference
from polycube_unfold.lattice import Direction2, Position2
from polycube_unfold.plane import project_polycube


def _traced(polycube):
    plane = project_polycube(polycube)
    trace_circumference(plane)
    return plane


class TestTrace:
    def test_single_voxel_marks_all_sides(self, single_voxel):
        plane = _traced(single_voxel)
        assert len(plane.circumference) == 4
        cube = next(iter(plane.cubes.values()))
        assert cube.circumference == [True, True, True, True]

    def test_starts_on_left_of_smallest_cell(self, square_2x2):
        plane = _traced(square_2x2)
        assert plane.circumference[0] == (Position2(0, 0), Direction2.LEFT)
        assert plane.circumference[1] == (Position2(0, 0), Direction2.DOWN)

    def test_square_order(self, square_2x2):
        plane = _traced(square_2x2)
        assert plane.circumference == [
            (Position2(0, 0), Direction2.LEFT),
            (Position2(0, 0), Direction2.DOWN),
            (Position2(1, 0), Direction2.DOWN),
            (Position2(1, 0), Direction2.RIGHT),
            (Position2(1, 1), Direction2.RIGHT),
            (Position2(1, 1), Direction2.UP),
            (Position2(0, 1), Direction2.UP),
            (Position2(0, 1), Direction2.LEFT),
        ]

    def test_plus_walks_inside_corners(self, plus_shape):
        plane = _traced(plus_shape)
        assert len(plane.circumference) == 12
        hub = plane.cubes[Position2(1, 1)]
        assert not hub.on_boundary

    @pytest.mark.parametrize(
        "mask",
        [
            np.ones((1, 5)),
            np.ones((3, 4)),
            [[1, 1, 1], [1, 0, 0], [1, 1, 1]],
            [[0, 1, 0], [1, 1, 1], [0, 1, 0]],
            [[1, 1, 0], [0, 1, 1], [0, 0, 1]],
        ],
    )
    def test_length_equals_perimeter_without_holes(self, mask):
        plane = _traced(flat_polycube(mask))
        assert len(plane.circumference) == perimeter(plane)
        assert len(set(plane.circumference)) == len(plane.circumference)

    def test_consecutive_entries_are_adjacent(self, comb):
        plane = _traced(comb)
        entries = plane.circumference
        for (cell, d), (nxt, nd) in zip(entries, entries[1:] + entries[:1]):
            if nxt == cell:
                assert nd == d.next()
            else:
                # straight step or inside corner: the next cell is a neighbour
                # or a diagonal neighbour of the current one
                assert abs(nxt.x - cell.x) <= 1 and abs(nxt.y - cell.y) <= 1

    def test_ring_skips_hole_sides(self, ring_3x3):
        plane = _traced(ring_3x3)
        assert len(plane.circumference) == 12
        assert perimeter(plane) == 16
        top_middle = plane.cubes[Position2(1, 2)]
        assert top_middle.circumference[Direction2.UP]
        assert not top_middle.circumference[Direction2.DOWN]

    def test_flags_match_entries(self, frame_5x5):
        plane = _traced(frame_5x5)
        flagged = {
            (pos, d)
            for pos, cube in plane.cubes.items()
            for d in Direction2
            if cube.circumference[d]
        }
        assert flagged == set(plane.circumference)
        assert all(
            plane.cubes[pos].on_boundary for pos, _ in plane.circumference
        )

    def test_diagonal_gap_stays_outside(self):
        # the empty cell at (1, 1) touches the outside only at a corner
        plane = _traced(flat_polycube([[1, 1, 0], [1, 0, 1], [1, 1, 1]]))
        assert (Position2(1, 0), Direction2.UP) in plane.circumference

    def test_retrace_resets_flags(self, square_2x2):
        plane = _traced(square_2x2)
        first = list(plane.circumference)
        trace_circumference(plane)
        assert plane.circumference == first
        assert plane.traced

    def test_empty_plane(self):
        from polycube_unfold.plane import PlanePolycube

        plane = PlanePolycube()
        assert trace_circumference(plane) == []
        assert plane.traced
