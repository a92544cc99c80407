"""Tests for the voxel set, its classifiers and the triples reader."""
import io
import logging

import pytest

from polycube_unfold.lattice import Position3
from polycube_unfold.polycube import (
    AXIS_NONE,
    AXIS_X,
    AXIS_Y,
    AXIS_Z,
    Polycube,
    parse_polycube,
    read_polycube,
)


class TestConnected:
    def test_empty_is_connected(self):
        assert Polycube().connected() is True

    def test_single_voxel(self, single_voxel):
        assert single_voxel.connected() is True

    def test_disconnected_pair(self, disconnected_pair):
        assert disconnected_pair.connected() is False

    def test_edge_contact_is_not_connection(self):
        cube = Polycube([Position3(0, 0, 0), Position3(1, 1, 0)])
        assert cube.connected() is False

    def test_repeated_queries_agree(self, ring_3x3):
        assert ring_3x3.connected() is True
        assert ring_3x3.connected() is True

    def test_long_chain_does_not_recurse(self):
        chain = Polycube(Position3(x, 0, 0) for x in range(5000))
        assert chain.connected() is True
        assert chain.orthotree() is True


class TestOneLayer:
    def test_single_voxel_reports_x(self, single_voxel):
        assert single_voxel.one_layer() == AXIS_X

    def test_empty_reports_x(self):
        assert Polycube().one_layer() == AXIS_X

    def test_xy_slab(self, square_2x2):
        assert square_2x2.one_layer() == AXIS_Z

    def test_line_along_x(self, line_3):
        assert line_3.one_layer() == AXIS_Y

    def test_xz_slab(self):
        cube = Polycube(Position3(x, 4, z) for x in range(2) for z in range(3))
        assert cube.one_layer() == AXIS_Y

    def test_two_layers(self):
        cube = Polycube(
            Position3(x, y, z) for x in range(2) for y in range(2) for z in range(2)
        )
        assert cube.one_layer() == AXIS_NONE


class TestOrthotree:
    def test_line(self, line_3):
        assert line_3.orthotree() is True

    def test_plus(self, plus_shape):
        assert plus_shape.orthotree() is True

    def test_square_has_cycle(self, square_2x2):
        assert square_2x2.orthotree() is False

    def test_ring_has_cycle(self, ring_3x3):
        assert ring_3x3.orthotree() is False

    def test_disconnected_is_not_a_tree(self, disconnected_pair):
        assert disconnected_pair.orthotree() is False

    def test_3d_tree(self):
        cube = Polycube(
            [Position3(0, 0, 0), Position3(0, 0, 1), Position3(0, 1, 1), Position3(1, 1, 1)]
        )
        assert cube.orthotree() is True


class TestMembership:
    def test_indices_follow_first_appearance(self):
        cube = Polycube([Position3(2, 0, 0), Position3(0, 0, 0)])
        assert cube.cubes[Position3(2, 0, 0)].index == 0
        assert cube.cubes[Position3(0, 0, 0)].index == 1

    def test_duplicate_keeps_first_index(self):
        cube = Polycube([Position3(0, 0, 0), Position3(1, 0, 0), Position3(0, 0, 0)])
        assert cube.n == 2
        assert cube.positions() == [Position3(0, 0, 0), Position3(1, 0, 0)]
        assert cube.cubes[Position3(0, 0, 0)].index == 0

    def test_neighbors_lists_occupied_only(self, line_3):
        assert line_3.neighbors(Position3(1, 0, 0)) == [
            Position3(0, 0, 0),
            Position3(2, 0, 0),
        ]

    def test_iteration_is_sorted(self, plus_shape):
        assert list(plus_shape) == sorted(plus_shape.cubes)
        assert len(plus_shape) == 5
        assert Position3(1, 1, 0) in plus_shape

    def test_polyhedron_not_supported(self, single_voxel):
        with pytest.raises(NotImplementedError):
            single_voxel.polyhedron()


class TestReader:
    def test_reads_triples(self):
        cube = parse_polycube("0 0 0\n1 0 0\n  2 0 0 ")
        assert cube.n == 3
        assert cube.cubes[Position3(2, 0, 0)].index == 2

    def test_stops_at_bad_token(self, caplog):
        with caplog.at_level(logging.WARNING):
            cube = parse_polycube("0 0 0 1 0 x 2 0 0")
        assert cube.positions() == [Position3(0, 0, 0)]
        assert "'x'" in caplog.text

    def test_drops_incomplete_triple(self):
        cube = parse_polycube("0 0 0 1 0")
        assert cube.n == 1

    def test_reads_stream(self):
        cube = read_polycube(io.StringIO("0 0 0\n0 1 0\n"))
        assert cube.positions() == [Position3(0, 0, 0), Position3(0, 1, 0)]

    def test_negative_coordinates(self):
        cube = parse_polycube("-1 -2 -3")
        assert Position3(-1, -2, -3) in cube
