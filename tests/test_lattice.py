"""Tests for lattice positions and directions."""
from polycube_unfold.lattice import Direction2, Direction3, Position2, Position3


class TestDirection2:
    """Cyclic up -> left -> down -> right arithmetic."""

    def test_next_is_counter_clockwise(self):
        assert Direction2.UP.next() == Direction2.LEFT
        assert Direction2.LEFT.next() == Direction2.DOWN
        assert Direction2.DOWN.next() == Direction2.RIGHT
        assert Direction2.RIGHT.next() == Direction2.UP

    def test_prev_undoes_next(self):
        for d in Direction2:
            assert d.next().prev() == d

    def test_rotate_wraps_modulo_4(self):
        assert Direction2.UP.rotate(5) == Direction2.LEFT
        assert Direction2.UP.rotate(-1) == Direction2.RIGHT
        assert Direction2.RIGHT.rotate(-7) == Direction2.UP

    def test_opposite(self):
        assert Direction2.UP.opposite() == Direction2.DOWN
        assert Direction2.LEFT.opposite() == Direction2.RIGHT

    def test_left_is_quarter_turn_from_up(self):
        ux, uy = Direction2.UP.offset
        lx, ly = Direction2.LEFT.offset
        # rotating (ux, uy) by +90 degrees gives (-uy, ux)
        assert (lx, ly) == (-uy, ux)

    def test_is_horizontal(self):
        assert Direction2.LEFT.is_horizontal
        assert Direction2.RIGHT.is_horizontal
        assert not Direction2.UP.is_horizontal


class TestDirection3:
    def test_opposites_pair_up(self):
        assert Direction3.LEFT.opposite() == Direction3.RIGHT
        assert Direction3.DOWN.opposite() == Direction3.UP
        assert Direction3.FRONT.opposite() == Direction3.BACK
        for d in Direction3:
            assert d.opposite().opposite() == d

    def test_offsets_cancel(self):
        for d in Direction3:
            a = d.offset
            b = d.opposite().offset
            assert tuple(x + y for x, y in zip(a, b)) == (0, 0, 0)
            assert a[d.axis] != 0


class TestPositions:
    def test_position3_order_is_lexicographic(self):
        points = [Position3(1, 0, 0), Position3(0, 2, 0), Position3(0, 1, 5)]
        assert sorted(points) == [Position3(0, 1, 5), Position3(0, 2, 0), Position3(1, 0, 0)]

    def test_position3_has_six_distinct_neighbors(self):
        origin = Position3(0, 0, 0)
        neighbors = origin.neighbors()
        assert len(set(neighbors)) == 6
        assert Position3(0, 0, 1) in neighbors
        assert origin.step(Direction3.LEFT, 3) == Position3(-3, 0, 0)

    def test_position2_neighbor_order(self):
        p = Position2(2, 3)
        assert p.neighbors() == [
            Position2(2, 4),  # up
            Position2(1, 3),  # left
            Position2(2, 2),  # down
            Position2(3, 3),  # right
        ]

    def test_position2_named_steps_match_directions(self):
        p = Position2(0, 0)
        assert p.up() == p.neighbor(Direction2.UP)
        assert p.left() == p.neighbor(Direction2.LEFT)
        assert p.down() == p.neighbor(Direction2.DOWN)
        assert p.right() == p.neighbor(Direction2.RIGHT)
        assert p.neighbor(Direction2.RIGHT, 2) == Position2(2, 0)

    def test_positions_are_hashable_keys(self):
        table = {Position2(1, 1): "a", Position3(1, 1, 1): "b"}
        assert table[Position2(1, 1)] == "a"
        assert table[Position3(1, 1, 1)] == "b"
