"""
Integer lattice types shared by every stage of the unfolding engine.

Position3 / Position2 are lattice points ordered lexicographically so they can
be used as sorted map keys. Direction2 is the load-bearing 4-cycle
up -> left -> down -> right: ``rotate(+1)`` is a 90 degree counter-clockwise
turn, which the boundary tracer and the strip layouts rely on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Tuple


class Direction2(IntEnum):
    """Planar direction, arithmetic modulo 4."""

    UP = 0
    LEFT = 1
    DOWN = 2
    RIGHT = 3

    def rotate(self, k: int) -> "Direction2":
        return Direction2((int(self) + k) % 4)

    def next(self) -> "Direction2":
        return self.rotate(1)

    def prev(self) -> "Direction2":
        return self.rotate(-1)

    def opposite(self) -> "Direction2":
        return self.rotate(2)

    @property
    def offset(self) -> Tuple[int, int]:
        return _OFFSETS_2D[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction2.LEFT, Direction2.RIGHT)


_OFFSETS_2D = {
    Direction2.UP: (0, 1),
    Direction2.LEFT: (-1, 0),
    Direction2.DOWN: (0, -1),
    Direction2.RIGHT: (1, 0),
}


class Direction3(IntEnum):
    """Label of one of the six faces of a unit cube (y is the vertical axis)."""

    LEFT = 0
    RIGHT = 1
    DOWN = 2
    UP = 3
    FRONT = 4
    BACK = 5

    def opposite(self) -> "Direction3":
        return Direction3(int(self) ^ 1)

    @property
    def offset(self) -> Tuple[int, int, int]:
        return _OFFSETS_3D[self]

    @property
    def axis(self) -> int:
        """Axis index (0=x, 1=y, 2=z) this direction moves along."""
        return int(self) // 2


_OFFSETS_3D = {
    Direction3.LEFT: (-1, 0, 0),
    Direction3.RIGHT: (1, 0, 0),
    Direction3.DOWN: (0, -1, 0),
    Direction3.UP: (0, 1, 0),
    Direction3.FRONT: (0, 0, -1),
    Direction3.BACK: (0, 0, 1),
}


@dataclass(frozen=True, order=True)
class Position3:
    """Integer lattice point; ordered by (x, y, z)."""

    x: int
    y: int
    z: int

    def step(self, direction: Direction3, distance: int = 1) -> "Position3":
        dx, dy, dz = direction.offset
        return Position3(
            self.x + dx * distance,
            self.y + dy * distance,
            self.z + dz * distance,
        )

    def neighbors(self) -> List["Position3"]:
        """The six axis-aligned neighbours, in Direction3 order."""
        return [self.step(d) for d in Direction3]

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True, order=True)
class Position2:
    """Integer point in the plane; ordered by (x, y)."""

    x: int
    y: int

    def neighbor(self, direction: Direction2, distance: int = 1) -> "Position2":
        dx, dy = direction.offset
        return Position2(self.x + dx * distance, self.y + dy * distance)

    def up(self) -> "Position2":
        return Position2(self.x, self.y + 1)

    def left(self) -> "Position2":
        return Position2(self.x - 1, self.y)

    def down(self) -> "Position2":
        return Position2(self.x, self.y - 1)

    def right(self) -> "Position2":
        return Position2(self.x + 1, self.y)

    def neighbors(self) -> List["Position2"]:
        """The four neighbours in the fixed up, left, down, right order."""
        return [self.neighbor(d) for d in Direction2]

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)
