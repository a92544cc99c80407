"""
Unfolding engine for single-layer polycubes.

Every strategy lays the circumference out as one straight strip of side faces
and then places the top faces, the bottom faces and the hole walls around it.
Each square remembers the face it stands for: the cell it belongs to, plus the
side it looks towards for strip and wall squares. Every fold the net relies on
is recorded as a hinge between two touching squares whose faces share an edge
on the solid; squares that touch in the layout without a hinge are cut apart.
``Unfolding.place`` refuses a second square on an occupied cell.

Strategies, chosen by ``select_strategy`` in this order:

- ORTHOTREE: the voxel graph is a tree. Three rows: top faces above the strip,
  bottom faces below, each cell hanging off one of its own boundary sides.
  Cells with four neighbours borrow the slot of an inside corner next to them
  and hinge sideways to the neighbour whose faces sit beside them.
- NO_HOLES: top sheet kept in place above the strip, bottom sheet mirrored
  below it across the strip row. Both sheets hinge to the strip where a
  lowest-row cell sits directly over its own bottom side.
- UNIT_HOLES: every hole is one empty cell inside a rectangular outline.
  Columns are grouped into stripes of one or two columns, and a hole column
  always shares its stripe with a neighbour. Even stripes hang off the bottom
  run of the strip and odd stripes off the top run, so the two families use
  disjoint strip columns. Each hole keeps two walls in the gap it leaves in
  its own stripe and sends the other two into the free lane of the other
  family.
- WIDE_HOLES: every hole is at least two cells wide on both axes. Sheets as in
  NO_HOLES; left/right hole walls fold into the top sheet's hole, up/down
  walls into the bottom sheet's hole.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

import numpy as np

from polycube_unfold.circumference import trace_circumference
from polycube_unfold.holes import big_holes, classify_holes
from polycube_unfold.lattice import Direction2, Position2
from polycube_unfold.plane import PlanePolycube, project_polycube
from polycube_unfold.polycube import AXIS_NONE, Polycube

logger = logging.getLogger(__name__)

Hinge = Tuple[Position2, Position2]


class SquareType(Enum):
    """Which part of the surface a square of the unfolding comes from."""
    TOP_BASE = "top_base"
    BOTTOM_BASE = "bottom_base"
    CIRCUMFERENCE = "circumference"
    HOLE = "hole"


class UnfoldStrategy(Enum):
    ORTHOTREE = "orthotree"
    NO_HOLES = "no_holes"
    UNIT_HOLES = "unit_holes"
    WIDE_HOLES = "wide_holes"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Square:
    """A placed square and the face of the solid it stands for.

    ``cell`` is the plane cell owning the face. ``side`` is the direction the
    face looks towards for strip and hole-wall squares, None for base faces.
    """

    pos: Position2
    type: SquareType
    cell: Position2
    side: Optional[Direction2] = None


class Unfolding(Mapping):
    """Target cell -> Square, plus the hinges holding the net together."""

    def __init__(self, strategy: Optional[UnfoldStrategy] = None):
        self.strategy = strategy
        self._squares: Dict[Position2, Square] = {}
        self._hinges: Set[Hinge] = set()

    def __getitem__(self, pos: Position2) -> Square:
        return self._squares[pos]

    def __iter__(self) -> Iterator[Position2]:
        return iter(self._squares)

    def __len__(self) -> int:
        return len(self._squares)

    def place(
        self,
        pos: Position2,
        square_type: SquareType,
        cell: Position2,
        side: Optional[Direction2] = None,
    ) -> Square:
        if pos in self._squares:
            raise RuntimeError(
                f"Unfolding overlap at {pos}: {self._squares[pos].type.value} "
                f"already placed, cannot add {square_type.value}"
            )
        square = Square(pos, square_type, cell, side)
        self._squares[pos] = square
        return square

    def hinge(self, a: Position2, b: Position2) -> None:
        """Keep the edge between two touching squares as a fold."""
        if a not in self._squares or b not in self._squares:
            raise ValueError(f"Hinge {a}-{b} needs both squares placed first")
        if abs(a.x - b.x) + abs(a.y - b.y) != 1:
            raise ValueError(f"Hinge {a}-{b} joins squares that do not share an edge")
        self._hinges.add((min(a, b), max(a, b)))

    @property
    def hinges(self) -> FrozenSet[Hinge]:
        """Folded edges as (lower, higher) position pairs."""
        return frozenset(self._hinges)

    def piece_count(self) -> int:
        """Number of separate pieces once every non-hinge edge is cut."""
        links: Dict[Position2, List[Position2]] = {pos: [] for pos in self._squares}
        for a, b in self._hinges:
            links[a].append(b)
            links[b].append(a)
        seen: Set[Position2] = set()
        pieces = 0
        for start in sorted(links):
            if start in seen:
                continue
            pieces += 1
            seen.add(start)
            stack = [start]
            while stack:
                pos = stack.pop()
                for nb in links[pos]:
                    if nb not in seen:
                        seen.add(nb)
                        stack.append(nb)
        return pieces

    def count(self, square_type: SquareType) -> int:
        return sum(1 for sq in self._squares.values() if sq.type == square_type)

    def counts(self) -> Dict[str, int]:
        return {t.value: self.count(t) for t in SquareType}

    def bounds(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) over all placed cells."""
        if not self._squares:
            return (0, 0, 0, 0)
        coords = np.array([p.as_tuple() for p in self._squares], dtype=int)
        mins = coords.min(axis=0)
        maxs = coords.max(axis=0)
        return (int(mins[0]), int(mins[1]), int(maxs[0]), int(maxs[1]))

    def to_payload(self) -> Dict[str, object]:
        squares = []
        for pos in sorted(self._squares):
            square = self._squares[pos]
            squares.append({
                "x": pos.x,
                "y": pos.y,
                "type": square.type.value,
                "cell": list(square.cell.as_tuple()),
                "side": square.side.name.lower() if square.side is not None else None,
            })
        return {
            "strategy": self.strategy.value if self.strategy else None,
            "counts": self.counts(),
            "bounds": list(self.bounds()),
            "pieces": self.piece_count(),
            "squares": squares,
            "hinges": [
                [list(a.as_tuple()), list(b.as_tuple())] for a, b in sorted(self._hinges)
            ],
        }


@dataclass
class UnfoldOutcome:
    """Result of the dispatch; ``unfolding`` is None when no strategy applies."""

    strategy: UnfoldStrategy
    unfolding: Optional[Unfolding]
    reason: str = ""
    plane: Optional[PlanePolycube] = None

    @property
    def ok(self) -> bool:
        return self.unfolding is not None


# ─── Strategies ──────────────────────────────────────────────────────────────

def unfold_orthotree(plane: PlanePolycube) -> Unfolding:
    """Three-row layout for tree-shaped polycubes."""
    _require_ready(plane)
    if not plane.orthotree():
        raise ValueError("Orthotree unfolding requires a tree-shaped polycube")

    unfolding = Unfolding(UnfoldStrategy.ORTHOTREE)
    _place_strip(plane, unfolding, 0, 0)

    slots = sorted(_orthotree_slots(plane).items())
    for pos, slot in slots:
        unfolding.place(Position2(slot, 1), SquareType.TOP_BASE, pos)
        unfolding.place(Position2(slot, -1), SquareType.BOTTOM_BASE, pos)

    for pos, slot in slots:
        top, bottom = Position2(slot, 1), Position2(slot, -1)
        if plane.circumference[slot][0] == pos:
            unfolding.hinge(Position2(slot, 0), top)
            unfolding.hinge(Position2(slot, 0), bottom)
        else:
            # hub: the next slot holds the faces of the neighbour beside it
            unfolding.hinge(top, Position2(slot + 1, 1))
            unfolding.hinge(bottom, Position2(slot + 1, -1))

    _log_layout(unfolding)
    return unfolding


def unfold_no_holes(plane: PlanePolycube) -> Unfolding:
    """Strip plus top sheet in place and bottom sheet mirrored below it."""
    _require_ready(plane)
    if plane.holes:
        raise ValueError("No-hole unfolding called on a polycube with holes")

    unfolding = Unfolding(UnfoldStrategy.NO_HOLES)
    row, offset = _lay_strip(plane, unfolding)
    _place_sheets(plane, unfolding, row)
    _hinge_sheets(plane, unfolding, row, offset)
    _log_layout(unfolding)
    return unfolding


def unfold_unit_holes(plane: PlanePolycube) -> Unfolding:
    """Stripe layout for polycubes whose holes are all single cells.

    Each stripe column lives in the strip column of its end cell: the bottom
    end cell for even stripes, the top end cell for odd ones. Tops stack
    upward and bottoms downward from the strip, one row per step away from
    the end cell, so every column hinges to the strip through its end cell.
    """
    _require_ready(plane)
    if not plane.unit_holes():
        raise ValueError("Unit-hole unfolding requires every hole to be a single cell")
    stripes = plan_stripes(plane)
    if stripes is None:
        raise ValueError(
            "Unit-hole unfolding requires a rectangular outline whose hole "
            "columns pair into stripes"
        )

    unfolding = Unfolding(UnfoldStrategy.UNIT_HOLES)
    row, offset = _lay_strip(plane, unfolding)
    _, min_y, _, max_y = plane.bounds()
    hangers = (
        _Hanger(_run_slots(plane, Direction2.DOWN, min_y, offset), min_y, row),
        _Hanger(_run_slots(plane, Direction2.UP, max_y, offset), max_y, row),
    )
    stripe_of = {x: k for k, stripe in enumerate(stripes) for x in stripe}

    def hanger_of(pos: Position2) -> "_Hanger":
        return hangers[stripe_of[pos.x] % 2]

    for pos in plane.positions():
        hanger = hanger_of(pos)
        unfolding.place(hanger.top(pos), SquareType.TOP_BASE, pos)
        unfolding.place(hanger.bottom(pos), SquareType.BOTTOM_BASE, pos)

    for pos in plane.positions():
        hanger = hanger_of(pos)
        if pos.y == hanger.end_y:
            unfolding.hinge(hanger.strip_square(pos), hanger.top(pos))
            unfolding.hinge(hanger.strip_square(pos), hanger.bottom(pos))
        for nb in (pos.right(), pos.up()):
            if nb in plane.cubes and stripe_of[nb.x] == stripe_of[pos.x]:
                unfolding.hinge(hanger.top(pos), hanger.top(nb))
                unfolding.hinge(hanger.bottom(pos), hanger.bottom(nb))

    for hole in sorted(plane.hole_cubes):
        family = stripe_of[hole.x] % 2
        own, other = hangers[family], hangers[1 - family]
        mate_x = next(x for x in stripes[stripe_of[hole.x]] if x != hole.x)
        mate = Position2(mate_x, hole.y)
        outer = Position2(2 * hole.x - mate_x, hole.y)
        if family == 0:
            near, far = hole.down(), hole.up()
        else:
            near, far = hole.up(), hole.down()
        _fold_wall(unfolding, own.top(hole), mate, hole, own.top(mate))
        _fold_wall(unfolding, own.bottom(hole), near, hole, own.bottom(near))
        _fold_wall(unfolding, other.top(hole), outer, hole, other.top(outer))
        _fold_wall(unfolding, other.top(far), far, hole, other.top(hole))

    _log_layout(unfolding)
    return unfolding


def unfold_wide_holes(plane: PlanePolycube) -> Unfolding:
    """Sheets as for no holes, with each hole's walls folded into its opening."""
    _require_ready(plane)
    if not big_holes(plane):
        raise ValueError("Wide-hole unfolding requires every hole to be at least 2 wide")

    unfolding = Unfolding(UnfoldStrategy.WIDE_HOLES)
    row, offset = _lay_strip(plane, unfolding)
    _place_sheets(plane, unfolding, row)
    _hinge_sheets(plane, unfolding, row, offset)
    for pos in plane.positions():
        for direction in (Direction2.LEFT, Direction2.RIGHT):
            beside = pos.neighbor(direction)
            if beside in plane.hole_cubes:
                unfolding.place(beside, SquareType.HOLE, pos, direction)
                unfolding.hinge(pos, beside)
        for direction in (Direction2.UP, Direction2.DOWN):
            beside = pos.neighbor(direction)
            if beside in plane.hole_cubes:
                wall = _mirror(beside, row)
                unfolding.place(wall, SquareType.HOLE, pos, direction)
                unfolding.hinge(_mirror(pos, row), wall)
    _log_layout(unfolding)
    return unfolding


STRATEGIES: Dict[UnfoldStrategy, Callable[[PlanePolycube], Unfolding]] = {
    UnfoldStrategy.ORTHOTREE: unfold_orthotree,
    UnfoldStrategy.NO_HOLES: unfold_no_holes,
    UnfoldStrategy.UNIT_HOLES: unfold_unit_holes,
    UnfoldStrategy.WIDE_HOLES: unfold_wide_holes,
}


# ─── Dispatch ────────────────────────────────────────────────────────────────

def rejection_reason(voxels: int, connected: bool, axis: int) -> Optional[str]:
    """Why a polycube cannot be projected for unfolding, or None if it can."""
    if voxels == 0:
        return "polycube is empty"
    if not connected:
        return "polycube is not connected"
    if axis == AXIS_NONE:
        return "polycube spans more than one layer"
    return None


def select_strategy(plane: PlanePolycube) -> Tuple[UnfoldStrategy, str]:
    """Pick the strategy for a traced, hole-classified plane polycube."""
    _require_ready(plane)
    if plane.orthotree():
        return UnfoldStrategy.ORTHOTREE, "voxel graph is a tree"
    if not plane.holes:
        return UnfoldStrategy.NO_HOLES, "no holes"
    if plane.unit_holes():
        if plan_stripes(plane) is None:
            return (
                UnfoldStrategy.UNSUPPORTED,
                "single-cell holes need a rectangular outline whose hole "
                "columns pair into stripes",
            )
        return UnfoldStrategy.UNIT_HOLES, f"{len(plane.holes)} single-cell holes"
    if big_holes(plane):
        return UnfoldStrategy.WIDE_HOLES, f"{len(plane.holes)} holes at least 2 wide"
    return (
        UnfoldStrategy.UNSUPPORTED,
        "holes are neither all single cells nor all at least 2 wide",
    )


def unfold_plane(plane: PlanePolycube) -> UnfoldOutcome:
    strategy, reason = select_strategy(plane)
    if strategy is UnfoldStrategy.UNSUPPORTED:
        logger.warning("Cannot unfold: %s", reason)
        return UnfoldOutcome(strategy, None, reason, plane)
    logger.info("Unfolding strategy %s (%s)", strategy.value, reason)
    return UnfoldOutcome(strategy, STRATEGIES[strategy](plane), reason, plane)


def unfold(polycube: Polycube) -> UnfoldOutcome:
    """Classify *polycube* and run the one strategy that fits it."""
    reason = rejection_reason(polycube.n, polycube.connected(), polycube.one_layer())
    if reason is not None:
        return UnfoldOutcome(UnfoldStrategy.UNSUPPORTED, None, reason)

    plane = project_polycube(polycube)
    trace_circumference(plane)
    classify_holes(plane)
    return unfold_plane(plane)


def plan_stripes(plane: PlanePolycube) -> Optional[List[Tuple[int, ...]]]:
    """Group the columns of a rectangular outline into stripes, or None.

    A column holding a hole is paired with a neighbouring column so the cells
    beside the hole hold the stripe together. A pair is refused when a hole in
    its left column has a diagonal partner in its right column, since the
    stripe would fall apart between them. Pairs are preferred over singles,
    scanning from the right.
    """
    min_x, min_y, max_x, max_y = plane.bounds()
    area = (max_x - min_x + 1) * (max_y - min_y + 1)
    if plane.n + len(plane.hole_cubes) != area:
        return None

    hole_columns = {hole.x for hole in plane.hole_cubes}
    tilings: Dict[int, Optional[List[Tuple[int, ...]]]] = {max_x + 1: []}
    for x in range(max_x, min_x - 1, -1):
        tiling: Optional[List[Tuple[int, ...]]] = None
        if x < max_x and not _crossed(plane, x) and tilings[x + 2] is not None:
            tiling = [(x, x + 1)] + tilings[x + 2]
        elif x not in hole_columns and tilings[x + 1] is not None:
            tiling = [(x,)] + tilings[x + 1]
        tilings[x] = tiling
    return tilings[min_x]


# ─── Internal helpers ────────────────────────────────────────────────────────

@dataclass
class _Hanger:
    """Target cells for one stripe family.

    ``slots`` maps a plane column to the strip column of its end cell side;
    ``end_y`` is the row of those end cells.
    """

    slots: Dict[int, int]
    end_y: int
    row: int

    def strip_square(self, cell: Position2) -> Position2:
        return Position2(self.slots[cell.x], self.row)

    def top(self, cell: Position2) -> Position2:
        return Position2(self.slots[cell.x], self.row + 1 + abs(cell.y - self.end_y))

    def bottom(self, cell: Position2) -> Position2:
        return Position2(self.slots[cell.x], self.row - 1 - abs(cell.y - self.end_y))


def _require_ready(plane: PlanePolycube) -> None:
    if not plane.cubes:
        raise ValueError("Cannot unfold an empty plane polycube")
    if not plane.traced:
        raise ValueError("Circumference must be traced before unfolding")
    if not plane.holes_classified:
        raise ValueError("Holes must be classified before unfolding")


def _mirror(pos: Position2, row: int) -> Position2:
    """Reflect across the strip row."""
    return Position2(pos.x, 2 * row - pos.y)


def _toward(cell: Position2, other: Position2) -> Direction2:
    return next(d for d in Direction2 if cell.neighbor(d) == other)


def _crossed(plane: PlanePolycube, x: int) -> bool:
    """True if a hole in column x has a diagonal partner in column x + 1."""
    return any(
        Position2(x + 1, hole.y + dy) in plane.hole_cubes
        for hole in plane.hole_cubes if hole.x == x
        for dy in (-1, 1)
    )


def _run_slots(
    plane: PlanePolycube, direction: Direction2, y: int, offset: int
) -> Dict[int, int]:
    """Strip column of every ``direction`` side along row y, keyed by plane column."""
    return {
        cell.x: offset + i
        for i, (cell, side) in enumerate(plane.circumference)
        if side == direction and cell.y == y
    }


def _place_strip(plane: PlanePolycube, unfolding: Unfolding, offset: int, row: int) -> None:
    """Lay the circumference left to right and hinge consecutive squares."""
    for i, (cell, direction) in enumerate(plane.circumference):
        unfolding.place(Position2(offset + i, row), SquareType.CIRCUMFERENCE, cell, direction)
        if i:
            unfolding.hinge(Position2(offset + i - 1, row), Position2(offset + i, row))


def _lay_strip(plane: PlanePolycube, unfolding: Unfolding) -> Tuple[int, int]:
    """Place the circumference strip one row below the lowest cells.

    The strip is shifted so the first bottom side of the lowest row sits
    directly under its own cell. Returns the strip row and the x of strip
    entry 0.
    """
    _, min_y, _, _ = plane.bounds()
    row = min_y - 1
    anchor = next(
        i
        for i, (cell, direction) in enumerate(plane.circumference)
        if direction == Direction2.DOWN and cell.y == min_y
    )
    offset = plane.circumference[anchor][0].x - anchor
    _place_strip(plane, unfolding, offset, row)
    return row, offset


def _place_sheets(plane: PlanePolycube, unfolding: Unfolding, row: int) -> None:
    for pos in plane.positions():
        unfolding.place(pos, SquareType.TOP_BASE, pos)
        unfolding.place(_mirror(pos, row), SquareType.BOTTOM_BASE, pos)


def _hinge_sheets(plane: PlanePolycube, unfolding: Unfolding, row: int, offset: int) -> None:
    """Hinge neighbouring cells within each sheet and both sheets to the strip.

    A strip square joins the sheets only where it is the bottom side of the
    very cell above it; elsewhere strip and sheet merely touch.
    """
    _, min_y, _, _ = plane.bounds()
    for pos in plane.positions():
        for nb in (pos.right(), pos.up()):
            if nb in plane.cubes:
                unfolding.hinge(pos, nb)
                unfolding.hinge(_mirror(pos, row), _mirror(nb, row))
    for i, (cell, direction) in enumerate(plane.circumference):
        if direction == Direction2.DOWN and cell.y == min_y and offset + i == cell.x:
            strip_square = Position2(cell.x, row)
            unfolding.hinge(strip_square, cell)
            unfolding.hinge(strip_square, _mirror(cell, row))


def _fold_wall(
    unfolding: Unfolding,
    pos: Position2,
    cell: Position2,
    hole: Position2,
    parent: Position2,
) -> None:
    """Place the wall of *cell* facing *hole* at *pos*, hinged to *parent*."""
    unfolding.place(pos, SquareType.HOLE, cell, _toward(cell, hole))
    unfolding.hinge(parent, pos)


def _orthotree_slots(plane: PlanePolycube) -> Dict[Position2, int]:
    """Strip index under which each cell's top and bottom faces are placed.

    A cell normally uses its first side in walk order. A cell with four
    neighbours has no side of its own: it takes the inside corner between two
    neighbours ``a = hub+d`` and ``b = hub+(d+1)``, i.e. the slot of side
    (a, d+1), directly left of side (b, d). That forces ``a`` onto its side
    d-1 and ``b`` onto its side d. Hubs sharing an arm cell form a forest; a
    hub never uses a corner touching the arm it shares with its parent, so no
    arm receives two conflicting demands.
    """
    index_of = {entry: i for i, entry in enumerate(plane.circumference)}
    hubs = sorted(p for p in plane.cubes if plane.degree(p) == 4)
    parent_arm = _hub_forest(plane, hubs)

    slots: Dict[Position2, int] = {}
    for hub in hubs:
        for d in Direction2:
            a, b = hub.neighbor(d), hub.neighbor(d.next())
            if parent_arm.get(hub) in (a, b):
                continue
            slots[hub] = index_of[(a, d.next())]
            slots[a] = index_of[(a, d.prev())]
            slots[b] = index_of[(b, d)]
            break

    for i, (cell, _direction) in enumerate(plane.circumference):
        slots.setdefault(cell, i)
    return slots


def _hub_forest(plane: PlanePolycube, hubs: List[Position2]) -> Dict[Position2, Position2]:
    """Map each non-root hub to the arm cell joining it to its parent hub."""
    hub_set = set(hubs)
    parent_arm: Dict[Position2, Position2] = {}
    seen = set()
    for root in hubs:
        if root in seen:
            continue
        seen.add(root)
        stack = [root]
        while stack:
            hub = stack.pop()
            for d in Direction2:
                arm = hub.neighbor(d)
                other = arm.neighbor(d)
                if other in hub_set and other not in seen:
                    seen.add(other)
                    parent_arm[other] = arm
                    stack.append(other)
    return parent_arm


def _log_layout(unfolding: Unfolding) -> None:
    counts = unfolding.counts()
    logger.debug(
        "Layout %s: %d squares, %d hinges, %d pieces (%s)",
        unfolding.strategy.value if unfolding.strategy else "?",
        len(unfolding),
        len(unfolding.hinges),
        unfolding.piece_count(),
        ", ".join(f"{k}={v}" for k, v in counts.items()),
    )
