"""
DXF export for polycube unfoldings.

Uses ezdxf to produce a DXF net with these layers:
  - CUT (red, ACI 1): every square edge that is not a hinge, merged into runs
  - FOLD (blue, ACI 5): one line per hinge recorded in the unfolding
  - one layer per square type holding the individual cells

Two squares that touch in the layout without a hinge are cut apart, so the
CUT layer also runs between pieces that happen to lie side by side.

Units: millimeters. Format: R2010.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

import ezdxf
from shapely.geometry import LineString, MultiLineString, box
from shapely.ops import linemerge

if TYPE_CHECKING:
    from polycube_unfold.unfolding import Unfolding

SQUARE_TYPES = ("top_base", "bottom_base", "circumference", "hole")

Point = Tuple[float, float]
Segment = Tuple[Point, Point]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DXFExportConfig:
    """Configuration for DXF export."""
    cut_layer: str = "CUT"
    fold_layer: str = "FOLD"
    cut_color: int = 1       # ACI red
    fold_color: int = 5      # ACI blue
    unit_mm: float = 10.0
    type_layers: Dict[str, str] = field(
        default_factory=lambda: {name: name.upper() for name in SQUARE_TYPES}
    )
    type_color: int = 8      # ACI grey


def fold_lines(unfolding: "Unfolding", unit_mm: float = 1.0) -> List[Segment]:
    """The shared edge of every hinge, in hinge order."""
    return [_scale(_shared_edge(a, b), unit_mm) for a, b in sorted(unfolding.hinges)]


def cut_lines(unfolding: "Unfolding", unit_mm: float = 1.0):
    """Square edges that are not hinges, merged into a (Multi)LineString."""
    hinged = {_shared_edge(a, b) for a, b in unfolding.hinges}
    edges: Set[Segment] = set()
    for pos in unfolding:
        for edge in _square_edges(pos):
            if edge not in hinged:
                edges.add(edge)
    if not edges:
        return MultiLineString()
    return linemerge([_scale(edge, unit_mm) for edge in sorted(edges)])


def unfolding_to_dxf(
    unfolding: "Unfolding",
    filepath: str,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export an unfolding to a DXF file.

    Args:
        unfolding: Layout to export.
        filepath: Output DXF file path.
        config: DXF export settings.

    Returns:
        Path to created DXF file.
    """
    if config is None:
        config = DXFExportConfig()

    doc = ezdxf.new("R2010")
    doc.units = ezdxf.units.MM
    msp = doc.modelspace()
    _setup_layers(doc, config)

    unit = config.unit_mm
    for pos in sorted(unfolding):
        layer = config.type_layers[unfolding[pos].type.value]
        cell = box(pos.x * unit, pos.y * unit, (pos.x + 1) * unit, (pos.y + 1) * unit)
        msp.add_lwpolyline(
            list(cell.exterior.coords)[:-1], close=True, dxfattribs={"layer": layer}
        )

    for start, end in fold_lines(unfolding, unit):
        msp.add_line(start, end, dxfattribs={"layer": config.fold_layer})
    _add_lines_to_dxf(msp, cut_lines(unfolding, unit), config.cut_layer)

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info(
        "Exported DXF: %s (%d folds)", filepath, len(unfolding.hinges)
    )
    return filepath


# ─── Internal helpers ────────────────────────────────────────────────────────

def _setup_layers(doc, config: DXFExportConfig) -> None:
    """Create CUT, FOLD and the per-type layers."""
    doc.layers.add(config.cut_layer, color=config.cut_color)
    doc.layers.add(config.fold_layer, color=config.fold_color)
    for layer in sorted(set(config.type_layers.values())):
        doc.layers.add(layer, color=config.type_color)


def _square_edges(pos) -> List[Segment]:
    x, y = pos.x, pos.y
    return [
        ((x, y), (x + 1, y)),
        ((x, y + 1), (x + 1, y + 1)),
        ((x, y), (x, y + 1)),
        ((x + 1, y), (x + 1, y + 1)),
    ]


def _shared_edge(a, b) -> Segment:
    """Edge between two touching squares, lower corner first."""
    if a.y == b.y:
        x = max(a.x, b.x)
        return ((x, a.y), (x, a.y + 1))
    y = max(a.y, b.y)
    return ((a.x, y), (a.x + 1, y))


def _scale(edge: Segment, unit: float) -> Segment:
    (x1, y1), (x2, y2) = edge
    return ((x1 * unit, y1 * unit), (x2 * unit, y2 * unit))


def _add_lines_to_dxf(msp, lines, layer: str) -> None:
    """Add a Shapely (Multi)LineString as open or closed LWPolylines."""
    if lines.is_empty:
        return

    if isinstance(lines, MultiLineString):
        for geom in lines.geoms:
            _add_lines_to_dxf(msp, geom, layer)
        return

    if isinstance(lines, LineString):
        coords = list(lines.coords)
        if lines.is_ring:
            msp.add_lwpolyline(coords[:-1], close=True, dxfattribs={"layer": layer})
        else:
            msp.add_lwpolyline(coords, dxfattribs={"layer": layer})
