"""
SVG Exporter for polycube unfoldings.

Draws one square per unfolding cell, styled by its SquareType, so the net can
be printed or sent to a laser cutter.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np
import svgwrite

if TYPE_CHECKING:
    from polycube_unfold.unfolding import Unfolding

logger = logging.getLogger(__name__)

# SVG styling, keyed by square type name
SQUARE_STYLES: Dict[str, Dict[str, str]] = {
    "top_base": {
        "fill": "#f4d35e",  # Yellow for the top sheet
        "stroke": "#333333",
    },
    "bottom_base": {
        "fill": "#0d3b66",  # Navy for the bottom sheet
        "stroke": "#333333",
    },
    "circumference": {
        "fill": "#ee964b",  # Orange for the side strip
        "stroke": "#333333",
    },
    "hole": {
        "fill": "#f95738",  # Red for hole walls
        "stroke": "#333333",
    },
}


@dataclass(frozen=True)
class SVGExportConfig:
    """Configuration for SVG export."""
    unit_mm: float = 10.0     # edge length of one lattice square
    margin_mm: float = 10.0
    stroke_width: float = 0.5
    add_title: bool = True
    styles: Dict[str, Dict[str, str]] = field(default_factory=lambda: dict(SQUARE_STYLES))


def unfolding_to_svg(
    unfolding: "Unfolding",
    filepath: str,
    config: Optional[SVGExportConfig] = None,
) -> str:
    """
    Export an unfolding to SVG.

    Args:
        unfolding: Layout to draw
        filepath: Output SVG file path
        config: SVG export settings

    Returns:
        Path to created SVG file
    """
    if config is None:
        config = SVGExportConfig()

    unit = config.unit_mm
    margin = config.margin_mm
    min_x, min_y, max_x, max_y = unfolding.bounds()
    extent = (np.array([max_x, max_y]) - np.array([min_x, min_y]) + 1) * unit
    if not len(unfolding):
        extent = np.zeros(2)

    canvas_width = float(extent[0] + 2 * margin)
    canvas_height = float(extent[1] + 2 * margin)

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{canvas_width}mm", f"{canvas_height}mm"),
        viewBox=f"0 0 {canvas_width} {canvas_height}",
    )
    dwg.defs.add(dwg.style(_stylesheet(config)))

    for pos in sorted(unfolding):
        square = unfolding[pos]
        # Lattice y grows upward, SVG y grows downward
        svg_x = margin + (pos.x - min_x) * unit
        svg_y = margin + (max_y - pos.y) * unit
        dwg.add(
            dwg.rect(
                insert=(svg_x, svg_y),
                size=(unit, unit),
                class_=square.type.value,
            )
        )

    if config.add_title and unfolding.strategy is not None:
        dwg.add(
            dwg.text(
                unfolding.strategy.value,
                insert=(margin, margin * 0.75),
                class_="label",
            )
        )

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    dwg.save()
    logger.info("Exported SVG: %s (%d squares)", filepath, len(unfolding))
    return filepath


def _stylesheet(config: SVGExportConfig) -> str:
    rules = []
    for name, style in config.styles.items():
        body = " ".join(f"{key}: {value};" for key, value in style.items())
        rules.append(f".{name} {{ {body} stroke-width: {config.stroke_width}; }}")
    rules.append(".label { font-size: 6px; font-family: Arial, sans-serif; fill: #333; }")
    return "\n".join(rules)
