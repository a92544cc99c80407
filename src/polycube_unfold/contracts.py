"""Contracts for the polycube unfolding pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dxf_exporter import DXFExportConfig
from svg_exporter import SVGExportConfig


@dataclass(frozen=True)
class UnfoldConfig:
    """Configuration for voxel list -> unfolded net."""

    input_path: str
    design_name: str = "polycube"
    write_svg: bool = True
    write_dxf: bool = True
    svg: SVGExportConfig = field(default_factory=SVGExportConfig)
    dxf: DXFExportConfig = field(default_factory=DXFExportConfig)


@dataclass
class Classification:
    """Shape facts gathered before any planar work."""

    voxel_count: int
    connected: bool
    axis: int
    orthotree: bool
    surface_faces: int
    surface_symmetric: bool

    @property
    def planar(self) -> bool:
        return self.axis != 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "voxel_count": self.voxel_count,
            "connected": self.connected,
            "axis": self.axis,
            "planar": self.planar,
            "orthotree": self.orthotree,
            "surface_faces": self.surface_faces,
            "surface_symmetric": self.surface_symmetric,
        }


@dataclass
class UnfoldRunResult:
    """In-memory result from one pipeline run."""

    run_id: str
    status: str  # "ok" | "unsupported"
    input_hash_sha256: str
    classification: Classification
    strategy: str
    reason: str
    counts: Dict[str, int]
    unfolding_payload: Optional[Dict[str, object]]
    checkpoints: List[Path]
    decision_log_path: Path
    decision_hash_chain_path: Path
    svg_path: Optional[Path] = None
    dxf_path: Optional[Path] = None
    debug: Dict[str, object] = field(default_factory=dict)
