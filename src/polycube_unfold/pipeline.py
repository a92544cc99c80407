"""Voxel list -> classified polycube -> unfolded net, with audit checkpoints."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from dxf_exporter import unfolding_to_dxf
from polycube_unfold.audit import AuditTrail, sha256_file
from polycube_unfold.circumference import perimeter, trace_circumference
from polycube_unfold.contracts import Classification, UnfoldConfig, UnfoldRunResult
from polycube_unfold.holes import big_holes, classify_holes
from polycube_unfold.plane import PlanePolycube, project_polycube
from polycube_unfold.polycube import Polycube, read_polycube
from polycube_unfold.surface import build_surface_graph
from polycube_unfold.unfolding import (
    UnfoldOutcome,
    UnfoldStrategy,
    rejection_reason,
    select_strategy,
    unfold_plane,
)
from svg_exporter import unfolding_to_svg

logger = logging.getLogger(__name__)


def run_unfold_pipeline(
    *,
    config: UnfoldConfig,
    run_id: str,
    artifacts_dir: Path,
    audit: Optional[AuditTrail] = None,
) -> UnfoldRunResult:
    if audit is None:
        audit = AuditTrail(run_id=run_id, artifacts_dir=artifacts_dir)

    input_path = Path(config.input_path)
    input_hash = sha256_file(input_path)
    with input_path.open("r", encoding="utf-8") as handle:
        polycube = read_polycube(handle)

    preflight = audit.write_checkpoint(
        phase_index=0,
        phase_name="preflight",
        counts={"voxels": polycube.n},
        invariants={"lattice": "integer_unit_cubes", "design_name": config.design_name},
        input_hashes={"input_sha256": input_hash},
    )

    classification = classify_polycube(polycube)
    classified = audit.write_checkpoint(
        phase_index=1,
        phase_name="classification",
        counts={
            "voxels": classification.voxel_count,
            "surface_faces": classification.surface_faces,
        },
        invariants=classification.as_dict(),
        input_hashes={"prev_checkpoint_sha256": preflight.payload_sha256},
    )

    rejection = rejection_reason(
        classification.voxel_count, classification.connected, classification.axis
    )
    if rejection is not None:
        outcome = UnfoldOutcome(UnfoldStrategy.UNSUPPORTED, None, rejection)
        _record_dispatch(audit, outcome, evidence=classification.as_dict())
        return _finish(
            audit=audit,
            run_id=run_id,
            input_hash=input_hash,
            classification=classification,
            outcome=outcome,
            plane=None,
            prev_sha=classified.payload_sha256,
            config=config,
            artifacts_dir=artifacts_dir,
        )

    plane = project_polycube(polycube)
    projected = audit.write_checkpoint(
        phase_index=2,
        phase_name="projection",
        counts={"cells": plane.n},
        invariants={"axis": plane.axis, "level": plane.level},
        input_hashes={"prev_checkpoint_sha256": classified.payload_sha256},
    )

    trace_circumference(plane)
    traced = audit.write_checkpoint(
        phase_index=3,
        phase_name="circumference",
        counts={
            "circumference": len(plane.circumference),
            "boundary_cells": sum(1 for c in plane.cubes.values() if c.on_boundary),
            "perimeter": perimeter(plane),
        },
        invariants={"walk": "counter_clockwise", "start": "min_cell_left_side"},
        input_hashes={"prev_checkpoint_sha256": projected.payload_sha256},
    )

    classify_holes(plane)
    holes_checkpoint = audit.write_checkpoint(
        phase_index=4,
        phase_name="holes",
        counts={"holes": len(plane.holes), "hole_cells": len(plane.hole_cubes)},
        invariants={
            "unit_holes": plane.unit_holes(),
            "big_holes": big_holes(plane),
        },
        outputs={"hole_sizes": sorted(len(h) for h in plane.holes)},
        input_hashes={"prev_checkpoint_sha256": traced.payload_sha256},
    )

    outcome = unfold_plane(plane)
    _record_dispatch(audit, outcome, evidence=_plane_evidence(plane))
    return _finish(
        audit=audit,
        run_id=run_id,
        input_hash=input_hash,
        classification=classification,
        outcome=outcome,
        plane=plane,
        prev_sha=holes_checkpoint.payload_sha256,
        config=config,
        artifacts_dir=artifacts_dir,
    )


def classify_polycube(polycube: Polycube) -> Classification:
    surface = build_surface_graph(polycube)
    return Classification(
        voxel_count=polycube.n,
        connected=polycube.connected(),
        axis=polycube.one_layer(),
        orthotree=polycube.orthotree(),
        surface_faces=len(surface),
        surface_symmetric=surface.is_symmetric(),
    )


# ─── Internal helpers ────────────────────────────────────────────────────────

def _record_dispatch(
    audit: AuditTrail,
    outcome: UnfoldOutcome,
    evidence: Dict[str, object],
) -> None:
    alternatives: List[Dict[str, object]] = [
        {"name": s.value, "selected": s is outcome.strategy} for s in UnfoldStrategy
    ]
    reason_codes = ["ordered_dispatch"]
    if outcome.strategy is UnfoldStrategy.UNSUPPORTED:
        reason_codes.append("unsupported_topology")
    audit.append_decision(
        phase_index=5,
        decision_type="unfold_strategy",
        alternatives=alternatives,
        selected=outcome.strategy.value,
        reason_codes=reason_codes,
        evidence={**evidence, "reason": outcome.reason},
    )


def _plane_evidence(plane: PlanePolycube) -> Dict[str, object]:
    strategy, _ = select_strategy(plane)
    return {
        "cells": plane.n,
        "orthotree": plane.orthotree(),
        "holes": len(plane.holes),
        "hole_cells": len(plane.hole_cubes),
        "dispatch": strategy.value,
    }


def _finish(
    *,
    audit: AuditTrail,
    run_id: str,
    input_hash: str,
    classification: Classification,
    outcome: UnfoldOutcome,
    plane: Optional[PlanePolycube],
    prev_sha: str,
    config: UnfoldConfig,
    artifacts_dir: Path,
) -> UnfoldRunResult:
    unfolding = outcome.unfolding
    status = "ok" if outcome.ok else "unsupported"
    counts: Dict[str, int] = unfolding.counts() if unfolding is not None else {}

    unfolded = audit.write_checkpoint(
        phase_index=5,
        phase_name="unfolding",
        counts={
            "squares": len(unfolding) if unfolding is not None else 0,
            "hinges": len(unfolding.hinges) if unfolding is not None else 0,
            "pieces": unfolding.piece_count() if unfolding is not None else 0,
            **counts,
        },
        invariants={"strategy": outcome.strategy.value, "status": status},
        outputs={
            "reason": outcome.reason,
            "bounds": list(unfolding.bounds()) if unfolding is not None else [],
        },
        input_hashes={"prev_checkpoint_sha256": prev_sha},
    )

    svg_path: Optional[Path] = None
    dxf_path: Optional[Path] = None
    if unfolding is not None:
        slug = config.design_name.replace(" ", "_")
        if config.write_svg:
            svg_path = Path(
                unfolding_to_svg(unfolding, str(artifacts_dir / f"{slug}_net.svg"), config.svg)
            )
        if config.write_dxf:
            dxf_path = Path(
                unfolding_to_dxf(unfolding, str(artifacts_dir / f"{slug}_net.dxf"), config.dxf)
            )

    audit.write_checkpoint(
        phase_index=6,
        phase_name="export",
        counts={"files": int(svg_path is not None) + int(dxf_path is not None)},
        invariants={"write_svg": config.write_svg, "write_dxf": config.write_dxf},
        outputs={
            "svg": str(svg_path) if svg_path else None,
            "dxf": str(dxf_path) if dxf_path else None,
        },
        input_hashes={"prev_checkpoint_sha256": unfolded.payload_sha256},
    )
    audit.finalize()

    logger.info(
        "Run %s: %s via %s (%s)", run_id, status, outcome.strategy.value, outcome.reason
    )
    return UnfoldRunResult(
        run_id=run_id,
        status=status,
        input_hash_sha256=input_hash,
        classification=classification,
        strategy=outcome.strategy.value,
        reason=outcome.reason,
        counts=counts,
        unfolding_payload=unfolding.to_payload() if unfolding is not None else None,
        checkpoints=[c.path for c in audit.checkpoints],
        decision_log_path=audit.decision_log_path,
        decision_hash_chain_path=audit.hash_chain_path,
        svg_path=svg_path,
        dxf_path=dxf_path,
        debug={
            "circumference": len(plane.circumference) if plane is not None else 0,
            "holes": len(plane.holes) if plane is not None else 0,
        },
    )
