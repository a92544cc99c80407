#!/usr/bin/env python3
"""Unfold a single-layer polycube (voxel triples -> SVG/DXF net).

Each invocation writes one timestamped run folder under ``--runs-dir``:
the staged input, the pipeline artifacts, metrics.json, manifest.json and a
short summary.md. ``latest`` points at the newest run.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import shutil
import sys
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from polycube_unfold import UnfoldConfig, UnfoldRunResult, run_unfold_pipeline
from polycube_unfold.audit import AuditTrail


@dataclass
class RunFolder:
    """One timestamped directory per run: input/, artifacts/ and the reports."""

    run_id: str
    root: Path

    @classmethod
    def create(cls, runs_root: Path, design_name: str) -> "RunFolder":
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        slug = re.sub(r"[^a-z0-9]+", "-", design_name.strip().lower()).strip("-")
        run_id = f"{stamp}_{slug or 'polycube'}"
        folder = cls(run_id=run_id, root=runs_root / run_id)
        folder.input_dir.mkdir(parents=True, exist_ok=True)
        folder.artifacts_dir.mkdir(parents=True, exist_ok=True)
        return folder

    @property
    def input_dir(self) -> Path:
        return self.root / "input"

    @property
    def artifacts_dir(self) -> Path:
        return self.root / "artifacts"

    def stage_input(self, source: str) -> Path:
        """Keep a copy of the voxel triples the run reads; ``-`` means stdin."""
        if source == "-":
            staged = self.input_dir / "stdin.txt"
            staged.write_text(sys.stdin.read(), encoding="utf-8")
            return staged
        staged = self.input_dir / Path(source).name
        shutil.copy2(source, staged)
        return staged

    def write_json(self, name: str, payload: dict) -> Path:
        path = self.root / name
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return path

    def mark_latest(self, runs_root: Path) -> None:
        """Point ``runs_root/latest`` at this run, as a symlink or a pointer file."""
        latest = runs_root / "latest"
        if latest.is_symlink() or latest.is_file():
            latest.unlink()
        elif latest.exists():
            shutil.rmtree(latest)
        try:
            latest.symlink_to(self.root.name)
        except OSError:
            latest.mkdir()
            (latest / "latest_run.txt").write_text(self.run_id, encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Classify a polycube and unfold it if it is a single layer"
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Text file of whitespace-separated x y z triples, or - for stdin",
    )
    parser.add_argument("--name", default="polycube", help="Design/run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument("--no-svg", action="store_true", help="Skip SVG export")
    parser.add_argument("--no-dxf", action="store_true", help="Skip DXF export")
    parser.add_argument(
        "--unit-mm",
        type=float,
        default=10.0,
        help="Edge length of one lattice square in the exported files",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def _build_summary(result: UnfoldRunResult, elapsed_s: float) -> str:
    lines = [
        f"# Run {result.run_id}",
        "",
        f"- Status: **{result.status.upper()}**",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Voxels: {result.classification.voxel_count}",
        f"- Strategy: {result.strategy} ({result.reason})",
    ]
    if result.unfolding_payload is not None:
        lines.append(f"- Pieces: {result.unfolding_payload['pieces']}")
        lines.append(f"- Folds: {len(result.unfolding_payload['hinges'])}")
    if result.counts:
        lines.append("")
        lines.append("## Squares")
        lines.extend(f"- {name}: {count}" for name, count in result.counts.items())
    lines.append("")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.unit_mm <= 0:
        parser.error("--unit-mm must be positive")

    started = time.perf_counter()
    runs_root = Path(args.runs_dir)
    run = RunFolder.create(runs_root, args.name)
    staged_input = run.stage_input(args.input)

    defaults = UnfoldConfig(input_path=str(staged_input))
    config = replace(
        defaults,
        design_name=args.name,
        write_svg=not args.no_svg,
        write_dxf=not args.no_dxf,
        svg=replace(defaults.svg, unit_mm=float(args.unit_mm)),
        dxf=replace(defaults.dxf, unit_mm=float(args.unit_mm)),
    )

    audit = AuditTrail(run_id=run.run_id, artifacts_dir=run.artifacts_dir)
    result = run_unfold_pipeline(
        config=config,
        run_id=run.run_id,
        artifacts_dir=run.artifacts_dir,
        audit=audit,
    )
    elapsed = time.perf_counter() - started

    unfolding_path = None
    if result.unfolding_payload is not None:
        unfolding_path = run.write_json("artifacts/unfolding.json", result.unfolding_payload)

    metrics_path = run.write_json("metrics.json", {
        "run_id": result.run_id,
        "status": result.status,
        "strategy": result.strategy,
        "reason": result.reason,
        "elapsed_s": round(elapsed, 3),
        "input_hash_sha256": result.input_hash_sha256,
        "classification": result.classification.as_dict(),
        "counts": result.counts,
        "debug": result.debug,
    })

    summary_path = run.root / "summary.md"
    summary_path.write_text(_build_summary(result, elapsed), encoding="utf-8")

    run.write_json("manifest.json", {
        "run_id": result.run_id,
        "design_name": args.name,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "input": str(staged_input),
        "status": result.status,
        "config": {
            "write_svg": config.write_svg,
            "write_dxf": config.write_dxf,
            "unit_mm": config.svg.unit_mm,
        },
        "artifacts": {
            "unfolding_json": str(unfolding_path) if unfolding_path else None,
            "svg": str(result.svg_path) if result.svg_path else None,
            "dxf": str(result.dxf_path) if result.dxf_path else None,
            "metrics": str(metrics_path),
            "summary": str(summary_path),
            "checkpoints": [str(path) for path in result.checkpoints],
            "decision_log": str(result.decision_log_path),
            "decision_hash_chain": str(result.decision_hash_chain_path),
        },
    })
    run.mark_latest(runs_root)

    print(f"Run ID: {result.run_id}")
    print(f"Run dir: {run.root}")
    print(f"Status: {result.status.upper()}")
    print(f"Strategy: {result.strategy} ({result.reason})")
    print(f"Voxels: {result.classification.voxel_count}")
    if result.svg_path:
        print(f"SVG: {result.svg_path}")
    if result.dxf_path:
        print(f"DXF: {result.dxf_path}")
    print(f"Decision log: {result.decision_log_path}")
    print(f"Metrics: {metrics_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
