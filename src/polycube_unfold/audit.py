"""Audit/checkpoint utilities for unfolding runs.

Decisions go to an append-only JSONL log where each entry carries the SHA-256
of its predecessor; phase checkpoints are standalone JSON files whose payload
hash is recorded in the final chain manifest.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

GENESIS_HASH = "0" * 64
SCHEMA_PREFIX = "polycube_unfold"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _canonical_json(payload: Dict[str, object]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


@dataclass
class CheckpointHandle:
    phase_index: int
    phase_name: str
    path: Path
    payload_sha256: str


class AuditTrail:
    """Append-only decision log with hash chaining, plus per-phase checkpoints."""

    def __init__(self, run_id: str, artifacts_dir: Path):
        self.run_id = run_id
        self.artifacts_dir = Path(artifacts_dir)
        self.checkpoints_dir = self.artifacts_dir / "checkpoints"
        self.checkpoints_dir.mkdir(parents=True, exist_ok=True)
        self.decision_log_path = self.artifacts_dir / "decision_log.jsonl"
        self.hash_chain_path = self.artifacts_dir / "decision_hash_chain.json"
        self._sequence = 0
        self._prev_hash = GENESIS_HASH
        self._chain: List[Dict[str, object]] = []
        self._checkpoint_handles: List[CheckpointHandle] = []

    @property
    def checkpoints(self) -> List[CheckpointHandle]:
        return list(self._checkpoint_handles)

    def append_decision(
        self,
        *,
        phase_index: int,
        decision_type: str,
        alternatives: List[Dict[str, object]],
        selected: str,
        reason_codes: Iterable[str],
        evidence: Optional[Dict[str, object]] = None,
    ) -> None:
        self._sequence += 1
        payload: Dict[str, object] = {
            "schema_version": f"{SCHEMA_PREFIX}.decision.v1",
            "run_id": self.run_id,
            "seq": self._sequence,
            "timestamp_utc": _utc_now_iso(),
            "phase_index": int(phase_index),
            "decision_type": decision_type,
            "alternatives": alternatives,
            "selected": selected,
            "reason_codes": list(reason_codes),
            "evidence": evidence or {},
            "previous_hash": self._prev_hash,
        }
        payload["hash"] = sha256_text(_canonical_json(payload))

        with self.decision_log_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, sort_keys=True) + "\n")

        self._chain.append(
            {"seq": self._sequence, "hash": payload["hash"], "previous_hash": self._prev_hash}
        )
        self._prev_hash = str(payload["hash"])
        logger.debug("Decision %d (%s): %s", self._sequence, decision_type, selected)

    def write_checkpoint(
        self,
        *,
        phase_index: int,
        phase_name: str,
        counts: Dict[str, int],
        invariants: Dict[str, object],
        outputs: Optional[Dict[str, object]] = None,
        input_hashes: Optional[Dict[str, str]] = None,
    ) -> CheckpointHandle:
        slug = phase_name.lower().replace(" ", "_")
        path = self.checkpoints_dir / f"phase_{phase_index:02d}_{slug}.json"
        payload: Dict[str, object] = {
            "schema_version": f"{SCHEMA_PREFIX}.checkpoint.v1",
            "run_id": self.run_id,
            "phase_index": int(phase_index),
            "phase_name": phase_name,
            "timestamp_utc": _utc_now_iso(),
            "input_hashes": input_hashes or {},
            "invariants": invariants,
            "counts": counts,
            "outputs": outputs or {},
        }
        payload_sha = sha256_text(_canonical_json(payload))
        payload["payload_sha256"] = payload_sha
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

        handle = CheckpointHandle(phase_index, phase_name, path, payload_sha)
        self._checkpoint_handles.append(handle)
        return handle

    def finalize(self) -> None:
        payload = {
            "schema_version": f"{SCHEMA_PREFIX}.hash_chain.v1",
            "run_id": self.run_id,
            "final_hash": self._prev_hash,
            "decision_count": self._sequence,
            "entries": self._chain,
            "checkpoint_hashes": [
                {
                    "phase_index": c.phase_index,
                    "phase_name": c.phase_name,
                    "path": str(c.path),
                    "payload_sha256": c.payload_sha256,
                }
                for c in self._checkpoint_handles
            ],
        }
        self.hash_chain_path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )


def verify_decision_log(path: Path) -> bool:
    """Recompute every entry hash in a decision log and check the links."""
    previous = GENESIS_HASH
    with Path(path).open("r", encoding="utf-8") as handle:
        for line in handle:
            if not line.strip():
                continue
            entry = json.loads(line)
            recorded = entry.pop("hash")
            if entry.get("previous_hash") != previous:
                return False
            if sha256_text(_canonical_json(entry)) != recorded:
                return False
            previous = recorded
    return True
