"""Public API for polycube classification and single-layer unfolding."""

from polycube_unfold.contracts import UnfoldConfig, UnfoldRunResult
from polycube_unfold.pipeline import run_unfold_pipeline
from polycube_unfold.polycube import Polycube, parse_polycube, read_polycube
from polycube_unfold.unfolding import (
    SquareType,
    Unfolding,
    UnfoldOutcome,
    UnfoldStrategy,
    unfold,
)

__all__ = [
    "Polycube",
    "SquareType",
    "UnfoldConfig",
    "UnfoldOutcome",
    "UnfoldRunResult",
    "UnfoldStrategy",
    "Unfolding",
    "parse_polycube",
    "read_polycube",
    "run_unfold_pipeline",
    "unfold",
]
