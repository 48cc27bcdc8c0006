"""Utilities for the weighted draw subsystem."""

from .engine import WeightedDrawEngine, filter_candidates, select_winners
from .selection import (
    CUMULATIVE_SCAN,
    DEFAULT_SELECTION_REGISTRY,
    FENWICK_TREE,
    NoPositiveWeightError,
    SelectionAlgorithm,
    SelectionRegistry,
)

__all__ = [
    "CUMULATIVE_SCAN",
    "DEFAULT_SELECTION_REGISTRY",
    "FENWICK_TREE",
    "NoPositiveWeightError",
    "SelectionAlgorithm",
    "SelectionRegistry",
    "WeightedDrawEngine",
    "filter_candidates",
    "select_winners",
]
