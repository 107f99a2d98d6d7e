"""Matching engine and strategies."""

from .confirmation import ReconciliationFilter
from .engine import ReconciliationEngine, reconcile_tables
from .strategies import (
    DirectionalMatcher,
    MatchPredicate,
    ToleranceMatchPredicate,
    labels_overlap,
)

__all__ = [
    "ReconciliationEngine",
    "reconcile_tables",
    "ReconciliationFilter",
    "DirectionalMatcher",
    "MatchPredicate",
    "ToleranceMatchPredicate",
    "labels_overlap",
]
