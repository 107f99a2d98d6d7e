"""Reconciliation of payment hub exports against sales reports."""

from .config import ReconConfig, build_config, load_config
from .matching.engine import ReconciliationEngine, reconcile_tables
from .models.transaction import ReconciliationResult, TabularData

__version__ = "0.1.0"

__all__ = [
    "ReconConfig",
    "ReconciliationEngine",
    "ReconciliationResult",
    "TabularData",
    "build_config",
    "load_config",
    "reconcile_tables",
]
