"""Data models for reconciliation."""

from .transaction import (
    CategoryTotal,
    ColumnMap,
    DatasetOrigin,
    DiscrepancyRecord,
    NormalizedTransaction,
    ReconciliationResult,
    ReconciliationSummary,
    TabularData,
    round_currency,
)

__all__ = [
    "CategoryTotal",
    "ColumnMap",
    "DatasetOrigin",
    "DiscrepancyRecord",
    "NormalizedTransaction",
    "ReconciliationResult",
    "ReconciliationSummary",
    "TabularData",
    "round_currency",
]
