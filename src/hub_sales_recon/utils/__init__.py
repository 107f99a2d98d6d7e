"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    TableParseError,
    ConfigurationError,
    RowLimitExceededError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "TableParseError",
    "ConfigurationError",
    "RowLimitExceededError",
    "ReportGenerationError",
    "setup_logging",
]
