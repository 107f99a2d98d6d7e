"""Per-category totals comparison."""

from .category_totals import CategoryAggregator

__all__ = ["CategoryAggregator"]
