"""
Category totals for the hub vs sales comparison section.
Totals are computed over every transaction, matched or not.
"""

from decimal import Decimal
from typing import Iterable, Optional
import logging

from ..config import CategoryConfig
from ..models.transaction import CategoryTotal, NormalizedTransaction, round_currency

logger = logging.getLogger(__name__)


class CategoryAggregator:
    """
    Sums net amounts per canonical category for both datasets.

    Every call builds its own accumulators, so results never leak between
    runs.
    """

    def __init__(self, config: CategoryConfig):
        """
        Initialize the aggregator.

        Args:
            config: Category canonicalization rules and default ordering
        """
        self.config = config
        self._rules = [(rule.contains.lower(), rule.category) for rule in config.rules]
        self._excluded = [token.lower() for token in config.excluded_tokens if token]

    def canonical_category(self, label: str) -> Optional[str]:
        """
        Map a label onto its category.

        Returns:
            The canonical category, the trimmed label when no rule applies,
            or None for empty and excluded (e.g. cash) labels
        """
        text = (label or "").strip()
        lowered = text.lower()
        if not lowered:
            return None
        if any(token in lowered for token in self._excluded):
            return None

        for needle, category in self._rules:
            if needle in lowered:
                return category
        return text

    def aggregate(
        self,
        hub: Iterable[NormalizedTransaction],
        sales: Iterable[NormalizedTransaction],
    ) -> list[CategoryTotal]:
        """
        Build the category totals table.

        Default categories come first in configured order, even when both
        totals are zero; other categories follow alphabetically.

        Args:
            hub: All hub transactions
            sales: All sales transactions

        Returns:
            Category totals with hub, sales and difference rounded to cents
        """
        hub_totals = self._sum_by_category(hub)
        sales_totals = self._sum_by_category(sales)

        defaults = list(dict.fromkeys(self.config.default_categories))
        extras = sorted((set(hub_totals) | set(sales_totals)) - set(defaults))

        totals = [
            CategoryTotal(
                category=category,
                hub_total=round_currency(hub_totals.get(category, Decimal("0"))),
                sales_total=round_currency(sales_totals.get(category, Decimal("0"))),
            )
            for category in defaults + extras
        ]

        logger.debug(
            f"Aggregated {len(totals)} categories ({len(extras)} beyond the defaults)"
        )
        return totals

    def _sum_by_category(
        self, transactions: Iterable[NormalizedTransaction]
    ) -> dict[str, Decimal]:
        sums: dict[str, Decimal] = {}
        for txn in transactions:
            category = self.canonical_category(txn.label)
            if category is None:
                continue
            sums[category] = sums.get(category, Decimal("0")) + txn.net_amount
        return sums
