"""
Reconciliation engine for hub and sales transaction exports.
Normalizes both tables, runs the two directional matching passes, keeps the
hub transactions that fail count-parity confirmation and composes the
output table with the per-category totals.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from ..aggregation.category_totals import CategoryAggregator
from ..config import ReconConfig, build_config
from ..models.transaction import (
    DatasetOrigin,
    NormalizedTransaction,
    ReconciliationResult,
    ReconciliationSummary,
    Row,
    TabularData,
)
from ..parsers.normalizer import TransactionNormalizer
from ..reports.composer import ResultComposer
from ..utils.exceptions import RowLimitExceededError
from .confirmation import ReconciliationFilter
from .strategies import DirectionalMatcher, ToleranceMatchPredicate

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Main reconciliation engine that orchestrates the matching process.

    The engine holds configuration only. Each call to :meth:`reconcile`
    builds its own intermediate state, so one engine can serve many runs
    and identical inputs always give identical output.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
        """
        self.config = config

        self.hub_normalizer = TransactionNormalizer(
            config.hub, config.labels, DatasetOrigin.HUB
        )
        self.sales_normalizer = TransactionNormalizer(
            config.sales, config.labels, DatasetOrigin.SALES
        )

        predicate = ToleranceMatchPredicate(
            amount_epsilon=Decimal(str(config.matching.amount_epsilon))
        )
        self.matcher = DirectionalMatcher(
            predicate, bucket_by_date=config.matching.bucket_by_date
        )
        self.filter = ReconciliationFilter(self.matcher)
        self.aggregator = CategoryAggregator(config.categories)
        self.composer = ResultComposer(config.output)

    def reconcile(
        self,
        hub_table: TabularData,
        sales_table: TabularData,
    ) -> ReconciliationResult:
        """
        Reconcile a hub export against a sales export.

        Args:
            hub_table: Parsed hub (payment terminal) table
            sales_table: Parsed sales (settlement) table

        Returns:
            Reconciliation result with the composed output rows

        Raises:
            RowLimitExceededError: If either table exceeds matching.max_rows
        """
        self._check_size(hub_table, self.config.hub.name)
        self._check_size(sales_table, self.config.sales.name)

        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(hub_table)} hub rows, "
            f"{len(sales_table)} sales rows"
        )

        hub_txns = self.hub_normalizer.normalize(hub_table)

        sales_columns = self.sales_normalizer.resolve_columns(sales_table.header)
        missing = self.sales_normalizer.missing_required(sales_columns)
        sales_matching_enabled = not missing
        if sales_matching_enabled:
            sales_txns = self.sales_normalizer.normalize(sales_table, sales_columns)
        else:
            logger.warning(
                f"Sales columns not found ({', '.join(missing)}); "
                f"matching disabled, every hub transaction will be reported"
            )
            sales_txns = []

        # Two directional passes
        hub_counts = self.matcher.count_matches(hub_txns, sales_txns)
        sales_counts = self.matcher.count_matches(sales_txns, hub_txns)
        logger.debug(
            f"Directional passes: {sum(1 for c in hub_counts if c)} hub and "
            f"{sum(1 for c in sales_counts if c)} sales transactions have candidates"
        )

        discrepancies, confirmed_count = self.filter.discrepancies(
            hub_txns, sales_txns, hub_counts, sales_counts
        )

        category_totals = self.aggregator.aggregate(hub_txns, sales_txns)
        rows = self.composer.compose(discrepancies, category_totals)
        grand_total = self.composer.total_row(category_totals)

        summary = ReconciliationSummary(
            hub_row_count=len(hub_txns),
            sales_row_count=len(sales_txns),
            confirmed_count=confirmed_count,
            discrepancy_count=len(discrepancies),
            category_count=len(category_totals),
            sales_matching_enabled=sales_matching_enabled,
            hub_grand_total=grand_total[1],
            sales_grand_total=grand_total[2],
            missing_sales_columns=missing,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {confirmed_count} confirmed, "
            f"{len(discrepancies)} discrepancies, {len(category_totals)} categories"
        )

        return ReconciliationResult(
            rows=rows,
            discrepancies=discrepancies,
            category_totals=category_totals,
            summary=summary,
        )

    def normalize_table(
        self, table: TabularData, origin: DatasetOrigin
    ) -> list[NormalizedTransaction]:
        """Normalize one table with the dataset's own rules (used for inspection)."""
        normalizer = (
            self.hub_normalizer if origin is DatasetOrigin.HUB else self.sales_normalizer
        )
        return normalizer.normalize(table)

    def _check_size(self, table: TabularData, dataset: str) -> None:
        max_rows = self.config.matching.max_rows
        if len(table) > max_rows:
            logger.error(f"{dataset} dataset too large: {len(table)} > {max_rows} rows")
            raise RowLimitExceededError(dataset, len(table), max_rows)


def reconcile_tables(
    hub_table: TabularData,
    sales_table: TabularData,
    config: Optional[ReconConfig] = None,
) -> list[Row]:
    """
    Reconcile two parsed tables and return only the output rows.

    Args:
        hub_table: Parsed hub table
        sales_table: Parsed sales table
        config: Configuration (defaults when omitted)

    Returns:
        The ordered output table
    """
    engine = ReconciliationEngine(config or build_config())
    return engine.reconcile(hub_table, sales_table).rows
