"""Count-parity confirmation of directional matches."""

from typing import Sequence
import logging

from ..models.transaction import DiscrepancyRecord, NormalizedTransaction
from .strategies import DirectionalMatcher

logger = logging.getLogger(__name__)


class ReconciliationFilter:
    """
    Separates confirmed hub transactions from discrepancies.

    A hub transaction is confirmed when at least one sales transaction both
    matches it and found exactly as many hub candidates as the hub
    transaction found sales candidates. Requiring the two directional counts
    to agree rejects links that exist only because a short label overlaps
    several longer ones.
    """

    def __init__(self, matcher: DirectionalMatcher):
        self.matcher = matcher

    def confirmation_counts(
        self,
        hub: Sequence[NormalizedTransaction],
        sales: Sequence[NormalizedTransaction],
        hub_counts: Sequence[int],
        sales_counts: Sequence[int],
    ) -> list[int]:
        """
        Number of confirming sales transactions for every hub transaction.

        Args:
            hub: Hub transactions
            sales: Sales transactions
            hub_counts: Sales candidates found for each hub transaction
            sales_counts: Hub candidates found for each sales transaction

        Returns:
            One count per hub transaction, in hub order
        """
        if len(hub) != len(hub_counts) or len(sales) != len(sales_counts):
            raise ValueError("Directional counts must align with their transactions")

        index = self.matcher.index(sales)
        confirmations: list[int] = []
        for txn, count in zip(hub, hub_counts):
            if count == 0:
                confirmations.append(0)
                continue
            confirmations.append(
                sum(
                    1
                    for position in self.matcher.candidates(txn, sales, index)
                    if sales_counts[position] == count
                )
            )
        return confirmations

    def discrepancies(
        self,
        hub: Sequence[NormalizedTransaction],
        sales: Sequence[NormalizedTransaction],
        hub_counts: Sequence[int],
        sales_counts: Sequence[int],
    ) -> tuple[list[DiscrepancyRecord], int]:
        """
        Hub transactions that fail mutual confirmation, in hub order.

        Returns:
            Tuple of (discrepancy records, number of confirmed hub transactions)
        """
        confirmations = self.confirmation_counts(hub, sales, hub_counts, sales_counts)

        records = [
            DiscrepancyRecord(transaction=txn, candidate_count=count, confirmation_count=0)
            for txn, count, confirmed in zip(hub, hub_counts, confirmations)
            if confirmed == 0
        ]
        confirmed_count = len(hub) - len(records)

        ambiguous = sum(
            1 for count, confirmed in zip(hub_counts, confirmations) if count and not confirmed
        )
        if ambiguous:
            logger.debug(
                f"{ambiguous} hub transactions had candidates but no count-parity partner"
            )

        return records, confirmed_count
