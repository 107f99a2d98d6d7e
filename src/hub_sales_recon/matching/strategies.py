"""
Matching strategies for transaction reconciliation.
A predicate decides whether two transactions from opposite datasets are
plausible counterparts; the directional matcher counts them.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..models.transaction import NormalizedTransaction


class MatchPredicate(ABC):
    """Abstract base class for match predicates."""

    @abstractmethod
    def matches(
        self,
        txn: NormalizedTransaction,
        candidate: NormalizedTransaction,
    ) -> bool:
        """
        Decide whether a candidate from the opposite dataset matches.

        Implementations must be symmetric: swapping the arguments never
        changes the outcome, since both directional passes share one
        predicate.

        Args:
            txn: Transaction being matched
            candidate: Transaction from the opposite dataset

        Returns:
            True if the pair is a plausible match
        """
        pass

    def requires_same_date(self) -> bool:
        """Whether matching pairs always share a date key (enables date bucketing)."""
        return False


class ToleranceMatchPredicate(MatchPredicate):
    """
    Same-day, label-containment, amount-within-epsilon predicate.

    Labels match when either contains the other, case-insensitively, so a
    short token such as "Visa" matches "Visa Debit" and vice versa. Empty
    labels and unknown dates never match.
    """

    def __init__(self, amount_epsilon: Decimal = Decimal("0.01")):
        """
        Initialize with the amount tolerance.

        Args:
            amount_epsilon: Differences strictly below this are equal amounts
        """
        self.amount_epsilon = amount_epsilon

    def matches(
        self,
        txn: NormalizedTransaction,
        candidate: NormalizedTransaction,
    ) -> bool:
        if not txn.date_key or txn.date_key != candidate.date_key:
            return False
        if not labels_overlap(txn.label, candidate.label):
            return False
        return abs(txn.net_amount - candidate.net_amount) < self.amount_epsilon

    def requires_same_date(self) -> bool:
        return True


def labels_overlap(left: str, right: str) -> bool:
    """Bidirectional case-insensitive containment; empty labels never overlap."""
    left = left.strip().lower()
    right = right.strip().lower()
    if not left or not right:
        return False
    return left in right or right in left


class DirectionalMatcher:
    """
    Counts, for each transaction on one side, the plausible counterparts on
    the other side.

    The scan is O(len(side) x len(opposite)). When the predicate requires
    equal dates the opposite side is bucketed by date key first, which
    prunes comparisons without changing any count.
    """

    def __init__(self, predicate: MatchPredicate, bucket_by_date: bool = True):
        self.predicate = predicate
        self.bucket_by_date = bucket_by_date and predicate.requires_same_date()

    def count_matches(
        self,
        side: Sequence[NormalizedTransaction],
        opposite: Sequence[NormalizedTransaction],
    ) -> list[int]:
        """
        Candidate counts for every transaction in ``side``, in input order.

        Args:
            side: Transactions being matched
            opposite: Transactions from the other dataset

        Returns:
            One non-negative count per transaction in ``side``
        """
        index = self.index(opposite)
        return [len(self.candidates(txn, opposite, index)) for txn in side]

    def candidates(
        self,
        txn: NormalizedTransaction,
        opposite: Sequence[NormalizedTransaction],
        index: Optional[dict[str, list[int]]] = None,
    ) -> list[int]:
        """
        Positions in ``opposite`` of every record matching ``txn``.

        Args:
            txn: Transaction being matched
            opposite: Transactions from the other dataset
            index: Date-key index of ``opposite`` from :meth:`index`, if any
        """
        if index is not None:
            positions: Iterable[int] = index.get(txn.date_key, ())
        else:
            positions = range(len(opposite))
        return [
            position
            for position in positions
            if self.predicate.matches(txn, opposite[position])
        ]

    def index(
        self, transactions: Sequence[NormalizedTransaction]
    ) -> Optional[dict[str, list[int]]]:
        """Positions grouped by date key, or None when bucketing is off."""
        if not self.bucket_by_date:
            return None
        buckets: dict[str, list[int]] = defaultdict(list)
        for position, txn in enumerate(transactions):
            if txn.date_key:
                buckets[txn.date_key].append(position)
        return dict(buckets)
