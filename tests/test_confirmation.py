from decimal import Decimal

import pytest

from hub_sales_recon.matching.confirmation import ReconciliationFilter
from hub_sales_recon.matching.strategies import DirectionalMatcher, ToleranceMatchPredicate
from hub_sales_recon.models.transaction import DatasetOrigin

SALES = DatasetOrigin.SALES


@pytest.fixture
def matcher():
    return DirectionalMatcher(ToleranceMatchPredicate(Decimal("0.01")))


@pytest.fixture
def run_filter(matcher):
    """Run both directional passes and the filter"""
    def _run(hub, sales):
        hub_counts = matcher.count_matches(hub, sales)
        sales_counts = matcher.count_matches(sales, hub)
        return ReconciliationFilter(matcher).discrepancies(
            hub, sales, hub_counts, sales_counts
        )
    return _run


def test_mutual_single_match_is_confirmed(run_filter, make_txn, may_first):
    hub = [make_txn(may_first, "Visa", "122.84")]
    sales = [make_txn(may_first, "Visa", "122.84", origin=SALES)]

    discrepancies, confirmed = run_filter(hub, sales)

    assert discrepancies == []
    assert confirmed == 1


def test_unmatched_hub_record_is_a_discrepancy(run_filter, make_txn, may_first, may_second):
    hub = [make_txn(may_first, "Mastercard", "44.61")]
    sales = [make_txn(may_second, "Mastercard", "44.61", origin=SALES)]

    discrepancies, confirmed = run_filter(hub, sales)

    assert [d.transaction for d in discrepancies] == hub
    assert discrepancies[0].candidate_count == 0
    assert confirmed == 0


def test_partial_label_overlap_fails_count_parity(run_filter, make_txn, may_first):
    """One sales "Visa" row matches two hub rows, so neither hub row is confirmed"""
    hub = [
        make_txn(may_first, "Visa", "10.00", row_number=1),
        make_txn(may_first, "Visa Debit", "10.00", row_number=2),
    ]
    sales = [make_txn(may_first, "Visa", "10.00", origin=SALES)]

    discrepancies, confirmed = run_filter(hub, sales)

    assert [d.transaction.row_number for d in discrepancies] == [1, 2]
    assert [d.candidate_count for d in discrepancies] == [1, 1]
    assert confirmed == 0


def test_equal_duplicates_on_both_sides_are_confirmed(run_filter, make_txn, may_first):
    hub = [make_txn(may_first, "Visa", "10.00"), make_txn(may_first, "Visa", "10.00")]
    sales = [
        make_txn(may_first, "Visa", "10.00", origin=SALES),
        make_txn(may_first, "Visa", "10.00", origin=SALES),
    ]

    discrepancies, confirmed = run_filter(hub, sales)

    assert discrepancies == []
    assert confirmed == 2


def test_unbalanced_duplicates_report_every_hub_copy(run_filter, make_txn, may_first):
    hub = [make_txn(may_first, "Visa", "10.00"), make_txn(may_first, "Visa", "10.00")]
    sales = [make_txn(may_first, "Visa", "10.00", origin=SALES)]

    discrepancies, confirmed = run_filter(hub, sales)

    assert len(discrepancies) == 2
    assert confirmed == 0


def test_one_parity_partner_is_enough(run_filter, make_txn, may_first):
    """Hub row with one candidate is confirmed by the sales row that also has one"""
    hub = [
        make_txn(may_first, "Visa", "10.00", row_number=1),
        make_txn(may_first, "Discover", "25.00", row_number=2),
    ]
    sales = [
        make_txn(may_first, "Visa", "10.00", origin=SALES),
        make_txn(may_first, "Discover", "25.00", origin=SALES),
    ]

    discrepancies, confirmed = run_filter(hub, sales)

    assert discrepancies == []
    assert confirmed == 2


def test_discrepancies_keep_hub_order(run_filter, make_txn, may_first, may_second):
    hub = [
        make_txn(may_second, "Discover", "3.00", row_number=1),
        make_txn(may_first, "Visa", "10.00", row_number=2),
        make_txn(may_first, "Amex", "7.00", row_number=3),
    ]
    sales = [make_txn(may_first, "Visa", "10.00", origin=SALES)]

    discrepancies, _ = run_filter(hub, sales)

    assert [d.transaction.row_number for d in discrepancies] == [1, 3]


def test_misaligned_counts_raise(matcher, make_txn, may_first):
    hub = [make_txn(may_first, "Visa", "10.00")]

    with pytest.raises(ValueError):
        ReconciliationFilter(matcher).confirmation_counts(hub, [], [], [])
