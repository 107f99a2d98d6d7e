from decimal import Decimal

import pytest

from hub_sales_recon.matching.strategies import (
    DirectionalMatcher,
    ToleranceMatchPredicate,
    labels_overlap,
)
from hub_sales_recon.models.transaction import DatasetOrigin

SALES = DatasetOrigin.SALES


@pytest.fixture
def predicate():
    return ToleranceMatchPredicate(amount_epsilon=Decimal("0.01"))


@pytest.mark.parametrize("left, right, expected", [
    ("Visa", "Visa", True),
    ("Visa", "visa debit", True),
    ("VISA DEBIT", "visa", True),
    ("Mastercard", "Master", True),
    ("Mastercard", "Visa", False),
    ("", "Visa", False),
    ("Visa", "   ", False),
])
def test_labels_overlap(left, right, expected):
    assert labels_overlap(left, right) is expected


def test_predicate_matches_same_day_label_and_amount(predicate, make_txn, may_first):
    hub = make_txn(may_first, "Visa", "122.84")
    sales = make_txn(may_first, "visa", "122.845", origin=SALES)

    assert predicate.matches(hub, sales)
    assert predicate.matches(sales, hub)


def test_amount_tolerance_is_strict(predicate, make_txn, may_first):
    hub = make_txn(may_first, "Visa", "122.84")
    sales = make_txn(may_first, "Visa", "122.85", origin=SALES)

    assert not predicate.matches(hub, sales)


def test_predicate_rejects_other_day(predicate, make_txn, may_first, may_second):
    hub = make_txn(may_first, "Visa", "10.00")
    sales = make_txn(may_second, "Visa", "10.00", origin=SALES)

    assert not predicate.matches(hub, sales)


def test_unknown_dates_never_match(predicate, make_txn):
    hub = make_txn(None, "Visa", "10.00")
    sales = make_txn(None, "Visa", "10.00", origin=SALES)

    assert not predicate.matches(hub, sales)


def test_predicate_rejects_disjoint_labels(predicate, make_txn, may_first):
    hub = make_txn(may_first, "Mastercard", "10.00")
    sales = make_txn(may_first, "Visa", "10.00", origin=SALES)

    assert not predicate.matches(hub, sales)


def test_count_matches_in_both_directions(predicate, make_txn, may_first, may_second):
    hub = [make_txn(may_first, "Visa", "10.00")]
    sales = [
        make_txn(may_first, "Visa", "10.00", origin=SALES),
        make_txn(may_first, "Visa", "10.00", origin=SALES),
        make_txn(may_second, "Visa", "10.00", origin=SALES),
    ]
    matcher = DirectionalMatcher(predicate)

    assert matcher.count_matches(hub, sales) == [2]
    assert matcher.count_matches(sales, hub) == [1, 1, 0]


def test_candidates_returns_positions(predicate, make_txn, may_first):
    hub = make_txn(may_first, "Visa", "10.00")
    sales = [
        make_txn(may_first, "Discover", "10.00", origin=SALES),
        make_txn(may_first, "Visa", "10.00", origin=SALES),
    ]
    matcher = DirectionalMatcher(predicate)

    assert matcher.candidates(hub, sales) == [1]
    assert matcher.candidates(hub, sales, matcher.index(sales)) == [1]


def test_date_bucketing_preserves_counts(predicate, make_txn, may_first, may_second):
    hub = [
        make_txn(may_first, "Visa", "10.00"),
        make_txn(may_first, "Visa Debit", "10.00"),
        make_txn(may_second, "Mastercard", "5.00"),
        make_txn(None, "Visa", "10.00"),
    ]
    sales = [
        make_txn(may_first, "Visa", "10.00", origin=SALES),
        make_txn(may_second, "Master", "5.004", origin=SALES),
        make_txn(may_second, "Visa", "10.00", origin=SALES),
        make_txn(None, "Visa", "10.00", origin=SALES),
    ]
    bucketed = DirectionalMatcher(predicate, bucket_by_date=True)
    full_scan = DirectionalMatcher(predicate, bucket_by_date=False)

    assert bucketed.count_matches(hub, sales) == full_scan.count_matches(hub, sales)
    assert bucketed.count_matches(sales, hub) == full_scan.count_matches(sales, hub)
    assert bucketed.count_matches(hub, sales) == [1, 1, 1, 0]
    assert full_scan.index(sales) is None


def test_empty_opposite_side_gives_zero_counts(predicate, make_txn, may_first):
    matcher = DirectionalMatcher(predicate)
    assert matcher.count_matches([make_txn(may_first, "Visa", "1.00")], []) == [0]
