from datetime import date
from decimal import Decimal

import pytest

from hub_sales_recon.config import build_config
from hub_sales_recon.matching.engine import ReconciliationEngine
from hub_sales_recon.models.transaction import (
    DatasetOrigin,
    NormalizedTransaction,
    TabularData,
)

HUB_HEADER = [
    "Date",
    "Transaction Source",
    "Customer Name",
    "Total Transaction Amount",
    "Cash Discounting Amount",
    "Card Brand",
]

SALES_HEADER = ["Date Closed", "Name", "Amount"]


@pytest.fixture
def config():
    """Default configuration"""
    return build_config()


@pytest.fixture
def engine(config):
    return ReconciliationEngine(config)


@pytest.fixture
def hub_table():
    """Build a hub table from (date, customer, gross, discount, brand) tuples"""
    def _hub_table(*rows):
        return TabularData(
            header=list(HUB_HEADER),
            rows=[[r[0], "Terminal", r[1], r[2], r[3], r[4]] for r in rows],
        )
    return _hub_table


@pytest.fixture
def sales_table():
    """Build a sales table from (date closed, name, amount) tuples"""
    def _sales_table(*rows):
        return TabularData(header=list(SALES_HEADER), rows=[list(r) for r in rows])
    return _sales_table


@pytest.fixture
def make_txn():
    """Create a NormalizedTransaction with only the matching fields set"""
    def _make_txn(day, label, net, origin=DatasetOrigin.HUB, row_number=1):
        return NormalizedTransaction(
            origin=origin,
            row_number=row_number,
            date=day,
            label=label,
            category=label,
            gross_amount=Decimal(net),
            net_amount=Decimal(net),
        )
    return _make_txn


@pytest.fixture
def may_first():
    return date(2024, 5, 1)


@pytest.fixture
def may_second():
    return date(2024, 5, 2)
