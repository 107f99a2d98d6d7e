"""Data models for reconciliation transactions and results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, Sequence

Cell = Any
Row = list[Cell]


class DatasetOrigin(Enum):
    """Dataset a transaction was read from."""

    HUB = "hub"  # Payment-terminal export being reconciled
    SALES = "sales"  # Settlement / sales export used for confirmation


@dataclass(frozen=True)
class TabularData:
    """An already-parsed table: one header row plus data rows of scalar cells."""

    header: list[Cell]
    rows: list[Row] = field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Cell]]) -> "TabularData":
        """Split a header-first row list into header and data rows."""
        if not rows:
            return cls(header=[], rows=[])
        return cls(header=list(rows[0]), rows=[list(r) for r in rows[1:]])

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ColumnMap:
    """Canonical field name -> resolved column index for one dataset."""

    indices: dict[str, int] = field(default_factory=dict)

    def index_of(self, field_name: str) -> Optional[int]:
        return self.indices.get(field_name)

    def has(self, field_name: str) -> bool:
        return field_name in self.indices

    def missing(self, field_names: Sequence[str]) -> list[str]:
        """Required fields that no header resolved to."""
        return [name for name in field_names if name not in self.indices]


@dataclass
class NormalizedTransaction:
    """
    Common transaction shape both datasets are normalized into for matching.

    Missing source columns yield empty strings and zero amounts rather than
    None, so matching code never has to guard individual fields.
    """

    # Source dataset and 1-based data row number (header excluded)
    origin: DatasetOrigin
    row_number: int

    # Calendar day, None when the cell was blank or unparseable
    date: Optional[date]

    # Label used for the containment check (cleaned category, or counterparty)
    label: str = ""

    # Uppercased free-text name
    counterparty: str = ""

    # Cleaned category label as displayed
    category: str = ""

    gross_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")

    # Original date cell, shown when the date could not be parsed
    raw_date: Cell = ""

    @property
    def date_key(self) -> str:
        """Date formatted as YYYY-MM-DD for comparison, or "" if unknown."""
        return self.date.strftime("%Y-%m-%d") if self.date else ""


@dataclass(frozen=True)
class DiscrepancyRecord:
    """A hub transaction without a mutually confirmed sales counterpart."""

    transaction: NormalizedTransaction

    # Sales candidates satisfying the match predicate
    candidate_count: int

    # Candidates whose own count agrees with candidate_count (0 for discrepancies)
    confirmation_count: int = 0

    def display_fields(self, date_format: str = "%m/%d/%Y") -> Row:
        """Date, counterparty, gross, discount, category and net, in that order."""
        txn = self.transaction
        if txn.date is not None:
            display_date: Cell = txn.date.strftime(date_format)
        else:
            display_date = "" if txn.raw_date is None else str(txn.raw_date).strip()

        return [
            display_date,
            txn.counterparty,
            round_currency(txn.gross_amount),
            round_currency(txn.discount_amount),
            txn.category,
            round_currency(txn.net_amount),
        ]


@dataclass(frozen=True)
class CategoryTotal:
    """Hub vs sales totals for one payment category."""

    category: str
    hub_total: Decimal
    sales_total: Decimal

    @property
    def difference(self) -> Decimal:
        return round_currency(self.hub_total - self.sales_total)


@dataclass
class ReconciliationSummary:
    """Counts and totals describing one reconciliation run."""

    hub_row_count: int
    sales_row_count: int
    confirmed_count: int
    discrepancy_count: int
    category_count: int
    sales_matching_enabled: bool
    hub_grand_total: Decimal = Decimal("0.00")
    sales_grand_total: Decimal = Decimal("0.00")
    missing_sales_columns: list[str] = field(default_factory=list)

    @property
    def grand_difference(self) -> Decimal:
        return round_currency(self.hub_grand_total - self.sales_grand_total)

    @property
    def match_rate_hub(self) -> float:
        """Percentage of hub transactions confirmed against the sales dataset."""
        if self.hub_row_count == 0:
            return 0.0
        return (self.confirmed_count / self.hub_row_count) * 100


@dataclass
class ReconciliationResult:
    """Everything one run produces; rows is the composed output table."""

    rows: list[Row]
    discrepancies: list[DiscrepancyRecord]
    category_totals: list[CategoryTotal]
    summary: ReconciliationSummary


CENT = Decimal("0.01")


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
