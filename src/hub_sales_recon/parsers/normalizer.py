"""
Row normalization for hub and sales exports.
Resolves configured column aliases and converts raw cells into
NormalizedTransaction records.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging
import math
import re

import pandas as pd

from ..config import CANONICAL_FIELDS, DatasetConfig, LabelRules
from ..models.transaction import (
    ColumnMap,
    DatasetOrigin,
    NormalizedTransaction,
    TabularData,
)

logger = logging.getLogger(__name__)

AMOUNT_STRIP_PATTERN = re.compile(r"[^0-9.\-]")
WHITESPACE_PATTERN = re.compile(r"\s+")
FOUR_DIGIT_YEAR_PATTERN = re.compile(r"\d{4}")

# Excel day 0; serials are counted from here (1900 leap-year bug included)
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_SERIAL_MIN = 1
EXCEL_SERIAL_MAX = 2958465  # 9999-12-31


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return value is pd.NaT


def parse_amount(value: Any) -> Decimal:
    """
    Parse an amount cell, degrading to zero.

    Strings keep only digits, "." and "-" before parsing, so currency
    symbols, thousands separators and stray text are dropped.
    """
    if _is_blank(value) or isinstance(value, bool):
        return Decimal("0")

    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isinf(value):
            return Decimal("0")
        return Decimal(str(value))

    cleaned = AMOUNT_STRIP_PATTERN.sub("", str(value))
    try:
        return Decimal(cleaned) if cleaned else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


class TransactionNormalizer:
    """
    Converts one dataset's header and rows into normalized transactions.

    A normalizer is bound to a dataset configuration (column aliases, header
    matching mode, date formats) and the shared label rules. It never raises
    on cell contents: bad amounts become zero and bad dates become None.
    """

    def __init__(
        self,
        dataset_config: DatasetConfig,
        label_rules: LabelRules,
        origin: DatasetOrigin,
    ):
        """
        Initialize the normalizer.

        Args:
            dataset_config: Column aliases and parsing rules for the dataset
            label_rules: Label and counterparty normalization rules
            origin: Which dataset the produced records belong to
        """
        self.dataset_config = dataset_config
        self.label_rules = label_rules
        self.origin = origin

        self._aliases = {
            key.strip().lower(): target for key, target in label_rules.aliases.items()
        }
        self._cardholder_variants = {
            self._collapse(v).upper() for v in label_rules.cardholder_variants
        }

    def resolve_columns(self, header: list[Any]) -> ColumnMap:
        """
        Build the ColumnMap for a header row.

        The first alias (in configured order) found in the header wins for
        each canonical field.
        """
        exact = self.dataset_config.header_match == "exact"
        cells = [
            self._header_key(cell, exact) if isinstance(cell, str) else None
            for cell in header
        ]

        indices: dict[str, int] = {}
        for field_name in CANONICAL_FIELDS:
            for alias in self.dataset_config.aliases_for(field_name):
                key = self._header_key(alias, exact)
                if key in cells:
                    indices[field_name] = cells.index(key)
                    break

        unresolved = [f for f in CANONICAL_FIELDS if f not in indices]
        if unresolved:
            logger.debug(
                f"{self.dataset_config.name}: no column found for {', '.join(unresolved)}"
            )

        return ColumnMap(indices=indices)

    def missing_required(self, column_map: ColumnMap) -> list[str]:
        """Required fields the header did not provide."""
        return column_map.missing(self.dataset_config.required_columns)

    def normalize(
        self, table: TabularData, column_map: Optional[ColumnMap] = None
    ) -> list[NormalizedTransaction]:
        """
        Normalize every non-blank data row of a table.

        Args:
            table: Header and data rows
            column_map: Pre-resolved columns (resolved from the header if omitted)

        Returns:
            Normalized transactions in input order
        """
        if column_map is None:
            column_map = self.resolve_columns(table.header)

        transactions: list[NormalizedTransaction] = []
        skipped = 0

        for row_number, row in enumerate(table.rows, start=1):
            if not row or all(_is_blank(cell) for cell in row):
                skipped += 1
                continue
            transactions.append(self.normalize_row(row, row_number, column_map))

        logger.debug(
            f"{self.dataset_config.name}: normalized {len(transactions)} rows, "
            f"skipped {skipped} blank rows"
        )
        return transactions

    def normalize_row(
        self, row: list[Any], row_number: int, column_map: ColumnMap
    ) -> NormalizedTransaction:
        """Convert one raw row into a NormalizedTransaction."""

        def cell(field_name: str) -> Any:
            index = column_map.index_of(field_name)
            if index is None or index >= len(row):
                return ""
            value = row[index]
            return "" if _is_blank(value) else value

        raw_date = cell("date")
        gross = parse_amount(cell("gross_amount"))
        discount = (
            parse_amount(cell("discount_amount"))
            if column_map.has("discount_amount")
            else Decimal("0")
        )

        counterparty = self.normalize_counterparty(cell("counterparty"))
        category = self.clean_label(cell("category"))
        label = category if column_map.has("category") else counterparty

        return NormalizedTransaction(
            origin=self.origin,
            row_number=row_number,
            date=self.parse_date(raw_date),
            label=label,
            counterparty=counterparty,
            category=category,
            gross_amount=gross,
            discount_amount=discount,
            net_amount=gross - discount,
            raw_date=raw_date,
        )

    def parse_date(self, value: Any) -> Optional[date]:
        """
        Parse a date cell into a calendar day.

        Native dates are kept. Strings are tried against the configured
        formats, then pandas; parsed values are pinned to midday before the
        day is taken so no timezone shift can move them across midnight.
        """
        if _is_blank(value) or isinstance(value, bool):
            return None

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        if isinstance(value, (int, float)):
            if self.dataset_config.excel_serial_dates and (
                EXCEL_SERIAL_MIN <= value <= EXCEL_SERIAL_MAX
            ):
                return EXCEL_EPOCH + timedelta(days=int(value))
            return None

        text = str(value).strip()
        for date_format in self.dataset_config.date_formats:
            try:
                parsed = datetime.strptime(text, date_format)
            except ValueError:
                continue
            return parsed.replace(hour=12, minute=0, second=0, microsecond=0).date()

        # Fall back to pandas for ISO timestamps and other loose formats.
        # Without an explicit year the parser would fill in the current one.
        if not FOUR_DIGIT_YEAR_PATTERN.search(text):
            return None
        try:
            parsed_ts = pd.to_datetime(text)
        except (ValueError, TypeError, OverflowError):
            return None
        if pd.isna(parsed_ts):
            return None
        return parsed_ts.replace(hour=12, minute=0, second=0, microsecond=0).date()

    def clean_label(self, value: Any) -> str:
        """
        Clean a category / card-brand label.

        Drops a configured leading token such as "Credit ", then maps whole
        labels through the alias table ("American" -> "American Express").
        """
        text = self._collapse(str(value)) if not _is_blank(value) else ""
        for prefix in self.label_rules.strip_prefixes:
            if prefix and text.lower().startswith(prefix.lower()):
                text = text[len(prefix):].strip()
                break
        return self._aliases.get(text.lower(), text)

    def normalize_counterparty(self, value: Any) -> str:
        """Uppercase and trim a free-text name, unifying cardholder variants."""
        if _is_blank(value):
            return ""
        name = self._collapse(str(value)).upper()
        if name in self._cardholder_variants:
            return self.label_rules.generic_cardholder
        return name

    @staticmethod
    def _collapse(text: str) -> str:
        return WHITESPACE_PATTERN.sub(" ", text).strip()

    @staticmethod
    def _header_key(text: str, exact: bool) -> str:
        return text if exact else text.strip().lower()
