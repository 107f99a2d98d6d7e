"""Assembly of the ordered reconciliation output table."""

from decimal import Decimal
from typing import Sequence

from ..config import OutputConfig
from ..models.transaction import CategoryTotal, DiscrepancyRecord, Row, round_currency


class ResultComposer:
    """
    Lays out discrepancies and category totals as one row table.

    Layout: detail header, one row per discrepancy, a blank separator,
    summary header, one row per category and a closing total row. Rows are
    padded with "" to a common width so the table stays rectangular.
    """

    def __init__(self, config: OutputConfig):
        self.config = config
        self.width = max(len(config.detail_headers), len(config.summary_headers))

    def compose(
        self,
        discrepancies: Sequence[DiscrepancyRecord],
        category_totals: Sequence[CategoryTotal],
    ) -> list[Row]:
        rows: list[Row] = [self._pad(self.config.detail_headers)]

        for record in discrepancies:
            rows.append(self._pad(record.display_fields(self.config.display_date_format)))

        rows.append(self._pad([]))
        rows.append(self._pad(self.config.summary_headers))

        for total in category_totals:
            rows.append(
                self._pad(
                    [total.category, total.hub_total, total.sales_total, total.difference]
                )
            )

        rows.append(self._pad(self.total_row(category_totals)))
        return rows

    def total_row(self, category_totals: Sequence[CategoryTotal]) -> Row:
        """Grand totals across every category row."""
        hub_total = round_currency(sum((t.hub_total for t in category_totals), Decimal("0")))
        sales_total = round_currency(
            sum((t.sales_total for t in category_totals), Decimal("0"))
        )
        return [
            self.config.total_label,
            hub_total,
            sales_total,
            round_currency(hub_total - sales_total),
        ]

    def _pad(self, cells: Sequence) -> Row:
        row = list(cells)
        return row + [""] * (self.width - len(row))
