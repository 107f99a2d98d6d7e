"""
Excel report generator for reconciliation results.
Writes the composed result table plus a run summary sheet.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.transaction import ReconciliationResult, ReconciliationSummary
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
DISCREPANCY_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
TOTAL_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
AMOUNT_FORMAT = "#,##0.00"


class ExcelReportGenerator:
    """Generates the Excel reconciliation report."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.output_config = config.output

    def generate_report(
        self,
        result: ReconciliationResult,
        output_path: Path,
        hub_filename: str = "",
        sales_filename: str = "",
    ) -> Path:
        """
        Write the result table and summary to an .xlsx workbook.

        Args:
            result: Reconciliation result to write
            output_path: Path for output file
            hub_filename: Hub file name shown on the summary sheet
            sales_filename: Sales file name shown on the summary sheet

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_result_sheet(wb, result)
        self._create_summary_sheet(wb, result.summary, hub_filename, sales_filename)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            logger.error(f"Failed to save report: {e}")
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_result_sheet(self, wb: Workbook, result: ReconciliationResult) -> None:
        """Write the output table: discrepancies, separator and category totals."""
        ws = wb.create_sheet(self.output_config.sheet_name)

        discrepancy_end = 1 + len(result.discrepancies)
        summary_header_row = discrepancy_end + 2
        total_row = len(result.rows)

        for row_num, row in enumerate(result.rows, start=1):
            for col, value in enumerate(row, start=1):
                cell = ws.cell(row=row_num, column=col, value=self._cell_value(value))
                if isinstance(value, Decimal):
                    cell.number_format = AMOUNT_FORMAT

                if row_num in (1, summary_header_row):
                    if value != "":
                        cell.fill = HEADER_FILL
                        cell.font = HEADER_FONT
                        cell.border = THIN_BORDER
                elif 1 < row_num <= discrepancy_end:
                    cell.fill = DISCREPANCY_FILL
                    cell.border = THIN_BORDER
                elif row_num == total_row:
                    cell.font = TOTAL_FONT

        # Highlight categories whose totals disagree
        for offset, total in enumerate(result.category_totals, start=1):
            if total.difference != 0:
                ws.cell(row=summary_header_row + offset, column=4).fill = VARIANCE_FILL

        self._auto_fit_columns(ws)

    def _create_summary_sheet(
        self,
        wb: Workbook,
        summary: ReconciliationSummary,
        hub_filename: str,
        sales_filename: str,
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet("Summary")

        ws["A1"] = "Hub / Sales Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        info = [
            ("Hub File:", hub_filename or "-"),
            ("Sales File:", sales_filename or "-"),
            ("Config File:", self.config.config_file_path or "Default"),
            ("Hub Transactions:", summary.hub_row_count),
            ("Sales Transactions:", summary.sales_row_count),
            ("Confirmed Matches:", summary.confirmed_count),
            ("Discrepancies:", summary.discrepancy_count),
            ("Hub Match Rate:", f"{summary.match_rate_hub:.1f}%"),
            ("Hub Total:", float(summary.hub_grand_total)),
            ("Sales Total:", float(summary.sales_grand_total)),
            ("Difference:", float(summary.grand_difference)),
            (
                "Sales Matching:",
                "Enabled"
                if summary.sales_matching_enabled
                else f"Disabled (missing: {', '.join(summary.missing_sales_columns)})",
            ),
        ]

        for i, (label, value) in enumerate(info, start=3):
            ws[f"A{i}"] = label
            ws[f"A{i}"].font = Font(bold=True)
            ws[f"B{i}"] = value
            if isinstance(value, float):
                ws[f"B{i}"].number_format = AMOUNT_FORMAT

        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 40

    @staticmethod
    def _cell_value(value: Any) -> Any:
        return float(value) if isinstance(value, Decimal) else value

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None and cell.value != "":
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
