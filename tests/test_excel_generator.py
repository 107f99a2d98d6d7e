import pytest
from openpyxl import load_workbook

from hub_sales_recon.reports.excel_generator import ExcelReportGenerator
from hub_sales_recon.utils.exceptions import ReportGenerationError


@pytest.fixture
def result(engine, hub_table, sales_table):
    return engine.reconcile(
        hub_table(
            ("05/01/2024", "Jane Doe", "125.99", "3.15", "Visa"),
            ("05/01/2024", "John Roe", "45.75", "1.14", "Mastercard"),
        ),
        sales_table(("05/01/2024", "Visa", "122.84"), ("05/02/2024", "Discover", "10.50")),
    )


def test_report_contains_result_table(config, result, tmp_path):
    path = ExcelReportGenerator(config).generate_report(
        result, tmp_path / "out.xlsx", hub_filename="hub.csv", sales_filename="sales.csv"
    )

    wb = load_workbook(path)
    assert wb.sheetnames == ["Reconciliation", "Summary"]

    ws = wb["Reconciliation"]
    assert ws.max_row == len(result.rows)
    assert ws["A1"].value == "Date"
    assert ws["B2"].value == "JOHN ROE"
    assert ws["F2"].value == pytest.approx(44.61)
    assert ws["A4"].value == "Category"
    assert ws.cell(row=ws.max_row, column=1).value == "Total"
    assert ws.cell(row=ws.max_row, column=2).value == pytest.approx(167.45)


def test_summary_sheet(config, result, tmp_path):
    path = ExcelReportGenerator(config).generate_report(
        result, tmp_path / "out.xlsx", hub_filename="hub.csv"
    )

    ws = load_workbook(path)["Summary"]
    values = {ws[f"A{i}"].value: ws[f"B{i}"].value for i in range(3, ws.max_row + 1)}

    assert values["Hub File:"] == "hub.csv"
    assert values["Sales File:"] == "-"
    assert values["Discrepancies:"] == 1
    assert values["Confirmed Matches:"] == 1
    assert values["Sales Matching:"] == "Enabled"


def test_unwritable_path_raises(config, result, tmp_path):
    with pytest.raises(ReportGenerationError):
        ExcelReportGenerator(config).generate_report(result, tmp_path)
