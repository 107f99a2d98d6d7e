import logging

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from hub_sales_recon.cli import main
from hub_sales_recon.utils.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logging.getLogger(PACKAGE_LOGGER).handlers = []


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def exports(tmp_path):
    hub = tmp_path / "hub.csv"
    hub.write_text(
        "Date,Transaction Source,Customer Name,Total Transaction Amount,"
        "Cash Discounting Amount,Card Brand\n"
        "05/01/2024,Terminal,Jane Doe,125.99,3.15,Credit Visa\n"
        "05/01/2024,Terminal,John Roe,45.75,1.14,Mastercard\n"
    )
    sales = tmp_path / "sales.csv"
    sales.write_text(
        "Date Closed,Name,Amount\n"
        "05/01/2024,Visa,122.84\n"
        "05/02/2024,Mastercard,44.61\n"
    )
    return hub, sales


def test_dry_run_prints_summary(runner, exports, tmp_path):
    hub, sales = exports
    result = runner.invoke(main, ["reconcile", str(hub), str(sales), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Reconciliation Summary" in result.output
    assert "Dry run" in result.output
    assert not list(tmp_path.glob("*.xlsx"))


def test_reconcile_writes_report(runner, exports, tmp_path):
    hub, sales = exports
    output = tmp_path / "report.xlsx"

    result = runner.invoke(main, ["reconcile", str(hub), str(sales), "-o", str(output)])

    assert result.exit_code == 0, result.output
    ws = load_workbook(output)["Reconciliation"]
    assert ws["B2"].value == "JOHN ROE"
    assert ws["A4"].value == "Category"


def test_row_limit_override_fails_cleanly(runner, exports):
    hub, sales = exports
    result = runner.invoke(main, ["reconcile", str(hub), str(sales), "--max-rows", "1"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_config_file_is_applied(runner, exports, tmp_path):
    hub, sales = exports
    config = tmp_path / "client.yaml"
    config.write_text("matching:\n  max_rows: 1\n")

    result = runner.invoke(
        main, ["reconcile", str(hub), str(sales), "-c", str(config), "--dry-run"]
    )

    assert result.exit_code == 1


def test_inspect_sales_export(runner, exports):
    _, sales = exports
    result = runner.invoke(main, ["inspect", str(sales), "--dataset", "sales"])

    assert result.exit_code == 0, result.output
    assert "gross_amount" in result.output
    assert "Total transactions: 2" in result.output


def test_inspect_reports_missing_columns(runner, tmp_path):
    path = tmp_path / "odd.csv"
    path.write_text("When,Who\n05/01/2024,Visa\n")

    result = runner.invoke(main, ["inspect", str(path), "--dataset", "sales"])

    assert result.exit_code == 0, result.output
    assert "Missing required columns" in result.output


def test_init_config(runner, tmp_path):
    output = tmp_path / "config.yaml"
    result = runner.invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0
    assert output.exists()
    assert "amount_epsilon" in output.read_text()
