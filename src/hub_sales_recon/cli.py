"""
Command-line interface for the hub / sales reconciliation tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import load_config, generate_default_config, ReconConfig
from .matching.engine import ReconciliationEngine
from .models.transaction import DatasetOrigin, ReconciliationResult
from .parsers.table_reader import read_table
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Payment Hub vs Sales Report Reconciliation Tool."""
    pass


@main.command()
@click.argument("hub_file", type=click.Path(exists=True, path_type=Path))
@click.argument("sales_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--max-rows",
    type=click.IntRange(min=1),
    default=None,
    help="Override the maximum rows accepted per dataset",
)
@click.option(
    "--epsilon",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Override the amount tolerance",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show summary without generating report"
)
def reconcile(
    hub_file: Path,
    sales_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    max_rows: Optional[int],
    epsilon: Optional[float],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile a payment hub export with a sales report.

    HUB_FILE: Path to the payment hub export (CSV or Excel)
    SALES_FILE: Path to the sales report (CSV or Excel)
    """
    try:
        recon_config = load_config(config)
        setup_logging(
            logging.DEBUG if verbose else recon_config.logging.level,
            log_format=recon_config.logging.format,
        )

        _apply_overrides(recon_config, max_rows=max_rows, epsilon=epsilon)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Reading hub export...", total=None)
            hub_table = read_table(hub_file)
            progress.update(task, completed=True)

            task = progress.add_task("Reading sales report...", total=None)
            sales_table = read_table(sales_file)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            engine = ReconciliationEngine(recon_config)
            result = engine.reconcile(hub_table, sales_table)
            progress.update(task, completed=True)

        _display_summary(result)
        _display_category_totals(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            timestamp = datetime.now()
            output = Path(
                recon_config.output.filename_template.format(
                    date=timestamp.strftime("%Y%m%d"), time=timestamp.strftime("%H%M%S")
                )
            )

        report_generator = ExcelReportGenerator(recon_config)
        report_path = report_generator.generate_report(
            result,
            output_path=output,
            hub_filename=hub_file.name,
            sales_filename=sales_file.name,
        )

        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-d",
    "--dataset",
    type=click.Choice(["hub", "sales"]),
    default="hub",
    show_default=True,
    help="Which dataset's column aliases to apply",
)
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("-n", "--limit", type=click.IntRange(min=1), default=20, show_default=True)
def inspect(file: Path, dataset: str, config: Optional[Path], limit: int):
    """
    Show resolved columns and normalized transactions for one export.

    FILE: Path to a hub export or sales report
    """
    try:
        recon_config = load_config(config)
        table = read_table(file)
        engine = ReconciliationEngine(recon_config)
        origin = DatasetOrigin(dataset)
        normalizer = (
            engine.hub_normalizer if origin is DatasetOrigin.HUB else engine.sales_normalizer
        )

        column_map = normalizer.resolve_columns(table.header)
        columns = Table(title=f"Resolved columns ({dataset}): {file.name}")
        columns.add_column("Field", style="cyan")
        columns.add_column("Header")
        for field_name, index in column_map.indices.items():
            columns.add_row(field_name, str(table.header[index]))
        console.print(columns)

        missing = normalizer.missing_required(column_map)
        if missing:
            console.print(f"[yellow]Missing required columns: {', '.join(missing)}[/yellow]")

        transactions = engine.normalize_table(table, origin)
        txn_table = Table(title=f"Normalized transactions: {file.name}")
        txn_table.add_column("Row", justify="right")
        txn_table.add_column("Date")
        txn_table.add_column("Label")
        txn_table.add_column("Counterparty")
        txn_table.add_column("Gross", justify="right")
        txn_table.add_column("Net", justify="right")

        for txn in transactions[:limit]:
            txn_table.add_row(
                str(txn.row_number),
                txn.date_key or "-",
                txn.label or "-",
                txn.counterparty or "-",
                f"${txn.gross_amount:,.2f}",
                f"${txn.net_amount:,.2f}",
            )

        console.print(txn_table)

        if len(transactions) > limit:
            console.print(f"\n... and {len(transactions) - limit} more transactions")

        console.print(f"\nTotal transactions: {len(transactions)}")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(result: ReconciliationResult) -> None:
    """Display reconciliation summary in console."""
    summary = result.summary
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Hub Transactions", str(summary.hub_row_count))
    table.add_row("Sales Transactions", str(summary.sales_row_count))
    table.add_row("Confirmed Matches", str(summary.confirmed_count))
    table.add_row("Discrepancies", str(summary.discrepancy_count))
    table.add_row("Hub Match Rate", f"{summary.match_rate_hub:.1f}%")
    table.add_row(
        "Sales Matching",
        "enabled"
        if summary.sales_matching_enabled
        else f"disabled (missing {', '.join(summary.missing_sales_columns)})",
    )

    console.print(table)


def _display_category_totals(result: ReconciliationResult) -> None:
    """Display the per-category comparison in console."""
    table = Table(title="Category Totals")
    table.add_column("Category", style="cyan")
    table.add_column("Hub Report", justify="right")
    table.add_column("Sales Report", justify="right")
    table.add_column("Difference", justify="right")

    for total in result.category_totals:
        style = "red" if total.difference else None
        table.add_row(
            total.category,
            f"{total.hub_total:,.2f}",
            f"{total.sales_total:,.2f}",
            f"{total.difference:,.2f}",
            style=style,
        )

    summary = result.summary
    table.add_row(
        "Total",
        f"{summary.hub_grand_total:,.2f}",
        f"{summary.sales_grand_total:,.2f}",
        f"{summary.grand_difference:,.2f}",
        style="bold",
    )

    console.print(table)


def _apply_overrides(
    config: ReconConfig,
    max_rows: Optional[int] = None,
    epsilon: Optional[float] = None,
) -> None:
    """Apply command-line overrides to the matching settings."""
    if max_rows is not None:
        config.matching.max_rows = max_rows
    if epsilon is not None:
        config.matching.amount_epsilon = epsilon


if __name__ == "__main__":
    main()
