"""
Spreadsheet and CSV reader.
Loads an export file into a header row plus data rows of plain Python
scalars for the normalizer.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Union
import logging

import pandas as pd

from ..models.transaction import TabularData
from ..utils.exceptions import TableParseError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv", ".txt"}


def read_table(
    file_path: Path,
    sheet: Union[int, str] = 0,
    encoding: str = "utf-8",
    delimiter: str = ",",
) -> TabularData:
    """
    Read a CSV or Excel export into a TabularData table.

    The first row is the header. Cells are kept untyped: CSV cells stay
    strings, Excel cells keep their native numbers and datetimes. Blank
    cells become "".

    Args:
        file_path: Path to the export
        sheet: Sheet index or name for Excel workbooks
        encoding: Text encoding for CSV files
        delimiter: Field delimiter for CSV files

    Returns:
        Parsed table

    Raises:
        TableParseError: If the file type is unsupported or reading fails
    """
    suffix = file_path.suffix.lower()
    logger.info(f"Reading table: {file_path}")

    try:
        if suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(file_path, sheet_name=sheet, header=None, dtype=object)
        elif suffix in CSV_SUFFIXES:
            df = pd.read_csv(
                file_path,
                header=None,
                dtype=str,
                keep_default_na=False,
                encoding=encoding,
                delimiter=delimiter,
                skip_blank_lines=False,
            )
        else:
            raise TableParseError(f"Unsupported file type: {file_path.suffix or file_path.name}")
    except TableParseError:
        raise
    except Exception as e:
        logger.error(f"Failed to read {file_path}: {e}")
        raise TableParseError(f"Failed to read {file_path}: {e}") from e

    rows = [[_plain(value) for value in record] for record in df.itertuples(index=False)]
    table = TabularData.from_rows(_trim_trailing_blank_rows(rows))
    logger.info(f"Read {len(table)} data rows from {file_path.name}")
    return table


def _plain(value: Any) -> Any:
    """Convert pandas / numpy scalars into plain Python values."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        return value
    if hasattr(value, "item"):
        return value.item()
    return value


def _trim_trailing_blank_rows(rows: list[list[Any]]) -> list[list[Any]]:
    end = len(rows)
    while end > 0 and all(cell == "" for cell in rows[end - 1]):
        end -= 1
    return rows[:end]
