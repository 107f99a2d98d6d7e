"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class TableParseError(ReconciliationError):
    """Error reading a hub or sales export into tabular rows."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class RowLimitExceededError(ReconciliationError):
    """A dataset holds more rows than the configured maximum."""

    def __init__(self, dataset: str, row_count: int, max_rows: int):
        self.dataset = dataset
        self.row_count = row_count
        self.max_rows = max_rows
        super().__init__(
            f"{dataset} dataset has {row_count} rows, "
            f"exceeding the configured maximum of {max_rows}"
        )


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
