"""Result table composition and report output."""

from .composer import ResultComposer
from .excel_generator import ExcelReportGenerator

__all__ = ["ResultComposer", "ExcelReportGenerator"]
