"""Table reading and transaction normalization."""

from .normalizer import TransactionNormalizer, parse_amount
from .table_reader import read_table

__all__ = ["TransactionNormalizer", "parse_amount", "read_table"]
