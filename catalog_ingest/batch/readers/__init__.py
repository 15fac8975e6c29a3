"""
Row readers (the row-validation collaborator).
"""

from .base import RowReader
from .csv_reader import REQUIRED_COLUMNS, CSVRowReader

__all__ = ["CSVRowReader", "REQUIRED_COLUMNS", "RowReader"]
