"""
List data readers.
"""

from .list_reader import ListItemReader
from .normalizer import normalize_row, normalize_rows, normalize_value

__all__ = [
    "ListItemReader",
    "normalize_row",
    "normalize_rows",
    "normalize_value",
]
