"""
Workbook parsing and tabular projection.
"""

from parsers.workbook_parser import (
    parse_first_sheet,
    dataframe_to_records,
    clean_cell,
)
from parsers.sheet_table import (
    SheetTable,
    format_cell,
    NO_DATA_NOTICE,
)

__all__ = [
    "parse_first_sheet",
    "dataframe_to_records",
    "clean_cell",
    "SheetTable",
    "format_cell",
    "NO_DATA_NOTICE",
]
