"""
Tabular projection of sheet records.

Columns are fixed once from the first record; every row is read through
that column list with an explicit default, so irregular rows never fail.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.sheet import CellValue, SheetRow


NO_DATA_NOTICE = "لا توجد بيانات في هذا الملف"


@dataclass
class SheetTable:
    """Records plus the column order used to render them."""
    columns: list[str] = field(default_factory=list)
    records: list[SheetRow] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[SheetRow]) -> "SheetTable":
        columns = list(records[0].keys()) if records else []
        return cls(columns=columns, records=list(records))

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @property
    def notice(self) -> Optional[str]:
        """Message shown in place of the table when there is nothing to show."""
        return NO_DATA_NOTICE if self.is_empty else None

    @property
    def rows(self) -> list[list[CellValue]]:
        """Cell values in column order; missing keys read as None."""
        return [
            [record.get(column) for column in self.columns]
            for record in self.records
        ]

    @property
    def display_rows(self) -> list[list[str]]:
        return [
            [format_cell(value) for value in row]
            for row in self.rows
        ]


def format_cell(value: CellValue) -> str:
    """Stringify a cell for display. Blank cells render as ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    return str(value)
