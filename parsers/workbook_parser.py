"""
Workbook decoder for sheet previews.

Reads the first sheet of an uploaded workbook into row records keyed by the
header row. No schema is assumed: whatever columns the sheet declares are
passed through.
"""

from datetime import datetime
from io import BytesIO
import math
from typing import Any

import numpy as np
import pandas as pd
import structlog

from exceptions import FormatError
from models.sheet import CellValue, SheetRow
from parsers.sheet_table import format_cell

logger = structlog.get_logger(__name__)

# openpyxl reads .xlsx, xlrd reads legacy .xls
ENGINES = ("openpyxl", "xlrd")


def parse_first_sheet(data: bytes) -> list[SheetRow]:
    """
    Decode a workbook and project its first sheet into records.

    Args:
        data: Raw workbook bytes (.xlsx or .xls)

    Returns:
        One dict per data row, keyed by the first row of the sheet's used
        range, in sheet order. An empty sheet or a header-only sheet yields [].

    Raises:
        FormatError: If the bytes are not a readable workbook
    """
    if not data:
        raise FormatError("File is empty", details={"size_bytes": 0})

    excel = _open_workbook(data)

    with excel:
        if not excel.sheet_names:
            raise FormatError("Workbook has no sheets")

        # Declared order, not alphabetical
        sheet_name = excel.sheet_names[0]
        sheet_count = len(excel.sheet_names)

        try:
            # Header is located after reading, not assumed to be row 1
            raw = excel.parse(
                sheet_name=sheet_name,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=[""],
            )
        except Exception as e:
            logger.error("sheet_read_failed", sheet=sheet_name, error=str(e))
            raise FormatError(
                message="Failed to read first sheet",
                details={"sheet": sheet_name, "original_error": str(e)}
            ) from e

    df = promote_header(trim_to_used_range(raw))
    records = dataframe_to_records(df)

    logger.info(
        "workbook_parsed",
        sheet=sheet_name,
        sheets=sheet_count,
        rows=len(records),
        columns=len(df.columns)
    )

    return records


def trim_to_used_range(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Drop the blank rows above and the blank columns left of the first value.

    The sheet's data starts at the top-left cell of its used range, which
    need not be A1.
    """
    filled = raw.notna()
    if not filled.to_numpy().any():
        return raw.iloc[0:0, 0:0]

    first_row = int(filled.any(axis=1).to_numpy().argmax())
    first_col = int(filled.any(axis=0).to_numpy().argmax())

    if first_row or first_col:
        logger.debug("used_range_offset", rows_skipped=first_row, columns_skipped=first_col)

    return raw.iloc[first_row:, first_col:]


def promote_header(raw: pd.DataFrame) -> pd.DataFrame:
    """Use the first row as column labels and keep the rows below it."""
    if raw.empty:
        return pd.DataFrame()

    body = raw.iloc[1:].copy()
    body.columns = header_labels(raw.iloc[0].tolist())
    return body.reset_index(drop=True)


def header_labels(values: list) -> list[str]:
    """
    Header cells as column labels.

    Blank cells become "Unnamed: {position}"; repeats get ".1", ".2", ...
    in the order they appear.
    """
    labels = []
    seen: set[str] = set()

    for position, value in enumerate(values):
        text = format_cell(clean_cell(value))
        label = text if text else f"Unnamed: {position}"

        candidate, suffix = label, 0
        while candidate in seen:
            suffix += 1
            candidate = f"{label}.{suffix}"

        seen.add(candidate)
        labels.append(candidate)

    return labels


def dataframe_to_records(df: pd.DataFrame) -> list[SheetRow]:
    """
    Convert a sheet DataFrame into row records.

    Blank cells become None; rows with no values at all are skipped.
    """
    if df.empty:
        return []

    df = df.dropna(how="all")
    columns = [str(col) for col in df.columns]

    records = []
    for values in df.itertuples(index=False, name=None):
        records.append({
            column: clean_cell(value)
            for column, value in zip(columns, values)
        })

    return records


def clean_cell(value: Any) -> CellValue:
    """
    Normalize one decoded cell.

    numpy scalars are unwrapped so numbers stay numbers after serialization;
    missing markers (NaN, NaT, None) become None. Dates are passed through
    as the decoder produced them.
    """
    if value is None:
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (str, bool, int, float, datetime)):
        return value
    # Times and other decoder types are shown as text
    return str(value)


def _open_workbook(data: bytes) -> pd.ExcelFile:
    """Open workbook bytes with the first engine that accepts them."""
    last_error = None

    for engine in ENGINES:
        try:
            excel = pd.ExcelFile(BytesIO(data), engine=engine)
            logger.debug("workbook_opened", engine=engine, size_bytes=len(data))
            return excel
        except Exception as e:
            last_error = e
            continue

    logger.error(
        "workbook_open_failed",
        size_bytes=len(data),
        error=str(last_error)
    )
    raise FormatError(
        message="File is not a readable Excel workbook",
        details={"original_error": str(last_error)}
    )
