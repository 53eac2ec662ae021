"""Spreadsheet loading for the plot pipeline.

Reads a fixed rectangle out of one sheet of an ``.xlsx`` workbook and returns it
as a DataFrame whose columns come from the rectangle's first row. Bounds are
1-based and inclusive, like the row numbers and column letters shown in a
spreadsheet application.
"""

from __future__ import annotations

import os
import re
from typing import IO, Union

import openpyxl
import pandas as pd

from medianplots.plot_pipeline.errors import RangeError
from medianplots.utils.logging import get_logger

logger = get_logger(__name__)

Source = Union[str, os.PathLike, IO[bytes]]
SheetSelector = Union[str, int]
Bounds = tuple[int, int]

_A1_RANGE_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?(\d+):\$?([A-Za-z]{1,3})\$?(\d+)$")


def column_index(letters: str) -> int:
    """Convert spreadsheet column letters to a 1-based index ("A" -> 1, "AA" -> 27)."""
    if not letters or not letters.isalpha():
        raise RangeError(f"Invalid column reference {letters!r}")
    idx = 0
    for ch in letters.upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx


def parse_cell_range(cell_range: str) -> tuple[Bounds, Bounds]:
    """Parse an A1-style range such as ``"B2:F12"`` into (row_range, col_range).

    Returns:
        ``((first_row, last_row), (first_col, last_col))``, all 1-based.

    Raises:
        RangeError: If the reference is malformed or its corners are reversed.
    """
    m = _A1_RANGE_RE.match(cell_range.strip())
    if m is None:
        raise RangeError(f"Invalid cell range {cell_range!r}; expected e.g. 'B2:F12'")
    col0, row0, col1, row1 = m.groups()
    row_range = (int(row0), int(row1))
    col_range = (column_index(col0), column_index(col1))
    if row_range[1] < row_range[0] or col_range[1] < col_range[0]:
        raise RangeError(f"Cell range {cell_range!r} must run top-left to bottom-right")
    return row_range, col_range


def sheet_names(source: Source) -> list[str]:
    """List the sheet names of a workbook in workbook order."""
    wb = openpyxl.load_workbook(source, read_only=True)
    try:
        return list(wb.sheetnames)
    finally:
        wb.close()


def _resolve_sheet(names: list[str], sheet: SheetSelector) -> str:
    if isinstance(sheet, bool):
        raise RangeError(f"Invalid sheet selector {sheet!r}")
    if isinstance(sheet, int):
        if not 1 <= sheet <= len(names):
            raise RangeError(f"Sheet position {sheet} out of range; workbook has {len(names)} sheet(s)")
        return names[sheet - 1]
    if sheet not in names:
        raise RangeError(f"Sheet {sheet!r} not found; available: {names}")
    return sheet


def _check_bounds(label: str, bounds: Bounds, extent: int) -> None:
    first, last = bounds
    if first < 1 or last < 1:
        raise RangeError(f"{label} bounds are 1-based; got {bounds}")
    if last < first:
        raise RangeError(f"{label} bounds reversed: {bounds}")
    if last > extent:
        raise RangeError(f"{label} bound {last} exceeds sheet extent {extent}")


def _header_name(cell: object, position: int) -> str:
    if cell is None or (isinstance(cell, float) and pd.isna(cell)):
        return f"Group_{position}"
    if isinstance(cell, float) and cell.is_integer():
        cell = int(cell)
    name = str(cell).strip()
    return name if name else f"Group_{position}"


def promote_header(rect: pd.DataFrame) -> pd.DataFrame:
    """Use the first row of a header-less rectangle as column names and drop it.

    Blank header cells become ``Group_<n>`` (n = 1-based column position in the
    rectangle).

    Raises:
        ValueError: If two columns end up with the same name.
    """
    header = [_header_name(cell, j + 1) for j, cell in enumerate(rect.iloc[0].tolist())]
    dupes = sorted({h for h in header if header.count(h) > 1})
    if dupes:
        raise ValueError(f"Duplicate column names in header row: {dupes}")
    table = rect.iloc[1:].copy()
    table.columns = header
    table = table.reset_index(drop=True).infer_objects()
    return table


def load_table(
    source: Source,
    sheet: SheetSelector,
    row_range: Bounds,
    col_range: Bounds,
) -> pd.DataFrame:
    """Load a rectangular region of a sheet as a table.

    Whitespace-only text cells are read as blank.

    Args:
        source: Path or binary file object of an ``.xlsx`` workbook.
        sheet: Sheet name, or 1-based sheet position.
        row_range: ``(first, last)`` 1-based inclusive row bounds. The first row
            holds the column headers.
        col_range: ``(first, last)`` 1-based inclusive column bounds.

    Returns:
        DataFrame with one row per data row of the rectangle.

    Raises:
        RangeError: Unknown sheet or bounds outside the sheet's used area.
        ValueError: Duplicate header names.
    """
    # blank rows are kept so row numbers match the sheet
    wb = openpyxl.load_workbook(source, data_only=True)
    try:
        sheet_name = _resolve_sheet(list(wb.sheetnames), sheet)
        ws = wb[sheet_name]
        _check_bounds("Row", row_range, ws.max_row)
        _check_bounds("Column", col_range, ws.max_column)
        rows = [
            [None if isinstance(v, str) and not v.strip() else v for v in row]
            for row in ws.iter_rows(
                min_row=row_range[0],
                max_row=row_range[1],
                min_col=col_range[0],
                max_col=col_range[1],
                values_only=True,
            )
        ]
    finally:
        wb.close()

    rect = pd.DataFrame(rows, dtype=object)
    table = promote_header(rect)
    logger.debug(
        f"load_table: sheet={sheet_name!r}, rows={row_range}, cols={col_range}, "
        f"shape={table.shape}, columns={list(table.columns)}"
    )
    return table


def load_range(source: Source, sheet: SheetSelector, cell_range: str) -> pd.DataFrame:
    """Same as load_table() with bounds given as an A1 range, e.g. ``"A1:E11"``."""
    row_range, col_range = parse_cell_range(cell_range)
    return load_table(source, sheet, row_range, col_range)
