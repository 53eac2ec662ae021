"""Exceptions raised by the plot pipeline.

Everything is raised at the point of detection and left to propagate: a
malformed input halts that one figure instead of being replaced by a default.
"""

from __future__ import annotations

from typing import Optional


class RangeError(IndexError):
    """Raised for row/column bounds, A1 references or sheet selectors outside the workbook."""


class EmptyInputError(ValueError):
    """Raised when a statistic is requested over zero observations."""


class CellValueError(ValueError):
    """Raised when a cell that must hold a number holds something else.

    Attributes:
        row: 1-based data row (header excluded).
        column: Column name of the offending cell.
        value: The raw cell content.
    """

    def __init__(self, row: int, column: str, value: object, message: Optional[str] = None) -> None:
        self.row = row
        self.column = column
        self.value = value
        if message is None:
            message = f"Non-numeric value {value!r} at row {row}, column {column!r}"
        super().__init__(message)
