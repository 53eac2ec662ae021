"""Wide to long reshaping for the plot pipeline.

Spreadsheets in the sample datasets are laid out wide: one row per subject and
one column per group or condition. Plotting and per-group statistics work on
long (tidy) data: one row per (subject, group) with a single value column.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from medianplots.plot_pipeline.errors import CellValueError
from medianplots.utils.logging import get_logger

logger = get_logger(__name__)

DIFFERENCE_COL = "difference"


def _require_columns(table: pd.DataFrame, columns: Sequence[str], role: str) -> None:
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise ValueError(f"{role} column(s) {missing} not found; table has {list(table.columns)}")


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_numeric(table: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Return a copy of table with columns converted to float.

    Blank cells become NaN. Any other cell that does not parse as a number
    raises CellValueError naming its 1-based data row and column.
    """
    out = table.copy()
    for col in columns:
        raw = table[col]
        parsed = pd.to_numeric(raw, errors="coerce")
        bad = parsed.isna() & ~raw.map(_is_blank)
        if bad.any():
            pos = int(np.flatnonzero(bad.to_numpy())[0])
            raise CellValueError(row=pos + 1, column=str(col), value=raw.iloc[pos])
        out[col] = parsed.astype(float)
    return out


def to_long(
    table: pd.DataFrame,
    id_columns: Sequence[str],
    value_columns: Sequence[str],
    key_name: str = "group",
    value_name: str = "value",
) -> pd.DataFrame:
    """Pivot a wide table into one observation per (row, value column).

    Observations come out row-major: all value columns of the first row, then
    the second row, and so on, value columns in the order given.

    Args:
        table: Wide table.
        id_columns: Columns carried unchanged onto every observation (e.g. subject id).
        value_columns: Columns holding the measurements, one per group.
        key_name: Name of the output column holding the value column's name.
        value_name: Name of the output column holding the measurement.

    Returns:
        DataFrame with columns ``[*id_columns, key_name, value_name]`` and
        ``len(table) * len(value_columns)`` rows.

    Raises:
        ValueError: Unknown columns, or key/value names clashing with id columns.
        CellValueError: A value cell is neither blank nor numeric.
    """
    id_columns = list(id_columns)
    value_columns = list(value_columns)
    _require_columns(table, id_columns, "id")
    _require_columns(table, value_columns, "value")
    if key_name in id_columns or value_name in id_columns:
        raise ValueError(f"key_name/value_name must not reuse id columns {id_columns}")

    # row-major order follows table position, whatever the incoming index
    table = table.reset_index(drop=True)
    numeric = coerce_numeric(table[id_columns + value_columns], value_columns)
    long = numeric.melt(
        id_vars=id_columns,
        value_vars=value_columns,
        var_name=key_name,
        value_name=value_name,
        ignore_index=False,
    )
    # melt is column-major; a stable sort on the original index restores row order
    long = long.sort_index(kind="stable").reset_index(drop=True)
    long[key_name] = long[key_name].astype(str)

    logger.debug(
        f"to_long: {len(table)} rows x {len(value_columns)} columns -> {len(long)} observations"
    )
    return long


def to_long_paired(
    table: pd.DataFrame,
    subject_column: str,
    conditions: Sequence[str],
    key_name: str = "condition",
    value_name: str = "value",
    group_column: Optional[str] = None,
) -> pd.DataFrame:
    """Reshape matched two-condition data, carrying each subject's difference.

    The difference ``condition2 - condition1`` is computed on the wide table,
    one scalar per subject, and copied onto both of that subject's long rows.

    Args:
        table: Wide table, one row per subject.
        subject_column: Column identifying the subject.
        conditions: ``(condition1, condition2)`` column names.
        key_name: Output column for the condition name.
        value_name: Output column for the measurement.
        group_column: Optional column with an extra grouping (e.g. genotype).

    Returns:
        DataFrame with columns ``[subject_column, (group_column), key_name,
        value_name, "difference"]``.

    Raises:
        ValueError: Not exactly two conditions, or duplicated subject ids.
        CellValueError: Non-numeric measurement cell.
    """
    conditions = list(conditions)
    if len(conditions) != 2:
        raise ValueError(f"Paired data needs exactly 2 condition columns, got {conditions}")
    id_columns = [subject_column] + ([group_column] if group_column else [])
    _require_columns(table, id_columns, "id")
    _require_columns(table, conditions, "condition")
    table = table.reset_index(drop=True)

    dup =table[subject_column][table[subject_column].duplicated()]
    if len(dup) > 0:
        raise ValueError(f"Duplicated subject ids in column {subject_column!r}: {sorted(map(str, dup.unique()))}")

    numeric = coerce_numeric(table, conditions)
    first, second = conditions
    difference = numeric[second] - numeric[first]

    long = to_long(table, id_columns, conditions, key_name=key_name, value_name=value_name)
    by_subject = pd.Series(difference.to_numpy(), index=table[subject_column].to_numpy())
    long[DIFFERENCE_COL] = long[subject_column].map(by_subject).astype(float)
    return long


def subject_differences(
    paired: pd.DataFrame,
    subject_column: str,
    group_column: Optional[str] = None,
) -> pd.DataFrame:
    """One row per subject with its carried difference, in first-seen order."""
    cols = [subject_column] + ([group_column] if group_column else []) + [DIFFERENCE_COL]
    _require_columns(paired, cols, "paired")
    return paired[cols].drop_duplicates(subset=[subject_column], keep="first").reset_index(drop=True)


def to_wide(
    long: pd.DataFrame,
    id_columns: Sequence[str],
    key_name: str = "group",
    value_name: str = "value",
) -> pd.DataFrame:
    """Pivot long observations back to one column per group.

    Groups become columns in first-seen order. With no id columns, rows are
    matched by their rank within each group.
    """
    id_columns = list(id_columns)
    _require_columns(long, id_columns + [key_name, value_name], "long")
    keys = list(dict.fromkeys(long[key_name].tolist()))

    tmp = long.copy()
    index_cols = id_columns
    if not index_cols:
        tmp["_row"] = tmp.groupby(key_name, sort=False).cumcount()
        index_cols = ["_row"]

    wide = tmp.pivot(index=index_cols, columns=key_name, values=value_name).reset_index()
    wide.columns.name = None
    order = tmp[index_cols].drop_duplicates()
    wide = order.merge(wide, on=index_cols, how="left")[index_cols + keys]
    if "_row" in wide.columns:
        wide = wide.drop(columns="_row")
    return wide.reset_index(drop=True)
