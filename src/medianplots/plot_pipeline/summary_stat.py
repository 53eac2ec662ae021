"""Summary statistics drawn as crossbars on the dot plots.

Statistics are always computed per group from the observed values. For matched
data the statistic of interest is taken over each subject's difference; the
difference of two group medians is not the same number (medians are not
additive) and is never used in its place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from medianplots.plot_pipeline.errors import EmptyInputError
from medianplots.plot_pipeline.reshaper import DIFFERENCE_COL
from medianplots.utils.logging import get_logger

logger = get_logger(__name__)

STATS_COLUMNS = ["count", "min", "max", "mean", "median", "std", "sem"]


class Statistic(Enum):
    """Summary statistic marked by the crossbar."""
    MEDIAN = "median"
    MEAN = "mean"


@dataclass(frozen=True)
class SummaryResult:
    """Statistic of one group."""
    group_key: str
    statistic: Statistic
    value: float
    count: int


def _as_statistic(statistic: Statistic | str) -> Statistic:
    if isinstance(statistic, Statistic):
        return statistic
    return Statistic(str(statistic).lower())


def summarize(values: Iterable[float], statistic: Statistic | str = Statistic.MEDIAN) -> float:
    """Median or mean of values, ignoring missing (NaN) entries.

    The median of an even number of values is the average of the two middle
    values: ``summarize([1, 2, 3, 4]) == 2.5``.

    Raises:
        EmptyInputError: If no non-missing values are given.
    """
    statistic = _as_statistic(statistic)
    arr = np.asarray(list(values), dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        raise EmptyInputError(f"Cannot compute {statistic.value} of an empty sequence")
    if statistic == Statistic.MEDIAN:
        return float(np.median(arr))
    return float(np.mean(arr))


def summarize_groups(
    observations: pd.DataFrame,
    key_name: str = "group",
    value_name: str = "value",
    statistic: Statistic | str = Statistic.MEDIAN,
) -> list[SummaryResult]:
    """One SummaryResult per group, in order of first appearance.

    Raises:
        EmptyInputError: If a group has no non-missing values.
    """
    statistic = _as_statistic(statistic)
    results = []
    for group_key, sub in observations.groupby(observations[key_name].astype(str), sort=False):
        values = pd.to_numeric(sub[value_name], errors="coerce")
        results.append(SummaryResult(
            group_key=str(group_key),
            statistic=statistic,
            value=summarize(values, statistic),
            count=int(values.notna().sum()),
        ))
    return results


def summarize_differences(
    paired: pd.DataFrame,
    subject_column: str,
    statistic: Statistic | str = Statistic.MEDIAN,
) -> float:
    """Statistic of the per-subject differences carried by to_long_paired().

    Each subject contributes its difference once, however many long rows it has.
    """
    if DIFFERENCE_COL not in paired.columns:
        raise ValueError(f"paired data must contain a {DIFFERENCE_COL!r} column (see to_long_paired)")
    per_subject = paired.drop_duplicates(subset=[subject_column], keep="first")
    return summarize(per_subject[DIFFERENCE_COL], statistic)


def group_stats_table(
    observations: pd.DataFrame,
    key_name: str = "group",
    value_name: str = "value",
    *,
    group_keys: Optional[list[str]] = None,
) -> pd.DataFrame:
    """Table of count, min, max, mean, median, std and sem per group.

    std and sem use ddof=1. Groups appear in first-seen order unless group_keys
    is given. Missing values are ignored.
    """
    tmp = pd.DataFrame({
        "g": observations[key_name].astype(str),
        "y": pd.to_numeric(observations[value_name], errors="coerce"),
    }).dropna(subset=["y"])
    if len(tmp) == 0:
        return pd.DataFrame(columns=[key_name] + STATS_COLUMNS)

    grp = tmp.groupby("g", sort=False)["y"]
    stats_df = pd.DataFrame({
        "count": grp.count(),
        "min": grp.min(),
        "max": grp.max(),
        "mean": grp.mean(),
        "median": grp.median(),
        "std": grp.std(ddof=1),
        "sem": grp.sem(ddof=1),
    })
    if group_keys is not None:
        stats_df = stats_df.reindex([str(k) for k in group_keys])
    stats_df.insert(0, key_name, stats_df.index.astype(str))
    return stats_df.reset_index(drop=True)
