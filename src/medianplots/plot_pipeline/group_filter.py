"""Group selection for building a figure series incrementally.

The sample figures are drawn several times over the same dataset with a growing
set of groups (2, 3, 4, then all). Selection keeps the original row order so a
filtered plot lines up with the full one.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from medianplots.utils.logging import get_logger

logger = get_logger(__name__)


def group_order(observations: pd.DataFrame, key_name: str = "group") -> list[str]:
    """Group keys (as text) in order of first appearance."""
    if key_name not in observations.columns:
        raise ValueError(f"observations must contain group column {key_name!r}")
    return list(dict.fromkeys(observations[key_name].astype(str).tolist()))


def filter_groups(
    observations: pd.DataFrame,
    allowed_keys: Iterable[object],
    key_name: str = "group",
) -> pd.DataFrame:
    """Keep only observations whose group is in allowed_keys.

    Keys are compared as text, so ``1`` selects group ``"1"``. The result
    keeps the original relative order. An empty allowed_keys yields an empty
    frame with the same columns.

    Raises:
        ValueError: If key_name is not a column of observations.
    """
    if key_name not in observations.columns:
        raise ValueError(f"observations must contain group column {key_name!r}")
    allowed = {str(k) for k in allowed_keys}
    mask = observations[key_name].astype(str).isin(allowed)
    df_f = observations[mask].reset_index(drop=True)

    unknown = allowed - set(observations[key_name].astype(str))
    if unknown:
        logger.warning(f"filter_groups: no observations for group(s) {sorted(unknown)}")
    logger.debug(f"filter_groups: kept {len(df_f)}/{len(observations)} rows for {sorted(allowed)}")
    return df_f


def first_n_groups(observations: pd.DataFrame, n: int, key_name: str = "group") -> list[str]:
    """The first n group keys in order of appearance (all of them if n is larger)."""
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return group_order(observations, key_name)[:n]
