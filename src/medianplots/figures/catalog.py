"""Catalog of the sample figures and the spreadsheet regions they read.

Each FigureLayout pins down where its data lives (sheet + A1 range), how the
wide table is reshaped, and the default PlotOptions. The regions are part of
each figure's contract with its workbook; they are not user settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

import pandas as pd

from medianplots.plot_pipeline.figure_generator import ChartSpec, build_chart
from medianplots.plot_pipeline.group_filter import filter_groups
from medianplots.plot_pipeline.plot_options import PlotOptions
from medianplots.plot_pipeline.reshaper import (
    DIFFERENCE_COL,
    subject_differences,
    to_long,
    to_long_paired,
)
from medianplots.plot_pipeline.table_loader import Source, load_range
from medianplots.utils.logging import get_logger

logger = get_logger(__name__)


class FigureKind(Enum):
    """How a layout's wide table becomes plotted observations."""
    GROUPS = "groups"            # one column per independent group
    PAIRED = "paired"            # two matched condition columns per subject
    DIFFERENCE = "difference"    # per-subject condition2 - condition1


@dataclass(frozen=True)
class FigureLayout:
    """Where a figure's data lives and how it is reshaped and drawn."""
    name: str
    sheet: str
    cell_range: str
    kind: FigureKind
    value_columns: tuple[str, ...]
    id_columns: tuple[str, ...] = ()
    subject_column: Optional[str] = None
    group_column: Optional[str] = None
    key_name: str = "group"
    value_name: str = "value"
    default_options: dict[str, Any] = field(default_factory=dict)

    def options(self) -> PlotOptions:
        """Fresh PlotOptions built from this layout's defaults."""
        return PlotOptions.from_dict(self.default_options)


_MULTIPLE_GROUPS = FigureLayout(
    name="multiple_groups",
    sheet="Groups",
    cell_range="A1:E11",
    kind=FigureKind.GROUPS,
    value_columns=("Group 1", "Group 2", "Group 3", "Group 4", "Group 5"),
    default_options={
        "jitter": {"width": 0.2, "height": 0.0},
        "statistic": "median",
        "axis_labels": {"x": "", "y": "Value"},
    },
)

_PAIRED_CONDITIONS = FigureLayout(
    name="paired_conditions",
    sheet="Paired",
    cell_range="A1:C9",
    kind=FigureKind.PAIRED,
    value_columns=("Control", "Treated"),
    id_columns=("Subject",),
    subject_column="Subject",
    key_name="condition",
    default_options={
        "statistic": "median",
        "paired_lines": True,
        "axis_labels": {"x": "", "y": "Value"},
    },
)

_PAIRED_DIFFERENCE = FigureLayout(
    name="paired_difference",
    sheet="Paired",
    cell_range="A1:C9",
    kind=FigureKind.DIFFERENCE,
    value_columns=("Control", "Treated"),
    id_columns=("Subject",),
    subject_column="Subject",
    key_name="condition",
    default_options={
        "jitter": {"width": 0.1, "height": 0.0},
        "statistic": "median",
        "axis_labels": {"x": "", "y": "Treated - Control"},
    },
)

_GENOTYPE_PAIRS = FigureLayout(
    name="genotype_pairs",
    sheet="Genotypes",
    cell_range="A1:D13",
    kind=FigureKind.PAIRED,
    value_columns=("Control", "Treated"),
    id_columns=("Subject", "Genotype"),
    subject_column="Subject",
    group_column="Genotype",
    key_name="condition",
    default_options={
        "statistic": "median",
        "paired_lines": True,
        "facet_by": "Genotype",
        "axis_labels": {"x": "", "y": "Value"},
    },
)

FIGURE_LAYOUTS: dict[str, FigureLayout] = {
    layout.name: layout
    for layout in (_MULTIPLE_GROUPS, _PAIRED_CONDITIONS, _PAIRED_DIFFERENCE, _GENOTYPE_PAIRS)
}


def figure_names() -> list[str]:
    """Names of all catalogued figures (sorted)."""
    return sorted(FIGURE_LAYOUTS)


def get_layout(name: str) -> FigureLayout:
    """Return the FigureLayout for name.

    Raises:
        KeyError: Unknown figure name.
    """
    try:
        return FIGURE_LAYOUTS[name]
    except KeyError:
        raise KeyError(f"Unknown figure {name!r}; known: {figure_names()}") from None


def load_figure_observations(source: Source, name: str) -> pd.DataFrame:
    """Load a figure's region from a workbook and reshape it for plotting.

    GROUPS and PAIRED layouts return long observations (PAIRED ones also carry
    the per-subject difference). DIFFERENCE layouts return one row per subject
    with the difference as the value and the group column (or a single
    "condition2 - condition1" label) as the key.
    """
    layout = get_layout(name)
    table = load_range(source, layout.sheet, layout.cell_range)
    logger.info(f"load_figure_observations: figure={name!r}, rows={len(table)}")

    if layout.kind == FigureKind.GROUPS:
        return to_long(
            table,
            layout.id_columns,
            layout.value_columns,
            key_name=layout.key_name,
            value_name=layout.value_name,
        )

    paired = to_long_paired(
        table,
        layout.subject_column,
        layout.value_columns,
        key_name=layout.key_name,
        value_name=layout.value_name,
        group_column=layout.group_column,
    )
    if layout.kind == FigureKind.PAIRED:
        return paired

    diffs = subject_differences(paired, layout.subject_column, layout.group_column)
    first, second = layout.value_columns
    if layout.group_column:
        keys = diffs[layout.group_column].astype(str)
    else:
        keys = f"{second} - {first}"
    return pd.DataFrame({
        layout.subject_column: diffs[layout.subject_column],
        layout.key_name: keys,
        layout.value_name: diffs[DIFFERENCE_COL],
    })


def render_figure(
    source: Source,
    name: str,
    *,
    groups: Optional[Iterable[object]] = None,
    options: Optional[PlotOptions] = None,
) -> ChartSpec:
    """Run the whole pipeline for a catalogued figure.

    Args:
        source: Workbook path or binary file object.
        name: Figure name (see figure_names()).
        groups: If given, only these groups are plotted (in data order).
        options: Overrides the layout's default PlotOptions.

    Returns:
        Plotly figure dictionary.
    """
    layout = get_layout(name)
    observations = load_figure_observations(source, name)
    if groups is not None:
        observations = filter_groups(observations, groups, key_name=layout.key_name)
    if options is None:
        options = layout.options()
    return build_chart(
        observations,
        options,
        key_name=layout.key_name,
        value_name=layout.value_name,
        subject_column=layout.subject_column,
    )
