"""Load -> reshape -> filter -> summarize -> plot pipeline for small datasets."""

from medianplots.plot_pipeline.errors import CellValueError, EmptyInputError, RangeError
from medianplots.plot_pipeline.figure_generator import PlotBuilder, build_chart
from medianplots.plot_pipeline.group_filter import filter_groups, first_n_groups, group_order
from medianplots.plot_pipeline.plot_options import AxisLabels, Jitter, PlotOptions
from medianplots.plot_pipeline.reshaper import (
    subject_differences,
    to_long,
    to_long_paired,
    to_wide,
)
from medianplots.plot_pipeline.summary_stat import (
    Statistic,
    SummaryResult,
    group_stats_table,
    summarize,
    summarize_differences,
    summarize_groups,
)
from medianplots.plot_pipeline.table_loader import load_range, load_table, sheet_names

__all__ = [
    "AxisLabels",
    "CellValueError",
    "EmptyInputError",
    "Jitter",
    "PlotBuilder",
    "PlotOptions",
    "RangeError",
    "Statistic",
    "SummaryResult",
    "build_chart",
    "filter_groups",
    "first_n_groups",
    "group_order",
    "group_stats_table",
    "load_range",
    "load_table",
    "sheet_names",
    "subject_differences",
    "summarize",
    "summarize_differences",
    "summarize_groups",
    "to_long",
    "to_long_paired",
    "to_wide",
]
