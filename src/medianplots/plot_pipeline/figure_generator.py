"""Plotly figure generation for dot plots with a summary crossbar.

This module provides the PlotBuilder class, which turns long-format
observations plus PlotOptions into a Plotly figure dictionary (the chart
specification handed to a renderer).

Layers, drawn per facet:
- points: one marker per observation at (group position, value), optionally jittered
- paired lines: one segment per subject joining its two points
- summary: a fixed-width horizontal crossbar at each group's median (or mean)

Each trace carries ``meta`` set to "points", "paired" or "summary".
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from medianplots.plot_pipeline.group_filter import group_order
from medianplots.plot_pipeline.plot_options import PlotOptions
from medianplots.plot_pipeline.summary_stat import summarize_groups
from medianplots.utils.logging import get_logger

logger = get_logger(__name__)

ChartSpec = dict[str, Any]

POINTS_LAYER = "points"
PAIRED_LAYER = "paired"
SUMMARY_LAYER = "summary"

PAIRED_LINE_COLOR = "rgba(120, 120, 120, 0.6)"
CROSSBAR_COLOR = "black"


class PlotBuilder:
    """Builds Plotly figure dictionaries from long-format observations.

    Attributes:
        options: PlotOptions used for every build.
        key_name: Column holding the group (x-axis category).
        value_name: Column holding the measured value (y-axis).
        subject_column: Column identifying subjects; required for paired lines.
    """

    def __init__(
        self,
        options: Optional[PlotOptions] = None,
        *,
        key_name: str = "group",
        value_name: str = "value",
        subject_column: Optional[str] = None,
    ) -> None:
        self.options = options if options is not None else PlotOptions()
        self.key_name = key_name
        self.value_name = value_name
        self.subject_column = subject_column

    def build(self, observations: pd.DataFrame) -> ChartSpec:
        """Generate the Plotly figure dictionary for observations.

        Args:
            observations: Long-format data, one row per observation.

        Returns:
            Plotly figure dictionary.

        Raises:
            ValueError: Missing columns, or paired lines requested on subjects
                that do not have exactly two observations.
            EmptyInputError: A plotted group has no non-missing values.
        """
        opts = self.options
        logger.info(
            f"PlotBuilder.build: rows={len(observations)}, statistic={opts.statistic.value}, "
            f"jitter={opts.jitter}, paired_lines={opts.paired_lines}, facet_by={opts.facet_by}"
        )
        tmp = self._prepare(observations)

        unique_groups = group_order(tmp, "g")
        cat_to_pos = {g: float(i) for i, g in enumerate(unique_groups)}
        self._add_plot_positions(tmp, cat_to_pos)

        facets: list[Optional[str]] = group_order(tmp, "facet") if "facet" in tmp.columns else [None]
        if opts.facet_by:
            fig = make_subplots(
                rows=1,
                cols=max(len(facets), 1),
                shared_yaxes=True,
                subplot_titles=[f"{opts.facet_by}={f}" for f in facets] or None,
                horizontal_spacing=0.04,
            )
        else:
            fig = go.Figure()

        for col_idx, facet in enumerate(facets):
            sub = tmp if facet is None else tmp[tmp["facet"] == facet]
            traces = self._point_traces(sub, show_legend=(col_idx == 0))
            if opts.paired_lines:
                traces += self._paired_traces(sub)
            traces += self._summary_traces(sub, cat_to_pos)
            for trace in traces:
                if opts.facet_by:
                    fig.add_trace(trace, row=1, col=col_idx + 1)
                else:
                    fig.add_trace(trace)

        self._apply_layout(fig, unique_groups)
        result = fig.to_dict()
        logger.debug(f"Chart generated: {len(result.get('data', []))} traces, {len(facets)} panel(s)")
        return result

    def _prepare(self, observations: pd.DataFrame) -> pd.DataFrame:
        """Build a working frame with g (group), y (value) and optional facet/subject columns."""
        opts = self.options
        required = [self.key_name, self.value_name]
        if opts.facet_by:
            required.append(opts.facet_by)
        if opts.paired_lines:
            if not self.subject_column:
                raise ValueError("paired_lines requires subject_column")
            required.append(self.subject_column)
        missing = [c for c in required if c not in observations.columns]
        if missing:
            raise ValueError(f"observations must contain column(s) {missing}")

        tmp = pd.DataFrame({
            "g": observations[self.key_name].astype(str),
            "y": pd.to_numeric(observations[self.value_name], errors="coerce"),
        })
        if opts.facet_by:
            tmp["facet"] = observations[opts.facet_by].astype(str)
        if self.subject_column and self.subject_column in observations.columns:
            tmp["subject"] = observations[self.subject_column].astype(str)
        tmp = tmp.reset_index(drop=True)

        if opts.paired_lines:
            self._check_pairs(tmp)
        return tmp

    def _check_pairs(self, tmp: pd.DataFrame) -> None:
        counts = tmp.groupby("subject", sort=False).size()
        bad = counts[counts != 2]
        if len(bad) > 0:
            detail = ", ".join(f"{s!r}: {n}" for s, n in bad.items())
            raise ValueError(f"Paired lines need exactly 2 observations per subject; got {detail}")

    def _add_plot_positions(self, tmp: pd.DataFrame, cat_to_pos: dict[str, float]) -> None:
        """Add x_plot / y_plot columns: category position and value, plus jitter if enabled.

        y is left untouched; statistics are always computed from it.
        """
        x_pos = tmp["g"].map(cat_to_pos).astype(float).to_numpy()
        y = tmp["y"].to_numpy(dtype=float)
        jitter = self.options.jitter
        if jitter is not None and len(tmp) > 0:
            rng = np.random.default_rng(seed=self.options.seed)
            x_pos = x_pos + rng.uniform(-jitter.width, jitter.width, size=len(tmp))
            if jitter.height > 0:
                y = y + rng.uniform(-jitter.height, jitter.height, size=len(tmp))
        tmp["x_plot"] = x_pos
        tmp["y_plot"] = y

    def _point_traces(self, sub: pd.DataFrame, *, show_legend: bool) -> list[go.Scatter]:
        """One marker trace per group; missing values are not drawn."""
        opts = self.options
        traces = []
        plotted = sub.dropna(subset=["y"])
        for group_key, gsub in plotted.groupby("g", sort=False):
            has_subject = "subject" in gsub.columns
            subjects = gsub["subject"].tolist() if has_subject else [""] * len(gsub)
            # customdata keeps the unjittered value next to the plotted one
            customdata = [
                [g, y, s] for g, y, s in zip(gsub["g"].tolist(), gsub["y"].tolist(), subjects)
            ]
            hover_parts = [f"{self.key_name}=%{{customdata[0]}}", f"{self.value_name}=%{{customdata[1]}}"]
            if has_subject:
                hover_parts.append(f"{self.subject_column}=%{{customdata[2]}}")
            traces.append(go.Scatter(
                x=gsub["x_plot"].tolist(),
                y=gsub["y_plot"].tolist(),
                mode="markers",
                name=str(group_key),
                legendgroup=str(group_key),
                showlegend=opts.show_legend and show_legend,
                meta=POINTS_LAYER,
                customdata=customdata,
                marker=dict(size=opts.point_size),
                hovertemplate="<br>".join(hover_parts) + "<extra></extra>",
            ))
        return traces

    def _paired_traces(self, sub: pd.DataFrame) -> list[go.Scatter]:
        """One line segment per subject joining its two plotted points."""
        traces = []
        for subject, ssub in sub.groupby("subject", sort=False):
            if len(ssub) != 2:
                # subject split across facets
                continue
            if ssub["y"].isna().any():
                logger.warning(f"Subject {subject!r} has a missing value; paired line not drawn")
                continue
            traces.append(go.Scatter(
                x=ssub["x_plot"].tolist(),
                y=ssub["y_plot"].tolist(),
                mode="lines",
                name=str(subject),
                meta=PAIRED_LAYER,
                line=dict(color=PAIRED_LINE_COLOR, width=1),
                showlegend=False,
                hoverinfo="skip",
            ))
        return traces

    def _summary_traces(self, sub: pd.DataFrame, cat_to_pos: dict[str, float]) -> list[go.Scatter]:
        """Horizontal crossbar at each group's statistic, computed from unjittered values."""
        opts = self.options
        half = opts.crossbar_width / 2
        traces = []
        for result in summarize_groups(sub, key_name="g", value_name="y", statistic=opts.statistic):
            center = cat_to_pos[result.group_key]
            traces.append(go.Scatter(
                x=[center - half, center + half],
                y=[result.value, result.value],
                mode="lines",
                name=f"{result.group_key} ({result.statistic.value})",
                meta=SUMMARY_LAYER,
                line=dict(color=CROSSBAR_COLOR, width=opts.crossbar_line_width),
                showlegend=False,
                hovertemplate=f"{result.statistic.value}={result.value:.4g} (n={result.count})<extra></extra>",
            ))
        return traces

    def _apply_layout(self, fig: go.Figure, unique_groups: list[str]) -> None:
        """Categorical x ticks at integer positions; axis labels; shared y for facets."""
        opts = self.options
        fig.update_xaxes(
            tickmode="array",
            tickvals=list(range(len(unique_groups))),
            ticktext=unique_groups,
            range=[-0.5, len(unique_groups) - 0.5] if unique_groups else None,
            title_text=opts.axis_labels.x or None,
        )
        if opts.facet_by:
            fig.update_yaxes(title_text=opts.axis_labels.y or None, row=1, col=1)
        else:
            fig.update_yaxes(title_text=opts.axis_labels.y or None)
        layout_updates: dict[str, Any] = {
            "margin": dict(l=60, r=20, t=60 if (opts.title or opts.facet_by) else 30, b=60),
            "showlegend": opts.show_legend,
            "template": "simple_white",
        }
        if opts.title:
            layout_updates["title_text"] = opts.title
        fig.update_layout(**layout_updates)


def build_chart(
    observations: pd.DataFrame,
    options: Optional[PlotOptions] = None,
    *,
    key_name: str = "group",
    value_name: str = "value",
    subject_column: Optional[str] = None,
) -> ChartSpec:
    """Build a dot plot chart specification; see PlotBuilder.build()."""
    builder = PlotBuilder(
        options,
        key_name=key_name,
        value_name=value_name,
        subject_column=subject_column,
    )
    return builder.build(observations)
