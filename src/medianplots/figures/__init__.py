"""Named sample figures: spreadsheet regions plus default plot options."""

from medianplots.figures.catalog import (
    FIGURE_LAYOUTS,
    FigureKind,
    FigureLayout,
    figure_names,
    get_layout,
    load_figure_observations,
    render_figure,
)

__all__ = [
    "FIGURE_LAYOUTS",
    "FigureKind",
    "FigureLayout",
    "figure_names",
    "get_layout",
    "load_figure_observations",
    "render_figure",
]
