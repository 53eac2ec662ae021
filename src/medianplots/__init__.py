"""
medianplots: Dot plots with median crossbars from small spreadsheet datasets.

This package provides:
- Spreadsheet region loading (TableLoader) and wide -> long reshaping
- Group selection and per-group median/mean summaries
- PlotBuilder: Plotly chart specifications with jittered points, crossbars,
  paired lines and facets
- A catalog of named figure layouts
- Logging utilities for library and script use

For logging configuration in standalone scripts:
    ```python
    from medianplots.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from medianplots.utils.logging import configure_logging, get_logger

from medianplots.plot_pipeline import (
    PlotBuilder,
    PlotOptions,
    Statistic,
    build_chart,
    filter_groups,
    load_table,
    summarize,
    to_long,
    to_long_paired,
)

# NullHandler so logs don't reach the root logger unless an application
# configures logging (or a script calls configure_logging()).
_logger = logging.getLogger("medianplots")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "PlotBuilder",
    "PlotOptions",
    "Statistic",
    "build_chart",
    "configure_logging",
    "filter_groups",
    "get_logger",
    "load_table",
    "summarize",
    "to_long",
    "to_long_paired",
]

__version__ = "0.1.0"
