"""Render every catalogued figure from a workbook to standalone HTML files.

Usage:
    python examples/render_sample_figures.py path/to/data.xlsx [out_dir]
"""

import sys
from pathlib import Path

import plotly.graph_objects as go

from medianplots.figures import figure_names, render_figure
from medianplots.plot_pipeline import sheet_names
from medianplots.utils.logging import configure_logging, get_logger

configure_logging(level="INFO")
logger = get_logger(__name__)

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

workbook = Path(sys.argv[1])
out_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("figures_out")
out_dir.mkdir(parents=True, exist_ok=True)

available = set(sheet_names(workbook))
for name in figure_names():
    try:
        spec = render_figure(workbook, name)
    except (KeyError, ValueError, IndexError) as e:
        logger.error(f"{name}: {e} (sheets in workbook: {sorted(available)})")
        continue
    out = out_dir / f"{name}.html"
    go.Figure(spec).write_html(out)
    logger.info(f"wrote {out}")
