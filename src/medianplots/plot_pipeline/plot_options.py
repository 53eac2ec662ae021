"""Plot options for dot plots with a summary crossbar.

This module defines the Jitter, AxisLabels and PlotOptions dataclasses used to
configure and serialize a figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from medianplots.plot_pipeline.summary_stat import Statistic


@dataclass(frozen=True)
class Jitter:
    """Maximum random displacement of each point, in axis units, on either side."""
    width: float = 0.2
    height: float = 0.0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Jitter width/height must be >= 0, got ({self.width}, {self.height})")


@dataclass(frozen=True)
class AxisLabels:
    x: str = ""
    y: str = ""


@dataclass
class PlotOptions:
    """Configuration for a single figure.

    Holds the layers to draw (jittered points, summary crossbar, paired lines),
    the faceting column and cosmetic settings. Jitter is purely visual and never
    changes the values the statistic is computed from.
    """
    jitter: Optional[Jitter] = None
    statistic: Statistic = Statistic.MEDIAN
    paired_lines: bool = False
    facet_by: Optional[str] = None
    axis_labels: AxisLabels = field(default_factory=AxisLabels)
    crossbar_width: float = 0.5        # fixed, not derived from data
    crossbar_line_width: int = 3
    point_size: int = 8
    seed: Optional[int] = None         # jitter RNG seed; None = fresh randomness per build
    show_legend: bool = False
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.statistic, Statistic):
            self.statistic = Statistic(str(self.statistic).lower())

    def to_dict(self) -> dict[str, Any]:
        """Serialize PlotOptions to a dictionary.

        Returns:
            Dictionary representation with plain (JSON friendly) values.
        """
        return {
            "jitter": (
                {"width": self.jitter.width, "height": self.jitter.height}
                if self.jitter is not None else None
            ),
            "statistic": self.statistic.value,
            "paired_lines": self.paired_lines,
            "facet_by": self.facet_by,
            "axis_labels": {"x": self.axis_labels.x, "y": self.axis_labels.y},
            "crossbar_width": self.crossbar_width,
            "crossbar_line_width": self.crossbar_line_width,
            "point_size": self.point_size,
            "seed": self.seed,
            "show_legend": self.show_legend,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlotOptions":
        """Deserialize PlotOptions from a dictionary.

        Missing keys take their defaults.

        Raises:
            ValueError: Unknown statistic or negative jitter.
        """
        jitter_data = data.get("jitter")
        jitter = None
        if isinstance(jitter_data, dict):
            jitter = Jitter(
                width=float(jitter_data.get("width", 0.2)),
                height=float(jitter_data.get("height", 0.0)),
            )
        labels = data.get("axis_labels")
        if not isinstance(labels, dict):
            labels = {}
        seed = data.get("seed")
        return cls(
            jitter=jitter,
            statistic=Statistic(str(data.get("statistic", Statistic.MEDIAN.value)).lower()),
            paired_lines=bool(data.get("paired_lines", False)),
            facet_by=data.get("facet_by"),  # Can be None
            axis_labels=AxisLabels(x=str(labels.get("x", "")), y=str(labels.get("y", ""))),
            crossbar_width=float(data.get("crossbar_width", 0.5)),
            crossbar_line_width=int(data.get("crossbar_line_width", 3)),
            point_size=int(data.get("point_size", 8)),
            seed=int(seed) if seed is not None else None,
            show_legend=bool(data.get("show_legend", False)),
            title=data.get("title"),
        )
