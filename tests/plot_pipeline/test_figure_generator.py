"""Unit tests for PlotBuilder: point, summary and paired-line layers, jitter, facets.

Plotly may serialize numeric arrays as base64 (bdata/dtype); values are read
through decode_plotly_array.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from medianplots.plot_pipeline.figure_generator import (
    PAIRED_LAYER,
    POINTS_LAYER,
    SUMMARY_LAYER,
    PlotBuilder,
    build_chart,
)
from medianplots.plot_pipeline.plot_options import AxisLabels, Jitter, PlotOptions
from medianplots.plot_pipeline.reshaper import to_long, to_long_paired
from medianplots.plot_pipeline.summary_stat import Statistic, summarize_groups

from conftest import GROUP_NAMES, decode_plotly_array, traces_by_layer


@pytest.fixture
def observations(groups_wide):
    return to_long(groups_wide, [], GROUP_NAMES)


@pytest.fixture
def paired(paired_wide):
    return to_long_paired(paired_wide, "Subject", ("Control", "Treated"))


def _crossbars(fig_dict) -> dict[str, tuple[np.ndarray, np.ndarray]]:
    """Map trace name -> (x, y) for summary traces."""
    return {
        t["name"]: (decode_plotly_array(t["x"]).astype(float), decode_plotly_array(t["y"]).astype(float))
        for t in traces_by_layer(fig_dict, SUMMARY_LAYER)
    }


def test_point_layer_one_marker_per_observation(observations):
    fig = build_chart(observations, PlotOptions())
    points = traces_by_layer(fig, POINTS_LAYER)
    assert [t["name"] for t in points] == GROUP_NAMES
    assert sum(len(decode_plotly_array(t["y"])) for t in points) == len(observations)
    for t in points:
        assert t["mode"] == "markers"


def test_point_layer_without_jitter_sits_on_group_positions(observations):
    fig = build_chart(observations, PlotOptions())
    for t in traces_by_layer(fig, POINTS_LAYER):
        x = decode_plotly_array(t["x"]).astype(float)
        assert np.all(x == float(GROUP_NAMES.index(t["name"])))
        y = decode_plotly_array(t["y"]).astype(float)
        expected = observations.loc[observations["group"] == t["name"], "value"].to_numpy()
        np.testing.assert_allclose(y, expected)


def test_x_axis_ticks_show_group_names(observations):
    fig = build_chart(observations, PlotOptions(axis_labels=AxisLabels("Group", "Value")))
    xaxis = fig["layout"]["xaxis"]
    assert list(xaxis["tickvals"]) == list(range(len(GROUP_NAMES)))
    assert list(xaxis["ticktext"]) == GROUP_NAMES
    assert xaxis["title"]["text"] == "Group"
    assert fig["layout"]["yaxis"]["title"]["text"] == "Value"


def test_jitter_is_bounded_and_keeps_raw_values(observations):
    jitter = Jitter(width=0.2, height=0.5)
    fig = build_chart(observations, PlotOptions(jitter=jitter, seed=1))
    moved = False
    for t in traces_by_layer(fig, POINTS_LAYER):
        pos = float(GROUP_NAMES.index(t["name"]))
        x = decode_plotly_array(t["x"]).astype(float)
        y = decode_plotly_array(t["y"]).astype(float)
        raw_y = np.asarray(t["customdata"], dtype=object)[:, 1].astype(float)
        assert np.all(np.abs(x - pos) <= jitter.width)
        assert np.all(np.abs(y - raw_y) <= jitter.height)
        moved = moved or bool(np.any(x != pos))
    assert moved


def test_jitter_with_seed_is_reproducible(observations):
    opts = PlotOptions(jitter=Jitter(0.2, 0.0), seed=42)
    a = build_chart(observations, opts)
    b = build_chart(observations, opts)
    for ta, tb in zip(traces_by_layer(a, POINTS_LAYER), traces_by_layer(b, POINTS_LAYER)):
        np.testing.assert_array_equal(decode_plotly_array(ta["x"]), decode_plotly_array(tb["x"]))


def test_statistic_identical_with_jitter_on_and_off(observations):
    plain = _crossbars(build_chart(observations, PlotOptions()))
    jittered = _crossbars(build_chart(observations, PlotOptions(jitter=Jitter(0.3, 2.0), seed=3)))
    assert plain.keys() == jittered.keys()
    for name in plain:
        np.testing.assert_array_equal(plain[name][1], jittered[name][1])


def test_summary_layer_matches_summarize_groups(observations):
    fig = build_chart(observations, PlotOptions(crossbar_width=0.4))
    bars = _crossbars(fig)
    expected = summarize_groups(observations, statistic=Statistic.MEDIAN)
    assert len(bars) == len(expected)
    for result in expected:
        x, y = bars[f"{result.group_key} (median)"]
        pos = GROUP_NAMES.index(result.group_key)
        np.testing.assert_allclose(x, [pos - 0.2, pos + 0.2])
        np.testing.assert_allclose(y, [result.value, result.value])


def test_summary_layer_mean(observations):
    fig = build_chart(observations, PlotOptions(statistic=Statistic.MEAN))
    bars = _crossbars(fig)
    for name in GROUP_NAMES:
        _, y = bars[f"{name} (mean)"]
        expected = observations.loc[observations["group"] == name, "value"].mean()
        assert y[0] == pytest.approx(expected)


def test_missing_values_are_not_plotted():
    obs = pd.DataFrame({"group": ["A", "A", "A", "B"], "value": [1.0, np.nan, 3.0, 5.0]})
    fig = build_chart(obs, PlotOptions())
    points = {t["name"]: decode_plotly_array(t["y"]).astype(float) for t in traces_by_layer(fig, POINTS_LAYER)}
    np.testing.assert_allclose(points["A"], [1.0, 3.0])
    _, y = _crossbars(fig)["A (median)"]
    assert y[0] == 2.0


def test_empty_observations_give_empty_chart():
    obs = pd.DataFrame({"group": pd.Series(dtype=str), "value": pd.Series(dtype=float)})
    fig = build_chart(obs, PlotOptions(jitter=Jitter()))
    assert fig["data"] == [] or len(fig["data"]) == 0


def test_missing_column_raises(observations):
    with pytest.raises(ValueError):
        build_chart(observations, PlotOptions(), value_name="score")


def test_paired_lines_join_each_subjects_two_points(paired, paired_wide):
    fig = build_chart(
        paired,
        PlotOptions(paired_lines=True),
        key_name="condition",
        subject_column="Subject",
    )
    lines = traces_by_layer(fig, PAIRED_LAYER)
    assert [t["name"] for t in lines] == paired_wide["Subject"].tolist()
    for t, (_, row) in zip(lines, paired_wide.iterrows()):
        np.testing.assert_allclose(decode_plotly_array(t["x"]).astype(float), [0.0, 1.0])
        np.testing.assert_allclose(decode_plotly_array(t["y"]).astype(float), [row["Control"], row["Treated"]])


def test_paired_lines_follow_jittered_points(paired):
    fig = build_chart(
        paired,
        PlotOptions(paired_lines=True, jitter=Jitter(0.1, 0.0), seed=5),
        key_name="condition",
        subject_column="Subject",
    )
    point_xy = set()
    for t in traces_by_layer(fig, POINTS_LAYER):
        xs = decode_plotly_array(t["x"]).astype(float)
        ys = decode_plotly_array(t["y"]).astype(float)
        point_xy.update(zip(xs.tolist(), ys.tolist()))
    for t in traces_by_layer(fig, PAIRED_LAYER):
        xs = decode_plotly_array(t["x"]).astype(float)
        ys = decode_plotly_array(t["y"]).astype(float)
        for xy in zip(xs.tolist(), ys.tolist()):
            assert xy in point_xy


@pytest.mark.parametrize("mutation", ["one_row", "three_rows"])
def test_paired_lines_require_exactly_two_points_per_subject(paired, mutation):
    if mutation == "one_row":
        bad = paired.drop(index=paired.index[paired["Subject"] == "S1"][1])
    else:
        bad = pd.concat([paired, paired[paired["Subject"] == "S2"].iloc[[0]]], ignore_index=True)
    with pytest.raises(ValueError) as exc_info:
        build_chart(bad, PlotOptions(paired_lines=True), key_name="condition", subject_column="Subject")
    assert "exactly 2" in str(exc_info.value)


def test_paired_lines_need_subject_column(paired):
    with pytest.raises(ValueError):
        build_chart(paired, PlotOptions(paired_lines=True), key_name="condition")


def test_facets_share_y_axis(genotypes_wide):
    paired = to_long_paired(genotypes_wide, "Subject", ("Control", "Treated"), group_column="Genotype")
    fig = build_chart(
        paired,
        PlotOptions(paired_lines=True, facet_by="Genotype"),
        key_name="condition",
        subject_column="Subject",
    )
    layout = fig["layout"]
    assert "xaxis2" in layout
    assert layout["yaxis2"]["matches"] == "y"

    titles = [a["text"] for a in layout["annotations"]]
    assert titles == ["Genotype=WT", "Genotype=KO"]

    bars = traces_by_layer(fig, SUMMARY_LAYER)
    assert len(bars) == 4  # 2 conditions x 2 facets
    wt = paired[paired["Genotype"] == "WT"]
    wt_bars = {t["name"]: decode_plotly_array(t["y"]).astype(float)[0] for t in bars if t.get("xaxis", "x") == "x"}
    assert wt_bars["Control (median)"] == pytest.approx(wt.loc[wt["condition"] == "Control", "value"].median())

    lines = traces_by_layer(fig, PAIRED_LAYER)
    assert len(lines) == len(genotypes_wide)


def test_statistic_as_text_builds_chart(observations):
    fig = build_chart(observations, PlotOptions(statistic="mean"))
    assert all(name.endswith("(mean)") for name in _crossbars(fig))


def test_plot_builder_reuses_options(observations):
    builder = PlotBuilder(PlotOptions(statistic=Statistic.MEAN), key_name="group", value_name="value")
    fig = builder.build(observations)
    assert all(name.endswith("(mean)") for name in _crossbars(fig))
