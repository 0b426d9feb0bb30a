import logging
import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from timber.grouping import tidy_by_group
from timber.plotting import (
    plot_coefficients,
    plot_fit_by_group,
    plot_fit_line,
    plot_lm_diagnostics,
    plot_scatter_matrix,
)
from timber.plotting import style
from timber.plotting.data_plots import slope_annotation
from timber.schema import TREES
from timber.stats import fit_lm, tidy
from timber.stats.regression import linear_regression


def _assert_bundle(png_path):
    assert png_path.endswith(".png")
    base = os.path.splitext(png_path)[0]
    for ext in ("png", "pdf", "svg"):
        assert os.path.exists(f"{base}.{ext}")


def test_scatter_matrix_writes_bundle(tmp_path, trees):
    path = plot_scatter_matrix(trees, output_dir=str(tmp_path))
    assert path == str(tmp_path / "scatter_matrix.png")
    _assert_bundle(path)


def test_scatter_matrix_missing_column(trees):
    with pytest.raises(KeyError):
        plot_scatter_matrix(trees, columns=["Girth", "Age"], output_dir=None)


def test_fit_line_without_output_dir_returns_empty(trees):
    before = plt.get_fignums()
    assert plot_fit_line(trees, output_dir=None) == ""
    assert plt.get_fignums() == before


def test_fit_line_does_not_mutate_input(tmp_path, trees):
    original = trees.copy()
    _assert_bundle(plot_fit_line(trees, output_dir=str(tmp_path)))
    pd.testing.assert_frame_equal(trees, original)


def test_fit_by_group_warns_on_unfittable_group(caplog, tmp_path, classed_trees):
    caplog.set_level(logging.WARNING)
    df = classed_trees.copy()
    df[TREES.height_class] = df[TREES.height_class].astype(str)
    extra = df.iloc[[0]].copy()
    extra[TREES.height_class] = "single"
    df = pd.concat([df, extra])
    path = plot_fit_by_group(df, output_dir=str(tmp_path))
    _assert_bundle(path)
    assert any("No fitted line" in rec.message for rec in caplog.records)


def test_coefficients_by_group(tmp_path, classed_trees):
    table = tidy_by_group(
        classed_trees, "Volume ~ Girth", TREES.height_class, conf_int=True
    )
    path = plot_coefficients(
        table, output_dir=str(tmp_path), by=TREES.height_class, name="coefs"
    )
    _assert_bundle(path)


def test_coefficients_requires_intervals(trees):
    table = tidy(fit_lm("Volume ~ Girth", trees))
    with pytest.raises(KeyError, match="conf_low"):
        plot_coefficients(table, output_dir=None)


def test_lm_diagnostics_bundle(tmp_path, trees):
    model = fit_lm("Volume ~ Girth + Height", trees)
    path = plot_lm_diagnostics(model, output_dir=str(tmp_path), name="girth height")
    assert os.path.basename(path) == "diagnostics_girth_height.png"
    _assert_bundle(path)


def test_lm_diagnostics_small_sample_skips_qq(trees):
    model = fit_lm("Volume ~ Girth", trees.iloc[:10])
    with pytest.warns(RuntimeWarning, match="Q-Q plot skipped"):
        assert plot_lm_diagnostics(model, output_dir=None) == ""


def test_save_figure_bundle_delegates_to_save_figure(monkeypatch, tmp_path):
    calls = []

    def fake_save(fig, base, *args, **kwargs):
        calls.append(str(base))
        return base.with_suffix(".png")

    monkeypatch.setattr(style, "save_figure", fake_save)
    fig, _ = plt.subplots()
    out = style.save_figure_bundle(fig, str(tmp_path / "plot.png"))
    plt.close(fig)
    assert out == str(tmp_path / "plot.png")
    assert calls == [str(tmp_path / "plot")]


def test_add_panel_label_corners():
    fig, ax = plt.subplots()
    style.add_panel_label(ax, "(a)")
    style.add_panel_label(ax, "(b)", loc="lower right", pad=0.05)
    texts = {text.get_text(): text for text in ax.texts}
    assert texts["(a)"].get_position() == pytest.approx((0.02, 0.98))
    assert texts["(b)"].get_position() == pytest.approx((0.95, 0.05))
    assert texts["(b)"].get_ha() == "right"
    plt.close(fig)


@pytest.mark.parametrize(
    "name, expected",
    [("girth only", "girth_only"), ("a/b:c", "a_b_c"), ("...", "figure")],
)
def test_sanitize_filename(name, expected):
    assert style.sanitize_filename(name) == expected


def test_group_palette_cycles():
    n = len(style.GROUP_COLORS)
    assert style.color_for_group(n) == style.color_for_group(0)
    assert style.panel_tag(2) == "(c)"
    assert style.should_plot_qq(20)
    assert not style.should_plot_qq(19)
    assert np.isclose(style.fig_size("unknown")[0], style.fig_size("single")[0])


def test_slope_annotation_uses_requested_level(trees):
    fit = linear_regression(trees["Girth"], trees["Volume"])
    at_95 = slope_annotation(fit, level=0.95)
    at_90 = slope_annotation(fit, level=0.90)
    assert f"± {fit['ci95_m']:.3f} (95% CI)" in at_95
    assert "(90% CI)" in at_90
    assert f"± {fit['ci95_m']:.3f}" not in at_90
