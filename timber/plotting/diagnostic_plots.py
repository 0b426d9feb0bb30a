"""Render the four standard regression diagnostic panels for one model.

Panels follow the usual reading order:
(a) residuals vs fitted: curvature means a missing term,
(b) normal Q-Q of standardized residuals: tail departures mean non-normal errors,
(c) scale-location: a trend means non-constant variance,
(d) residuals vs leverage: points beyond the Cook's distance contours are
    influential.
"""

from __future__ import annotations

import os
from pathlib import Path

import numpy as np
from scipy import stats as scipy_stats
from statsmodels.nonparametric.smoothers_lowess import lowess

from ..stats.diagnostics import influence_frame
from .style import (
    ALPHAS,
    LINE_WIDTHS,
    MARKER_SIZES,
    QQ_MIN_N,
    add_info_box,
    add_panel_label,
    axis_label,
    clean_axis,
    color_for_group,
    fallback_note,
    fig_size,
    finalize_figure,
    new_figure,
    panel_tag,
    sanitize_filename,
    set_axis_labels,
    should_plot_qq,
    warn_skipped_qq,
)

COOKS_CONTOURS = (0.5, 1.0)
N_LABELLED = 3
POINT_COLOR = color_for_group(0)
SMOOTH_COLOR = "#C13B2A"


def _label_extremes(ax, x, y, labels, n: int = N_LABELLED) -> None:
    """Annotate the ``n`` points with the largest ``|y|`` by row label."""
    if len(y) == 0:
        return
    order = np.argsort(-np.abs(np.asarray(y, dtype=float)))[:n]
    for idx in order:
        ax.annotate(
            str(labels[idx]),
            xy=(x[idx], y[idx]),
            xytext=(4, 2),
            textcoords="offset points",
            fontsize=9,
            color="0.30",
        )


def _smooth(ax, x, y) -> None:
    if len(x) < 3:
        return
    curve = lowess(y, x, frac=2.0 / 3.0, return_sorted=True)
    ax.plot(
        curve[:, 0],
        curve[:, 1],
        color=SMOOTH_COLOR,
        linewidth=LINE_WIDTHS["smooth"],
    )


def _cooks_contour(h_grid: np.ndarray, distance: float, n_params: int) -> np.ndarray:
    """Standardized residual at which Cook's distance equals ``distance``."""
    return np.sqrt(distance * n_params * (1.0 - h_grid) / h_grid)


def plot_lm_diagnostics(
    model,
    output_dir: str | None = "output",
    name: str = "model",
    min_qq_n: int = QQ_MIN_N,
) -> str:
    """Draw the 2x2 diagnostic grid for a fitted linear model.

    Args:
        model: Fitted statsmodels regression results.
        output_dir (str, optional): Directory for the figure bundle.
        name (str): Model name used in the file stem ``diagnostics_<name>``.
        min_qq_n (int): Below this many residuals the Q-Q panel is replaced by
            an explanatory note and a ``RuntimeWarning`` is issued.

    Returns:
        str: Path to the saved PNG, or an empty string when ``output_dir`` is
        ``None``.
    """
    diag = influence_frame(model)
    labels = [str(label) for label in diag.index]
    fitted = diag["fitted"].to_numpy(dtype=float)
    resid = diag["resid"].to_numpy(dtype=float)
    std_resid = diag["std_resid"].to_numpy(dtype=float)
    leverage = diag["leverage"].to_numpy(dtype=float)
    n = len(resid)
    n_params = int(len(model.params))

    fig, axes = new_figure(2, 2, figsize=fig_size("grid_2x2"))
    ax_rf, ax_qq, ax_sl, ax_lev = axes.ravel()
    scatter_kw = {
        "s": MARKER_SIZES["diagnostic"],
        "color": POINT_COLOR,
        "alpha": ALPHAS["point"],
        "zorder": 2,
    }

    ax_rf.scatter(fitted, resid, **scatter_kw)
    ax_rf.axhline(0.0, color="black", linewidth=LINE_WIDTHS["guide"], linestyle="--")
    _smooth(ax_rf, fitted, resid)
    _label_extremes(ax_rf, fitted, resid, labels)
    set_axis_labels(ax_rf, x=axis_label("fitted"), y=axis_label("resid"))
    ax_rf.set_title("Residuals vs Fitted")

    if should_plot_qq(n, min_n=min_qq_n):
        (osm, osr), (slope, intercept, _) = scipy_stats.probplot(std_resid, dist="norm")
        ax_qq.scatter(osm, osr, **scatter_kw)
        ax_qq.plot(
            osm,
            slope * np.asarray(osm) + intercept,
            color="black",
            linewidth=LINE_WIDTHS["guide"],
            linestyle="--",
        )
        set_axis_labels(ax_qq, x=axis_label("theoretical"), y=axis_label("std_resid"))
    else:
        warn_skipped_qq(n, min_n=min_qq_n)
        ax_qq.set_axis_off()
        add_info_box(ax_qq, fallback_note("Q-Q plot", n, min_n=min_qq_n))
    ax_qq.set_title("Normal Q-Q")

    root_abs = np.sqrt(np.abs(std_resid))
    ax_sl.scatter(fitted, root_abs, **scatter_kw)
    _smooth(ax_sl, fitted, root_abs)
    _label_extremes(ax_sl, fitted, root_abs, labels)
    set_axis_labels(ax_sl, x=axis_label("fitted"), y=axis_label("sqrt_std_resid"))
    ax_sl.set_title("Scale-Location")

    ax_lev.scatter(leverage, std_resid, **scatter_kw)
    ax_lev.axhline(0.0, color="black", linewidth=LINE_WIDTHS["guide"], linestyle="--")
    h_max = float(np.nanmax(leverage)) if n else 0.0
    if h_max > 0:
        h_grid = np.linspace(max(1e-3, h_max * 0.01), h_max * 1.05, 200)
        for distance, style in zip(COOKS_CONTOURS, (":", "--")):
            bound = _cooks_contour(h_grid, distance, n_params)
            ax_lev.plot(
                h_grid,
                bound,
                color="0.45",
                linestyle=style,
                linewidth=0.9,
                label=f"Cook's D = {distance:g}",
            )
            ax_lev.plot(h_grid, -bound, color="0.45", linestyle=style, linewidth=0.9)
        y_span = float(np.nanmax(np.abs(std_resid))) if n else 1.0
        ax_lev.set_ylim(-1.2 * y_span - 0.5, 1.2 * y_span + 0.5)
        ax_lev.legend(loc="lower left", fontsize=9)
    _label_extremes(ax_lev, leverage, std_resid, labels)
    set_axis_labels(ax_lev, x=axis_label("leverage"), y=axis_label("std_resid"))
    ax_lev.set_title("Residuals vs Leverage")

    for idx, ax in enumerate((ax_rf, ax_qq, ax_sl, ax_lev)):
        if ax.axison:
            clean_axis(ax, grid_axis="both")
        add_panel_label(ax, panel_tag(idx))

    savepath = None
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        savepath = Path(output_dir) / f"diagnostics_{sanitize_filename(name)}"
    saved = finalize_figure(fig, savepath=savepath)
    return saved or ""
