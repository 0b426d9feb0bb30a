"""Render data-exploration and fitted-relationship figures.

These figures show the raw table before modeling, the single-predictor fit
used to introduce formula syntax, and the per-group fits and coefficient
comparison produced by subgroup fitting.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.stats import t as student_t

from ..data_processing import split_by_group, validate_columns
from ..schema import TIDY, TREES
from ..stats.regression import confidence_band, linear_regression
from .style import (
    ALPHAS,
    LINE_WIDTHS,
    MARKER_SIZES,
    add_info_box,
    add_panel_label,
    axis_label,
    clean_axis,
    color_for_group,
    fig_size,
    finalize_figure,
    marker_for_group,
    new_figure,
    panel_tag,
    sanitize_filename,
    set_axis_labels,
)

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = (TREES.girth, TREES.height, TREES.volume)
GRID_POINTS = 200


def _savepath(output_dir: str | None, stem: str) -> Path | None:
    if not output_dir:
        return None
    os.makedirs(output_dir, exist_ok=True)
    return Path(output_dir) / sanitize_filename(stem)


def slope_annotation(fit: dict, level: float = 0.95) -> str:
    """Slope with its half-width at ``level`` and R^2, for the fit-line box."""
    if fit["dof"] > 0:
        t_crit = float(student_t.ppf(0.5 + level / 2.0, fit["dof"]))
        half_width = t_crit * fit["se_m"]
    else:
        half_width = float("nan")
    pct = int(round(100 * level))
    return (
        f"slope = {fit['m']:.3f} ± {half_width:.3f} ({pct}% CI)\n"
        f"$R^2$ = {fit['r2']:.4f}"
    )


def plot_scatter_matrix(
    df: pd.DataFrame,
    columns: Sequence[str] = DEFAULT_COLUMNS,
    output_dir: str | None = "output",
    name: str = "scatter_matrix",
) -> str:
    """Pairwise scatter plots with histograms on the diagonal.

    Raises:
        KeyError: If any of ``columns`` is missing from ``df``.
    """
    columns = list(columns)
    validate_columns(df, columns)
    k = len(columns)

    fig, axes = new_figure(k, k, figsize=fig_size("grid_3x3"), squeeze=False)
    for row, y_col in enumerate(columns):
        for col, x_col in enumerate(columns):
            ax = axes[row, col]
            x = pd.to_numeric(df[x_col], errors="coerce").to_numpy(dtype=float)
            if row == col:
                ax.hist(
                    x[np.isfinite(x)], bins=10, color=color_for_group(0), alpha=0.6
                )
            else:
                y = pd.to_numeric(df[y_col], errors="coerce").to_numpy(dtype=float)
                ax.scatter(
                    x,
                    y,
                    s=MARKER_SIZES["point"] * 0.6,
                    color=color_for_group(0),
                    alpha=ALPHAS["point"],
                )
            clean_axis(ax, grid_axis="both", nbins_x=4, nbins_y=4)
            if row == k - 1:
                set_axis_labels(ax, x=axis_label(x_col))
            if col == 0:
                set_axis_labels(ax, y=axis_label(y_col) if row else "Count")

    return finalize_figure(fig, savepath=_savepath(output_dir, name)) or ""


def plot_fit_line(
    df: pd.DataFrame,
    x: str = TREES.girth,
    y: str = TREES.volume,
    output_dir: str | None = "output",
    name: str = "fit_line",
    level: float = 0.95,
) -> str:
    """Scatter of ``y`` against ``x`` with the least-squares line and band.

    The annotation reports the slope, its half-width at ``level`` and R^2 from
    :func:`timber.stats.regression.linear_regression`.
    """
    validate_columns(df, [x, y])
    xv = pd.to_numeric(df[x], errors="coerce").to_numpy(dtype=float)
    yv = pd.to_numeric(df[y], errors="coerce").to_numpy(dtype=float)
    fit = linear_regression(xv, yv)

    finite = np.isfinite(xv)
    x_grid = np.linspace(
        float(np.min(xv[finite])), float(np.max(xv[finite])), GRID_POINTS
    )
    yhat, lower, upper = confidence_band(fit, x_grid, level=level)

    fig, ax = new_figure(figsize=fig_size("single"))
    ax.scatter(
        xv,
        yv,
        s=MARKER_SIZES["point"],
        color=color_for_group(0),
        alpha=ALPHAS["point"],
        label="Trees",
        zorder=3,
    )
    ax.fill_between(
        x_grid,
        lower,
        upper,
        color="#C13B2A",
        alpha=ALPHAS["ci_band"],
        linewidth=0.0,
        label=f"{int(round(100 * level))}% CI (mean)",
    )
    ax.plot(
        x_grid, yhat, color="#C13B2A", linewidth=LINE_WIDTHS["fit"], label="OLS fit"
    )
    add_info_box(ax, slope_annotation(fit, level=level), loc="upper left")
    set_axis_labels(ax, x=axis_label(x), y=axis_label(y))
    clean_axis(ax, grid_axis="both")
    ax.legend(loc="lower right")

    return finalize_figure(fig, savepath=_savepath(output_dir, name)) or ""


def plot_fit_by_group(
    df: pd.DataFrame,
    x: str = TREES.girth,
    y: str = TREES.volume,
    by: str = TREES.height_class,
    output_dir: str | None = "output",
    name: str = "fit_by_group",
) -> str:
    """Scatter coloured by group with one least-squares line per group.

    Groups whose line cannot be fitted (too few points or no spread) are
    drawn as points only and logged at WARNING level.
    """
    validate_columns(df, [x, y, by])

    fig, ax = new_figure(figsize=fig_size("single"))
    for idx, (level, part) in enumerate(split_by_group(df, by).items()):
        color = color_for_group(idx)
        xv = pd.to_numeric(part[x], errors="coerce").to_numpy(dtype=float)
        yv = pd.to_numeric(part[y], errors="coerce").to_numpy(dtype=float)
        ax.scatter(
            xv,
            yv,
            s=MARKER_SIZES["point"],
            color=color,
            marker=marker_for_group(idx),
            alpha=ALPHAS["point"],
            label=str(level),
            zorder=3,
        )
        try:
            fit = linear_regression(xv, yv)
        except ValueError as exc:
            logger.warning("No fitted line for %s=%r: %s", by, level, exc)
            continue
        finite = np.isfinite(xv)
        x_grid = np.linspace(
            float(np.min(xv[finite])), float(np.max(xv[finite])), GRID_POINTS
        )
        ax.plot(
            x_grid,
            fit["m"] * x_grid + fit["b"],
            color=color,
            linewidth=LINE_WIDTHS["fit"],
        )

    set_axis_labels(ax, x=axis_label(x), y=axis_label(y))
    clean_axis(ax, grid_axis="both")
    ax.legend(title=by, loc="upper left")

    return finalize_figure(fig, savepath=_savepath(output_dir, name)) or ""


def plot_coefficients(
    tidy_df: pd.DataFrame,
    output_dir: str | None = "output",
    by: str | None = None,
    name: str = "coefficients",
) -> str:
    """Forest plot of coefficient estimates with confidence intervals.

    Args:
        tidy_df (pandas.DataFrame): Output of ``tidy(..., conf_int=True)`` or
            ``tidy_by_group(..., conf_int=True)``.
        output_dir (str, optional): Directory for the figure bundle.
        by (str, optional): Grouping column; one marker series per level.
        name (str): File stem.

    Raises:
        KeyError: If the estimate or interval columns are missing.
    """
    required = [TIDY.term, TIDY.estimate, TIDY.conf_low, TIDY.conf_high]
    if by is not None:
        required.append(by)
    validate_columns(tidy_df, required)

    terms = list(dict.fromkeys(tidy_df[TIDY.term]))
    levels = list(dict.fromkeys(tidy_df[by])) if by is not None else [None]
    n_levels = len(levels)

    width = 3.4 * max(len(terms), 1)
    height = 3.0 + 0.3 * n_levels
    fig, axes = new_figure(1, len(terms), figsize=(width, height), squeeze=False)
    for t_idx, term in enumerate(terms):
        ax = axes[0, t_idx]
        rows = tidy_df[tidy_df[TIDY.term] == term]
        for l_idx, level in enumerate(levels):
            sub = rows if level is None else rows[rows[by] == level]
            if sub.empty:
                continue
            est = float(sub[TIDY.estimate].iloc[0])
            lo = float(sub[TIDY.conf_low].iloc[0])
            hi = float(sub[TIDY.conf_high].iloc[0])
            ax.errorbar(
                est,
                l_idx,
                xerr=[[est - lo], [hi - est]],
                fmt=marker_for_group(l_idx),
                color=color_for_group(l_idx),
                capsize=3,
            )
        ax.axvline(0.0, color="0.5", linewidth=LINE_WIDTHS["guide"], linestyle=":")
        clean_axis(ax, grid_axis="x", nbins_x=4)
        ax.set_yticks(range(n_levels))
        if t_idx == 0:
            ax.set_yticklabels(
                [str(level) if level is not None else "" for level in levels]
            )
        else:
            ax.set_yticklabels([])
        ax.set_ylim(-0.6, n_levels - 0.4)
        ax.set_title(str(term))
        set_axis_labels(ax, x=axis_label("estimate"))
        add_panel_label(ax, panel_tag(t_idx), loc="upper right")

    return finalize_figure(fig, savepath=_savepath(output_dir, name)) or ""
