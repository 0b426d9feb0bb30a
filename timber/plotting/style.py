"""Centralized plotting style, labels, and save helpers."""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

OUTPUT_FORMATS: tuple[str, ...] = ("png", "pdf", "svg")
FIGURE_DPI = 300
_STYLE_STATE = {"initialized": False}

QQ_MIN_N = 20


@dataclass(frozen=True)
class StyleConfig:
    BASE_FONTSIZE: float = 12.0
    TITLE_FONTSIZE: float = 14.0
    LABEL_FONTSIZE: float = 12.0
    TICK_FONTSIZE: float = 11.0
    LEGEND_FONTSIZE: float = 11.0
    PANEL_FONTSIZE: float = 13.0
    ANNOTATION_FONTSIZE: float = 11.0
    LINEWIDTH: float = 2.0
    LINEWIDTH_THIN: float = 1.2
    MARKERSIZE: float = 6.0
    ALPHA_POINT: float = 0.75
    ALPHA_BAND: float = 0.15
    GRID_ALPHA: float = 0.20
    FIGSIZE_SINGLE: tuple[float, float] = (7.0, 4.2)
    FIGSIZE_WIDE: tuple[float, float] = (9.5, 4.2)
    FIGSIZE_2x2: tuple[float, float] = (9.5, 7.2)
    FIGSIZE_3x3: tuple[float, float] = (9.0, 8.5)


STYLE = StyleConfig()

FIG_SIZES: dict[str, tuple[float, float]] = {
    "single": STYLE.FIGSIZE_SINGLE,
    "wide": STYLE.FIGSIZE_WIDE,
    "grid_2x2": STYLE.FIGSIZE_2x2,
    "grid_3x3": STYLE.FIGSIZE_3x3,
}

FONT_SIZES = {
    "base": STYLE.BASE_FONTSIZE,
    "title": STYLE.TITLE_FONTSIZE,
    "axis_label": STYLE.LABEL_FONTSIZE,
    "tick": STYLE.TICK_FONTSIZE,
    "legend": STYLE.LEGEND_FONTSIZE,
    "panel": STYLE.PANEL_FONTSIZE,
    "annotation": STYLE.ANNOTATION_FONTSIZE,
}

LINE_WIDTHS = {
    "fit": STYLE.LINEWIDTH,
    "smooth": STYLE.LINEWIDTH_THIN,
    "guide": 0.9,
}

MARKER_SIZES = {
    "point": 30,
    "diagnostic": 24,
}

ALPHAS = {
    "point": STYLE.ALPHA_POINT,
    "ci_band": STYLE.ALPHA_BAND,
}

GROUP_COLORS = ("#1f77b4", "#ff7f0e", "#2ca02c", "#9467bd", "#8c564b", "#17becf")
GROUP_MARKERS = ("o", "s", "^", "D", "v", "P")

AXIS_LABELS = {
    "Girth": r"Girth / in",
    "Height": r"Height / ft",
    "Volume": r"Volume / $\mathrm{ft^3}$",
    "fitted": r"Fitted values $\hat{y}$",
    "resid": r"Residuals $y-\hat{y}$",
    "std_resid": "Standardized residuals",
    "sqrt_std_resid": r"$\sqrt{|\mathrm{Standardized\ residuals}|}$",
    "theoretical": "Theoretical quantiles",
    "leverage": "Leverage",
    "estimate": "Estimate",
}


def axis_label(name: str) -> str:
    """Return the display label for a column or diagnostic quantity."""
    return AXIS_LABELS.get(name, name)


def apply_global_style(font_scale: float = 1.0, context: str = "paper") -> None:
    """Apply global Matplotlib style, scaled by context and font scale."""
    ctx_scale = {
        "paper": 1.0,
        "notebook": 1.05,
        "talk": 1.12,
    }
    scale = float(font_scale) * ctx_scale.get(context, 1.0)
    plt.rcParams.update(
        {
            "font.family": "STIXGeneral",
            "font.size": STYLE.BASE_FONTSIZE * scale,
            "axes.titlesize": STYLE.TITLE_FONTSIZE * scale,
            "figure.titlesize": STYLE.TITLE_FONTSIZE * scale,
            "axes.labelsize": STYLE.LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "ytick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "legend.fontsize": STYLE.LEGEND_FONTSIZE * scale,
            "mathtext.fontset": "stix",
            "mathtext.default": "regular",
            "axes.titlepad": 8,
            "axes.labelpad": 6,
            "axes.linewidth": STYLE.LINEWIDTH_THIN,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "grid.alpha": STYLE.GRID_ALPHA,
            "grid.linestyle": ":",
            "grid.linewidth": 0.7,
            "axes.grid": False,
            "legend.frameon": False,
            "lines.linewidth": STYLE.LINEWIDTH,
            "lines.markersize": STYLE.MARKERSIZE,
            "errorbar.capsize": 3.0,
            "figure.dpi": 120,
            "savefig.dpi": FIGURE_DPI,
            "savefig.bbox": "tight",
            "savefig.pad_inches": 0.12,
        }
    )


def set_global_style() -> None:
    """Apply global plotting style once per process."""
    if not _STYLE_STATE["initialized"]:
        apply_global_style(font_scale=1.0, context="paper")
        _STYLE_STATE["initialized"] = True


def color_for_group(index: int) -> str:
    """Return a stable color for the ``index``-th group level."""
    return GROUP_COLORS[int(index) % len(GROUP_COLORS)]


def marker_for_group(index: int) -> str:
    """Return a marker code for the ``index``-th group level."""
    return GROUP_MARKERS[int(index) % len(GROUP_MARKERS)]


def fig_size(kind: str = "single") -> tuple[float, float]:
    """Return standardized figure size tuple for a named figure kind."""
    return FIG_SIZES.get(kind, FIG_SIZES["single"])


def panel_tag(index: int) -> str:
    """Return panel label text as (a), (b), ..."""
    return f"({chr(ord('a') + int(index))})"


def add_panel_label(
    ax: Axes,
    label: str,
    *,
    loc: str = "upper left",
    pad: float = 0.02,
    fontsize: float | None = None,
) -> None:
    """Render a panel label in axes coordinates at one corner."""
    anchor = {
        "upper left": ("left", "top", pad, 1.0 - pad),
        "upper right": ("right", "top", 1.0 - pad, 1.0 - pad),
        "lower left": ("left", "bottom", pad, pad),
        "lower right": ("right", "bottom", 1.0 - pad, pad),
    }
    ha, va, x0, y0 = anchor.get(loc, anchor["upper left"])
    ax.text(
        x0,
        y0,
        label,
        transform=ax.transAxes,
        ha=ha,
        va=va,
        fontsize=fontsize or FONT_SIZES["panel"],
        fontweight="bold",
        color="0.20",
    )


def add_info_box(
    ax: Axes,
    text: str,
    loc: str = "upper left",
    fontsize: float = FONT_SIZES["annotation"],
) -> None:
    """Add a consistently styled annotation anchored to one corner."""
    anchor_map = {
        "upper left": (0.02, 0.90, "left", "top"),
        "upper right": (0.98, 0.90, "right", "top"),
        "lower left": (0.02, 0.08, "left", "bottom"),
        "lower right": (0.98, 0.08, "right", "bottom"),
    }
    x, y, ha, va = anchor_map.get(loc, anchor_map["upper left"])
    ax.text(
        x,
        y,
        text,
        transform=ax.transAxes,
        ha=ha,
        va=va,
        fontsize=fontsize,
        color="0.35",
    )


def clean_axis(
    ax: Axes,
    *,
    grid_axis: str = "y",
    nbins_x: int = 6,
    nbins_y: int = 6,
) -> None:
    """Apply consistent ticks, grid, and spine/tick formatting to one axis."""
    ax.tick_params(axis="both", which="major", labelsize=FONT_SIZES["tick"], width=1.0)
    ax.xaxis.set_major_locator(MaxNLocator(nbins=nbins_x, min_n_ticks=4))
    ax.yaxis.set_major_locator(MaxNLocator(nbins=nbins_y, min_n_ticks=4))
    for side in ("left", "bottom"):
        ax.spines[side].set_linewidth(STYLE.LINEWIDTH_THIN)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(False)
    if grid_axis == "both":
        ax.grid(True, axis="both", alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7)
    elif grid_axis in {"x", "y"}:
        ax.grid(
            True, axis=grid_axis, alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7
        )


def set_axis_labels(ax: Axes, x: str | None = None, y: str | None = None) -> None:
    """Apply standardized axis labels with project typography."""
    if x is not None:
        ax.set_xlabel(x, fontsize=FONT_SIZES["axis_label"], labelpad=6)
    if y is not None:
        ax.set_ylabel(y, fontsize=FONT_SIZES["axis_label"], labelpad=6)


def should_plot_qq(n: int, min_n: int = QQ_MIN_N) -> bool:
    """Return whether Q-Q plot is meaningful for sample size n."""
    return int(n) >= int(min_n)


def fallback_note(kind: str, n: int, min_n: int = QQ_MIN_N) -> str:
    """Return standardized explanatory note when a diagnostic is omitted."""
    return (
        f"{kind} omitted (n={int(n)} < {int(min_n)}); "
        "insufficient sample size for a reliable shape diagnostic."
    )


def warn_skipped_qq(n: int, min_n: int = QQ_MIN_N) -> None:
    """Emit a standardized warning for skipped Q-Q diagnostics."""
    warnings.warn(
        (
            "Q-Q plot skipped: "
            f"n={int(n)} is below minimum n={int(min_n)} "
            "for meaningful normality assessment."
        ),
        RuntimeWarning,
        stacklevel=2,
    )


def new_figure(*args, **kwargs):
    """Create subplots after applying the global style."""
    set_global_style()
    return plt.subplots(*args, **kwargs)


def save_figure(
    fig: Figure,
    savepath_base: str | Path,
    formats: Sequence[str] = OUTPUT_FORMATS,
    dpi: int = FIGURE_DPI,
    *,
    bbox_inches: str = "tight",
    pad_inches: float = 0.12,
) -> Path:
    """Save a figure to multiple formats using one extensionless base path."""
    base = Path(savepath_base)
    base.parent.mkdir(parents=True, exist_ok=True)
    for ext in formats:
        target = base.with_suffix(f".{ext}")
        fig.savefig(
            str(target),
            dpi=dpi if ext == "png" else None,
            bbox_inches=bbox_inches,
            pad_inches=pad_inches,
        )
    return base.with_suffix(".png")


def save_figure_bundle(fig: Figure, png_path: str) -> str:
    """Save synchronized PNG, PDF, and SVG files for a figure."""
    base = Path(os.path.splitext(png_path)[0])
    save_figure(fig, base)
    return str(base.with_suffix(".png"))


def finalize_figure(
    fig: Figure,
    *,
    title: str | None = None,
    tight: bool = True,
    savepath: str | Path | None = None,
    formats: Sequence[str] = OUTPUT_FORMATS,
    close: bool = True,
) -> str | None:
    """Finalize layout and title, optionally save a bundle, and close."""
    if title:
        fig.suptitle(title, fontsize=FONT_SIZES["title"])
    if tight:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            fig.tight_layout(pad=1.2)

    saved = None
    if savepath is not None:
        savebase = Path(savepath)
        if savebase.suffix:
            savebase = savebase.with_suffix("")
        saved = str(save_figure(fig, savepath_base=savebase, formats=formats))
    if close:
        plt.close(fig)
    return saved


def sanitize_filename(name: str) -> str:
    """Normalize a filename component into a stable, filesystem-safe token."""
    text = re.sub(r"\s+", "_", str(name).strip())
    text = re.sub(r"[^A-Za-z0-9._-]+", "_", text)
    text = re.sub(r"_+", "_", text).strip("._")
    return text or "figure"
