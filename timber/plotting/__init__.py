"""
Figure generation for the linear-regression walkthrough.

All plotting functions accept a DataFrame or a fitted model and write a
PNG/PDF/SVG bundle. They do not fit anything beyond the closed-form line
used for annotation.

Modules:
    data_plots:
        (1) Scatter matrix of the raw trees table
        (2) Volume vs. Girth with fitted line and confidence band
        (3) Per-group scatter with one fitted line per group
        (4) Forest plot of coefficient estimates with intervals

    diagnostic_plots:
        Four-panel residual diagnostics for a fitted linear model.

    style:
        Shared sizes, colours, labels and the save/finalize helpers.

Design Principles:
    1. Input validation with explicit KeyError for missing required columns.

    2. Passing ``output_dir=None`` renders without writing files.
"""

from .data_plots import (
    plot_coefficients,
    plot_fit_by_group,
    plot_fit_line,
    plot_scatter_matrix,
)
from .diagnostic_plots import plot_lm_diagnostics
from .style import apply_global_style, save_figure_bundle, set_global_style

__all__ = [
    "plot_scatter_matrix",
    "plot_fit_line",
    "plot_fit_by_group",
    "plot_coefficients",
    "plot_lm_diagnostics",
    "apply_global_style",
    "set_global_style",
    "save_figure_bundle",
]
