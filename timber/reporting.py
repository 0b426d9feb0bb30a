"""Format model summaries and figure captions for console and text output.

This module is used after fitting to render tidy tables and model summaries
the way the walkthrough prints them, and to write caption files next to the
generated figures.
"""

from __future__ import annotations

import os
from typing import Iterable

import numpy as np
import pandas as pd

from .schema import TIDY
from .stats.formula import formula_of
from .stats.tidy import glance, tidy

SIGNIF_CODES = ((0.001, "***"), (0.01, "**"), (0.05, "*"), (0.1, "."))
SIGNIF_LEGEND = "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"
P_VALUE_COLUMNS = (TIDY.p_value,)


def format_pvalue(value: float) -> str:
    """Format p-values consistently for tables and annotations."""
    if value is None or not np.isfinite(float(value)):
        return "NaN"
    if float(value) < 1e-3:
        return "<0.001"
    return f"{float(value):.3f}"


def significance_stars(value: float) -> str:
    """Return the conventional significance code for a p-value.

    Returns an empty string for NaN or ``p >= 0.1``.
    """
    if value is None or not np.isfinite(float(value)):
        return ""
    for cutoff, code in SIGNIF_CODES:
        if float(value) < cutoff:
            return code
    return ""


def format_tidy(df: pd.DataFrame, digits: int = 4) -> str:
    """Render any tidy table as fixed-width text.

    Float columns use ``digits`` decimals; p-value columns use
    :func:`format_pvalue`.
    """
    if df.empty:
        return "(no rows)"
    shown = df.copy()
    for col in shown.columns:
        if col in P_VALUE_COLUMNS:
            shown[col] = [format_pvalue(v) for v in shown[col]]
        elif pd.api.types.is_float_dtype(shown[col]):
            shown[col] = [
                f"{v:.{digits}f}" if np.isfinite(v) else "" for v in shown[col]
            ]
    return shown.to_string(index=False)


def _residual_quantiles(model) -> str:
    resid = np.asarray(model.resid, dtype=float)
    qs = np.quantile(resid, [0.0, 0.25, 0.5, 0.75, 1.0])
    frame = pd.DataFrame([qs], columns=["Min", "1Q", "Median", "3Q", "Max"])
    return frame.to_string(index=False, float_format=lambda v: f"{v:.4f}")


def summary_text(model) -> str:
    """Build a console summary of a fitted linear model.

    The layout mirrors the classic regression printout: formula, residual
    quantiles, the coefficient table with significance codes, residual
    standard error, R-squared and the overall F test.
    """
    coefs = tidy(model)
    stats = glance(model).iloc[0]

    table = pd.DataFrame(
        {
            "Estimate": [f"{v:.4f}" for v in coefs[TIDY.estimate]],
            "Std. Error": [f"{v:.4f}" for v in coefs[TIDY.std_error]],
            "t value": [f"{v:.3f}" for v in coefs[TIDY.statistic]],
            "Pr(>|t|)": [format_pvalue(v) for v in coefs[TIDY.p_value]],
            "": [significance_stars(v) for v in coefs[TIDY.p_value]],
        },
        index=coefs[TIDY.term].to_list(),
    )

    try:
        header = f"Formula: {formula_of(model)}"
    except ValueError:
        header = f"Response: {model.model.endog_names}"

    lines = [
        header,
        "",
        "Residuals:",
        _residual_quantiles(model),
        "",
        "Coefficients:",
        table.to_string(),
        "---",
        SIGNIF_LEGEND,
        "",
        (
            f"Residual standard error: {stats['sigma']:.4f} on "
            f"{int(stats['df_residual'])} degrees of freedom"
        ),
        (
            f"Multiple R-squared: {stats['r_squared']:.4f},  "
            f"Adjusted R-squared: {stats['adj_r_squared']:.4f}"
        ),
    ]
    if np.isfinite(stats["statistic"]):
        lines.append(
            f"F-statistic: {stats['statistic']:.2f} on {int(stats['df'])} and "
            f"{int(stats['df_residual'])} DF,  "
            f"p-value: {format_pvalue(stats['p_value'])}"
        )
    return "\n".join(lines)


def _group_levels_text(levels: Iterable[object]) -> str:
    return ", ".join(str(level) for level in levels)


def generate_caption_texts(
    n_obs: int,
    model_names: Iterable[str],
    comparison: pd.DataFrame | None = None,
    group_column: str | None = None,
    group_levels: Iterable[object] = (),
    conf_level: float = 0.95,
) -> dict[str, str]:
    """Generate caption text for every walkthrough figure."""
    levels_txt = _group_levels_text(group_levels)
    pct = int(round(100 * float(conf_level)))

    captions: dict[str, str] = {}
    captions["scatter_matrix"] = (
        f"Figure 1. Pairwise scatter plots of girth (in), height (ft) and volume "
        f"(ft^3) for n={int(n_obs)} trees, with histograms on the diagonal. "
        "Volume rises steeply with girth and more weakly with height."
    )
    captions["fit_line"] = (
        "Figure 2. Volume against girth with the least-squares line "
        f"Volume ~ Girth and its {pct}% confidence band for the mean response. "
        "The annotation gives the fitted slope and R^2."
    )
    for name in model_names:
        captions[f"diagnostics_{name}"] = (
            f"Diagnostic panels for model '{name}': (a) residuals against fitted "
            "values with a LOWESS smooth, (b) normal Q-Q plot of standardized "
            "residuals, (c) scale-location plot of sqrt(|standardized residual|) "
            "against fitted values, and (d) standardized residuals against "
            "leverage with Cook's distance contours at 0.5 and 1."
        )

    if comparison is not None and not comparison.empty and len(comparison) > 1:
        last = comparison.iloc[-1]
        captions["fit_line"] += (
            f" Adding terms up to '{last['formula']}' changed the residual sum of "
            f"squares by {float(last['sumsq']):.3f} "
            f"(F={float(last[TIDY.statistic]):.3f}, "
            f"p={format_pvalue(last[TIDY.p_value])})."
        )

    if group_column:
        captions["fit_by_group"] = (
            f"Figure 3. Volume against girth within each level of {group_column} "
            f"({levels_txt}), with one least-squares line fitted per group."
        )
        captions["coefficients_by_group"] = (
            "Figure 4. Coefficient estimates from the per-group fits with "
            f"{pct}% confidence intervals. Non-overlapping intervals suggest the "
            "relationship differs between groups."
        )
    return captions


def write_caption_files(captions: dict[str, str], output_dir: str) -> list[str]:
    """Write figure caption text files to the target directory."""
    os.makedirs(output_dir, exist_ok=True)
    written: list[str] = []
    for stem, text in captions.items():
        path = os.path.join(output_dir, f"{stem}_caption.txt")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text.strip() + "\n")
        written.append(path)
    return written
