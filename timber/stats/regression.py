"""Provide closed-form single-predictor regression used for plot annotation.

This module supports:
- slope/intercept annotation of scatter plots with one predictor, and
- an independent cross-check of the formula-based fit for ``y ~ x``.
"""

from __future__ import annotations

import math
from typing import Dict

import numpy as np
from scipy.stats import t as student_t


def linear_regression(
    x: np.ndarray, y: np.ndarray, min_points: int = 3
) -> Dict[str, float]:
    """Fit an ordinary least-squares straight line to finite data pairs.

    Args:
        x (numpy.ndarray): Predictor values.
        y (numpy.ndarray): Response values.
        min_points (int, optional): Minimum number of finite paired
            observations required. Defaults to ``3``.

    Returns:
        dict[str, float]: Regression diagnostics with keys ``m`` (slope),
        ``b`` (intercept), ``r2`` (coefficient of determination), ``se_m``,
        ``se_b``, ``ci95_m``, ``ci95_b`` (95% half-widths), ``p_m``
        (p-value for slope), plus ``n``, ``dof``, ``mse``, ``ssxx`` and
        ``xbar`` for building confidence bands.

    Raises:
        ValueError: If there are insufficient valid points or insufficient x/y
            variance.

    Note:
        Non-finite pairs are dropped before fitting, so ``n`` may be smaller
        than ``len(x)``.
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_arr = x_arr[mask]
    y_arr = y_arr[mask]
    n = int(len(x_arr))
    if n < min_points:
        raise ValueError("Insufficient valid data for regression.")

    xbar = float(np.mean(x_arr))
    ssxx = float(np.sum((x_arr - xbar) ** 2))
    sst = float(np.sum((y_arr - y_arr.mean()) ** 2))
    if ssxx <= 0 or sst <= 0:
        raise ValueError("Insufficient variance for regression.")

    m, b = np.polyfit(x_arr, y_arr, 1)
    yhat = m * x_arr + b
    resid = y_arr - yhat

    sse = float(np.sum(resid**2))
    r2 = 1.0 - sse / sst

    dof = n - 2
    mse = sse / dof if dof > 0 else np.inf

    se_m = math.nan
    se_b = math.nan
    ci95_m = math.nan
    ci95_b = math.nan
    p_m = math.nan

    if dof > 0:
        se_m = float(np.sqrt(mse / ssxx))
        se_b = float(np.sqrt(mse * (1.0 / n + (xbar**2) / ssxx)))
        t_stat = m / se_m if se_m > 0 else np.inf
        p_m = float(2 * student_t.sf(abs(t_stat), dof))
        t_crit = float(student_t.ppf(0.975, dof))
        ci95_m = t_crit * se_m
        ci95_b = t_crit * se_b

    return {
        "m": float(m),
        "b": float(b),
        "r2": float(r2),
        "se_m": se_m,
        "se_b": se_b,
        "ci95_m": ci95_m,
        "ci95_b": ci95_b,
        "p_m": p_m,
        "n": n,
        "dof": dof,
        "mse": mse,
        "ssxx": ssxx,
        "xbar": xbar,
    }


def confidence_band(
    fit: Dict[str, float], x_grid: np.ndarray, level: float = 0.95
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Evaluate the fitted line and its mean-response confidence band.

    Args:
        fit (dict): Output of :func:`linear_regression`.
        x_grid (numpy.ndarray): Points at which to evaluate the band.
        level (float): Two-sided coverage of the band.

    Returns:
        tuple: ``(yhat, lower, upper)`` arrays matching ``x_grid``. The band is
        NaN when the fit has no residual degrees of freedom.
    """
    xg = np.asarray(x_grid, dtype=float)
    yhat = fit["m"] * xg + fit["b"]
    if fit["dof"] <= 0:
        nan = np.full_like(xg, np.nan)
        return yhat, nan, nan
    t_crit = float(student_t.ppf(0.5 + level / 2.0, fit["dof"]))
    leverage = 1.0 / fit["n"] + (xg - fit["xbar"]) ** 2 / fit["ssxx"]
    se_fit = np.sqrt(fit["mse"] * leverage)
    return yhat, yhat - t_crit * se_fit, yhat + t_crit * se_fit
