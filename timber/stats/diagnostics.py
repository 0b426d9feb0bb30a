"""Numerical regression diagnostics behind the standard diagnostic plots.

The four classic panels (residuals vs fitted, normal Q-Q, scale-location,
residuals vs leverage) each have a numerical counterpart here, so the
assumption checks can be logged and tabulated as well as plotted.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.stattools import durbin_watson

logger = logging.getLogger(__name__)

COOKS_FACTOR = 4.0
MIN_SHAPIRO_N = 3
DW_LOWER = 1.5
DW_UPPER = 2.5


def influence_frame(model) -> pd.DataFrame:
    """Per-observation leverage and residual diagnostics.

    Returns:
        pandas.DataFrame: Indexed like the fitted rows, with ``fitted``,
        ``resid``, ``leverage``, ``cooks_d``, ``std_resid`` (internally
        studentized) and ``student_resid`` (externally studentized).
    """
    influence = model.get_influence()
    return pd.DataFrame(
        {
            "fitted": np.asarray(model.fittedvalues, dtype=float),
            "resid": np.asarray(model.resid, dtype=float),
            "leverage": np.asarray(influence.hat_matrix_diag, dtype=float),
            "cooks_d": np.asarray(influence.cooks_distance[0], dtype=float),
            "std_resid": np.asarray(influence.resid_studentized_internal, dtype=float),
            "student_resid": np.asarray(
                influence.resid_studentized_external, dtype=float
            ),
        },
        index=model.fittedvalues.index,
    )


def check_assumptions(model, alpha: float = 0.05) -> Dict[str, Any]:
    """Run residual assumption tests for a fitted linear model.

    Args:
        model: Fitted statsmodels regression results.
        alpha (float): Significance level for the pass/fail flags.

    Returns:
        dict[str, Any]: ``shapiro_stat``/``shapiro_p`` (normality),
        ``bp_stat``/``bp_p`` (Breusch-Pagan constant variance),
        ``durbin_watson``, ``n_influential`` (Cook's distance above
        ``4/n``), ``cooks_threshold``, the flags ``normal_ok``,
        ``constant_variance_ok`` and ``independence_ok``, and ``notes``.
    """
    resid = np.asarray(model.resid, dtype=float)
    n = int(len(resid))
    notes: list[str] = []

    if n >= MIN_SHAPIRO_N:
        sw = scipy_stats.shapiro(resid)
        shapiro_stat, shapiro_p = float(sw.statistic), float(sw.pvalue)
    else:
        shapiro_stat = shapiro_p = math.nan
        notes.append(f"Shapiro-Wilk needs n >= {MIN_SHAPIRO_N}; got n={n}.")

    exog = np.asarray(model.model.exog, dtype=float)
    if exog.ndim == 2 and exog.shape[1] >= 2:
        bp_stat, bp_p, _, _ = het_breuschpagan(resid, exog)
        bp_stat, bp_p = float(bp_stat), float(bp_p)
    else:
        bp_stat = bp_p = math.nan
        notes.append("Breusch-Pagan needs at least one predictor.")

    dw = float(durbin_watson(resid))

    cooks = np.asarray(model.get_influence().cooks_distance[0], dtype=float)
    threshold = COOKS_FACTOR / n if n > 0 else math.nan
    n_influential = int(np.sum(cooks > threshold)) if n > 0 else 0

    result = {
        "shapiro_stat": shapiro_stat,
        "shapiro_p": shapiro_p,
        "bp_stat": bp_stat,
        "bp_p": bp_p,
        "durbin_watson": dw,
        "n_influential": n_influential,
        "cooks_threshold": threshold,
        "normal_ok": bool(np.isfinite(shapiro_p) and shapiro_p >= alpha),
        "constant_variance_ok": bool(np.isfinite(bp_p) and bp_p >= alpha),
        "independence_ok": bool(DW_LOWER <= dw <= DW_UPPER),
        "notes": " ".join(notes),
    }
    logger.debug("Assumption checks: %s", result)
    return result
