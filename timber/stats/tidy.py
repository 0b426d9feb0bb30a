"""Convert fitted models into tidy DataFrames.

Three views are provided for every fitted linear model:

- ``tidy``: one row per coefficient,
- ``glance``: one row of whole-model fit statistics, and
- ``augment``: the fitted data with per-observation columns.

Column names come from :class:`timber.schema.TidyColumns` so tables from
different models (or different subgroups) can be concatenated directly.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..schema import TIDY

DEFAULT_CONF_LEVEL = 0.95

TIDY_COLUMNS = [TIDY.term, TIDY.estimate, TIDY.std_error, TIDY.statistic, TIDY.p_value]
GLANCE_COLUMNS = [
    "r_squared",
    "adj_r_squared",
    "sigma",
    "statistic",
    "p_value",
    "df",
    "log_lik",
    "aic",
    "bic",
    "deviance",
    "df_residual",
    "nobs",
]
AUGMENT_COLUMNS = [
    TIDY.fitted,
    TIDY.resid,
    TIDY.hat,
    TIDY.sigma,
    TIDY.cooksd,
    TIDY.std_resid,
]


def _check_conf_level(conf_level: float) -> float:
    level = float(conf_level)
    if not (0.0 < level < 1.0):
        raise ValueError(f"conf_level must be between 0 and 1, got {conf_level!r}")
    return level


def tidy(
    model, conf_int: bool = False, conf_level: float = DEFAULT_CONF_LEVEL
) -> pd.DataFrame:
    """Summarize model coefficients as a DataFrame.

    Args:
        model: Fitted statsmodels regression results.
        conf_int (bool): Add ``conf_low`` / ``conf_high`` columns.
        conf_level (float): Confidence level for the interval, in (0, 1).

    Returns:
        pandas.DataFrame: Columns ``term, estimate, std_error, statistic,
        p_value`` (plus the interval columns), one row per design-matrix
        column in design order.
    """
    level = _check_conf_level(conf_level)
    out = pd.DataFrame(
        {
            TIDY.term: list(model.params.index),
            TIDY.estimate: np.asarray(model.params, dtype=float),
            TIDY.std_error: np.asarray(model.bse, dtype=float),
            TIDY.statistic: np.asarray(model.tvalues, dtype=float),
            TIDY.p_value: np.asarray(model.pvalues, dtype=float),
        }
    )
    if conf_int:
        ci = np.asarray(model.conf_int(alpha=1.0 - level), dtype=float)
        out[TIDY.conf_low] = ci[:, 0]
        out[TIDY.conf_high] = ci[:, 1]
    return out


def glance(model) -> pd.DataFrame:
    """Summarize whole-model fit statistics as a one-row DataFrame.

    ``sigma`` is the residual standard error, ``statistic`` / ``p_value`` are
    the overall F test, ``df`` is its numerator degrees of freedom
    (non-intercept coefficients) and ``deviance`` is the residual sum of
    squares.
    """
    row = {
        "r_squared": float(model.rsquared),
        "adj_r_squared": float(model.rsquared_adj),
        "sigma": float(np.sqrt(model.scale)),
        "statistic": float(model.fvalue) if model.df_model > 0 else np.nan,
        "p_value": float(model.f_pvalue) if model.df_model > 0 else np.nan,
        "df": float(model.df_model),
        "log_lik": float(model.llf),
        "aic": float(model.aic),
        "bic": float(model.bic),
        "deviance": float(model.ssr),
        "df_residual": float(model.df_resid),
        "nobs": int(model.nobs),
    }
    return pd.DataFrame([row], columns=GLANCE_COLUMNS)


def augment(model, data: pd.DataFrame | None = None) -> pd.DataFrame:
    """Attach fitted values and influence measures to the modeled rows.

    Args:
        model: Fitted statsmodels regression results from a formula.
        data (pandas.DataFrame, optional): Table to augment. Defaults to the
            frame the model was fitted on. Only rows used in the fit (after
            missing-value removal) are returned.

    Returns:
        pandas.DataFrame: ``data`` rows plus ``.fitted, .resid, .hat, .sigma,
        .cooksd, .std_resid``. ``.sigma`` is the residual standard deviation
        with that observation left out.
    """
    source = data if data is not None else model.model.data.frame
    rows = model.model.data.row_labels
    if rows is None:
        out = source.reset_index(drop=True).copy()
    else:
        out = source.loc[rows].copy()

    influence = model.get_influence()
    out[TIDY.fitted] = np.asarray(model.fittedvalues, dtype=float)
    out[TIDY.resid] = np.asarray(model.resid, dtype=float)
    out[TIDY.hat] = np.asarray(influence.hat_matrix_diag, dtype=float)
    out[TIDY.sigma] = np.sqrt(np.asarray(influence.sigma2_not_obsi, dtype=float))
    out[TIDY.cooksd] = np.asarray(influence.cooks_distance[0], dtype=float)
    out[TIDY.std_resid] = np.asarray(influence.resid_studentized_internal, dtype=float)
    return out
