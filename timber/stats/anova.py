"""Analysis-of-variance tables for single models and nested comparisons."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from statsmodels.stats.anova import anova_lm

from ..schema import TIDY

logger = logging.getLogger(__name__)

ANOVA_COLUMNS = [TIDY.term, "df", "sumsq", "meansq", TIDY.statistic, TIDY.p_value]
COMPARE_COLUMNS = [
    "model",
    "formula",
    "df_residual",
    "rss",
    "df",
    "sumsq",
    TIDY.statistic,
    TIDY.p_value,
]


def anova_table(model) -> pd.DataFrame:
    """Sequential (type I) ANOVA table of one fitted model.

    Each term's sum of squares is the reduction in residual sum of squares
    when it is added after the terms listed before it, so term order in the
    formula matters. The ``Residuals`` row is last and has NaN test columns.
    """
    raw = anova_lm(model, typ=1)
    out = pd.DataFrame(
        {
            TIDY.term: [
                "Residuals" if str(term) == "Residual" else str(term)
                for term in raw.index
            ],
            "df": raw["df"].to_numpy(dtype=float),
            "sumsq": raw["sum_sq"].to_numpy(dtype=float),
            "meansq": raw["mean_sq"].to_numpy(dtype=float),
            TIDY.statistic: raw["F"].to_numpy(dtype=float),
            TIDY.p_value: raw["PR(>F)"].to_numpy(dtype=float),
        }
    )
    return out[ANOVA_COLUMNS]


def _model_label(model) -> str:
    formula = getattr(model.model, "formula", None)
    return str(formula) if formula is not None else str(model.model.endog_names)


def compare_models(*models) -> pd.DataFrame:
    """Compare nested linear models with extra-sum-of-squares F tests.

    Models are compared in the order given, each against the one before it,
    so pass them from smallest to largest. The F statistic uses the residual
    mean square of the largest model.

    Returns:
        pandas.DataFrame: One row per model with ``model`` (1-based position),
        ``formula``, ``df_residual``, ``rss`` and, from the second row on,
        ``df`` (parameters added), ``sumsq`` (RSS reduction), ``statistic``
        (F) and ``p_value``.

    Raises:
        ValueError: If fewer than two models are given, or the models differ
            in response or number of observations.
    """
    if len(models) < 2:
        raise ValueError("compare_models needs at least two fitted models.")

    nobs = {int(m.nobs) for m in models}
    if len(nobs) != 1:
        raise ValueError(
            f"Models were fitted on different numbers of observations: {sorted(nobs)}"
        )
    responses = {str(m.model.endog_names) for m in models}
    if len(responses) != 1:
        raise ValueError(f"Models have different responses: {sorted(responses)}")

    raw = anova_lm(*models)
    out = pd.DataFrame(
        {
            "model": np.arange(1, len(models) + 1),
            "formula": [_model_label(m) for m in models],
            "df_residual": raw["df_resid"].to_numpy(dtype=float),
            "rss": raw["ssr"].to_numpy(dtype=float),
            "df": raw["df_diff"].to_numpy(dtype=float),
            "sumsq": raw["ss_diff"].to_numpy(dtype=float),
            TIDY.statistic: raw["F"].to_numpy(dtype=float),
            TIDY.p_value: raw["Pr(>F)"].to_numpy(dtype=float),
        }
    )
    out.loc[0, ["df", "sumsq", TIDY.statistic, TIDY.p_value]] = np.nan
    logger.debug("Compared %d nested models", len(models))
    return out[COMPARE_COLUMNS]
