"""Predict from fitted formula models with a row-preserving contract."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..schema import TIDY
from .formula import formula_of, parse_formula

INTERVAL_TYPES = ("confidence", "prediction")


def predict_lm(
    model,
    new_data: pd.DataFrame,
    interval: str | None = None,
    level: float = 0.95,
) -> pd.DataFrame:
    """Predict the response for every row of ``new_data``.

    Args:
        model: Fitted statsmodels results built from a formula.
        new_data (pandas.DataFrame): Rows to predict; must hold every
            predictor column referenced by the formula.
        interval (str, optional): ``"confidence"`` for the mean response or
            ``"prediction"`` for a new observation.
        level (float): Interval coverage, in (0, 1).

    Returns:
        pandas.DataFrame: Same index and row count as ``new_data`` with column
        ``.pred`` and, when ``interval`` is given, ``.pred_lower`` and
        ``.pred_upper``. Rows with a missing predictor value are NaN.

    Raises:
        ValueError: If ``interval`` or ``level`` is invalid.
    """
    if interval is not None and interval not in INTERVAL_TYPES:
        raise ValueError(
            f"Unknown interval type {interval!r}; expected one of {INTERVAL_TYPES}."
        )
    if not (0.0 < float(level) < 1.0):
        raise ValueError(f"level must be between 0 and 1, got {level!r}")

    columns = [TIDY.pred]
    if interval is not None:
        columns += [TIDY.pred_lower, TIDY.pred_upper]
    out = pd.DataFrame(np.nan, index=new_data.index, columns=columns)

    predictors = parse_formula(formula_of(model)).predictors
    present = [col for col in predictors if col in new_data.columns]
    complete = new_data[present].notna().all(axis=1) if present else pd.Series(
        True, index=new_data.index
    )
    subset = new_data.loc[complete]
    if subset.empty:
        return out

    frame = model.get_prediction(subset).summary_frame(alpha=1.0 - float(level))
    out.loc[complete, TIDY.pred] = frame["mean"].to_numpy(dtype=float)
    if interval == "confidence":
        out.loc[complete, TIDY.pred_lower] = frame["mean_ci_lower"].to_numpy(float)
        out.loc[complete, TIDY.pred_upper] = frame["mean_ci_upper"].to_numpy(float)
    elif interval == "prediction":
        out.loc[complete, TIDY.pred_lower] = frame["obs_ci_lower"].to_numpy(float)
        out.loc[complete, TIDY.pred_upper] = frame["obs_ci_upper"].to_numpy(float)
    return out
