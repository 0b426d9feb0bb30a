"""Fit one model per subgroup of a table and collect tidy summaries.

The pattern is split -> fit -> summarize -> bind: partition the table on a
categorical column, fit the same formula to every partition, convert each
fit to a tidy table and stack the results with the group label as the first
column.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

import pandas as pd

from .data_processing import split_by_group
from .stats.formula import fit_lm
from .stats.tidy import DEFAULT_CONF_LEVEL, augment, glance, tidy

logger = logging.getLogger(__name__)

DEFAULT_MIN_ROWS = 3


def fit_by_group(
    data: pd.DataFrame,
    formula: str,
    by: str,
    min_rows: int = DEFAULT_MIN_ROWS,
) -> Dict[object, object]:
    """Fit ``formula`` separately within each level of ``by``.

    Args:
        data (pandas.DataFrame): Table holding the formula columns and ``by``.
        formula (str): Two-sided patsy formula fitted to every group.
        by (str): Categorical column defining the partitions.
        min_rows (int): Groups with fewer rows are skipped with a warning.

    Returns:
        dict: Group label -> fitted model, in sorted group order.

    Raises:
        KeyError: If ``by`` is not a column of ``data``.
        patsy.PatsyError: If the formula references a missing column.
    """
    models = {}
    for level, part in split_by_group(data, by).items():
        if len(part) < int(min_rows):
            logger.warning(
                "Skipping group %s=%r: %d row(s) is fewer than min_rows=%d",
                by,
                level,
                len(part),
                int(min_rows),
            )
            continue
        models[level] = fit_lm(formula, part)
    logger.info("Fitted %r in %d group(s) of %s", formula, len(models), by)
    return models


def _bind_by_group(
    models: Dict[object, object],
    by: str,
    summarize: Callable[[object], pd.DataFrame],
) -> pd.DataFrame:
    frames = []
    for level, model in models.items():
        frame = summarize(model)
        frame.insert(0, by, level)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=[by])
    return pd.concat(frames, ignore_index=True)


def tidy_models(
    models: Dict[object, object],
    by: str,
    conf_int: bool = False,
    conf_level: float = DEFAULT_CONF_LEVEL,
) -> pd.DataFrame:
    """Coefficient tables of already-fitted group models, group label first."""
    return _bind_by_group(
        models, by, lambda m: tidy(m, conf_int=conf_int, conf_level=conf_level)
    )


def glance_models(models: Dict[object, object], by: str) -> pd.DataFrame:
    """One fit-statistics row per already-fitted group model."""
    return _bind_by_group(models, by, glance)


def tidy_by_group(
    data: pd.DataFrame,
    formula: str,
    by: str,
    conf_int: bool = False,
    conf_level: float = DEFAULT_CONF_LEVEL,
    min_rows: int = DEFAULT_MIN_ROWS,
) -> pd.DataFrame:
    """Coefficient table of ``formula`` fitted within each level of ``by``."""
    models = fit_by_group(data, formula, by, min_rows=min_rows)
    return tidy_models(models, by, conf_int=conf_int, conf_level=conf_level)


def glance_by_group(
    data: pd.DataFrame,
    formula: str,
    by: str,
    min_rows: int = DEFAULT_MIN_ROWS,
) -> pd.DataFrame:
    """One fit-statistics row per level of ``by``."""
    models = fit_by_group(data, formula, by, min_rows=min_rows)
    return glance_models(models, by)


def augment_by_group(
    data: pd.DataFrame,
    formula: str,
    by: str,
    min_rows: int = DEFAULT_MIN_ROWS,
) -> pd.DataFrame:
    """Per-observation fitted values and influence, computed within groups."""
    models = fit_by_group(data, formula, by, min_rows=min_rows)
    frames = []
    for model in models.values():
        frames.append(augment(model))
    if not frames:
        return pd.DataFrame(columns=list(data.columns))
    return pd.concat(frames, ignore_index=True)
