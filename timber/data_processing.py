"""
Loads the tree-measurement table and derives grouping columns.
"""

# The trees table records girth (in), height (ft) and timber volume (ft^3) of
# 31 felled black cherry trees. The chapter extends it with a categorical
# column so the same formula can be fitted per subgroup.

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from .schema import TREES

logger = logging.getLogger(__name__)

TREES_CSV = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "data", "trees.csv"
)
HEIGHT_CLASS_LABELS = ("short", "medium", "tall")
DEFAULT_GROUP_LABELS = ("A", "B", "C")


def load_table(filepath):
    """
    Load a tabular data set from a CSV file.

    Args:
        filepath (str): Path to the CSV file.

    Returns:
        pd.DataFrame: Loaded DataFrame.
    """
    return pd.read_csv(filepath)


def load_trees() -> pd.DataFrame:
    """Load the bundled tree-measurement table.

    Returns:
        pandas.DataFrame: 31 rows with ``Girth`` (in), ``Height`` (ft) and
        ``Volume`` (ft^3) as float columns. Each call returns a new frame.
    """
    df = load_table(TREES_CSV)
    df = df.astype(float)
    logger.debug("Loaded trees table with shape %s", df.shape)
    return df


def validate_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    """Raise ``KeyError`` listing every required column absent from ``df``."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise KeyError(
            f"Missing required column(s) {missing}. "
            f"Available columns: {list(df.columns)}"
        )


def add_height_class(
    df: pd.DataFrame,
    column: str = TREES.height,
    n_classes: int = 3,
    labels: Sequence[str] | None = None,
    out_column: str = TREES.height_class,
) -> pd.DataFrame:
    """Add an ordered categorical column by quantile-binning ``column``.

    Args:
        df (pandas.DataFrame): Input table; not modified.
        column (str): Numeric column to bin. Defaults to ``Height``.
        n_classes (int): Number of equal-count bins (at least 2).
        labels (Sequence[str], optional): One label per bin. Defaults to
            ``short/medium/tall`` for three bins and ``Q1..Qn`` otherwise.
        out_column (str): Name of the added column.

    Returns:
        pandas.DataFrame: Copy of ``df`` with ``out_column`` appended.

    Raises:
        KeyError: If ``column`` is missing.
        ValueError: If ``n_classes < 2``, the label count does not match, or
            ``column`` has too many tied values to form ``n_classes`` bins.
    """
    validate_columns(df, [column])
    if int(n_classes) < 2:
        raise ValueError(f"n_classes must be at least 2, got {n_classes!r}")
    if labels is None:
        if int(n_classes) == len(HEIGHT_CLASS_LABELS):
            labels = HEIGHT_CLASS_LABELS
        else:
            labels = [f"Q{i + 1}" for i in range(int(n_classes))]
    labels = list(labels)
    if len(labels) != int(n_classes):
        raise ValueError(
            f"Expected {n_classes} labels but got {len(labels)}: {labels}"
        )

    out = df.copy()
    values = pd.to_numeric(out[column], errors="coerce")
    try:
        out[out_column] = pd.qcut(values, q=int(n_classes), labels=labels)
    except ValueError as exc:
        if "Bin edges must be unique" not in str(exc):
            raise
        raise ValueError(
            f"n_classes={int(n_classes)} gives tied quantile edges for {column!r}: "
            f"only {values.nunique()} distinct values. Use fewer classes."
        ) from exc
    return out


def add_random_group(
    df: pd.DataFrame,
    labels: Sequence[str] = DEFAULT_GROUP_LABELS,
    seed: int = 0,
    column: str = TREES.group,
) -> pd.DataFrame:
    """Add a synthetic categorical column with seeded random labels.

    Args:
        df (pandas.DataFrame): Input table; not modified.
        labels (Sequence[str]): Category labels to draw from.
        seed (int): Seed for ``numpy.random.default_rng``.
        column (str): Name of the added column.

    Returns:
        pandas.DataFrame: Copy of ``df`` with an unordered categorical column
        whose categories are ``labels`` in the given order.
    """
    labels = list(labels)
    if not labels:
        raise ValueError("labels must contain at least one category.")
    rng = np.random.default_rng(seed)
    drawn = rng.choice(labels, size=len(df), replace=True)
    out = df.copy()
    out[column] = pd.Categorical(drawn, categories=labels)
    return out


def split_by_group(df: pd.DataFrame, by: str) -> Dict[object, pd.DataFrame]:
    """Partition a table into one DataFrame per level of ``by``.

    Empty categorical levels are dropped and keys are returned in sorted
    (category) order. Each partition keeps the original row index.
    """
    validate_columns(df, [by])
    parts = {}
    for level, group in df.groupby(by, observed=True, sort=True):
        parts[level] = group.copy()
    return parts


def describe_table(df: pd.DataFrame) -> pd.DataFrame:
    """Summarize numeric columns, one row per variable.

    Returns:
        pandas.DataFrame: Columns ``variable, n, mean, sd, min, q25, median,
        q75, max``.
    """
    numeric = df.select_dtypes(include="number")
    if numeric.empty:
        return pd.DataFrame(
            columns=[
                "variable", "n", "mean", "sd", "min", "q25", "median", "q75", "max"
            ]
        )
    desc = numeric.describe().T.reset_index()
    desc = desc.rename(
        columns={
            "index": "variable",
            "count": "n",
            "std": "sd",
            "25%": "q25",
            "50%": "median",
            "75%": "q75",
        }
    )
    desc["n"] = desc["n"].astype(int)
    return desc[["variable", "n", "mean", "sd", "min", "q25", "median", "q75", "max"]]
