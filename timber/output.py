"""Write model tables to reproducible CSV files.

This module is the output boundary between in-memory tidy tables and the
CSV artifacts written by the walkthrough.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping

import pandas as pd

logger = logging.getLogger(__name__)


def save_model_tables(
    tables: Mapping[str, pd.DataFrame], output_dir: str = "output"
) -> Dict[str, str]:
    """Save each named table to ``<output_dir>/<name>.csv``.

    Args:
        tables (Mapping[str, pandas.DataFrame]): Table name -> DataFrame.
        output_dir (str): Directory where CSV outputs are written; created if
            needed.

    Returns:
        dict[str, str]: Table name -> written path, in input order.

    Raises:
        ValueError: If a table name is empty.
    """
    os.makedirs(output_dir, exist_ok=True)
    written: Dict[str, str] = {}
    for name, df in tables.items():
        stem = str(name).strip()
        if not stem:
            raise ValueError("Table names must be non-empty.")
        path = os.path.join(output_dir, f"{stem}.csv")
        df.to_csv(path, index=False)
        logger.info("Saved %s (%d rows) to %s", stem, len(df), path)
        written[stem] = path
    return written
