"""Define standardized column names for data and tidy-summary DataFrames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TreeColumns:
    """Container for the tree-measurement column labels.

    Attributes:
        girth: Trunk diameter in inches, measured 4 ft 6 in above the ground.
        height: Tree height in feet.
        volume: Usable timber volume in cubic feet.
        height_class: Ordered categorical added by quantile-binning height.
        group: Synthetic categorical label added for subgroup demonstrations.
    """

    girth: str = "Girth"
    height: str = "Height"
    volume: str = "Volume"
    height_class: str = "height_class"
    group: str = "group"


@dataclass(frozen=True)
class TidyColumns:
    """Container for tidy-summary column labels.

    These names are shared by every coefficient, fit-statistic, ANOVA and
    per-observation table so downstream code can treat any model the same.
    """

    term: str = "term"
    estimate: str = "estimate"
    std_error: str = "std_error"
    statistic: str = "statistic"
    p_value: str = "p_value"
    conf_low: str = "conf_low"
    conf_high: str = "conf_high"
    fitted: str = ".fitted"
    resid: str = ".resid"
    hat: str = ".hat"
    sigma: str = ".sigma"
    cooksd: str = ".cooksd"
    std_resid: str = ".std_resid"
    pred: str = ".pred"
    pred_lower: str = ".pred_lower"
    pred_upper: str = ".pred_upper"


TREES = TreeColumns()
TIDY = TidyColumns()
