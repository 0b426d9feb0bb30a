"""
Statistical modeling utilities for the walkthrough.

This subpackage wraps formula-based linear modeling in small functions that
return pandas DataFrames with stable column names.

Modules:
    formula:
        Formula parsing, OLS/WLS fitting from formula strings and design
        matrix inspection.

    tidy:
        Coefficient (tidy), fit-statistic (glance) and per-observation
        (augment) tables.

    predict:
        Row-preserving prediction with confidence or prediction intervals.

    anova:
        Sequential ANOVA tables and nested-model F tests.

    diagnostics:
        Influence measures and residual assumption tests.

    regression:
        Closed-form single-predictor regression used for plot annotation.

Design Principle:
    This subpackage has no dependencies on plotting/ or reporting modules.
"""

from .anova import anova_table, compare_models
from .diagnostics import check_assumptions, influence_frame
from .formula import FormulaParts, fit_lm, formula_of, model_matrix, parse_formula
from .predict import predict_lm
from .regression import confidence_band, linear_regression
from .tidy import augment, glance, tidy

__all__ = [
    "FormulaParts",
    "fit_lm",
    "formula_of",
    "model_matrix",
    "parse_formula",
    "tidy",
    "glance",
    "augment",
    "predict_lm",
    "anova_table",
    "compare_models",
    "check_assumptions",
    "influence_frame",
    "linear_regression",
    "confidence_band",
]
