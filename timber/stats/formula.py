"""Fit linear models from formula strings and inspect their encoding.

Formulas use the patsy language understood by ``statsmodels.formula.api``:
``Volume ~ Girth + Height`` declares ``Volume`` as the outcome, ``a * b``
expands to main effects plus interaction, ``np.log(x)`` and ``I(x ** 2)``
transform a column in place, and ``C(x)`` forces treatment coding.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
import patsy
import statsmodels.formula.api as smf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormulaParts:
    """Decomposed model formula.

    Attributes:
        formula: Original formula text.
        response: Left-hand-side expression (for example ``np.log(Volume)``).
        terms: Right-hand-side term labels in patsy order, ``Intercept`` first
            when present.
        variables: Sorted data-column names referenced anywhere in the formula.
        predictors: Sorted data-column names referenced on the right-hand side.
    """

    formula: str
    response: str
    terms: Tuple[str, ...]
    variables: Tuple[str, ...]
    predictors: Tuple[str, ...]

    @property
    def has_intercept(self) -> bool:
        return "Intercept" in self.terms


def _names_in_code(code: str) -> set[str]:
    """Collect bare names in a factor expression, skipping callables and modules."""
    tree = ast.parse(code, mode="eval")
    skip: set[int] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Call):
            skip.add(id(node.func))
        elif isinstance(node, ast.Attribute):
            skip.add(id(node.value))
    return {
        node.id
        for node in ast.walk(tree)
        if isinstance(node, ast.Name) and id(node) not in skip
    }


def parse_formula(formula: str) -> FormulaParts:
    """Split a two-sided formula into response, terms and referenced columns.

    Raises:
        ValueError: If the formula has no ``~`` or no response.
    """
    if "~" not in formula:
        raise ValueError(
            f"Formula must be two-sided (outcome ~ predictors): {formula!r}"
        )
    desc = patsy.ModelDesc.from_formula(formula)
    if not desc.lhs_termlist:
        raise ValueError(f"Formula has no response on the left of '~': {formula!r}")

    response = " + ".join(term.name() for term in desc.lhs_termlist)
    terms = tuple(term.name() for term in desc.rhs_termlist)

    lhs_vars: set[str] = set()
    for term in desc.lhs_termlist:
        for factor in term.factors:
            lhs_vars |= _names_in_code(factor.code)
    rhs_vars: set[str] = set()
    for term in desc.rhs_termlist:
        for factor in term.factors:
            rhs_vars |= _names_in_code(factor.code)

    return FormulaParts(
        formula=formula,
        response=response,
        terms=terms,
        variables=tuple(sorted(lhs_vars | rhs_vars)),
        predictors=tuple(sorted(rhs_vars)),
    )


def fit_lm(formula: str, data: pd.DataFrame, weights=None):
    """Fit an ordinary (or weighted) least-squares model from a formula.

    Args:
        formula (str): Two-sided patsy formula, e.g. ``"Volume ~ Girth"``.
        data (pandas.DataFrame): Table holding every referenced column.
        weights (str | array-like, optional): Column name or array of
            observation weights. When given, a WLS model is fitted.

    Returns:
        statsmodels.regression.linear_model.RegressionResultsWrapper: Fitted
        model. Rows with missing values in referenced columns are dropped.

    Raises:
        patsy.PatsyError: If the formula references a column that does not
            exist (for example a misspelled variable name) or is malformed.
    """
    if weights is None:
        model = smf.ols(formula, data=data, missing="drop").fit()
    else:
        w = data[weights] if isinstance(weights, str) else weights
        w = np.asarray(w, dtype=float)
        model = smf.wls(formula, data=data, weights=w, missing="drop").fit()
    logger.debug(
        "Fitted %r on %d observations (R^2=%.4f)",
        formula,
        int(model.nobs),
        model.rsquared,
    )
    return model


def model_matrix(formula: str, data: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return the encoded response vector and design matrix of a formula.

    Categorical columns use treatment coding with the first level as the
    reference, so a three-level factor contributes two indicator columns.
    Rows with missing values are dropped, matching ``fit_lm``.
    """
    y, X = patsy.dmatrices(formula, data, return_type="dataframe", NA_action="drop")
    return y, X


def formula_of(model) -> str:
    """Return the formula text a fitted model was built from."""
    formula = getattr(model.model, "formula", None)
    if formula is None:
        raise ValueError("Model was not fitted from a formula.")
    return str(formula)
