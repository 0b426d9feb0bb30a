"""
A Python package for linear-model conventions on the trees measurements.

Fits formula-based regressions of timber volume on girth and height, and
summarizes them as tidy tables, nested-model comparisons, diagnostics and
per-group fits.

Modules:
    - data_processing: Loads the trees table and adds grouping columns.
    - stats: Formula fitting, tidy summaries, prediction, ANOVA and diagnostics.
    - grouping: Fits one model per subgroup and binds the summaries.
    - reporting: Console summaries, p-value formatting and figure captions.
    - plotting: Scatter, fitted-line, coefficient and diagnostic figures.
    - walkthrough: Runs the whole chapter and writes its outputs.
"""

__version__ = "1.0.0"

from .config import WalkthroughConfig
from .data_processing import (
    add_height_class,
    add_random_group,
    describe_table,
    load_table,
    load_trees,
    split_by_group,
)
from .grouping import (
    augment_by_group,
    fit_by_group,
    glance_by_group,
    glance_models,
    tidy_by_group,
    tidy_models,
)
from .output import save_model_tables
from .reporting import format_pvalue, format_tidy, summary_text
from .stats import (
    anova_table,
    augment,
    check_assumptions,
    compare_models,
    fit_lm,
    glance,
    model_matrix,
    parse_formula,
    predict_lm,
    tidy,
)
from .walkthrough import demonstrate_misspelled_variable, run_walkthrough

__all__ = [
    # Configuration
    "WalkthroughConfig",
    # Data processing
    "load_trees",
    "load_table",
    "add_height_class",
    "add_random_group",
    "split_by_group",
    "describe_table",
    # Modeling
    "parse_formula",
    "fit_lm",
    "model_matrix",
    "tidy",
    "glance",
    "augment",
    "predict_lm",
    "anova_table",
    "compare_models",
    "check_assumptions",
    # Subgroup fitting
    "fit_by_group",
    "tidy_by_group",
    "glance_by_group",
    "augment_by_group",
    "tidy_models",
    "glance_models",
    # Reporting and output
    "format_pvalue",
    "format_tidy",
    "summary_text",
    "save_model_tables",
    # Walkthrough
    "run_walkthrough",
    "demonstrate_misspelled_variable",
]
