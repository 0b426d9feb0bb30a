"""Run the linear-regression chapter end to end on the trees table.

Pipeline overview:
1) Load the trees table and add the quantile height class and the seeded
   synthetic ``group`` column.
2) Fit the chapter's formulas and summarize each fit as tidy coefficient,
   fit-statistic, sequential ANOVA and assumption-test tables.
3) Compare the nested models that share a response with F tests.
4) Predict for a few new trees, fit one model per height class and show how
   a categorical predictor is encoded in the design matrix.
5) Show the error raised for a misspelled variable.
6) Write CSV tables, figures and captions under the configured directory.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

import pandas as pd
from patsy import PatsyError

from .config import WalkthroughConfig
from .data_processing import (
    add_height_class,
    add_random_group,
    describe_table,
    load_trees,
)
from .grouping import fit_by_group, glance_models, tidy_models
from .output import save_model_tables
from .plotting import (
    plot_coefficients,
    plot_fit_by_group,
    plot_fit_line,
    plot_lm_diagnostics,
    plot_scatter_matrix,
)
from .reporting import (
    format_tidy,
    generate_caption_texts,
    summary_text,
    write_caption_files,
)
from .schema import TREES
from .stats import (
    anova_table,
    augment,
    check_assumptions,
    compare_models,
    fit_lm,
    glance,
    model_matrix,
    predict_lm,
    tidy,
)

logger = logging.getLogger(__name__)

MISSPELLED_FORMULA = "Volume ~ Grith"
ENCODING_FORMULA = "Volume ~ Girth + C(group)"
NEW_TREES = pd.DataFrame(
    {
        TREES.girth: [10.0, 15.0, 20.0],
        TREES.height: [70.0, 76.0, 82.0],
    }
)


def demonstrate_misspelled_variable(data: pd.DataFrame) -> str:
    """Fit a formula naming a column that does not exist.

    Returns:
        str: The formula library's error message. The walkthrough records it
        instead of failing.
    """
    try:
        fit_lm(MISSPELLED_FORMULA, data)
    except PatsyError as exc:
        logger.info("Misspelled variable rejected: %s", str(exc).splitlines()[0])
        return str(exc)
    raise RuntimeError(f"{MISSPELLED_FORMULA!r} unexpectedly fitted.")


def _stack_by_model(frames: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Concatenate per-model tables with a leading ``model`` column."""
    out = []
    for name, frame in frames.items():
        frame = frame.copy()
        frame.insert(0, "model", name)
        out.append(frame)
    if not out:
        return pd.DataFrame(columns=["model"])
    return pd.concat(out, ignore_index=True)


def _nested_candidates(models: Dict[str, Any]) -> list:
    """All models whose response matches the first model's, in input order."""
    fits = list(models.values())
    if not fits:
        return []
    response = fits[0].model.endog_names
    return [m for m in fits if m.model.endog_names == response]


def _render_figures(
    config: WalkthroughConfig,
    data: pd.DataFrame,
    models: Dict[str, Any],
    group_coefficients: pd.DataFrame,
) -> Dict[str, str]:
    figures_dir = str(config.figures_dir)
    figures = {
        "scatter_matrix": plot_scatter_matrix(data, output_dir=figures_dir),
        "fit_line": plot_fit_line(
            data, output_dir=figures_dir, level=config.conf_level
        ),
    }
    for name, model in models.items():
        figures[f"diagnostics_{name}"] = plot_lm_diagnostics(
            model, output_dir=figures_dir, name=name
        )
    figures["fit_by_group"] = plot_fit_by_group(
        data, by=TREES.height_class, output_dir=figures_dir
    )
    if not group_coefficients.empty:
        figures["coefficients_by_group"] = plot_coefficients(
            group_coefficients,
            output_dir=figures_dir,
            by=TREES.height_class,
            name="coefficients_by_group",
        )
    return figures


def run_walkthrough(config: WalkthroughConfig | None = None) -> Dict[str, Any]:
    """Run every chapter step and write its artifacts.

    Args:
        config (WalkthroughConfig, optional): Run settings. Defaults to
            ``WalkthroughConfig()``.

    Returns:
        dict[str, Any]: ``data``, ``description``, ``models``,
        ``coefficients``, ``fit_statistics``, ``anova``, ``comparison``,
        ``assumptions``, ``predictions``, ``augmented``, ``group_models``,
        ``group_coefficients``, ``group_fit_statistics``, ``design_matrix``,
        ``encoding_coefficients``, ``misspelled_error``, and the written
        paths under ``tables``, ``figures`` and ``captions``.
    """
    config = config or WalkthroughConfig()
    start_time = time.time()
    logger.info("Starting walkthrough; outputs go to %s", config.output_dir)

    step_start = time.time()
    data = load_trees()
    data = add_height_class(data, n_classes=config.n_classes)
    data = add_random_group(data, seed=config.seed)
    description = describe_table(data)
    logger.info(
        "Loaded %d trees with %d columns in %.2f seconds",
        len(data),
        data.shape[1],
        time.time() - step_start,
    )

    step_start = time.time()
    models = {name: fit_lm(formula, data) for name, formula in config.formulas}
    coefficients = _stack_by_model(
        {
            name: tidy(model, conf_int=True, conf_level=config.conf_level)
            for name, model in models.items()
        }
    )
    fit_statistics = _stack_by_model(
        {name: glance(model) for name, model in models.items()}
    )
    anova = _stack_by_model(
        {name: anova_table(model) for name, model in models.items()}
    )
    assumptions = pd.DataFrame(
        [
            {"model": name, **check_assumptions(model)}
            for name, model in models.items()
        ]
    )
    logger.info(
        "Fitted and summarized %d model(s) in %.2f seconds",
        len(models),
        time.time() - step_start,
    )

    nested = _nested_candidates(models)
    if len(nested) >= 2:
        comparison = compare_models(*nested)
    else:
        logger.info("Fewer than two models share a response; skipping comparison")
        comparison = pd.DataFrame()

    predictions = _stack_by_model(
        {
            name: pd.concat(
                [
                    NEW_TREES.reset_index(drop=True),
                    predict_lm(
                        model,
                        NEW_TREES,
                        interval="prediction",
                        level=config.conf_level,
                    ).reset_index(drop=True),
                ],
                axis=1,
            )
            for name, model in models.items()
        }
    )
    first_name = next(iter(models), None)
    augmented = augment(models[first_name]) if first_name else pd.DataFrame()

    step_start = time.time()
    group_models = fit_by_group(data, config.group_formula, TREES.height_class)
    group_coefficients = tidy_models(
        group_models,
        TREES.height_class,
        conf_int=True,
        conf_level=config.conf_level,
    )
    group_fit_statistics = glance_models(group_models, TREES.height_class)
    logger.info(
        "Subgroup fitting over %d height class(es) completed in %.2f seconds",
        len(group_models),
        time.time() - step_start,
    )

    _, design = model_matrix(ENCODING_FORMULA, data)
    design_matrix = design.reset_index(drop=True)
    encoding_coefficients = tidy(fit_lm(ENCODING_FORMULA, data))
    logger.info("Encoded design matrix columns: %s", list(design.columns))

    misspelled_error = demonstrate_misspelled_variable(data)

    tables = save_model_tables(
        {
            "description": description,
            "coefficients": coefficients,
            "fit_statistics": fit_statistics,
            "anova": anova,
            "model_comparison": comparison,
            "assumptions": assumptions,
            "predictions": predictions,
            "augmented": augmented,
            "coefficients_by_group": group_coefficients,
            "fit_statistics_by_group": group_fit_statistics,
            "design_matrix": design_matrix,
            "encoding_coefficients": encoding_coefficients,
        },
        output_dir=str(config.tables_dir),
    )

    figures: Dict[str, str] = {}
    captions: list[str] = []
    if config.make_plots:
        step_start = time.time()
        figures = _render_figures(config, data, models, group_coefficients)
        caption_texts = generate_caption_texts(
            n_obs=len(data),
            model_names=list(models),
            comparison=comparison,
            group_column=TREES.height_class,
            group_levels=list(group_models),
            conf_level=config.conf_level,
        )
        captions = write_caption_files(caption_texts, str(config.figures_dir))
        logger.info(
            "Generated %d figure(s) in %.2f seconds",
            len(figures),
            time.time() - step_start,
        )
    else:
        logger.info("Plotting disabled; skipping figures and captions")

    logger.info("Walkthrough completed in %.2f seconds", time.time() - start_time)
    return {
        "data": data,
        "description": description,
        "models": models,
        "coefficients": coefficients,
        "fit_statistics": fit_statistics,
        "anova": anova,
        "comparison": comparison,
        "assumptions": assumptions,
        "predictions": predictions,
        "augmented": augmented,
        "group_models": group_models,
        "group_coefficients": group_coefficients,
        "group_fit_statistics": group_fit_statistics,
        "design_matrix": design_matrix,
        "encoding_coefficients": encoding_coefficients,
        "misspelled_error": misspelled_error,
        "tables": tables,
        "figures": figures,
        "captions": captions,
    }


def print_walkthrough(results: Dict[str, Any]) -> None:
    """Print the chapter's console output for a finished run."""
    print("\n" + "=" * 80)
    print("TREES DATA")
    print("=" * 80)
    print(format_tidy(results["description"], digits=3))

    for name, model in results["models"].items():
        print("\n" + "-" * 80)
        print(f"MODEL: {name}")
        print("-" * 80)
        print(summary_text(model))

    if not results["comparison"].empty:
        print("\n" + "=" * 80)
        print("NESTED MODEL COMPARISON")
        print("=" * 80)
        print(format_tidy(results["comparison"]))

    print("\n" + "=" * 80)
    print("COEFFICIENTS BY HEIGHT CLASS")
    print("=" * 80)
    print(format_tidy(results["group_coefficients"]))

    print("\n" + "=" * 80)
    print("MISSPELLED VARIABLE")
    print("=" * 80)
    print(results["misspelled_error"])
    print("=" * 80 + "\n")
