import logging

import pandas as pd
import pytest
from patsy import PatsyError

from timber.grouping import (
    augment_by_group,
    fit_by_group,
    glance_by_group,
    glance_models,
    tidy_by_group,
    tidy_models,
)
from timber.schema import TIDY, TREES


def test_fit_by_group_one_model_per_class(classed_trees):
    models = fit_by_group(classed_trees, "Volume ~ Girth", TREES.height_class)
    assert list(models) == ["short", "medium", "tall"]
    assert [int(m.nobs) for m in models.values()] == [11, 13, 7]


def test_fit_by_group_skips_small_groups_with_warning(caplog, classed_trees):
    caplog.set_level(logging.WARNING)
    models = fit_by_group(
        classed_trees, "Volume ~ Girth", TREES.height_class, min_rows=12
    )
    assert list(models) == ["medium"]
    messages = [rec.message for rec in caplog.records]
    assert any("Skipping group height_class='short'" in msg for msg in messages)
    assert any("Skipping group height_class='tall'" in msg for msg in messages)


def test_fit_by_group_propagates_formula_errors(classed_trees):
    with pytest.raises(PatsyError):
        fit_by_group(classed_trees, "Volume ~ Grith", TREES.height_class)


def test_fit_by_group_missing_column(classed_trees):
    with pytest.raises(KeyError):
        fit_by_group(classed_trees, "Volume ~ Girth", "species")


def test_tidy_by_group_binds_with_group_first(classed_trees):
    out = tidy_by_group(
        classed_trees, "Volume ~ Girth", TREES.height_class, conf_int=True
    )
    assert out.columns[0] == TREES.height_class
    assert len(out) == 6
    assert out[TIDY.term].tolist() == ["Intercept", "Girth"] * 3
    assert {TIDY.conf_low, TIDY.conf_high} <= set(out.columns)


def test_tidy_by_group_matches_separate_fits(classed_trees):
    from timber.stats import fit_lm

    out = tidy_by_group(classed_trees, "Volume ~ Girth", TREES.height_class)
    tall = classed_trees[classed_trees[TREES.height_class] == "tall"]
    direct = fit_lm("Volume ~ Girth", tall)
    row = out[(out[TREES.height_class] == "tall") & (out[TIDY.term] == "Girth")]
    assert row[TIDY.estimate].iloc[0] == pytest.approx(direct.params["Girth"])


def test_glance_by_group_one_row_per_group(classed_trees):
    out = glance_by_group(classed_trees, "Volume ~ Girth", TREES.height_class)
    assert out[TREES.height_class].tolist() == ["short", "medium", "tall"]
    assert out["nobs"].tolist() == [11, 13, 7]
    assert ((out["r_squared"] > 0) & (out["r_squared"] <= 1)).all()


def test_augment_by_group_covers_every_row(classed_trees):
    out = augment_by_group(classed_trees, "Volume ~ Girth", TREES.height_class)
    assert len(out) == 31
    assert TIDY.fitted in out.columns
    assert sorted(out[TREES.girth]) == sorted(classed_trees[TREES.girth])


def test_by_group_with_every_group_skipped(classed_trees):
    out = tidy_by_group(
        classed_trees, "Volume ~ Girth", TREES.height_class, min_rows=100
    )
    assert out.empty
    assert isinstance(out, pd.DataFrame)


def test_by_group_tables_omit_unused_levels(trees):
    df = trees.copy()
    df["kind"] = pd.Categorical(
        ["oak"] * 20 + ["ash"] * 11, categories=["oak", "ash", "elm"]
    )
    models = fit_by_group(df, "Volume ~ Girth", "kind")
    assert list(models) == ["oak", "ash"]
    coefs = tidy_by_group(df, "Volume ~ Girth", "kind")
    assert set(coefs["kind"]) == {"oak", "ash"}
    stats = glance_by_group(df, "Volume ~ Girth", "kind")
    assert stats["kind"].tolist() == ["oak", "ash"]


def test_summaries_from_fitted_models_match_by_group(classed_trees):
    models = fit_by_group(classed_trees, "Volume ~ Girth", TREES.height_class)
    pd.testing.assert_frame_equal(
        tidy_models(models, TREES.height_class, conf_int=True),
        tidy_by_group(
            classed_trees, "Volume ~ Girth", TREES.height_class, conf_int=True
        ),
    )
    pd.testing.assert_frame_equal(
        glance_models(models, TREES.height_class),
        glance_by_group(classed_trees, "Volume ~ Girth", TREES.height_class),
    )
