import numpy as np
import pytest

from timber.schema import TIDY
from timber.stats.formula import fit_lm
from timber.stats.tidy import (
    AUGMENT_COLUMNS,
    GLANCE_COLUMNS,
    TIDY_COLUMNS,
    augment,
    glance,
    tidy,
)


@pytest.fixture
def girth_model(trees):
    return fit_lm("Volume ~ Girth", trees)


def test_tidy_columns_and_values(girth_model):
    out = tidy(girth_model)
    assert list(out.columns) == TIDY_COLUMNS
    assert out[TIDY.term].tolist() == ["Intercept", "Girth"]
    slope = out.set_index(TIDY.term).loc["Girth"]
    assert slope[TIDY.estimate] == pytest.approx(5.0659, abs=1e-3)
    assert slope[TIDY.std_error] == pytest.approx(0.2474, abs=1e-3)
    assert slope[TIDY.statistic] == pytest.approx(20.48, abs=0.01)
    assert ((out[TIDY.p_value] >= 0) & (out[TIDY.p_value] <= 1)).all()


def test_tidy_conf_int_brackets_estimate(girth_model):
    out = tidy(girth_model, conf_int=True, conf_level=0.9)
    assert {TIDY.conf_low, TIDY.conf_high} <= set(out.columns)
    assert (out[TIDY.conf_low] < out[TIDY.estimate]).all()
    assert (out[TIDY.estimate] < out[TIDY.conf_high]).all()

    wide = tidy(girth_model, conf_int=True, conf_level=0.99)
    narrow_width = out[TIDY.conf_high] - out[TIDY.conf_low]
    wide_width = wide[TIDY.conf_high] - wide[TIDY.conf_low]
    assert (wide_width > narrow_width).all()


@pytest.mark.parametrize("level", [0.0, 1.0, 95])
def test_tidy_rejects_bad_conf_level(girth_model, level):
    with pytest.raises(ValueError):
        tidy(girth_model, conf_int=True, conf_level=level)


def test_glance_single_row(girth_model):
    out = glance(girth_model)
    assert list(out.columns) == GLANCE_COLUMNS
    assert len(out) == 1
    row = out.iloc[0]
    assert row["r_squared"] == pytest.approx(0.9353, abs=1e-3)
    assert row["adj_r_squared"] == pytest.approx(0.9331, abs=1e-3)
    assert row["sigma"] == pytest.approx(4.252, abs=1e-3)
    assert row["statistic"] == pytest.approx(419.4, abs=0.5)
    assert row["df"] == 1
    assert row["df_residual"] == 29
    assert row["nobs"] == 31


def test_glance_intercept_only_has_no_f_test(trees):
    out = glance(fit_lm("Volume ~ 1", trees))
    assert np.isnan(out.iloc[0]["statistic"])
    assert np.isnan(out.iloc[0]["p_value"])


def test_augment_adds_per_row_columns(girth_model, trees):
    out = augment(girth_model)
    assert len(out) == 31
    for col in AUGMENT_COLUMNS:
        assert col in out.columns
    assert np.allclose(out[TIDY.fitted] + out[TIDY.resid], trees["Volume"])
    assert out[TIDY.hat].sum() == pytest.approx(2.0)
    assert (out[TIDY.cooksd] >= 0).all()


def test_augment_only_returns_modeled_rows(trees):
    with_gap = trees.copy()
    with_gap.loc[3, "Girth"] = np.nan
    model = fit_lm("Volume ~ Girth", with_gap)
    out = augment(model)
    assert len(out) == 30
    assert 3 not in out.index


def test_augment_restricts_supplied_table_to_fitted_rows(trees):
    model = fit_lm("Volume ~ Girth", trees.iloc[5:15])
    out = augment(model, data=trees)
    assert len(out) == 10
    assert out.index.tolist() == list(range(5, 15))
    assert np.allclose(out[TIDY.fitted] + out[TIDY.resid], out["Volume"])


def test_glance_df_counts_non_intercept_coefficients(classed_trees):
    model = fit_lm("Volume ~ Girth + C(group)", classed_trees)
    row = glance(model).iloc[0]
    assert row["df"] == len(model.params) - 1 == 3
