import numpy as np
import pandas as pd
import pytest

from timber.schema import TIDY
from timber.stats.formula import fit_lm
from timber.stats.predict import predict_lm


@pytest.fixture
def girth_model(trees):
    return fit_lm("Volume ~ Girth", trees)


def test_predict_point_values(girth_model):
    new = pd.DataFrame({"Girth": [10.0, 20.0]})
    out = predict_lm(girth_model, new)
    assert list(out.columns) == [TIDY.pred]
    assert out[TIDY.pred].tolist() == pytest.approx(
        [-36.9435 + 5.0659 * 10.0, -36.9435 + 5.0659 * 20.0], abs=1e-2
    )


def test_prediction_interval_wider_than_confidence(girth_model):
    new = pd.DataFrame({"Girth": [9.0, 13.0, 18.0]})
    conf = predict_lm(girth_model, new, interval="confidence")
    pred = predict_lm(girth_model, new, interval="prediction")
    conf_width = conf[TIDY.pred_upper] - conf[TIDY.pred_lower]
    pred_width = pred[TIDY.pred_upper] - pred[TIDY.pred_lower]
    assert (pred_width > conf_width).all()
    assert np.allclose(conf[TIDY.pred], pred[TIDY.pred])


def test_predict_preserves_rows_with_missing_values(girth_model):
    new = pd.DataFrame({"Girth": [10.0, np.nan, 15.0]}, index=["a", "b", "c"])
    out = predict_lm(girth_model, new, interval="confidence")
    assert out.index.tolist() == ["a", "b", "c"]
    assert np.isnan(out.loc["b", TIDY.pred])
    assert np.isnan(out.loc["b", TIDY.pred_lower])
    assert np.isfinite(out.loc["c", TIDY.pred])


def test_predict_log_model_ignores_missing_response(trees):
    model = fit_lm("np.log(Volume) ~ np.log(Girth) + np.log(Height)", trees)
    new = pd.DataFrame({"Girth": [12.0], "Height": [75.0]})
    out = predict_lm(model, new)
    assert np.isfinite(out[TIDY.pred].iloc[0])


def test_predict_rejects_unknown_interval(girth_model):
    with pytest.raises(ValueError, match="interval"):
        predict_lm(girth_model, pd.DataFrame({"Girth": [10.0]}), interval="tolerance")
