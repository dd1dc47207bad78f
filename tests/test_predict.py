"""Tests for predictions, standard errors and intervals."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from rcreg import fit, simulate
from rcreg.exceptions import InvalidArgument
from rcreg.helpers import random_effects
from rcreg.predict import interval_bounds, predict

# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(scope="module")
def model():
    df = simulate(n_subjects=60, n_timepoints=5, seed=123)
    return fit("y ~ time + x1", df, id="id", time="time", random="intercept_slope")


@pytest.fixture()
def newdata():
    return pd.DataFrame(
        {"id": [1, 2, 9999], "time": [0.0, 2.5, 4.0], "x1": [0.0, 1.0, -0.5]},
        index=["a", "b", "c"],
    )


# ------------------------------------------------------------------ #
# interval_bounds
# ------------------------------------------------------------------ #


class TestIntervalBounds:
    def test_ninety_percent_confidence(self):
        lwr, upr = interval_bounds(5.0, 1.0, 4.0, "confidence", 0.90)
        assert float(lwr) == pytest.approx(5.0 - 1.6449, abs=1e-3)
        assert float(upr) == pytest.approx(5.0 + 1.6449, abs=1e-3)

    def test_prediction_adds_residual_variance(self):
        lwr, upr = interval_bounds(0.0, 3.0, 16.0, "prediction", 0.95)
        # sqrt(9 + 16) = 5
        assert float(upr) == pytest.approx(1.959964 * 5.0, rel=1e-5)
        assert float(lwr) == pytest.approx(-float(upr))

    def test_vectorised(self):
        lwr, upr = interval_bounds(np.array([1.0, 2.0]), np.array([0.0, 1.0]), 0.0, "confidence")
        assert lwr[0] == upr[0] == 1.0
        assert lwr[1] < 2.0 < upr[1]

    def test_rejects_unknown_interval(self):
        with pytest.raises(InvalidArgument, match="interval"):
            interval_bounds(0.0, 1.0, 1.0, "tolerance")

    @pytest.mark.parametrize("level", [0.0, 1.0, -0.5, 1.5])
    def test_rejects_bad_confidence_level(self, level):
        with pytest.raises(InvalidArgument, match="confidence_level"):
            interval_bounds(0.0, 1.0, 1.0, "confidence", level)


# ------------------------------------------------------------------ #
# predict() validation
# ------------------------------------------------------------------ #


class TestPredictValidation:
    def test_interval_requires_population(self, model):
        with pytest.raises(InvalidArgument, match="Intervals are only available"):
            predict(model, level="subject", interval="confidence")

    def test_unknown_level(self, model):
        with pytest.raises(InvalidArgument, match="level"):
            predict(model, level="cluster")

    def test_unknown_interval(self, model):
        with pytest.raises(InvalidArgument, match="interval"):
            predict(model, level="population", interval="credible")

    def test_bad_confidence_level(self, model):
        with pytest.raises(InvalidArgument, match="confidence_level"):
            predict(model, level="population", interval="confidence", confidence_level=1.0)

    def test_newdata_requires_time(self, model, newdata):
        with pytest.raises(InvalidArgument, match="must contain columns: 'time'"):
            predict(model, newdata.drop(columns="time"), level="population")

    def test_subject_level_requires_id(self, model, newdata):
        with pytest.raises(InvalidArgument, match="'id'"):
            predict(model, newdata.drop(columns="id"), level="subject")

    def test_population_level_does_not_require_id(self, model, newdata):
        out = predict(model, newdata.drop(columns="id"), level="population")
        assert len(out) == 3

    def test_missing_predictor(self, model, newdata):
        with pytest.raises(InvalidArgument, match="fixed-effects design"):
            predict(model, newdata.drop(columns="x1"), level="population")

    def test_rejects_non_model(self):
        with pytest.raises(InvalidArgument, match="FittedModel"):
            predict("not a model")


# ------------------------------------------------------------------ #
# Subject level
# ------------------------------------------------------------------ #


class TestSubjectPredictions:
    def test_default_reproduces_fitted_values(self, model):
        out = predict(model)
        assert list(out.columns) == ["fit"]
        np.testing.assert_allclose(
            out["fit"].to_numpy(), model.fitted_values.to_numpy(), rtol=1e-8, atol=1e-8
        )

    def test_index_follows_newdata(self, model, newdata):
        out = predict(model, newdata)
        assert list(out.index) == ["a", "b", "c"]

    def test_unknown_subject_equals_population(self, model, newdata):
        subj = predict(model, newdata, level="subject")
        pop = predict(model, newdata, level="population")
        assert subj.loc["c", "fit"] == pytest.approx(pop.loc["c", "fit"])

    def test_known_subject_adds_blups(self, model, newdata):
        subj = predict(model, newdata, level="subject")
        pop = predict(model, newdata, level="population")
        b = random_effects(model).loc[2]
        expected = pop.loc["b", "fit"] + b["(Intercept)"] + 2.5 * b["time"]
        assert subj.loc["b", "fit"] == pytest.approx(expected)

    def test_se_fit_warns_and_degrades(self, model, newdata):
        with pytest.warns(UserWarning, match="Standard errors are not available"):
            out = predict(model, newdata, level="subject", se_fit=True)
        assert list(out.columns) == ["fit"]


# ------------------------------------------------------------------ #
# Population level
# ------------------------------------------------------------------ #


class TestPopulationPredictions:
    def test_matches_engine_fixed_prediction(self, model):
        out = predict(model, level="population")
        np.testing.assert_allclose(
            out["fit"].to_numpy(), np.asarray(model.result.predict()), rtol=1e-8
        )

    def test_se_is_delta_method(self, model, newdata):
        out = predict(model, newdata, level="population", se_fit=True)
        assert list(out.columns) == ["fit", "se_fit"]
        x = np.array([1.0, 2.5, 1.0])  # row "b": intercept, time, x1
        V = model.cov_fixed.to_numpy()
        assert out.loc["b", "se_fit"] == pytest.approx(np.sqrt(x @ V @ x))

    def test_confidence_interval(self, model, newdata):
        out = predict(model, newdata, level="population", interval="confidence")
        assert list(out.columns) == ["fit", "se_fit", "lwr", "upr"]
        half = 1.959964 * out["se_fit"]
        np.testing.assert_allclose(out["upr"] - out["fit"], half, rtol=1e-5)
        np.testing.assert_allclose(out["fit"] - out["lwr"], half, rtol=1e-5)

    def test_prediction_interval_wider(self, model, newdata):
        ci = predict(model, newdata, level="population", interval="confidence", confidence_level=0.9)
        pi = predict(model, newdata, level="population", interval="prediction", confidence_level=0.9)
        assert np.all(pi["upr"] - pi["lwr"] >= ci["upr"] - ci["lwr"])
        np.testing.assert_allclose(pi["fit"], ci["fit"])

    def test_prediction_interval_width(self, model, newdata):
        out = predict(model, newdata, level="population", interval="prediction")
        expected = 1.959964 * np.sqrt(out["se_fit"] ** 2 + model.residual_variance)
        np.testing.assert_allclose(out["upr"] - out["fit"], expected, rtol=1e-5)

    def test_ignores_subject_ids(self, model, newdata):
        a = predict(model, newdata, level="population")
        b = predict(model, newdata.assign(id=[50, 51, 52]), level="population")
        np.testing.assert_allclose(a["fit"], b["fit"])
