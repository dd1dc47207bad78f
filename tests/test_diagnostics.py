"""Tests for residual and random-effect diagnostics."""

from __future__ import annotations

import logging

import numpy as np
import pytest
from scipy import stats

from rcreg import fit, simulate
from rcreg.diagnostics import (
    _normal_quantiles,
    _shapiro,
    normality_tests,
    random_effect_diagnostics,
    residual_diagnostics,
)


@pytest.fixture(scope="module")
def model():
    df = simulate(n_subjects=50, n_timepoints=5, seed=21)
    return fit("y ~ time + x1", df, id="id", time="time", random="intercept_slope")


class TestNormalQuantiles:
    def test_small_sample_positions(self):
        q = _normal_quantiles(np.array([3.0, 1.0, 2.0]))
        a = 3.0 / 8.0
        expected = stats.norm.ppf((np.array([3, 1, 2]) - a) / (3 + 1 - 2 * a))
        np.testing.assert_allclose(q, expected)

    def test_large_sample_symmetric(self):
        values = np.arange(20.0)
        q = _normal_quantiles(values)
        assert q.sum() == pytest.approx(0.0, abs=1e-10)
        assert np.all(np.diff(q) > 0)

    def test_empty(self):
        assert _normal_quantiles(np.array([])).size == 0


class TestResidualDiagnostics:
    def test_columns_and_length(self, model):
        diag = residual_diagnostics(model)
        assert list(diag.columns) == [
            "fitted",
            "residual",
            "std_residual",
            "sqrt_abs_std_residual",
            "theoretical_quantile",
            "smooth",
        ]
        assert len(diag) == model.n_obs

    def test_standardised(self, model):
        diag = residual_diagnostics(model)
        assert diag["std_residual"].mean() == pytest.approx(0.0, abs=1e-10)
        assert diag["std_residual"].std(ddof=1) == pytest.approx(1.0)
        np.testing.assert_allclose(
            diag["sqrt_abs_std_residual"], np.sqrt(np.abs(diag["std_residual"]))
        )

    def test_matches_model(self, model):
        diag = residual_diagnostics(model)
        np.testing.assert_allclose(diag["fitted"], model.fitted_values)
        np.testing.assert_allclose(diag["residual"], model.residuals)

    def test_smooth_is_finite(self, model):
        assert np.isfinite(residual_diagnostics(model)["smooth"]).all()


class TestRandomEffectDiagnostics:
    def test_one_frame_per_term(self, model):
        diag = random_effect_diagnostics(model)
        assert list(diag) == ["(Intercept)", "time"]
        for frame in diag.values():
            assert list(frame.columns) == ["blup", "theoretical_quantile"]
            assert len(frame) == 50


class TestNormalityTests:
    def test_rows(self, model):
        table = normality_tests(model)
        assert list(table.index) == ["residual", "(Intercept)", "time"]
        assert list(table.columns) == ["statistic", "p_value", "n"]
        assert table.loc["residual", "n"] == model.n_obs
        assert ((table["p_value"] >= 0) & (table["p_value"] <= 1)).all()

    def test_too_few_values_is_nan(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="rcreg.diagnostics"):
            statistic, p_value = _shapiro(np.array([1.0, 2.0]), "tiny")
        assert np.isnan(statistic) and np.isnan(p_value)
        assert any("tiny" in r.getMessage() for r in caplog.records)
