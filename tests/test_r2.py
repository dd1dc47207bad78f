"""Tests for Nakagawa–Schielzeth R²."""

from __future__ import annotations

import dataclasses
import math
from types import SimpleNamespace

import numpy as np
import pytest

from rcreg import fit, simulate
from rcreg.exceptions import DegenerateResultWarning
from rcreg.r2 import r_squared
from rcreg.variance import variance_components


@pytest.fixture(scope="module")
def models():
    df = simulate(n_subjects=80, n_timepoints=5, seed=99)
    return [
        fit("y ~ time + x1", df, id="id", time="time", random=random)
        for random in ("intercept", "slope", "intercept_slope")
    ]


class TestRSquared:
    def test_ordering_and_bounds(self, models):
        for model in models:
            r2 = r_squared(model)
            assert 0.0 <= r2.marginal <= r2.conditional <= 1.0

    def test_matches_decomposition(self, models):
        model = models[2]
        X = np.asarray(model.result.model.exog)
        var_fixed = np.var(X @ model.fixed_effects.to_numpy(), ddof=1)
        vc = variance_components(model)
        var_random = vc.variance("(Intercept)") + vc.variance("time")
        total = var_fixed + var_random + vc.residual
        r2 = r_squared(model)
        assert r2.marginal == pytest.approx(var_fixed / total)
        assert r2.conditional == pytest.approx((var_fixed + var_random) / total)

    def test_covariance_excluded(self, models):
        model = models[2]
        vc = variance_components(model)
        r2 = r_squared(model)
        X = np.asarray(model.result.model.exog)
        var_fixed = np.var(X @ model.fixed_effects.to_numpy(), ddof=1)
        with_cov = var_fixed + sum(r.value for r in vc if r.group != "Residual")
        total = with_cov + vc.residual
        # Including the covariance would give a different value
        if vc.covariance("(Intercept)", "time") != 0:
            assert r2.conditional != pytest.approx(with_cov / total)

    def test_dict_access(self, models):
        r2 = r_squared(models[0])
        assert r2["marginal"] == r2.marginal
        assert set(r2.to_dict()) == {"marginal", "conditional"}

    def test_zero_total_variance(self, models):
        model = models[0]
        fake = SimpleNamespace(
            model=SimpleNamespace(exog=np.column_stack([np.ones(4)] * 3)),
            fe_params=np.array([1.0, 0.0, 0.0]),
            cov_re=np.array([[0.0]]),
            scale=0.0,
        )
        degenerate = dataclasses.replace(model, result=fake)
        with pytest.warns(DegenerateResultWarning, match="R² is undefined"):
            r2 = r_squared(degenerate)
        assert math.isnan(r2.marginal)
        assert math.isnan(r2.conditional)
