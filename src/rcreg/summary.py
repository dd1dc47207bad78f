"""Summary snapshot of a fitted model."""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from ._results import SummaryResult
from ._validation import _check_confidence_level
from .model import FittedModel
from .r2 import r_squared
from .variance import icc, variance_components


def fixed_effects_table(
    model: FittedModel, confidence_level: float = 0.95
) -> pd.DataFrame:
    """Estimates, standard errors, t values and Wald intervals.

    Intervals use the normal quantile, ``estimate ± z·std_error``.
    """
    _check_confidence_level(confidence_level)
    estimate = model.fixed_effects
    std_error = np.sqrt(np.diag(model.cov_fixed.to_numpy()))
    z = stats.norm.ppf(1.0 - (1.0 - confidence_level) / 2.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        t_value = estimate.to_numpy() / std_error
    return pd.DataFrame(
        {
            "estimate": estimate.to_numpy(),
            "std_error": std_error,
            "t_value": t_value,
            "ci_lower": estimate.to_numpy() - z * std_error,
            "ci_upper": estimate.to_numpy() + z * std_error,
        },
        index=estimate.index,
    )


def summarize(model: FittedModel, confidence_level: float = 0.95) -> SummaryResult:
    """Collect the fixed-effects table, variance components, ICC, R²
    and fit statistics of *model* into a :class:`SummaryResult`.
    """
    table = fixed_effects_table(model, confidence_level)
    return SummaryResult(
        random=model.random,
        fixed_formula=model.fixed_formula,
        random_formula=model.random_formula,
        id=model.id,
        time=model.time,
        reml=model.reml,
        converged=model.converged,
        fixed_effects=table,
        variance_components=variance_components(model),
        residual_variance=model.residual_variance,
        icc=icc(model),
        r_squared=r_squared(model),
        aic=model.aic,
        bic=model.bic,
        log_likelihood=model.log_likelihood,
        n_obs=model.n_obs,
        n_groups=model.n_groups,
        confidence_level=confidence_level,
    )
