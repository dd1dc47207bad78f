"""Marginal and conditional R² for linear mixed models.

Implements the decomposition of Nakagawa & Schielzeth (2013)::

    var_fixed  = Var(X β̂)              over the fitted rows
    var_random = Σ diag(cov_re)         covariances excluded
    var_resid  = σ²
    marginal    = var_fixed / total
    conditional = (var_fixed + var_random) / total

``var_fixed`` is the sample variance (``ddof=1``).
"""

from __future__ import annotations

import math
import warnings

import numpy as np

from ._results import RSquared
from .exceptions import DegenerateResultWarning
from .model import FittedModel
from .variance import variance_components


def r_squared(model: FittedModel) -> RSquared:
    """Compute Nakagawa–Schielzeth R² for a fitted model.

    Returns:
        :class:`~rcreg._results.RSquared`.  Both values are ``nan``
        (with a :class:`~rcreg.exceptions.DegenerateResultWarning`)
        when the total variance is zero or not finite.
    """
    X = np.asarray(model.result.model.exog, dtype=float)
    fixed_pred = X @ model.fixed_effects.to_numpy()
    var_fixed = float(np.var(fixed_pred, ddof=1)) if fixed_pred.size > 1 else 0.0

    vc = variance_components(model)
    var_random = float(sum(vc.random_variances().values()))
    var_resid = vc.residual
    total = var_fixed + var_random + var_resid

    if total == 0 or not math.isfinite(total):
        warnings.warn(
            f"R² is undefined: total variance is {total!r}.",
            DegenerateResultWarning,
            stacklevel=2,
        )
        return RSquared(marginal=float("nan"), conditional=float("nan"))

    return RSquared(
        marginal=var_fixed / total,
        conditional=(var_fixed + var_random) / total,
    )
