"""Variance components and intraclass correlation.

Variance components are read from the engine's random-effects
covariance matrix (``cov_re``) and residual scale.  Rows of ``cov_re``
are identified by position: for ``intercept_slope`` the intercept is
always first and the slope second, so terms are tagged structurally
as ``"(Intercept)"`` and the time column name rather than by parsing
engine labels.

The ICC returned depends on the random structure:

* ``intercept`` — a single float, ``σ²_b0 / (σ²_b0 + σ²)``.
* ``slope`` — :class:`~rcreg._results.SlopeICC`: there is no
  between-subject variance at ``t = 0``, so the raw slope and residual
  variances are returned.
* ``intercept_slope`` — :class:`~rcreg._results.InterceptSlopeICC`:
  the ICC at ``t = 0`` plus the ingredients needed to evaluate it at
  any ``t``.
"""

from __future__ import annotations

import numpy as np

from ._results import (
    InterceptSlopeICC,
    SlopeICC,
    VarianceComponent,
    VarianceComponents,
    _safe_ratio,
)
from .model import FittedModel


def variance_components(model: FittedModel) -> VarianceComponents:
    """Extract variance components from a fitted model.

    Variances come first (engine order), then covariances, then the
    ``"Residual"`` row.

    Args:
        model: A model returned by :func:`~rcreg.fit`.

    Returns:
        The :class:`~rcreg._results.VarianceComponents` table.
    """
    cov = np.atleast_2d(np.asarray(model.result.cov_re, dtype=float))
    terms = model.random_terms

    rows: list[VarianceComponent] = [
        VarianceComponent(model.id, term, None, float(cov[i, i]))
        for i, term in enumerate(terms)
    ]
    for i in range(len(terms)):
        for j in range(i):
            rows.append(
                VarianceComponent(model.id, terms[j], terms[i], float(cov[j, i]))
            )
    rows.append(VarianceComponent("Residual", None, None, model.residual_variance))
    return VarianceComponents(rows=tuple(rows))


def icc(model: FittedModel) -> float | SlopeICC | InterceptSlopeICC:
    """Intraclass correlation for the model's random structure.

    A zero denominator gives ``nan`` and a
    :class:`~rcreg.exceptions.DegenerateResultWarning`.
    """
    vc = variance_components(model)
    sigma2 = vc.residual

    if model.random == "intercept":
        tau0 = vc.variance("(Intercept)")
        return _safe_ratio(tau0, tau0 + sigma2, "ICC")

    slope_var = vc.variance(model.time)
    if model.random == "slope":
        return SlopeICC(slope_var=slope_var, residual_var=sigma2)

    tau0 = vc.variance("(Intercept)")
    return InterceptSlopeICC(
        intercept=_safe_ratio(tau0, tau0 + sigma2, "ICC"),
        slope_var=slope_var,
        cov_intercept_slope=vc.covariance("(Intercept)", model.time),
        intercept_var=tau0,
        residual_var=sigma2,
    )
