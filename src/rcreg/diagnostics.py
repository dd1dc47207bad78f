"""Residual and random-effect diagnostics.

Returns the data behind the usual mixed-model diagnostic plots rather
than drawing them:

* residuals vs fitted values, with a LOWESS smooth;
* a normal Q-Q plot of the residuals;
* the scale-location plot, ``sqrt(|standardised residual|)`` vs fitted;
* a normal Q-Q plot of the BLUPs for each random term.

Theoretical quantiles use the plotting positions
``(i - a) / (n + 1 - 2a)`` with ``a = 3/8`` for ``n <= 10`` and
``a = 1/2`` otherwise.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.nonparametric.smoothers_lowess import lowess

from .helpers import random_effects
from .model import FittedModel

logger = logging.getLogger(__name__)


def _normal_quantiles(values: np.ndarray) -> np.ndarray:
    """Theoretical standard-normal quantiles matched to *values* by rank."""
    n = values.size
    if n == 0:
        return np.empty(0)
    a = 3.0 / 8.0 if n <= 10 else 0.5
    ranks = stats.rankdata(values, method="ordinal")
    return stats.norm.ppf((ranks - a) / (n + 1 - 2 * a))


def residual_diagnostics(model: FittedModel) -> pd.DataFrame:
    """Per-observation residual diagnostics.

    Returns:
        DataFrame indexed like the fitted data with columns
        ``fitted``, ``residual``, ``std_residual`` (centred and scaled
        by the sample SD), ``sqrt_abs_std_residual``,
        ``theoretical_quantile`` and ``smooth`` (LOWESS of residual on
        fitted, ``nan`` if the smoother fails).
    """
    fitted = model.fitted_values.to_numpy()
    resid = model.residuals.to_numpy()

    sd = resid.std(ddof=1) if resid.size > 1 else float("nan")
    with np.errstate(divide="ignore", invalid="ignore"):
        std_resid = (resid - resid.mean()) / sd

    try:
        smooth = lowess(resid, fitted, return_sorted=False)
    except (ValueError, np.linalg.LinAlgError) as exc:
        logger.debug("LOWESS smooth failed: %s", exc)
        smooth = np.full(resid.size, np.nan)

    return pd.DataFrame(
        {
            "fitted": fitted,
            "residual": resid,
            "std_residual": std_resid,
            "sqrt_abs_std_residual": np.sqrt(np.abs(std_resid)),
            "theoretical_quantile": _normal_quantiles(resid),
            "smooth": smooth,
        },
        index=model.data.index,
    )


def random_effect_diagnostics(model: FittedModel) -> dict[str, pd.DataFrame]:
    """Q-Q data for each random term.

    Returns:
        Mapping from term name (``"(Intercept)"`` and/or the time
        column) to a DataFrame indexed by subject with columns
        ``blup`` and ``theoretical_quantile``.
    """
    blups = random_effects(model)
    out: dict[str, pd.DataFrame] = {}
    for term in blups.columns:
        values = blups[term].to_numpy()
        out[term] = pd.DataFrame(
            {"blup": values, "theoretical_quantile": _normal_quantiles(values)},
            index=blups.index,
        )
    return out


def _shapiro(values: np.ndarray, label: str) -> tuple[float, float]:
    try:
        res = stats.shapiro(values)
    except ValueError as exc:
        logger.debug("Shapiro-Wilk test for %s failed: %s", label, exc)
        return float("nan"), float("nan")
    return float(res.statistic), float(res.pvalue)


def normality_tests(model: FittedModel) -> pd.DataFrame:
    """Shapiro–Wilk tests for the residuals and each random term.

    Returns:
        DataFrame indexed by ``"residual"`` and the random term names
        with columns ``statistic``, ``p_value`` and ``n``.  A test
        that cannot be run (e.g. fewer than three values) reports
        ``nan``.
    """
    samples: dict[str, np.ndarray] = {"residual": model.residuals.to_numpy()}
    blups = random_effects(model)
    for term in blups.columns:
        samples[term] = blups[term].to_numpy()

    rows = []
    for label, values in samples.items():
        statistic, p_value = _shapiro(values, label)
        rows.append((label, statistic, p_value, values.size))
    return pd.DataFrame(
        [r[1:] for r in rows],
        index=[r[0] for r in rows],
        columns=["statistic", "p_value", "n"],
    )
