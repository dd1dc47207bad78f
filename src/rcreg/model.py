"""Fitting random coefficient regressions with statsmodels ``MixedLM``.

The user supplies a two-sided fixed-effects formula, the names of the
subject and time columns, and a random-structure keyword.  This module
turns those into the three pieces statsmodels needs:

* the fixed-effects design ``X`` (and response ``y``), built by patsy
  from the formula;
* the random-effects design ``Z``, built by patsy from the one-sided
  formula returned by :func:`~rcreg.formula.engine_re_formula`;
* the grouping labels, taken from the subject column.

``MixedLM(y, X, groups, exog_re=Z)`` is then fitted by REML or ML.
The patsy ``DesignInfo`` objects are kept on the :class:`FittedModel`
so that prediction can rebuild ``X`` and ``Z`` rows for new data with
exactly the coding used at fit time.

Convergence warnings raised by statsmodels are passed through to the
caller untouched.  Numerical failures (``LinAlgError`` or
``ValueError`` from the engine) are re-raised as
:class:`~rcreg.exceptions.EngineFailure`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
import patsy
from statsmodels.regression.mixed_linear_model import MixedLM, MixedLMResults

from ._config import get_optimizer
from ._typing import RandomStructure
from ._validation import (
    DataFrameLike,
    _ensure_pandas_df,
    _require_columns,
    _require_complete,
    _require_numeric,
)
from .exceptions import EngineFailure, InvalidArgument
from .formula import (
    combine_formula,
    engine_re_formula,
    random_term,
    random_terms,
    validate_random,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# FittedModel
# ------------------------------------------------------------------ #


@dataclass(frozen=True, eq=False)
class FittedModel:
    """A fitted random coefficient regression.

    Created once by :func:`fit` and never mutated afterwards.  All
    downstream operations (variance components, ICC, R², prediction,
    comparison, summaries) read from it.

    Attributes:
        fixed_formula: The fixed-effects formula, e.g. ``"y ~ time + x1"``.
        random_formula: The random-effects term, e.g. ``"(1 + time | id)"``.
        id: Subject (grouping) column name.
        time: Time column name.
        random: ``"intercept"``, ``"slope"`` or ``"intercept_slope"``.
        reml: ``True`` for REML, ``False`` for maximum likelihood.
        result: The statsmodels ``MixedLMResults`` handle.
        data: The rows of the input data used in the fit.
        design_info: patsy ``DesignInfo`` for the fixed-effects design.
        re_design_info: patsy ``DesignInfo`` for the random-effects design.
    """

    fixed_formula: str
    random_formula: str
    id: str
    time: str
    random: str
    reml: bool
    result: MixedLMResults = field(repr=False)
    data: pd.DataFrame = field(repr=False)
    design_info: Any = field(repr=False)
    re_design_info: Any = field(repr=False)

    # ---- Formula metadata ------------------------------------------

    @property
    def full_formula(self) -> str:
        """The combined lme4-style formula, e.g. ``"y ~ time + (1 | id)"``."""
        return combine_formula(self.fixed_formula, self.random_formula)

    @property
    def random_terms(self) -> list[str]:
        """Random-effect term names in engine order."""
        return random_terms(self.random, self.time)

    # ---- Fixed effects ---------------------------------------------

    @property
    def fixed_effects(self) -> pd.Series:
        """Fixed-effect estimates indexed by design column name."""
        return pd.Series(
            np.asarray(self.result.fe_params, dtype=float),
            index=list(self.design_info.column_names),
            name="estimate",
        )

    @property
    def cov_fixed(self) -> pd.DataFrame:
        """Covariance matrix of the fixed-effect estimates."""
        k_fe = self.result.model.k_fe
        cov = np.asarray(self.result.cov_params(), dtype=float)[:k_fe, :k_fe]
        names = list(self.design_info.column_names)
        return pd.DataFrame(cov, index=names, columns=names)

    # ---- Variance parameters ---------------------------------------

    @property
    def cov_random(self) -> pd.DataFrame:
        """Random-effects covariance matrix labelled by term."""
        cov = np.atleast_2d(np.asarray(self.result.cov_re, dtype=float))
        terms = self.random_terms
        return pd.DataFrame(cov, index=terms, columns=terms)

    @property
    def residual_variance(self) -> float:
        """Residual variance σ²."""
        return float(self.result.scale)

    # ---- Fitted values ---------------------------------------------

    @property
    def fitted_values(self) -> pd.Series:
        """Conditional fitted values (fixed part plus BLUPs)."""
        return pd.Series(
            np.asarray(self.result.fittedvalues, dtype=float),
            index=self.data.index,
            name="fitted",
        )

    @property
    def residuals(self) -> pd.Series:
        """Conditional residuals, ``y - fitted_values``."""
        return pd.Series(
            np.asarray(self.result.resid, dtype=float),
            index=self.data.index,
            name="residual",
        )

    # ---- Fit statistics --------------------------------------------

    @property
    def log_likelihood(self) -> float:
        """Log-likelihood (the restricted one under REML)."""
        return float(self.result.llf)

    @property
    def n_params(self) -> int:
        """Degrees of freedom of the log-likelihood.

        Fixed effects, random-effects covariance parameters and the
        residual variance.
        """
        model = self.result.model
        return int(model.k_fe + model.k_re2 + 1)

    @property
    def aic(self) -> float:
        # statsmodels reports nan for REML fits, so both criteria are
        # computed here from the log-likelihood for either method.
        return -2.0 * self.log_likelihood + 2.0 * self.n_params

    @property
    def bic(self) -> float:
        return -2.0 * self.log_likelihood + math.log(self.n_obs) * self.n_params

    @property
    def n_obs(self) -> int:
        return int(self.result.model.nobs)

    @property
    def n_groups(self) -> int:
        return int(self.result.model.n_groups)

    @property
    def converged(self) -> bool:
        return bool(getattr(self.result, "converged", True))


# ------------------------------------------------------------------ #
# fit()
# ------------------------------------------------------------------ #


def _build_designs(
    formula: str,
    df: pd.DataFrame,
    re_formula: str,
) -> tuple[pd.Series, pd.DataFrame, pd.DataFrame, np.ndarray]:
    """Build ``y``, ``X`` and ``Z`` with patsy.

    The returned frames carry patsy's ``design_info`` attribute and a
    positional index; the fourth element holds the positions of the
    retained rows of *df*, so repeated index labels are harmless.

    Rows with missing values in any formula variable are dropped, as
    patsy does by default; ``Z`` is built on the retained rows.

    Raises:
        InvalidArgument: If patsy cannot evaluate the formula against
            *df* (unknown variable, syntax error, non-numeric response).
    """
    df = df.reset_index(drop=True)
    try:
        y, X = patsy.dmatrices(formula, df, return_type="dataframe")
    except patsy.PatsyError as exc:
        raise InvalidArgument(
            f"Could not build the fixed-effects design from {formula!r}: {exc}"
        ) from exc
    if y.shape[1] != 1:
        raise InvalidArgument(
            f"The response in {formula!r} must be a single numeric column, "
            f"got {y.shape[1]} columns: {list(y.columns)}."
        )
    rows = X.index.to_numpy(dtype=np.intp)
    try:
        Z = patsy.dmatrix(re_formula, df.iloc[rows], return_type="dataframe")
    except patsy.PatsyError as exc:
        raise InvalidArgument(
            f"Could not build the random-effects design {re_formula!r}: {exc}"
        ) from exc
    return y.iloc[:, 0], X, Z, rows


def fit(
    formula: str,
    data: DataFrameLike,
    id: str,
    time: str,
    random: RandomStructure = "intercept",
    reml: bool = True,
    **fit_kwargs: Any,
) -> FittedModel:
    """Fit a random coefficient regression.

    Args:
        formula: Two-sided fixed-effects formula, e.g.
            ``"y ~ time + x1"``.  Random terms are added from
            *random*; do not write them here.
        data: Long-format pandas (or Polars) DataFrame, one row per
            measurement.
        id: Name of the subject (grouping) column.
        time: Name of the numeric time column.
        random: ``"intercept"`` (random intercepts), ``"slope"``
            (random time slopes) or ``"intercept_slope"`` (correlated
            random intercepts and slopes).
        reml: Fit by REML (default) or, if ``False``, maximum
            likelihood.  Use ML when comparing models that differ in
            their fixed effects.
        **fit_kwargs: Forwarded to ``MixedLM.fit`` (e.g. ``maxiter``,
            ``method``).  Without ``method``, the optimizer from
            :func:`~rcreg.get_optimizer` is used.

    Returns:
        The :class:`FittedModel`.

    Raises:
        InvalidArgument: For an unknown *random* keyword, missing
            columns, a non-numeric time column, missing values in the
            subject or time column, or a formula patsy cannot evaluate.
        EngineFailure: If statsmodels fails numerically.
    """
    df = _ensure_pandas_df(data, name="data")
    validate_random(random)
    if not isinstance(formula, str) or "~" not in formula:
        raise InvalidArgument(
            f"formula must be a two-sided formula such as 'y ~ time', got {formula!r}."
        )
    _require_columns(df, [id, time], name="data")
    _require_numeric(df, time)
    _require_complete(df, [id, time])

    re_formula = engine_re_formula(random, time)
    y, X, Z, rows = _build_designs(formula, df, re_formula)
    design_info = X.design_info
    re_design_info = Z.design_info
    used = df.iloc[rows]
    # Engine column order is fixed: intercept first, then the slope.
    Z = pd.DataFrame(Z.to_numpy(), index=Z.index, columns=random_terms(random, time))
    groups = used[id].to_numpy()

    kwargs = dict(fit_kwargs)
    optimizer = get_optimizer()
    if optimizer != "auto":
        kwargs.setdefault("method", optimizer)

    logger.debug(
        "Fitting %s by %s: n=%d, groups=%d, method=%s",
        combine_formula(formula, random_term(random, id, time)),
        "REML" if reml else "ML",
        len(used),
        len(pd.unique(groups)),
        kwargs.get("method", "auto"),
    )

    try:
        engine = MixedLM(y, X, groups=groups, exog_re=Z)
        result = engine.fit(reml=reml, **kwargs)
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise EngineFailure(f"Mixed-model fit failed: {exc}", exc) from exc

    logger.debug(
        "Fit finished: converged=%s, llf=%.4f",
        getattr(result, "converged", None),
        result.llf,
    )

    return FittedModel(
        fixed_formula=formula,
        random_formula=random_term(random, id, time),
        id=id,
        time=time,
        random=random,
        reml=reml,
        result=result,
        data=used,
        design_info=design_info,
        re_design_info=re_design_info,
    )
