"""Typed result objects for random coefficient regression.

Frozen dataclasses that provide:

* **Attribute access** — ``result.aic``, ``result.marginal``, etc.
* **Dict-like access** — ``result["aic"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy and pandas types converted to native Python.

All types are frozen (immutable after construction) to communicate
that results are a snapshot of a fitted model — they should not be
mutated after creation.  They are derived on demand and never cached.
"""

from __future__ import annotations

import math
import warnings
from collections.abc import Iterator
from dataclasses import dataclass, fields
from typing import Any

import numpy as np
import pandas as pd

from .exceptions import DegenerateResultWarning

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy/pandas values to Python-native types.

    Handles nested dicts, lists, tuples, np.ndarray, np.integer,
    np.floating, pandas Series/DataFrames and nested result objects
    so that :meth:`to_dict` returns a fully JSON-serialisable
    structure.
    """
    if isinstance(obj, _DictAccessMixin):
        return obj.to_dict()
    if isinstance(obj, pd.DataFrame):
        return _numpy_to_python(obj.to_dict(orient="index"))
    if isinstance(obj, pd.Series):
        return _numpy_to_python(obj.to_dict())
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {_numpy_to_python(k): _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


def _safe_ratio(numerator: float, denominator: float, what: str) -> float:
    """Return ``numerator / denominator``, or ``nan`` with a warning.

    A zero or non-finite denominator is reported as ``nan`` together
    with a :class:`DegenerateResultWarning`; it is never coerced to 0.
    """
    if denominator == 0 or not math.isfinite(denominator):
        warnings.warn(
            f"{what} is undefined: total variance is {denominator!r}.",
            DegenerateResultWarning,
            stacklevel=3,
        )
        return float("nan")
    return float(numerator / denominator)


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test
    """

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary.

        Runs :func:`_numpy_to_python` on every field so the returned
        dict is fully JSON-serialisable.
        """
        return {
            f.name: _numpy_to_python(getattr(self, f.name))
            for f in fields(self)  # type: ignore[arg-type]
        }


# ------------------------------------------------------------------ #
# Variance components
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class VarianceComponent(_DictAccessMixin):
    """One row of a variance-components table.

    Attributes:
        group: Grouping column name, or ``"Residual"``.
        term1: ``"(Intercept)"`` or the time column name; ``None``
            for the residual row.
        term2: Second term for a covariance row, ``None`` for a
            variance row.
        value: Estimated variance or covariance.
    """

    group: str
    term1: str | None
    term2: str | None
    value: float

    @property
    def is_covariance(self) -> bool:
        return self.term2 is not None


@dataclass(frozen=True)
class VarianceComponents(_DictAccessMixin):
    """Ordered variance/covariance rows plus the residual variance.

    Rows are produced in engine order: random-effect variances and
    covariances for the grouping factor first, then exactly one
    ``"Residual"`` row.  Lookups match terms by exact identity.
    """

    rows: tuple[VarianceComponent, ...]

    def __iter__(self) -> Iterator[VarianceComponent]:  # type: ignore[override]
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def residual(self) -> float:
        """Residual variance σ²."""
        for row in self.rows:
            if row.group == "Residual":
                return row.value
        raise KeyError("Residual")

    def variance(self, term: str) -> float:
        """Variance of random term *term*.

        Raises:
            KeyError: If the model has no random effect named *term*.
        """
        for row in self.rows:
            if row.group != "Residual" and row.term1 == term and row.term2 is None:
                return row.value
        raise KeyError(term)

    def covariance(self, term1: str, term2: str) -> float:
        """Covariance between two random terms (order-insensitive)."""
        for row in self.rows:
            if row.term2 is None:
                continue
            if {row.term1, row.term2} == {term1, term2}:
                return row.value
        raise KeyError((term1, term2))

    def random_variances(self) -> dict[str, float]:
        """Map each random term to its variance (covariances excluded)."""
        return {
            row.term1: row.value  # type: ignore[misc]
            for row in self.rows
            if row.group != "Residual" and row.term2 is None
        }

    def to_frame(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with columns
        ``group``, ``term1``, ``term2``, ``value``.
        """
        return pd.DataFrame(
            [(r.group, r.term1, r.term2, r.value) for r in self.rows],
            columns=["group", "term1", "term2", "value"],
        )


# ------------------------------------------------------------------ #
# ICC
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class SlopeICC(_DictAccessMixin):
    """ICC ingredients for a random-slope-only model.

    With no random intercept the between-subject share of variance is
    zero at ``t = 0`` and grows with ``|t|``, so no single fraction is
    reported.  :meth:`at` evaluates ``t²σ²_b1 / (t²σ²_b1 + σ²)``.
    """

    slope_var: float
    residual_var: float

    def at(self, t: float) -> float:
        between = t * t * self.slope_var
        return _safe_ratio(between, between + self.residual_var, "ICC")


@dataclass(frozen=True)
class InterceptSlopeICC(_DictAccessMixin):
    """ICC for correlated random intercepts and slopes.

    Total variance depends on time::

        Var(y | t) = σ²_b0 + 2t·cov(b0, b1) + t²σ²_b1 + σ²

    Attributes:
        intercept: ICC at ``t = 0``, ``σ²_b0 / (σ²_b0 + σ²)``.
        slope_var: Random-slope variance σ²_b1.
        cov_intercept_slope: Intercept–slope covariance.
        intercept_var: Random-intercept variance σ²_b0.
        residual_var: Residual variance σ².
    """

    intercept: float
    slope_var: float
    cov_intercept_slope: float
    intercept_var: float
    residual_var: float

    def at(self, t: float) -> float:
        """ICC evaluated at time *t*."""
        between = (
            self.intercept_var
            + 2.0 * t * self.cov_intercept_slope
            + t * t * self.slope_var
        )
        return _safe_ratio(between, between + self.residual_var, "ICC")


# ------------------------------------------------------------------ #
# R²
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class RSquared(_DictAccessMixin):
    """Nakagawa–Schielzeth marginal and conditional R²."""

    marginal: float
    conditional: float


# ------------------------------------------------------------------ #
# Model comparison
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ComparisonRow(_DictAccessMixin):
    """Fit statistics of one model in a :class:`ComparisonTable`."""

    label: str
    random: str
    aic: float
    bic: float
    log_likelihood: float
    n_params: int
    n_obs: int


@dataclass(frozen=True)
class ComparisonTable(_DictAccessMixin):
    """Models ranked by ascending AIC."""

    rows: tuple[ComparisonRow, ...]

    def __iter__(self) -> Iterator[ComparisonRow]:  # type: ignore[override]
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def best(self) -> ComparisonRow:
        """The row with the lowest AIC."""
        return self.rows[0]

    @property
    def labels(self) -> list[str]:
        return [row.label for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Return the table as a DataFrame indexed by position."""
        return pd.DataFrame(
            [
                (r.label, r.random, r.aic, r.bic, r.log_likelihood, r.n_params, r.n_obs)
                for r in self.rows
            ],
            columns=[
                "label",
                "random",
                "aic",
                "bic",
                "log_likelihood",
                "n_params",
                "n_obs",
            ],
        )


# ------------------------------------------------------------------ #
# SummaryResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class SummaryResult(_DictAccessMixin):
    """Snapshot summary of a fitted random coefficient regression.

    Returned by :func:`~rcreg.summarize`.  ``fixed_effects`` is a
    DataFrame indexed by coefficient name with columns ``estimate``,
    ``std_error``, ``t_value``, ``ci_lower`` and ``ci_upper``.
    ``icc`` is a float, :class:`SlopeICC` or
    :class:`InterceptSlopeICC` depending on ``random``.
    """

    random: str
    fixed_formula: str
    random_formula: str
    id: str
    time: str
    reml: bool
    converged: bool
    fixed_effects: pd.DataFrame
    variance_components: VarianceComponents
    residual_variance: float
    icc: float | SlopeICC | InterceptSlopeICC
    r_squared: RSquared
    aic: float
    bic: float
    log_likelihood: float
    n_obs: int
    n_groups: int
    confidence_level: float
