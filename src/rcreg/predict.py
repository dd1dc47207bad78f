"""Subject- and population-level predictions with intervals.

Subject-level predictions add each subject's BLUPs to the fixed part;
subjects not seen at fit time get zero random effects, so their
prediction equals the population one.  No standard errors are
available at this level.

Population-level predictions use the fixed effects only.  Standard
errors follow the delta method, ignoring uncertainty in the variance
components::

    se_i = sqrt(x_i' V x_i)          V = Cov(β̂)

and intervals use the two-sided normal quantile ``z``::

    confidence:  fit ± z·se
    prediction:  fit ± z·sqrt(se² + σ²)
"""

from __future__ import annotations

import warnings

import numpy as np
import pandas as pd
import patsy
from scipy import stats

from ._typing import IntervalKind, PredictionLevel
from ._validation import (
    DataFrameLike,
    _check_confidence_level,
    _ensure_pandas_df,
    _require_columns,
)
from .exceptions import InvalidArgument
from .helpers import random_effects
from .model import FittedModel

_LEVELS = ("subject", "population")
_INTERVALS = ("none", "confidence", "prediction")


def interval_bounds(
    fit: np.ndarray | pd.Series | float,
    se: np.ndarray | pd.Series | float,
    residual_variance: float,
    interval: str,
    confidence_level: float = 0.95,
) -> tuple[np.ndarray, np.ndarray]:
    """Lower and upper interval bounds around *fit*.

    Args:
        fit: Point predictions.
        se: Standard errors of the predicted means.
        residual_variance: σ², added for prediction intervals only.
        interval: ``"confidence"`` or ``"prediction"``.
        confidence_level: Coverage, strictly between 0 and 1.

    Returns:
        ``(lower, upper)`` as float arrays.

    Raises:
        InvalidArgument: For an unknown *interval* or an out-of-range
            *confidence_level*.
    """
    if interval not in ("confidence", "prediction"):
        raise InvalidArgument(
            f"interval must be 'confidence' or 'prediction', got {interval!r}."
        )
    _check_confidence_level(confidence_level)

    z = stats.norm.ppf(1.0 - (1.0 - confidence_level) / 2.0)
    fit_arr = np.asarray(fit, dtype=float)
    se_arr = np.asarray(se, dtype=float)
    if interval == "prediction":
        half = z * np.sqrt(se_arr**2 + residual_variance)
    else:
        half = z * se_arr
    return fit_arr - half, fit_arr + half


def _design_rows(design_info, frame: pd.DataFrame, what: str) -> np.ndarray:
    """Rebuild design rows for *frame* using a fit-time patsy design."""
    try:
        (matrix,) = patsy.build_design_matrices(
            [design_info], frame, NA_action="raise", return_type="dataframe"
        )
    except patsy.PatsyError as exc:
        raise InvalidArgument(f"Could not build the {what} design: {exc}") from exc
    return matrix.to_numpy(dtype=float)


def _random_part(model: FittedModel, frame: pd.DataFrame) -> np.ndarray:
    """``Z_i b̂_i`` per row; zero for subjects unknown to the model."""
    Z = _design_rows(model.re_design_info, frame, "random-effects")
    blups = random_effects(model)
    b = blups.reindex(frame[model.id].to_numpy()).fillna(0.0).to_numpy()
    return np.sum(Z * b, axis=1)


def predict(
    model: FittedModel,
    newdata: DataFrameLike | None = None,
    level: PredictionLevel = "subject",
    se_fit: bool = False,
    interval: IntervalKind = "none",
    confidence_level: float = 0.95,
) -> pd.DataFrame:
    """Predict from a fitted random coefficient regression.

    Args:
        model: A model returned by :func:`~rcreg.fit`.
        newdata: Rows to predict for.  Defaults to the data the model
            was fitted on.  Must contain the time column, the subject
            column when ``level="subject"``, and every predictor in
            the fixed-effects formula.
        level: ``"subject"`` (include BLUPs) or ``"population"``
            (fixed effects only).
        se_fit: Return standard errors.  Only supported at the
            population level; at the subject level a warning is
            emitted and point predictions are returned.
        interval: ``"none"``, ``"confidence"`` or ``"prediction"``.
            Requires ``level="population"``.  Implies ``se_fit``.
        confidence_level: Interval coverage, strictly between 0 and 1.

    Returns:
        A DataFrame indexed like *newdata* with column ``fit``, plus
        ``se_fit`` when standard errors are computed and ``lwr`` /
        ``upr`` when an interval is requested.

    Raises:
        InvalidArgument: For bad arguments or missing columns.
        EngineFailure: If subject-level random effects cannot be
            predicted.
    """
    if not isinstance(model, FittedModel):
        raise InvalidArgument(
            f"model must be a FittedModel, got {type(model).__name__}."
        )
    if level not in _LEVELS:
        raise InvalidArgument(f"level must be one of {list(_LEVELS)}, got {level!r}.")
    if interval not in _INTERVALS:
        raise InvalidArgument(
            f"interval must be one of {list(_INTERVALS)}, got {interval!r}."
        )
    _check_confidence_level(confidence_level)
    if interval != "none" and level != "population":
        raise InvalidArgument(
            "Intervals are only available for population-level predictions "
            "(level='population')."
        )

    if newdata is None:
        frame = model.data
    else:
        frame = _ensure_pandas_df(newdata, name="newdata")
        required = [model.time] if level == "population" else [model.time, model.id]
        _require_columns(frame, required, name="newdata")

    X = _design_rows(model.design_info, frame, "fixed-effects")
    fit = X @ model.fixed_effects.to_numpy()

    if level == "subject":
        if se_fit:
            warnings.warn(
                "Standard errors are not available for subject-level "
                "predictions; returning point predictions only.",
                UserWarning,
                stacklevel=2,
            )
        fit = fit + _random_part(model, frame)
        return pd.DataFrame({"fit": fit}, index=frame.index)

    out = pd.DataFrame({"fit": fit}, index=frame.index)
    if not se_fit and interval == "none":
        return out

    V = model.cov_fixed.to_numpy()
    se = np.sqrt(np.einsum("ij,jk,ik->i", X, V, X))
    out["se_fit"] = se
    if interval != "none":
        lwr, upr = interval_bounds(
            fit, se, model.residual_variance, interval, confidence_level
        )
        out["lwr"] = lwr
        out["upr"] = upr
    return out
