"""Data helpers: time centering and random-effect extraction."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ._validation import (
    DataFrameLike,
    _ensure_pandas_df,
    _require_columns,
    _require_numeric,
)
from .exceptions import EngineFailure, InvalidArgument
from .model import FittedModel


def center_time(
    data: DataFrameLike,
    time: str,
    id: str | None = None,
    scale: bool = False,
) -> pd.DataFrame:
    """Add a centered copy of the time column.

    Centering time moves the intercept to the average time point,
    which reduces the intercept–slope correlation in
    ``intercept_slope`` models.

    Args:
        data: Long-format DataFrame.
        time: Name of the time column.
        id: If given, center within each subject; otherwise center on
            the grand mean.
        scale: Also divide by the standard deviation of the raw time
            column (computed over all rows in both modes).

    Returns:
        A copy of *data* with a new ``"<time>_centered"`` column.

    Raises:
        InvalidArgument: If a column is missing, time is not numeric,
            or ``scale=True`` and time is constant.
    """
    df = _ensure_pandas_df(data, name="data").copy()
    _require_columns(df, [time] if id is None else [time, id], name="data")
    _require_numeric(df, time)

    values = df[time].astype(float)
    if id is None:
        centered = values - values.mean()
    else:
        centered = values - values.groupby(df[id]).transform("mean")

    if scale:
        sd = values.std(ddof=1)
        if not sd > 0:
            raise InvalidArgument(
                f"Cannot scale time variable '{time}': standard deviation is {sd!r}."
            )
        centered = centered / sd

    df[f"{time}_centered"] = centered
    return df


def random_effects(model: FittedModel) -> pd.DataFrame:
    """Predicted random effects (BLUPs), one row per subject.

    Columns are ``"(Intercept)"`` and/or the time column name, in
    engine order; the index holds the subject ids.

    Raises:
        EngineFailure: If the engine cannot predict random effects,
            e.g. from a singular random-effects covariance matrix.
    """
    try:
        ranef = model.result.random_effects
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise EngineFailure(f"Could not predict random effects: {exc}", exc) from exc

    frame = pd.DataFrame.from_dict(
        {group: np.asarray(values, dtype=float) for group, values in ranef.items()},
        orient="index",
        columns=model.random_terms,
    )
    frame.index.name = model.id
    return frame
