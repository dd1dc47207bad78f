"""Input compatibility and validation helpers.

All public API functions accept pandas DataFrames.  Polars DataFrames
(and LazyFrames) are converted to pandas at the boundary so that
internal code, which hands pandas objects to patsy and statsmodels,
remains unchanged.

Polars is **not** a required dependency.  If it is not installed, the
converter simply passes pandas objects through untouched.

Every check raises :class:`~rcreg.exceptions.InvalidArgument` with a
message naming the offending value.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, TypeAlias

import pandas as pd

from .exceptions import InvalidArgument

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Polars is optional; detect it at import time.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(obj: DataFrameLike, *, name: str = "data") -> pd.DataFrame:
    """Convert *obj* to a :class:`pandas.DataFrame` if necessary.

    Accepted types:
        * ``pandas.DataFrame`` — returned as-is.
        * ``polars.DataFrame`` — converted via ``.to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.

    Args:
        obj: A pandas or Polars DataFrame (or LazyFrame).
        name: Label used in error messages (e.g. ``"data"`` or
            ``"newdata"``).

    Returns:
        A pandas ``DataFrame``.

    Raises:
        InvalidArgument: If *obj* is not a recognised DataFrame type.
    """
    if isinstance(obj, pd.DataFrame):
        return obj

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, pl.DataFrame):
            return obj.to_pandas()

    raise InvalidArgument(
        f"'{name}' must be a pandas DataFrame"
        + (" or Polars DataFrame/LazyFrame" if _HAS_POLARS else "")
        + f", got {type(obj).__name__}."
    )


def _require_columns(
    df: pd.DataFrame,
    columns: Iterable[str],
    *,
    name: str = "data",
) -> None:
    """Raise if any of *columns* is absent from *df*."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidArgument(
            f"'{name}' must contain columns: {', '.join(map(repr, missing))}."
        )


def _require_numeric(df: pd.DataFrame, column: str) -> None:
    """Raise if *column* is not a numeric (non-boolean) dtype."""
    dtype = df[column].dtype
    if pd.api.types.is_bool_dtype(dtype) or not pd.api.types.is_numeric_dtype(dtype):
        raise InvalidArgument(
            f"Time variable '{column}' must be numeric, got dtype {dtype}."
        )


def _require_complete(df: pd.DataFrame, columns: Iterable[str]) -> None:
    """Raise if any of *columns* holds missing values."""
    for c in columns:
        n_missing = int(df[c].isna().sum())
        if n_missing:
            raise InvalidArgument(
                f"Column '{c}' contains {n_missing} missing value(s)."
            )


def _check_confidence_level(confidence_level: float) -> None:
    """Raise unless ``0 < confidence_level < 1``."""
    if not 0.0 < confidence_level < 1.0:
        raise InvalidArgument(
            f"confidence_level must be strictly between 0 and 1, "
            f"got {confidence_level!r}."
        )
