"""Exception and warning types raised by rcreg.

Three failure modes are distinguished:

* :class:`InvalidArgument` — the caller passed something unusable (a
  missing column, an unknown keyword, too few models).  Raised eagerly,
  before the mixed-model engine is touched.
* :class:`EngineFailure` — statsmodels raised a numerical error while
  fitting or while predicting random effects.  The original exception
  is attached as ``engine_error`` and chained as ``__cause__``.
* :class:`DegenerateResultWarning` — a variance ratio had a zero or
  non-finite denominator.  The affected value is returned as ``nan``
  and this warning is emitted alongside it.
"""

from __future__ import annotations


class RcregError(Exception):
    """Base class for all rcreg errors."""


class InvalidArgument(RcregError, ValueError):
    """An argument failed validation.

    Subclasses :class:`ValueError` so that callers catching the
    built-in type keep working.
    """


class EngineFailure(RcregError):
    """The mixed-model engine failed numerically.

    Attributes:
        engine_error: The exception raised by statsmodels (or NumPy's
            linear algebra layer underneath it).
    """

    def __init__(self, message: str, engine_error: BaseException) -> None:
        super().__init__(message)
        self.engine_error = engine_error


class DegenerateResultWarning(RuntimeWarning):
    """A variance decomposition had a zero or undefined denominator."""
