"""Random-effects formula construction.

Translates a random-structure keyword plus grouping and time column
names into the lme4-style term users read in summaries, and into the
``re_formula`` understood by patsy when building the random-effects
design that statsmodels' ``MixedLM`` is fitted with:

=====================  ==================  ==============
``random``             display term        ``re_formula``
=====================  ==================  ==============
``intercept``          ``(1 | id)``        ``1``
``slope``              ``(0 + t | id)``    ``0 + t``
``intercept_slope``    ``(1 + t | id)``    ``1 + t``
=====================  ==================  ==============

For ``intercept_slope`` the intercept and slope are correlated: the
engine estimates their full 2×2 covariance block.
"""

from __future__ import annotations

from .exceptions import InvalidArgument

RANDOM_STRUCTURES: tuple[str, ...] = ("intercept", "slope", "intercept_slope")


def validate_random(random: str) -> str:
    """Return *random* unchanged if it names a known structure.

    Raises:
        InvalidArgument: If *random* is not one of ``"intercept"``,
            ``"slope"`` or ``"intercept_slope"``.
    """
    if random not in RANDOM_STRUCTURES:
        raise InvalidArgument(
            f"Unknown random structure {random!r}. "
            f"Choose from: {list(RANDOM_STRUCTURES)}"
        )
    return random


def random_term(random: str, id: str, time: str) -> str:
    """Build the random-effects term for *random*.

    Args:
        random: Random-effects structure keyword.
        id: Name of the grouping (subject) column.
        time: Name of the time column.

    Returns:
        ``"(1 | id)"``, ``"(0 + time | id)"`` or ``"(1 + time | id)"``.

    Raises:
        InvalidArgument: If *random* is not recognised.
    """
    validate_random(random)
    if random == "intercept":
        return f"(1 | {id})"
    if random == "slope":
        return f"(0 + {time} | {id})"
    return f"(1 + {time} | {id})"


def combine_formula(fixed: str, term: str) -> str:
    """Append a random-effects *term* to a fixed-effects formula."""
    return f"{fixed} + {term}"


def engine_re_formula(random: str, time: str) -> str:
    """Return the one-sided random-effects design formula for *random*.

    The grouping column is not part of this formula; it is passed to
    the engine separately as ``groups``.
    """
    validate_random(random)
    if random == "intercept":
        return "1"
    if random == "slope":
        return f"0 + {time}"
    return f"1 + {time}"


def random_terms(random: str, time: str) -> list[str]:
    """Names of the random-effect terms, in engine column order.

    The intercept is always ``"(Intercept)"`` and the slope is always
    the time column name.
    """
    validate_random(random)
    if random == "intercept":
        return ["(Intercept)"]
    if random == "slope":
        return [time]
    return ["(Intercept)", time]
