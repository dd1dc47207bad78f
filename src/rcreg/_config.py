"""Optimizer configuration for the rcreg package.

Controls which optimizer statsmodels' ``MixedLM.fit`` is asked to use
when :func:`rcreg.fit` is called without an explicit ``method``.

Resolution order (first match wins):
    1. Programmatic override via :func:`set_optimizer`.
    2. The ``RCREG_OPTIMIZER`` environment variable.
    3. ``"auto"``: statsmodels' own optimizer sequence.

Valid names are ``"auto"``, ``"lbfgs"``, ``"bfgs"``, ``"cg"``,
``"nm"`` and ``"powell"`` (case-insensitive).

Examples:
    Force L-BFGS globally from the shell::

        export RCREG_OPTIMIZER=lbfgs

    Force Nelder-Mead programmatically::

        import rcreg
        rcreg.set_optimizer("nm")

    Restore the statsmodels default::

        rcreg.set_optimizer("auto")
"""

from __future__ import annotations

import os

_VALID_OPTIMIZERS = {"auto", "lbfgs", "bfgs", "cg", "nm", "powell"}

# Sentinel indicating "no programmatic override has been set".
_optimizer_override: str | None = None


def get_optimizer() -> str:
    """Return the active optimizer name.

    Resolution order:
        1. Value set by :func:`set_optimizer` (unless ``"auto"``).
        2. ``RCREG_OPTIMIZER`` environment variable.
        3. ``"auto"``.

    Returns:
        One of the valid optimizer names.  ``"auto"`` means no
        ``method`` argument is forwarded to statsmodels.
    """
    # 1. Programmatic override
    if _optimizer_override is not None and _optimizer_override != "auto":
        return _optimizer_override

    # 2. Environment variable
    env = os.environ.get("RCREG_OPTIMIZER", "").strip().lower()
    if env in _VALID_OPTIMIZERS:
        return env

    # 3. statsmodels default
    return "auto"


def set_optimizer(name: str) -> None:
    """Override the optimizer selection.

    Args:
        name: One of ``"auto"``, ``"lbfgs"``, ``"bfgs"``, ``"cg"``,
            ``"nm"`` or ``"powell"`` (case-insensitive).  ``"auto"``
            restores the default resolution order.

    Raises:
        ValueError: If *name* is not a recognised optimizer.
    """
    global _optimizer_override
    normalised = name.strip().lower()
    if normalised not in _VALID_OPTIMIZERS:
        raise ValueError(
            f"Unknown optimizer '{name}'. Choose from: {sorted(_VALID_OPTIMIZERS)}"
        )
    _optimizer_override = normalised
