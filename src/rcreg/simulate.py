"""Simulation of longitudinal data with correlated random effects."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from .exceptions import InvalidArgument


def simulate(
    n_subjects: int = 100,
    n_timepoints: int = 5,
    beta: Sequence[float] = (10.0, 2.0, 1.5),
    sigma_u: Sequence[float] = (2.0, 1.0),
    rho: float = 0.25,
    sigma_e: float = 2.0,
    seed: int | None = None,
) -> pd.DataFrame:
    """Simulate repeated measurements from a random coefficient model.

    The generating model is::

        y_ij = (β0 + b0_i) + (β1 + b1_i)·t_j + β2·x1_i + ε_ij

    with ``(b0_i, b1_i) ~ N(0, Σ)``,
    ``Σ = [[σu0², ρσu0σu1], [ρσu0σu1, σu1²]]``,
    ``ε_ij ~ N(0, σe²)``, a time-invariant standard-normal covariate
    ``x1`` and times ``0, 1, …, n_timepoints - 1``.

    With the defaults the random-intercept variance is 4, the
    random-slope variance 1, their covariance 0.5 and the residual
    variance 4.

    Args:
        n_subjects: Number of subjects (ids ``1..n_subjects``).
        n_timepoints: Measurements per subject.
        beta: Fixed intercept, time slope and ``x1`` coefficient.
        sigma_u: Standard deviations of the random intercept and slope.
        rho: Correlation between random intercept and slope.
        sigma_e: Residual standard deviation.
        seed: Seed for :func:`numpy.random.default_rng`.

    Returns:
        Long-format DataFrame with columns ``id``, ``time``, ``x1``
        and ``y``; ``n_subjects * n_timepoints`` rows.

    Raises:
        InvalidArgument: For non-positive counts, wrong-length *beta*
            or *sigma_u*, negative standard deviations or ``|rho| > 1``.
    """
    if int(n_subjects) < 1 or int(n_timepoints) < 1:
        raise InvalidArgument(
            f"n_subjects and n_timepoints must be positive, "
            f"got {n_subjects!r} and {n_timepoints!r}."
        )
    beta = tuple(float(b) for b in beta)
    sigma_u = tuple(float(s) for s in sigma_u)
    if len(beta) != 3:
        raise InvalidArgument(f"beta must have 3 elements, got {len(beta)}.")
    if len(sigma_u) != 2:
        raise InvalidArgument(f"sigma_u must have 2 elements, got {len(sigma_u)}.")
    if min(sigma_u) < 0 or sigma_e < 0:
        raise InvalidArgument("Standard deviations must be non-negative.")
    if abs(rho) > 1:
        raise InvalidArgument(f"Correlation 'rho' must be between -1 and 1, got {rho!r}.")

    rng = np.random.default_rng(seed)
    n_subjects = int(n_subjects)
    n_timepoints = int(n_timepoints)

    # Lower Cholesky factor of Σ, written out so that |ρ| = 1 works.
    s0, s1 = sigma_u
    L = np.array(
        [
            [s0, 0.0],
            [rho * s1, s1 * np.sqrt(1.0 - rho * rho)],
        ]
    )
    U = rng.standard_normal((n_subjects, 2)) @ L.T

    subject = np.repeat(np.arange(n_subjects), n_timepoints)
    time = np.tile(np.arange(n_timepoints), n_subjects)
    x1 = rng.standard_normal(n_subjects)[subject]
    eps = rng.normal(0.0, sigma_e, size=subject.size)

    y = (
        (beta[0] + U[subject, 0])
        + (beta[1] + U[subject, 1]) * time
        + beta[2] * x1
        + eps
    )
    return pd.DataFrame({"id": subject + 1, "time": time, "x1": x1, "y": y})
