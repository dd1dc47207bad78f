"""AIC-ranked comparison of fitted models."""

from __future__ import annotations

import math
import warnings
from collections.abc import Sequence

from ._results import ComparisonRow, ComparisonTable
from .exceptions import InvalidArgument
from .model import FittedModel


def compare(
    *models: FittedModel,
    labels: Sequence[str] | None = None,
    **named_models: FittedModel,
) -> ComparisonTable:
    """Rank two or more fitted models by AIC.

    Models passed positionally are labelled ``"model1"``,
    ``"model2"``, … unless *labels* is given; keyword models are
    labelled by their keyword.

    Examples::

        compare(m_int, m_slope)
        compare(intercept=m_int, intercept_slope=m_both)

    Args:
        *models: Fitted models.
        labels: Optional labels for the positional models.
        **named_models: Fitted models keyed by label.

    Returns:
        A :class:`~rcreg._results.ComparisonTable` sorted by
        ascending AIC (ties keep input order).

    Raises:
        InvalidArgument: If fewer than two models are given, any input
            is not a :class:`~rcreg.model.FittedModel`, or *labels*
            does not match the positional models.
    """
    if labels is not None:
        labels = list(labels)
        if len(labels) != len(models):
            raise InvalidArgument(
                f"Got {len(labels)} labels for {len(models)} positional models."
            )
    else:
        labels = [f"model{i}" for i in range(1, len(models) + 1)]

    entries = list(zip(labels, models)) + list(named_models.items())
    if len(entries) < 2:
        raise InvalidArgument(
            f"At least two models are required for comparison, got {len(entries)}."
        )
    for label, model in entries:
        if not isinstance(model, FittedModel):
            raise InvalidArgument(
                f"Model '{label}' must be a FittedModel, got {type(model).__name__}."
            )

    if len({model.n_obs for _, model in entries}) > 1:
        warnings.warn(
            "Models were fitted to different numbers of observations; "
            "their AIC values are not directly comparable.",
            UserWarning,
            stacklevel=2,
        )

    rows = [
        ComparisonRow(
            label=label,
            random=model.random,
            aic=model.aic,
            bic=model.bic,
            log_likelihood=model.log_likelihood,
            n_params=model.n_params,
            n_obs=model.n_obs,
        )
        for label, model in entries
    ]
    rows.sort(key=lambda r: (math.isnan(r.aic), r.aic))
    return ComparisonTable(rows=tuple(rows))
