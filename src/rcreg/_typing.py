"""Shared type aliases for the rcreg package."""

from typing import Literal

# Random-effects structures understood by the formula builder.
RandomStructure = Literal["intercept", "slope", "intercept_slope"]

# Prediction levels and interval kinds accepted by ``predict``.
PredictionLevel = Literal["subject", "population"]
IntervalKind = Literal["none", "confidence", "prediction"]
