"""rcreg — Random coefficient regression for repeated measurements.

A convenience layer over statsmodels' ``MixedLM`` for longitudinal
data: specify a fixed-effects formula, the subject and time columns
and a random-effects structure (``"intercept"``, ``"slope"`` or
``"intercept_slope"``) instead of writing mixed-model designs by hand.
On top of the fit it provides variance components and ICCs,
Nakagawa–Schielzeth R², population-level prediction intervals and
AIC-ranked model comparison.

Public API:
    .. autosummary::
        fit
        FittedModel
        variance_components
        icc
        r_squared
        predict
        interval_bounds
        compare
        summarize
        center_time
        random_effects
        simulate
        residual_diagnostics
        random_effect_diagnostics
        normality_tests
        print_model_info
        print_summary_table
        print_comparison_table
        random_term
        combine_formula
        engine_re_formula
        get_optimizer
        set_optimizer
"""

from ._config import get_optimizer, set_optimizer
from ._results import (
    ComparisonRow,
    ComparisonTable,
    InterceptSlopeICC,
    RSquared,
    SlopeICC,
    SummaryResult,
    VarianceComponent,
    VarianceComponents,
)
from .compare import compare
from .diagnostics import normality_tests, random_effect_diagnostics, residual_diagnostics
from .display import print_comparison_table, print_model_info, print_summary_table
from .exceptions import DegenerateResultWarning, EngineFailure, InvalidArgument, RcregError
from .formula import combine_formula, engine_re_formula, random_term, validate_random
from .helpers import center_time, random_effects
from .model import FittedModel, fit
from .predict import interval_bounds, predict
from .r2 import r_squared
from .simulate import simulate
from .summary import fixed_effects_table, summarize
from .variance import icc, variance_components

__all__ = [
    "fit",
    "FittedModel",
    "variance_components",
    "icc",
    "r_squared",
    "predict",
    "interval_bounds",
    "compare",
    "summarize",
    "fixed_effects_table",
    "center_time",
    "random_effects",
    "simulate",
    "residual_diagnostics",
    "random_effect_diagnostics",
    "normality_tests",
    "print_model_info",
    "print_summary_table",
    "print_comparison_table",
    "random_term",
    "combine_formula",
    "engine_re_formula",
    "validate_random",
    "get_optimizer",
    "set_optimizer",
    "ComparisonRow",
    "ComparisonTable",
    "InterceptSlopeICC",
    "RSquared",
    "SlopeICC",
    "SummaryResult",
    "VarianceComponent",
    "VarianceComponents",
    "RcregError",
    "InvalidArgument",
    "EngineFailure",
    "DegenerateResultWarning",
]

__version__ = "0.1.0"
