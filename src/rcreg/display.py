"""Formatted ASCII table display utilities for fitted models.

These tables mirror the statsmodels summary style: an 80-column
header panel with the model metadata and fit statistics, followed by
the fixed-effects coefficients and the variance components.  Values
that are undefined (``nan`` or ``None``) print as ``N/A``.
"""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

from ._results import InterceptSlopeICC, SlopeICC

if TYPE_CHECKING:
    from ._results import ComparisonTable, SummaryResult
    from .model import FittedModel

W = 80


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_diag_val(val: object, digits: int = 4) -> str:
    """Format a statistic for display.

    Converts ``nan`` floats and ``None`` to ``'N/A'`` and rounds
    other floats to *digits* decimals.  Leaves strings and other
    values as-is via ``str()``.
    """
    if val is None:
        return "N/A"
    if isinstance(val, float):
        if val != val:  # nan check
            return "N/A"
        return f"{val:.{digits}f}"
    return str(val)


def _print_title(title: str) -> None:
    print("=" * W)
    for line in textwrap.wrap(title, width=W - 2):
        print(f"{line:^{W}}")
    print("=" * W)


def _render_header_rows(
    rows: list[tuple[str, str, str, str]],
    col1: int = 40,
    col2: int = 38,
) -> None:
    """Print ``(left_label, left_value, right_label, right_value)`` rows.

    The left pair is flush-left in *col1* columns; the right pair is
    right-aligned in *col2* columns.
    """
    for ll, lv, rl, rv in rows:
        left = f"{ll:<16}{_truncate(lv, col1 - 17):<{col1 - 16}}" if ll else f"{'':<{col1}}"
        right = f"{rl:>{col2 - 11}} {rv:>10}" if rl else ""
        print(f"{left}{right}")


def _response_name(fixed_formula: str) -> str:
    return fixed_formula.split("~", 1)[0].strip()


def _header_rows(
    *,
    fixed_formula: str,
    random: str,
    time: str,
    reml: bool,
    converged: bool,
    n_obs: int,
    n_groups: int,
    log_likelihood: float,
    aic: float,
    bic: float,
) -> list[tuple[str, str, str, str]]:
    return [
        ("Dep. Variable:", _response_name(fixed_formula), "No. Observations:", str(n_obs)),
        ("Random:", random, "No. Groups:", str(n_groups)),
        ("Method:", "REML" if reml else "ML", "Log-Likelihood:", _fmt_diag_val(log_likelihood)),
        ("Time:", time, "AIC:", _fmt_diag_val(aic)),
        ("Converged:", "Yes" if converged else "No", "BIC:", _fmt_diag_val(bic)),
    ]


def print_model_info(
    model: FittedModel,
    *,
    title: str = "Random Coefficient Regression",
) -> None:
    """Print the metadata and fit statistics of a fitted model.

    Args:
        model: A model returned by :func:`~rcreg.fit`.
        title: Title for the output table.
    """
    _print_title(title)
    _render_header_rows(
        _header_rows(
            fixed_formula=model.fixed_formula,
            random=model.random,
            time=model.time,
            reml=model.reml,
            converged=model.converged,
            n_obs=model.n_obs,
            n_groups=model.n_groups,
            log_likelihood=model.log_likelihood,
            aic=model.aic,
            bic=model.bic,
        )
    )
    print("-" * W)
    print(textwrap.fill(f"Formula: {model.full_formula}", width=W, subsequent_indent="  "))
    print("=" * W)


def _icc_lines(icc: float | SlopeICC | InterceptSlopeICC) -> list[str]:
    if isinstance(icc, InterceptSlopeICC):
        return [
            f"  {'ICC (t = 0):':<28}{_fmt_diag_val(icc.intercept)}",
            f"  {'Slope variance:':<28}{_fmt_diag_val(icc.slope_var)}",
            f"  {'Intercept-slope cov.:':<28}{_fmt_diag_val(icc.cov_intercept_slope)}",
        ]
    if isinstance(icc, SlopeICC):
        return [
            f"  {'Slope variance:':<28}{_fmt_diag_val(icc.slope_var)}",
            f"  {'Residual variance:':<28}{_fmt_diag_val(icc.residual_var)}",
        ]
    return [f"  {'ICC:':<28}{_fmt_diag_val(icc)}"]


def print_summary_table(
    summary: SummaryResult,
    *,
    title: str = "Random Coefficient Regression Results",
) -> None:
    """Print a :class:`~rcreg._results.SummaryResult` as ASCII tables.

    Panels, top to bottom: model metadata and fit statistics; fixed
    effects with Wald intervals; variance components; ICC and R².

    Args:
        summary: Result of :func:`~rcreg.summarize`.
        title: Title for the output table.
    """
    _print_title(title)
    _render_header_rows(
        _header_rows(
            fixed_formula=summary.fixed_formula,
            random=summary.random,
            time=summary.time,
            reml=summary.reml,
            converged=summary.converged,
            n_obs=summary.n_obs,
            n_groups=summary.n_groups,
            log_likelihood=summary.log_likelihood,
            aic=summary.aic,
            bic=summary.bic,
        )
    )
    print("-" * W)

    # ── Fixed effects (W = 80 chars) ──────────────────────────── #
    #
    #   Term (20, left) | Estimate, Std.Err, t (12 each, right)
    #   | CI lower, CI upper (12 each, right)
    #   Total: 20 + 5 * 12 = 80
    fc = 20
    pct = round(summary.confidence_level * 100, 1)
    pct_str = f"{pct:g}%"
    print(
        f"{'Fixed effects':<{fc}}{'Estimate':>12}{'Std.Err':>12}{'t':>12}"
        f"{'[' + pct_str:>12}{'CI]':>12}"
    )
    print("-" * W)
    for term, row in summary.fixed_effects.iterrows():
        print(
            f"{_truncate(str(term), fc - 1):<{fc}}"
            f"{_fmt_diag_val(float(row['estimate'])):>12}"
            f"{_fmt_diag_val(float(row['std_error'])):>12}"
            f"{_fmt_diag_val(float(row['t_value']), 3):>12}"
            f"{_fmt_diag_val(float(row['ci_lower'])):>12}"
            f"{_fmt_diag_val(float(row['ci_upper'])):>12}"
        )
    print("-" * W)

    # ── Variance components ───────────────────────────────────── #
    print(f"{'Random effects':<{fc}}{'Term':<28}{'Variance':>16}{'Std.Dev.':>16}")
    print("-" * W)
    for comp in summary.variance_components:
        if comp.term2 is None:
            term = comp.term1 or ""
            sd = comp.value**0.5 if comp.value >= 0 else float("nan")
            sd_str = _fmt_diag_val(sd)
        else:
            term = f"{comp.term1} x {comp.term2} (cov)"
            sd_str = ""
        print(
            f"{_truncate(comp.group, fc - 1):<{fc}}"
            f"{_truncate(term, 27):<28}"
            f"{_fmt_diag_val(comp.value):>16}{sd_str:>16}"
        )
    print("-" * W)

    for line in _icc_lines(summary.icc):
        print(line)
    print(f"  {'Marginal R²:':<28}{_fmt_diag_val(summary.r_squared.marginal)}")
    print(f"  {'Conditional R²:':<28}{_fmt_diag_val(summary.r_squared.conditional)}")
    print("=" * W)


def print_comparison_table(
    table: ComparisonTable,
    *,
    title: str = "Model Comparison (ranked by AIC)",
) -> None:
    """Print a :class:`~rcreg._results.ComparisonTable`.

    ``dAIC`` is each model's AIC minus the best (lowest) AIC.

    Args:
        table: Result of :func:`~rcreg.compare`.
        title: Title for the output table.
    """
    _print_title(title)
    # Model 12, Random 16, AIC/BIC/logLik 11 each, df 4, N 6, dAIC 9 = 80
    print(
        f"{'Model':<12}{'Random':<16}{'AIC':>11}{'BIC':>11}{'logLik':>11}"
        f"{'df':>4}{'N':>6}{'dAIC':>9}"
    )
    print("-" * W)
    best = table.best.aic
    for row in table:
        print(
            f"{_truncate(row.label, 11):<12}{row.random:<16}"
            f"{_fmt_diag_val(row.aic, 2):>11}{_fmt_diag_val(row.bic, 2):>11}"
            f"{_fmt_diag_val(row.log_likelihood, 2):>11}"
            f"{row.n_params:>4}{row.n_obs:>6}"
            f"{_fmt_diag_val(row.aic - best, 2):>9}"
        )
    print("=" * W)
