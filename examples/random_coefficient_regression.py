"""
Random Coefficient Regression on Simulated Longitudinal Data

Demonstrates:
- ``rcreg.simulate`` — repeated measures with correlated random intercepts
  and slopes (β = 10, 2, 1.5; τ²₀ = 4, τ²₁ = 1, cov = 0.5; σ² = 4)
- ``rcreg.fit`` with ``random="intercept"``, ``"slope"`` and
  ``"intercept_slope"``
- Variance components, ICC and Nakagawa–Schielzeth R²
- Population-level confidence and prediction intervals
- AIC-ranked model comparison (ML fits)
- External validation against a hand-built statsmodels MixedLM

Dataset
-------
100 subjects measured at five equally spaced time points (0–4), with one
time-invariant covariate ``x1``.  The true data-generating model is::

    y = (10 + b0) + (2 + b1)·time + 1.5·x1 + ε
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.regression.mixed_linear_model import MixedLM

import rcreg

# ============================================================================
# Simulate data
# ============================================================================

df = rcreg.simulate(n_subjects=100, n_timepoints=5, seed=2024)

print("Dataset: simulated random coefficient data")
print(f"  Observations:  {len(df)}")
print(f"  Subjects:      {df['id'].nunique()}")
print(f"  Outcome:       y (range {df['y'].min():.1f}–{df['y'].max():.1f})")
print()

# ============================================================================
# Fit the three random structures
# ============================================================================

models = {
    random: rcreg.fit("y ~ time + x1", df, id="id", time="time", random=random)
    for random in ("intercept", "slope", "intercept_slope")
}
full = models["intercept_slope"]

rcreg.print_model_info(full)
summary = rcreg.summarize(full)
rcreg.print_summary_table(summary)

# ============================================================================
# External validation: statsmodels MixedLM
# ============================================================================

print(f"\n{'=' * 80}")
print("External validation: statsmodels MixedLM (random intercept + slope)")
print("=" * 80)

X_sm = sm.add_constant(df[["time", "x1"]].to_numpy(dtype=float))
Z_sm = sm.add_constant(df[["time"]].to_numpy(dtype=float))
sm_model = MixedLM(df["y"].to_numpy(), X_sm, groups=df["id"].to_numpy(), exog_re=Z_sm).fit(
    reml=True
)
beta_match = np.allclose(full.fixed_effects.to_numpy(), sm_model.fe_params, atol=1e-4)
sigma2_match = abs(full.residual_variance - sm_model.scale) < 1e-3
print(f"  β̂ agree (atol=1e-4):  {beta_match}")
print(f"  σ² agree (atol=1e-3): {sigma2_match}")
assert beta_match, f"β̂ mismatch: {full.fixed_effects.to_numpy()} vs {sm_model.fe_params}"
assert sigma2_match, f"σ² mismatch: {full.residual_variance} vs {sm_model.scale}"

# ============================================================================
# Variance components, ICC and R²
# ============================================================================

print(f"\n{'=' * 80}")
print("Variance decomposition by random structure")
print("=" * 80)

for random, model in models.items():
    icc = rcreg.icc(model)
    r2 = rcreg.r_squared(model)
    print(f"\n{random}:")
    print(rcreg.variance_components(model).to_frame().to_string(index=False))
    if isinstance(icc, float):
        print(f"  ICC:            {icc:.4f}")
    elif isinstance(icc, rcreg.InterceptSlopeICC):
        print(f"  ICC (t = 0):    {icc.intercept:.4f}")
        print(f"  ICC (t = 4):    {icc.at(4.0):.4f}")
    else:
        print(f"  slope var:      {icc.slope_var:.4f}")
        print(f"  residual var:   {icc.residual_var:.4f}")
    print(f"  R² marginal:    {r2.marginal:.4f}")
    print(f"  R² conditional: {r2.conditional:.4f}")

# ============================================================================
# Predictions
# ============================================================================

print(f"\n{'=' * 80}")
print("Population-level predictions (x1 = 0)")
print("=" * 80)

grid = pd.DataFrame({"time": np.arange(5.0), "x1": 0.0})
ci = rcreg.predict(full, grid, level="population", interval="confidence")
pi = rcreg.predict(full, grid, level="population", interval="prediction")
table = grid.assign(
    fit=ci["fit"], ci_lwr=ci["lwr"], ci_upr=ci["upr"], pi_lwr=pi["lwr"], pi_upr=pi["upr"]
)
print(table.round(3).to_string(index=False))

print("\nSubject-level predictions for subject 1:")
subject_rows = df[df["id"] == 1]
print(
    subject_rows.assign(pred=rcreg.predict(full, subject_rows)["fit"])
    .round(3)
    .to_string(index=False)
)

# ============================================================================
# Model comparison (ML fits)
# ============================================================================

ml_models = {
    random: rcreg.fit(
        "y ~ time + x1", df, id="id", time="time", random=random, reml=False
    )
    for random in models
}
comparison = rcreg.compare(**ml_models)
rcreg.print_comparison_table(comparison)
assert comparison.best.label == "intercept_slope"

# ============================================================================
# Diagnostics
# ============================================================================

print(f"\n{'=' * 80}")
print("Normality of residuals and random effects (Shapiro–Wilk)")
print("=" * 80)
print(rcreg.normality_tests(full).round(4).to_string())
