"""
Bond Duration Engine

Closed-form risk metrics for plain-vanilla fixed-coupon bonds at a flat yield:
- bonds: bond parameters, pricing, cash-flow schedule, duration/convexity, ytm solve
- risk: price-change approximations, numeric durations, duration gap, immunization
- curves: price-yield curve generation + market curve points as inputs
- portfolio: weighted portfolio duration + per-holding tables
- scenarios: parallel yield-shock grids
- config / errors / utils: engine defaults, error taxonomy, numeric helpers

Callers import from the submodules.
"""
