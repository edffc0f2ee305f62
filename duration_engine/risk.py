from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .bonds import BondParams, compute_duration, price_bond
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import ComputationError, InvalidParameter
from .utils import bps_to_decimal, require_finite, require_positive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceChangeResult:
    new_price: float
    dollar_change: float
    percent_change: float
    duration_approx: float      # P * (-D_mod * dy)
    with_convexity: float       # P * (-D_mod * dy + 0.5 * C * dy^2)


@dataclass(frozen=True)
class ImmunizationResult:
    is_immunized: bool
    gap: float                  # current - target, years


def price_change(params: BondParams, yield_change_bps: float) -> PriceChangeResult:
    """
    Exact repricing at ytm + dy next to the first- and second-order Taylor
    estimates of the price change, dy = bps / 10000.
    """
    require_finite(yield_change_bps=yield_change_bps)
    res = compute_duration(params)
    dy = bps_to_decimal(yield_change_bps)

    new_price = price_bond(params.with_ytm(params.ytm + dy))
    dollar_change = new_price - res.price
    percent_change = dollar_change / res.price * 100.0

    duration_approx = res.price * (-res.modified_duration * dy)
    with_convexity = res.price * (-res.modified_duration * dy + 0.5 * res.convexity * dy ** 2)

    return PriceChangeResult(
        new_price=new_price,
        dollar_change=dollar_change,
        percent_change=percent_change,
        duration_approx=duration_approx,
        with_convexity=with_convexity,
    )


def _bumped_prices(params: BondParams, bump: float):
    require_positive(bump_size=bump)
    base = price_bond(params)
    if base == 0.0 or not math.isfinite(base):
        logger.error("Degenerate base price %r for %s", base, params)
        raise ComputationError(f"Cannot bump-and-reprice at price={base}.")
    up = price_bond(params.with_ytm(params.ytm + bump))
    down = price_bond(params.with_ytm(params.ytm - bump))
    return base, up, down


def _central_difference_duration(params: BondParams, bump: float) -> float:
    base, up, down = _bumped_prices(params, bump)
    return (down - up) / (2.0 * bump * base)


def key_rate_duration(
    params: BondParams,
    bump_size: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """
    Central-difference duration for a small bump (config.key_rate_bump, 1bp).

    Under a flat yield the key-rate shock is a parallel shift, so this
    converges to the analytic modified duration as the bump shrinks.
    """
    if bump_size is None:
        bump_size = config.key_rate_bump
    return _central_difference_duration(params, bump_size)


def effective_duration(
    params: BondParams,
    bump_size: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """Central-difference duration for a large symmetric shock (config.effective_bump, 100bp)."""
    if bump_size is None:
        bump_size = config.effective_bump
    return _central_difference_duration(params, bump_size)


def effective_convexity(
    params: BondParams,
    bump_size: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """(P_up + P_down - 2P) / (P * h^2)"""
    if bump_size is None:
        bump_size = config.convexity_bump
    base, up, down = _bumped_prices(params, bump_size)
    return (up + down - 2.0 * base) / (base * bump_size ** 2)


def duration_gap(
    assets_duration: float,
    liabilities_duration: float,
    assets_value: float,
    liabilities_value: float,
) -> float:
    """
    ALM duration gap: D_A - (L / A) * D_L
    """
    require_finite(
        assets_duration=assets_duration,
        liabilities_duration=liabilities_duration,
        assets_value=assets_value,
        liabilities_value=liabilities_value,
    )
    if assets_value == 0:
        raise ComputationError("assets_value is zero: leverage ratio undefined.")

    leverage = liabilities_value / assets_value
    return assets_duration - leverage * liabilities_duration


def immunization_check(
    target_horizon: float,
    current_duration: float,
    tolerance: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> ImmunizationResult:
    if tolerance is None:
        tolerance = config.immunization_tolerance
    require_finite(target_horizon=target_horizon, current_duration=current_duration, tolerance=tolerance)
    if tolerance < 0:
        raise InvalidParameter(f"tolerance must be >= 0, got {tolerance}")

    gap = current_duration - target_horizon
    immunized = abs(gap) < tolerance
    logger.debug("Immunization gap=%.4f years (tolerance %.4f) -> %s", gap, tolerance, immunized)
    return ImmunizationResult(is_immunized=immunized, gap=gap)
