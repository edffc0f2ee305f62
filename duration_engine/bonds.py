from __future__ import annotations

import logging
import math
from dataclasses import dataclass, asdict, field, replace
from typing import Dict, Iterable, Tuple

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import ComputationError, InvalidParameter
from .utils import check_frequency, period_count, require_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BondParams:
    """
    Plain-vanilla fixed-coupon bond evaluated at a flat yield.

    Rates are decimals (0.05 = 5%). `years_to_maturity * frequency` must be
    within `period_tolerance` of a whole number of coupon periods.
    """
    face_value: float
    coupon_rate: float
    years_to_maturity: float
    ytm: float
    frequency: int = 2
    period_tolerance: float = field(default=DEFAULT_CONFIG.period_tolerance, repr=False)

    def __post_init__(self) -> None:
        freq = check_frequency(self.frequency)
        require_finite(
            face_value=self.face_value,
            coupon_rate=self.coupon_rate,
            years_to_maturity=self.years_to_maturity,
            ytm=self.ytm,
            period_tolerance=self.period_tolerance,
        )
        if self.face_value <= 0:
            raise InvalidParameter(f"face_value must be positive, got {self.face_value}")
        if self.years_to_maturity <= 0:
            raise InvalidParameter(f"years_to_maturity must be positive, got {self.years_to_maturity}")
        if self.coupon_rate < 0:
            raise InvalidParameter(f"coupon_rate must be >= 0, got {self.coupon_rate}")
        if self.period_tolerance < 0:
            raise InvalidParameter(f"period_tolerance must be >= 0, got {self.period_tolerance}")

        object.__setattr__(self, "frequency", freq)
        period_count(self.years_to_maturity, self.frequency, self.period_tolerance)

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        face_value: float,
        coupon_rate: float,
        years_to_maturity: float,
        ytm: float,
        frequency: int = 2,
    ) -> "BondParams":
        """Bond whose period alignment uses `config.period_tolerance`."""
        return cls(face_value, coupon_rate, years_to_maturity, ytm, frequency, config.period_tolerance)

    @property
    def periodic_coupon(self) -> float:
        return self.face_value * self.coupon_rate / self.frequency

    @property
    def periodic_ytm(self) -> float:
        return self.ytm / self.frequency

    @property
    def total_periods(self) -> int:
        return period_count(self.years_to_maturity, self.frequency, self.period_tolerance)

    def with_ytm(self, ytm: float) -> "BondParams":
        return replace(self, ytm=ytm)


@dataclass(frozen=True)
class CashFlow:
    period: int
    time: float
    payment: float
    present_value: float
    weighted_pv: float


@dataclass(frozen=True)
class DurationResults:
    price: float
    macaulay_duration: float
    modified_duration: float
    dollar_duration: float
    convexity: float
    cash_flows: Tuple[CashFlow, ...]

    def to_frame(self) -> pd.DataFrame:
        """Cash-flow schedule as a DataFrame, one row per period."""
        return pd.DataFrame(
            [asdict(cf) for cf in self.cash_flows],
            columns=["period", "time", "payment", "present_value", "weighted_pv"],
        )

    def summary(self) -> Dict[str, float]:
        return {
            "price": self.price,
            "macaulay_duration": self.macaulay_duration,
            "modified_duration": self.modified_duration,
            "dollar_duration": self.dollar_duration,
            "convexity": self.convexity,
        }


def _discounted_cashflows(params: BondParams) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Returns (periods, payments, present_values) for t = 1..n.
    The final payment carries the face value.
    """
    n = params.total_periods
    base = 1.0 + params.periodic_ytm
    if base <= 0.0:
        logger.error("Periodic yield %.6g <= -1 makes discount factors undefined", params.periodic_ytm)
        raise ComputationError(f"Periodic yield {params.periodic_ytm} <= -1: discount factors undefined.")

    periods = np.arange(1, n + 1, dtype=float)
    payments = np.full(n, params.periodic_coupon, dtype=float)
    payments[-1] += params.face_value

    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        pvs = payments / base ** periods

    if not np.all(np.isfinite(pvs)):
        logger.error("Non-finite present values for %s", params)
        raise ComputationError("Discounting produced NaN/Infinity.")

    return periods, payments, pvs


def price_bond(params: BondParams) -> float:
    """
    Present value of all coupons plus the face value at the final period:
        P = sum C / (1 + y/m)^t + F / (1 + y/m)^n
    """
    _, _, pvs = _discounted_cashflows(params)
    price = float(np.sum(pvs))
    if not math.isfinite(price):
        raise ComputationError("Price is not finite.")
    return price


def compute_duration(params: BondParams) -> DurationResults:
    """
    Price, Macaulay/modified duration, dollar duration and convexity from a
    single cash-flow schedule.

        D_mac = sum(t * PV_t) / P
        D_mod = D_mac / (1 + y/m)
        $Dur  = D_mod * P / 100
        C     = sum(t * (t + 1/m) * PV_t) / (P * (1 + y/m)^2)
    """
    periods, payments, pvs = _discounted_cashflows(params)
    m = params.frequency
    r = params.periodic_ytm

    times = periods / m
    weighted = times * pvs

    price = float(np.sum(pvs))
    if price == 0.0 or not math.isfinite(price):
        logger.error("Degenerate price %r for %s", price, params)
        raise ComputationError(f"Cannot compute duration at price={price}.")

    if params.periodic_coupon == 0.0:
        # single terminal cash flow
        macaulay = float(times[-1])
    else:
        macaulay = float(np.sum(weighted)) / price
    modified = macaulay / (1.0 + r)
    dollar_duration = modified * price / 100.0
    convexity = float(np.sum(times * (times + 1.0 / m) * pvs)) / (price * (1.0 + r) ** 2)

    metrics = (macaulay, modified, dollar_duration, convexity)
    if not all(math.isfinite(x) for x in metrics):
        logger.error("Non-finite duration metrics %s for %s", metrics, params)
        raise ComputationError("Duration metrics are not finite.")

    cash_flows = tuple(
        CashFlow(
            period=int(t),
            time=float(tau),
            payment=float(cf),
            present_value=float(pv),
            weighted_pv=float(w),
        )
        for t, tau, cf, pv, w in zip(periods, times, payments, pvs, weighted)
    )

    logger.debug(
        "Duration computed: price=%.6f mac=%.6f mod=%.6f conv=%.6f (%d periods)",
        price, macaulay, modified, convexity, len(cash_flows),
    )
    return DurationResults(
        price=price,
        macaulay_duration=macaulay,
        modified_duration=modified,
        dollar_duration=dollar_duration,
        convexity=convexity,
        cash_flows=cash_flows,
    )


def solve_ytm(
    params: BondParams,
    market_price: float,
    lower: float = -0.5,
    upper: float = 1.0,
) -> float:
    """
    Flat yield that reprices the bond to `market_price`. The `ytm` carried by
    `params` is ignored. Root is bracketed in [lower, upper] (annual decimals).
    """
    require_finite(market_price=market_price, lower=lower, upper=upper)
    if market_price <= 0:
        raise InvalidParameter(f"market_price must be positive, got {market_price}")

    def residual(y: float) -> float:
        return price_bond(params.with_ytm(y)) - market_price

    fa, fb = residual(lower), residual(upper)
    if fa * fb > 0:
        raise InvalidParameter(f"Root not bracketed for market_price={market_price} in [{lower}, {upper}].")

    y = brentq(residual, lower, upper, maxiter=300, xtol=1e-14)
    logger.debug("Solved ytm=%.10f for market_price=%.6f", y, market_price)
    return float(y)


def zero_coupon_duration(years_to_maturity: float, ytm: float = 0.0, frequency: int = 1) -> Dict[str, float]:
    """Macaulay duration of a zero equals its maturity; modified discounts it by one period."""
    frequency = check_frequency(frequency)
    require_finite(years_to_maturity=years_to_maturity, ytm=ytm)
    if years_to_maturity <= 0:
        raise InvalidParameter(f"years_to_maturity must be positive, got {years_to_maturity}")
    base = 1.0 + ytm / frequency
    if base <= 0.0:
        raise ComputationError(f"Periodic yield {ytm / frequency} <= -1.")
    return {"macaulay": float(years_to_maturity), "modified": years_to_maturity / base}


def compare_bonds(bonds: Iterable[BondParams]) -> pd.DataFrame:
    """One row of inputs and duration metrics per bond, in input order."""
    rows = []
    for p in bonds:
        res = compute_duration(p)
        rows.append(
            {
                "face_value": p.face_value,
                "coupon_rate": p.coupon_rate,
                "years_to_maturity": p.years_to_maturity,
                "ytm": p.ytm,
                "frequency": p.frequency,
                **res.summary(),
            }
        )

    return pd.DataFrame(
        rows,
        columns=[
            "face_value", "coupon_rate", "years_to_maturity", "ytm", "frequency",
            "price", "macaulay_duration", "modified_duration", "dollar_duration", "convexity",
        ],
    )
