from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import pandas as pd

from .bonds import BondParams, compute_duration, price_bond
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import InvalidParameter
from .utils import is_period_aligned, require_finite, uniform_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurvePoint:
    yield_rate: float               # decimal
    price: float
    duration_approx_price: float


class PriceYieldCurve:
    """
    Price-yield curve around a bond's ytm on a uniform yield grid.

    Points are computed lazily on iteration; iterating again recomputes the
    same sequence. The duration tangent is anchored at the original ytm:
        P_approx(y) = P * (1 - D_mod * (y - ytm))
    """

    def __init__(self, params: BondParams, yield_range: float, steps: int, min_yield: float):
        require_finite(yield_range=yield_range, min_yield=min_yield)
        if isinstance(steps, bool) or int(steps) != steps or steps < 1:
            raise InvalidParameter(f"steps must be a positive integer, got {steps!r}")
        if yield_range <= 0:
            raise InvalidParameter(f"yield_range must be positive, got {yield_range}")

        self.params = params
        self.steps = int(steps)
        self.min_yield = max(min_yield, params.ytm - yield_range)
        self.max_yield = params.ytm + yield_range
        if self.max_yield <= self.min_yield:
            raise InvalidParameter(
                f"Empty yield grid: [{self.min_yield}, {self.max_yield}] for ytm={params.ytm}"
            )

        base = compute_duration(params)
        self.base_price = base.price
        self.modified_duration = base.modified_duration

    def __len__(self) -> int:
        return self.steps + 1

    def __iter__(self) -> Iterator[CurvePoint]:
        for y in uniform_grid(self.min_yield, self.max_yield, self.steps):
            yield CurvePoint(
                yield_rate=y,
                price=price_bond(self.params.with_ytm(y)),
                duration_approx_price=self.base_price * (1.0 - self.modified_duration * (y - self.params.ytm)),
            )

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(
            [(p.yield_rate, p.price, p.duration_approx_price) for p in self],
            columns=["yield_rate", "price", "duration_approx_price"],
        )
        df["yield_pct"] = 100.0 * df["yield_rate"]
        df["convexity_gap"] = df["price"] - df["duration_approx_price"]
        return df


def generate_curve(
    params: BondParams,
    yield_range: Optional[float] = None,
    steps: Optional[int] = None,
    min_yield: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PriceYieldCurve:
    """
    steps + 1 points over [max(min_yield, ytm - yield_range), ytm + yield_range].
    Unset arguments come from `config`.
    """
    if yield_range is None:
        yield_range = config.curve_yield_range
    if steps is None:
        steps = config.curve_steps
    if min_yield is None:
        min_yield = config.curve_min_yield
    return PriceYieldCurve(params, yield_range, steps, min_yield)


# ---- Market curve points (inputs only) ----

@dataclass(frozen=True)
class YieldCurvePoint:
    maturity: str       # label, e.g. "10Y"
    years: float
    rate: float         # percent, as quoted


def treasury_bond_params(
    years: float,
    coupon_pct: float,
    yield_pct: float,
    frequency: int = 2,
    face_value: float = 1000.0,
    config: EngineConfig = DEFAULT_CONFIG,
) -> BondParams:
    """Quoted percent coupon/yield at a tenor -> BondParams (semiannual by default)."""
    return BondParams(
        face_value=face_value,
        coupon_rate=coupon_pct / 100.0,
        years_to_maturity=years,
        ytm=yield_pct / 100.0,
        frequency=frequency,
        period_tolerance=config.period_tolerance,
    )


def _frequency_for_tenor(years: float, frequency: int, tol: float) -> int:
    if is_period_aligned(years, frequency, tol):
        return frequency

    # bills shorter than one coupon period: a single payment at maturity
    if years * frequency < 1.0:
        single = int(round(1.0 / years))
        if is_period_aligned(years, single, tol):
            return single

    raise InvalidParameter(f"Tenor {years}y does not align with frequency={frequency}.")


def curve_point_risk(
    points: Iterable[YieldCurvePoint],
    frequency: int = 2,
    face_value: float = 1000.0,
    config: EngineConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Duration metrics of a par bond at each curve tenor (coupon = quoted rate).
    """
    rows = []
    for pt in points:
        freq = _frequency_for_tenor(pt.years, frequency, config.period_tolerance)
        if freq != frequency:
            logger.debug("Tenor %s priced as single-period instrument (frequency=%d)", pt.maturity, freq)

        params = treasury_bond_params(pt.years, pt.rate, pt.rate, frequency=freq, face_value=face_value, config=config)
        res = compute_duration(params)
        rows.append(
            {
                "maturity": pt.maturity,
                "years": pt.years,
                "rate": pt.rate,
                "frequency": freq,
                **res.summary(),
            }
        )

    return pd.DataFrame(
        rows,
        columns=[
            "maturity", "years", "rate", "frequency",
            "price", "macaulay_duration", "modified_duration", "dollar_duration", "convexity",
        ],
    )

