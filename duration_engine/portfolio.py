from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .bonds import BondParams, compute_duration
from .utils import require_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioHolding:
    params: BondParams
    weight: float


HoldingLike = Union[PortfolioHolding, Tuple[BondParams, float]]


def _as_holdings(holdings: Iterable[HoldingLike]) -> List[PortfolioHolding]:
    out: List[PortfolioHolding] = []
    for h in holdings:
        if not isinstance(h, PortfolioHolding):
            params, weight = h
            h = PortfolioHolding(params=params, weight=weight)
        require_finite(weight=h.weight)
        out.append(h)
    return out


def portfolio_duration(holdings: Iterable[HoldingLike]) -> float:
    """
    Weighted sum of modified durations. Weights are used as given; they are
    not required to sum to 1.
    """
    total = 0.0
    for h in _as_holdings(holdings):
        total += h.weight * compute_duration(h.params).modified_duration
    return total


def portfolio_table(holdings: Iterable[HoldingLike]) -> pd.DataFrame:
    """Per-holding metrics and each holding's contribution to portfolio duration."""
    rows = []
    for i, h in enumerate(_as_holdings(holdings)):
        res = compute_duration(h.params)
        rows.append(
            {
                "holding": i,
                "weight": h.weight,
                "coupon_rate": h.params.coupon_rate,
                "years_to_maturity": h.params.years_to_maturity,
                "ytm": h.params.ytm,
                "price": res.price,
                "modified_duration": res.modified_duration,
                "convexity": res.convexity,
                "duration_contribution": h.weight * res.modified_duration,
            }
        )

    df = pd.DataFrame(
        rows,
        columns=[
            "holding", "weight", "coupon_rate", "years_to_maturity", "ytm",
            "price", "modified_duration", "convexity", "duration_contribution",
        ],
    )
    logger.debug("Portfolio table built for %d holdings", len(df))
    return df


def holdings_from_frame(portfolio: pd.DataFrame) -> List[PortfolioHolding]:
    """
    Rows with columns face_value, coupon_rate, years_to_maturity, ytm,
    frequency, weight -> holdings.
    """
    holdings: List[PortfolioHolding] = []
    for _, r in portfolio.iterrows():
        params = BondParams(
            face_value=float(r["face_value"]),
            coupon_rate=float(r["coupon_rate"]),
            years_to_maturity=float(r["years_to_maturity"]),
            ytm=float(r["ytm"]),
            frequency=int(r.get("frequency", 2)),
        )
        holdings.append(PortfolioHolding(params=params, weight=float(r["weight"])))
    return holdings


def make_sample_portfolio(
    n: int = 10,
    seed: int = 7,
    maturities: Sequence[int] = tuple(range(1, 31)),
) -> pd.DataFrame:
    """
    Synthetic fixed-rate holdings for demos/tests.

    - Maturities: whole years drawn from `maturities`
    - Coupons: uniform in [2%, 8%], yields = coupon +/- 100bp
    - Semiannual, face 1000
    - Weights: random, normalized to sum to 1
    """
    rng = np.random.default_rng(seed)

    years = rng.choice(np.asarray(maturities, dtype=float), size=n)
    coupons = rng.uniform(0.02, 0.08, size=n)
    ytms = np.clip(coupons + rng.uniform(-0.01, 0.01, size=n), 0.0, None)
    w = rng.uniform(0.5, 1.5, size=n)

    return pd.DataFrame({
        "face_value": 1000.0,
        "coupon_rate": coupons,
        "years_to_maturity": years,
        "ytm": ytms,
        "frequency": 2,
        "weight": w / w.sum(),
    })
