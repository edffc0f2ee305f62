from __future__ import annotations

from typing import Dict, Iterable, Optional

import pandas as pd

from .bonds import BondParams
from .config import DEFAULT_CONFIG, EngineConfig
from .risk import price_change
from .utils import require_positive


def run_yield_scenarios(
    params: BondParams,
    shocks_bps: Optional[Iterable[float]] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Parallel yield shocks: exact repricing vs. duration and duration+convexity
    estimates, one row per shock, sorted by shock. Defaults to
    `config.scenario_shocks_bps`.
    """
    if shocks_bps is None:
        shocks_bps = config.scenario_shocks_bps
    rows = []
    for bp in shocks_bps:
        pc = price_change(params, bp)
        rows.append(
            {
                "shock_bp": float(bp),
                "new_price": pc.new_price,
                "dollar_change": pc.dollar_change,
                "percent_change": pc.percent_change,
                "duration_approx": pc.duration_approx,
                "with_convexity": pc.with_convexity,
            }
        )

    out = pd.DataFrame(
        rows,
        columns=["shock_bp", "new_price", "dollar_change", "percent_change", "duration_approx", "with_convexity"],
    )
    out["duration_error"] = out["dollar_change"] - out["duration_approx"]
    out["convexity_error"] = out["dollar_change"] - out["with_convexity"]
    return out.sort_values("shock_bp").reset_index(drop=True)


def convexity_asymmetry(params: BondParams, shock_bps: float) -> Dict[str, float]:
    """
    Gain from a -shock vs. loss from a +shock of the same size. Positive
    convexity means gain_down > loss_up.
    """
    require_positive(shock_bps=shock_bps)
    down = price_change(params, -shock_bps)
    up = price_change(params, shock_bps)

    gain_down = down.dollar_change
    loss_up = -up.dollar_change
    return {
        "shock_bp": float(shock_bps),
        "gain_down": gain_down,
        "loss_up": loss_up,
        "asymmetry": gain_down - loss_up,
    }
