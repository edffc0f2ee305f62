from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .errors import InvalidParameter


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide defaults.

    Operations take a `config=` argument (DEFAULT_CONFIG when omitted) and
    read any unset argument from it. BondParams.from_config applies
    `period_tolerance` to period alignment.
    """
    key_rate_bump: float = 0.0001          # 1bp
    effective_bump: float = 0.01           # 100bp
    convexity_bump: float = 0.0001
    curve_yield_range: float = 0.04        # +/- 4% around ytm
    curve_steps: int = 50
    curve_min_yield: float = 0.001
    immunization_tolerance: float = 0.1    # years
    period_tolerance: float = 1e-9
    scenario_shocks_bps: Tuple[float, ...] = (-300.0, -200.0, -100.0, -50.0, -25.0, 0.0, 25.0, 50.0, 100.0, 200.0, 300.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidParameter(f"Unknown engine config keys: {unknown}")

        values = dict(data)
        if "scenario_shocks_bps" in values:
            values["scenario_shocks_bps"] = tuple(float(x) for x in values["scenario_shocks_bps"])
        if "curve_steps" in values:
            values["curve_steps"] = int(values["curve_steps"])

        return replace(cls(), **values)

    @classmethod
    def from_yaml(cls, cfg_path: Path) -> "EngineConfig":
        """
        Load overrides from a YAML file. Settings may sit at the top level or
        under an `engine:` section; missing keys keep their defaults.
        """
        text = Path(cfg_path).read_text(encoding="utf-8")
        data: Dict[str, Any] = yaml.safe_load(text) or {}
        if "engine" in data:
            data = data.get("engine") or {}
        return cls.from_dict(data)


DEFAULT_CONFIG = EngineConfig()
