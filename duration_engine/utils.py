from __future__ import annotations

import math
import numbers
from typing import Iterable

from .config import DEFAULT_CONFIG
from .errors import InvalidParameter


def bps_to_decimal(bps: float) -> float:
    """Basis points to a decimal yield change (25 -> 0.0025)."""
    return bps / 10000.0


def require_finite(**values: float) -> None:
    """Raise InvalidParameter naming every argument that is NaN or infinite."""
    bad = [name for name, v in values.items() if v is None or not math.isfinite(float(v))]
    if bad:
        raise InvalidParameter(f"Non-finite input(s): {', '.join(bad)}")


def require_positive(**values: float) -> None:
    """Raise InvalidParameter naming every argument that is non-finite or <= 0."""
    require_finite(**values)
    bad = [name for name, v in values.items() if float(v) <= 0.0]
    if bad:
        raise InvalidParameter(f"Must be positive: {', '.join(bad)}")


def period_count(years: float, frequency: int, tol: float = DEFAULT_CONFIG.period_tolerance) -> int:
    """
    Whole number of coupon periods in `years` at `frequency` payments per year.

    Misaligned maturities (e.g. 1/12 year at semiannual) are rejected rather
    than silently truncated.
    """
    raw = years * frequency
    n = int(round(raw))
    if abs(raw - n) > tol:
        raise InvalidParameter(
            f"years_to_maturity={years} is not a whole number of periods at frequency={frequency} ({raw:.6g} periods)"
        )
    if n < 1:
        raise InvalidParameter(f"Bond must have at least one period (got {raw:.6g}).")
    return n


def is_period_aligned(years: float, frequency: int, tol: float = DEFAULT_CONFIG.period_tolerance) -> bool:
    raw = years * frequency
    return abs(raw - round(raw)) <= tol and round(raw) >= 1


def uniform_grid(start: float, stop: float, steps: int) -> Iterable[float]:
    """Lazily yield steps + 1 equally spaced points from start to stop."""
    step = (stop - start) / steps
    for i in range(steps + 1):
        yield start + i * step


def check_frequency(frequency) -> int:
    """Positive whole number of payments per year; 2.0 -> 2, bools rejected."""
    if isinstance(frequency, bool) or not isinstance(frequency, numbers.Real):
        raise InvalidParameter(f"frequency must be an integer, got {frequency!r}")
    require_finite(frequency=frequency)
    if float(frequency) != int(frequency):
        raise InvalidParameter(f"frequency must be an integer, got {frequency!r}")
    if frequency <= 0:
        raise InvalidParameter(f"frequency must be positive, got {frequency}")
    return int(frequency)
