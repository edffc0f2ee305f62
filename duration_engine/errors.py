from __future__ import annotations


class InvalidParameter(ValueError):
    """Input rejected before any computation (bad frequency, non-finite values, ...)."""


class ComputationError(ArithmeticError):
    """A computation produced NaN/Infinity or divided by a zero price."""
