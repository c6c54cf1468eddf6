"""Deterministic number and time formatting for readouts and axis ticks."""

from __future__ import annotations

import math
from datetime import datetime, timezone

# Magnitudes below this (and non-zero) switch to exponential notation
EXP_THRESHOLD = 1e-3

INSPECT_PRECISION = 6   # pinned values: 6 decimals / 4 exponent digits
TICK_PRECISION = 4      # axis ticks:    4 decimals / 1 exponent digit

_EXP_DIGITS = {
    INSPECT_PRECISION: 4,
    TICK_PRECISION: 1,
}


def _exp_digits(precision: int) -> int:
    return _EXP_DIGITS.get(precision, max(precision - 2, 0))


def _exponential(v: float, digits: int) -> str:
    """``9.0000e-4`` style: no ``+`` sign and no zero padding on the exponent."""
    mantissa, exp = f"{v:.{digits}e}".split("e")
    return f"{mantissa}e{int(exp)}"


def format_value(v: float | None, precision: int = INSPECT_PRECISION) -> str:
    if v is None:
        return "-"
    v = float(v)
    if math.isnan(v):
        return "-"
    if v == 0:
        return f"{0.0:.{precision}f}"
    if abs(v) >= EXP_THRESHOLD:
        return f"{v:.{precision}f}"
    return _exponential(v, _exp_digits(precision))


def format_inspect(v: float | None) -> str:
    return format_value(v, INSPECT_PRECISION)


def format_tick(v: float | None) -> str:
    return format_value(v, TICK_PRECISION)


def format_timestamp(t: float, timespec: str = "milliseconds") -> str:
    """ISO-8601 UTC text for epoch seconds; falls back to the raw number."""
    try:
        dt = datetime.fromtimestamp(t, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return f"{t:g}"
    return dt.isoformat(timespec=timespec).replace("+00:00", "Z")
