# miary/utils/numeric.py
from __future__ import annotations

import math
from typing import Iterable, Optional, Union

Number = Union[int, float]


def coerce_float(value) -> Optional[float]:
    """
    Best-effort float conversion that returns None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def safe_divide(numerator, denominator) -> Optional[float]:
    """
    Divide while guarding against None/zero/invalid values.
    """
    if numerator is None or denominator in (None, 0):
        return None
    try:
        return float(numerator) / float(denominator)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def round_half_up(value: Number, digits: int = 0) -> float:
    """
    Round with halves going up (towards +inf), so 0.125 -> 0.13 and -2.5 -> -2.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def mean(values: Iterable[Number], digits: int | None = None) -> Optional[float]:
    items = list(values)
    if not items:
        return None
    avg = sum(items) / len(items)
    return round_half_up(avg, digits) if digits is not None else avg


def clamp(value: Number, low: Number, high: Number) -> Number:
    return max(low, min(high, value))


__all__ = ["coerce_float", "safe_divide", "round_half_up", "mean", "clamp"]
