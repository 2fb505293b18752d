"""Number formatting for the indicator panel."""
from __future__ import annotations

import math

_COMPACT_SUFFIXES = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))


def _trim(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_scientific(value: float, digits: int = 2) -> str:
    """``6.776e21`` -> ``"6.78E21"``."""

    if not math.isfinite(value):
        return str(value)
    if value == 0:
        return "0E0"
    mantissa, exponent = f"{value:.{digits}e}".split("e")
    return f"{_trim(mantissa)}E{int(exponent)}"


def format_decimal(value: float, digits: int = 1) -> str:
    """Grouped thousands with at most ``digits`` fraction digits."""

    if not math.isfinite(value):
        return str(value)
    text = _trim(f"{value:,.{digits}f}")
    return "0" if text in ("-0", "") else text


def format_compact(value: float, digits: int = 1) -> str:
    """``1619.5`` -> ``"1.6K"``."""

    if not math.isfinite(value):
        return str(value)
    magnitude = abs(value)
    for threshold, suffix in _COMPACT_SUFFIXES:
        if magnitude >= threshold:
            return f"{_trim(f'{value / threshold:.{digits}f}')}{suffix}"
    return format_decimal(value, digits)


__all__ = ["format_compact", "format_decimal", "format_scientific"]
