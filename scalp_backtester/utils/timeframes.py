"""Interval strings ('1m', '4h', '1d') to minutes."""

import re

_UNITS = {"m": 1, "h": 60, "d": 60 * 24}
_PATTERN = re.compile(r"^(\d+)([mhd])$")


def timeframe_minutes(interval: str) -> int:
    """'15m' -> 15, '4h' -> 240, '1d' -> 1440. Raises ValueError otherwise."""
    match = _PATTERN.match(interval.strip().lower())
    if not match or int(match.group(1)) == 0:
        raise ValueError(f"Unsupported interval: {interval}")
    return int(match.group(1)) * _UNITS[match.group(2)]
