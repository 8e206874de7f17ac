"""
Simple and exponential moving averages over the trailing window of closes.
Short history falls back to the latest close so comparisons stay defined during warm-up.
"""

from __future__ import annotations
from typing import Iterable, Sequence

from scalp_backtester.core.types import Bar


def running_sum(values: Iterable[float]) -> float:
    """Left-to-right float sum. Unlike sum() on 3.12+, no compensation is applied."""
    total = 0.0
    for v in values:
        total += v
    return total


def last_close(bars: Sequence[Bar]) -> float:
    """Latest close, or 0.0 for an empty sequence."""
    return float(bars[-1].close) if bars else 0.0


def sma(bars: Sequence[Bar], period: int = 20) -> float:
    if len(bars) < period:
        return last_close(bars)
    return running_sum(b.close for b in bars[-period:]) / period


def ema(bars: Sequence[Bar], period: int = 20) -> float:
    """
    EMA seeded with the SMA of the last `period` closes, then smoothed over
    the same window (excluding its first close). Only the trailing window is used.
    """
    if len(bars) < period:
        return last_close(bars)
    window = bars[-period:]
    value = running_sum(b.close for b in window) / period
    k = 2 / (period + 1)
    for b in window[1:]:
        value = (b.close - value) * k + value
    return value
