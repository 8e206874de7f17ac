"""
Volatility indicators: true range, ATR (Wilder), Bollinger Bands.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from scalp_backtester.core.types import Bar
from scalp_backtester.indicators.moving_averages import last_close, running_sum


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


def true_ranges(bars: Sequence[Bar]) -> np.ndarray:
    """TR for bars[1:]: max(high-low, |high-prev_close|, |low-prev_close|)."""
    if len(bars) < 2:
        return np.empty(0, dtype=np.float64)
    high = np.array([b.high for b in bars[1:]], dtype=np.float64)
    low = np.array([b.low for b in bars[1:]], dtype=np.float64)
    prev_close = np.array([b.close for b in bars[:-1]], dtype=np.float64)
    return np.maximum.reduce([high - low, np.abs(high - prev_close), np.abs(low - prev_close)])


def atr(bars: Sequence[Bar], period: int = 14) -> float:
    """Average True Range. Returns 0.0 with fewer than period + 1 bars."""
    if len(bars) < period + 1:
        return 0.0
    tr = true_ranges(bars).tolist()
    value = running_sum(tr[:period]) / period
    for current in tr[period:]:
        value = (value * (period - 1) + current) / period
    return value


def volatility_pct(bars: Sequence[Bar], period: int = 14) -> float:
    """ATR as a percentage of the latest close."""
    close = last_close(bars)
    if close <= 0:
        return 0.0
    return atr(bars, period) / close * 100


def bollinger_bands(bars: Sequence[Bar], period: int = 20, multiplier: float = 2.0) -> BollingerBands:
    """SMA +/- multiplier * population std dev. Short history collapses all bands to the latest close."""
    if len(bars) < period:
        close = last_close(bars)
        return BollingerBands(upper=close, middle=close, lower=close)
    closes = [b.close for b in bars[-period:]]
    mean = running_sum(closes) / period
    squared = 0.0
    for c in closes:
        diff = c - mean
        squared += diff * diff
    std = math.sqrt(squared / period)
    return BollingerBands(upper=mean + multiplier * std, middle=mean, lower=mean - multiplier * std)
