"""
Trend strength: Average Directional Index.

    0-25   weak or no trend
    25-50  strong trend
    50-75  very strong trend
    75-100 extremely strong trend
"""

from __future__ import annotations
from typing import Optional, Sequence

import numpy as np

from scalp_backtester.core.types import Bar
from scalp_backtester.indicators.moving_averages import running_sum
from scalp_backtester.indicators.volatility import true_ranges


def directional_movement(bars: Sequence[Bar]) -> tuple[np.ndarray, np.ndarray]:
    """(+DM, -DM) for bars[1:]. Only the larger move counts, and only when positive."""
    high = np.array([b.high for b in bars], dtype=np.float64)
    low = np.array([b.low for b in bars], dtype=np.float64)
    up = high[1:] - high[:-1]
    down = low[:-1] - low[1:]
    plus_dm = np.where((up > down) & (up > 0), up, 0.0)
    minus_dm = np.where((down > up) & (down > 0), down, 0.0)
    return plus_dm, minus_dm


def adx(bars: Sequence[Bar], period: int = 14) -> Optional[float]:
    """
    Trend strength from Wilder-smoothed +DM/-DM/TR, rounded to 2 decimals.

    Returns None (no opinion, not zero) with fewer than period + 2 bars, or when
    the window had no range or no directional movement to measure.
    """
    if len(bars) < period + 2:
        return None
    tr = true_ranges(bars).tolist()
    plus_dm, minus_dm = (a.tolist() for a in directional_movement(bars))

    smoothed_tr = running_sum(tr[:period])
    smoothed_plus = running_sum(plus_dm[:period])
    smoothed_minus = running_sum(minus_dm[:period])
    for i in range(period, len(tr)):
        smoothed_tr = smoothed_tr - (smoothed_tr / period) + tr[i]
        smoothed_plus = smoothed_plus - (smoothed_plus / period) + plus_dm[i]
        smoothed_minus = smoothed_minus - (smoothed_minus / period) + minus_dm[i]

    if smoothed_tr == 0:
        return None
    plus_di = smoothed_plus / smoothed_tr * 100
    minus_di = smoothed_minus / smoothed_tr * 100
    if plus_di + minus_di == 0:
        return None
    dx = abs(plus_di - minus_di) / (plus_di + minus_di) * 100
    return round(dx, 2)
