"""
Momentum oscillators: RSI (Wilder), MACD, Stochastic.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from scalp_backtester.core.types import Bar
from scalp_backtester.indicators.moving_averages import ema, running_sum


@dataclass(frozen=True)
class MACD:
    line: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class Stochastic:
    k: float
    d: float


NEUTRAL_RSI = 50.0
NEUTRAL_STOCHASTIC = Stochastic(k=50.0, d=50.0)


def rsi(bars: Sequence[Bar], period: int = 14) -> float:
    """
    Wilder RSI over the whole history. Neutral 50 with fewer than period + 1 bars
    or when price never moved; 100 when there were gains but no losses.
    """
    if len(bars) < period + 1:
        return NEUTRAL_RSI
    changes = np.diff(np.array([b.close for b in bars], dtype=np.float64)).tolist()

    gains = 0.0
    losses = 0.0
    for change in changes[:period]:
        if change >= 0:
            gains += change
        else:
            losses -= change
    avg_gain = gains / period
    avg_loss = losses / period

    for change in changes[period:]:
        gain = change if change >= 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return NEUTRAL_RSI if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(bars: Sequence[Bar], fast_period: int = 12, slow_period: int = 26, signal_period: int = 9) -> MACD:
    """
    MACD line = EMA(fast) - EMA(slow).

    The signal line is the EMA of a synthetic series that repeats the current
    MACD value over the signal window, not a running EMA of past MACD values.
    Strategy thresholds were tuned against this approximation; keep it.
    """
    line = ema(bars, fast_period) - ema(bars, slow_period)
    window = bars[-signal_period:]
    synthetic = [_SyntheticClose(line) for _ in window]
    signal = ema(synthetic, signal_period) if synthetic else line
    return MACD(line=line, signal=signal, histogram=line - signal)


class _SyntheticClose:
    """Close-only stand-in so the MACD signal can reuse ema()."""

    __slots__ = ("close",)

    def __init__(self, close: float):
        self.close = close


def _smooth(values: List[float]) -> List[float]:
    """One pass of a 3-value simple average."""
    return [(values[i] + values[i - 1] + values[i - 2]) / 3 for i in range(2, len(values))]


def stochastic(bars: Sequence[Bar], period: int = 14, smooth_k: int = 1, smooth_d: int = 3) -> Stochastic:
    """
    Raw %K over `period`, smoothed by `smooth_k` passes of a 3-bar average;
    %D is the mean of the last `smooth_d` smoothed %K values.
    Neutral {50, 50} until at least one smoothed %K exists.
    A flat window (highest high == lowest low) reads as raw %K 50.
    """
    if len(bars) < period + 2 * smooth_k:
        return NEUTRAL_STOCHASTIC
    highs = np.array([b.high for b in bars], dtype=np.float64)
    lows = np.array([b.low for b in bars], dtype=np.float64)
    closes = np.array([b.close for b in bars[period - 1:]], dtype=np.float64)
    highest = sliding_window_view(highs, period).max(axis=1)
    lowest = sliding_window_view(lows, period).min(axis=1)

    spread = highest - lowest
    raw_k = [
        (c - lo) / s * 100 if s != 0 else 50.0
        for c, lo, s in zip(closes.tolist(), lowest.tolist(), spread.tolist())
    ]

    k_values = raw_k
    for _ in range(smooth_k):
        k_values = _smooth(k_values)

    if len(k_values) >= smooth_d:
        d = running_sum(k_values[-smooth_d:]) / smooth_d
    else:
        d = k_values[-1]
    return Stochastic(k=k_values[-1], d=d)
