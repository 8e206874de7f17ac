"""
Support / resistance: local extremes against `lookback` bars on both sides.
Bars closer than `lookback` to either end of the sequence are never flagged.
"""

from __future__ import annotations
from typing import List, Sequence

import numpy as np

from scalp_backtester.core.types import Bar


def _in_bounds(bars: Sequence[Bar], i: int, lookback: int) -> bool:
    return lookback <= i < len(bars) - lookback


def is_support(bars: Sequence[Bar], i: int, lookback: int = 3) -> bool:
    """Low at i strictly below every low within lookback bars before and after."""
    if not _in_bounds(bars, i, lookback):
        return False
    lows = np.array([b.low for b in bars[i - lookback:i + lookback + 1]], dtype=np.float64)
    neighbours = np.delete(lows, lookback)
    return bool(np.all(lows[lookback] < neighbours))


def is_resistance(bars: Sequence[Bar], i: int, lookback: int = 3) -> bool:
    """High at i strictly above every high within lookback bars before and after."""
    if not _in_bounds(bars, i, lookback):
        return False
    highs = np.array([b.high for b in bars[i - lookback:i + lookback + 1]], dtype=np.float64)
    neighbours = np.delete(highs, lookback)
    return bool(np.all(highs[lookback] > neighbours))


def support_levels(bars: Sequence[Bar], lookback: int = 3) -> List[float]:
    """Lows of every support bar, oldest first."""
    return [bars[i].low for i in range(len(bars)) if is_support(bars, i, lookback)]


def resistance_levels(bars: Sequence[Bar], lookback: int = 3) -> List[float]:
    """Highs of every resistance bar, oldest first."""
    return [bars[i].high for i in range(len(bars)) if is_resistance(bars, i, lookback)]
