"""
Per-bar bundle of every signal the decision engine reads.
Recomputed from scratch on the causal window each bar; no state carries over.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from scalp_backtester.core.types import Bar
from scalp_backtester.indicators.moving_averages import ema
from scalp_backtester.indicators.momentum import MACD, Stochastic, macd, rsi, stochastic
from scalp_backtester.indicators.trend import adx
from scalp_backtester.indicators.volatility import atr
from scalp_backtester.patterns.candles import PatternResult, detect_pattern


@dataclass(frozen=True)
class IndicatorSnapshot:
    close: float
    emas: Tuple[float, ...]
    prev_emas: Tuple[float, ...]
    rsi: float
    prev_rsi: float
    atr: float
    volatility_pct: float
    adx: Optional[float]
    macd: MACD
    prev_macd: MACD
    stochastic: Stochastic
    prev_stochastic: Stochastic
    pattern: PatternResult

    @property
    def micro_uptrend(self) -> bool:
        """Fastest EMA rising bar over bar."""
        return self.emas[0] > self.prev_emas[0]

    @property
    def micro_downtrend(self) -> bool:
        return self.emas[0] < self.prev_emas[0]


def compute_snapshot(
    bars: Sequence[Bar],
    ema_periods: Sequence[int] = (5, 8, 13),
    rsi_period: int = 14,
    atr_period: int = 14,
    adx_period: int = 14,
    macd_periods: Tuple[int, int, int] = (12, 26, 9),
    stochastic_periods: Tuple[int, int, int] = (14, 1, 3),
) -> IndicatorSnapshot:
    """Indicators on bars (current) and bars[:-1] (previous) where a slope is needed."""
    previous = bars[:-1]
    close = bars[-1].close
    current_atr = atr(bars, atr_period)
    return IndicatorSnapshot(
        close=close,
        emas=tuple(ema(bars, p) for p in ema_periods),
        prev_emas=tuple(ema(previous, p) for p in ema_periods),
        rsi=rsi(bars, rsi_period),
        prev_rsi=rsi(previous, rsi_period),
        atr=current_atr,
        volatility_pct=current_atr / close * 100 if close > 0 else 0.0,
        adx=adx(bars, adx_period),
        macd=macd(bars, *macd_periods),
        prev_macd=macd(previous, *macd_periods),
        stochastic=stochastic(bars, *stochastic_periods),
        prev_stochastic=stochastic(previous, *stochastic_periods),
        pattern=detect_pattern(bars),
    )
