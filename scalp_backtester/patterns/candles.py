"""
Candlestick patterns over the last one to three bars.

Thresholds are ratios of body, wick and range; the strategy is sensitive to them.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from scalp_backtester.core.types import Bar


class PatternDirection(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class PatternResult:
    pattern: str
    strength: float
    direction: PatternDirection = PatternDirection.NEUTRAL


UNKNOWN_PATTERN = PatternResult(pattern="unknown", strength=0)


# Single candle

def is_doji(bar: Bar, tolerance: float = 0.05) -> bool:
    """Body within `tolerance` percent of the range."""
    return bar.body <= bar.range * (tolerance / 100)


def is_hammer(bar: Bar) -> bool:
    return bar.lower_wick >= bar.body * 2 and bar.upper_wick <= bar.body * 0.5


def is_shooting_star(bar: Bar) -> bool:
    return bar.upper_wick >= bar.body * 2 and bar.lower_wick <= bar.body * 0.5


# Two candles (current, previous)

def is_bullish_engulfing(current: Bar, previous: Bar) -> bool:
    engulfs = current.open < previous.close and current.close > previous.open
    return previous.is_bearish and current.is_bullish and engulfs


def is_bearish_engulfing(current: Bar, previous: Bar) -> bool:
    engulfs = current.open > previous.close and current.close < previous.open
    return previous.is_bullish and current.is_bearish and engulfs


def is_bullish_harami(current: Bar, previous: Bar) -> bool:
    inside = current.open > previous.close and current.close < previous.open
    return previous.is_bearish and current.is_bullish and inside


def is_bearish_harami(current: Bar, previous: Bar) -> bool:
    inside = current.open < previous.close and current.close > previous.open
    return previous.is_bullish and current.is_bearish and inside


# Three candles (oldest first)

def _large_body(bar: Bar) -> bool:
    return bar.body > bar.range * 0.6


def _small_body(bar: Bar) -> bool:
    return bar.body < bar.range * 0.3


def is_morning_star(c1: Bar, c2: Bar, c3: Bar) -> bool:
    gap_down = max(c2.open, c2.close) < c1.close
    closes_into_first = c3.close > (c1.open + c1.close) / 2
    return (
        c1.is_bearish and _large_body(c1)
        and _small_body(c2) and gap_down
        and c3.is_bullish and _large_body(c3)
        and closes_into_first
    )


def is_evening_star(c1: Bar, c2: Bar, c3: Bar) -> bool:
    gap_up = min(c2.open, c2.close) > c1.close
    closes_into_first = c3.close < (c1.open + c1.close) / 2
    return (
        c1.is_bullish and _large_body(c1)
        and _small_body(c2) and gap_up
        and c3.is_bearish and _large_body(c3)
        and closes_into_first
    )


def is_three_white_soldiers(c1: Bar, c2: Bar, c3: Bar) -> bool:
    all_bullish = c1.is_bullish and c2.is_bullish and c3.is_bullish
    higher_closes = c3.close > c2.close > c1.close
    opens_in_body = c1.open < c2.open < c1.close and c2.open < c3.open < c2.close
    small_upper_wicks = all((c.high - c.close) < (c.close - c.open) * 0.3 for c in (c1, c2, c3))
    return all_bullish and higher_closes and opens_in_body and small_upper_wicks


def is_three_black_crows(c1: Bar, c2: Bar, c3: Bar) -> bool:
    all_bearish = c1.is_bearish and c2.is_bearish and c3.is_bearish
    lower_closes = c3.close < c2.close < c1.close
    opens_in_body = c1.close < c2.open < c1.open and c2.close < c3.open < c2.open
    small_lower_wicks = all((c.close - c.low) < (c.open - c.close) * 0.3 for c in (c1, c2, c3))
    return all_bearish and lower_closes and opens_in_body and small_lower_wicks


def has_high_volume(bar: Bar, bars: Sequence[Bar], lookback: int = 10) -> bool:
    """Volume above 1.5x the average of the last `lookback` bars."""
    if not bar.volume or len(bars) < lookback:
        return False
    avg_volume = sum(b.volume or 0 for b in bars[-lookback:]) / lookback
    return bar.volume > avg_volume * 1.5


def candle_strength(bar: Optional[Bar]) -> float:
    """Signed strength in [-10, 10]; positive is bullish."""
    if bar is None:
        return 0
    bullish = bar.is_bullish
    strength = 3 if bullish else -3

    if bar.body > bar.range * 0.7:
        strength += 3 if bullish else -3
    elif bar.body < bar.range * 0.2:
        strength /= 2

    if bullish and bar.lower_wick > bar.body * 2:
        strength += 2
    elif not bullish and bar.upper_wick > bar.body * 2:
        strength -= 2

    return max(-10, min(10, strength))


def detect_pattern(bars: Sequence[Bar]) -> PatternResult:
    """
    Strongest pattern on the last three bars. Precedence: three-candle,
    then two-candle, then single-candle, then the generic candle strength.
    """
    if not bars or len(bars) < 3:
        return UNKNOWN_PATTERN
    c1, c2, c3 = bars[-3], bars[-2], bars[-1]

    bull, bear, flat = PatternDirection.BULLISH, PatternDirection.BEARISH, PatternDirection.NEUTRAL
    checks = (
        (is_morning_star(c1, c2, c3), "morning_star", 9, bull),
        (is_evening_star(c1, c2, c3), "evening_star", -9, bear),
        (is_three_white_soldiers(c1, c2, c3), "three_white_soldiers", 8, bull),
        (is_three_black_crows(c1, c2, c3), "three_black_crows", -8, bear),
        (is_bullish_engulfing(c3, c2), "bullish_engulfing", 7, bull),
        (is_bearish_engulfing(c3, c2), "bearish_engulfing", -7, bear),
        (is_bullish_harami(c3, c2), "bullish_harami", 5, bull),
        (is_bearish_harami(c3, c2), "bearish_harami", -5, bear),
        (is_doji(c3), "doji", 0, flat),
        (is_hammer(c3), "hammer", 6, bull),
        (is_shooting_star(c3), "shooting_star", -6, bear),
    )
    for matched, name, strength, direction in checks:
        if matched:
            return PatternResult(pattern=name, strength=strength, direction=direction)

    strength = candle_strength(c3)
    if strength > 0:
        direction = bull
    elif strength < 0:
        direction = bear
    else:
        direction = flat
    return PatternResult(pattern="basic_candle", strength=strength, direction=direction)
