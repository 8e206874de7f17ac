"""Candlestick pattern detection."""

from scalp_backtester.patterns.candles import (
    PatternDirection,
    PatternResult,
    candle_strength,
    detect_pattern,
    has_high_volume,
    is_bearish_engulfing,
    is_bearish_harami,
    is_bullish_engulfing,
    is_bullish_harami,
    is_doji,
    is_evening_star,
    is_hammer,
    is_morning_star,
    is_shooting_star,
    is_three_black_crows,
    is_three_white_soldiers,
)

__all__ = [
    "PatternDirection",
    "PatternResult",
    "candle_strength",
    "detect_pattern",
    "has_high_volume",
    "is_bearish_engulfing",
    "is_bearish_harami",
    "is_bullish_engulfing",
    "is_bullish_harami",
    "is_doji",
    "is_evening_star",
    "is_hammer",
    "is_morning_star",
    "is_shooting_star",
    "is_three_black_crows",
    "is_three_white_soldiers",
]
