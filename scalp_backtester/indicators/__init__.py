"""Indicators: pure functions of the causal bar window."""

from scalp_backtester.indicators.moving_averages import sma, ema
from scalp_backtester.indicators.momentum import rsi, macd, stochastic, MACD, Stochastic
from scalp_backtester.indicators.volatility import atr, bollinger_bands, volatility_pct, BollingerBands
from scalp_backtester.indicators.trend import adx
from scalp_backtester.indicators.levels import is_support, is_resistance, support_levels, resistance_levels
from scalp_backtester.indicators.snapshot import IndicatorSnapshot, compute_snapshot

__all__ = [
    "sma",
    "ema",
    "rsi",
    "macd",
    "stochastic",
    "MACD",
    "Stochastic",
    "atr",
    "bollinger_bands",
    "volatility_pct",
    "BollingerBands",
    "adx",
    "is_support",
    "is_resistance",
    "support_levels",
    "resistance_levels",
    "IndicatorSnapshot",
    "compute_snapshot",
]
