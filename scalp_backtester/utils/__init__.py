"""Utilities: interval parsing."""

from scalp_backtester.utils.timeframes import timeframe_minutes

__all__ = ["timeframe_minutes"]
