"""Strategies: base interface and the scalper decision engine."""

from scalp_backtester.strategies.base import BaseStrategy
from scalp_backtester.strategies.scalper import ScalperStrategy, StrategyParams

__all__ = ["BaseStrategy", "ScalperStrategy", "StrategyParams"]
