"""Analytics: simulation statistics (win rate, profit factor, P&L, drawdown)."""

from scalp_backtester.analytics.metrics import (
    SimulationStats,
    compute_stats,
    win_rate,
    profit_factor,
    expectancy,
    max_drawdown,
)

__all__ = [
    "SimulationStats",
    "compute_stats",
    "win_rate",
    "profit_factor",
    "expectancy",
    "max_drawdown",
]
