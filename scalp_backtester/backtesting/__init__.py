"""Backtesting: simulated account, bar-by-bar engine, run orchestration."""

from scalp_backtester.backtesting.account import Account
from scalp_backtester.backtesting.engine import BacktestEngine, BacktestResult, SimulationState
from scalp_backtester.backtesting.simulation import SimulationRun, run_simulation

__all__ = [
    "Account",
    "BacktestEngine",
    "BacktestResult",
    "SimulationState",
    "SimulationRun",
    "run_simulation",
]
