"""
One simulation run: fetch bars, backtest, log the summary, persist through a sink.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from scalp_backtester.analytics.metrics import SimulationStats
from scalp_backtester.backtesting.engine import BacktestEngine, BacktestResult
from scalp_backtester.core.config import Config
from scalp_backtester.core.exceptions import MissingDataError, PersistenceError
from scalp_backtester.data.sinks import SimulationSink
from scalp_backtester.data.sources import BarSource
from scalp_backtester.strategies.base import BaseStrategy
from scalp_backtester.strategies.scalper import ScalperStrategy

logger = logging.getLogger("scalp_backtester.simulation")


@dataclass
class SimulationRun:
    result: BacktestResult
    simulation_id: Optional[int] = None


def log_summary(ticker: str, stats: SimulationStats) -> None:
    logger.info("=== Simulation results: %s ===", ticker)
    logger.info(
        "Trades: %d | Wins: %d | Losses: %d | Win rate: %.2f%%",
        stats.total_trades, stats.winning_trades, stats.losing_trades, stats.win_rate,
    )
    logger.info(
        "Profit: $%.2f | Loss: $%.2f | Profit factor: %.2f | Max drawdown: %.2f%%",
        stats.total_profit, stats.total_loss, stats.profit_factor, stats.max_drawdown_pct,
    )
    logger.info(
        "Balance: $%.2f -> $%.2f | P&L: $%.2f (%.2f%%)%s",
        stats.initial_balance, stats.final_balance, stats.pnl, stats.pnl_pct,
        " | HALTED" if stats.halted else "",
    )


def run_simulation(
    config: Config,
    source: BarSource,
    sink: Optional[SimulationSink] = None,
    strategy: Optional[BaseStrategy] = None,
) -> SimulationRun:
    """
    Fetch the configured window from `source` and backtest it.
    Raises MissingDataError when the source has no bars; sink errors are logged and re-raised.
    """
    bars = source.fetch(config.ticker, config.start_date, config.end_date, config.interval)
    if not bars:
        raise MissingDataError(
            f"No price data for {config.ticker} {config.interval} "
            f"between {config.start_date} and {config.end_date}"
        )
    logger.info("Simulating %s on %d %s bars", config.ticker, len(bars), config.interval)

    engine = BacktestEngine(
        strategy=strategy or ScalperStrategy(config.strategy_params()),
        initial_balance=config.initial_balance,
        fee_percentage=config.fee_percentage,
        close_at_end=config.close_at_end,
    )
    result = engine.run(bars)
    log_summary(config.ticker, result.stats)

    if sink is None:
        return SimulationRun(result=result)
    try:
        simulation_id = sink.save_simulation(config.simulation_record(), result.stats)
        sink.save_trades(simulation_id, result.trades, config.initial_balance)
    except PersistenceError:
        logger.exception("Failed to persist simulation for %s", config.ticker)
        raise
    logger.info("Simulation saved with id %d", simulation_id)
    return SimulationRun(result=result, simulation_id=simulation_id)
