"""
Simulation sinks: persist run parameters + stats, then the trade ledger.
Trade rows carry prev/new balance running totals from the initial balance.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from scalp_backtester.analytics.metrics import SimulationStats
from scalp_backtester.core.exceptions import PersistenceError
from scalp_backtester.core.types import Trade

logger = logging.getLogger("scalp_backtester.data.sinks")

TRADE_COLUMNS = [
    "direction", "entry_price", "exit_price", "size", "margin", "leverage",
    "entry_time", "exit_time", "entry_reason", "exit_reason",
    "profit", "profit_pct", "fees", "entry_fee", "prev_balance", "new_balance",
]


def ledger_frame(trades: Sequence[Trade], initial_balance: float) -> pd.DataFrame:
    """One row per trade; new_balance = initial_balance + cumulative profit."""
    rows: List[dict] = []
    running = initial_balance
    for t in trades:
        prev = running
        running += t.profit
        rows.append({
            "direction": t.direction.value,
            "entry_price": t.entry_price,
            "exit_price": t.exit_price,
            "size": t.size,
            "margin": t.margin,
            "leverage": t.leverage or 1,
            "entry_time": t.entry_time,
            "exit_time": t.exit_time,
            "entry_reason": t.entry_reason,
            "exit_reason": t.exit_reason,
            "profit": t.profit,
            "profit_pct": t.profit_pct,
            "fees": t.fees,
            "entry_fee": t.entry_fee,
            "prev_balance": prev,
            "new_balance": running,
        })
    return pd.DataFrame(rows, columns=TRADE_COLUMNS)


class SimulationSink(ABC):
    """Persistence collaborator for finished runs."""

    @abstractmethod
    def save_simulation(self, record: dict, stats: SimulationStats) -> int:
        """Store run parameters and stats; return the new simulation id."""
        pass

    @abstractmethod
    def save_trades(self, simulation_id: int, trades: Sequence[Trade], initial_balance: float) -> None:
        pass


class MemorySink(SimulationSink):
    """Keeps everything in memory. Ids start at 1."""

    def __init__(self):
        self.simulations: Dict[int, dict] = {}
        self.trades: Dict[int, pd.DataFrame] = {}

    def save_simulation(self, record: dict, stats: SimulationStats) -> int:
        simulation_id = len(self.simulations) + 1
        self.simulations[simulation_id] = {**record, **stats.to_dict()}
        return simulation_id

    def save_trades(self, simulation_id: int, trades: Sequence[Trade], initial_balance: float) -> None:
        self.trades[simulation_id] = ledger_frame(trades, initial_balance)


class CsvSink(SimulationSink):
    """simulations.csv (one row per run) + trades_<id>.csv under `directory`."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    @property
    def simulations_path(self) -> Path:
        return self.directory / "simulations.csv"

    def save_simulation(self, record: dict, stats: SimulationStats) -> int:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            existing = pd.read_csv(self.simulations_path) if self.simulations_path.exists() else pd.DataFrame()
            simulation_id = len(existing) + 1
            row = pd.DataFrame([{"id": simulation_id, **record, **stats.to_dict()}])
            row.to_csv(self.simulations_path, mode="a", header=existing.empty, index=False)
        except (OSError, pd.errors.ParserError) as e:
            raise PersistenceError(f"Could not save simulation: {e}") from e
        logger.info("Saved simulation #%d to %s", simulation_id, self.simulations_path)
        return simulation_id

    def save_trades(self, simulation_id: int, trades: Sequence[Trade], initial_balance: float) -> None:
        path = self.directory / f"trades_{simulation_id}.csv"
        try:
            ledger_frame(trades, initial_balance).to_csv(path, index=False)
        except OSError as e:
            raise PersistenceError(f"Could not save trades for simulation #{simulation_id}: {e}") from e
        logger.info("Saved %d trades for simulation #%d", len(trades), simulation_id)
