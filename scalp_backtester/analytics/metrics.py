"""
Simulation statistics over the trade ledger: win/loss counts, profit factor, P&L, drawdown.
A losing trade is any trade with profit <= 0.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence

import numpy as np

from scalp_backtester.core.types import Trade


@dataclass(frozen=True)
class SimulationStats:
    """Read-only projection of a finished run."""
    initial_balance: float
    final_balance: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float  # percent
    loss_rate: float  # percent
    total_profit: float
    total_loss: float  # absolute value
    profit_factor: float
    pnl: float
    pnl_pct: float
    expectancy: float
    avg_win: float
    avg_loss: float
    max_drawdown_pct: float
    halted: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def win_rate(pnls: Sequence[float]) -> float:
    """Fraction of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def profit_factor(pnls: Sequence[float]) -> float:
    """Gross profit / gross loss. inf with gains and no losses, 0 with neither."""
    wins = sum(p for p in pnls if p > 0)
    losses = abs(sum(p for p in pnls if p <= 0))
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def expectancy(pnls: Sequence[float]) -> float:
    """Average PnL per trade."""
    if not pnls:
        return 0.0
    return sum(pnls) / len(pnls)


def max_drawdown(equity_curve: Sequence[float]) -> float:
    """Max drawdown in percent, as a negative number (-15.0 = 15% below peak)."""
    if not equity_curve:
        return 0.0
    arr = np.array(equity_curve, dtype=np.float64)
    peak = np.maximum.accumulate(arr)
    dd = (arr - peak) / np.where(peak != 0, peak, 1)
    return float(np.min(dd)) * 100.0


def compute_stats(
    trades: Sequence[Trade],
    initial_balance: float,
    final_balance: float,
    equity_curve: Optional[List[float]] = None,
    halted: bool = False,
) -> SimulationStats:
    """Aggregate a ledger's trades. Halt records must be filtered out by the caller."""
    pnls = [t.profit for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p <= 0]
    total = len(pnls)
    pnl = final_balance - initial_balance
    return SimulationStats(
        initial_balance=initial_balance,
        final_balance=final_balance,
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=win_rate(pnls) * 100,
        loss_rate=(len(losses) / total) * 100 if total else 0.0,
        total_profit=sum(wins),
        total_loss=abs(sum(losses)),
        profit_factor=profit_factor(pnls),
        pnl=pnl,
        pnl_pct=((final_balance / initial_balance) - 1) * 100 if initial_balance else 0.0,
        expectancy=expectancy(pnls),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
        max_drawdown_pct=max_drawdown(equity_curve or []),
        halted=halted,
    )
