"""
Simulated account. Only the backtest engine mutates it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from scalp_backtester.core.types import Position


@dataclass
class Account:
    """Free balance plus equity (balance + open margin + unrealized P&L)."""
    balance: float
    equity: Optional[float] = None

    def __post_init__(self):
        if self.equity is None:
            self.equity = self.balance

    def reserve(self, margin: float, fee: float) -> None:
        """Open: hold margin as collateral and pay the entry fee."""
        self.balance -= margin + fee

    def settle(self, margin: float, net_pnl: float) -> None:
        """Close: release margin and apply P&L net of the exit fee."""
        self.balance += margin + net_pnl

    def mark(self, position: Optional[Position], price: float) -> float:
        """Refresh equity at `price` and return it."""
        self.equity = self.balance
        if position is not None:
            self.equity += position.margin + position.pnl_at(price)
        return self.equity
