"""
Backtest engine: bar-by-bar, causal view only, fills at the bar close.
Margin + entry fee reserved on open; margin + P&L - exit fee returned on close.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

import pandas as pd

from scalp_backtester.analytics.metrics import SimulationStats, compute_stats
from scalp_backtester.backtesting.account import Account
from scalp_backtester.core.exceptions import MissingDataError
from scalp_backtester.core.types import (
    Bar,
    Direction,
    EnterAction,
    ExitAction,
    HaltAction,
    HaltRecord,
    LedgerEntry,
    Position,
    Trade,
)
from scalp_backtester.data.sinks import ledger_frame
from scalp_backtester.data.sources import bars_from_frame
from scalp_backtester.risk.manager import RiskManager
from scalp_backtester.strategies.base import BaseStrategy

logger = logging.getLogger("scalp_backtester.backtest")


@dataclass
class SimulationState:
    """Everything a run owns. Mutated only by BacktestEngine."""
    account: Account
    position: Optional[Position] = None
    ledger: List[LedgerEntry] = field(default_factory=list)
    equity_curve: List[float] = field(default_factory=list)
    halted: bool = False
    low_balance_warned: bool = False


@dataclass
class BacktestResult:
    """Backtest output: ledger (trades + halt record), equity curve and stats."""
    ledger: List[LedgerEntry]
    equity_curve: List[float]
    initial_balance: float
    final_balance: float
    stats: SimulationStats
    open_position: Optional[Position] = None

    @property
    def trades(self) -> List[Trade]:
        return [e for e in self.ledger if isinstance(e, Trade)]

    @property
    def halt(self) -> Optional[HaltRecord]:
        for entry in self.ledger:
            if isinstance(entry, HaltRecord):
                return entry
        return None

    def trades_frame(self) -> pd.DataFrame:
        return ledger_frame(self.trades, self.initial_balance)


class BacktestEngine:
    """
    Runs a strategy over historical bars. On bar i the strategy sees bars[0..i] only.
    Stop/target levels are checked at the close whenever the strategy's action was
    not itself acted on.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        initial_balance: float = 10000.0,
        fee_percentage: float = 0.075,
        start_index: int = 0,
        close_at_end: bool = False,
        low_balance_threshold: float = 2.0,
    ):
        self.strategy = strategy
        self.initial_balance = initial_balance
        self.risk_manager = RiskManager(fee_percentage=fee_percentage)
        self.start_index = max(0, start_index)
        self.close_at_end = close_at_end
        self.low_balance_threshold = low_balance_threshold

    def new_state(self) -> SimulationState:
        return SimulationState(
            account=Account(self.initial_balance),
            equity_curve=[self.initial_balance],
        )

    def run(self, data: Union[Sequence[Bar], pd.DataFrame]) -> BacktestResult:
        """
        Run on Bar records or an OHLCV DataFrame (time, open, high, low, close, volume).
        Raises MissingDataError when there is nothing to simulate.
        """
        bars = bars_from_frame(data) if isinstance(data, pd.DataFrame) else list(data)
        if not bars:
            raise MissingDataError("No bars to simulate")

        state = self.new_state()
        for i in range(self.start_index, len(bars)):
            if not self.process_bar(state, bars[: i + 1]):
                break

        if state.position is not None and self.close_at_end and not state.halted:
            last = bars[-1]
            self._close(state, last.close, last.time, "End of data")
            state.equity_curve[-1] = state.account.mark(None, last.close)

        return self._result(state)

    def process_bar(self, state: SimulationState, view: Sequence[Bar]) -> bool:
        """One simulation step on the causal view. Returns False once the run halts."""
        bar = view[-1]
        account = state.account
        self._check_low_balance(state)

        action = self.strategy.analyze(view, state.position, account.balance)

        if isinstance(action, HaltAction):
            state.ledger.append(HaltRecord(time=bar.time, reason=action.reason, balance=account.balance))
            state.halted = True
            state.equity_curve.append(account.mark(state.position, bar.close))
            logger.warning("HALT @ %s | Balance: $%.2f | %s", bar.time, account.balance, action.reason)
            return False

        if isinstance(action, EnterAction) and state.position is None:
            self._open(state, action, bar)
        elif isinstance(action, ExitAction) and state.position is not None:
            self._close(state, action.price, bar.time, action.reason)
        elif state.position is not None:
            self._check_price_exits(state, bar)

        state.equity_curve.append(account.mark(state.position, bar.close))
        return True

    def _check_low_balance(self, state: SimulationState) -> None:
        balance = state.account.balance
        if balance >= self.low_balance_threshold:
            state.low_balance_warned = False
        elif state.position is None and balance > 0 and not state.low_balance_warned:
            logger.warning("Balance critically low: $%.2f", balance)
            state.low_balance_warned = True

    def _open(self, state: SimulationState, action: EnterAction, bar: Bar) -> None:
        account = state.account
        check = self.risk_manager.validate_entry(
            action.position_size, action.leverage, action.price, account.balance
        )
        if not check.allowed:
            logger.info("Skipping %s entry: %s", action.direction.value, check.reason)
            return

        balance_before = account.balance
        account.reserve(check.margin, check.fee)
        state.position = Position(
            direction=action.direction,
            entry_price=action.price,
            size=check.quantity,
            margin=check.margin,
            leverage=action.leverage,
            entry_time=action.open_time or bar.time,
            stop_loss=action.stop_loss,
            take_profit=action.take_profit,
            entry_reason=action.reason,
            entry_fee=check.fee,
            entry_balance=balance_before,
            volatility_pct=action.volatility_pct,
            adx=action.adx,
        )
        logger.info(
            "OPENED %s @ $%.2f | Size: %.6f | Margin: $%.2f | Balance: $%.2f | Leverage: %dx | "
            "Volatility: %s%% | ADX: %s | Reason: %s",
            action.direction.value.upper(),
            action.price,
            check.quantity,
            check.margin,
            account.balance,
            action.leverage,
            action.volatility_pct,
            action.adx,
            action.reason,
        )

    def _close(
        self,
        state: SimulationState,
        price: float,
        time: Optional[datetime],
        reason: str,
    ) -> Trade:
        position = state.position
        exit_fee = self.risk_manager.fee_for(position.margin)
        profit = position.pnl_at(price) - exit_fee
        state.account.settle(position.margin, profit)
        trade = Trade.from_position(position, price, time, reason, profit, exit_fee)
        state.ledger.append(trade)
        state.position = None
        logger.info(
            "CLOSED %s @ $%.2f | P&L: $%.2f (%.2f%%) | Balance: $%.2f | Reason: %s",
            trade.direction.value.upper(),
            price,
            profit,
            trade.profit_pct,
            state.account.balance,
            reason,
        )
        return trade

    def _check_price_exits(self, state: SimulationState, bar: Bar) -> None:
        position = state.position
        close = bar.close
        if position.direction == Direction.LONG:
            stop_hit = close <= position.stop_loss
            target_hit = close >= position.take_profit
        else:
            stop_hit = close >= position.stop_loss
            target_hit = close <= position.take_profit
        if stop_hit:
            self._close(state, close, bar.time, "Stop loss triggered")
        elif target_hit:
            self._close(state, close, bar.time, "Take profit triggered")

    def _result(self, state: SimulationState) -> BacktestResult:
        trades = [e for e in state.ledger if isinstance(e, Trade)]
        final_balance = state.account.balance
        stats = compute_stats(
            trades,
            self.initial_balance,
            final_balance,
            equity_curve=state.equity_curve,
            halted=state.halted,
        )
        return BacktestResult(
            ledger=list(state.ledger),
            equity_curve=list(state.equity_curve),
            initial_balance=self.initial_balance,
            final_balance=final_balance,
            stats=stats,
            open_position=state.position,
        )
