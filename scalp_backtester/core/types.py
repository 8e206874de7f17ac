"""
Core data types: bars, positions, trades, and the decision engine's actions.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def order_side(self) -> str:
        """Exchange order side that opens a position in this direction."""
        return "BUY" if self is Direction.LONG else "SELL"

    @property
    def closing_side(self) -> str:
        return "SELL" if self is Direction.LONG else "BUY"


class ActionKind(str, Enum):
    HALT = "halt"
    WAIT = "wait"
    HOLD = "hold"
    EXIT = "exit"
    ENTER = "enter"


@dataclass(frozen=True)
class Bar:
    """OHLCV candle."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


# Decision engine output: one variant per action kind, each carrying only its own fields.

@dataclass(frozen=True)
class HaltAction:
    reason: str
    kind: ClassVar[ActionKind] = ActionKind.HALT


@dataclass(frozen=True)
class WaitAction:
    reason: str
    kind: ClassVar[ActionKind] = ActionKind.WAIT


@dataclass(frozen=True)
class HoldAction:
    reason: str
    kind: ClassVar[ActionKind] = ActionKind.HOLD


@dataclass(frozen=True)
class ExitAction:
    price: float
    reason: str
    kind: ClassVar[ActionKind] = ActionKind.EXIT


@dataclass(frozen=True)
class EnterAction:
    """Entry order: size is unleveraged units; the executor multiplies by leverage."""
    direction: Direction
    price: float
    position_size: float
    leverage: int
    stop_loss: float
    take_profit: float
    reason: str
    open_time: Optional[datetime] = None
    volatility_pct: Optional[float] = None
    adx: Optional[float] = None
    kind: ClassVar[ActionKind] = ActionKind.ENTER


Action = Union[HaltAction, WaitAction, HoldAction, ExitAction, EnterAction]


@dataclass(frozen=True)
class Position:
    """Open position state. Size is leverage-adjusted units."""
    direction: Direction
    entry_price: float
    size: float
    margin: float
    leverage: int
    entry_time: Optional[datetime]
    stop_loss: float
    take_profit: float
    entry_reason: str = ""
    entry_fee: float = 0.0
    entry_balance: float = 0.0
    volatility_pct: Optional[float] = None
    adx: Optional[float] = None

    def pnl_at(self, price: float) -> float:
        """Directional price delta times size."""
        if self.direction == Direction.LONG:
            return (price - self.entry_price) * self.size
        return (self.entry_price - price) * self.size


@dataclass(frozen=True)
class Trade:
    """Closed trade. Profit is net of the exit fee; pct is relative to margin."""
    direction: Direction
    entry_price: float
    exit_price: float
    size: float
    margin: float
    leverage: int
    entry_time: Optional[datetime]
    exit_time: Optional[datetime]
    stop_loss: float
    take_profit: float
    entry_reason: str
    exit_reason: str
    profit: float
    profit_pct: float
    fees: float
    entry_fee: float = 0.0
    volatility_pct: Optional[float] = None
    adx: Optional[float] = None

    @classmethod
    def from_position(
        cls,
        position: Position,
        exit_price: float,
        exit_time: Optional[datetime],
        exit_reason: str,
        profit: float,
        fees: float,
    ) -> "Trade":
        profit_pct = (profit / position.margin) * 100 if position.margin else 0.0
        return cls(
            direction=position.direction,
            entry_price=position.entry_price,
            exit_price=exit_price,
            size=position.size,
            margin=position.margin,
            leverage=position.leverage,
            entry_time=position.entry_time,
            exit_time=exit_time,
            stop_loss=position.stop_loss,
            take_profit=position.take_profit,
            entry_reason=position.entry_reason,
            exit_reason=exit_reason,
            profit=profit,
            profit_pct=profit_pct,
            fees=fees,
            entry_fee=position.entry_fee,
            volatility_pct=position.volatility_pct,
            adx=position.adx,
        )


@dataclass(frozen=True)
class HaltRecord:
    """Ledger entry written when the simulation stops on bankruptcy."""
    time: Optional[datetime]
    reason: str
    balance: float


LedgerEntry = Union[Trade, HaltRecord]
