"""
High-frequency scalper: micro profit targets, tight fixed stops, momentum entries.

Open position, in order: profit target, stop loss, opposing signal, trailing stop, else hold.
Flat: skip dead or weak-and-quiet markets, then look for a long setup, then a short one.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from scalp_backtester.core.types import (
    Action,
    Bar,
    Direction,
    EnterAction,
    ExitAction,
    HaltAction,
    HoldAction,
    Position,
    WaitAction,
)
from scalp_backtester.indicators.snapshot import IndicatorSnapshot, compute_snapshot
from scalp_backtester.risk.manager import RiskManager
from scalp_backtester.strategies.base import BaseStrategy


@dataclass(frozen=True)
class StrategyParams:
    """Every threshold the scalper uses. Percentages are in percent (0.1 = 0.1%)."""
    min_bars: int = 15
    default_balance: float = 1000.0
    profit_target_pct: float = 0.1
    stop_loss_pct: float = 0.15
    trailing_activation_pct: float = 0.05
    trailing_offset_pct: float = 0.05
    min_volatility_pct: float = 0.02
    weak_trend_volatility_pct: float = 0.05
    weak_adx: float = 15.0
    strong_adx: float = 20.0
    rsi_oversold: float = 40.0
    rsi_overbought: float = 60.0
    risk_pct: float = 0.3
    max_position_pct: float = 20.0
    leverage: int = 3
    ema_periods: Tuple[int, ...] = (5, 8, 13)
    rsi_period: int = 14
    atr_period: int = 14
    adx_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    stoch_period: int = 14
    stoch_smooth_k: int = 1
    stoch_smooth_d: int = 3

    def __post_init__(self):
        # YAML gives lists
        object.__setattr__(self, "ema_periods", tuple(self.ema_periods))


class ScalperStrategy(BaseStrategy):
    """Decision engine. Stateless: the same window and state always give the same action."""

    def __init__(self, params: Optional[StrategyParams] = None):
        self.params = params or StrategyParams()
        self.risk_manager = RiskManager(
            risk_pct=self.params.risk_pct,
            max_position_pct=self.params.max_position_pct,
        )

    def compute_indicators(self, bars: Sequence[Bar]) -> IndicatorSnapshot:
        p = self.params
        return compute_snapshot(
            bars,
            ema_periods=p.ema_periods,
            rsi_period=p.rsi_period,
            atr_period=p.atr_period,
            adx_period=p.adx_period,
            macd_periods=(p.macd_fast, p.macd_slow, p.macd_signal),
            stochastic_periods=(p.stoch_period, p.stoch_smooth_k, p.stoch_smooth_d),
        )

    def analyze(
        self,
        bars: Sequence[Bar],
        position: Optional[Position],
        balance: Optional[float] = None,
    ) -> Action:
        p = self.params
        balance = p.default_balance if balance is None else balance
        if balance <= 0:
            return HaltAction(reason="Account bankrupt - balance is zero or negative")
        # Two bars minimum: momentum compares against the previous close.
        if len(bars) < max(p.min_bars, 2):
            return WaitAction(reason="Not enough data")

        snap = self.compute_indicators(bars)
        current, previous = bars[-1], bars[-2]
        if position is not None:
            return self._manage_position(position, current, snap)
        return self._look_for_entry(current, previous, snap, balance)

    def _manage_position(self, position: Position, current: Bar, snap: IndicatorSnapshot) -> Action:
        p = self.params
        close = current.close
        long = position.direction == Direction.LONG
        if long:
            pnl_pct = (close - position.entry_price) / position.entry_price * 100
        else:
            pnl_pct = (position.entry_price - close) / position.entry_price * 100

        if pnl_pct >= p.profit_target_pct:
            return ExitAction(price=close, reason="Take profit hit")
        if pnl_pct <= -p.stop_loss_pct:
            return ExitAction(price=close, reason="Stop loss hit")

        histogram = snap.macd.histogram
        if long:
            against = current.is_bearish or snap.micro_downtrend or histogram < 0
        else:
            against = current.is_bullish or snap.micro_uptrend or histogram > 0
        if against:
            return ExitAction(price=close, reason="Trend change")

        # Trails the current close against entry, not a high-water mark.
        if pnl_pct > p.trailing_activation_pct:
            offset = p.trailing_offset_pct / 100
            if long and close * (1 - offset) > position.entry_price:
                return ExitAction(price=close, reason="Trailing stop hit")
            if not long and close * (1 + offset) < position.entry_price:
                return ExitAction(price=close, reason="Trailing stop hit")

        return HoldAction(reason="Maintaining position")

    def _look_for_entry(self, current: Bar, previous: Bar, snap: IndicatorSnapshot, balance: float) -> Action:
        p = self.params
        volatility = snap.volatility_pct
        adx = snap.adx
        rsi, prev_rsi = snap.rsi, snap.prev_rsi
        histogram = snap.macd.histogram
        stoch = snap.stochastic

        if volatility < p.min_volatility_pct:
            return WaitAction(reason="Extremely low volatility")
        weak_trend = adx is not None and adx < p.weak_adx
        if weak_trend and volatility < p.weak_trend_volatility_pct:
            return WaitAction(reason="Weak trend with insufficient volatility")

        sizing = self.risk_manager.size_position(balance, current.close, p.stop_loss_pct)
        if not sizing.allowed:
            return WaitAction(reason=sizing.reason)

        momentum_up = current.close > previous.close
        momentum_down = current.close < previous.close
        strong_trend = adx is not None and adx > p.strong_adx

        long_signal = (current.is_bullish or momentum_up) and (
            snap.micro_uptrend or rsi > p.rsi_oversold or histogram > 0 or stoch.k > stoch.d
        )
        oversold_bounce = rsi < p.rsi_oversold and rsi > prev_rsi and (current.is_bullish or momentum_up)
        strong_uptrend = strong_trend and snap.micro_uptrend
        long_veto = weak_trend and rsi > p.rsi_overbought
        if (long_signal or oversold_bounce or strong_uptrend) and not long_veto:
            reason = "Long setup"
            if oversold_bounce:
                reason = "Oversold bounce"
            if strong_uptrend:
                reason = "Strong uptrend detected"
            return self._enter(Direction.LONG, current, sizing.quantity, reason, snap)

        short_signal = (current.is_bearish or momentum_down) and (
            snap.micro_downtrend or rsi < p.rsi_overbought or histogram < 0 or stoch.k < stoch.d
        )
        overbought_drop = rsi > p.rsi_overbought and rsi < prev_rsi and (current.is_bearish or momentum_down)
        strong_downtrend = strong_trend and snap.micro_downtrend
        short_veto = weak_trend and rsi < p.rsi_oversold
        if (short_signal or overbought_drop or strong_downtrend) and not short_veto:
            reason = "Short setup"
            if overbought_drop:
                reason = "Overbought drop"
            if strong_downtrend:
                reason = "Strong downtrend detected"
            return self._enter(Direction.SHORT, current, sizing.quantity, reason, snap)

        return WaitAction(reason="Waiting for setup")

    def _enter(
        self,
        direction: Direction,
        current: Bar,
        quantity: float,
        reason: str,
        snap: IndicatorSnapshot,
    ) -> EnterAction:
        p = self.params
        close = current.close
        stop_frac = p.stop_loss_pct / 100
        target_frac = p.profit_target_pct / 100
        if direction == Direction.LONG:
            stop_loss, take_profit = close * (1 - stop_frac), close * (1 + target_frac)
        else:
            stop_loss, take_profit = close * (1 + stop_frac), close * (1 - target_frac)
        return EnterAction(
            direction=direction,
            price=close,
            position_size=quantity,
            leverage=p.leverage,
            stop_loss=stop_loss,
            take_profit=take_profit,
            reason=reason,
            open_time=current.time,
            volatility_pct=round(snap.volatility_pct, 2),
            adx=snap.adx,
        )
