"""Unit tests for backtesting.engine."""

import logging
import math
from datetime import datetime

import pandas as pd
import pytest
from scalp_backtester.backtesting import BacktestEngine
from scalp_backtester.core.exceptions import MissingDataError
from scalp_backtester.core.types import (
    Direction,
    EnterAction,
    ExitAction,
    HaltAction,
    HaltRecord,
    HoldAction,
    Position,
    Trade,
    WaitAction,
)
from scalp_backtester.indicators.snapshot import compute_snapshot
from scalp_backtester.strategies import BaseStrategy, ScalperStrategy, StrategyParams


class ScriptedStrategy(BaseStrategy):
    """Replays a fixed list of actions, then `default` forever."""

    def __init__(self, actions, default=None):
        self.actions = list(actions)
        self.default = default or WaitAction(reason="idle")
        self.seen = []

    def compute_indicators(self, bars):
        return compute_snapshot(bars)

    def analyze(self, bars, position, balance=None):
        i = len(self.seen)
        self.seen.append(len(bars))
        return self.actions[i] if i < len(self.actions) else self.default


def _enter(size=10.0, price=100.0):
    return EnterAction(
        direction=Direction.LONG,
        price=price,
        position_size=size,
        leverage=3,
        stop_loss=price * 0.9985,
        take_profit=price * 1.001,
        reason="Long setup",
    )


def _open_long(state, entry=100.0):
    state.position = Position(
        direction=Direction.LONG,
        entry_price=entry,
        size=30.0,
        margin=1000.0,
        leverage=3,
        entry_time=datetime(2023, 1, 1),
        stop_loss=99.85,
        take_profit=100.1,
        entry_fee=0.75,
    )
    state.account.reserve(1000.0, 0.75)


def test_strategy_sees_only_causal_view(flat_bars):
    strategy = ScriptedStrategy([])
    BacktestEngine(strategy).run(flat_bars(6))
    assert strategy.seen == [1, 2, 3, 4, 5, 6]


def test_start_index(flat_bars):
    strategy = ScriptedStrategy([])
    BacktestEngine(strategy, start_index=3).run(flat_bars(5))
    assert strategy.seen == [4, 5]


def test_flat_market_no_trades(flat_bars):
    result = BacktestEngine(ScalperStrategy()).run(flat_bars(20))
    assert result.ledger == []
    assert result.final_balance == 10000.0
    assert result.stats.total_trades == 0
    assert len(result.equity_curve) == 21


def test_rising_market_takes_profit(rising_bars):
    result = BacktestEngine(ScalperStrategy(), initial_balance=10000.0, fee_percentage=0.075).run(rising_bars(30))
    trades = result.trades
    assert len(trades) >= 1
    first = trades[0]
    assert first.direction == Direction.LONG
    assert first.exit_reason == "Take profit hit"
    assert first.profit > 0
    assert first.fees == pytest.approx(first.margin * 0.075 / 100)
    assert result.stats.winning_trades == len(trades)


def test_balance_after_round_trip(make_bar):
    bars = [make_bar(0, 100.0), make_bar(1, 100.05)]
    strategy = ScriptedStrategy([_enter(), ExitAction(price=100.05, reason="Trend change")])
    result = BacktestEngine(strategy, initial_balance=10000.0, fee_percentage=0.075).run(bars)

    trade = result.trades[0]
    margin, entry_fee = 1000.0, 0.75
    pnl = (100.05 - 100.0) * 30.0
    expected = 10000.0 - (margin + entry_fee) + (margin + pnl - trade.fees)
    assert trade.size == pytest.approx(30.0)
    assert trade.margin == pytest.approx(margin)
    assert trade.entry_fee == pytest.approx(entry_fee)
    assert trade.profit == pytest.approx(pnl - 0.75)
    assert trade.profit_pct == pytest.approx(trade.profit / margin * 100)
    assert result.final_balance == pytest.approx(expected)


def test_price_stop_fires_when_strategy_does_not_exit(make_bar):
    engine = BacktestEngine(ScalperStrategy())
    state = engine.new_state()
    _open_long(state)
    # two bars: the strategy is still warming up and only waits
    assert engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 99.80)]) is True
    trade = state.ledger[-1]
    assert state.position is None
    assert trade.exit_reason == "Stop loss triggered"
    assert trade.exit_price == 99.80
    assert trade.profit < 0


def test_price_take_profit_fires_on_hold(make_bar):
    engine = BacktestEngine(ScriptedStrategy([HoldAction(reason="Maintaining position")]))
    state = engine.new_state()
    _open_long(state)
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 100.2)])
    assert state.ledger[-1].exit_reason == "Take profit triggered"


def test_strategy_exit_takes_precedence(make_bar):
    engine = BacktestEngine(ScriptedStrategy([ExitAction(price=99.80, reason="Trend change")]))
    state = engine.new_state()
    _open_long(state)
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 99.80)])
    assert len(state.ledger) == 1
    assert state.ledger[0].exit_reason == "Trend change"


def test_enter_while_open_is_ignored(make_bar):
    engine = BacktestEngine(ScriptedStrategy([_enter(), _enter()]))
    state = engine.new_state()
    engine.process_bar(state, [make_bar(0, 100.0)])
    position, balance = state.position, state.account.balance
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 100.02)])
    assert state.position is position
    assert state.account.balance == balance
    assert state.ledger == []


def test_enter_while_open_still_checks_stops(make_bar):
    engine = BacktestEngine(ScriptedStrategy([_enter()]))
    state = engine.new_state()
    _open_long(state)
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 99.80)])
    assert state.position is None
    assert state.ledger[0].exit_reason == "Stop loss triggered"


def test_insufficient_funds_skips_entry(make_bar, caplog):
    caplog.set_level(logging.INFO, logger="scalp_backtester")
    engine = BacktestEngine(ScriptedStrategy([_enter(size=1000.0)]), initial_balance=1000.0)
    result = engine.run([make_bar(0, 100.0), make_bar(1, 100.0)])
    assert result.ledger == []
    assert result.open_position is None
    assert result.final_balance == 1000.0
    assert "insufficient balance" in caplog.text


def test_halt_on_zero_balance(rising_bars):
    strategy = ScalperStrategy()
    result = BacktestEngine(strategy, initial_balance=0.0).run(rising_bars(30))
    assert len(result.ledger) == 1
    assert isinstance(result.halt, HaltRecord)
    assert result.halt.reason.startswith("Account bankrupt")
    assert result.stats.halted is True
    assert result.stats.total_trades == 0
    assert len(result.equity_curve) == 2


def test_halt_stops_loop_and_keeps_prior_trades(flat_bars):
    strategy = ScriptedStrategy([
        _enter(),
        ExitAction(price=100.0, reason="Trend change"),
        HaltAction(reason="Account bankrupt - balance is zero or negative"),
    ])
    result = BacktestEngine(strategy).run(flat_bars(10))
    assert strategy.seen == [1, 2, 3]
    assert isinstance(result.ledger[0], Trade)
    assert isinstance(result.ledger[1], HaltRecord)
    assert result.stats.total_trades == 1
    assert result.stats.halted is True


def test_empty_data_raises():
    engine = BacktestEngine(ScalperStrategy())
    with pytest.raises(MissingDataError):
        engine.run([])
    with pytest.raises(MissingDataError):
        engine.run(pd.DataFrame(columns=["time", "open", "high", "low", "close", "volume"]))


def test_open_position_at_end(flat_bars):
    result = BacktestEngine(ScriptedStrategy([_enter()], default=HoldAction(reason="hold"))).run(flat_bars(3))
    assert result.trades == []
    assert result.open_position is not None
    assert result.final_balance == pytest.approx(10000.0 - 1000.75)
    assert result.equity_curve[-1] == pytest.approx(9999.25)


def test_close_at_end(flat_bars):
    engine = BacktestEngine(
        ScriptedStrategy([_enter()], default=HoldAction(reason="hold")), close_at_end=True
    )
    result = engine.run(flat_bars(3))
    assert result.open_position is None
    assert result.trades[0].exit_reason == "End of data"
    assert result.final_balance == pytest.approx(10000.0 - 1.5)
    assert result.equity_curve[-1] == pytest.approx(result.final_balance)


def test_low_balance_warning_logged_once(flat_bars, caplog):
    caplog.set_level(logging.WARNING, logger="scalp_backtester")
    BacktestEngine(ScriptedStrategy([]), initial_balance=1.5).run(flat_bars(5))
    warnings = [r for r in caplog.records if "critically low" in r.getMessage()]
    assert len(warnings) == 1


def test_ledger_balances(rising_bars):
    result = BacktestEngine(ScalperStrategy()).run(rising_bars(30))
    frame = result.trades_frame()
    assert len(frame) == len(result.trades) > 0
    expected = 10000.0 + frame["profit"].cumsum()
    assert frame["new_balance"].tolist() == pytest.approx(expected.tolist())
    assert frame["prev_balance"].iloc[0] == 10000.0
    entry_fees = sum(t.entry_fee for t in result.trades)
    assert result.final_balance == pytest.approx(frame["new_balance"].iloc[-1] - entry_fees)


def test_dataframe_input_matches_bars(rising_bars):
    bars = rising_bars(30)
    df = pd.DataFrame([
        {"time": b.time, "open": b.open, "high": b.high, "low": b.low, "close": b.close, "volume": b.volume}
        for b in bars
    ])
    from_bars = BacktestEngine(ScalperStrategy()).run(bars)
    from_frame = BacktestEngine(ScalperStrategy()).run(df)
    assert from_frame.ledger == from_bars.ledger


def test_runs_are_deterministic(bars_from_closes):
    closes = [100 + 1.5 * math.sin(i / 4.0) + 0.3 * math.sin(i * 1.7) for i in range(150)]
    bars = bars_from_closes(closes)
    a = BacktestEngine(ScalperStrategy()).run(bars)
    b = BacktestEngine(ScalperStrategy()).run(bars)
    assert a.ledger == b.ledger
    assert a.stats == b.stats
    assert a.equity_curve == b.equity_curve


@pytest.mark.parametrize("min_bars", [0, 1])
def test_tiny_min_bars_runs_from_first_bar(rising_bars, min_bars):
    strategy = ScalperStrategy(StrategyParams(min_bars=min_bars))
    result = BacktestEngine(strategy).run(rising_bars(30))
    assert len(result.equity_curve) == 31
    assert all(t.direction == Direction.LONG for t in result.trades)


def _open_short(state, entry=100.0):
    state.position = Position(
        direction=Direction.SHORT,
        entry_price=entry,
        size=30.0,
        margin=1000.0,
        leverage=3,
        entry_time=datetime(2023, 1, 1),
        stop_loss=100.15,
        take_profit=99.9,
        entry_fee=0.75,
    )
    state.account.reserve(1000.0, 0.75)


@pytest.mark.parametrize("close,reason", [
    (100.15, "Stop loss triggered"),
    (100.30, "Stop loss triggered"),
    (99.90, "Take profit triggered"),
    (99.70, "Take profit triggered"),
])
def test_short_price_exits(make_bar, close, reason):
    engine = BacktestEngine(ScriptedStrategy([HoldAction(reason="Maintaining position")]))
    state = engine.new_state()
    _open_short(state)
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, close)])
    trade = state.ledger[-1]
    assert state.position is None
    assert trade.exit_reason == reason
    assert trade.exit_price == close
    if reason.startswith("Stop"):
        assert trade.profit < 0
    else:
        assert trade.profit > 0


def test_short_inside_levels_stays_open(make_bar):
    engine = BacktestEngine(ScriptedStrategy([HoldAction(reason="Maintaining position")]))
    state = engine.new_state()
    _open_short(state)
    engine.process_bar(state, [make_bar(0, 100.0), make_bar(1, 100.05)])
    assert state.position is not None
    assert state.ledger == []
