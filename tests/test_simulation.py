"""Unit tests for backtesting.simulation."""

import pandas as pd
import pytest
from scalp_backtester.backtesting import run_simulation
from scalp_backtester.core.config import Config
from scalp_backtester.core.exceptions import MissingDataError, PersistenceError
from scalp_backtester.data import FrameBarSource, MemorySink, SimulationSink


def _rising_frame(n=30):
    times = pd.date_range("2023-01-01", periods=n, freq="1min")
    closes = [100.0 + i for i in range(n)]
    return pd.DataFrame({
        "time": times,
        "open": [c - 1 for c in closes],
        "high": [c + 0.2 for c in closes],
        "low": [c - 1.2 for c in closes],
        "close": closes,
        "volume": [10.0] * n,
    })


class FailingSink(SimulationSink):
    def save_simulation(self, record, stats):
        raise PersistenceError("disk full")

    def save_trades(self, simulation_id, trades, initial_balance):
        pass


def _config():
    return Config(symbol="BTCUSDT", interval="1m", start_date="2023-01-01", end_date="2023-01-01")


def test_run_simulation_persists():
    sink = MemorySink()
    run = run_simulation(_config(), FrameBarSource({"BTC": _rising_frame()}), sink)
    assert run.simulation_id == 1
    assert run.result.stats.total_trades > 0
    saved = sink.simulations[1]
    assert saved["ticker"] == "BTC"
    assert saved["interval"] == "1m"
    assert saved["total_trades"] == run.result.stats.total_trades
    assert len(sink.trades[1]) == len(run.result.trades)


def test_run_simulation_without_sink():
    run = run_simulation(_config(), FrameBarSource({"BTC": _rising_frame()}))
    assert run.simulation_id is None


def test_run_simulation_missing_data():
    with pytest.raises(MissingDataError):
        run_simulation(_config(), FrameBarSource(), MemorySink())


def test_run_simulation_outside_date_range():
    config = Config(symbol="BTCUSDT", interval="1m", start_date="2024-01-01", end_date="2024-02-01")
    with pytest.raises(MissingDataError):
        run_simulation(config, FrameBarSource({"BTC": _rising_frame()}))


def test_sink_failure_is_reraised():
    with pytest.raises(PersistenceError):
        run_simulation(_config(), FrameBarSource({"BTC": _rising_frame()}), FailingSink())
