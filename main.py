#!/usr/bin/env python3
"""
Scalp Backtester CLI
Usage:
  python main.py backtest [--config config.yaml] [--csv bars.csv] [--out results/] [--quiet]
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scalp_backtester.backtesting.simulation import run_simulation
from scalp_backtester.core.config import load_config
from scalp_backtester.core.exceptions import ScalpBacktesterError
from scalp_backtester.core.logger import setup_logging
from scalp_backtester.data.sinks import CsvSink
from scalp_backtester.data.sources import FrameBarSource


def run_backtest(
    config_path: Path | None,
    csv_path: Path | None,
    out_dir: Path | None,
    quiet: bool = False,
) -> int:
    """Backtest the configured symbol/date range on 1-minute bars from CSV."""
    try:
        config = load_config(config_path, ROOT)
    except ScalpBacktesterError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    setup_logging(config.log_level, config.log_dir, config.log_file, console=not quiet)
    logger = logging.getLogger("scalp_backtester")

    csv_path = csv_path or config.data_path
    if csv_path is None or not Path(csv_path).exists():
        logger.error("Backtest needs bar data. Pass --csv or set DATA_PATH in .env")
        return 1
    source = FrameBarSource.from_csv(config.ticker, Path(csv_path))
    sink = CsvSink(out_dir) if out_dir else None

    try:
        run = run_simulation(config, source, sink)
    except ScalpBacktesterError as e:
        logger.error("Simulation failed: %s", e)
        return 1

    s = run.result.stats
    print("\n--- Backtest Results ---")
    print(f"Ticker: {config.ticker} | Interval: {config.interval} | {config.start_date} -> {config.end_date}")
    print(f"Total trades: {s.total_trades} (wins: {s.winning_trades}, losses: {s.losing_trades})")
    print(f"Win rate: {s.win_rate:.1f}%")
    print(f"Profit factor: {s.profit_factor:.2f}")
    print(f"Expectancy: {s.expectancy:.2f} USD/trade")
    print(f"Max drawdown: {s.max_drawdown_pct:.2f}%")
    print(f"Final balance: ${s.final_balance:.2f} (P&L ${s.pnl:.2f}, {s.pnl_pct:.2f}%)")
    if s.halted:
        print("Simulation halted: account bankrupt")
    if run.result.open_position is not None:
        pos = run.result.open_position
        print(f"Open position: {pos.direction.value} {pos.size:.5f} @ {pos.entry_price:.2f}")
    if run.simulation_id is not None:
        print(f"Saved as simulation #{run.simulation_id} in {out_dir}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Scalp Backtester CLI")
    parser.add_argument("mode", choices=["backtest"], help="Run a backtest")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--csv", type=Path, default=None, help="CSV of 1-minute OHLCV bars")
    parser.add_argument("--out", type=Path, default=None, help="Directory for simulation/trade CSVs")
    parser.add_argument("--quiet", action="store_true", help="Log to file only")
    args = parser.parse_args()
    return run_backtest(args.config, args.csv, args.out, args.quiet)


if __name__ == "__main__":
    sys.exit(main())
