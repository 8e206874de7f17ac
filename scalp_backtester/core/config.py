"""
Load configuration from config.yaml and .env. Env values override YAML.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING

import yaml
from dotenv import load_dotenv

from scalp_backtester.core.exceptions import ConfigError

if TYPE_CHECKING:
    from scalp_backtester.strategies.scalper import StrategyParams


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def ticker_from_symbol(symbol: str) -> str:
    """BTCUSDT -> BTC, ETHUSD -> ETH."""
    symbol = symbol.upper()
    for quote in ("USDT", "USD"):
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return symbol[: -len(quote)]
    return symbol


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    simulation = data.get("simulation", {})
    logging_cfg = data.get("logging", {})

    symbol = env("SYMBOL", simulation.get("symbol", "BTCUSDT")).upper()
    raw_balance = os.getenv("INITIAL_BALANCE", str(simulation.get("initial_balance", 10000.0)))
    try:
        initial_balance = float(raw_balance)
    except ValueError:
        raise ConfigError(f"Invalid INITIAL_BALANCE: {raw_balance}. Must be a positive number.")

    data_path = env("DATA_PATH", simulation.get("data_path") or "")

    return Config(
        symbol=symbol,
        ticker=ticker_from_symbol(symbol),
        interval=env("INTERVAL", simulation.get("interval", "1d")),
        start_date=env("START_DATE", str(simulation.get("start_date", "2023-01-01"))),
        end_date=env("END_DATE", str(simulation.get("end_date", "2023-11-01"))),
        initial_balance=initial_balance,
        fee_percentage=env_float("FEE_PERCENTAGE", simulation.get("fee_percentage", 0.075)),
        slippage_percentage=env_float("SLIPPAGE_PERCENTAGE", simulation.get("slippage_percentage", 0.05)),
        data_path=Path(data_path) if data_path else None,
        close_at_end=env_bool("CLOSE_AT_END", simulation.get("close_at_end", False)),
        strategy=dict(data.get("strategy", {}) or {}),
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "scalp_backtester.log"),
    )


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "symbol", "ticker", "interval", "start_date", "end_date",
        "initial_balance", "fee_percentage", "slippage_percentage",
        "data_path", "close_at_end", "strategy",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        symbol: str = "BTCUSDT",
        ticker: Optional[str] = None,
        interval: str = "1d",
        start_date: str = "2023-01-01",
        end_date: str = "2023-11-01",
        initial_balance: float = 10000.0,
        fee_percentage: float = 0.075,
        slippage_percentage: float = 0.05,
        data_path: Optional[Path] = None,
        close_at_end: bool = False,
        strategy: Optional[dict] = None,
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "scalp_backtester.log",
    ):
        if initial_balance is None or not initial_balance > 0:
            raise ConfigError(f"Invalid INITIAL_BALANCE: {initial_balance}. Must be a positive number.")
        self.symbol = symbol
        self.ticker = ticker or ticker_from_symbol(symbol)
        self.interval = interval
        self.start_date = start_date
        self.end_date = end_date
        self.initial_balance = initial_balance
        self.fee_percentage = fee_percentage
        self.slippage_percentage = slippage_percentage
        self.data_path = Path(data_path) if data_path else None
        self.close_at_end = close_at_end
        self.strategy = dict(strategy or {})
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file

    def strategy_params(self) -> "StrategyParams":
        """Strategy thresholds with YAML overrides applied."""
        from scalp_backtester.strategies.scalper import StrategyParams

        try:
            return StrategyParams(**self.strategy)
        except TypeError as e:
            raise ConfigError(f"Invalid strategy settings: {e}") from e

    def simulation_record(self) -> dict:
        """Run parameters stored alongside the stats by a simulation sink."""
        return {
            "ticker": self.ticker,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "interval": self.interval,
            "fee_percentage": self.fee_percentage,
            "slippage_percentage": self.slippage_percentage,
        }
