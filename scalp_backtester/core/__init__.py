"""Core: config, types, logging, errors."""

from scalp_backtester.core.config import load_config, Config
from scalp_backtester.core.exceptions import (
    ScalpBacktesterError,
    ConfigError,
    MissingDataError,
    PersistenceError,
)
from scalp_backtester.core.types import (
    Action,
    ActionKind,
    Bar,
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
from scalp_backtester.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "ScalpBacktesterError",
    "ConfigError",
    "MissingDataError",
    "PersistenceError",
    "Action",
    "ActionKind",
    "Bar",
    "Direction",
    "EnterAction",
    "ExitAction",
    "HaltAction",
    "HaltRecord",
    "HoldAction",
    "Position",
    "Trade",
    "WaitAction",
    "setup_logging",
]
