"""Errors raised across the package. Recoverable conditions are values, not exceptions."""

from __future__ import annotations


class ScalpBacktesterError(Exception):
    """Base exception for scalp_backtester."""


class ConfigError(ScalpBacktesterError):
    """Configuration is missing or invalid."""


class MissingDataError(ScalpBacktesterError):
    """The bar source returned no data for the requested range."""


class PersistenceError(ScalpBacktesterError):
    """A simulation sink failed to store results."""
