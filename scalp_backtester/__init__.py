"""Scalp backtester: indicators, decision engine, and bar-by-bar position simulation."""

__version__ = "0.1.0"
