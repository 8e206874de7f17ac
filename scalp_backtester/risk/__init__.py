"""Risk management: position sizing, margin, fees."""

from scalp_backtester.risk.manager import RiskManager, RiskResult

__all__ = ["RiskManager", "RiskResult"]
