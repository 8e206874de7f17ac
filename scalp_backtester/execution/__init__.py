"""Execution: live exchange boundary."""

from scalp_backtester.execution.base import ExecutionClient, OrderResult, floor_quantity

__all__ = ["ExecutionClient", "OrderResult", "floor_quantity"]
