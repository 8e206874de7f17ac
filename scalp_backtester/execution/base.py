"""Abstract execution interface: the live counterpart of the backtest engine."""

from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from scalp_backtester.core.types import Action, EnterAction, ExitAction, Position
from scalp_backtester.risk.manager import RiskManager

logger = logging.getLogger("scalp_backtester.execution")

QUANTITY_DECIMALS = 3


@dataclass
class OrderResult:
    """Result of placing an order."""
    success: bool
    order_id: Optional[str] = None
    avg_price: Optional[float] = None
    quantity: Optional[float] = None
    message: str = ""


def floor_quantity(quantity: float, decimals: int = QUANTITY_DECIMALS) -> float:
    factor = 10 ** decimals
    return math.floor(quantity * factor) / factor


class ExecutionClient(ABC):
    """
    Exchange client contract. Concrete clients implement the five primitives;
    apply_action turns a strategy action into orders the same way the backtest does.
    """

    def __init__(self, fee_percentage: float = 0.075):
        self.risk_manager = RiskManager(fee_percentage=fee_percentage)

    @abstractmethod
    def place_market_order(self, symbol: str, side: str, quantity: float) -> OrderResult:
        """side is BUY or SELL."""
        pass

    @abstractmethod
    def get_account_balance(self) -> float:
        """Available balance in quote currency."""
        pass

    @abstractmethod
    def get_open_position(self, symbol: str) -> Optional[Position]:
        pass

    @abstractmethod
    def get_current_price(self, symbol: str) -> float:
        pass

    @abstractmethod
    def set_leverage(self, symbol: str, leverage: int) -> None:
        pass

    def apply_action(self, symbol: str, action: Action) -> Optional[OrderResult]:
        """Place the order an action calls for. Wait/hold/halt place nothing and return None."""
        if isinstance(action, EnterAction):
            return self._enter(symbol, action)
        if isinstance(action, ExitAction):
            return self._exit(symbol, action)
        return None

    def _enter(self, symbol: str, action: EnterAction) -> Optional[OrderResult]:
        if self.get_open_position(symbol) is not None:
            logger.info("Position already open on %s; ignoring %s entry", symbol, action.direction.value)
            return None
        price = self.get_current_price(symbol)
        check = self.risk_manager.validate_entry(
            action.position_size, action.leverage, price, self.get_account_balance()
        )
        quantity = floor_quantity(check.quantity)
        if quantity <= 0:
            logger.error("Position size too small to execute on %s", symbol)
            return OrderResult(success=False, message="quantity rounds to zero")
        if not check.allowed:
            logger.error("Entry on %s rejected: %s", symbol, check.reason)
            return OrderResult(success=False, message=check.reason)
        if action.leverage > 1:
            self.set_leverage(symbol, action.leverage)
        result = self.place_market_order(symbol, action.direction.order_side, quantity)
        logger.info(
            "%s %s %.3f @ ~$%.2f | Leverage: %dx | Reason: %s",
            action.direction.order_side, symbol, quantity, price, action.leverage, action.reason,
        )
        return result

    def _exit(self, symbol: str, action: ExitAction) -> Optional[OrderResult]:
        position = self.get_open_position(symbol)
        if position is None:
            logger.info("No open position on %s to exit", symbol)
            return None
        result = self.place_market_order(symbol, position.direction.closing_side, position.size)
        logger.info(
            "Closed %s %s %.3f | Reason: %s",
            position.direction.value.upper(), symbol, position.size, action.reason,
        )
        return result
