"""
Risk manager: fractional-risk position sizing, margin and fee arithmetic, affordability check.
Position size = (balance * risk%) / stop distance, capped to a fraction of balance.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

logger = logging.getLogger("scalp_backtester.risk")


@dataclass
class RiskResult:
    """Result of a risk check: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    margin: float = 0.0
    fee: float = 0.0
    reason: str = ""


class RiskManager:
    """
    Sizing: lose risk_pct of balance if the fixed stop is hit, never commit more
    than max_position_pct of balance in notional. Fees are a percentage of margin.
    """

    def __init__(
        self,
        risk_pct: float = 0.3,
        max_position_pct: float = 20.0,
        fee_percentage: float = 0.0,
    ):
        self.risk_pct = risk_pct
        self.max_position_pct = max_position_pct
        self.fee_percentage = fee_percentage

    def size_position(self, balance: float, price: float, stop_loss_pct: float) -> RiskResult:
        """Unleveraged quantity for an entry at `price` with a stop `stop_loss_pct` away."""
        stop_distance = price * (stop_loss_pct / 100)
        if stop_distance <= 0:
            return RiskResult(allowed=False, reason="zero stop distance")
        risk_amount = balance * (self.risk_pct / 100)
        qty = risk_amount / stop_distance

        max_value = balance * (self.max_position_pct / 100)
        if qty * price > max_value:
            qty = max_value / price
        return RiskResult(allowed=True, quantity=qty)

    def fee_for(self, margin: float) -> float:
        return margin * (self.fee_percentage / 100)

    def validate_entry(self, position_size: float, leverage: int, price: float, balance: float) -> RiskResult:
        """
        Leveraged size, margin and entry fee for an order; rejected (not raised)
        when margin + fee exceeds the available balance.
        """
        size = position_size * leverage
        margin = (size * price) / leverage
        fee = self.fee_for(margin)
        if margin + fee > balance:
            reason = f"insufficient balance: required {margin + fee:.2f}, available {balance:.2f}"
            logger.debug("Entry rejected: %s", reason)
            return RiskResult(allowed=False, quantity=size, margin=margin, fee=fee, reason=reason)
        return RiskResult(allowed=True, quantity=size, margin=margin, fee=fee)
