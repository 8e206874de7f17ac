"""Abstract strategy: indicators + action decision."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from scalp_backtester.core.types import Action, Bar, Position
from scalp_backtester.indicators.snapshot import IndicatorSnapshot


class BaseStrategy(ABC):
    """
    Strategy maps the causal bar window plus position/account state to one Action.
    Must be deterministic and must not read beyond bars[-1].
    """

    @abstractmethod
    def compute_indicators(self, bars: Sequence[Bar]) -> IndicatorSnapshot:
        """Indicators for the last bar of the window. No lookahead."""
        pass

    @abstractmethod
    def analyze(
        self,
        bars: Sequence[Bar],
        position: Optional[Position],
        balance: Optional[float] = None,
    ) -> Action:
        """Return the action for the current bar (bars[-1])."""
        pass
