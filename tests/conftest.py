"""Shared bar builders."""

from datetime import datetime, timedelta

import pytest

from scalp_backtester.core.types import Bar

T0 = datetime(2023, 1, 1)


def _bar(i, close, open_=None, high=None, low=None, volume=1000.0):
    open_ = close if open_ is None else open_
    return Bar(
        time=T0 + timedelta(minutes=i),
        open=open_,
        high=max(open_, close) if high is None else high,
        low=min(open_, close) if low is None else low,
        close=close,
        volume=volume,
    )


@pytest.fixture
def make_bar():
    """make_bar(i, close, open_=None, high=None, low=None, volume=1000.0)"""
    return _bar


@pytest.fixture
def flat_bars():
    """open = close = high = low = 100."""
    def build(n=20, price=100.0):
        return [_bar(i, price) for i in range(n)]
    return build


@pytest.fixture
def rising_bars():
    """Close up 1 per bar from `start`; open at the previous close, 0.2 wicks."""
    def build(n=30, start=100.0, step=1.0):
        bars = []
        for i in range(n):
            close = start + i * step
            open_ = close - step
            bars.append(_bar(i, close, open_=open_, high=close + 0.2, low=open_ - 0.2))
        return bars
    return build


@pytest.fixture
def bars_from_closes():
    """Bars opening at the previous close, with 0.1 wicks."""
    def build(closes):
        bars = []
        prev = closes[0]
        for i, close in enumerate(closes):
            bars.append(_bar(i, close, open_=prev, high=max(prev, close) + 0.1, low=min(prev, close) - 0.1))
            prev = close
        return bars
    return build
