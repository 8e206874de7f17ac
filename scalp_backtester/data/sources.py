"""
Bar sources: fetch(ticker, start, end, interval) -> list of Bar.
FrameBarSource serves pandas OHLCV frames and resamples 1-minute data on request.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from scalp_backtester.core.types import Bar
from scalp_backtester.utils.timeframes import timeframe_minutes

logger = logging.getLogger("scalp_backtester.data")

OHLCV = ["open", "high", "low", "close", "volume"]
RESAMPLED_INTERVALS = ("1h", "4h", "1d")


class BarSource(ABC):
    """Historical bar provider. May return an empty list; callers decide what that means."""

    @abstractmethod
    def fetch(self, ticker: str, start_date: str, end_date: str, interval: str = "1d") -> List[Bar]:
        pass


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Lowercase columns, find the time column (time / timestamp / date / open_time),
    parse it (epoch milliseconds when numeric), sort, and drop duplicate timestamps.
    """
    df = df.rename(columns=str.lower)
    for name in ("time", "timestamp", "date", "open_time"):
        if name in df.columns:
            time_col = name
            break
    else:
        raise ValueError("OHLCV frame needs a time, timestamp, date or open_time column")
    missing = [c for c in OHLCV[:4] if c not in df.columns]
    if missing:
        raise ValueError(f"OHLCV frame missing columns: {missing}")

    out = pd.DataFrame()
    if pd.api.types.is_numeric_dtype(df[time_col]):
        out["time"] = pd.to_datetime(df[time_col], unit="ms")
    else:
        out["time"] = pd.to_datetime(df[time_col])
    for col in OHLCV:
        out[col] = df[col].astype(float) if col in df.columns else 0.0
    out = out.sort_values("time", kind="stable").drop_duplicates(subset="time", keep="first")
    return out.reset_index(drop=True)


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """Convert an OHLCV DataFrame into time-ordered Bar records."""
    if df is None or df.empty:
        return []
    df = normalize_frame(df)
    return [
        Bar(
            time=row.time.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


def resample_frame(df: pd.DataFrame, interval: str) -> pd.DataFrame:
    """
    Aggregate 1-minute bars to 1h / 4h / 1d buckets aligned to the epoch.
    1m and any other interval are returned unchanged.
    """
    if df.empty or interval not in RESAMPLED_INTERVALS:
        return df
    rule = f"{timeframe_minutes(interval)}min"
    out = (
        df.set_index("time")
        .resample(rule, origin="epoch")
        .agg({"open": "first", "high": "max", "low": "min", "close": "last", "volume": "sum"})
        .dropna(subset=["open"])
        .reset_index()
    )
    return out


class FrameBarSource(BarSource):
    """In-memory source: one OHLCV DataFrame per ticker."""

    def __init__(self, frames: Optional[Dict[str, pd.DataFrame]] = None):
        self._frames: Dict[str, pd.DataFrame] = {}
        for ticker, df in (frames or {}).items():
            self.add(ticker, df)

    def add(self, ticker: str, df: pd.DataFrame) -> None:
        self._frames[ticker.upper()] = normalize_frame(df)

    @classmethod
    def from_csv(cls, ticker: str, path: Path) -> "FrameBarSource":
        df = pd.read_csv(path)
        logger.info("Loaded %d rows for %s from %s", len(df), ticker, path)
        return cls({ticker: df})

    def fetch(self, ticker: str, start_date: str, end_date: str, interval: str = "1d") -> List[Bar]:
        df = self._frames.get(ticker.upper())
        if df is None or df.empty:
            logger.warning("No price data for %s", ticker)
            return []
        start = pd.Timestamp(start_date)
        end = pd.Timestamp(end_date)
        if end == end.normalize():
            # Date-only end: include the whole day.
            mask = (df["time"] >= start) & (df["time"] < end + pd.Timedelta(days=1))
        else:
            mask = (df["time"] >= start) & (df["time"] <= end)
        window = resample_frame(df.loc[mask].reset_index(drop=True), interval)
        return bars_from_frame(window)
