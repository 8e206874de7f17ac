"""Data boundary: bar sources in, simulation sinks out."""

from scalp_backtester.data.sources import (
    BarSource,
    FrameBarSource,
    bars_from_frame,
    normalize_frame,
    resample_frame,
)
from scalp_backtester.data.sinks import (
    SimulationSink,
    MemorySink,
    CsvSink,
    ledger_frame,
)

__all__ = [
    "BarSource",
    "FrameBarSource",
    "bars_from_frame",
    "normalize_frame",
    "resample_frame",
    "SimulationSink",
    "MemorySink",
    "CsvSink",
    "ledger_frame",
]
