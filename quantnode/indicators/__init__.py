"""
Technical Indicators Module

Pure indicator functions plus DataFrame wrappers for OHLCV data.
"""
from .base import Indicator, IndicatorSignal, SignalType
from .rsi import RSIIndicator, compute_rsi

__all__ = [
    "Indicator",
    "IndicatorSignal",
    "SignalType",
    "RSIIndicator",
    "compute_rsi",
]
