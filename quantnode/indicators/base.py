"""
Indicator Base

Common interface for indicators that annotate an OHLCV DataFrame.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

import pandas as pd

REQUIRED_COLUMNS = ("open", "high", "low", "close")


class SignalType(Enum):
    """Classification of the latest indicator reading."""
    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"
    NEUTRAL = "neutral"


@dataclass
class IndicatorSignal:
    """Latest reading of an indicator."""
    signal_type: SignalType
    value: float
    strength: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_bullish(self) -> bool:
        return self.signal_type == SignalType.OVERSOLD

    @property
    def is_bearish(self) -> bool:
        return self.signal_type == SignalType.OVERBOUGHT


class Indicator(ABC):
    """
    Base class for DataFrame indicators.

    Subclasses add their own columns (prefixed with `name`) in `calculate`
    and summarize the last row in `get_signal`.
    """

    def __init__(self, name: str, **params):
        self.name = name
        self.params = params

    @abstractmethod
    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError

    @abstractmethod
    def get_signal(self, data: pd.DataFrame) -> IndicatorSignal:
        raise NotImplementedError

    def validate_data(self, data: pd.DataFrame) -> bool:
        """Check the frame is non-empty and has OHLC columns."""
        if data is None or data.empty:
            return False
        return all(col in data.columns for col in REQUIRED_COLUMNS)
