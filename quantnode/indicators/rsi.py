"""
Relative Strength Index (Wilder smoothing)

Formula:
- Seed averages: mean gain / mean loss over the first `period` deltas
- Then: avg = (avg * (period - 1) + current) / period
- RS = avg_gain / avg_loss
- RSI = 100 - 100 / (1 + RS), or 100 when avg_loss is 0
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .base import Indicator, IndicatorSignal, SignalType

logger = logging.getLogger(__name__)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def compute_rsi(closes: Sequence[float], period: int) -> List[Optional[float]]:
    """
    Compute Wilder's RSI over a full close series.

    Args:
        closes: Close prices in time order
        period: Lookback period (>= 1)

    Returns:
        List the same length as `closes`; the first `period` entries are
        None (warm-up). All None when there are not more than `period` closes.
    """
    if period < 1:
        raise ValueError(f"RSI period must be at least 1, got {period}")

    result: List[Optional[float]] = [None] * len(closes)
    if len(closes) <= period:
        return result

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        delta = closes[i] - closes[i - 1]
        if delta > 0:
            gains += delta
        else:
            losses -= delta

    avg_gain = gains / period
    avg_loss = losses / period
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        delta = closes[i] - closes[i - 1]
        gain = delta if delta > 0 else 0.0
        loss = -delta if delta < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


class RSIIndicator(Indicator):
    """
    RSI indicator for OHLCV DataFrames.

    Parameters:
        period: Lookback period (default: 14)
        oversold: Oversold level (default: 30)
        overbought: Overbought level (default: 70)

    Columns added:
        - {name}_value: RSI value (NaN during warm-up)
    """

    def __init__(
        self,
        name: str = "rsi",
        period: int = 14,
        oversold: float = 30.0,
        overbought: float = 70.0
    ):
        super().__init__(name, period=period, oversold=oversold, overbought=overbought)
        self.period = period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def value_column(self) -> str:
        return f"{self.name}_value"

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        if not self.validate_data(data):
            logger.warning("Invalid data for RSI calculation")
            return data

        df = data.copy()
        values = compute_rsi(df["close"].astype(float).tolist(), self.period)
        df[self.value_column] = np.array(
            [np.nan if v is None else v for v in values],
            dtype=float
        )
        return df

    def get_signal(self, data: pd.DataFrame) -> IndicatorSignal:
        """
        Classify the latest RSI reading.

        Returns:
            OVERSOLD at or below the oversold level, OVERBOUGHT at or above
            the overbought level, NEUTRAL otherwise or during warm-up.
        """
        if self.value_column not in data.columns or data.empty:
            return IndicatorSignal(signal_type=SignalType.NEUTRAL, value=0.0)

        current = data[self.value_column].iloc[-1]
        if pd.isna(current):
            return IndicatorSignal(
                signal_type=SignalType.NEUTRAL,
                value=0.0,
                metadata={"warming_up": True}
            )

        current = float(current)
        if current <= self.oversold:
            signal_type = SignalType.OVERSOLD
            strength = min(1.0, (self.oversold - current) / self.oversold) if self.oversold > 0 else 1.0
        elif current >= self.overbought:
            signal_type = SignalType.OVERBOUGHT
            headroom = 100 - self.overbought
            strength = min(1.0, (current - self.overbought) / headroom) if headroom > 0 else 1.0
        else:
            signal_type = SignalType.NEUTRAL
            strength = 0.0

        return IndicatorSignal(
            signal_type=signal_type,
            value=current,
            strength=strength,
            metadata={"period": self.period}
        )
