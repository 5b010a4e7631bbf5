"""
Shared data models for bars, open lots and bar sources.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Protocol


@dataclass(frozen=True)
class Bar:
    """One OHLCV sample. Bars are consumed in ascending datetime order."""
    datetime: str
    date: str  # Calendar-day key (YYYY-MM-DD)
    time: str
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Bar":
        """Build a bar from a database row or dict, deriving date/time from datetime when missing."""
        data = dict(row)
        stamp = str(data["datetime"])
        day = data.get("date")
        clock = data.get("time")
        return cls(
            datetime=stamp,
            date=str(day) if day else stamp[:10],
            time=str(clock) if clock else stamp[11:19],
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=float(data.get("volume") or 0.0),
        )

    def to_dict(self) -> dict:
        return {
            "datetime": self.datetime,
            "date": self.date,
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


class TradeType(str, Enum):
    """Side of an executed trade."""
    BUY = "BUY"
    SELL = "SELL"


@dataclass
class Position:
    """An open lot. Lots are sold whole, never partially."""
    id: int
    buy_price: float
    shares: float
    amount: float  # Cash spent
    buy_time: str


class BarSource(Protocol):
    """Anything that returns bars for a symbol between two dates, ascending."""

    def fetch_bars(self, symbol: str, start_date: str, end_date: str) -> List[Bar]:
        ...
