"""
Shared fixtures for backtester tests.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

import pytest

from quantnode.models import Bar


def create_bar(stamp: datetime, close: float, high: Optional[float] = None, low: Optional[float] = None) -> Bar:
    """Create a bar; high/low default to the close."""
    return Bar(
        datetime=stamp.strftime("%Y-%m-%d %H:%M:%S"),
        date=stamp.strftime("%Y-%m-%d"),
        time=stamp.strftime("%H:%M:%S"),
        open=close,
        high=close if high is None else high,
        low=close if low is None else low,
        close=close,
        volume=1000.0,
    )


def daily_bars(closes: Sequence[float], start: date = date(2024, 1, 1)) -> List[Bar]:
    """One bar per calendar day at 16:00."""
    base = datetime(start.year, start.month, start.day, 16, 0)
    return [create_bar(base + timedelta(days=i), close) for i, close in enumerate(closes)]


@pytest.fixture
def make_daily_bars():
    return daily_bars


@pytest.fixture
def make_bar():
    return create_bar
