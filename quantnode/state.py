"""
Simulation State

Mutable per-run state shared between the backtest engine and the strategy
rule sets. A fresh state is created for every run; nothing here outlives a
single simulation.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Tuple

from quantnode.models import Bar, Position


class DailyHighTracker:
    """
    Rolling map of calendar day -> highest `high` seen that day.

    A day is committed to the map only when the first bar of the next day
    arrives. Until then its running maximum lives in `max_seen_today`.
    """

    def __init__(self):
        self._highs: Dict[str, float] = {}
        self.current_day = ""
        self.max_seen_today = 0.0

    def update(self, bar: Bar) -> None:
        """Consume the next bar, committing the previous day on rollover."""
        if bar.date != self.current_day:
            if self.current_day:
                self._highs[self.current_day] = self.max_seen_today
            self.current_day = bar.date
            self.max_seen_today = 0.0

        if bar.high > self.max_seen_today:
            self.max_seen_today = bar.high

    def lookback_high(self, days: int = 7) -> float:
        """
        Highest high over the still-open current day and the `days`
        calendar days before it.
        """
        if not self.current_day:
            return 0.0

        current = date.fromisoformat(self.current_day)
        max_high = self.max_seen_today
        for offset in range(1, days + 1):
            key = (current - timedelta(days=offset)).isoformat()
            high = self._highs.get(key, 0.0)
            if high > max_high:
                max_high = high
        return max_high


@dataclass
class SimulationState:
    """Cash, open lots and running performance metrics for one run."""
    initial_balance: float
    current_balance: float
    open_positions: List[Position] = field(default_factory=list)

    # Maintained incrementally; always equals the sum over open_positions
    total_shares_held: float = 0.0
    total_invested_in_unsold: float = 0.0
    total_profit: float = 0.0

    # Performance metrics
    peak_value: float = 0.0
    min_equity: float = 0.0
    min_equity_time: str = ""
    max_drawdown_ratio: float = 0.0
    max_drawdown_amount: float = 0.0

    daily_highs: DailyHighTracker = field(default_factory=DailyHighTracker)
    next_position_id: int = 1

    @classmethod
    def start(cls, initial_balance: float) -> "SimulationState":
        return cls(
            initial_balance=initial_balance,
            current_balance=initial_balance,
            peak_value=initial_balance,
            min_equity=initial_balance,
        )

    def equity(self, price: float) -> float:
        """Cash plus mark-to-market value of held shares."""
        return self.current_balance + self.total_shares_held * price

    def mark_to_market(self, equity: float, timestamp: str) -> None:
        """Update peak, trough and drawdown maxima with the bar's equity."""
        if equity > self.peak_value:
            self.peak_value = equity
        if equity < self.min_equity:
            self.min_equity = equity
            self.min_equity_time = timestamp

        drawdown_amount = self.peak_value - equity
        drawdown_ratio = drawdown_amount / self.peak_value if self.peak_value > 0 else 0.0

        if drawdown_ratio > self.max_drawdown_ratio:
            self.max_drawdown_ratio = drawdown_ratio
        if drawdown_amount > self.max_drawdown_amount:
            self.max_drawdown_amount = drawdown_amount

    def open_position(self, price: float, amount: float, timestamp: str) -> Position:
        """Spend `amount` cash on a new lot at `price`."""
        shares = amount / price
        position = Position(
            id=self.next_position_id,
            buy_price=price,
            shares=shares,
            amount=amount,
            buy_time=timestamp,
        )
        self.next_position_id += 1

        self.current_balance -= amount
        self.total_shares_held += shares
        self.total_invested_in_unsold += amount
        self.open_positions.append(position)
        return position

    def close_position(self, position: Position, price: float) -> Tuple[float, float]:
        """
        Sell a whole lot at `price`.

        Returns:
            (sell_amount, realized_profit)
        """
        sell_amount = position.shares * price
        profit = sell_amount - position.amount

        self.current_balance += sell_amount
        self.total_profit += profit
        self.total_shares_held -= position.shares
        self.total_invested_in_unsold -= position.amount
        self.open_positions.remove(position)
        return sell_amount, profit

    @property
    def average_price_unsold(self) -> float:
        if self.total_shares_held > 0:
            return self.total_invested_in_unsold / self.total_shares_held
        return 0.0
