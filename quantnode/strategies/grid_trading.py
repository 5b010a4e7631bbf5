"""
Grid Trading Strategy

Buys fixed-size lots on percentage dips and sells each lot independently once
it reaches its profit target.

Logic:
- SELL: every lot whose close >= buy_price * (1 + up%)
- BUY (no trade yet): close <= 7-day high * (1 - down%)
- BUY: close <= price of the last buy/sell * (1 - down%)
- BUY (no lots open): close <= 7-day high * (1 - down%), re-entry
"""
import logging
from typing import List, Optional

from quantnode.models import Bar, TradeType
from quantnode.state import SimulationState
from .base import BuySignal, ParameterSpec, SellSignal, Strategy
from .params import GridParams

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 7


class GridTradingStrategy(Strategy):
    """
    Layered dip-buying with per-lot take profit.

    Parameters:
        move_down_percent: Dip that triggers a buy (default: 2)
        move_up_percent: Per-lot profit target (default: 5)
        amount_to_buy: Cash spent per lot (default: 1000)
    """

    name = "Grid Trading"
    description = (
        "A quantitative strategy that buys when the price drops by a certain "
        "percentage and sells when it rises by a target percentage."
    )
    parameters = (
        ParameterSpec("moveDownPercent", "Grid Step (Down)", 0.5, 20, 0.5, "%", 2),
        ParameterSpec("moveUpPercent", "Profit Target (Up)", 1, 30, 0.5, "%", 5),
        ParameterSpec("amountToBuy", "Buy Size", 100, 10000, 100, "$", 1000),
    )

    def __init__(self, params: Optional[GridParams] = None):
        self.params = params or GridParams()
        self.move_down_decimal = self.params.move_down_percent / 100
        self.move_up_decimal = self.params.move_up_percent / 100

        self.has_traded = False
        self.reference_price = 0.0

    def select_sells(self, bar: Bar, index: int, state: SimulationState) -> List[SellSignal]:
        sells = []
        for position in state.open_positions:
            target = position.buy_price * (1 + self.move_up_decimal)
            if bar.close >= target:
                sells.append(SellSignal(
                    position=position,
                    reason=f"Sold lot bought at {position.buy_price:.2f}"
                ))
        return sells

    def check_buy(self, bar: Bar, index: int, state: SimulationState) -> Optional[BuySignal]:
        down = self.params.move_down_percent

        if not self.has_traded:
            high = state.daily_highs.lookback_high(LOOKBACK_DAYS)
            if self._dropped_from(high, bar.close):
                return BuySignal(
                    amount=self.params.amount_to_buy,
                    reason=f"Initial entry: drop of {down:g}% from 7-day high ({high:.2f})"
                )
            return None

        if bar.close <= self.reference_price * (1 - self.move_down_decimal):
            return BuySignal(
                amount=self.params.amount_to_buy,
                reason=f"Drop of {down:g}% from last action ({self.reference_price:.2f})"
            )

        if not state.open_positions:
            high = state.daily_highs.lookback_high(LOOKBACK_DAYS)
            if self._dropped_from(high, bar.close):
                return BuySignal(
                    amount=self.params.amount_to_buy,
                    reason=f"Re-entry: drop of {down:g}% from 7-day high ({high:.2f})"
                )

        return None

    def on_trade(self, trade_type: TradeType, price: float, bar: Bar) -> None:
        self.reference_price = price
        self.has_traded = True

    def _dropped_from(self, high: float, price: float) -> bool:
        return high > 0 and price <= high * (1 - self.move_down_decimal)
