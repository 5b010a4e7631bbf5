"""
RSI Mean Reversion Strategy

Scales into oversold conditions and exits the whole book when overbought.

Logic:
- SELL: RSI >= overbought -> close every open lot
- BUY: RSI <= oversold, cash >= 10% of the initial balance, no buy yet on
  this calendar day, fewer than 5 lots open. Each lot is 10% of the
  initial balance.
- No signal while RSI is warming up.

Only buys set the per-day throttle, so a sell never blocks a same-day buy.
"""
import logging
from typing import List, Optional, Sequence

from quantnode.indicators import compute_rsi
from quantnode.models import Bar, TradeType
from quantnode.state import SimulationState
from .base import BuySignal, ParameterSpec, SellSignal, Strategy
from .params import RsiParams

logger = logging.getLogger(__name__)


class RsiMeanReversionStrategy(Strategy):
    """
    Oversold entries, overbought full exit.

    Parameters:
        rsi_period: RSI lookback (default: 14)
        oversold_threshold: Entry level (default: 30)
        overbought_threshold: Exit level (default: 70)
    """

    name = "RSI Mean Reversion"
    description = (
        "A strategy that uses the Relative Strength Index (RSI) to identify "
        "oversold conditions for entry and overbought conditions for exit."
    )
    parameters = (
        ParameterSpec("rsiPeriod", "RSI Period", 2, 30, 1, "", 14),
        ParameterSpec("oversoldThreshold", "Oversold Level", 10, 40, 1, "", 30),
        ParameterSpec("overboughtThreshold", "Overbought Level", 60, 90, 1, "", 70),
    )

    def __init__(self, params: Optional[RsiParams] = None):
        self.params = params or RsiParams()
        self.rsi: List[Optional[float]] = []
        self.last_trade_day: Optional[str] = None

    def prepare(self, bars: Sequence[Bar], state: SimulationState) -> None:
        self.rsi = compute_rsi([bar.close for bar in bars], self.params.rsi_period)
        warm = sum(1 for value in self.rsi if value is not None)
        logger.debug(f"Precomputed RSI({self.params.rsi_period}) over {len(bars)} bars, {warm} defined")

    def select_sells(self, bar: Bar, index: int, state: SimulationState) -> List[SellSignal]:
        rsi = self.rsi[index]
        if rsi is None or not state.open_positions:
            return []
        if rsi < self.params.overbought_threshold:
            return []

        reason = f"RSI {rsi:.2f} >= overbought {self.params.overbought_threshold:g}"
        return [SellSignal(position=p, reason=reason) for p in state.open_positions]

    def check_buy(self, bar: Bar, index: int, state: SimulationState) -> Optional[BuySignal]:
        rsi = self.rsi[index]
        if rsi is None or rsi > self.params.oversold_threshold:
            return None

        amount = state.initial_balance * self.params.position_fraction
        if state.current_balance < amount:
            return None
        if self.last_trade_day == bar.date:
            return None
        if len(state.open_positions) >= self.params.max_open_positions:
            return None

        return BuySignal(
            amount=amount,
            reason=f"RSI {rsi:.2f} <= oversold {self.params.oversold_threshold:g}"
        )

    def on_trade(self, trade_type: TradeType, price: float, bar: Bar) -> None:
        if trade_type == TradeType.BUY:
            self.last_trade_day = bar.date
