"""
Strategy Base

Interface between the backtest engine and a strategy rule set.

Per bar the engine asks for sells first, executes them, then asks whether to
buy. The buy decision therefore sees cash, open lots and the strategy's own
memory as they are after that bar's sells.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from quantnode.models import Bar, Position, TradeType
from quantnode.state import SimulationState


@dataclass(frozen=True)
class ParameterSpec:
    """UI metadata for a tunable strategy parameter."""
    key: str
    label: str
    min: float
    max: float
    step: float
    unit: str
    default: float

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "unit": self.unit,
            "defaultValue": self.default,
        }


@dataclass(frozen=True)
class SellSignal:
    """Close one open lot."""
    position: Position
    reason: str


@dataclass(frozen=True)
class BuySignal:
    """Open a new lot for `amount` cash."""
    amount: float
    reason: str


class Strategy(ABC):
    """
    Base class for strategy rule sets.

    A strategy instance is created per run and may keep memory between bars
    (reference prices, last trade day) but never across runs.
    """

    name: str = ""
    description: str = ""
    parameters: Sequence[ParameterSpec] = ()

    def prepare(self, bars: Sequence[Bar], state: SimulationState) -> None:
        """Called once with the full bar sequence before the first bar."""

    @abstractmethod
    def select_sells(self, bar: Bar, index: int, state: SimulationState) -> List[SellSignal]:
        """Lots to close on this bar, in execution order."""
        raise NotImplementedError

    @abstractmethod
    def check_buy(self, bar: Bar, index: int, state: SimulationState) -> Optional[BuySignal]:
        """Whether to open a new lot on this bar (after sells were executed)."""
        raise NotImplementedError

    def on_trade(self, trade_type: TradeType, price: float, bar: Bar) -> None:
        """Notification that the engine executed a trade for this strategy."""
