"""
Strategy Parameters

Typed, fully-defaulted parameter sets for each strategy. Raw request
mappings (camelCase keys from the API, or snake_case from Python callers)
are resolved here once, so the simulation loop only sees typed values.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union


class StrategyType(str, Enum):
    """Available strategy rule sets."""
    GRID_TRADING = "grid_trading"
    RSI_MEAN_REVERSION = "rsi_mean_reversion"


def _pick(raw: Mapping[str, Any], camel: str, snake: str, default: Any) -> Any:
    for key in (camel, snake):
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return default


@dataclass(frozen=True)
class GridParams:
    """Grid trading parameters (percentages are whole numbers, 2 = 2%)."""
    move_down_percent: float = 2.0
    move_up_percent: float = 5.0
    amount_to_buy: float = 1000.0

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]] = None) -> "GridParams":
        raw = raw or {}
        return cls(
            move_down_percent=float(_pick(raw, "moveDownPercent", "move_down_percent", cls.move_down_percent)),
            move_up_percent=float(_pick(raw, "moveUpPercent", "move_up_percent", cls.move_up_percent)),
            amount_to_buy=float(_pick(raw, "amountToBuy", "amount_to_buy", cls.amount_to_buy)),
        )


@dataclass(frozen=True)
class RsiParams:
    """RSI mean-reversion parameters."""
    rsi_period: int = 14
    oversold_threshold: float = 30.0
    overbought_threshold: float = 70.0

    # Fixed sizing rules of the strategy
    position_fraction: float = 0.10
    max_open_positions: int = 5

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]] = None) -> "RsiParams":
        raw = raw or {}
        return cls(
            rsi_period=int(float(_pick(raw, "rsiPeriod", "rsi_period", cls.rsi_period))),
            oversold_threshold=float(_pick(raw, "oversoldThreshold", "oversold_threshold", cls.oversold_threshold)),
            overbought_threshold=float(_pick(raw, "overboughtThreshold", "overbought_threshold", cls.overbought_threshold)),
        )


StrategyParams = Union[GridParams, RsiParams]


def parse_strategy_type(value: Union[str, StrategyType]) -> StrategyType:
    """Map a strategy id onto StrategyType, raising ValueError for unknown ids."""
    try:
        return StrategyType(value)
    except ValueError:
        valid = ", ".join(t.value for t in StrategyType)
        raise ValueError(f"Unknown strategy type: {value!r} (expected one of: {valid})") from None


def resolve_strategy_params(
    strategy_type: Union[str, StrategyType],
    raw: Optional[Mapping[str, Any]] = None
) -> StrategyParams:
    """
    Resolve a free-form parameter mapping for the given strategy.

    Unknown keys are ignored; missing keys take the strategy defaults.
    """
    kind = parse_strategy_type(strategy_type)
    if kind == StrategyType.GRID_TRADING:
        return GridParams.from_dict(raw)
    return RsiParams.from_dict(raw)
