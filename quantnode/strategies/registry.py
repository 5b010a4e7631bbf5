"""
Strategy Registry

Maps strategy ids onto rule-set classes. A strategy is selected once per run
and then invoked uniformly by the engine for every bar.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from .base import Strategy
from .grid_trading import GridTradingStrategy
from .params import StrategyType, parse_strategy_type, resolve_strategy_params
from .rsi_mean_reversion import RsiMeanReversionStrategy

logger = logging.getLogger(__name__)

STRATEGY_CLASSES: Dict[StrategyType, Type[Strategy]] = {
    StrategyType.GRID_TRADING: GridTradingStrategy,
    StrategyType.RSI_MEAN_REVERSION: RsiMeanReversionStrategy,
}


def create_strategy(
    strategy_type: Union[str, StrategyType],
    raw_params: Optional[Mapping[str, Any]] = None
) -> Strategy:
    """
    Build a fresh strategy instance with resolved parameters.

    Args:
        strategy_type: Strategy id (e.g. "grid_trading")
        raw_params: Free-form parameter mapping; missing keys use defaults

    Raises:
        ValueError: Unknown strategy id or non-numeric parameter value
    """
    kind = parse_strategy_type(strategy_type)
    params = resolve_strategy_params(kind, raw_params)
    strategy = STRATEGY_CLASSES[kind](params)
    logger.debug(f"Created {kind.value} strategy with {params}")
    return strategy


def list_strategies() -> List[Dict[str, Any]]:
    """Catalogue of available strategies and their tunable parameters."""
    return [
        {
            "id": kind.value,
            "name": cls.name,
            "description": cls.description,
            "parameters": [spec.to_dict() for spec in cls.parameters],
        }
        for kind, cls in STRATEGY_CLASSES.items()
    ]
