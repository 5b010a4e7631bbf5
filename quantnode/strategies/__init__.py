"""
Strategy Module

Decision rules plugged into the backtest engine at every bar.
"""
from .base import BuySignal, ParameterSpec, SellSignal, Strategy
from .grid_trading import GridTradingStrategy
from .params import (
    GridParams,
    RsiParams,
    StrategyParams,
    StrategyType,
    parse_strategy_type,
    resolve_strategy_params,
)
from .registry import create_strategy, list_strategies
from .rsi_mean_reversion import RsiMeanReversionStrategy

__all__ = [
    "Strategy",
    "BuySignal",
    "SellSignal",
    "ParameterSpec",
    "GridTradingStrategy",
    "RsiMeanReversionStrategy",
    "GridParams",
    "RsiParams",
    "StrategyParams",
    "StrategyType",
    "parse_strategy_type",
    "resolve_strategy_params",
    "create_strategy",
    "list_strategies",
]
