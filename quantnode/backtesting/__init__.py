"""
Backtesting Module

Replay strategies on historical bars.
"""
from .engine import MAX_EQUITY_POINTS, BacktestEngine, BacktestParams, run_backtest
from .result import BacktestResult, BacktestSummary, EquitySample, TradeRecord

__all__ = [
    "BacktestEngine",
    "BacktestParams",
    "BacktestResult",
    "BacktestSummary",
    "EquitySample",
    "TradeRecord",
    "MAX_EQUITY_POINTS",
    "run_backtest",
]
