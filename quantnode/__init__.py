"""
QuantNode Backtester

Replays a configurable trading strategy against historical OHLC bars for a
single symbol and reports the trade ledger, equity curve and risk/return
summary.

Key Modules:
- quantnode.backtesting: Bar-by-bar simulation engine and result models
- quantnode.strategies: Grid trading and RSI mean-reversion rule sets
- quantnode.indicators: Technical indicators (Wilder RSI)
- quantnode.database: SQLite bar storage and connection management
- quantnode.api: FastAPI server exposing backtests and market data

Entry points:
- python -m quantnode.main backtest --symbol SOFI
- python -m quantnode.main serve
"""

__version__ = "0.3.0"
