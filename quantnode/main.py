"""
Command-line entry point for QuantNode.

    python -m quantnode.main backtest --symbol SOFI --strategy grid_trading -p moveDownPercent=3
    python -m quantnode.main serve
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .backtesting import BacktestEngine, BacktestParams
from .config import load_config
from .database import ConnectionManager, SQLiteBarSource, init_db
from .strategies import resolve_strategy_params
from .utils.logger import get_logger, setup_logging
from .validation import (
    ValidationError,
    validate_balance,
    validate_date,
    validate_strategy_type,
    validate_symbol,
)

logger = get_logger("main")


def parse_strategy_params(pairs: List[str]) -> Dict[str, str]:
    """Turn ["key=value", ...] into a dict; values are coerced later by the strategy."""
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"Strategy parameter must look like key=value, got {pair!r}")
        params[key.strip()] = value.strip()
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quantnode", description="QuantNode strategy backtester")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--plain-logs", action="store_true", help="Human-readable logs instead of JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    bt = sub.add_parser("backtest", help="Run a backtest against the local bar store")
    bt.add_argument("--symbol", default=None)
    bt.add_argument("--start", default=None, help="Start date (YYYY-MM-DD)")
    bt.add_argument("--end", default=None, help="End date (YYYY-MM-DD)")
    bt.add_argument("--balance", default=None, help="Initial balance")
    bt.add_argument("--strategy", default=None, help="grid_trading or rsi_mean_reversion")
    bt.add_argument("-p", "--param", action="append", default=[], help="Strategy parameter key=value")
    bt.add_argument("--db", default=None, help="Path to the SQLite bar store")
    bt.add_argument("--json", dest="json_out", default=None, help="Write the full result as JSON to this path")

    sub.add_parser("serve", help="Run the HTTP API")
    return parser


def run_backtest_command(args: argparse.Namespace) -> int:
    config = load_config()
    defaults = config.backtest

    try:
        params = BacktestParams(
            symbol=validate_symbol(args.symbol or defaults.symbol),
            initial_balance=validate_balance(args.balance if args.balance is not None else defaults.initial_balance),
            start_date=validate_date(args.start or defaults.start_date),
            end_date=validate_date(args.end or defaults.end_date),
            strategy_type=validate_strategy_type(args.strategy or defaults.strategy_type),
            strategy_params=parse_strategy_params(args.param),
        )
        resolve_strategy_params(params.strategy_type, params.strategy_params)
    except ValueError as e:
        print(f"Invalid input: {e}")
        return 2

    manager = ConnectionManager(args.db or config.database.db_path)
    try:
        init_db(manager)
        engine = BacktestEngine(SQLiteBarSource(manager), max_equity_points=defaults.max_equity_points)
        result = engine.run(params)
    finally:
        manager.close()

    result.print_summary()

    if args.json_out:
        path = Path(args.json_out)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(result.to_dict(), indent=2))
        print(f"Result written to {path}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    setup_logging(
        level=args.log_level or config.logging.log_level,
        json_format=config.logging.json_logging and not args.plain_logs
    )

    if args.command == "serve":
        from .api.server import run_server
        run_server(config)
        return 0

    try:
        return run_backtest_command(args)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    sys.exit(main())
