"""
Structured logging for QuantNode.
Supports JSON logging for log aggregation.
"""

import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger

ROOT_LOGGER = "quantnode"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['timestamp'] = self.formatTime(record, self.datefmt)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    logger_name: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Whether to emit one JSON object per line
        logger_name: Optional specific logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name or ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = CustomJsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger with the given name."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class BacktestLogger:
    """Specialized logger for backtest run events."""

    def __init__(self):
        self.logger = get_logger("backtest")

    def run_started(self, symbol: str, strategy_type: str, start_date: str, end_date: str):
        self.logger.info(
            f"Starting strategy analysis for {symbol}",
            extra={
                "event": "run_started",
                "symbol": symbol,
                "strategy_type": strategy_type,
                "start_date": start_date,
                "end_date": end_date
            }
        )

    def bars_loaded(self, symbol: str, count: int):
        self.logger.info(
            f"Retrieved {count} rows for {symbol}",
            extra={
                "event": "bars_loaded",
                "symbol": symbol,
                "bar_count": count
            }
        )

    def run_completed(
        self,
        symbol: str,
        trade_count: int,
        final_account_value: float,
        elapsed_ms: float
    ):
        self.logger.info(
            f"Processing complete for {symbol}",
            extra={
                "event": "run_completed",
                "symbol": symbol,
                "trade_count": trade_count,
                "final_account_value": final_account_value,
                "elapsed_ms": round(elapsed_ms, 2)
            }
        )

    def run_failed(self, symbol: str, error: str):
        self.logger.error(
            f"Bar query failed for {symbol}",
            extra={
                "event": "run_failed",
                "symbol": symbol,
                "error": error
            }
        )
