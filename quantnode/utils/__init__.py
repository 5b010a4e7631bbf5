# Utilities
from .logger import BacktestLogger, get_logger, setup_logging

__all__ = ["setup_logging", "get_logger", "BacktestLogger"]
