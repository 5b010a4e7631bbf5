"""HTTP API for running backtests."""
from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
