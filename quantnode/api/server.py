"""
FastAPI server for the QuantNode backtester.
Exposes backtest runs, recent market data and the strategy catalogue.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from quantnode.backtesting import BacktestEngine, BacktestParams
from quantnode.config import Config, load_config
from quantnode.database import ConnectionManager, SQLiteBarSource, init_db
from quantnode.strategies import list_strategies, resolve_strategy_params
from quantnode.validation import (
    ValidationError,
    validate_balance,
    validate_date,
    validate_limit,
    validate_strategy_type,
    validate_symbol,
)

logger = logging.getLogger(__name__)


class BacktestRequest(BaseModel):
    """Body of POST /api/backtest. Missing fields take configured defaults."""
    symbol: Optional[str] = None
    initialBalance: Optional[Any] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    strategyType: Optional[str] = None
    strategyParams: Dict[str, Any] = Field(default_factory=dict)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    config: Optional[Config] = None,
    bar_source: Optional[SQLiteBarSource] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Loaded configuration (defaults to environment)
        bar_source: Bar source to query (defaults to the configured SQLite store)
    """
    config = config or load_config()
    if bar_source is None:
        manager = ConnectionManager(config.database.db_path)
        init_db(manager)
        bar_source = SQLiteBarSource(manager)

    defaults = config.backtest
    engine = BacktestEngine(bar_source, max_equity_points=defaults.max_equity_points)

    app = FastAPI(title="QuantNode Backtester API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Health check."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/backtest")
    async def api_backtest(request: BacktestRequest):
        """Run a backtest and return trades, equity history and summary."""
        logger.info(f"Incoming backtest request: {request.model_dump()}")

        try:
            params = BacktestParams(
                symbol=validate_symbol(request.symbol or defaults.symbol),
                initial_balance=validate_balance(
                    request.initialBalance if request.initialBalance is not None else defaults.initial_balance
                ),
                start_date=validate_date(request.startDate or defaults.start_date),
                end_date=validate_date(request.endDate or defaults.end_date),
                strategy_type=validate_strategy_type(request.strategyType or defaults.strategy_type),
                strategy_params=request.strategyParams,
            )
            # Non-numeric strategy parameters surface here, not inside the run
            resolve_strategy_params(params.strategy_type, params.strategy_params)
        except ValueError as e:
            return _error(400, str(e))

        try:
            result = await asyncio.to_thread(engine.run, params)
        except Exception as e:
            logger.error(f"Backtest error for {params.symbol}: {e}")
            return _error(500, str(e))

        logger.info(f"Backtest completed successfully. Summary: {result.summary.to_dict()}")
        return JSONResponse(content=result.to_dict())

    @app.get("/api/data")
    async def api_data(symbol: Optional[str] = None, limit: Optional[str] = None):
        """Most recent bars for a symbol, newest first."""
        try:
            clean_symbol = validate_symbol(symbol or defaults.symbol)
            clean_limit = validate_limit(limit if limit is not None else 100, defaults.data_limit_max)
        except ValidationError as e:
            return _error(400, str(e))

        try:
            rows = await asyncio.to_thread(bar_source.fetch_recent_bars, clean_symbol, clean_limit)
        except Exception as e:
            logger.error(f"Data fetch error: {e}")
            return _error(500, str(e))
        return JSONResponse(content=rows)

    @app.get("/api/symbols")
    async def api_symbols():
        """Active symbols."""
        try:
            symbols = await asyncio.to_thread(bar_source.list_active_symbols)
        except Exception as e:
            logger.error(f"Symbols fetch error: {e}")
            return _error(500, str(e))
        return JSONResponse(content=symbols)

    @app.get("/api/strategies")
    async def api_strategies():
        """Available strategies with parameter metadata."""
        return JSONResponse(content=list_strategies())

    return app


def run_server(config: Optional[Config] = None):
    """Run the API server."""
    config = config or load_config()
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    run_server()
