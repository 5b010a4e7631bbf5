"""
Configuration module for QuantNode.
Loads settings from environment variables with validation.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class DatabaseConfig:
    """Historical bar store."""
    db_path: str = "data/historical.db"


@dataclass
class BacktestDefaults:
    """Defaults applied to incoming backtest requests."""
    symbol: str = "SOFI"
    initial_balance: float = 10000.0
    start_date: str = "2022-01-01"
    end_date: str = "2099-12-31"
    strategy_type: str = "grid_trading"
    max_equity_points: int = 1000
    data_limit_max: int = 1000


@dataclass
class ServerConfig:
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class LogConfig:
    """Logging configuration."""
    log_level: str = "INFO"
    json_logging: bool = True


@dataclass
class Config:
    """Main configuration container."""
    database: DatabaseConfig
    backtest: BacktestDefaults
    server: ServerConfig
    logging: LogConfig


def get_env(key: str, default: Optional[str] = None, required: bool = True) -> str:
    """Get environment variable with validation."""
    value = os.getenv(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set")
    return value or ""


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes")


def get_env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    value = os.getenv(key, str(default))
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got {value!r}") from None


def get_env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    value = os.getenv(key, str(default))
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be a number, got {value!r}") from None


def get_env_list(key: str, default: str) -> List[str]:
    """Get comma-separated list environment variable."""
    value = os.getenv(key, default)
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config() -> Config:
    """Load and validate configuration from environment."""
    return Config(
        database=DatabaseConfig(
            db_path=get_env("DB_PATH", "data/historical.db"),
        ),
        backtest=BacktestDefaults(
            symbol=get_env("DEFAULT_SYMBOL", "SOFI"),
            initial_balance=get_env_float("DEFAULT_INITIAL_BALANCE", 10000.0),
            start_date=get_env("DEFAULT_START_DATE", "2022-01-01"),
            end_date=get_env("DEFAULT_END_DATE", "2099-12-31"),
            strategy_type=get_env("DEFAULT_STRATEGY", "grid_trading"),
            max_equity_points=get_env_int("MAX_EQUITY_POINTS", 1000),
            data_limit_max=get_env_int("DATA_LIMIT_MAX", 1000),
        ),
        server=ServerConfig(
            host=get_env("API_HOST", "0.0.0.0"),
            port=get_env_int("API_PORT", 8000),
            cors_origins=get_env_list("CORS_ORIGINS", "*"),
        ),
        logging=LogConfig(
            log_level=get_env("LOG_LEVEL", "INFO", required=False),
            json_logging=get_env_bool("JSON_LOGGING", True),
        ),
    )
