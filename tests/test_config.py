"""
Tests for environment-driven configuration.
"""

import pytest

from quantnode.config import get_env_bool, get_env_list, load_config


class TestLoadConfig:

    def test_defaults(self, monkeypatch):
        for key in (
            "DB_PATH", "DEFAULT_SYMBOL", "DEFAULT_INITIAL_BALANCE", "DEFAULT_START_DATE",
            "DEFAULT_END_DATE", "DEFAULT_STRATEGY", "MAX_EQUITY_POINTS", "DATA_LIMIT_MAX",
            "API_HOST", "API_PORT", "CORS_ORIGINS", "LOG_LEVEL", "JSON_LOGGING",
        ):
            monkeypatch.delenv(key, raising=False)

        config = load_config()

        assert config.database.db_path == "data/historical.db"
        assert config.backtest.symbol == "SOFI"
        assert config.backtest.initial_balance == 10000.0
        assert config.backtest.start_date == "2022-01-01"
        assert config.backtest.end_date == "2099-12-31"
        assert config.backtest.strategy_type == "grid_trading"
        assert config.backtest.max_equity_points == 1000
        assert config.server.port == 8000
        assert config.server.cors_origins == ["*"]
        assert config.logging.json_logging is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_SYMBOL", "AAPL")
        monkeypatch.setenv("DEFAULT_INITIAL_BALANCE", "2500.5")
        monkeypatch.setenv("MAX_EQUITY_POINTS", "250")
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://app.example.com")
        monkeypatch.setenv("JSON_LOGGING", "false")

        config = load_config()

        assert config.backtest.symbol == "AAPL"
        assert config.backtest.initial_balance == 2500.5
        assert config.backtest.max_equity_points == 250
        assert config.server.cors_origins == ["http://localhost:3000", "https://app.example.com"]
        assert config.logging.json_logging is False

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("API_PORT", "eighty")

        with pytest.raises(ValueError, match="API_PORT"):
            load_config()


class TestEnvHelpers:

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("YES", True), ("no", False)])
    def test_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SOME_FLAG", raw)

        assert get_env_bool("SOME_FLAG") is expected

    def test_list_skips_blanks(self, monkeypatch):
        monkeypatch.setenv("SOME_LIST", "a,, b ,")

        assert get_env_list("SOME_LIST", "") == ["a", "b"]
