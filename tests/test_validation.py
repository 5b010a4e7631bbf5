"""
Tests for request input validation.
"""

import pytest

from quantnode.strategies import StrategyType
from quantnode.validation import (
    ValidationError,
    validate_balance,
    validate_date,
    validate_limit,
    validate_strategy_type,
    validate_symbol,
)


class TestValidateSymbol:

    @pytest.mark.parametrize("raw,expected", [
        ("sofi", "SOFI"),
        ("  aapl ", "AAPL"),
        ("BRK.A", "BRK.A"),
        ("X1", "X1"),
    ])
    def test_valid(self, raw, expected):
        assert validate_symbol(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "SO FI", "SOFI;DROP", "ABCDEFGHIJK", "BTC-USD", None, 42])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            validate_symbol(raw)


class TestValidateDate:

    @pytest.mark.parametrize("raw", [
        "2024-01-31",
        "2024-01-31T09:30:00",
        "2024-01-31T09:30:00Z",
        "2024-01-31T09:30:00.123Z",
    ])
    def test_valid(self, raw):
        assert validate_date(raw) == raw

    @pytest.mark.parametrize("raw", ["01/31/2024", "2024-1-31", "yesterday", "", None])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            validate_date(raw)


class TestValidateLimit:

    def test_numeric_string(self):
        assert validate_limit("250") == 250

    def test_bounds(self):
        assert validate_limit(1) == 1
        assert validate_limit(1000) == 1000

    @pytest.mark.parametrize("raw", [0, -5, 1001, "abc", "2.5", True])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError, match="between 1 and 1000"):
            validate_limit(raw)

    def test_custom_maximum(self):
        with pytest.raises(ValidationError):
            validate_limit(60, max_limit=50)


class TestValidateBalance:

    @pytest.mark.parametrize("raw,expected", [(0, 0.0), (10000, 10000.0), ("2500.5", 2500.5)])
    def test_valid(self, raw, expected):
        assert validate_balance(raw) == expected

    @pytest.mark.parametrize("raw", [-1, "abc", None, float("nan"), float("inf"), "inf", "-Infinity"])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            validate_balance(raw)


class TestValidateStrategyType:

    def test_known(self):
        assert validate_strategy_type("rsi_mean_reversion") is StrategyType.RSI_MEAN_REVERSION

    @pytest.mark.parametrize("raw", ["momentum", "", 3])
    def test_unknown(self, raw):
        with pytest.raises(ValidationError):
            validate_strategy_type(raw)

    def test_is_value_error(self):
        """Callers that only catch ValueError still see validation failures."""
        with pytest.raises(ValueError):
            validate_strategy_type("momentum")
