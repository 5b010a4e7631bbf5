"""
Input validation for API and CLI requests.

The engine assumes pre-validated input; these guards run before it.
"""
import math
import re
from typing import Any

from quantnode.strategies import StrategyType, parse_strategy_type

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d+)?Z?)?$")
MAX_SYMBOL_LENGTH = 10


class ValidationError(ValueError):
    """Raised when request input is malformed."""


def validate_symbol(symbol: Any) -> str:
    """Trim and uppercase a ticker; alphanumerics and dots only (e.g. BRK.A), 1-10 chars."""
    if not isinstance(symbol, str):
        raise ValidationError("Symbol must be a string")

    cleaned = symbol.strip().upper()
    if not cleaned or len(cleaned) > MAX_SYMBOL_LENGTH or not SYMBOL_PATTERN.match(cleaned):
        raise ValidationError("Invalid symbol format")
    return cleaned


def validate_date(value: Any) -> str:
    """Accept YYYY-MM-DD or ISO-8601 with time."""
    if not isinstance(value, str):
        raise ValidationError("Date must be a string")
    if not DATE_PATTERN.match(value):
        raise ValidationError("Invalid date format")
    return value


def validate_limit(limit: Any, max_limit: int = 1000) -> int:
    """Positive integer between 1 and `max_limit`."""
    if isinstance(limit, bool):
        raise ValidationError(f"Limit must be a number between 1 and {max_limit}")
    try:
        parsed = limit if isinstance(limit, int) else int(str(limit).strip())
    except ValueError:
        raise ValidationError(f"Limit must be a number between 1 and {max_limit}") from None

    if parsed < 1 or parsed > max_limit:
        raise ValidationError(f"Limit must be a number between 1 and {max_limit}")
    return parsed


def validate_balance(balance: Any) -> float:
    """Finite, non-negative number (numeric strings accepted)."""
    try:
        parsed = float(balance)
    except (TypeError, ValueError):
        raise ValidationError("Initial balance must be a non-negative number") from None

    if not math.isfinite(parsed) or parsed < 0:
        raise ValidationError("Initial balance must be a non-negative number")
    return parsed


def validate_strategy_type(value: Any) -> StrategyType:
    """Known strategy id."""
    if not isinstance(value, (str, StrategyType)):
        raise ValidationError("Strategy type must be a string")
    try:
        return parse_strategy_type(value)
    except ValueError as e:
        raise ValidationError(str(e)) from None
