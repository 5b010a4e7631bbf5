"""
Tests for strategy parameters, the registry and the two rule sets.
"""

import pytest

from quantnode.models import TradeType
from quantnode.state import SimulationState
from quantnode.strategies import (
    GridParams,
    GridTradingStrategy,
    RsiMeanReversionStrategy,
    RsiParams,
    StrategyType,
    create_strategy,
    list_strategies,
    parse_strategy_type,
    resolve_strategy_params,
)


@pytest.fixture
def state():
    """Fresh simulation state with 10k cash."""
    return SimulationState.start(10000.0)


class TestStrategyParams:
    """Tests for raw parameter resolution."""

    def test_grid_defaults(self):
        params = resolve_strategy_params("grid_trading", {})

        assert params == GridParams(move_down_percent=2.0, move_up_percent=5.0, amount_to_buy=1000.0)

    def test_rsi_defaults(self):
        params = resolve_strategy_params(StrategyType.RSI_MEAN_REVERSION, None)

        assert params.rsi_period == 14
        assert params.oversold_threshold == 30.0
        assert params.overbought_threshold == 70.0
        assert params.position_fraction == 0.10
        assert params.max_open_positions == 5

    def test_camel_case_keys(self):
        params = GridParams.from_dict({"moveDownPercent": 3, "moveUpPercent": "7.5", "amountToBuy": 500})

        assert params.move_down_percent == 3.0
        assert params.move_up_percent == 7.5
        assert params.amount_to_buy == 500.0

    def test_snake_case_keys(self):
        params = RsiParams.from_dict({"rsi_period": "10", "oversold_threshold": 25})

        assert params.rsi_period == 10
        assert params.oversold_threshold == 25.0
        assert params.overbought_threshold == 70.0

    def test_partial_params_fill_defaults(self):
        params = GridParams.from_dict({"moveUpPercent": 10})

        assert params.move_up_percent == 10.0
        assert params.move_down_percent == 2.0
        assert params.amount_to_buy == 1000.0

    def test_unknown_keys_ignored(self):
        params = RsiParams.from_dict({"bogus": 1, "rsiPeriod": 7})

        assert params.rsi_period == 7

    def test_non_numeric_value_rejected(self):
        with pytest.raises(ValueError):
            GridParams.from_dict({"moveDownPercent": "abc"})

    def test_unknown_strategy_type(self):
        with pytest.raises(ValueError, match="Unknown strategy type"):
            parse_strategy_type("momentum")


class TestRegistry:
    """Tests for strategy construction and the catalogue."""

    def test_create_grid(self):
        strategy = create_strategy("grid_trading", {"moveDownPercent": 4})

        assert isinstance(strategy, GridTradingStrategy)
        assert strategy.params.move_down_percent == 4.0

    def test_create_rsi(self):
        strategy = create_strategy(StrategyType.RSI_MEAN_REVERSION)

        assert isinstance(strategy, RsiMeanReversionStrategy)

    def test_fresh_instance_per_call(self):
        assert create_strategy("grid_trading") is not create_strategy("grid_trading")

    def test_create_unknown(self):
        with pytest.raises(ValueError):
            create_strategy("unknown")

    def test_catalogue(self):
        catalogue = list_strategies()

        assert [entry["id"] for entry in catalogue] == ["grid_trading", "rsi_mean_reversion"]

        grid = catalogue[0]
        assert grid["name"] == "Grid Trading"
        assert [p["key"] for p in grid["parameters"]] == ["moveDownPercent", "moveUpPercent", "amountToBuy"]
        assert grid["parameters"][0]["defaultValue"] == 2

        rsi = catalogue[1]
        assert rsi["name"] == "RSI Mean Reversion"
        assert [p["key"] for p in rsi["parameters"]] == ["rsiPeriod", "oversoldThreshold", "overboughtThreshold"]
        period = rsi["parameters"][0]
        assert (period["min"], period["max"], period["step"], period["defaultValue"]) == (2, 30, 1, 14)


class TestGridTradingStrategy:
    """Tests for grid entries and per-lot exits."""

    def test_initial_entry_from_lookback_high(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        first, second = make_daily_bars([100.0, 97.0])

        state.daily_highs.update(first)
        assert strategy.check_buy(first, 0, state) is None

        state.daily_highs.update(second)
        signal = strategy.check_buy(second, 1, state)

        assert signal is not None
        assert signal.amount == 1000.0
        assert signal.reason.startswith("Initial entry")

    def test_no_entry_above_threshold(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        bars = make_daily_bars([100.0, 98.5])

        for bar in bars:
            state.daily_highs.update(bar)

        assert strategy.check_buy(bars[1], 1, state) is None

    def test_sell_each_lot_at_its_target(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        bar = make_daily_bars([104.0])[0]
        cheap = state.open_position(98.0, 1000.0, "2024-01-01 16:00:00")
        state.open_position(100.0, 1000.0, "2024-01-01 17:00:00")

        sells = strategy.select_sells(bar, 0, state)

        # 98 * 1.05 = 102.9 is reached, 100 * 1.05 = 105 is not
        assert [s.position for s in sells] == [cheap]
        assert "98.00" in sells[0].reason

    def test_buy_from_last_action(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        bar = make_daily_bars([97.9])[0]
        state.open_position(100.0, 1000.0, "2024-01-01 16:00:00")
        state.daily_highs.update(bar)
        strategy.on_trade(TradeType.BUY, 100.0, bar)

        signal = strategy.check_buy(bar, 0, state)

        assert signal is not None
        assert signal.reason.startswith("Drop of 2% from last action")

    def test_re_entry_when_flat(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        bars = make_daily_bars([110.0, 105.0])
        for bar in bars:
            state.daily_highs.update(bar)
        # Last action was a sell at 105, nothing held
        strategy.on_trade(TradeType.SELL, 105.0, bars[1])

        signal = strategy.check_buy(bars[1], 1, state)

        assert signal is not None
        assert signal.reason.startswith("Re-entry")

    def test_no_re_entry_while_holding(self, state, make_daily_bars):
        strategy = GridTradingStrategy()
        bars = make_daily_bars([110.0, 105.0])
        for bar in bars:
            state.daily_highs.update(bar)
        state.open_position(104.0, 1000.0, bars[1].datetime)
        strategy.on_trade(TradeType.BUY, 104.0, bars[1])

        assert strategy.check_buy(bars[1], 1, state) is None


class TestRsiMeanReversionStrategy:
    """Tests for RSI entries, exits and throttles."""

    def _prepared(self, closes, state, make_daily_bars, **params):
        strategy = RsiMeanReversionStrategy(RsiParams(**params))
        bars = make_daily_bars(closes)
        strategy.prepare(bars, state)
        return strategy, bars

    def test_no_signal_during_warm_up(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)

        assert strategy.check_buy(bars[1], 1, state) is None
        assert strategy.select_sells(bars[1], 1, state) == []

    def test_buy_sized_from_initial_balance(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)
        state.current_balance = 4000.0

        signal = strategy.check_buy(bars[2], 2, state)

        assert signal is not None
        assert signal.amount == pytest.approx(1000.0)
        assert signal.reason.startswith("RSI 0.00 <= oversold 30")

    def test_buy_blocked_without_cash(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)
        state.current_balance = 999.0

        assert strategy.check_buy(bars[2], 2, state) is None

    def test_one_buy_per_day(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)
        strategy.on_trade(TradeType.BUY, 8.0, bars[2])

        assert strategy.check_buy(bars[2], 2, state) is None

    def test_sell_does_not_throttle(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)
        strategy.on_trade(TradeType.SELL, 8.0, bars[2])

        assert strategy.check_buy(bars[2], 2, state) is not None

    def test_max_open_lots(self, state, make_daily_bars):
        strategy, bars = self._prepared([10.0, 9.0, 8.0], state, make_daily_bars, rsi_period=2)
        for _ in range(5):
            state.open_position(9.0, 1000.0, bars[0].datetime)

        assert strategy.check_buy(bars[2], 2, state) is None

    def test_overbought_sells_everything(self, state, make_daily_bars):
        strategy, bars = self._prepared([8.0, 9.0, 10.0], state, make_daily_bars, rsi_period=2)
        first = state.open_position(8.0, 1000.0, bars[0].datetime)
        second = state.open_position(9.0, 1000.0, bars[1].datetime)

        sells = strategy.select_sells(bars[2], 2, state)

        assert [s.position for s in sells] == [first, second]
        assert sells[0].reason == "RSI 100.00 >= overbought 70"
