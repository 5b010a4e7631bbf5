"""
Backtesting Engine

Replays a strategy over historical bars in a single forward pass.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from quantnode.models import Bar, BarSource, Position, TradeType
from quantnode.state import SimulationState
from quantnode.strategies import Strategy, StrategyType, create_strategy, parse_strategy_type
from quantnode.utils.logger import BacktestLogger
from .result import BacktestResult, BacktestSummary, EquitySample, TradeRecord

logger = logging.getLogger(__name__)

# Upper bound on equity curve points per run
MAX_EQUITY_POINTS = 1000


@dataclass
class BacktestParams:
    """Inputs of one backtest run."""
    symbol: str
    initial_balance: float = 10000.0
    start_date: str = "2022-01-01"
    end_date: str = "2099-12-31"
    strategy_type: Union[str, StrategyType] = StrategyType.GRID_TRADING
    strategy_params: Dict[str, Any] = field(default_factory=dict)


class BacktestEngine:
    """
    Bar-by-bar simulation engine.

    Usage:
        engine = BacktestEngine(SQLiteBarSource(ConnectionManager("data/historical.db")))

        result = engine.run(BacktestParams(
            symbol="SOFI",
            initial_balance=10000,
            strategy_type="grid_trading",
            strategy_params={"moveDownPercent": 2, "moveUpPercent": 5},
        ))

        result.print_summary()

    Every run builds its own state and strategy instance, so one engine can
    serve concurrent runs as long as the bar source is safe to share.
    """

    def __init__(self, bar_source: BarSource, max_equity_points: int = MAX_EQUITY_POINTS):
        """
        Initialize backtest engine.

        Args:
            bar_source: Provider of ascending bars for (symbol, start, end)
            max_equity_points: Approximate cap on equity samples per run
        """
        self.bar_source = bar_source
        self.max_equity_points = max(1, max_equity_points)
        self.events = BacktestLogger()

    def run(self, params: BacktestParams) -> BacktestResult:
        """
        Run the backtest.

        Errors raised by the bar source propagate unchanged; an empty bar
        set yields a zero-activity result.
        """
        kind = parse_strategy_type(params.strategy_type)
        strategy = create_strategy(kind, params.strategy_params)
        started = time.perf_counter()
        self.events.run_started(params.symbol, kind.value, params.start_date, params.end_date)

        try:
            bars = self.bar_source.fetch_bars(params.symbol, params.start_date, params.end_date)
        except Exception as e:
            self.events.run_failed(params.symbol, str(e))
            raise

        self.events.bars_loaded(params.symbol, len(bars))

        if not bars:
            logger.warning(f"No data found for {params.symbol} between {params.start_date} and {params.end_date}")
            return BacktestResult.empty(params.symbol, params.initial_balance)

        result = self._simulate(params.symbol, params.initial_balance, bars, strategy)

        self.events.run_completed(
            params.symbol,
            len(result.trades),
            result.summary.final_account_value,
            (time.perf_counter() - started) * 1000
        )
        return result

    def _simulate(
        self,
        symbol: str,
        initial_balance: float,
        bars: List[Bar],
        strategy: Strategy
    ) -> BacktestResult:
        state = SimulationState.start(initial_balance)
        strategy.prepare(bars, state)

        trades: List[TradeRecord] = []
        equity_history: List[EquitySample] = []

        total_bars = len(bars)
        sample_rate = max(1, total_bars // self.max_equity_points)
        last_index = total_bars - 1

        for i, bar in enumerate(bars):
            state.daily_highs.update(bar)

            current_equity = state.equity(bar.close)
            if i % sample_rate == 0 or i == last_index:
                equity_history.append(EquitySample(datetime=bar.datetime, account_balance=current_equity))

            state.mark_to_market(current_equity, bar.datetime)

            # Sells first: freed cash and the updated reference are visible to the buy check
            for sell in strategy.select_sells(bar, i, state):
                trades.append(self._sell(state, sell.position, bar, symbol, sell.reason, len(trades) + 1))
                strategy.on_trade(TradeType.SELL, bar.close, bar)

            buy = strategy.check_buy(bar, i, state)
            if buy is None:
                continue
            if bar.close <= 0:
                logger.warning(f"Skipped buy at {bar.datetime}: non-positive close {bar.close}")
                continue
            if state.current_balance < buy.amount:
                logger.debug(
                    f"Skipped buy at {bar.datetime}: balance {state.current_balance:.2f} < {buy.amount:.2f}"
                )
                continue

            trades.append(self._buy(state, buy.amount, bar, symbol, buy.reason, len(trades) + 1))
            strategy.on_trade(TradeType.BUY, bar.close, bar)

        final_price = bars[-1].close
        summary = BacktestSummary(
            symbol=symbol,
            total_profit_realized=state.total_profit,
            current_cash_balance=state.current_balance,
            unsold_shares=state.total_shares_held,
            average_price_unsold=state.average_price_unsold,
            final_account_value=state.equity(final_price),
            max_drawdown_percent=state.max_drawdown_ratio * 100,
            max_drawdown_amount=state.max_drawdown_amount,
            min_equity=state.min_equity,
            min_equity_time=state.min_equity_time,
            peak_value=state.peak_value,
            initial_balance=initial_balance,
        )

        return BacktestResult(
            summary=summary,
            trades=trades,
            equity_history=equity_history,
            open_positions=list(state.open_positions),
        )

    def _sell(
        self,
        state: SimulationState,
        position: Position,
        bar: Bar,
        symbol: str,
        reason: str,
        trade_no: int
    ) -> TradeRecord:
        sell_amount, profit = state.close_position(position, bar.close)

        logger.debug(
            f"SELL lot #{position.id} {position.shares:.4f} @ {bar.close:.2f} "
            f"P&L: ${profit:.2f} ({bar.datetime})"
        )

        return TradeRecord(
            trade_no=trade_no,
            datetime=bar.datetime,
            type=TradeType.SELL,
            symbol=symbol,
            price=bar.close,
            shares=position.shares,
            total_shares=state.total_shares_held,
            remaining_balance=state.current_balance,
            account_balance=state.equity(bar.close),
            amount=sell_amount,
            profit=profit,
            comment=reason,
        )

    def _buy(
        self,
        state: SimulationState,
        amount: float,
        bar: Bar,
        symbol: str,
        reason: str,
        trade_no: int
    ) -> TradeRecord:
        position = state.open_position(bar.close, amount, bar.datetime)

        logger.debug(f"BUY lot #{position.id} {position.shares:.4f} @ {bar.close:.2f} ({bar.datetime}) - {reason}")

        return TradeRecord(
            trade_no=trade_no,
            datetime=bar.datetime,
            type=TradeType.BUY,
            symbol=symbol,
            price=bar.close,
            shares=position.shares,
            total_shares=state.total_shares_held,
            remaining_balance=state.current_balance,
            account_balance=state.equity(bar.close),
            amount=amount,
            profit=0.0,
            comment=reason,
        )


def run_backtest(params: BacktestParams, bar_source: BarSource) -> BacktestResult:
    """
    Convenience function to run a backtest.

    Args:
        params: Run inputs
        bar_source: Historical bar provider

    Returns:
        BacktestResult
    """
    return BacktestEngine(bar_source).run(params)
