"""
Backtest Results

Trade ledger, equity samples and run summary, plus helpers for analysis.
Serialized field names follow the public API (camelCase).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from quantnode.models import Position, TradeType


@dataclass
class TradeRecord:
    """One executed BUY or SELL."""
    trade_no: int
    datetime: str
    type: TradeType
    symbol: str
    price: float
    shares: float
    total_shares: float  # Shares held after this trade
    remaining_balance: float  # Cash after this trade
    account_balance: float  # Cash + shares * price after this trade
    amount: float
    profit: float = 0.0
    comment: str = ""

    @property
    def is_winner(self) -> bool:
        return self.type == TradeType.SELL and self.profit > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tradeNo": self.trade_no,
            "datetime": self.datetime,
            "type": self.type.value,
            "symbol": self.symbol,
            "price": self.price,
            "shares": self.shares,
            "totalShares": self.total_shares,
            "remainingBalance": self.remaining_balance,
            "accountBalance": self.account_balance,
            "amount": self.amount,
            "profit": self.profit,
            "comment": self.comment,
        }


@dataclass
class EquitySample:
    """Account value at a sampled bar."""
    datetime: str
    account_balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {"datetime": self.datetime, "accountBalance": self.account_balance}


@dataclass
class BacktestSummary:
    """End-of-run statistics."""
    symbol: str
    total_profit_realized: float
    current_cash_balance: float
    unsold_shares: float
    average_price_unsold: float
    final_account_value: float
    max_drawdown_percent: float  # Percent units (12.5 == 12.5%)
    max_drawdown_amount: float
    min_equity: float
    min_equity_time: str
    peak_value: float
    initial_balance: float

    @classmethod
    def empty(cls, symbol: str, initial_balance: float) -> "BacktestSummary":
        """Summary of a run that saw no bars."""
        return cls(
            symbol=symbol,
            total_profit_realized=0.0,
            current_cash_balance=initial_balance,
            unsold_shares=0.0,
            average_price_unsold=0.0,
            final_account_value=initial_balance,
            max_drawdown_percent=0.0,
            max_drawdown_amount=0.0,
            min_equity=initial_balance,
            min_equity_time="",
            peak_value=initial_balance,
            initial_balance=initial_balance,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "totalProfitRealized": self.total_profit_realized,
            "currentCashBalance": self.current_cash_balance,
            "unsoldShares": self.unsold_shares,
            "averagePriceUnsold": self.average_price_unsold,
            "finalAccountValue": self.final_account_value,
            "maxDrawdownPercent": self.max_drawdown_percent,
            "maxDrawdownAmount": self.max_drawdown_amount,
            "minEquity": self.min_equity,
            "minEquityTime": self.min_equity_time,
            "peakValue": self.peak_value,
            "initialBalance": self.initial_balance,
        }


@dataclass
class BacktestResult:
    """
    Complete output of one simulation run.

    `open_positions` holds the lots still open after the last bar; it is kept
    for inspection and is not part of the serialized payload.
    """
    summary: BacktestSummary
    trades: List[TradeRecord] = field(default_factory=list)
    equity_history: List[EquitySample] = field(default_factory=list)
    open_positions: List[Position] = field(default_factory=list)

    @classmethod
    def empty(cls, symbol: str, initial_balance: float) -> "BacktestResult":
        return cls(summary=BacktestSummary.empty(symbol, initial_balance))

    @property
    def sells(self) -> List[TradeRecord]:
        return [t for t in self.trades if t.type == TradeType.SELL]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API payload."""
        return {
            "trades": [t.to_dict() for t in self.trades],
            "equityHistory": [s.to_dict() for s in self.equity_history],
            "summary": self.summary.to_dict(),
        }

    def trades_dataframe(self) -> pd.DataFrame:
        """Trade ledger as a DataFrame."""
        columns = list(TradeRecord.__dataclass_fields__)
        return pd.DataFrame(
            [{**t.__dict__, "type": t.type.value} for t in self.trades],
            columns=columns
        )

    def equity_dataframe(self) -> pd.DataFrame:
        """Sampled equity curve indexed by timestamp."""
        df = pd.DataFrame(
            [(s.datetime, s.account_balance) for s in self.equity_history],
            columns=["datetime", "account_balance"]
        )
        if not df.empty:
            df["datetime"] = pd.to_datetime(df["datetime"])
            df = df.set_index("datetime")
        return df

    def performance_stats(self) -> Dict[str, Any]:
        """Trade-level statistics derived from the ledger."""
        summary = self.summary
        sells = self.sells
        profits = np.array([t.profit for t in sells], dtype=float)
        initial = summary.initial_balance

        stats = {
            "total_trades": len(self.trades),
            "buys": len(self.trades) - len(profits),
            "sells": len(profits),
            "win_rate": 0.0,
            "avg_profit": 0.0,
            "largest_winner": 0.0,
            "largest_loser": 0.0,
            "total_return_pct": (
                (summary.final_account_value - initial) / initial * 100 if initial > 0 else 0.0
            ),
        }

        if len(profits) > 0:
            stats["win_rate"] = sum(1 for t in sells if t.is_winner) / len(sells)
            stats["avg_profit"] = float(np.mean(profits))
            stats["largest_winner"] = float(max(np.max(profits), 0.0))
            stats["largest_loser"] = float(min(np.min(profits), 0.0))

        return stats

    def print_summary(self) -> None:
        """Print a summary of the backtest results."""
        s = self.summary
        stats = self.performance_stats()
        print("\n" + "=" * 60)
        print(f"BACKTEST RESULTS: {s.symbol}")
        print("=" * 60)
        print(f"Initial Balance:     ${s.initial_balance:,.2f}")
        print(f"Final Account Value: ${s.final_account_value:,.2f} ({stats['total_return_pct']:+.2f}%)")
        print(f"Cash Balance:        ${s.current_cash_balance:,.2f}")
        print(f"Realized Profit:     ${s.total_profit_realized:,.2f}")
        print("-" * 60)
        print(f"Unsold Shares:       {s.unsold_shares:,.4f} @ ${s.average_price_unsold:,.2f}")
        print(f"Trades:              {stats['total_trades']} ({stats['buys']} buys, {stats['sells']} sells)")
        print(f"Win Rate:            {stats['win_rate'] * 100:.1f}%")
        print("-" * 60)
        print(f"Peak Value:          ${s.peak_value:,.2f}")
        print(f"Min Equity:          ${s.min_equity:,.2f} {s.min_equity_time}")
        print(f"Max Drawdown:        ${s.max_drawdown_amount:,.2f} ({s.max_drawdown_percent:.2f}%)")
        print("=" * 60 + "\n")
