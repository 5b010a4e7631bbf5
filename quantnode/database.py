"""
SQLite storage for historical bars and tradable symbols.

The bar sources here are the only I/O the backtest engine touches. The
connection lives in an explicit ConnectionManager that is handed to each
source, so there is no module-level connection state.
"""
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

import pandas as pd

from quantnode.models import Bar

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data") / "historical.db"

BAR_COLUMNS = ["datetime", "date", "time", "open", "high", "low", "close", "volume"]


class ConnectionManager:
    """
    Holds one reusable SQLite connection.

    Before handing the connection out it is probed with `SELECT 1`; a dead
    connection is dropped and a new one opened. Access is serialized so the
    manager can be shared by concurrent backtest runs.
    """

    def __init__(self, db_path: Union[str, Path] = DEFAULT_DB_PATH, liveness_query: str = "SELECT 1"):
        self.db_path = Path(db_path)
        self.liveness_query = liveness_query
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def _is_alive(self, conn: sqlite3.Connection) -> bool:
        try:
            conn.execute(self.liveness_query)
            return True
        except sqlite3.Error:
            return False

    def get_connection(self) -> sqlite3.Connection:
        """Return the live connection, reconnecting if the probe fails."""
        with self._lock:
            if self._conn is not None:
                if self._is_alive(self._conn):
                    return self._conn
                logger.warning("Persistent connection lost, reconnecting...")
                self._conn = None

            logger.info(f"Opening new SQLite connection to {self.db_path}")
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._conn = conn
            return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Cursor on the live connection; commits on success, rolls back on error."""
        with self._lock:
            conn = self.get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def init_db(manager: ConnectionManager) -> None:
    """Initialize the database with required tables."""
    with manager.cursor() as cursor:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS historical (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                symbol TEXT NOT NULL,
                datetime TEXT NOT NULL,
                trade_date TEXT NOT NULL,
                trade_time TEXT NOT NULL,
                open REAL NOT NULL,
                high REAL NOT NULL,
                low REAL NOT NULL,
                close REAL NOT NULL,
                volume REAL DEFAULT 0,
                UNIQUE (symbol, datetime)
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_historical_symbol_datetime
            ON historical (symbol, datetime)
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS symbols (
                symbol TEXT PRIMARY KEY,
                is_active INTEGER NOT NULL DEFAULT 1
            )
        """)


def insert_bars(manager: ConnectionManager, symbol: str, bars: Iterable[Bar]) -> int:
    """Insert or replace bars for a symbol. Returns the number of rows written."""
    rows = [
        (symbol, b.datetime, b.date, b.time, b.open, b.high, b.low, b.close, b.volume)
        for b in bars
    ]
    with manager.cursor() as cursor:
        cursor.executemany("""
            INSERT OR REPLACE INTO historical
            (symbol, datetime, trade_date, trade_time, open, high, low, close, volume)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, rows)
    return len(rows)


def upsert_symbol(manager: ConnectionManager, symbol: str, is_active: bool = True) -> None:
    """Register a symbol or change its active flag."""
    with manager.cursor() as cursor:
        cursor.execute("""
            INSERT INTO symbols (symbol, is_active) VALUES (?, ?)
            ON CONFLICT(symbol) DO UPDATE SET is_active = excluded.is_active
        """, (symbol, 1 if is_active else 0))


class SQLiteBarSource:
    """Bar source backed by the `historical` table."""

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    def fetch_bars(self, symbol: str, start_date: str, end_date: str) -> List[Bar]:
        """Bars for `symbol` with start_date <= datetime <= end_date, ascending."""
        with self.manager.cursor() as cursor:
            cursor.execute("""
                SELECT datetime, trade_date AS date, trade_time AS time,
                       open, high, low, close, volume
                FROM historical
                WHERE symbol = ? AND datetime >= ? AND datetime <= ?
                ORDER BY datetime ASC
            """, (symbol, start_date, end_date))
            rows = cursor.fetchall()

        return [Bar.from_row(row) for row in rows]

    def fetch_recent_bars(self, symbol: str, limit: int = 100) -> List[dict]:
        """Most recent raw rows for a symbol, newest first."""
        with self.manager.cursor() as cursor:
            cursor.execute("""
                SELECT symbol, datetime, trade_date, trade_time, open, high, low, close, volume
                FROM historical
                WHERE symbol = ?
                ORDER BY datetime DESC
                LIMIT ?
            """, (symbol, limit))
            rows = cursor.fetchall()

        return [dict(row) for row in rows]

    def list_active_symbols(self) -> List[str]:
        """Active symbols in alphabetical order."""
        with self.manager.cursor() as cursor:
            cursor.execute("SELECT symbol FROM symbols WHERE is_active = 1 ORDER BY symbol ASC")
            rows = cursor.fetchall()

        return [row["symbol"] for row in rows]


class InMemoryBarSource:
    """Bar source over preloaded bars, keyed by symbol."""

    def __init__(self, bars_by_symbol: Optional[Dict[str, Sequence[Bar]]] = None):
        self._bars: Dict[str, List[Bar]] = {
            symbol: sorted(bars, key=lambda b: b.datetime)
            for symbol, bars in (bars_by_symbol or {}).items()
        }

    def add(self, symbol: str, bars: Sequence[Bar]) -> None:
        self._bars[symbol] = sorted(list(self._bars.get(symbol, [])) + list(bars), key=lambda b: b.datetime)

    def fetch_bars(self, symbol: str, start_date: str, end_date: str) -> List[Bar]:
        return [
            bar for bar in self._bars.get(symbol, [])
            if start_date <= bar.datetime <= end_date
        ]


def bars_from_dataframe(df: pd.DataFrame) -> List[Bar]:
    """
    Convert an OHLCV DataFrame into bars.

    The frame needs open/high/low/close columns and either a `datetime`
    column or a DatetimeIndex. `date`/`time` columns are derived when absent.
    """
    frame = df.copy()
    if "datetime" not in frame.columns:
        frame = frame.rename_axis("datetime").reset_index()

    stamps = pd.to_datetime(frame["datetime"])
    frame["datetime"] = stamps.dt.strftime("%Y-%m-%d %H:%M:%S")
    if "date" in frame.columns:
        frame["date"] = pd.to_datetime(frame["date"]).dt.strftime("%Y-%m-%d")
    else:
        frame["date"] = stamps.dt.strftime("%Y-%m-%d")
    if "time" not in frame.columns:
        frame["time"] = stamps.dt.strftime("%H:%M:%S")
    if "volume" not in frame.columns:
        frame["volume"] = 0.0

    frame = frame.sort_values("datetime", kind="stable")
    return [Bar.from_row(row) for row in frame[BAR_COLUMNS].to_dict("records")]


def bars_to_dataframe(bars: Sequence[Bar]) -> pd.DataFrame:
    """Bars as a DataFrame indexed by timestamp."""
    df = pd.DataFrame([b.to_dict() for b in bars], columns=BAR_COLUMNS)
    if not df.empty:
        df.index = pd.to_datetime(df["datetime"])
        df.index.name = "timestamp"
    return df
