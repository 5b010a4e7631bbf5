#!/usr/bin/env python3
"""
Load OHLCV bars from a CSV file into the local bar store.

The CSV needs open/high/low/close columns plus a timestamp column
(`datetime` or `timestamp`); `volume`, `date` and `time` are optional.

    python scripts/load_csv.py SOFI data/SOFI_1m.csv
"""
import argparse
import logging

import pandas as pd

from quantnode.config import load_config
from quantnode.database import ConnectionManager, bars_from_dataframe, init_db, insert_bars, upsert_symbol
from quantnode.validation import validate_symbol

logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')
logger = logging.getLogger("load_csv")


def main():
    parser = argparse.ArgumentParser(description="Import OHLCV CSV data")
    parser.add_argument("symbol")
    parser.add_argument("csv_path")
    parser.add_argument("--db", default=None, help="Path to the SQLite bar store")
    parser.add_argument("--inactive", action="store_true", help="Register the symbol as inactive")
    args = parser.parse_args()

    symbol = validate_symbol(args.symbol)
    db_path = args.db or load_config().database.db_path

    df = pd.read_csv(args.csv_path)
    df.columns = [c.strip().lower() for c in df.columns]
    if "datetime" not in df.columns and "timestamp" in df.columns:
        df = df.rename(columns={"timestamp": "datetime"})

    bars = bars_from_dataframe(df)
    logger.info(f"Parsed {len(bars):,} bars from {args.csv_path}")

    manager = ConnectionManager(db_path)
    try:
        init_db(manager)
        written = insert_bars(manager, symbol, bars)
        upsert_symbol(manager, symbol, is_active=not args.inactive)
    finally:
        manager.close()

    logger.info(f"Stored {written:,} bars for {symbol} in {db_path}")


if __name__ == "__main__":
    main()
