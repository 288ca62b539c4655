"""
Daily nasdaq market data: CSV loader and database query tools.

One CSV per ticker is loaded into a SQLite table named after the
ticker. The query tools read the database in read-only mode and
report every failure as text, so the engine can explain it.
"""

import logging
import re
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import pandas as pd
from pandas.errors import DatabaseError

from ..tools.dispatcher import ToolHandler
from ..tools.registry import ToolRegistry
from ..tools.schema import ParameterSpec, ToolDescriptor

logger = logging.getLogger(__name__)

COLUMNS = ["date", "open", "high", "low", "close"]

_TICKER = re.compile(r"^[A-Za-z0-9_.\-]{1,16}$")


QUERY_DATABASE_TOOL = ToolDescriptor(
    name="queryDatabase",
    description="Query the database with the supplied parameters",
    parameters={
        "ticker": ParameterSpec(
            type="string",
            description="The ticker code of the company for the query",
        ),
        "startDate": ParameterSpec(
            type="string",
            description="The start date for a range query in the format yyyy-mm-dd",
        ),
        "endDate": ParameterSpec(
            type="string",
            description="The end date for a range query in the format yyyy-mm-dd",
        ),
    },
)

COMMAND_QUERY_DATABASE_TOOL = ToolDescriptor(
    name="commandQueryDatabase",
    description=(
        "Run the supplied read-only SQLite query on the nasdaq database. "
        "Each ticker is a table with columns date, open, high, low, close."
    ),
    parameters={
        "command": ParameterSpec(
            type="string",
            description="The generated SQLite SELECT statement",
        ),
    },
)


# ============================================================
# Loading
# ============================================================

def load_market_database(data_dir: Union[str, Path], db_path: Union[str, Path]) -> Dict[str, int]:
    """
    Rebuild the market database from a directory of ticker CSV files.

    Any existing database at ``db_path`` is dropped first. Each file
    ``<ticker>.<ext>`` has a header line followed by rows of six
    columns: index, date, open, high, low, close. Rows with a different
    field count are skipped.

    Returns the number of rows loaded per ticker.
    """

    data_dir = Path(data_dir)
    db_path = Path(db_path)

    if not data_dir.is_dir():
        raise FileNotFoundError(f"market data directory not found: {data_dir}")

    if db_path.exists():
        db_path.unlink()
        logger.info("[MARKET DATA] Dropped existing database %s", db_path)

    loaded: Dict[str, int] = {}

    with closing(sqlite3.connect(db_path)) as conn:
        for path in sorted(p for p in data_dir.iterdir() if p.is_file()):
            ticker = path.name.split(".")[0]

            if not _TICKER.match(ticker):
                logger.warning("[MARKET DATA] Skipping %s: not a ticker file name", path.name)
                continue

            frame = pd.read_csv(path, dtype=str, on_bad_lines="skip")

            if frame.shape[1] != 6:
                logger.warning(
                    "[MARKET DATA] Skipping %s: expected 6 columns, found %d",
                    path.name,
                    frame.shape[1],
                )
                continue

            rows = frame.iloc[:, 1:6].copy()
            rows.columns = COLUMNS
            rows = rows.dropna()
            for column in COLUMNS:
                rows[column] = rows[column].str.strip()

            rows.to_sql(ticker, conn, if_exists="replace", index=False)
            loaded[ticker] = len(rows)

            logger.info("[MARKET DATA] Loaded %s | rows=%d", ticker, len(rows))

        conn.commit()

    return loaded


# ============================================================
# Queries
# ============================================================

class MarketDatabase:
    """Read-only access to a database built by ``load_market_database``."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(f"file:{self.db_path.resolve()}?mode=ro", uri=True)

    def has_ticker(self, conn: sqlite3.Connection, ticker: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ? COLLATE NOCASE",
            (ticker,),
        ).fetchone()
        return row is not None

    def query_range(self, ticker: str, start_date: str, end_date: str) -> str:
        logger.info(
            "[MARKET DATA] queryDatabase for %s with date range %s - %s",
            ticker,
            start_date,
            end_date,
        )

        if not self.db_path.exists():
            return "missing market database, cannot continue"

        if not _TICKER.match(ticker):
            return f"invalid ticker: {ticker}"

        try:
            with closing(self._connect()) as conn:
                if not self.has_ticker(conn, ticker):
                    return f"empty collection for ticker: {ticker}, cannot continue"

                frame = pd.read_sql_query(
                    f'SELECT date, open, high, low, close FROM "{ticker}" '
                    "WHERE date >= ? AND date <= ? ORDER BY date",
                    conn,
                    params=(start_date, end_date),
                )
        except (sqlite3.Error, DatabaseError) as e:
            logger.warning("[MARKET DATA] Range query failed: %s", e)
            return f"query error: {e}"

        return frame.to_json(orient="records")

    def run_command(self, command: str) -> str:
        logger.info("[MARKET DATA] commandQueryDatabase for %s", command)

        if not self.db_path.exists():
            return "missing market database, cannot continue"

        try:
            with closing(self._connect()) as conn:
                frame = pd.read_sql_query(command, conn)
        except (sqlite3.Error, DatabaseError, TypeError, ValueError) as e:
            logger.warning("[MARKET DATA] Command failed: %s", e)
            return f"command error: {e}"

        return frame.to_json(orient="records")


# ============================================================
# Registration
# ============================================================

def register_market_data_tools(
    registry: ToolRegistry,
    database: MarketDatabase,
) -> Dict[str, ToolHandler]:
    """
    Register the database tools and return their handlers.

    Usage
    -----
    handlers = register_market_data_tools(registry, MarketDatabase("nasdaq.db"))
    agent = MeshMindApp.create(config=config, registry=registry, handlers=handlers)
    """

    def query_database(args: Mapping[str, Any]) -> str:
        return database.query_range(args["ticker"], args["startDate"], args["endDate"])

    def command_query_database(args: Mapping[str, Any]) -> str:
        return database.run_command(args["command"])

    registry.register(QUERY_DATABASE_TOOL)
    registry.register(COMMAND_QUERY_DATABASE_TOOL)

    return {
        QUERY_DATABASE_TOOL.name: query_database,
        COMMAND_QUERY_DATABASE_TOOL.name: command_query_database,
    }
