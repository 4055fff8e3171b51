"""Query execution against the configured database"""
import json
import logging
import random
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import List

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from src.components.errors import QueryExecutionError
from src.components.query_result import QueryResult

logger = logging.getLogger(__name__)


class ResultSource:
    """Runs read-only queries and returns positional ``QueryResult`` values"""

    def __init__(self, database_url: str, read_only: bool = True, max_rows: int = 50000):
        self.database_url = database_url
        self.max_rows = max_rows
        self.engine = create_engine(database_url)

        if read_only and database_url.startswith("sqlite"):
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_read_only(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA query_only = ON")
                cursor.close()

    @contextmanager
    def get_connection(self):
        """Context manager for database connections"""
        connection = self.engine.connect()
        try:
            yield connection
        finally:
            connection.close()

    def run(self, sql: str) -> QueryResult:
        """Execute ``sql`` and return at most ``max_rows`` rows."""
        if not sql or not sql.strip():
            raise QueryExecutionError("Query is empty", sql)
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(text(sql))
                if not cursor.returns_rows:
                    return QueryResult.empty()
                columns = list(cursor.keys())
                rows = cursor.fetchmany(self.max_rows + 1)
        except SQLAlchemyError as e:
            logger.warning("Query failed: %s", str(e)[:200])
            raise QueryExecutionError(f"Query execution failed: {e}", sql) from e

        if len(rows) > self.max_rows:
            logger.warning("Results truncated to %d rows", self.max_rows)
            rows = rows[:self.max_rows]

        result = QueryResult(columns=columns, rows=[list(r) for r in rows], row_count=len(rows))
        logger.info("Query returned %d rows x %d columns", result.total_rows, len(columns))
        return result

    def table_names(self) -> List[str]:
        return inspect(self.engine).get_table_names()


class SQLiteDatabase:
    """Utility for creating demo SQLite databases"""

    @staticmethod
    def create_sample_database(db_path: str, event_count: int = 12000) -> None:
        """Create tables sized to exercise every rendering strategy.

        ``regions`` stays small (full render), ``orders`` lands between the
        pagination and virtual-scroll thresholds, and ``events`` holds
        ``event_count`` rows of mixed-type data.
        """
        conn = sqlite3.connect(db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS regions (
                region_id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                active BOOLEAN,
                opened_on DATE
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS orders (
                order_id INTEGER PRIMARY KEY,
                region_id INTEGER,
                order_date DATE,
                total_amount DECIMAL(10,2),
                FOREIGN KEY (region_id) REFERENCES regions(region_id)
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS events (
                event_id INTEGER PRIMARY KEY,
                occurred_at DATETIME,
                local_time TIME,
                score REAL,
                payload TEXT,
                note TEXT
            )
        """)

        rng = random.Random(42)
        region_names = [
            "California", "New York", "Texas", "Florida", "Illinois",
            "Washington", "Georgia", "Ohio", "Pennsylvania", "Colorado",
        ]
        regions = [
            (i + 1, name, rng.random() > 0.2, (date(2015, 1, 1) + timedelta(days=rng.randint(0, 3000))).isoformat())
            for i, name in enumerate(region_names)
        ]
        cursor.executemany(
            "INSERT INTO regions (region_id, name, active, opened_on) VALUES (?, ?, ?, ?)",
            regions,
        )

        date_start = date(2023, 1, 1)
        orders = []
        for order_id in range(1, 2501):
            amount = round(rng.uniform(5, 5000), 2) if rng.random() > 0.02 else None
            orders.append((
                order_id,
                rng.randint(1, len(regions)),
                (date_start + timedelta(days=rng.randint(0, 1100))).isoformat(),
                amount,
            ))
        cursor.executemany(
            "INSERT INTO orders (order_id, region_id, order_date, total_amount) VALUES (?, ?, ?, ?)",
            orders,
        )

        notes = [
            "ok",
            "retry scheduled",
            "Customer reported that the export, which ran overnight, finished with partial data",
            "Investigating latency spike on the reporting replica; see incident timeline for details",
        ]
        ts_start = datetime(2024, 1, 1)
        events = []
        for event_id in range(1, event_count + 1):
            occurred = ts_start + timedelta(seconds=rng.randint(0, 86400 * 365))
            payload = json.dumps({"source": rng.choice(["api", "ui", "batch"]), "attempt": rng.randint(1, 3)})
            events.append((
                event_id,
                occurred.strftime("%Y-%m-%d %H:%M:%S"),
                occurred.strftime("%H:%M:%S"),
                rng.uniform(-1000, 100000) if rng.random() > 0.05 else None,
                payload,
                rng.choice(notes),
            ))
        cursor.executemany(
            "INSERT INTO events (event_id, occurred_at, local_time, score, payload, note) VALUES (?, ?, ?, ?, ?, ?)",
            events,
        )

        conn.commit()
        conn.close()
        logger.info("Created sample database at %s with %d events", db_path, event_count)
