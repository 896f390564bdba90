"""
SQLite schema DDL for persisted prediction records.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

historical_records
    One row per ``record_id`` holding its latest write. ``write_seq`` is a
    monotonically increasing write counter: re-writing a record bumps it, so
    ``ORDER BY write_seq`` reproduces the tracker's latest-write ordering.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_HISTORICAL_RECORDS = """
CREATE TABLE IF NOT EXISTS historical_records (
    record_id        TEXT    PRIMARY KEY,
    write_seq        INTEGER NOT NULL,
    league_id        TEXT,
    user_id          TEXT,
    category         TEXT    NOT NULL,
    confidence       REAL    NOT NULL CHECK (confidence >= 0 AND confidence <= 100),
    predicted_value  REAL    NOT NULL,
    actual_value     REAL,
    is_correct       INTEGER,
    timestamp        TEXT    NOT NULL,
    week             INTEGER,
    corrects         TEXT,
    written_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_HISTORICAL_RECORDS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_records_owner ON historical_records (league_id, user_id);
CREATE INDEX IF NOT EXISTS idx_records_seq ON historical_records (write_seq);
"""

_ALL_DDL = [_DDL_HISTORICAL_RECORDS, _DDL_HISTORICAL_RECORDS_INDEXES]

ALL_TABLE_NAMES = ["historical_records"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn`` (idempotent)."""
    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)
    conn.commit()
    logger.debug("Schema applied: %d table(s) verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
