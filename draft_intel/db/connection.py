"""
SQLite connection management for the historical record store.

``get_connection()`` yields a connection that:
  - Uses ``sqlite3.Row`` rows so repositories read columns by name.
  - Runs in WAL mode with a busy timeout, so a CLI export can read while a
    tracker is writing.
  - Optionally applies the schema on open (``ensure_schema=True``).
  - Commits on clean exit and rolls back on exception.

Usage::

    from draft_intel.db.connection import get_connection

    with get_connection("data/db/draft_intel.db", ensure_schema=True) as conn:
        store = SqliteHistoricalRecordStore(conn)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    ensure_schema: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Database file; ``":memory:"`` for a throwaway database.
            Parent directories are created for file paths.
        wal_mode: Enable WAL journaling.
        busy_timeout_ms: Milliseconds to wait on a locked database.
        ensure_schema: Apply the (idempotent) schema before yielding.

    Yields:
        An open, configured ``sqlite3.Connection``.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or is locked.
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")
        if wal_mode and db_path != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL;")

        if ensure_schema:
            from draft_intel.db.schema import apply_schema
            apply_schema(conn)

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
