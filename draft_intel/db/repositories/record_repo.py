"""
SQLite-backed ``HistoricalRecordStore`` over the ``historical_records`` table.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Optional

from draft_intel.db.repositories.base import BaseRepository
from draft_intel.errors import NotFoundError
from draft_intel.models.record import HistoricalRecord

logger = logging.getLogger(__name__)


class SqliteHistoricalRecordStore(BaseRepository):
    """Read/write access to ``historical_records``.

    The caller owns the connection and its transaction; writes become durable
    when the surrounding ``get_connection()`` block commits.
    """

    def get(self, record_id: str) -> HistoricalRecord:
        """Fetch one record.

        Raises:
            NotFoundError: If ``record_id`` is not stored.
        """
        row = self.fetchone(
            "SELECT * FROM historical_records WHERE record_id = ?;", (record_id,)
        )
        if row is None:
            raise NotFoundError(record_id)
        return _row_to_record(row)

    def put(self, record: HistoricalRecord) -> None:
        """Insert or replace ``record``, moving it to the end of the write order."""
        next_seq = (self.scalar("SELECT MAX(write_seq) FROM historical_records;") or 0) + 1
        self.execute(
            """
            INSERT INTO historical_records (
                record_id, write_seq, league_id, user_id, category, confidence,
                predicted_value, actual_value, is_correct, timestamp, week, corrects
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(record_id) DO UPDATE SET
                write_seq       = excluded.write_seq,
                league_id       = excluded.league_id,
                user_id         = excluded.user_id,
                category        = excluded.category,
                confidence      = excluded.confidence,
                predicted_value = excluded.predicted_value,
                actual_value    = excluded.actual_value,
                is_correct      = excluded.is_correct,
                timestamp       = excluded.timestamp,
                week            = excluded.week,
                corrects        = excluded.corrects,
                written_at      = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
            """,
            (
                record.record_id,
                next_seq,
                record.league_id,
                record.user_id,
                record.category,
                record.confidence,
                record.predicted_value,
                record.actual_value,
                None if record.is_correct is None else int(record.is_correct),
                record.timestamp.isoformat(),
                record.week,
                record.corrects,
            ),
        )

    def list(
        self,
        league_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HistoricalRecord]:
        """Return matching records in write order."""
        where, params = _owner_filter(league_id, user_id)
        rows = self.fetchall(
            f"SELECT * FROM historical_records{where} ORDER BY write_seq;", params
        )
        return [_row_to_record(r) for r in rows]

    def clear(self, league_id: Optional[str] = None, user_id: Optional[str] = None) -> int:
        """Delete matching records; returns the number removed."""
        where, params = _owner_filter(league_id, user_id)
        cursor = self.execute(f"DELETE FROM historical_records{where};", params)
        logger.info("Cleared %d historical record(s)", cursor.rowcount)
        return cursor.rowcount

    def count(self) -> int:
        return int(self.scalar("SELECT COUNT(*) FROM historical_records;") or 0)


def _owner_filter(league_id: Optional[str], user_id: Optional[str]) -> tuple[str, tuple[Any, ...]]:
    clauses: list[str] = []
    params: list[Any] = []
    if league_id is not None:
        clauses.append("league_id = ?")
        params.append(league_id)
    if user_id is not None:
        clauses.append("user_id = ?")
        params.append(user_id)
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, tuple(params)


def _row_to_record(row: sqlite3.Row) -> HistoricalRecord:
    return HistoricalRecord(
        record_id=row["record_id"],
        league_id=row["league_id"],
        user_id=row["user_id"],
        category=row["category"],
        confidence=row["confidence"],
        predicted_value=row["predicted_value"],
        actual_value=row["actual_value"],
        is_correct=None if row["is_correct"] is None else bool(row["is_correct"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        week=row["week"],
        corrects=row["corrects"],
    )
