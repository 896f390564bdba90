"""Tests for SQLite schema — idempotency, table creation, constraints."""

from __future__ import annotations

import sqlite3

import pytest

from draft_intel.db.connection import get_connection
from draft_intel.db.schema import ALL_TABLE_NAMES, apply_schema, get_existing_tables


class TestApplySchema:
    def test_all_tables_created(self, in_memory_db):
        tables = get_existing_tables(in_memory_db)
        for expected_table in ALL_TABLE_NAMES:
            assert expected_table in tables, (
                f"Expected table '{expected_table}' not found in database. "
                f"Found: {tables}"
            )

    def test_idempotent_double_apply(self, in_memory_db):
        """apply_schema() called twice must not raise errors."""
        apply_schema(in_memory_db)
        assert get_existing_tables(in_memory_db) == ["historical_records"]

    def test_confidence_range_enforced(self, in_memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            in_memory_db.execute(
                "INSERT INTO historical_records "
                "(record_id, write_seq, category, confidence, predicted_value, timestamp) "
                "VALUES ('x', 1, 'waiver', 140, 1, '2025-09-07T17:00:00+00:00');"
            )


class TestGetConnection:
    def test_creates_parent_dirs_and_schema(self, tmp_path):
        db_path = tmp_path / "nested" / "records.db"
        with get_connection(str(db_path), ensure_schema=True) as conn:
            assert "historical_records" in get_existing_tables(conn)
        assert db_path.exists()

    def test_rolls_back_on_exception(self, tmp_path):
        db_path = str(tmp_path / "records.db")
        with pytest.raises(RuntimeError):
            with get_connection(db_path, ensure_schema=True) as conn:
                conn.execute(
                    "INSERT INTO historical_records "
                    "(record_id, write_seq, category, confidence, predicted_value, timestamp) "
                    "VALUES ('x', 1, 'waiver', 50, 1, '2025-09-07T17:00:00+00:00');"
                )
                raise RuntimeError("boom")
        with get_connection(db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM historical_records;").fetchone()[0]
        assert count == 0
