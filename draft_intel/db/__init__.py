"""
SQLite persistence for historical prediction records.

Modules:
    connection — get_connection() context manager (WAL, Row factory, commit/rollback).
    schema     — historical_records DDL and apply_schema().
    repositories.base       — BaseRepository SQL helpers.
    repositories.record_repo — SqliteHistoricalRecordStore.
"""
