"""Repositories over the SQLite schema; see ``record_repo``."""
