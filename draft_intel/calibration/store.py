"""
HistoricalRecordStore: persistence boundary for prediction records.

The tracker talks to storage only through this protocol. Two
implementations ship with the package:

  InMemoryHistoricalRecordStore — dict-backed, for tests and one-off runs.
  SqliteHistoricalRecordStore   — ``db.repositories.record_repo``.

Semantics shared by every implementation:
  - ``put`` of an existing ``record_id`` replaces it (latest write wins) and
    moves it to the end of the write order.
  - ``get`` of an unknown id raises ``NotFoundError``.
  - ``list`` returns records in write order, optionally filtered by
    league and user.
"""

from __future__ import annotations

import threading
from typing import Optional, Protocol, runtime_checkable

from draft_intel.errors import NotFoundError
from draft_intel.models.record import HistoricalRecord


@runtime_checkable
class HistoricalRecordStore(Protocol):
    """Storage for ``HistoricalRecord`` objects keyed by league/user."""

    def get(self, record_id: str) -> HistoricalRecord:
        ...

    def put(self, record: HistoricalRecord) -> None:
        ...

    def list(
        self,
        league_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HistoricalRecord]:
        ...

    def clear(self, league_id: Optional[str] = None, user_id: Optional[str] = None) -> int:
        ...


def _matches(record: HistoricalRecord, league_id: Optional[str], user_id: Optional[str]) -> bool:
    if league_id is not None and record.league_id != league_id:
        return False
    if user_id is not None and record.user_id != user_id:
        return False
    return True


class InMemoryHistoricalRecordStore:
    """Thread-safe dict-backed record store."""

    def __init__(self) -> None:
        self._records: dict[str, HistoricalRecord] = {}
        self._lock = threading.Lock()

    def get(self, record_id: str) -> HistoricalRecord:
        with self._lock:
            try:
                return self._records[record_id]
            except KeyError:
                raise NotFoundError(record_id) from None

    def put(self, record: HistoricalRecord) -> None:
        with self._lock:
            self._records.pop(record.record_id, None)
            self._records[record.record_id] = record

    def list(
        self,
        league_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HistoricalRecord]:
        with self._lock:
            return [r for r in self._records.values() if _matches(r, league_id, user_id)]

    def clear(self, league_id: Optional[str] = None, user_id: Optional[str] = None) -> int:
        """Delete matching records; returns the number removed."""
        with self._lock:
            doomed = [rid for rid, r in self._records.items() if _matches(r, league_id, user_id)]
            for rid in doomed:
                del self._records[rid]
            return len(doomed)

    def __len__(self) -> int:
        return len(self._records)
