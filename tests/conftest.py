"""
Shared pytest fixtures for the draft-intel test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - Sample domain objects (league, candidates, context, events, records)
    for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest

from draft_intel.db.schema import apply_schema
from draft_intel.models.candidate import (
    Candidate,
    CandidateMetadata,
    DraftContext,
    LeagueConfig,
)
from draft_intel.models.draft import DraftEvent
from draft_intel.models.record import HistoricalRecord

BASE_TS = datetime(2025, 9, 7, 17, 0, 0, tzinfo=timezone.utc)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

def make_candidate(
    candidate_id: str = "c1",
    category: str = "RB",
    expected_order: float = 10.0,
    projected_output: float = 200.0,
    team: str | None = "KC",
    schedule_slot: int | None = 10,
    **meta,
) -> Candidate:
    return Candidate(
        candidate_id=candidate_id,
        name=candidate_id.upper(),
        category=category,
        expected_order=expected_order,
        projected_output=projected_output,
        team=team,
        schedule_slot=schedule_slot,
        metadata=CandidateMetadata(**meta),
    )


def make_event(
    order: int,
    category: str = "RB",
    expected_order: float | None = None,
    candidate_id: str | None = None,
    team_id: str = "t1",
) -> DraftEvent:
    return DraftEvent(
        order=order,
        candidate_id=candidate_id or f"p{order}",
        category=category,
        team_id=team_id,
        timestamp=BASE_TS + timedelta(minutes=order),
        expected_order=expected_order,
    )


def make_record(
    record_id: str,
    confidence: float = 70.0,
    correct: bool | None = True,
    category: str = "start_sit",
    ts: datetime | None = None,
    week: int | None = None,
    corrects: str | None = None,
) -> HistoricalRecord:
    """A record resolved as ``correct`` (or unresolved when ``correct`` is None)."""
    return HistoricalRecord(
        record_id=record_id,
        category=category,
        confidence=confidence,
        predicted_value=1.0,
        actual_value=None if correct is None else (1.0 if correct else 0.0),
        timestamp=ts or BASE_TS,
        week=week,
        corrects=corrects,
    )


@pytest.fixture
def sample_league() -> LeagueConfig:
    return LeagueConfig(league_id="lg-1", scoring_system="ppr", teams=12)


@pytest.fixture
def sample_candidates() -> list[Candidate]:
    """A small mixed pool: three RBs, two WRs and a QB."""
    return [
        make_candidate("rb1", "RB", 5, 300, team="SF", injury_risk=0.2, age=24),
        make_candidate("rb2", "RB", 18, 240, team="DAL", injury_risk=0.1),
        make_candidate("rb3", "RB", 60, 150, team="NYG"),
        make_candidate("wr1", "WR", 8, 280, team="MIA", years_experience=6),
        make_candidate("wr2", "WR", 30, 210, team="CIN"),
        make_candidate("qb1", "QB", 40, 350, team="BUF"),
    ]


@pytest.fixture
def sample_context(sample_league, sample_candidates) -> DraftContext:
    return DraftContext(
        current_pick=20,
        available=sample_candidates,
        roster=[],
        league=sample_league,
    )


@pytest.fixture
def sample_events() -> list[DraftEvent]:
    """Ten picks: the first six are RBs, the rest WRs."""
    return [
        make_event(i, "RB" if i <= 6 else "WR", expected_order=float(i))
        for i in range(1, 11)
    ]


@pytest.fixture
def sample_records() -> list[HistoricalRecord]:
    """Twenty resolved records at confidence 90, fifteen correct, one per day."""
    return [
        make_record(f"r{i:02d}", 90.0, i < 15, ts=BASE_TS + timedelta(days=i))
        for i in range(20)
    ]
