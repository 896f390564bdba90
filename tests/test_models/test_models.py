"""
Tests for draft_intel/models/*.py.

What we test
------------
HistoricalRecord:
  - confidence outside [0, 100] and blank ids are rejected.
  - naive timestamps are coerced to UTC; aware timestamps are kept.
  - is_correct without actual_value and self-corrections are rejected.
  - correct(): None when unresolved, explicit flag wins, tolerance applies.
Candidate / LeagueConfig / DraftContext:
  - category is normalized to upper case; expected_order must be positive.
  - current_round follows the league size.
DraftEvent / TrendSignal:
  - order_delta sign; strength outside [0, 1] is rejected.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from draft_intel.models.candidate import Candidate, DraftContext, LeagueConfig
from draft_intel.models.draft import DraftEvent, TrendSignal
from draft_intel.models.record import HistoricalRecord

NAIVE_TS = datetime(2025, 10, 1, 12, 0)


def _record(**kw) -> HistoricalRecord:
    fields = dict(
        record_id="r1", category="start_sit", confidence=70.0,
        predicted_value=1.0, timestamp=NAIVE_TS,
    )
    fields.update(kw)
    return HistoricalRecord(**fields)


class TestHistoricalRecord:
    @pytest.mark.parametrize("confidence", [-1.0, 100.5])
    def test_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            _record(confidence=confidence)

    def test_blank_id_rejected(self):
        with pytest.raises(ValidationError):
            _record(record_id="  ")

    def test_naive_timestamp_is_utc(self):
        assert _record().timestamp.tzinfo == timezone.utc

    def test_aware_timestamp_kept(self):
        ts = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)
        assert _record(timestamp=ts).timestamp == ts

    def test_is_correct_requires_actual(self):
        with pytest.raises(ValidationError):
            _record(is_correct=True)

    def test_cannot_correct_itself(self):
        with pytest.raises(ValidationError):
            _record(corrects="r1")

    def test_correct_unresolved(self):
        rec = _record()
        assert rec.correct() is None
        assert not rec.is_completed

    def test_explicit_flag_wins(self):
        assert _record(actual_value=1.0, is_correct=False).correct() is False

    def test_tolerance(self):
        rec = _record(predicted_value=10.0, actual_value=12.0)
        assert rec.correct() is False
        assert rec.correct(tolerance=2.0) is True

    def test_frozen(self):
        with pytest.raises(ValidationError):
            _record().confidence = 50.0


class TestCandidateModels:
    def test_category_normalized(self):
        c = Candidate(candidate_id="a", category=" rb ", expected_order=3)
        assert c.category == "RB"

    def test_expected_order_positive(self):
        with pytest.raises(ValidationError):
            Candidate(candidate_id="a", category="RB", expected_order=0)

    def test_rookie(self):
        c = Candidate(
            candidate_id="a", category="WR", expected_order=50,
            metadata={"years_experience": 0},
        )
        assert c.is_rookie

    def test_league_needs_two_teams(self):
        with pytest.raises(ValidationError):
            LeagueConfig(teams=1)

    def test_current_round(self):
        league = LeagueConfig(teams=10)
        assert DraftContext(current_pick=1, league=league).current_round == 1
        assert DraftContext(current_pick=10, league=league).current_round == 1
        assert DraftContext(current_pick=11, league=league).current_round == 2

    def test_fingerprint_tracks_settings(self):
        assert LeagueConfig().fingerprint() == LeagueConfig().fingerprint()
        assert LeagueConfig().fingerprint() != LeagueConfig(scoring_system="ppr").fingerprint()


class TestDraftModels:
    def test_order_delta(self):
        event = DraftEvent(
            order=20, candidate_id="p", category="wr", team_id="t1",
            timestamp=NAIVE_TS, expected_order=12,
        )
        assert event.category == "WR"
        assert event.order_delta == 8

    def test_order_delta_without_expected(self):
        event = DraftEvent(order=3, candidate_id="p", category="QB", team_id="t1", timestamp=NAIVE_TS)
        assert event.order_delta is None

    def test_signal_strength_bounds(self):
        with pytest.raises(ValidationError):
            TrendSignal(signal_type="tier_break", categories=["RB"], strength=1.5, description="x")
