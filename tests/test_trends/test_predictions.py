"""
Tests for draft_intel/trends/predictions.py.

What we test
------------
predict_position_runs():
  - Momentum + scarcity + tier pressure above 0.7 → urgent advice.
  - Between 0.5 and 0.7 → "monitor" advice.
  - A deep, flat category produces no prediction.
  - Empty pool → nothing.

identify_reaches() / identify_steals():
  - 15-pick threshold and magnitude grades.

market_corrections():
  - Per-category average drift classified as undervalued / overvalued / normal.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent
from draft_intel.trends.predictions import (
    identify_reaches,
    identify_steals,
    market_corrections,
    predict_position_runs,
)

_TS = datetime(2025, 8, 30, 19, 0, tzinfo=timezone.utc)


def _ev(order: int, category: str = "RB", expected_order: float | None = None) -> DraftEvent:
    return DraftEvent(
        order=order,
        candidate_id=f"p{order}",
        category=category,
        team_id="t1",
        timestamp=_TS + timedelta(minutes=order),
        expected_order=expected_order,
    )


def _cand(cid: str, category: str, projected_output: float) -> Candidate:
    return Candidate(
        candidate_id=cid, category=category, expected_order=50, projected_output=projected_output,
    )


class TestPredictPositionRuns:
    def test_urgent_run(self):
        pool = [_cand("te1", "TE", 200), _cand("te2", "TE", 150), _cand("te3", "TE", 140)]
        events = [_ev(i, "TE") for i in range(1, 6)]
        preds = predict_position_runs(events, pool)
        assert len(preds) == 1
        p = preds[0]
        assert p.category == "TE"
        assert p.probability == pytest.approx(0.3 + 0.4 * (1 - 3 / 50) + 0.3, abs=1e-4)
        assert p.recommendation == "Strongly consider grabbing a TE now"
        assert p.reasoning == ["recent draft momentum", "position scarcity", "tier dropoff"]
        assert p.top_targets == ["te1", "te2", "te3"]
        assert p.expected_duration == 8

    def test_monitor_run(self):
        pool = [_cand(f"rb{i}", "RB", 300 - 10 * i) for i in range(10)]
        preds = predict_position_runs([], pool)
        assert len(preds) == 1
        assert preds[0].probability == pytest.approx(0.4 * 0.8 + 0.3, abs=1e-4)
        assert preds[0].recommendation == "Monitor RB availability closely"

    def test_deep_flat_category_is_quiet(self):
        pool = [_cand(f"wr{i}", "WR", 200) for i in range(50)]
        assert predict_position_runs([_ev(1, "WR")], pool) == []

    def test_only_categories_in_pool(self):
        pool = [_cand(f"wr{i}", "WR", 200) for i in range(50)]
        events = [_ev(i, "K") for i in range(1, 6)]
        assert all(p.category != "K" for p in predict_position_runs(events, pool))

    def test_empty_pool(self):
        assert predict_position_runs([_ev(1)], []) == []


class TestReachesAndSteals:
    def test_reach(self):
        reaches = identify_reaches([_ev(10, expected_order=40), _ev(20, expected_order=30)])
        assert [(r.candidate_id, r.amount, r.grade) for r in reaches] == [("p10", 30, "moderate")]

    def test_steal(self):
        steals = identify_steals([_ev(50, expected_order=10), _ev(60, expected_order=42)])
        assert [(s.candidate_id, s.grade) for s in steals] == [("p50", "incredible"), ("p60", "good")]

    def test_missing_expected_order_ignored(self):
        assert identify_reaches([_ev(1)]) == []
        assert identify_steals([_ev(1)]) == []


class TestMarketCorrections:
    def test_classification(self):
        events = [
            _ev(21, "RB", expected_order=9),
            _ev(22, "WR", expected_order=28),
            _ev(23, "RB", expected_order=11),
            _ev(24, "TE"),
        ]
        by_cat = {m.category: m for m in market_corrections(events)}
        assert set(by_cat) == {"RB", "WR"}
        assert by_cat["RB"].trend == "undervalued"
        assert by_cat["RB"].average_delta == pytest.approx(12.0)
        assert by_cat["RB"].recommendation == "RBs are falling. Great opportunity for value."
        assert by_cat["WR"].trend == "overvalued"
        assert by_cat["WR"].recommendation == "WR market is stable."
