"""
Tests for draft_intel/trends/detector.py.

What we test
------------
TrendDetector:
  - ingest() enforces pick order.
  - detect_all() on an empty pool returns no signals.
  - detect_all() combines detectors in a stable order.
  - Thresholds come from TrendConfig.
  - Separate detectors do not share state.
  - report() bundles signals, predictions, reaches, steals and markets.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from draft_intel.config import TrendConfig
from draft_intel.errors import EventOrderError
from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent
from draft_intel.trends.detector import TrendDetector

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


def _pool() -> list[Candidate]:
    return [
        Candidate(candidate_id="te1", category="TE", expected_order=30, projected_output=200),
        Candidate(candidate_id="te2", category="TE", expected_order=60, projected_output=120),
    ]


class TestTrendDetector:
    def test_ingest_rejects_out_of_order(self):
        detector = TrendDetector(events=[_ev(1), _ev(2)])
        with pytest.raises(EventOrderError):
            detector.ingest(_ev(2))

    def test_empty_pool_has_no_signals(self):
        detector = TrendDetector(events=[_ev(i, "WR") for i in range(1, 9)])
        assert detector.detect_all([]) == []
        assert detector.predict_runs([]) == []

    def test_signal_order(self):
        events = [_ev(i, "RB", expected_order=i - 20) for i in range(21, 31)]
        detector = TrendDetector(events=events)
        types = [s.signal_type for s in detector.detect_all(_pool())]
        assert types == ["positional_run", "tier_break", "value_correction"]

    def test_config_thresholds_apply(self):
        events = [_ev(i, "WR") for i in range(1, 4)]
        assert TrendDetector(events=events).detect_position_run() == []
        loose = TrendConfig(run_window=3, run_threshold=3)
        signals = TrendDetector(loose, events).detect_position_run()
        assert signals[0].details["count"] == 3

    def test_sessions_are_independent(self):
        a = TrendDetector()
        b = TrendDetector()
        a.ingest(_ev(1))
        b.ingest(_ev(1))
        assert len(a.log) == 1
        assert len(b.log) == 1

    def test_report(self, sample_events):
        detector = TrendDetector(events=sample_events)
        detector.ingest(_ev(11, "TE", expected_order=40))
        report = detector.report(_pool())
        assert report.picks == 11
        assert [r.candidate_id for r in report.reaches] == ["p11"]
        d = report.to_dict()
        assert set(d) == {"picks", "signals", "predictions", "reaches", "steals", "markets"}
        assert all(isinstance(s, dict) for s in d["signals"])
