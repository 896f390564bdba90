"""
Tests for draft_intel/trends/log.py and detectors.py.

What we test
------------
DraftEventLog:
  - Strictly increasing pick order; out-of-order picks raise EventOrderError.
  - Trailing windows return the last N events, oldest first.

detect_position_run():
  - Eight straight same-category picks in an 8-pick window → one signal, count 8.
  - Below threshold → nothing; more same-category picks never weaken the signal.
  - Empty log → nothing.

detect_tier_break():
  - Fires when the top tier has at most ``max_members`` left; strength by size.
  - Empty pool → nothing.

detect_strategy_shift():
  - First-half count more than double the second half → signal.
  - A two-pick log is enough; a single pick is quiet.

detect_value_correction():
  - Average drift beyond the threshold → falling/rising signal.
  - Events without expected order are ignored.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from draft_intel.errors import EventOrderError
from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent
from draft_intel.trends.detectors import (
    detect_position_run,
    detect_strategy_shift,
    detect_tier_break,
    detect_value_correction,
    group_into_tiers,
)
from draft_intel.trends.log import DraftEventLog

_TS = datetime(2025, 8, 30, 19, 0, tzinfo=timezone.utc)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _ev(order: int, category: str = "RB", expected_order: float | None = None) -> DraftEvent:
    return DraftEvent(
        order=order,
        candidate_id=f"p{order}",
        category=category,
        team_id=f"t{order % 12}",
        timestamp=_TS + timedelta(minutes=order),
        expected_order=expected_order,
    )


def _cand(cid: str, category: str, projected_output: float) -> Candidate:
    return Candidate(
        candidate_id=cid, category=category, expected_order=10, projected_output=projected_output,
    )


# ── DraftEventLog ─────────────────────────────────────────────────────────────

class TestDraftEventLog:
    def test_append_in_order(self):
        log = DraftEventLog(events=[_ev(1), _ev(2), _ev(5)])
        assert len(log) == 3
        assert log.last.order == 5

    def test_out_of_order_raises(self):
        log = DraftEventLog(events=[_ev(1), _ev(2)])
        with pytest.raises(EventOrderError):
            log.append(_ev(2))
        with pytest.raises(EventOrderError):
            log.append(_ev(1))
        assert len(log) == 2

    def test_event_order_error_is_value_error(self):
        with pytest.raises(ValueError):
            DraftEventLog(events=[_ev(3), _ev(2)])

    def test_window_returns_trailing_events(self):
        log = DraftEventLog(events=[_ev(i) for i in range(1, 13)])
        assert [e.order for e in log.window(5)] == [8, 9, 10, 11, 12]
        assert [e.order for e in log.window(3)] == [10, 11, 12]
        assert log.window(0) == []

    def test_window_larger_than_log(self):
        log = DraftEventLog(events=[_ev(1), _ev(2)])
        assert [e.order for e in log.window(20)] == [1, 2]

    def test_empty_log(self):
        log = DraftEventLog()
        assert log.last is None
        assert list(log) == []


# ── Positional runs ───────────────────────────────────────────────────────────

class TestPositionRun:
    def test_eight_straight_picks(self):
        signals = detect_position_run([_ev(i, "WR") for i in range(1, 9)], window=8, threshold=4)
        assert len(signals) == 1
        s = signals[0]
        assert s.signal_type == "positional_run"
        assert s.categories == ["WR"]
        assert s.details["count"] == 8
        assert s.strength == pytest.approx(1.0)
        assert s.started_at == 1

    def test_below_threshold(self):
        events = [_ev(i, "RB" if i <= 3 else "WR" if i <= 6 else "QB") for i in range(1, 9)]
        assert detect_position_run(events) == []

    def test_only_window_counts(self):
        events = [_ev(i, "RB") for i in range(1, 6)] + [_ev(i, "WR") for i in range(6, 14)]
        signals = detect_position_run(events, window=8)
        assert [s.categories for s in signals] == [["WR"]]

    def test_more_picks_never_weaken_signal(self):
        base = [_ev(i, "TE" if i % 2 else "K") for i in range(1, 9)]
        strengths = []
        for extra in range(0, 4):
            events = base[extra:] + [_ev(9 + j, "TE") for j in range(extra)]
            run = [s for s in detect_position_run(events) if s.categories == ["TE"]]
            strengths.append(run[0].strength)
        assert strengths == sorted(strengths)

    def test_empty_log(self):
        assert detect_position_run([]) == []


# ── Tier breaks ───────────────────────────────────────────────────────────────

class TestTierBreak:
    def test_group_into_tiers(self):
        pool = [_cand("a", "TE", 200), _cand("b", "TE", 190), _cand("c", "TE", 150)]
        tiers = group_into_tiers(pool, gap=15)
        assert [[c.candidate_id for c in t] for t in tiers] == [["a", "b"], ["c"]]

    def test_two_left_in_top_tier(self):
        pool = [_cand("a", "TE", 200), _cand("b", "TE", 190), _cand("c", "TE", 150)]
        signals = detect_tier_break(pool)
        assert len(signals) == 1
        assert signals[0].strength == pytest.approx(0.5)
        assert signals[0].recommendation == "Only 2 elite TEs left. Priority target if needed."

    def test_one_left_is_full_strength(self):
        pool = [_cand("a", "QB", 380), _cand("b", "QB", 300)]
        assert detect_tier_break(pool)[0].strength == pytest.approx(1.0)

    def test_deep_top_tier_is_quiet(self):
        pool = [_cand(c, "WR", 250 - i) for i, c in enumerate("abcd")]
        assert detect_tier_break(pool) == []

    def test_empty_pool(self):
        assert detect_tier_break([]) == []


# ── Strategy shift ────────────────────────────────────────────────────────────

class TestStrategyShift:
    def test_category_abandoned_in_second_half(self):
        events = [_ev(i, "RB") for i in range(1, 6)] + [_ev(i, "WR") for i in range(6, 11)]
        signals = detect_strategy_shift(events)
        rb = [s for s in signals if s.categories[0] == "RB"]
        assert len(rb) == 1
        assert rb[0].strength == pytest.approx(1.0)
        assert "WR" in rb[0].categories

    def test_balanced_draft_is_quiet(self):
        events = [_ev(i, "RB" if i % 2 else "WR") for i in range(1, 11)]
        assert detect_strategy_shift(events) == []

    def test_needs_two_events(self):
        assert detect_strategy_shift([_ev(1)]) == []

    def test_two_picks_are_enough(self):
        signals = detect_strategy_shift([_ev(1, "RB"), _ev(2, "WR")])
        assert len(signals) == 1
        assert signals[0].categories == ["RB", "WR"]
        assert signals[0].started_at == 2
        assert signals[0].details == {"first_half": 1, "second_half": 0}


# ── Value correction ──────────────────────────────────────────────────────────

class TestValueCorrection:
    def test_players_falling(self):
        events = [_ev(i, expected_order=i - 20) for i in range(21, 31)]
        signals = detect_value_correction(events)
        assert len(signals) == 1
        s = signals[0]
        assert s.description == "Players falling below expected order"
        assert s.recommendation == "Look for value picks"
        assert s.strength == pytest.approx(20 / 30)

    def test_players_going_early(self):
        events = [_ev(i, expected_order=i + 40) for i in range(1, 11)]
        s = detect_value_correction(events)[0]
        assert s.recommendation == "Don't wait on targets"
        assert s.strength == pytest.approx(1.0)

    def test_within_threshold_is_quiet(self):
        events = [_ev(i, expected_order=i - 5) for i in range(10, 20)]
        assert detect_value_correction(events) == []

    def test_events_without_expected_order_ignored(self):
        assert detect_value_correction([_ev(i) for i in range(1, 11)]) == []
