"""
Trend detectors: pure functions over a draft event sequence or pool snapshot.

POSITIONAL RUN
    Count picks per category in the trailing ``window`` (default 8) events.
    Any category picked at least ``threshold`` (default 4) times emits a
    ``positional_run``. Strength = count / window.

TIER BREAK
    Sort each category's remaining candidates by projected output and start a
    new tier whenever the gap between consecutive candidates exceeds ``gap``
    (default 15). When the top tier has ``max_members`` (default 2) or fewer
    candidates left, emit ``tier_break``. Strength: 1.0 with one left, 0.5 with
    two (scaled linearly for other ``max_members`` values).

STRATEGY SHIFT
    Split the full log into halves. A category picked more than twice as often
    in the first half as in the second emits ``strategy_shift``.
    Strength = (first − second) / first.

VALUE CORRECTION
    Average (actual order − expected order) over the trailing ``window``
    (default 10) events that carry an expected order. |avg| > ``threshold``
    (default 10) emits ``value_correction``; positive means candidates are
    falling, negative means they are going early. Strength = min(1, |avg| / 30).

Every detector returns an empty list for an empty log or pool.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter, defaultdict
from typing import Sequence

from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent, TrendSignal

logger = logging.getLogger(__name__)

# Average order delta at which a value correction reaches full strength
_CORRECTION_SATURATION = 30.0


def detect_position_run(
    events: Sequence[DraftEvent],
    window: int = 8,
    threshold: int = 4,
) -> list[TrendSignal]:
    """Emit a ``positional_run`` per category over-represented in recent picks.

    Args:
        events:    Full event log, oldest first (only the tail is read).
        window:    Trailing window size.
        threshold: Minimum picks of one category inside the window.

    Returns:
        Signals ordered by count descending, then category.
    """
    recent = list(events[-window:]) if window > 0 else []
    if not recent:
        return []

    counts = Counter(e.category for e in recent)
    signals: list[TrendSignal] = []
    for category, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        if count < threshold:
            continue
        started_at = next(e.order for e in recent if e.category == category)
        signals.append(
            TrendSignal(
                signal_type="positional_run",
                categories=[category],
                strength=min(1.0, count / window),
                description=f"Heavy {category} run in progress ({count} of last {len(recent)} picks)",
                recommendation=(
                    f"Consider pivoting to other positions or grabbing remaining {category} value"
                ),
                started_at=started_at,
                details={"count": count, "window": window},
            )
        )
    return signals


def group_into_tiers(candidates: Sequence[Candidate], gap: float = 15.0) -> list[list[Candidate]]:
    """Partition candidates (any order) into tiers by projected-output gaps."""
    ordered = sorted(candidates, key=lambda c: (-c.projected_output, c.candidate_id))
    tiers: list[list[Candidate]] = []
    current: list[Candidate] = []
    last = ordered[0].projected_output if ordered else 0.0
    for c in ordered:
        if current and last - c.projected_output > gap:
            tiers.append(current)
            current = []
        current.append(c)
        last = c.projected_output
    if current:
        tiers.append(current)
    return tiers


def detect_tier_break(
    pool: Sequence[Candidate],
    gap: float = 15.0,
    max_members: int = 2,
) -> list[TrendSignal]:
    """Emit a ``tier_break`` for each category whose top tier is nearly gone.

    Args:
        pool:        Remaining candidates.
        gap:         Projected-output gap that starts a new tier.
        max_members: Top-tier size at or below which the signal fires.

    Returns:
        Signals ordered by category.
    """
    by_cat: dict[str, list[Candidate]] = defaultdict(list)
    for c in pool:
        by_cat[c.category].append(c)

    signals: list[TrendSignal] = []
    for category in sorted(by_cat):
        tiers = group_into_tiers(by_cat[category], gap)
        top = tiers[0]
        if len(top) > max_members:
            continue
        strength = 1.0 if max_members <= 1 else (max_members + 1 - len(top)) / max_members
        signals.append(
            TrendSignal(
                signal_type="tier_break",
                categories=[category],
                strength=max(0.0, min(1.0, strength)),
                description=f"{category} tier 1 nearly exhausted",
                recommendation=(
                    f"Only {len(top)} elite {category}s left. Priority target if needed."
                ),
                details={
                    "tier": 1,
                    "remaining": len(top),
                    "candidate_ids": [c.candidate_id for c in top],
                    "tier_count": len(tiers),
                },
            )
        )
    return signals


def detect_strategy_shift(events: Sequence[DraftEvent]) -> list[TrendSignal]:
    """Emit a ``strategy_shift`` per category that fell out of favour.

    Returns:
        Signals ordered by strength descending, then category; empty when the
        log has fewer than two events.
    """
    if len(events) < 2:
        return []

    mid = len(events) // 2
    first = Counter(e.category for e in events[:mid])
    second = Counter(e.category for e in events[mid:])

    signals: list[TrendSignal] = []
    for category, first_count in first.items():
        second_count = second.get(category, 0)
        if first_count <= second_count * 2:
            continue
        others = sorted(c for c in second if c != category)
        signals.append(
            TrendSignal(
                signal_type="strategy_shift",
                categories=[category, *others],
                strength=(first_count - second_count) / first_count,
                description=f"Draft shifting from {category}-heavy to other positions",
                recommendation="Adjust strategy based on available value",
                started_at=events[mid].order,
                details={"first_half": first_count, "second_half": second_count},
            )
        )
    signals.sort(key=lambda s: (-s.strength, s.categories[0]))
    return signals


def detect_value_correction(
    events: Sequence[DraftEvent],
    window: int = 10,
    threshold: float = 10.0,
) -> list[TrendSignal]:
    """Emit one ``value_correction`` when recent picks drift from expected order.

    Events without an expected order are ignored; if none in the window carry
    one, no signal is emitted.
    """
    recent = list(events[-window:]) if window > 0 else []
    deltas = [e.order_delta for e in recent if e.order_delta is not None]
    if not deltas:
        return []

    avg = statistics.fmean(deltas)
    if abs(avg) <= threshold:
        return []

    falling = avg > 0
    return [
        TrendSignal(
            signal_type="value_correction",
            categories=sorted({e.category for e in recent}),
            strength=min(1.0, abs(avg) / _CORRECTION_SATURATION),
            description=(
                "Players falling below expected order" if falling
                else "Players going above expected order"
            ),
            recommendation="Look for value picks" if falling else "Don't wait on targets",
            started_at=recent[0].order,
            details={"average_delta": round(avg, 2), "sample_size": len(deltas)},
        )
    ]
