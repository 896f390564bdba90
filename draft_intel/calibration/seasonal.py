"""
Seasonal partitions of prediction accuracy.

Weeks map to four partitions:
    early     weeks 1–6
    mid       weeks 7–12
    late      weeks 13–18
    playoffs  weeks 19–22

A record's week is its own ``week`` field when present, otherwise derived
from its timestamp and the configured season start. Records whose week
cannot be determined, or falls outside 1–22, are left out of every
partition and counted in ``unassigned``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from draft_intel.calibration.metrics import ResolvedOutcome, category_performance
from draft_intel.utils.time_utils import season_week

PARTITIONS: tuple[tuple[str, int, int], ...] = (
    ("early",    1,  6),
    ("mid",      7,  12),
    ("late",     13, 18),
    ("playoffs", 19, 22),
)

_TOP_CATEGORIES = 3
# Accuracy gap (fraction) between partitions worth calling out
_NOTABLE_GAP = 0.10


@dataclass(frozen=True)
class SeasonalPartition:
    """Accuracy within one part of the season."""

    name:               str
    first_week:         int
    last_week:          int
    total:              int
    correct:            int
    accuracy:           Optional[float]
    average_confidence: Optional[float]
    top_categories:     list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SeasonalPatterns:
    """All four partitions plus derived insight strings."""

    partitions: list[SeasonalPartition]
    unassigned: int
    insights:   list[str]


def partition_for_week(week: int) -> Optional[str]:
    for name, first, last in PARTITIONS:
        if first <= week <= last:
            return name
    return None


def resolve_week(outcome: ResolvedOutcome, season_start: Optional[date]) -> Optional[int]:
    record = outcome.record
    if record.week is not None:
        return record.week
    return season_week(record.timestamp, season_start)


def seasonal_patterns(
    outcomes: Sequence[ResolvedOutcome],
    season_start: Optional[date] = None,
) -> SeasonalPatterns:
    """Partition outcomes by season week and summarize each partition.

    Args:
        outcomes:     Resolved outcomes (any order).
        season_start: First day of week 1, for records without a week.

    Returns:
        ``SeasonalPatterns`` with all four partitions (empty ones included).
    """
    grouped: dict[str, list[ResolvedOutcome]] = {name: [] for name, _, _ in PARTITIONS}
    unassigned = 0
    for o in outcomes:
        week = resolve_week(o, season_start)
        name = partition_for_week(week) if week is not None else None
        if name is None:
            unassigned += 1
        else:
            grouped[name].append(o)

    partitions: list[SeasonalPartition] = []
    for name, first, last in PARTITIONS:
        members = grouped[name]
        n = len(members)
        correct = sum(1 for o in members if o.correct)
        top = [c.category for c in category_performance(members)[:_TOP_CATEGORIES]]
        partitions.append(
            SeasonalPartition(
                name=name,
                first_week=first,
                last_week=last,
                total=n,
                correct=correct,
                accuracy=correct / n if n else None,
                average_confidence=(
                    sum(o.record.confidence for o in members) / n if n else None
                ),
                top_categories=top,
            )
        )

    return SeasonalPatterns(partitions, unassigned, _insights(partitions))


def _insights(partitions: list[SeasonalPartition]) -> list[str]:
    scored = [p for p in partitions if p.accuracy is not None]
    if not scored:
        return []

    insights: list[str] = []
    best = max(scored, key=lambda p: (p.accuracy, p.total))
    worst = min(scored, key=lambda p: (p.accuracy, -p.total))
    insights.append(f"Strongest period: {best.name} season ({best.accuracy:.0%} accuracy)")
    if worst.name != best.name and best.accuracy - worst.accuracy >= _NOTABLE_GAP:
        insights.append(
            f"Weakest period: {worst.name} season ({worst.accuracy:.0%} accuracy), "
            f"{(best.accuracy - worst.accuracy) * 100:.0f} points below {best.name}"
        )

    for p in scored:
        if p.average_confidence is not None and p.average_confidence / 100.0 - p.accuracy >= _NOTABLE_GAP:
            insights.append(
                f"Overconfident in {p.name} season: stated {p.average_confidence:.0f}% "
                f"vs actual {p.accuracy:.0%}"
            )
    return insights
