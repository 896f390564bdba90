"""
Forward-looking draft analysis: run predictions, reaches, steals, and
per-category market corrections.

Run probability
---------------
For each category present in the pool::

    momentum      = picks of the category in the last ``window`` (5) / window
    scarcity      = 1 − available / scarcity_pool_size (50), clamped to [0, 1]
    tier_pressure = min(1, (best − 6th best) / 50) over the top 10 available
                    (the last of the top 10 when fewer than 6 remain)

    probability   = 0.3 × momentum + 0.4 × scarcity + 0.3 × tier_pressure

Predictions are emitted when probability > 0.5 ("Monitor ...") and flagged
as urgent above 0.7 ("Strongly consider grabbing ..."). Expected run length
is ceil(probability × 8) picks.

Reaches and steals
------------------
reach = expected order − actual order; steal = actual − expected. Both use a
15-pick threshold; magnitude classes are ≤20 / ≤35 / beyond (minor, moderate,
significant for reaches; good, great, incredible for steals).

Market corrections
------------------
Average (actual − expected) per category over the last 20 picks:
> 5 undervalued, < −5 overvalued, otherwise normal.
"""

from __future__ import annotations

import math
import statistics
from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent, RunPrediction

_MOMENTUM_WEIGHT = 0.3
_SCARCITY_WEIGHT = 0.4
_TIER_WEIGHT     = 0.3
_TIER_DROPOFF_SCALE = 50.0
_MAX_RUN_LENGTH  = 8


def predict_position_runs(
    events: Sequence[DraftEvent],
    pool: Sequence[Candidate],
    window: int = 5,
    scarcity_pool_size: int = 50,
    threshold: float = 0.5,
    urgent_threshold: float = 0.7,
) -> list[RunPrediction]:
    """Estimate which categories are about to see a run.

    Args:
        events:             Event log, oldest first.
        pool:               Remaining candidates.
        window:             Momentum window size.
        scarcity_pool_size: Pool size treated as "fully stocked".
        threshold:          Minimum probability to emit a prediction.
        urgent_threshold:   Probability above which the advice is urgent.

    Returns:
        Predictions sorted by probability descending, then category.
    """
    if not pool:
        return []

    recent = list(events[-window:]) if window > 0 else []
    by_cat: dict[str, list[Candidate]] = defaultdict(list)
    for c in pool:
        by_cat[c.category].append(c)

    predictions: list[RunPrediction] = []
    for category, available in by_cat.items():
        momentum = sum(1 for e in recent if e.category == category) / window
        scarcity = max(0.0, min(1.0, 1.0 - len(available) / scarcity_pool_size))
        top = sorted(available, key=lambda c: (-c.projected_output, c.candidate_id))[:10]
        tier_pressure = _tier_pressure(top)

        probability = (
            momentum * _MOMENTUM_WEIGHT
            + scarcity * _SCARCITY_WEIGHT
            + tier_pressure * _TIER_WEIGHT
        )
        if probability <= threshold:
            continue

        probability = min(1.0, probability)
        reasoning: list[str] = []
        if momentum > 0.4:
            reasoning.append("recent draft momentum")
        if scarcity > 0.5:
            reasoning.append("position scarcity")
        if tier_pressure > 0.5:
            reasoning.append("tier dropoff")

        predictions.append(
            RunPrediction(
                category=category,
                probability=round(probability, 4),
                expected_duration=math.ceil(probability * _MAX_RUN_LENGTH),
                top_targets=[c.candidate_id for c in top[:3]],
                reasoning=reasoning,
                recommendation=(
                    f"Strongly consider grabbing a {category} now"
                    if probability > urgent_threshold
                    else f"Monitor {category} availability closely"
                ),
            )
        )

    predictions.sort(key=lambda p: (-p.probability, p.category))
    return predictions


def _tier_pressure(top: list[Candidate]) -> float:
    if not top:
        return 1.0
    dropoff = top[0].projected_output - top[min(5, len(top) - 1)].projected_output
    return max(0.0, min(1.0, dropoff / _TIER_DROPOFF_SCALE))


# ── Reaches and steals ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PickDeviation:
    """A pick made well before (reach) or after (steal) its expected order.

    Attributes:
        candidate_id:   Candidate picked.
        order:          Actual overall pick.
        expected_order: Expected overall pick.
        amount:         Picks of deviation (always positive).
        grade:          Magnitude class.
        explanation:    Human-readable summary.
    """

    candidate_id:   str
    order:          int
    expected_order: float
    amount:         float
    grade:          str
    explanation:    str


def _magnitude(amount: float, labels: tuple[str, str, str]) -> str:
    if amount <= 20:
        return labels[0]
    if amount <= 35:
        return labels[1]
    return labels[2]


def identify_reaches(events: Sequence[DraftEvent], threshold: float = 15.0) -> list[PickDeviation]:
    """Return picks made more than ``threshold`` picks early, largest first."""
    reaches: list[PickDeviation] = []
    for e in events:
        if e.expected_order is None:
            continue
        amount = e.expected_order - e.order
        if amount > threshold:
            reaches.append(
                PickDeviation(
                    candidate_id=e.candidate_id,
                    order=e.order,
                    expected_order=e.expected_order,
                    amount=amount,
                    grade=_magnitude(amount, ("minor", "moderate", "significant")),
                    explanation=(
                        f"{e.candidate_id} selected {amount:.0f} picks early. "
                        "Consider if need justified the reach."
                    ),
                )
            )
    return sorted(reaches, key=lambda r: (-r.amount, r.order))


def identify_steals(events: Sequence[DraftEvent], threshold: float = 15.0) -> list[PickDeviation]:
    """Return picks made more than ``threshold`` picks late, largest first."""
    steals: list[PickDeviation] = []
    for e in events:
        if e.expected_order is None:
            continue
        amount = e.order - e.expected_order
        if amount > threshold:
            steals.append(
                PickDeviation(
                    candidate_id=e.candidate_id,
                    order=e.order,
                    expected_order=e.expected_order,
                    amount=amount,
                    grade=_magnitude(amount, ("good", "great", "incredible")),
                    explanation=(
                        f"{e.candidate_id} fell {amount:.0f} picks. "
                        f"Excellent value at pick {e.order}."
                    ),
                )
            )
    return sorted(steals, key=lambda s: (-s.amount, s.order))


# ── Market corrections ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MarketCorrection:
    """Per-category drift between actual and expected pick order."""

    category:       str
    average_delta:  float
    sample_size:    int
    trend:          str   # "undervalued" | "overvalued" | "normal"
    recommendation: str


def market_corrections(events: Sequence[DraftEvent], window: int = 20) -> list[MarketCorrection]:
    """Summarize how each category is being drafted relative to expectation.

    Args:
        events: Event log, oldest first.
        window: Number of trailing events considered.

    Returns:
        One entry per category with at least one measurable pick, by category.
    """
    deltas: dict[str, list[float]] = defaultdict(list)
    for e in list(events[-window:]) if window > 0 else []:
        if e.order_delta is not None:
            deltas[e.category].append(e.order_delta)

    results: list[MarketCorrection] = []
    for category in sorted(deltas):
        avg = statistics.fmean(deltas[category])
        if avg > 5:
            trend = "undervalued"
        elif avg < -5:
            trend = "overvalued"
        else:
            trend = "normal"

        if avg > 10:
            rec = f"{category}s are falling. Great opportunity for value."
        elif avg < -10:
            rec = f"{category}s are going early. Don't wait on your targets."
        else:
            rec = f"{category} market is stable."

        results.append(
            MarketCorrection(category, round(avg, 2), len(deltas[category]), trend, rec)
        )
    return results
