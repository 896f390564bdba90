"""
Calibration metrics over resolved prediction outcomes.

All functions are pure and take ``ResolvedOutcome`` sequences (a record plus
its correctness). Empty inputs return neutral baselines instead of raising.

CALIBRATION CURVE
    Ten buckets by stated confidence: floor(confidence / 10) × 10, with 100
    folded into the [90, 100] bucket. Each bucket reports sample size,
    average stated confidence and actual accuracy (``None`` when empty).
    Buckets are filled from running counters, never from per-bucket lists.

CALIBRATION SCORE
    1 − Σ_b n_b × |avg_confidence_b / 100 − accuracy_b| / N
    1.0 = perfectly calibrated; 0.0 for an empty history.

OVER / UNDERCONFIDENCE
    overconfidence  = incorrect / total among confidence >= 80
    underconfidence = correct   / total among confidence <= 40
    Both are 0.0 when no record falls in range.

STREAKS
    current = consecutive correct outcomes counting back from the latest;
    longest = longest run of correct outcomes; longest_losing likewise for
    incorrect outcomes. History lists every run of length >= 2.

ACCURACY TREND
    Outcomes bucketed by ``period_key`` (weekly/monthly/seasonal/yearly) in
    chronological order; each period carries accuracy, average confidence,
    and the change and percent change against the previous period.
    A least-squares slope across periods classifies the overall direction:
    |slope| < 0.001 → stable.
"""

from __future__ import annotations

import math
import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Sequence

from draft_intel.models.record import HistoricalRecord
from draft_intel.utils.time_utils import VALID_TIMEFRAMES, period_key

_BUCKET_COUNT = 10
_STABLE_SLOPE = 0.001


@dataclass(frozen=True)
class ResolvedOutcome:
    """A completed record paired with its correctness."""

    record:  HistoricalRecord
    correct: bool


# ── Calibration curve ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CalibrationBucket:
    """One confidence bucket of the calibration curve.

    Attributes:
        lower:                     Inclusive lower confidence bound.
        upper:                     Upper bound (exclusive, except 100 for the last bucket).
        sample_size:               Outcomes in the bucket.
        average_stated_confidence: Mean stated confidence; ``None`` when empty.
        actual_accuracy:           Fraction correct; ``None`` when empty.
    """

    lower:                     int
    upper:                     int
    sample_size:               int
    average_stated_confidence: Optional[float]
    actual_accuracy:           Optional[float]

    @property
    def calibration_error(self) -> Optional[float]:
        if self.average_stated_confidence is None or self.actual_accuracy is None:
            return None
        return abs(self.average_stated_confidence / 100.0 - self.actual_accuracy)


def bucket_index(confidence: float) -> int:
    """Return the 0–9 bucket index for a confidence in [0, 100]."""
    return min(int(confidence // 10), _BUCKET_COUNT - 1)


def calibration_curve(outcomes: Sequence[ResolvedOutcome]) -> list[CalibrationBucket]:
    """Return all ten calibration buckets, empty ones included."""
    counts = [0] * _BUCKET_COUNT
    correct = [0] * _BUCKET_COUNT
    conf_sum = [0.0] * _BUCKET_COUNT

    for o in outcomes:
        i = bucket_index(o.record.confidence)
        counts[i] += 1
        correct[i] += int(o.correct)
        conf_sum[i] += o.record.confidence

    buckets: list[CalibrationBucket] = []
    for i in range(_BUCKET_COUNT):
        n = counts[i]
        buckets.append(
            CalibrationBucket(
                lower=i * 10,
                upper=(i + 1) * 10,
                sample_size=n,
                average_stated_confidence=conf_sum[i] / n if n else None,
                actual_accuracy=correct[i] / n if n else None,
            )
        )
    return buckets


def calibration_score(buckets: Sequence[CalibrationBucket]) -> float:
    """Return 1 − sample-weighted mean calibration error (0.0 when empty)."""
    total = sum(b.sample_size for b in buckets)
    if total == 0:
        return 0.0
    weighted = sum(b.sample_size * (b.calibration_error or 0.0) for b in buckets)
    return 1.0 - weighted / total


# ── Over / underconfidence ────────────────────────────────────────────────────

def overconfidence_index(outcomes: Sequence[ResolvedOutcome], threshold: float = 80.0) -> float:
    high = [o for o in outcomes if o.record.confidence >= threshold]
    if not high:
        return 0.0
    return sum(1 for o in high if not o.correct) / len(high)


def underconfidence_index(outcomes: Sequence[ResolvedOutcome], threshold: float = 40.0) -> float:
    low = [o for o in outcomes if o.record.confidence <= threshold]
    if not low:
        return 0.0
    return sum(1 for o in low if o.correct) / len(low)


# ── Streaks ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Streak:
    """A run of consecutive outcomes with the same correctness."""

    correct:  bool
    length:   int
    start_id: str
    end_id:   str


@dataclass(frozen=True)
class StreakSummary:
    """Streak statistics over chronologically ordered outcomes."""

    current:        int
    longest:        int
    longest_losing: int
    history:        list[Streak] = field(default_factory=list)


def compute_streaks(outcomes: Sequence[ResolvedOutcome]) -> StreakSummary:
    """Compute streaks; ``outcomes`` must already be in chronological order."""
    runs: list[Streak] = []
    for o in outcomes:
        rid = o.record.record_id
        if runs and runs[-1].correct == o.correct:
            last = runs[-1]
            runs[-1] = Streak(last.correct, last.length + 1, last.start_id, rid)
        else:
            runs.append(Streak(o.correct, 1, rid, rid))

    current = runs[-1].length if runs and runs[-1].correct else 0
    longest = max((r.length for r in runs if r.correct), default=0)
    longest_losing = max((r.length for r in runs if not r.correct), default=0)
    return StreakSummary(
        current=current,
        longest=longest,
        longest_losing=longest_losing,
        history=[r for r in runs if r.length >= 2],
    )


# ── Accuracy trend ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PeriodAccuracy:
    """Accuracy for one time period of an accuracy trend."""

    period:             str
    total:              int
    correct:            int
    accuracy:           float
    average_confidence: float
    change:             Optional[float]
    percent_change:     Optional[float]


@dataclass(frozen=True)
class AccuracyTrend:
    """Chronological per-period accuracy plus overall direction."""

    timeframe:  str
    periods:    list[PeriodAccuracy]
    slope:      float
    direction:  str     # "improving" | "declining" | "stable"
    volatility: float   # population std-dev of period accuracies


def accuracy_trend(outcomes: Sequence[ResolvedOutcome], timeframe: str) -> AccuracyTrend:
    """Bucket outcomes by period and compute per-period accuracy and deltas.

    Raises:
        ValueError: If ``timeframe`` is not weekly, monthly, seasonal or yearly.
    """
    if timeframe not in VALID_TIMEFRAMES:
        raise ValueError(
            f"Unknown timeframe '{timeframe}'. Expected one of {sorted(VALID_TIMEFRAMES)}."
        )
    totals: dict[str, int] = defaultdict(int)
    correct: dict[str, int] = defaultdict(int)
    conf_sum: dict[str, float] = defaultdict(float)
    for o in outcomes:
        key = period_key(o.record.timestamp, timeframe)
        totals[key] += 1
        correct[key] += int(o.correct)
        conf_sum[key] += o.record.confidence

    periods: list[PeriodAccuracy] = []
    previous: Optional[float] = None
    for key in sorted(totals):
        acc = correct[key] / totals[key]
        change = None if previous is None else acc - previous
        pct = None if previous is None or previous == 0 else (acc - previous) / previous * 100.0
        periods.append(
            PeriodAccuracy(
                period=key,
                total=totals[key],
                correct=correct[key],
                accuracy=acc,
                average_confidence=conf_sum[key] / totals[key],
                change=change,
                percent_change=pct,
            )
        )
        previous = acc

    accuracies = [p.accuracy for p in periods]
    slope = _slope(accuracies)
    if abs(slope) < _STABLE_SLOPE:
        direction = "stable"
    else:
        direction = "improving" if slope > 0 else "declining"
    volatility = statistics.pstdev(accuracies) if len(accuracies) > 1 else 0.0
    return AccuracyTrend(timeframe, periods, slope, direction, volatility)


def _slope(values: Sequence[float]) -> float:
    n = len(values)
    if n < 2:
        return 0.0
    x_mean = (n - 1) / 2.0
    y_mean = statistics.fmean(values)
    num = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(values))
    den = sum((i - x_mean) ** 2 for i in range(n))
    return num / den if den else 0.0


# ── Category performance / correlation ───────────────────────────────────────

@dataclass(frozen=True)
class CategoryPerformance:
    """Accuracy and calibration for one prediction category."""

    category:           str
    total:              int
    accuracy:           float
    average_confidence: float
    calibration_error:  float


def category_performance(outcomes: Sequence[ResolvedOutcome]) -> list[CategoryPerformance]:
    """Per-category accuracy, sorted by accuracy desc, then sample size desc, then name."""
    totals: dict[str, int] = defaultdict(int)
    correct: dict[str, int] = defaultdict(int)
    conf_sum: dict[str, float] = defaultdict(float)
    for o in outcomes:
        cat = o.record.category
        totals[cat] += 1
        correct[cat] += int(o.correct)
        conf_sum[cat] += o.record.confidence

    rows = []
    for cat, n in totals.items():
        acc = correct[cat] / n
        avg_conf = conf_sum[cat] / n
        rows.append(CategoryPerformance(cat, n, acc, avg_conf, abs(avg_conf / 100.0 - acc)))
    rows.sort(key=lambda r: (-r.accuracy, -r.total, r.category))
    return rows


def confidence_correlation(outcomes: Sequence[ResolvedOutcome]) -> float:
    """Pearson correlation between stated confidence and correctness (0.0 if undefined)."""
    if len(outcomes) < 2:
        return 0.0
    xs = [o.record.confidence for o in outcomes]
    ys = [1.0 if o.correct else 0.0 for o in outcomes]
    x_mean, y_mean = statistics.fmean(xs), statistics.fmean(ys)
    cov = sum((x - x_mean) * (y - y_mean) for x, y in zip(xs, ys))
    var_x = sum((x - x_mean) ** 2 for x in xs)
    var_y = sum((y - y_mean) ** 2 for y in ys)
    if var_x == 0 or var_y == 0:
        return 0.0
    return cov / math.sqrt(var_x * var_y)
