"""
CalibrationTracker: reconciles stated confidence with realized outcomes.

State model
-----------
The tracker owns an append-only log of ``HistoricalRecord`` writes. The
*effective* record set is derived from that log:

  1. Latest write per ``record_id`` wins, so a duplicate id never counts twice.
  2. A record named in another effective record's ``corrects`` field is
     superseded and drops out (corrections chain: C → B → A leaves only C).

Only effective records with an ``actual_value`` are *resolved* and take part
in accuracy metrics. Resolved outcomes are ordered by timestamp, then by
write order.

Caching
-------
Every computed view is cached against an append counter, so
reads between writes are free and always consistent with the log. A lock
serializes appends against cache fills, making one tracker safe to share
between a writer and concurrent readers.

Persistence
-----------
With a ``HistoricalRecordStore`` attached, every append is also ``put`` to
the store; ``CalibrationTracker.from_store`` rebuilds a tracker from it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from draft_intel.calibration.metrics import (
    AccuracyTrend,
    CalibrationBucket,
    CategoryPerformance,
    ResolvedOutcome,
    StreakSummary,
    accuracy_trend,
    calibration_curve,
    calibration_score,
    category_performance,
    compute_streaks,
    confidence_correlation,
    overconfidence_index,
    underconfidence_index,
)
from draft_intel.calibration.seasonal import SeasonalPatterns, seasonal_patterns
from draft_intel.calibration.serialization import (
    ImportResult,
    RecordFilter,
    dump_records,
    parse_records,
)
from draft_intel.calibration.store import HistoricalRecordStore
from draft_intel.config import CalibrationConfig
from draft_intel.errors import NotFoundError
from draft_intel.models.record import HistoricalRecord
from draft_intel.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

# Improvement-suggestion thresholds
_LOW_ACCURACY      = 0.70
_WEAK_CATEGORY     = 0.60
_MAX_WEAK_CATEGORIES = 3
_NOTABLE_STREAK    = 5


@dataclass(frozen=True)
class CalibrationCurve:
    """Ten calibration buckets with their overall score."""

    buckets:     list[CalibrationBucket]
    score:       float
    sample_size: int


@dataclass
class CalibrationReport:
    """Snapshot of every calibration metric, for callers that retune weights."""

    generated_at:         str
    total_records:        int
    resolved_records:     int
    overall_accuracy:     Optional[float]
    curve:                CalibrationCurve
    overconfidence:       float
    underconfidence:      float
    streaks:              StreakSummary
    trend:                AccuracyTrend
    seasonal:             SeasonalPatterns
    categories:           list[CategoryPerformance]
    correlation:          float
    suggestions:          list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        from dataclasses import asdict
        return asdict(self)


class CalibrationTracker:
    """Tracks prediction outcomes for one league/user.

    Args:
        config:    Calibration settings; defaults to ``CalibrationConfig()``.
        store:     Optional persistence; every append is written through.
        league_id: Owner league, used for store partitioning.
        user_id:   Owner user, used for store partitioning.
    """

    def __init__(
        self,
        config: Optional[CalibrationConfig] = None,
        store: Optional[HistoricalRecordStore] = None,
        league_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        self.config = config or CalibrationConfig()
        self.store = store
        self.league_id = league_id
        self.user_id = user_id
        self._log: list[HistoricalRecord] = []
        self._cache: dict[tuple, Any] = {}
        self._version = 0
        self._cache_version = 0
        self._lock = threading.RLock()

    @classmethod
    def from_store(
        cls,
        store: HistoricalRecordStore,
        config: Optional[CalibrationConfig] = None,
        league_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "CalibrationTracker":
        """Build a tracker whose log is the store's records in write order."""
        tracker = cls(config=config, store=store, league_id=league_id, user_id=user_id)
        tracker._log.extend(store.list(league_id=league_id, user_id=user_id))
        logger.info("Loaded %d historical record(s) from store", len(tracker._log))
        return tracker

    # ── Writes ────────────────────────────────────────────────────────────────

    def record_outcome(self, record: HistoricalRecord) -> None:
        """Append a record (a new prediction, an outcome, or a correction).

        Raises:
            NotFoundError: If ``record.corrects`` names an unknown record.
        """
        with self._lock:
            if record.corrects is not None and not any(
                r.record_id == record.corrects for r in self._log
            ):
                raise NotFoundError(record.corrects)
            self._append(record)

    def _append(self, record: HistoricalRecord) -> None:
        record = self._owned(record)
        self._log.append(record)
        self._version += 1
        if self.store is not None:
            self.store.put(record)

    def _owned(self, record: HistoricalRecord) -> HistoricalRecord:
        updates = {}
        if record.league_id is None and self.league_id is not None:
            updates["league_id"] = self.league_id
        if record.user_id is None and self.user_id is not None:
            updates["user_id"] = self.user_id
        return record.model_copy(update=updates) if updates else record

    # ── Record views ──────────────────────────────────────────────────────────

    @property
    def version(self) -> int:
        """Number of writes applied; bumps on every append or reset."""
        return self._version

    @property
    def records(self) -> list[HistoricalRecord]:
        """Effective records: latest write per id, superseded records removed."""
        return self._cached(("records",), self._effective)

    def get_record(self, record_id: str) -> HistoricalRecord:
        """Return the effective record with ``record_id``.

        Raises:
            NotFoundError: If the id is unknown or has been superseded.
        """
        for r in self.records:
            if r.record_id == record_id:
                return r
        raise NotFoundError(record_id)

    def resolved(self) -> list[ResolvedOutcome]:
        """Resolved effective records in chronological order."""
        return self._cached(("resolved",), self._resolved)

    def _effective(self) -> list[HistoricalRecord]:
        latest: dict[str, tuple[int, HistoricalRecord]] = {}
        for seq, r in enumerate(self._log):
            latest[r.record_id] = (seq, r)
        superseded = {r.corrects for _, r in latest.values() if r.corrects is not None}
        kept = [(seq, r) for rid, (seq, r) in latest.items() if rid not in superseded]
        kept.sort(key=lambda item: item[0])
        return [r for _, r in kept]

    def _resolved(self) -> list[ResolvedOutcome]:
        tol = self.config.correctness_tolerance
        indexed = [(i, r) for i, r in enumerate(self.records) if r.is_completed]
        indexed.sort(key=lambda item: (item[1].timestamp, item[0]))
        return [ResolvedOutcome(r, bool(r.correct(tol))) for _, r in indexed]

    def _cached(self, key: tuple, compute: Callable[[], Any]) -> Any:
        with self._lock:
            if self._cache_version != self._version:
                self._cache.clear()
                self._cache_version = self._version
            if key not in self._cache:
                self._cache[key] = compute()
            return self._cache[key]

    # ── Metrics ───────────────────────────────────────────────────────────────

    def compute_accuracy_trend(self, timeframe: str = "weekly") -> AccuracyTrend:
        """Per-period accuracy for ``weekly``, ``monthly``, ``seasonal`` or ``yearly``."""
        return self._cached(
            ("trend", timeframe), lambda: accuracy_trend(self.resolved(), timeframe)
        )

    def compute_calibration_curve(self) -> CalibrationCurve:
        def build() -> CalibrationCurve:
            buckets = calibration_curve(self.resolved())
            return CalibrationCurve(
                buckets=buckets,
                score=calibration_score(buckets),
                sample_size=sum(b.sample_size for b in buckets),
            )
        return self._cached(("curve",), build)

    def compute_overconfidence_index(self) -> float:
        """Fraction incorrect among resolved records at or above the high-confidence threshold."""
        return self._cached(
            ("over",),
            lambda: overconfidence_index(self.resolved(), self.config.overconfidence_threshold),
        )

    def compute_underconfidence_index(self) -> float:
        """Fraction correct among resolved records at or below the low-confidence threshold."""
        return self._cached(
            ("under",),
            lambda: underconfidence_index(self.resolved(), self.config.underconfidence_threshold),
        )

    def compute_streaks(self) -> StreakSummary:
        return self._cached(("streaks",), lambda: compute_streaks(self.resolved()))

    def compute_seasonal_patterns(self) -> SeasonalPatterns:
        return self._cached(
            ("seasonal",),
            lambda: seasonal_patterns(self.resolved(), self.config.season_start),
        )

    def compute_category_performance(self) -> list[CategoryPerformance]:
        return self._cached(("categories",), lambda: category_performance(self.resolved()))

    def compute_confidence_correlation(self) -> float:
        return self._cached(("correlation",), lambda: confidence_correlation(self.resolved()))

    def overall_accuracy(self) -> Optional[float]:
        outcomes = self.resolved()
        if not outcomes:
            return None
        return sum(1 for o in outcomes if o.correct) / len(outcomes)

    def improvement_suggestions(self) -> list[str]:
        """Plain-language suggestions derived from accuracy, categories and streaks."""
        suggestions: list[str] = []
        accuracy = self.overall_accuracy()
        if accuracy is None:
            return suggestions

        if accuracy < _LOW_ACCURACY:
            suggestions.append(
                "Focus on improving prediction accuracy through better research and analysis"
            )
        if self.compute_overconfidence_index() > 1 - _LOW_ACCURACY:
            suggestions.append(
                "High-confidence predictions miss too often; lower stated confidence "
                f"above {self.config.overconfidence_threshold:.0f}"
            )
        weak = sorted(
            (c for c in self.compute_category_performance()
             if c.accuracy < _WEAK_CATEGORY and c.total >= self.config.min_bucket_samples),
            key=lambda c: (c.accuracy, c.category),
        )[:_MAX_WEAK_CATEGORIES]
        for c in weak:
            suggestions.append(f"Improve performance in {c.category} predictions ({c.accuracy:.0%})")

        trend = self.compute_accuracy_trend("weekly")
        if trend.direction == "improving":
            suggestions.append("Accuracy is trending up; keep the current approach")
        streaks = self.compute_streaks()
        if streaks.current > _NOTABLE_STREAK:
            suggestions.append(
                f"On a {streaks.current}-prediction winning streak; guard against overconfidence"
            )
        return suggestions

    def build_report(self, timeframe: str = "weekly") -> CalibrationReport:
        report = CalibrationReport(
            generated_at=utcnow().isoformat(),
            total_records=len(self.records),
            resolved_records=len(self.resolved()),
            overall_accuracy=self.overall_accuracy(),
            curve=self.compute_calibration_curve(),
            overconfidence=self.compute_overconfidence_index(),
            underconfidence=self.compute_underconfidence_index(),
            streaks=self.compute_streaks(),
            trend=self.compute_accuracy_trend(timeframe),
            seasonal=self.compute_seasonal_patterns(),
            categories=self.compute_category_performance(),
            correlation=self.compute_confidence_correlation(),
            suggestions=self.improvement_suggestions(),
        )
        logger.info(
            "Calibration report: %d resolved of %d records, score %.3f",
            report.resolved_records, report.total_records, report.curve.score,
        )
        return report

    # ── Export / import ───────────────────────────────────────────────────────

    def export_records(self, fmt: str = "json", filters: Optional[RecordFilter] = None) -> str:
        """Serialize the effective record set (optionally filtered) as JSON or CSV."""
        records = [r for r in self.records if filters is None or filters.matches(r)]
        logger.info("Exporting %d record(s) as %s", len(records), fmt)
        return dump_records(records, fmt)

    def import_records(self, data: str, fmt: str = "json", merge: bool = True) -> ImportResult:
        """Import records from JSON or CSV text.

        Args:
            data:  Serialized payload.
            fmt:   ``json`` or ``csv``.
            merge: ``True`` merges by id (latest write wins; records identical to
                   the latest write for their id are skipped, so re-importing
                   the same payload changes nothing). ``False`` replaces the
                   tracker's record set, and the store's matching records.

        Returns:
            ``ImportResult`` with the accepted count and per-record errors.
        """
        parsed, errors = parse_records(data, fmt)
        result = ImportResult(imported_count=len(parsed), errors=errors)

        with self._lock:
            if not merge:
                self._log = []
                self._version += 1
                if self.store is not None:
                    removed = self.store.clear(self.league_id, self.user_id)
                    logger.debug("Replaced store contents (%d removed)", removed)

            current = {r.record_id: r for r in self._log}
            for record in parsed:
                owned = self._owned(record)
                if current.get(owned.record_id) == owned:
                    continue
                self._append(owned)
                current[owned.record_id] = owned

        logger.info(
            "Imported %d record(s) (%s, merge=%s), %d error(s)",
            result.imported_count, fmt, merge, len(result.errors),
        )
        return result

    def __len__(self) -> int:
        return len(self.records)


def load_tracker(
    records: Iterable[HistoricalRecord],
    config: Optional[CalibrationConfig] = None,
) -> CalibrationTracker:
    """Build an in-memory tracker from ``records`` in the given order."""
    tracker = CalibrationTracker(config=config)
    for r in records:
        tracker.record_outcome(r)
    return tracker
