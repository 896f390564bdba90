"""
TrendDetector: per-session facade over the event log and the pure detectors.

One ``TrendDetector`` is created per draft session and owns that session's
``DraftEventLog``; instances share nothing, so parallel drafts never see each
other's picks. Detection reads a pool snapshot supplied by the caller and
never mutates it.

Signal order from ``detect_all`` is stable: positional runs, tier breaks,
strategy shifts, value corrections.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional, Sequence

from draft_intel.config import TrendConfig
from draft_intel.models.candidate import Candidate
from draft_intel.models.draft import DraftEvent, RunPrediction, TrendSignal
from draft_intel.trends.detectors import (
    detect_position_run,
    detect_strategy_shift,
    detect_tier_break,
    detect_value_correction,
)
from draft_intel.trends.log import DraftEventLog
from draft_intel.trends.predictions import (
    MarketCorrection,
    PickDeviation,
    identify_reaches,
    identify_steals,
    market_corrections,
    predict_position_runs,
)

logger = logging.getLogger(__name__)


@dataclass
class TrendReport:
    """Everything the trend detector knows about the session right now."""

    picks:       int
    signals:     list[TrendSignal]      = field(default_factory=list)
    predictions: list[RunPrediction]    = field(default_factory=list)
    reaches:     list[PickDeviation]    = field(default_factory=list)
    steals:      list[PickDeviation]    = field(default_factory=list)
    markets:     list[MarketCorrection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "picks":       self.picks,
            "signals":     [s.model_dump(mode="json") for s in self.signals],
            "predictions": [p.model_dump(mode="json") for p in self.predictions],
            "reaches":     [asdict(r) for r in self.reaches],
            "steals":      [asdict(s) for s in self.steals],
            "markets":     [asdict(m) for m in self.markets],
        }


class TrendDetector:
    """Sequential trend detection for one draft session.

    Args:
        config: Trend windows and thresholds; defaults to ``TrendConfig()``.
        events: Optional events to ingest at construction.
    """

    def __init__(
        self,
        config: Optional[TrendConfig] = None,
        events: Optional[Iterable[DraftEvent]] = None,
    ) -> None:
        self.config = config or TrendConfig()
        cfg = self.config
        self.log = DraftEventLog(
            window_sizes=(
                cfg.prediction_window, cfg.run_window,
                cfg.correction_window, cfg.market_window,
            )
        )
        for event in events or ():
            self.ingest(event)

    def ingest(self, event: DraftEvent) -> None:
        """Append one pick to the session log.

        Raises:
            EventOrderError: If the pick is out of order.
        """
        self.log.append(event)

    def detect_position_run(self) -> list[TrendSignal]:
        cfg = self.config
        return detect_position_run(
            self.log.window(cfg.run_window), cfg.run_window, cfg.run_threshold
        )

    def detect_tier_break(self, pool: Sequence[Candidate]) -> list[TrendSignal]:
        return detect_tier_break(pool, self.config.tier_gap, self.config.tier_break_max_members)

    def detect_strategy_shift(self) -> list[TrendSignal]:
        return detect_strategy_shift(self.log.events)

    def detect_value_correction(self) -> list[TrendSignal]:
        cfg = self.config
        return detect_value_correction(
            self.log.window(cfg.correction_window), cfg.correction_window,
            cfg.correction_threshold,
        )

    def detect_all(self, pool: Sequence[Candidate]) -> list[TrendSignal]:
        """Run every detector and return the combined signal list.

        An empty pool yields no signals at all, even if the log shows a run.
        """
        if not pool:
            return []
        signals = [
            *self.detect_position_run(),
            *self.detect_tier_break(pool),
            *self.detect_strategy_shift(),
            *self.detect_value_correction(),
        ]
        logger.debug("Detected %d trend signal(s) after %d picks", len(signals), len(self.log))
        return signals

    def predict_runs(self, pool: Sequence[Candidate]) -> list[RunPrediction]:
        cfg = self.config
        return predict_position_runs(
            self.log.window(cfg.prediction_window),
            pool,
            window=cfg.prediction_window,
            scarcity_pool_size=cfg.scarcity_pool_size,
            threshold=cfg.prediction_threshold,
            urgent_threshold=cfg.prediction_urgent_threshold,
        )

    def report(self, pool: Sequence[Candidate]) -> TrendReport:
        """Bundle signals, predictions, reaches, steals and market corrections."""
        cfg = self.config
        events = self.log.events
        report = TrendReport(
            picks=len(events),
            signals=self.detect_all(pool),
            predictions=self.predict_runs(pool),
            reaches=identify_reaches(events, cfg.reach_threshold),
            steals=identify_steals(events, cfg.reach_threshold),
            markets=market_corrections(events, cfg.market_window),
        )
        logger.info(
            "Trend report: %d picks, %d signals, %d run predictions",
            report.picks, len(report.signals), len(report.predictions),
        )
        return report
