"""
ScoringEngine: scores and ranks candidates for one draft context.

Usage flow
----------
1. engine = ScoringEngine(config.scoring, predictor=...)
2. engine.rank(context)            -> list[ScoredCandidate] (best first)
3. build_board(ranked, context)    -> DraftBoard (see scoring.board)

Score formula
-------------
    score = clamp(Σ factor_i × weight_i, 0, 100)

Ordering
--------
Score descending; ties broken by ascending expected order, then by
candidate id, so rankings are fully deterministic.

The engine holds no draft state. Its only cache is the weight-profile cache,
so one engine may serve many concurrent scoring calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from draft_intel.config import ScoringConfig
from draft_intel.errors import DataQualityWarning
from draft_intel.ml.predictor import Prediction, Predictor
from draft_intel.models.candidate import Candidate, DraftContext, LeagueConfig
from draft_intel.scoring.explain import (
    format_explanation,
    generate_explanation,
    recommendation_confidence,
)
from draft_intel.scoring.factors import FactorVector, calculate_factors
from draft_intel.scoring.weights import WeightProfile, WeightProfileCache, apply_overrides

logger = logging.getLogger(__name__)


@dataclass
class ScoredCandidate:
    """A candidate with its score, breakdown and explanation.

    Attributes:
        candidate:   The scored candidate.
        score:       Weighted score clamped to [0, 100].
        factors:     Factor breakdown.
        explanation: Explanation phrases (see ``scoring.explain``).
        confidence:  Recommendation confidence in [20, 95].
        warnings:    Data-quality warnings raised while extracting factors.
        prediction:  Predictor output used for the projection, if any.
    """

    candidate:   Candidate
    score:       float
    factors:     FactorVector
    explanation: list[str]
    confidence:  float
    warnings:    list[DataQualityWarning] = field(default_factory=list)
    prediction:  Optional[Prediction] = None

    @property
    def explanation_text(self) -> str:
        return format_explanation(self.explanation)

    def to_dict(self) -> dict:
        return {
            "candidate_id": self.candidate.candidate_id,
            "name":         self.candidate.name,
            "category":     self.candidate.category,
            "expected_order": self.candidate.expected_order,
            "score":        self.score,
            "confidence":   self.confidence,
            "explanation":  self.explanation_text,
            "factors":      self.factors.as_dict(),
            "warnings":     [w.message for w in self.warnings],
        }


class ScoringEngine:
    """Multi-factor candidate scorer.

    Args:
        config:    Scoring settings; defaults to ``ScoringConfig()``.
        predictor: Optional injected predictor used in the projection blend.
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        predictor: Optional[Predictor] = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.predictor = predictor
        self._profiles = WeightProfileCache()

    def weight_profile(self, league: LeagueConfig, strategy: str = "balanced") -> WeightProfile:
        """Return the (cached) weight profile for ``(league, strategy)``."""
        return self._profiles.get(league, strategy)

    def score_candidate(
        self,
        candidate: Candidate,
        context: DraftContext,
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> ScoredCandidate:
        """Score a single candidate in ``context``.

        Args:
            candidate:        Candidate to score (need not be in ``context.available``).
            context:          Draft snapshot.
            weight_overrides: Optional per-factor multipliers on the profile.

        Returns:
            ``ScoredCandidate``.
        """
        profile = self._resolve_profile(context, weight_overrides)
        return self._score(candidate, context, profile)

    def rank(
        self,
        context: DraftContext,
        candidates: Optional[Iterable[Candidate]] = None,
        limit: Optional[int] = None,
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> list[ScoredCandidate]:
        """Score and order candidates, best first.

        Args:
            context:          Draft snapshot.
            candidates:       Candidates to rank; defaults to ``context.available``.
            limit:            Keep only the first ``limit`` results.
            weight_overrides: Optional per-factor multipliers on the profile.

        Returns:
            Ranked ``ScoredCandidate`` list; empty for an empty pool.
        """
        pool = list(context.available if candidates is None else candidates)
        if not pool:
            return []

        profile = self._resolve_profile(context, weight_overrides)
        scored = [self._score(c, context, profile) for c in pool]
        scored.sort(
            key=lambda s: (-s.score, s.candidate.expected_order, s.candidate.candidate_id)
        )

        warned = sum(1 for s in scored if s.warnings)
        logger.info(
            "Ranked %d candidates at pick %d (league=%s, strategy=%s, %d with data warnings)",
            len(scored), context.current_pick, context.league.league_id,
            context.strategy, warned,
        )
        return scored[:limit] if limit is not None else scored

    # ── Internals ─────────────────────────────────────────────────────────────

    def _resolve_profile(
        self,
        context: DraftContext,
        weight_overrides: Optional[Mapping[str, float]],
    ) -> WeightProfile:
        profile = self._profiles.get(context.league, context.strategy)
        if weight_overrides:
            profile = apply_overrides(profile, weight_overrides)
        return profile

    def _score(
        self,
        candidate: Candidate,
        context: DraftContext,
        profile: WeightProfile,
    ) -> ScoredCandidate:
        result = calculate_factors(candidate, context, self.predictor, self.config)
        total = max(0.0, min(100.0, profile.apply(result.factors)))
        return ScoredCandidate(
            candidate=candidate,
            score=round(total, 2),
            factors=result.factors,
            explanation=generate_explanation(result.factors),
            confidence=recommendation_confidence(candidate, result.factors),
            warnings=result.warnings,
            prediction=result.prediction,
        )
