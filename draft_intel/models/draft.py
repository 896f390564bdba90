"""
Draft event and trend signal models.

``DraftEvent`` is one pick in a live draft. Events form an append-only log
per draft session; they are never mutated or deleted once ingested.

``TrendSignal`` is a detected pattern over that log (or the remaining pool),
and ``RunPrediction`` is a forward-looking estimate that a positional run is
about to start.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SignalType = Literal["positional_run", "tier_break", "strategy_shift", "value_correction"]
VALID_SIGNAL_TYPES: frozenset[str] = frozenset(
    {"positional_run", "tier_break", "strategy_shift", "value_correction"}
)


class DraftEvent(BaseModel):
    """A single pick in a live draft.

    Attributes:
        order: Overall pick number; strictly increasing within a session.
        candidate_id: Candidate that was selected.
        category: Candidate's roster category.
        team_id: Drafting team.
        timestamp: When the pick was made.
        expected_order: Candidate's expected order at pick time; needed to
            measure reaches, steals and value corrections.
    """

    model_config = ConfigDict(frozen=True)

    order: int
    candidate_id: str
    category: str
    team_id: str
    timestamp: datetime
    expected_order: Optional[float] = None

    @field_validator("order")
    @classmethod
    def validate_order(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"order must be >= 1, got {v}.")
        return v

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def order_delta(self) -> Optional[float]:
        """Actual minus expected order; positive means the candidate fell."""
        if self.expected_order is None:
            return None
        return self.order - self.expected_order


class TrendSignal(BaseModel):
    """A detected draft trend.

    Attributes:
        signal_type: Kind of trend.
        categories: Roster categories affected.
        strength: Signal strength in [0, 1].
        description: Human-readable summary.
        recommendation: Suggested reaction.
        started_at: Pick order at which the trend began, when known.
        details: Detector-specific numbers (counts, averages, tier sizes).
    """

    model_config = ConfigDict(frozen=True)

    signal_type: SignalType
    categories: list[str]
    strength: float
    description: str
    recommendation: str = ""
    started_at: Optional[int] = None
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("strength")
    @classmethod
    def validate_strength(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"strength must be in [0, 1], got {v}.")
        return v


class RunPrediction(BaseModel):
    """Estimate that a run on ``category`` is imminent.

    Attributes:
        category: Roster category.
        probability: Weighted run probability in [0, 1].
        expected_duration: Expected number of picks the run lasts.
        top_targets: Best remaining candidate ids in the category.
        reasoning: Factors that pushed the probability up.
        recommendation: Suggested reaction.
    """

    model_config = ConfigDict(frozen=True)

    category: str
    probability: float
    expected_duration: int
    top_targets: list[str] = Field(default_factory=list)
    reasoning: list[str] = Field(default_factory=list)
    recommendation: str = ""

    @field_validator("probability")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"probability must be in [0, 1], got {v}.")
        return v
