"""
Predictor interface: the injected source of opaque (value, confidence) pairs.

The scoring engine never trains or calls a model directly. It builds a small
feature mapping per candidate (``build_features``) and asks the injected
``Predictor`` for a projected season output plus a confidence in [0, 100].
A predictor that cannot serve a candidate either returns ``None`` or raises
``PredictorUnavailable``; both leave the projection factor on the candidate's
own projection with a data-quality warning.

Implementations
---------------
StaticPredictor : lookup table keyed by candidate id. Deterministic, used in
                  tests and for replaying externally produced predictions
                  loaded from JSON.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from draft_intel.errors import PredictorUnavailable
from draft_intel.models.candidate import Candidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prediction:
    """One predictor output.

    Attributes:
        value:      Predicted season output (same units as ``projected_output``).
        confidence: Predictor's stated confidence in [0, 100].
    """

    value:      float
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError(f"confidence must be in [0, 100], got {self.confidence}.")


@runtime_checkable
class Predictor(Protocol):
    """Anything that maps a feature mapping to a ``Prediction``."""

    def predict(self, features: Mapping[str, Any]) -> Optional[Prediction]:
        ...


def build_features(candidate: Candidate) -> dict[str, Any]:
    """Return the feature mapping passed to ``Predictor.predict``."""
    meta = candidate.metadata
    return {
        "candidate_id":     candidate.candidate_id,
        "category":         candidate.category,
        "expected_order":   candidate.expected_order,
        "projected_output": candidate.projected_output,
        "age":              meta.age,
        "years_experience": meta.years_experience,
        "injury_risk":      meta.injury_risk,
        "season_average":   meta.season_average,
    }


class StaticPredictor:
    """Predictor backed by a fixed ``candidate_id -> Prediction`` table.

    Args:
        table:  Predictions keyed by candidate id.
        strict: If ``True``, unknown candidates raise ``PredictorUnavailable``
                instead of returning ``None``.
    """

    def __init__(self, table: Mapping[str, Prediction], strict: bool = False) -> None:
        self._table = dict(table)
        self._strict = strict

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, float]]) -> "StaticPredictor":
        """Build from ``{"id": {"value": ..., "confidence": ...}}`` (parsed JSON)."""
        return cls(
            {
                cid: Prediction(value=float(p["value"]), confidence=float(p["confidence"]))
                for cid, p in raw.items()
            }
        )

    def predict(self, features: Mapping[str, Any]) -> Optional[Prediction]:
        cid = str(features.get("candidate_id", ""))
        prediction = self._table.get(cid)
        if prediction is None and self._strict:
            raise PredictorUnavailable(f"No prediction for candidate '{cid}'.")
        return prediction

    def __len__(self) -> int:
        return len(self._table)
