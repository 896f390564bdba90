"""
Historical prediction record model.

A ``HistoricalRecord`` pairs a prediction (with its stated confidence) with
the realized outcome once it is known. Records are immutable: a late or
corrected outcome is written as a *new* record whose ``corrects`` field names
the record it supersedes, and a record re-written under the same id replaces
the earlier write (latest write wins).

Correctness
-----------
Accuracy is defined only once ``actual_value`` is present. When the caller
supplies ``is_correct`` explicitly it is used as-is; otherwise correctness is
``|predicted_value − actual_value| <= tolerance`` (exact match by default,
which suits categorical picks encoded as numbers).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class HistoricalRecord(BaseModel):
    """One prediction and, once resolved, its outcome.

    Attributes:
        record_id: Stable identifier; re-writing an id replaces the record.
        category: Prediction category (e.g. ``"start_sit"``, ``"waiver"``).
        confidence: Stated confidence in [0, 100].
        predicted_value: Predicted value or encoded choice.
        actual_value: Realized value; ``None`` until resolved.
        is_correct: Explicit correctness flag; requires ``actual_value``.
        timestamp: When the prediction was made.
        week: Season week; derived from ``timestamp`` when absent.
        corrects: Id of the record this one supersedes.
        league_id: Owning league, for store partitioning.
        user_id: Owning user, for store partitioning.
    """

    model_config = ConfigDict(frozen=True)

    record_id: str
    category: str
    confidence: float
    predicted_value: float
    actual_value: Optional[float] = None
    is_correct: Optional[bool] = None
    timestamp: datetime
    week: Optional[int] = None
    corrects: Optional[str] = None
    league_id: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("record_id", "category")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("record_id and category must be non-empty.")
        return v

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"confidence must be in [0, 100], got {v}.")
        return v

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        # Naive timestamps are UTC.
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @field_validator("week")
    @classmethod
    def validate_week(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError(f"week must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_outcome(self) -> "HistoricalRecord":
        if self.is_correct is not None and self.actual_value is None:
            raise ValueError("is_correct cannot be set before actual_value is known.")
        if self.corrects is not None and self.corrects == self.record_id:
            raise ValueError("A record cannot correct itself.")
        return self

    @property
    def is_completed(self) -> bool:
        return self.actual_value is not None

    def correct(self, tolerance: float = 0.0) -> Optional[bool]:
        """Return whether the prediction was right, or ``None`` if unresolved."""
        if self.actual_value is None:
            return None
        if self.is_correct is not None:
            return self.is_correct
        return abs(self.predicted_value - self.actual_value) <= tolerance
