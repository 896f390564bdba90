"""
Exception types and data-quality notices shared across draft-intel.

Raised errors:
  DraftIntelError           — base class for every error raised by the package.
  NotFoundError             — a record id is unknown to a store or tracker.
  ScoringConfigurationError — a weight profile cannot be built (fatal).
  EventOrderError           — a draft event arrives out of order (structurally invalid).
  RecordValidationError     — one import row fails validation; collected, not propagated.
  PredictorUnavailable      — the injected predictor cannot serve a request.

``DataQualityWarning`` is not an exception: scoring never aborts for missing
optional inputs, so warnings are collected on the result instead.
"""

from __future__ import annotations

from dataclasses import dataclass


class DraftIntelError(Exception):
    """Base class for all draft-intel errors."""


class NotFoundError(DraftIntelError, KeyError):
    """Requested record id does not exist."""

    def __init__(self, record_id: str) -> None:
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"Record not found: '{self.record_id}'"


class ScoringConfigurationError(DraftIntelError):
    """Weight profile could not be built from the league configuration."""


class EventOrderError(DraftIntelError, ValueError):
    """Draft event order is not strictly increasing."""


class RecordValidationError(DraftIntelError, ValueError):
    """A single historical record failed validation during import."""


class PredictorUnavailable(DraftIntelError):
    """The injected predictor could not produce a prediction."""


@dataclass(frozen=True)
class DataQualityWarning:
    """Notice that a factor fell back to its neutral value.

    Attributes:
        candidate_id: Candidate whose input was missing.
        factor:       Name of the affected factor.
        message:      Human-readable description of the gap.
    """

    candidate_id: str
    factor:       str
    message:      str
