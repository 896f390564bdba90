"""
Export and import of historical records.

Formats
-------
json : ``{"format_version": 1, "exported_at": ..., "count": N, "records": [...]}``.
       Import also accepts a bare list of record objects.
csv  : header row of ``EXPORT_COLUMNS``; empty cells mean "absent".

Import validation is per record. Required fields:
  record_id (alias ``id``), category, confidence (numeric), predicted_value,
  timestamp (ISO 8601; a trailing ``Z`` is accepted).
A record that fails is reported as ``"record <n>: <reason>"`` and skipped;
the rest of the batch still imports.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from draft_intel.errors import RecordValidationError
from draft_intel.models.record import HistoricalRecord
from draft_intel.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
VALID_FORMATS: frozenset[str] = frozenset({"json", "csv"})

EXPORT_COLUMNS: list[str] = [
    "record_id", "category", "confidence", "predicted_value", "actual_value",
    "is_correct", "timestamp", "week", "corrects", "league_id", "user_id",
]


@dataclass(frozen=True)
class RecordFilter:
    """Export filter; ``None`` fields do not filter.

    Attributes:
        categories:     Keep only these categories.
        start:          Keep records at or after this timestamp.
        end:            Keep records at or before this timestamp.
        min_confidence: Keep records with confidence >= this value.
        completed_only: Keep only resolved records.
    """

    categories:     Optional[frozenset[str]] = None
    start:          Optional[datetime] = None
    end:            Optional[datetime] = None
    min_confidence: Optional[float] = None
    completed_only: bool = False

    def __post_init__(self) -> None:
        # Naive bounds are UTC, like record timestamps.
        for name in ("start", "end"):
            val = getattr(self, name)
            if val is not None and val.tzinfo is None:
                object.__setattr__(self, name, val.replace(tzinfo=timezone.utc))

    def matches(self, record: HistoricalRecord) -> bool:
        if self.categories is not None and record.category not in self.categories:
            return False
        if self.start is not None and record.timestamp < self.start:
            return False
        if self.end is not None and record.timestamp > self.end:
            return False
        if self.min_confidence is not None and record.confidence < self.min_confidence:
            return False
        if self.completed_only and not record.is_completed:
            return False
        return True


@dataclass
class ImportResult:
    """Outcome of an import: accepted record count and per-record errors."""

    imported_count: int = 0
    errors:         list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"imported_count": self.imported_count, "errors": list(self.errors)}


# ── Export ────────────────────────────────────────────────────────────────────

def dump_records(records: Iterable[HistoricalRecord], fmt: str) -> str:
    """Serialize ``records`` as JSON or CSV text.

    Raises:
        ValueError: If ``fmt`` is not ``json`` or ``csv``.
    """
    records = list(records)
    if fmt == "json":
        payload = {
            "format_version": FORMAT_VERSION,
            "exported_at":    utcnow().isoformat(),
            "count":          len(records),
            "records":        [r.model_dump(mode="json") for r in records],
        }
        return json.dumps(payload, indent=2)
    if fmt == "csv":
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
        writer.writeheader()
        for r in records:
            writer.writerow(_record_to_csv_row(r))
        return buf.getvalue()
    raise ValueError(f"Unknown export format '{fmt}'. Expected one of {sorted(VALID_FORMATS)}.")


def _record_to_csv_row(record: HistoricalRecord) -> dict[str, str]:
    data = record.model_dump(mode="json")
    row: dict[str, str] = {}
    for col in EXPORT_COLUMNS:
        val = data.get(col)
        if val is None:
            row[col] = ""
        elif isinstance(val, bool):
            row[col] = "true" if val else "false"
        else:
            row[col] = str(val)
    return row


# ── Import ────────────────────────────────────────────────────────────────────

def load_rows(data: str, fmt: str) -> list[dict[str, Any]]:
    """Parse raw JSON/CSV text into row dicts.

    Raises:
        RecordValidationError: If the payload as a whole cannot be parsed.
        ValueError: If ``fmt`` is unknown.
    """
    if fmt == "json":
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            raise RecordValidationError(f"payload is not valid JSON: {exc}") from exc
        rows = payload.get("records") if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise RecordValidationError("payload must be a list or contain a 'records' list")
        return rows
    if fmt == "csv":
        reader = csv.DictReader(io.StringIO(data))
        if reader.fieldnames is None:
            return []
        return list(reader)
    raise ValueError(f"Unknown import format '{fmt}'. Expected one of {sorted(VALID_FORMATS)}.")


def parse_records(data: str, fmt: str) -> tuple[list[HistoricalRecord], list[str]]:
    """Parse and validate every record in ``data``.

    Returns:
        ``(valid_records, errors)``; a payload-level failure yields no records
        and a single error.
    """
    try:
        rows = load_rows(data, fmt)
    except RecordValidationError as exc:
        return [], [str(exc)]

    records: list[HistoricalRecord] = []
    errors: list[str] = []
    for i, row in enumerate(rows, start=1):
        try:
            records.append(row_to_record(row))
        except RecordValidationError as exc:
            errors.append(f"record {i}: {exc}")
        except ValidationError as exc:
            errors.append(f"record {i}: {_summarize(exc)}")

    if errors:
        logger.warning("%d of %d record(s) rejected during import", len(errors), len(rows))
    return records, errors


def row_to_record(row: Any) -> HistoricalRecord:
    """Convert one JSON object or CSV row into a validated record.

    Raises:
        RecordValidationError: On missing or non-numeric required fields.
        pydantic.ValidationError: On model-level validation failure.
    """
    if not isinstance(row, dict):
        raise RecordValidationError("record must be an object")

    record_id = _req(row, "record_id", alias="id")
    return HistoricalRecord(
        record_id=record_id,
        category=_req(row, "category"),
        confidence=_req_float(row, "confidence"),
        predicted_value=_req_float(row, "predicted_value"),
        actual_value=_opt_float(row, "actual_value"),
        is_correct=_opt_bool(row, "is_correct"),
        timestamp=_parse_datetime(_req(row, "timestamp")),
        week=_opt_int(row, "week"),
        corrects=_opt(row, "corrects"),
        league_id=_opt(row, "league_id"),
        user_id=_opt(row, "user_id"),
    )


# ── Private helpers ───────────────────────────────────────────────────────────

def _opt(row: dict[str, Any], key: str, alias: Optional[str] = None) -> Optional[str]:
    val = row.get(key)
    if val is None and alias is not None:
        val = row.get(alias)
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def _req(row: dict[str, Any], key: str, alias: Optional[str] = None) -> str:
    val = _opt(row, key, alias)
    if val is None:
        raise RecordValidationError(f"missing required field '{key}'")
    return val


def _to_float(key: str, val: Any) -> float:
    if isinstance(val, bool):
        raise RecordValidationError(f"field '{key}' must be numeric, got {val!r}")
    try:
        num = float(val)
    except (TypeError, ValueError):
        raise RecordValidationError(f"field '{key}' must be numeric, got {val!r}") from None
    if not math.isfinite(num):
        raise RecordValidationError(f"field '{key}' must be finite, got {val!r}")
    return num


def _req_float(row: dict[str, Any], key: str) -> float:
    val = row.get(key)
    if val is None or (isinstance(val, str) and not val.strip()):
        raise RecordValidationError(f"missing required field '{key}'")
    return _to_float(key, val)


def _opt_float(row: dict[str, Any], key: str) -> Optional[float]:
    val = row.get(key)
    if val is None or (isinstance(val, str) and not val.strip()):
        return None
    return _to_float(key, val)


def _opt_int(row: dict[str, Any], key: str) -> Optional[int]:
    val = _opt_float(row, key)
    if val is None:
        return None
    if val != int(val):
        raise RecordValidationError(f"field '{key}' must be a whole number, got {val!r}")
    return int(val)


def _opt_bool(row: dict[str, Any], key: str) -> Optional[bool]:
    val = row.get(key)
    if val is None or isinstance(val, bool):
        return val
    text = str(val).strip().lower()
    if not text:
        return None
    if text in ("true", "1", "yes", "t", "y"):
        return True
    if text in ("false", "0", "no", "f", "n"):
        return False
    raise RecordValidationError(f"field '{key}' must be a boolean, got {val!r}")


def _parse_datetime(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise RecordValidationError(
            f"invalid timestamp '{text}'; expected ISO 8601, e.g. '2025-09-07T17:00:00Z'"
        ) from None


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
