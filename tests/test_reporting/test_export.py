"""Tests for draft_intel.reporting.export."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from draft_intel.reporting.export import (
    export_to_csv,
    export_to_json,
    flatten_category_performance,
    flatten_rankings_for_export,
    write_text,
)
from draft_intel.scoring.factors import FACTOR_NAMES


# ── export_to_csv ─────────────────────────────────────────────────────────────


def test_export_to_csv_basic(tmp_path: Path) -> None:
    """Writes a valid CSV with correct headers and values."""
    records = [
        {"candidate_id": "rb1", "score": 72.5, "category": "RB"},
        {"candidate_id": "wr1", "score": 45.0, "category": "WR"},
    ]
    out = tmp_path / "test.csv"
    result = export_to_csv(records, out)

    assert result == out
    with out.open(encoding="utf-8") as f:
        reader = list(csv.DictReader(f))
    assert len(reader) == 2
    assert reader[0]["candidate_id"] == "rb1"
    assert reader[1]["category"] == "WR"


def test_export_to_csv_custom_fieldnames(tmp_path: Path) -> None:
    """Custom fieldnames control column order; extra keys are dropped."""
    out = tmp_path / "cols.csv"
    export_to_csv([{"a": 1, "b": 2, "c": 3}], out, fieldnames=["c", "a"])

    with out.open(encoding="utf-8") as f:
        header = f.readline().strip()
    assert header == "c,a"


def test_export_to_csv_empty_creates_empty_file(tmp_path: Path) -> None:
    out = tmp_path / "sub" / "empty.csv"
    export_to_csv([], out)
    assert out.exists()
    assert out.read_text(encoding="utf-8") == ""


# ── export_to_json / write_text ───────────────────────────────────────────────


def test_export_to_json_round_trips(tmp_path: Path) -> None:
    data = {"picks": 3, "signals": [{"signal_type": "positional_run"}]}
    out = export_to_json(data, tmp_path / "nested" / "report.json")
    assert json.loads(out.read_text(encoding="utf-8")) == data


def test_write_text(tmp_path: Path) -> None:
    out = write_text("record_id,category\n", tmp_path / "records.csv")
    assert out.read_text(encoding="utf-8") == "record_id,category\n"


# ── Flatteners ────────────────────────────────────────────────────────────────


def test_flatten_rankings_for_export() -> None:
    ranked = [
        {
            "candidate_id": "rb1",
            "name": "RB1",
            "category": "RB",
            "expected_order": 5.0,
            "score": 71.2,
            "confidence": 90,
            "explanation": "Excellent value at current pick",
            "factors": {"value_vs_expected": 90.0, "projected_output": 85.7},
            "warnings": ["missing schedule", "missing team"],
        },
        {"candidate_id": "wr1", "factors": {}, "warnings": []},
    ]
    rows = flatten_rankings_for_export(ranked)

    assert [r["rank"] for r in rows] == [1, 2]
    assert rows[0]["f_value_vs_expected"] == 90.0
    assert rows[0]["warnings"] == "missing schedule | missing team"
    for name in FACTOR_NAMES:
        assert f"f_{name}" in rows[1]
    assert rows[1]["warnings"] == ""


def test_flatten_category_performance_rounds() -> None:
    report = {
        "categories": [
            {
                "category": "waiver",
                "total": 6,
                "accuracy": 2 / 3,
                "average_confidence": 71.23456,
                "calibration_error": 0.045678,
            }
        ]
    }
    rows = flatten_category_performance(report)
    assert rows == [
        {
            "rank": 1,
            "category": "waiver",
            "total": 6,
            "accuracy": 0.6667,
            "average_confidence": 71.2346,
            "calibration_error": 0.0457,
        }
    ]
    assert flatten_category_performance({}) == []
