"""
Export helpers for spreadsheets and manual analysis.

All functions write to disk and return the written ``Path``.
They accept generic ``list[dict]`` data to stay decoupled from
specific report shapes.

CSV exports are flat (no nested dicts) so they open directly in Excel or a
notebook without any pre-processing step.

``flatten_rankings_for_export()`` is the main adapter function: it converts
``ScoredCandidate.to_dict()`` rows (with a nested ``factors`` mapping) into
one flat row per candidate with every factor as its own ``f_*`` column.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from draft_intel.scoring.factors import FACTOR_NAMES


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file (parent dirs created if missing)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def write_text(text: str, path: Path) -> Path:
    """Write pre-serialized ``text`` (e.g. a record export) to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def flatten_rankings_for_export(ranked: list[dict]) -> list[dict]:
    """Flatten ranked-candidate dicts into one row per candidate.

    Each row contains:
    - ``rank``, ``candidate_id``, ``name``, ``category``, ``expected_order``
    - ``score``, ``confidence``, ``explanation``
    - ``f_<factor>`` for each of the fifteen factors
    - ``warnings`` joined with ``" | "``

    Args:
        ranked: ``ScoredCandidate.to_dict()`` rows in rank order.

    Returns:
        List of flat row dicts.
    """
    rows: list[dict] = []
    for i, item in enumerate(ranked, start=1):
        factors = item.get("factors", {})
        row = {
            "rank":           i,
            "candidate_id":   item.get("candidate_id", ""),
            "name":           item.get("name", ""),
            "category":       item.get("category", ""),
            "expected_order": item.get("expected_order", ""),
            "score":          item.get("score", ""),
            "confidence":     item.get("confidence", ""),
            "explanation":    item.get("explanation", ""),
        }
        for name in FACTOR_NAMES:
            row[f"f_{name}"] = factors.get(name, "")
        row["warnings"] = " | ".join(item.get("warnings", []))
        rows.append(row)
    return rows


def flatten_category_performance(report: dict) -> list[dict]:
    """Return the ``categories`` table of a calibration report dict as flat rows.

    Adds ``rank`` and rounds ratios to four places so the CSV stays readable.
    """
    rows: list[dict] = []
    for i, cat in enumerate(report.get("categories", []), start=1):
        rows.append(
            {
                "rank":               i,
                "category":           cat.get("category", ""),
                "total":              cat.get("total", 0),
                "accuracy":           round(float(cat.get("accuracy", 0.0)), 4),
                "average_confidence": round(float(cat.get("average_confidence", 0.0)), 4),
                "calibration_error":  round(float(cat.get("calibration_error", 0.0)), 4),
            }
        )
    return rows
