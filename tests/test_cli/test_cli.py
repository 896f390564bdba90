"""
End-to-end tests for the draft-intel CLI.

What we test
------------
- validate-config accepts a valid file and rejects a missing one.
- rank writes JSON and CSV rankings; bad inputs exit with code 1.
- trends reports a positional run from an events file.
- import-records / export-records / calibration-report against a temp DB,
  including partial imports (exit 1, valid rows kept) and idempotent merges.

Every command gets a temp config whose database and log file live under
``tmp_path``; results are checked through ``--output`` files so stderr
logging never mixes into parsed JSON.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from draft_intel.cli import app

runner = CliRunner()


# ── Helpers ────────────────────────────────────────────────────────────────────

@pytest.fixture
def cli_config(tmp_path: Path) -> Path:
    path = tmp_path / "config" / "default.toml"
    path.parent.mkdir()
    path.write_text(
        "[database]\n"
        f'db_path = "{(tmp_path / "db" / "test.db").as_posix()}"\n'
        "wal_mode = false\n"
        "\n[logging]\n"
        'level = "WARNING"\n'
        f'log_file = "{(tmp_path / "logs" / "test.log").as_posix()}"\n',
        encoding="utf-8",
    )
    return path


def _write_json(path: Path, data) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _pool(tmp_path: Path) -> str:
    return _write_json(
        tmp_path / "pool.json",
        {
            "current_pick": 20,
            "league": {"league_id": "lg-1", "scoring_system": "ppr"},
            "available": [
                {"candidate_id": "rb1", "name": "RB One", "category": "RB",
                 "expected_order": 5, "projected_output": 300, "team": "SF",
                 "schedule_slot": 9},
                {"candidate_id": "wr1", "name": "WR One", "category": "wr",
                 "expected_order": 30, "projected_output": 210, "team": "CIN",
                 "schedule_slot": 12},
                {"candidate_id": "te1", "name": "TE One", "category": "TE",
                 "expected_order": 60, "projected_output": 120},
            ],
        },
    )


def _events(tmp_path: Path) -> str:
    return _write_json(
        tmp_path / "events.json",
        [
            {"order": i, "candidate_id": f"p{i}", "category": "RB", "team_id": f"t{i}",
             "timestamp": f"2025-08-30T19:{i:02d}:00Z", "expected_order": i}
            for i in range(1, 7)
        ],
    )


def _records(tmp_path: Path, name: str = "records.json", extra: list | None = None) -> str:
    rows = [
        {"id": "r1", "category": "start_sit", "confidence": 90, "predicted_value": 1,
         "actual_value": 1, "timestamp": "2025-09-07T17:00:00Z"},
        {"id": "r2", "category": "start_sit", "confidence": 90, "predicted_value": 1,
         "actual_value": 0, "timestamp": "2025-09-14T17:00:00Z"},
        {"id": "r3", "category": "waiver", "confidence": 30, "predicted_value": 1,
         "timestamp": "2025-09-21T17:00:00Z"},
    ]
    return _write_json(tmp_path / name, rows + (extra or []))


# ── validate-config ───────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_valid_config(self, cli_config):
        result = runner.invoke(app, ["validate-config", "--config", str(cli_config)])
        assert result.exit_code == 0
        assert "[OK] Config valid." in result.output

    def test_missing_config_exits_1(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "nope.toml")])
        assert result.exit_code == 1


# ── rank / trends ─────────────────────────────────────────────────────────────

class TestRank:
    def test_rank_json(self, tmp_path, cli_config):
        out = tmp_path / "ranked.json"
        result = runner.invoke(
            app,
            ["rank", "--pool", _pool(tmp_path), "--output", str(out), "--config", str(cli_config)],
        )
        assert result.exit_code == 0, result.output
        ranked = json.loads(out.read_text(encoding="utf-8"))
        assert len(ranked) == 3
        scores = [r["score"] for r in ranked]
        assert scores == sorted(scores, reverse=True)
        assert {r["category"] for r in ranked} == {"RB", "WR", "TE"}

    def test_rank_limit_and_csv(self, tmp_path, cli_config):
        out = tmp_path / "ranked.csv"
        result = runner.invoke(
            app,
            ["rank", "--pool", _pool(tmp_path), "--limit", "2", "--format", "csv",
             "--output", str(out), "--config", str(cli_config)],
        )
        assert result.exit_code == 0, result.output
        with out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["rank"] for r in rows] == ["1", "2"]
        assert "f_value_vs_expected" in rows[0]

    def test_rank_board_with_events(self, tmp_path, cli_config):
        out = tmp_path / "board.json"
        result = runner.invoke(
            app,
            ["rank", "--pool", _pool(tmp_path), "--events", _events(tmp_path), "--board",
             "--output", str(out), "--config", str(cli_config)],
        )
        assert result.exit_code == 0, result.output
        board = json.loads(out.read_text(encoding="utf-8"))
        assert set(board["by_category"]) == {"RB", "WR", "TE"}

    def test_csv_without_output_exits_1(self, tmp_path, cli_config):
        result = runner.invoke(
            app, ["rank", "--pool", _pool(tmp_path), "--format", "csv", "--config", str(cli_config)]
        )
        assert result.exit_code == 1

    def test_missing_pool_exits_1(self, tmp_path, cli_config):
        result = runner.invoke(
            app, ["rank", "--pool", str(tmp_path / "nope.json"), "--config", str(cli_config)]
        )
        assert result.exit_code == 1

    def test_invalid_pool_exits_1(self, tmp_path, cli_config):
        pool = _write_json(tmp_path / "bad.json", [{"candidate_id": "x", "category": "RB"}])
        result = runner.invoke(app, ["rank", "--pool", pool, "--config", str(cli_config)])
        assert result.exit_code == 1


class TestTrends:
    def test_reports_positional_run(self, tmp_path, cli_config):
        out = tmp_path / "trends.json"
        result = runner.invoke(
            app,
            ["trends", "--events", _events(tmp_path), "--pool", _pool(tmp_path),
             "--output", str(out), "--config", str(cli_config)],
        )
        assert result.exit_code == 0, result.output
        report = json.loads(out.read_text(encoding="utf-8"))
        assert report["picks"] == 6
        assert "positional_run" in [s["signal_type"] for s in report["signals"]]

    def test_out_of_order_events_exit_1(self, tmp_path, cli_config):
        events = _write_json(
            tmp_path / "events.json",
            [
                {"order": 2, "candidate_id": "a", "category": "RB", "team_id": "t1",
                 "timestamp": "2025-08-30T19:00:00Z"},
                {"order": 2, "candidate_id": "b", "category": "RB", "team_id": "t2",
                 "timestamp": "2025-08-30T19:01:00Z"},
            ],
        )
        result = runner.invoke(
            app,
            ["trends", "--events", events, "--pool", _pool(tmp_path), "--config", str(cli_config)],
        )
        assert result.exit_code == 1


# ── Historical records ────────────────────────────────────────────────────────

class TestRecords:
    def test_import_export_report(self, tmp_path, cli_config):
        cfg = ["--config", str(cli_config)]
        result = runner.invoke(app, ["import-records", "--file", _records(tmp_path), *cfg])
        assert result.exit_code == 0, result.output
        assert "3 record(s) now tracked" in result.output

        export_path = tmp_path / "out" / "records.csv"
        result = runner.invoke(
            app, ["export-records", "--output", str(export_path), "--completed-only", *cfg]
        )
        assert result.exit_code == 0, result.output
        with export_path.open(encoding="utf-8") as f:
            assert [r["record_id"] for r in csv.DictReader(f)] == ["r1", "r2"]

        report_path = tmp_path / "report.json"
        result = runner.invoke(
            app,
            ["calibration-report", "--timeframe", "monthly", "--output", str(report_path), *cfg],
        )
        assert result.exit_code == 0, result.output
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["total_records"] == 3
        assert report["resolved_records"] == 2
        assert report["overconfidence"] == pytest.approx(0.5)

    def test_reimport_is_idempotent(self, tmp_path, cli_config):
        cfg = ["--config", str(cli_config)]
        records = _records(tmp_path)
        runner.invoke(app, ["import-records", "--file", records, *cfg])
        result = runner.invoke(app, ["import-records", "--file", records, *cfg])
        assert result.exit_code == 0
        assert "3 record(s) now tracked" in result.output

    def test_partial_import_exits_1_but_keeps_valid_rows(self, tmp_path, cli_config):
        cfg = ["--config", str(cli_config)]
        bad = {"id": "r4", "category": "waiver", "predicted_value": 1,
               "timestamp": "2025-09-28T17:00:00Z"}
        result = runner.invoke(
            app, ["import-records", "--file", _records(tmp_path, extra=[bad]), *cfg]
        )
        assert result.exit_code == 1
        assert "3 record(s) now tracked" in result.output

    def test_export_category_filter(self, tmp_path, cli_config):
        cfg = ["--config", str(cli_config)]
        runner.invoke(app, ["import-records", "--file", _records(tmp_path), *cfg])
        out = tmp_path / "waiver.json"
        result = runner.invoke(
            app, ["export-records", "--output", str(out), "--category", "waiver", *cfg]
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert [r["record_id"] for r in payload["records"]] == ["r3"]

    def test_unknown_timeframe_exits_1(self, cli_config):
        result = runner.invoke(
            app, ["calibration-report", "--timeframe", "daily", "--config", str(cli_config)]
        )
        assert result.exit_code == 1

    def test_unsupported_import_format_exits_1(self, tmp_path, cli_config):
        path = tmp_path / "records.xml"
        path.write_text("<records/>", encoding="utf-8")
        result = runner.invoke(
            app, ["import-records", "--file", str(path), "--config", str(cli_config)]
        )
        assert result.exit_code == 1
