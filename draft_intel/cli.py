"""
draft-intel — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (JSON pool / event / record files).
  4. Execute action (rank, detect trends, report calibration, etc.).
  5. Print JSON to stdout or write it under ``--output``.

Install and run::

    pip install -e .
    draft-intel --help
    draft-intel init-db
    draft-intel validate-config
    draft-intel rank --pool pool.json --board
    draft-intel trends --events picks.json --pool pool.json
    draft-intel calibration-report --timeframe monthly
    draft-intel export-records --format csv --output records.csv
    draft-intel import-records --file records.csv

Pool files are a JSON ``DraftContext`` object (``available``, ``roster``,
``league``, ``current_pick``, ``strategy``) or a bare array of candidates.
Event files are a JSON array of ``DraftEvent`` objects in pick order.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="draft-intel",
    help="Fantasy draft analytics — candidate scoring, trend detection, calibration.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from draft_intel.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from draft_intel.utils.logging import configure_logging
    configure_logging(config.logging)


def _read_json_or_exit(path_str: str) -> Any:
    path = Path(path_str)
    if not path.exists():
        typer.echo(f"[ERROR] File not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error in {path}: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_context_or_exit(pool_file: str, strategy: Optional[str] = None):
    """Parse a pool file into a ``DraftContext``; ``strategy`` overrides the file's."""
    from pydantic import ValidationError

    from draft_intel.models.candidate import DraftContext

    raw = _read_json_or_exit(pool_file)
    if isinstance(raw, list):
        raw = {"available": raw}
    if not isinstance(raw, dict):
        typer.echo("[ERROR] Pool file must contain an object or an array.", err=True)
        raise typer.Exit(code=1)
    if strategy:
        raw = {**raw, "strategy": strategy}
    try:
        return DraftContext.model_validate(raw)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Pool failed validation:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _load_events_or_exit(events_file: str):
    from pydantic import ValidationError

    from draft_intel.models.draft import DraftEvent

    raw = _read_json_or_exit(events_file)
    if not isinstance(raw, list):
        typer.echo("[ERROR] Events file must contain an array.", err=True)
        raise typer.Exit(code=1)

    events: list[DraftEvent] = []
    errors: list[tuple[int, str]] = []
    for i, item in enumerate(raw):
        try:
            events.append(DraftEvent.model_validate(item))
        except ValidationError as exc:
            errors.append((i, str(exc)))

    if errors:
        typer.echo(f"[ERROR] {len(errors)} event(s) failed validation:", err=True)
        for idx, msg in errors[:5]:
            typer.echo(f"  Event #{idx}: {msg}", err=True)
        if len(errors) > 5:
            typer.echo(f"  ... and {len(errors) - 5} more.", err=True)
        raise typer.Exit(code=1)
    return events


def _build_detector_or_exit(config, events):
    from draft_intel.errors import EventOrderError
    from draft_intel.trends.detector import TrendDetector

    try:
        return TrendDetector(config.trends, events)
    except EventOrderError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _emit(data: Any, output: Optional[str]) -> None:
    """Print ``data`` as JSON, or write it to ``output``."""
    from draft_intel.reporting.export import export_to_json

    if output:
        path = export_to_json(data, Path(output))
        typer.echo(f"[OK] Wrote {path}")
    else:
        typer.echo(json.dumps(data, indent=2, default=str))


def _parse_datetime_or_exit(value: Optional[str], flag: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        typer.echo(f"[ERROR] {flag} must be an ISO 8601 date or datetime, got '{value}'.", err=True)
        raise typer.Exit(code=1)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from draft_intel.db.connection import get_connection
    from draft_intel.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Run window:       {config.trends.run_window} picks "
               f"(threshold {config.trends.run_threshold})")
    typer.echo(f"  Predictor blend:  {config.scoring.predictor_blend}")
    typer.echo(f"  Season start:     {config.calibration.season_start or 'not set'}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("rank")
def rank(
    pool_file: str = typer.Option(..., "--pool", "-p", help="Pool JSON file."),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="balanced | upside | safe (overrides the pool file)."
    ),
    predictions_file: Optional[str] = typer.Option(
        None,
        "--predictions",
        help='JSON mapping {"<candidate_id>": {"value": .., "confidence": ..}}.',
    ),
    events_file: Optional[str] = typer.Option(
        None, "--events", help="Picks so far; detected trends feed positional scarcity."
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Keep the top N."),
    board: bool = typer.Option(False, "--board", help="Emit the full draft board."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to this path."),
    fmt: str = typer.Option("json", "--format", help="json | csv (csv needs --output)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Score and rank the available candidates in a pool file."""
    from draft_intel.errors import ScoringConfigurationError
    from draft_intel.ml.predictor import StaticPredictor
    from draft_intel.reporting.export import export_to_csv, flatten_rankings_for_export
    from draft_intel.scoring.board import build_board
    from draft_intel.scoring.engine import ScoringEngine

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if fmt not in ("json", "csv"):
        typer.echo(f"[ERROR] Unsupported format '{fmt}'. Use json or csv.", err=True)
        raise typer.Exit(code=1)
    if fmt == "csv" and (board or not output):
        typer.echo("[ERROR] --format csv needs --output and cannot be combined with --board.", err=True)
        raise typer.Exit(code=1)

    context = _load_context_or_exit(pool_file, strategy)

    if events_file:
        detector = _build_detector_or_exit(config, _load_events_or_exit(events_file))
        signals = detector.detect_all(context.available)
        context = context.model_copy(update={"trend_signals": signals})

    predictor = None
    if predictions_file:
        raw = _read_json_or_exit(predictions_file)
        try:
            predictor = StaticPredictor.from_mapping(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            typer.echo(f"[ERROR] Invalid predictions file: {exc}", err=True)
            raise typer.Exit(code=1)

    engine = ScoringEngine(config.scoring, predictor)
    try:
        ranked = engine.rank(context, limit=None if board else limit)
    except ScoringConfigurationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if board:
        _emit(build_board(ranked, context, config.scoring).to_dict(), output)
        return

    rows = [s.to_dict() for s in ranked]
    if fmt == "csv":
        path = export_to_csv(flatten_rankings_for_export(rows), Path(output))
        typer.echo(f"[OK] Wrote {len(rows)} ranked candidate(s) to {path}")
        return
    _emit(rows, output)


@app.command("trends")
def trends(
    events_file: str = typer.Option(..., "--events", "-e", help="Events JSON file (pick order)."),
    pool_file: str = typer.Option(..., "--pool", "-p", help="Pool JSON file."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to this path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Detect draft trends and predict positional runs."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    events = _load_events_or_exit(events_file)
    context = _load_context_or_exit(pool_file)
    detector = _build_detector_or_exit(config, events)
    _emit(detector.report(context.available).to_dict(), output)


@app.command("calibration-report")
def calibration_report(
    league_id: Optional[str] = typer.Option(None, "--league", help="Only this league's records."),
    user_id: Optional[str] = typer.Option(None, "--user", help="Only this user's records."),
    timeframe: str = typer.Option(
        "weekly", "--timeframe", help="weekly | monthly | seasonal | yearly."
    ),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to this path."),
    categories_csv: Optional[str] = typer.Option(
        None, "--categories-csv", help="Also write the per-category table as CSV."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Compute calibration metrics over stored historical records."""
    from draft_intel.calibration.tracker import CalibrationTracker
    from draft_intel.db.connection import get_connection
    from draft_intel.db.repositories.record_repo import SqliteHistoricalRecordStore
    from draft_intel.reporting.export import export_to_csv, flatten_category_performance
    from draft_intel.utils.time_utils import VALID_TIMEFRAMES

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if timeframe not in VALID_TIMEFRAMES:
        typer.echo(
            f"[ERROR] Unknown timeframe '{timeframe}'. "
            f"Use one of: {', '.join(sorted(VALID_TIMEFRAMES))}.",
            err=True,
        )
        raise typer.Exit(code=1)

    with get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
        ensure_schema=True,
    ) as conn:
        store = SqliteHistoricalRecordStore(conn)
        tracker = CalibrationTracker.from_store(store, config.calibration, league_id, user_id)
        report = tracker.build_report(timeframe).to_dict()

    if categories_csv:
        path = export_to_csv(flatten_category_performance(report), Path(categories_csv))
        typer.echo(f"[OK] Wrote {path}", err=True)
    _emit(report, output)


@app.command("export-records")
def export_records(
    output: str = typer.Option(..., "--output", "-o", help="Destination file."),
    fmt: Optional[str] = typer.Option(
        None, "--format", help="json | csv (default: from the --output suffix)."
    ),
    categories: Optional[list[str]] = typer.Option(
        None, "--category", help="Keep only this category (repeatable)."
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Earliest timestamp (ISO 8601)."),
    end: Optional[str] = typer.Option(None, "--end", help="Latest timestamp (ISO 8601)."),
    min_confidence: Optional[float] = typer.Option(None, "--min-confidence"),
    completed_only: bool = typer.Option(False, "--completed-only", help="Only resolved records."),
    league_id: Optional[str] = typer.Option(None, "--league"),
    user_id: Optional[str] = typer.Option(None, "--user"),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Export stored historical records as JSON or CSV."""
    from draft_intel.calibration.serialization import RecordFilter
    from draft_intel.calibration.tracker import CalibrationTracker
    from draft_intel.db.connection import get_connection
    from draft_intel.db.repositories.record_repo import SqliteHistoricalRecordStore
    from draft_intel.reporting.export import write_text

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    out_path = Path(output)
    fmt = _resolve_format_or_exit(fmt, out_path)
    filters = RecordFilter(
        categories=frozenset(categories) if categories else None,
        start=_parse_datetime_or_exit(start, "--start"),
        end=_parse_datetime_or_exit(end, "--end"),
        min_confidence=min_confidence,
        completed_only=completed_only,
    )

    with get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
        ensure_schema=True,
    ) as conn:
        store = SqliteHistoricalRecordStore(conn)
        tracker = CalibrationTracker.from_store(store, config.calibration, league_id, user_id)
        text = tracker.export_records(fmt, filters)

    write_text(text, out_path)
    typer.echo(f"[OK] Exported records to {out_path}")


@app.command("import-records")
def import_records(
    records_file: str = typer.Option(..., "--file", "-f", help="Records file (.json or .csv)."),
    fmt: Optional[str] = typer.Option(
        None, "--format", help="json | csv (default: from the file suffix)."
    ),
    replace: bool = typer.Option(
        False, "--replace", help="Replace existing records instead of merging by id."
    ),
    league_id: Optional[str] = typer.Option(None, "--league"),
    user_id: Optional[str] = typer.Option(None, "--user"),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Import historical records; invalid rows are reported and skipped.

    Merging is idempotent: importing the same file twice changes nothing.
    Exits with code 1 if any row failed validation (valid rows are still kept).
    """
    from draft_intel.calibration.tracker import CalibrationTracker
    from draft_intel.db.connection import get_connection
    from draft_intel.db.repositories.record_repo import SqliteHistoricalRecordStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    in_path = Path(records_file)
    if not in_path.exists():
        typer.echo(f"[ERROR] Records file not found: {in_path}", err=True)
        raise typer.Exit(code=1)
    fmt = _resolve_format_or_exit(fmt, in_path)

    with get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
        ensure_schema=True,
    ) as conn:
        store = SqliteHistoricalRecordStore(conn)
        tracker = CalibrationTracker.from_store(store, config.calibration, league_id, user_id)
        result = tracker.import_records(
            in_path.read_text(encoding="utf-8"), fmt, merge=not replace
        )
        total = len(tracker)

    typer.echo(f"  Imported {result.imported_count} record(s); {total} record(s) now tracked.")
    if result.errors:
        typer.echo(f"[ERROR] {len(result.errors)} record(s) failed validation:", err=True)
        for msg in result.errors[:5]:
            typer.echo(f"  {msg}", err=True)
        if len(result.errors) > 5:
            typer.echo(f"  ... and {len(result.errors) - 5} more.", err=True)
        raise typer.Exit(code=1)
    typer.echo("[OK] Records imported.")


def _resolve_format_or_exit(fmt: Optional[str], path: Path) -> str:
    from draft_intel.calibration.serialization import VALID_FORMATS

    resolved = (fmt or path.suffix.lstrip(".")).lower()
    if resolved not in VALID_FORMATS:
        typer.echo(
            f"[ERROR] Unsupported format '{resolved or path.suffix}'. Use json or csv.", err=True
        )
        raise typer.Exit(code=1)
    return resolved


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
