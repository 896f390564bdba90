"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``DRAFT_INTEL_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The scoring engine, trend detector, calibration tracker and CLI commands all
receive config sections from an ``AppConfig`` instance — never raw dicts or
individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from datetime import date
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/draft_intel.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class ScoringConfig(BaseModel):
    """Candidate scoring settings.

    ``category_max_output`` normalizes projected output per category into the
    0–100 factor range; categories not listed use ``default_max_output``.
    """

    model_config = ConfigDict(frozen=True)

    category_max_output: dict[str, float] = {
        "QB": 400.0, "RB": 350.0, "WR": 350.0, "TE": 250.0, "K": 150.0, "DST": 150.0,
    }
    default_max_output: float = 200.0
    predictor_blend: float = 0.4         # share of the predictor value in the projection
    signal_scarcity_boost: float = 25.0  # scarcity points per unit of trend-signal strength
    target_score: float = 70.0
    board_size: int = 5

    @field_validator("predictor_blend")
    @classmethod
    def validate_blend(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"predictor_blend must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("default_max_output")
    @classmethod
    def validate_max_output(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"default_max_output must be positive, got {v}.")
        return v

    @field_validator("category_max_output")
    @classmethod
    def validate_category_max_output(cls, v: dict[str, float]) -> dict[str, float]:
        bad = {cat: val for cat, val in v.items() if val <= 0}
        if bad:
            raise ValueError(f"category_max_output values must be positive, got {bad}.")
        return v


class TrendConfig(BaseModel):
    """Draft trend detection windows and thresholds."""

    model_config = ConfigDict(frozen=True)

    run_window: int = 8
    run_threshold: int = 4
    tier_gap: float = 15.0
    tier_break_max_members: int = 2
    correction_window: int = 10
    correction_threshold: float = 10.0
    prediction_window: int = 5
    prediction_threshold: float = 0.5
    prediction_urgent_threshold: float = 0.7
    scarcity_pool_size: int = 50
    reach_threshold: float = 15.0
    market_window: int = 20

    @model_validator(mode="after")
    def validate_windows(self) -> "TrendConfig":
        if self.run_threshold > self.run_window:
            raise ValueError(
                f"run_threshold ({self.run_threshold}) cannot exceed "
                f"run_window ({self.run_window})."
            )
        for name in (
            "run_window", "correction_window", "prediction_window", "market_window",
            "scarcity_pool_size",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1.")
        if not 0.0 < self.prediction_threshold <= self.prediction_urgent_threshold <= 1.0:
            raise ValueError(
                "Expected 0 < prediction_threshold <= prediction_urgent_threshold <= 1."
            )
        return self


class CalibrationConfig(BaseModel):
    """Calibration tracking settings.

    ``season_start`` anchors week numbers for records that carry only a
    timestamp; week 1 starts on that date.
    """

    model_config = ConfigDict(frozen=True)

    overconfidence_threshold: float = 80.0
    underconfidence_threshold: float = 40.0
    correctness_tolerance: float = 0.0
    season_start: Optional[date] = None
    min_bucket_samples: int = 5

    @model_validator(mode="after")
    def validate_thresholds(self) -> "CalibrationConfig":
        if not 0.0 <= self.underconfidence_threshold < self.overconfidence_threshold <= 100.0:
            raise ValueError(
                "Expected 0 <= underconfidence_threshold < overconfidence_threshold <= 100."
            )
        if self.correctness_tolerance < 0:
            raise ValueError("correctness_tolerance must be non-negative.")
        return self


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/draft_intel.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    scoring: ScoringConfig = ScoringConfig()
    trends: TrendConfig = TrendConfig()
    calibration: CalibrationConfig = CalibrationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply DRAFT_INTEL_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply DRAFT_INTEL_* env vars to the raw config dict.

    Supported overrides:
      DRAFT_INTEL_DB_PATH       → raw["database"]["db_path"]
      DRAFT_INTEL_LOG_LEVEL     → raw["logging"]["level"]
      DRAFT_INTEL_SEASON_START  → raw["calibration"]["season_start"]
      DRAFT_INTEL_DEBUG         → raw["debug"]
    """
    if db_path := os.environ.get("DRAFT_INTEL_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("DRAFT_INTEL_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if season_start := os.environ.get("DRAFT_INTEL_SEASON_START"):
        raw.setdefault("calibration", {})["season_start"] = season_start

    if debug := os.environ.get("DRAFT_INTEL_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        trends=TrendConfig(**raw.get("trends", {})),
        calibration=CalibrationConfig(**raw.get("calibration", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
