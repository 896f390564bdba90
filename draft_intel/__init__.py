"""
draft-intel — fantasy draft analytics core.

Subpackages:
    scoring     — ScoringEngine, factor vectors, weight profiles, draft board.
    trends      — TrendDetector over the live pick log.
    calibration — CalibrationTracker over historical prediction records.
    db          — SQLite persistence for historical records.
"""

__version__ = "0.1.0"
