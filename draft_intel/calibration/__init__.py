"""
Calibration — how well stated confidence matches realized outcomes.

Modules:
    metrics       — Calibration curve/score, over/underconfidence, streaks,
                    accuracy trend, category performance, correlation.
    seasonal      — Early/mid/late/playoff partitions and insights.
    serialization — JSON/CSV export, per-record validated import.
    store         — HistoricalRecordStore protocol and in-memory store.
    tracker       — CalibrationTracker (append-only log, cached metrics).
"""
