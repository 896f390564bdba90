"""
Draft trend detection over a live, append-only pick log.

Modules:
    log         — DraftEventLog (strict ordering, trailing windows).
    detectors   — Positional run, tier break, strategy shift, value correction.
    predictions — Run predictions, reaches/steals, per-category market corrections.
    detector    — TrendDetector (one per draft session) and TrendReport.
"""
