"""
Domain models — frozen pydantic models shared by every subsystem.

Modules:
    candidate — Candidate, CandidateMetadata, LeagueConfig, DraftContext.
    draft     — DraftEvent, TrendSignal, RunPrediction.
    record    — HistoricalRecord (prediction plus realized outcome).
"""
