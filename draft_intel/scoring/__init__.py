"""
Candidate scoring — multi-factor scores, explanations, and the draft board.

Modules:
    factors — FactorVector and calculate_factors() (fifteen 0–100 factors).
    weights — WeightProfile, build_weight_profile(), apply_overrides(), cache.
    explain — Threshold explanations and recommendation confidence.
    engine  — ScoringEngine (score, rank) and ScoredCandidate.
    board   — DraftBoard: per-category tops, targets, avoid, sleepers, handcuffs.
"""
