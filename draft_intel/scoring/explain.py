"""
Explanations and recommendation confidence.

Explanation thresholds (fixed; renderers match on these strings):
    value_vs_expected   > 80 → "excellent value"
    positional_scarcity > 70 → "scarce position"
    team_need           > 80 → "fills critical team need"
    upside              > 80 → "high upside potential"
    risk                > 70 → "injury concern"
    stacking            > 70 → "stack opportunity"
No match → "solid overall value".

Confidence (20–95):
    base 70; +10 with a full 16-game log; +10 when consistency > 70;
    −20 when risk > 70; −15 for rookies.
"""

from __future__ import annotations

from draft_intel.models.candidate import Candidate
from draft_intel.scoring.factors import FactorVector

EXPLANATION_RULES: tuple[tuple[str, float, str], ...] = (
    ("value_vs_expected",   80.0, "excellent value"),
    ("positional_scarcity", 70.0, "scarce position"),
    ("team_need",           80.0, "fills critical team need"),
    ("upside",              80.0, "high upside potential"),
    ("risk",                70.0, "injury concern"),
    ("stacking",            70.0, "stack opportunity"),
)
DEFAULT_EXPLANATION = "solid overall value"

_FULL_SEASON_GAMES = 16


def generate_explanation(factors: FactorVector) -> list[str]:
    """Return explanation phrases for every threshold ``factors`` exceeds."""
    values = factors.as_dict()
    reasons = [text for name, threshold, text in EXPLANATION_RULES if values[name] > threshold]
    return reasons or [DEFAULT_EXPLANATION]


def format_explanation(reasons: list[str]) -> str:
    """Join phrases into one display string, e.g. ``"Excellent value; scarce position"``."""
    text = "; ".join(reasons)
    return text[:1].upper() + text[1:]


def recommendation_confidence(candidate: Candidate, factors: FactorVector) -> float:
    confidence = 70.0
    if len(candidate.metadata.game_log) >= _FULL_SEASON_GAMES:
        confidence += 10
    if factors.consistency > 70:
        confidence += 10
    if factors.risk > 70:
        confidence -= 20
    if candidate.is_rookie:
        confidence -= 15
    return max(20.0, min(95.0, confidence))
