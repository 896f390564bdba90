"""
Draft board: groups ranked candidates into the lists a draft room shows.

Sections
--------
by_category : top-N per category (score desc, expected order, id).
targets     : candidates scoring above ``target_score`` (top 20).
avoid       : injury risk > 80%, suspended, or bust probability > 60%.
sleepers    : late expected order (> 100) with a projection above 150,
              improved situation with expected order > 50, or a second-year
              WR/TE breakout profile.
handcuffs   : available depth-chart-2 RBs behind the roster's starters.
roster      : strengths and weaknesses of the drafting team's roster.
strategy    : roster shape read from RB/QB counts (Zero RB, Robust RB,
              Late Round QB, Balanced) and the matching advice line.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Optional

from draft_intel.config import ScoringConfig
from draft_intel.models.candidate import DraftContext
from draft_intel.scoring.engine import ScoredCandidate

_TARGET_LIMIT = 20

STRATEGY_ADVICE: dict[str, str] = {
    "Zero RB":       "WR depth and late-round RB volume",
    "Robust RB":     "WR value and QB when ready",
    "Late Round QB": "skill position depth",
    "Balanced":      "best available value",
}


@dataclass(frozen=True)
class BoardEntry:
    """A candidate listed on the board with the reason it is listed."""

    candidate_id: str
    category:     str
    score:        float
    reason:       str


@dataclass(frozen=True)
class HandcuffSuggestion:
    """Backup RB worth pairing with a rostered starter."""

    starter_id:  str
    handcuff_id: str
    team:        str
    priority:    str   # "high" | "medium"


@dataclass
class DraftBoard:
    """Everything the draft room renders for the current pick."""

    by_category: dict[str, list[ScoredCandidate]] = field(default_factory=dict)
    targets:     list[ScoredCandidate]            = field(default_factory=list)
    avoid:       list[BoardEntry]                 = field(default_factory=list)
    sleepers:    list[BoardEntry]                 = field(default_factory=list)
    handcuffs:   list[HandcuffSuggestion]         = field(default_factory=list)
    strengths:   list[str]                        = field(default_factory=list)
    weaknesses:  list[str]                        = field(default_factory=list)
    strategy:    str                              = "Balanced"
    advice:      str                              = STRATEGY_ADVICE["Balanced"]

    def to_dict(self) -> dict:
        return {
            "by_category": {
                cat: [s.to_dict() for s in items] for cat, items in self.by_category.items()
            },
            "targets":    [s.to_dict() for s in self.targets],
            "avoid":      [asdict(e) for e in self.avoid],
            "sleepers":   [asdict(e) for e in self.sleepers],
            "handcuffs":  [asdict(h) for h in self.handcuffs],
            "strengths":  list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "strategy":   self.strategy,
            "advice":     self.advice,
        }


def build_board(
    ranked: list[ScoredCandidate],
    context: DraftContext,
    config: Optional[ScoringConfig] = None,
) -> DraftBoard:
    """Build a ``DraftBoard`` from an already ranked candidate list.

    Args:
        ranked:  Output of ``ScoringEngine.rank`` (order is preserved).
        context: Draft snapshot the ranking was computed for.
        config:  Scoring settings (``board_size``, ``target_score``).

    Returns:
        Populated ``DraftBoard``; every section is empty for an empty ranking.
    """
    cfg = config or ScoringConfig()
    board = DraftBoard()

    by_cat: dict[str, list[ScoredCandidate]] = defaultdict(list)
    for s in ranked:
        by_cat[s.candidate.category].append(s)
    board.by_category = {cat: items[: cfg.board_size] for cat, items in sorted(by_cat.items())}

    board.targets = [s for s in ranked if s.score > cfg.target_score][:_TARGET_LIMIT]
    board.avoid = _avoid_list(ranked)
    board.sleepers = _sleepers(ranked)
    board.handcuffs = _handcuffs(ranked, context)
    board.strengths, board.weaknesses = _roster_analysis(context)
    board.strategy = detect_roster_strategy(context)
    board.advice = STRATEGY_ADVICE[board.strategy]
    return board


def _avoid_list(ranked: list[ScoredCandidate]) -> list[BoardEntry]:
    entries: list[BoardEntry] = []
    for s in ranked:
        meta = s.candidate.metadata
        reason: Optional[str] = None
        if meta.injury_risk is not None and meta.injury_risk > 0.8:
            reason = f"High injury risk ({meta.injury_risk:.0%})"
        elif meta.suspended:
            reason = f"Suspended {meta.suspended_games} game(s)"
        elif meta.bust_probability is not None and meta.bust_probability > 0.6:
            reason = f"High bust probability ({meta.bust_probability:.0%})"
        if reason:
            entries.append(BoardEntry(s.candidate.candidate_id, s.candidate.category, s.score, reason))
    return entries


def _sleepers(ranked: list[ScoredCandidate]) -> list[BoardEntry]:
    entries: list[BoardEntry] = []
    for s in ranked:
        c = s.candidate
        if c.expected_order > 100 and c.projected_output > 150:
            reason = "Projection outpaces late expected order"
        elif c.metadata.situation_improved and c.expected_order > 50:
            reason = "Improved depth chart or scheme"
        elif c.metadata.years_experience == 1 and c.category in ("WR", "TE"):
            reason = "Second-year breakout profile"
        else:
            continue
        entries.append(BoardEntry(c.candidate_id, c.category, s.score, reason))
    return entries


def _handcuffs(ranked: list[ScoredCandidate], context: DraftContext) -> list[HandcuffSuggestion]:
    suggestions: list[HandcuffSuggestion] = []
    starters = [
        c for c in context.roster
        if c.category == "RB" and c.metadata.depth_chart == 1 and c.team is not None
    ]
    for starter in starters:
        for s in ranked:
            c = s.candidate
            if c.category == "RB" and c.team == starter.team and c.metadata.depth_chart == 2:
                priority = "high" if s.factors.handcuff >= 90 else "medium"
                suggestions.append(
                    HandcuffSuggestion(starter.candidate_id, c.candidate_id, c.team, priority)
                )
    return suggestions


def _roster_analysis(context: DraftContext) -> tuple[list[str], list[str]]:
    counts: dict[str, int] = defaultdict(int)
    for c in context.roster:
        counts[c.category] += 1

    strengths: list[str] = []
    weaknesses: list[str] = []
    if counts["QB"] == 0 and context.current_round > 8:
        weaknesses.append("No QB drafted - critical need")
    elif counts["QB"] >= 1:
        strengths.append("QB position secured")

    if counts["RB"] < 2:
        weaknesses.append("Insufficient RB depth")
    elif counts["RB"] >= 3:
        strengths.append("Strong RB depth")

    if counts["WR"] < 3:
        weaknesses.append("Need more WR depth")
    elif counts["WR"] >= 4:
        strengths.append("Excellent WR corps")
    return strengths, weaknesses


def detect_roster_strategy(context: DraftContext) -> str:
    """Name the strategy the roster so far follows; an empty roster is Balanced."""
    if not context.roster:
        return "Balanced"
    counts: dict[str, int] = defaultdict(int)
    for c in context.roster:
        counts[c.category] += 1
    if counts["RB"] <= 1:
        return "Zero RB"
    if counts["RB"] >= 3:
        return "Robust RB"
    if counts["QB"] == 0:
        return "Late Round QB"
    return "Balanced"
