"""
Candidate, league and draft-context models.

``Candidate`` is one draftable player in the pool snapshot; ``CandidateMetadata``
carries the optional research inputs the scoring factors read (age, game log,
schedule difficulty, depth chart, contract). Any metadata field may be missing —
factors fall back to a neutral value and record a data-quality warning.

``LeagueConfig`` is the league-level input that keys weight profiles.
``DraftContext`` bundles everything a scoring pass needs: the current pick,
the available pool, the drafting team's roster, league settings, strategy,
and any trend signals fed back from the trend detector.

All models are frozen — a context is a snapshot and scoring is a pure
function of it.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from draft_intel.models.draft import TrendSignal

ScoringSystem = Literal["standard", "half_ppr", "ppr"]

DEFAULT_ROSTER_TARGETS: dict[str, int] = {
    "QB": 2, "RB": 5, "WR": 5, "TE": 2, "K": 1, "DST": 1,
}


class CandidateMetadata(BaseModel):
    """Optional research inputs for a candidate.

    Attributes:
        age: Age in years.
        years_experience: Seasons played (0 = rookie).
        depth_chart: Depth-chart slot on the pro team (1 = starter).
        injury_risk: Injury probability in [0, 1]; ``None`` = no data.
        consistency_rating: Externally supplied consistency in [0, 1].
        breakout_candidate: Flagged as a breakout candidate.
        new_team: Changed teams in the offseason.
        new_coach: Pro team has a new head coach.
        situation_improved: Depth chart or scheme improved since last season.
        game_log: Per-game outputs from the previous season.
        recent_outputs: Most recent per-game outputs (recent form).
        season_average: Season average per-game output.
        schedule_difficulty: Per-week difficulty on a 0–5 scale, index 0 = week 1.
        contract_years: Years remaining on the candidate's contract.
        real_draft_position: Overall pick in the real-life draft.
        keeper_round: Round the candidate would be kept in (keeper leagues).
        team_offense_rank: Pro team's offensive rank (1 = best).
        suspended: Candidate faces a suspension.
        suspended_games: Number of games suspended.
        bust_probability: Probability of significant underperformance in [0, 1].
    """

    model_config = ConfigDict(frozen=True)

    age: Optional[int] = None
    years_experience: Optional[int] = None
    depth_chart: Optional[int] = None
    injury_risk: Optional[float] = None
    consistency_rating: Optional[float] = None
    breakout_candidate: bool = False
    new_team: bool = False
    new_coach: bool = False
    situation_improved: bool = False
    game_log: list[float] = Field(default_factory=list)
    recent_outputs: list[float] = Field(default_factory=list)
    season_average: Optional[float] = None
    schedule_difficulty: list[float] = Field(default_factory=list)
    contract_years: Optional[int] = None
    real_draft_position: Optional[int] = None
    keeper_round: Optional[int] = None
    team_offense_rank: Optional[int] = None
    suspended: bool = False
    suspended_games: int = 0
    bust_probability: Optional[float] = None

    @field_validator("injury_risk", "consistency_rating", "bust_probability")
    @classmethod
    def validate_probability(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError(f"Probability fields must be in [0, 1], got {v}.")
        return v


class Candidate(BaseModel):
    """A draftable candidate in the pool snapshot.

    Attributes:
        candidate_id: Stable identifier.
        name: Display name.
        category: Roster category (position), e.g. ``"RB"``.
        expected_order: Consensus expected draft order (ADP).
        projected_output: Season projection in fantasy points.
        team: Pro team abbreviation; ``None`` for free agents.
        schedule_slot: Bye week.
        metadata: Optional research inputs.
    """

    model_config = ConfigDict(frozen=True)

    candidate_id: str
    name: str = ""
    category: str
    expected_order: float
    projected_output: float = 0.0
    team: Optional[str] = None
    schedule_slot: Optional[int] = None
    metadata: CandidateMetadata = CandidateMetadata()

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("category must be non-empty.")
        return v

    @field_validator("expected_order")
    @classmethod
    def validate_expected_order(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"expected_order must be positive, got {v}.")
        return v

    @property
    def is_rookie(self) -> bool:
        return self.metadata.years_experience == 0


class LeagueConfig(BaseModel):
    """League settings that shape weight profiles and team need.

    Attributes:
        league_id: Stable league identifier.
        scoring_system: ``standard``, ``half_ppr`` or ``ppr``.
        keeper_league: Keeper rules are active.
        dynasty_league: Dynasty rules are active.
        teams: Number of teams (picks per round).
        roster_targets: Ideal number of candidates per category.
    """

    model_config = ConfigDict(frozen=True)

    league_id: str = "default"
    scoring_system: ScoringSystem = "standard"
    keeper_league: bool = False
    dynasty_league: bool = False
    teams: int = 12
    roster_targets: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_ROSTER_TARGETS)
    )

    @field_validator("teams")
    @classmethod
    def validate_teams(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"A league needs at least 2 teams, got {v}.")
        return v

    def fingerprint(self) -> str:
        """Return a stable string identifying this exact configuration."""
        return self.model_dump_json()


class DraftContext(BaseModel):
    """Snapshot of a draft at the moment a pick is being considered.

    Attributes:
        current_pick: Overall pick number about to be made (1-based).
        available: Candidates still in the pool.
        roster: Candidates already on the drafting team.
        league: League settings.
        strategy: ``balanced``, ``upside`` or ``safe``; unknown values score
            with the balanced profile.
        trend_signals: Signals from the trend detector to fold into scarcity.
    """

    model_config = ConfigDict(frozen=True)

    current_pick: int = 1
    available: list[Candidate] = Field(default_factory=list)
    roster: list[Candidate] = Field(default_factory=list)
    league: LeagueConfig = Field(default_factory=LeagueConfig)
    strategy: str = "balanced"
    trend_signals: list[TrendSignal] = Field(default_factory=list)

    @field_validator("current_pick")
    @classmethod
    def validate_pick(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"current_pick must be >= 1, got {v}.")
        return v

    @property
    def current_round(self) -> int:
        return (self.current_pick - 1) // self.league.teams + 1
