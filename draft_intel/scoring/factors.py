"""
Factor extraction: turns one candidate plus a draft context into fifteen
named factor values, each on a 0–100 scale before weighting.

Factors
-------
value_vs_expected (0–100):
    How far the candidate has fallen past its expected order.
    diff = current_pick − expected_order
      > 30 → 100,  > 15 → 80,  > 0 → 60,  > −15 → 40,  > −30 → 20,  else 0.

projected_output (0–100):
    Season projection, boosted for receiving-heavy categories under
    PPR (×1.15) and half-PPR (×1.075), blended 60/40 with the injected
    predictor's value when one is available, then normalized by the
    category's maximum output (QB 400, RB/WR 350, TE 250, K/DST 150).

positional_scarcity (0–100):
    (1 − rank/total) · 50 + tier_dropoff · 50 among same-category available
    candidates, where tier_dropoff compares the best of the top five with the
    best of the next five. Positional-run and tier-break signals fed back from
    the trend detector add ``signal_scarcity_boost × strength``.

team_need (0–100):
    Unfilled share of the league's roster target for the category.

schedule_fit (0–100):
    Schedule-conflict penalty: 100 with no same-category roster conflict on
    the candidate's bye week, 60 with one, 20 with two or more.

risk (0–100):
    injury_risk × 100. Carries a negative weight.

upside / floor (0–100):
    Additive rules from age, team/coach change, breakout flag (upside) and
    experience, consistency rating, depth chart (floor). Base 50.

consistency (0–100):
    100 − coefficient of variation × 100 over the previous season's game log.

strength_of_schedule (0–100):
    100 − 20 × mean difficulty (0–5 scale) of fantasy-playoff weeks 14–16.

recent_form (0–100):
    50 × recent average / season average.

stacking, handcuff (0–100):
    Same-team QB/receiver pairing with the current roster; backup RB behind
    a rostered starter (90 when the starter's injury risk exceeds 70%).

keeper_value, dynasty_value (0–100):
    Only non-zero in keeper / dynasty leagues; age, contract and draft
    capital rules. Base 50.

Missing optional inputs produce the neutral midpoint 50 and a
``DataQualityWarning``; extraction never raises for missing data.
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import asdict, dataclass, field, fields
from typing import Optional

from draft_intel.config import ScoringConfig
from draft_intel.errors import DataQualityWarning, PredictorUnavailable
from draft_intel.ml.predictor import Prediction, Predictor, build_features
from draft_intel.models.candidate import Candidate, DraftContext

logger = logging.getLogger(__name__)

NEUTRAL = 50.0

# Categories whose projections gain from points-per-reception scoring
_RECEIVING_CATEGORIES = frozenset({"RB", "WR", "TE"})
_PPR_BOOST: dict[str, float] = {"standard": 1.0, "half_ppr": 1.075, "ppr": 1.15}

# Fantasy-playoff weeks (1-based) used by strength_of_schedule
_PLAYOFF_WEEKS = (14, 15, 16)

_SCARCITY_SIGNALS = frozenset({"positional_run", "tier_break"})


@dataclass(frozen=True)
class FactorVector:
    """All fifteen scoring factors, clamped to [0, 100] at construction.

    Attributes:
        value_vs_expected:    Fall past expected order.
        projected_output:     Normalized (and optionally blended) projection.
        positional_scarcity:  Rank within category plus tier dropoff.
        team_need:            Unfilled share of the roster target.
        schedule_fit:         Bye-week conflict penalty (100 = no conflict).
        risk:                 Injury risk (weighted negatively).
        upside:               Ceiling indicators.
        floor:                Stability indicators.
        consistency:          Week-to-week variance of the game log.
        strength_of_schedule: Playoff-week schedule ease.
        recent_form:          Recent output relative to season average.
        stacking:             QB/receiver same-team pairing.
        handcuff:             Backup to a rostered starter.
        keeper_value:         Keeper-league retention value.
        dynasty_value:        Dynasty-league long-term value.
    """

    value_vs_expected:    float = NEUTRAL
    projected_output:     float = NEUTRAL
    positional_scarcity:  float = NEUTRAL
    team_need:            float = NEUTRAL
    schedule_fit:         float = NEUTRAL
    risk:                 float = NEUTRAL
    upside:               float = NEUTRAL
    floor:                float = NEUTRAL
    consistency:          float = NEUTRAL
    strength_of_schedule: float = NEUTRAL
    recent_form:          float = NEUTRAL
    stacking:             float = NEUTRAL
    handcuff:             float = NEUTRAL
    keeper_value:         float = NEUTRAL
    dynasty_value:        float = NEUTRAL

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, _clamp(float(getattr(self, f.name)), 0.0, 100.0))

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


FACTOR_NAMES: tuple[str, ...] = tuple(f.name for f in fields(FactorVector))


@dataclass
class FactorResult:
    """Factor values plus everything learned while computing them.

    Attributes:
        factors:    The clamped factor vector.
        warnings:   Data-quality notices for factors that fell back to 50.
        prediction: Predictor output used in the projection blend, if any.
    """

    factors:    FactorVector
    warnings:   list[DataQualityWarning] = field(default_factory=list)
    prediction: Optional[Prediction] = None


def calculate_factors(
    candidate: Candidate,
    context:   DraftContext,
    predictor: Optional[Predictor] = None,
    config:    Optional[ScoringConfig] = None,
) -> FactorResult:
    """Compute every scoring factor for ``candidate`` in ``context``.

    Pure with respect to its inputs: the same candidate, context and
    predictor answers always produce the same vector.

    Args:
        candidate: Candidate being scored.
        context:   Draft snapshot (pick, pool, roster, league, signals).
        predictor: Optional injected predictor for the projection blend.
        config:    Scoring settings; defaults to ``ScoringConfig()``.

    Returns:
        ``FactorResult`` with the vector and any data-quality warnings.
    """
    cfg = config or ScoringConfig()
    warnings: list[DataQualityWarning] = []

    def neutral(factor: str, message: str) -> float:
        warnings.append(DataQualityWarning(candidate.candidate_id, factor, message))
        return NEUTRAL

    meta = candidate.metadata

    # ── Value vs expected order ───────────────────────────────────────────────
    value_vs_expected = _value_step(context.current_pick - candidate.expected_order)

    # ── Projected output ──────────────────────────────────────────────────────
    projected, prediction = _projected_output(candidate, context, predictor, cfg)
    if predictor is not None and prediction is None:
        warnings.append(DataQualityWarning(
            candidate.candidate_id, "projected_output",
            "Predictor returned no value; using own projection.",
        ))

    # ── Positional scarcity ───────────────────────────────────────────────────
    scarcity = _positional_scarcity(candidate, context, cfg)

    # ── Team need ─────────────────────────────────────────────────────────────
    team_need = _team_need(candidate, context)

    # ── Schedule conflict ─────────────────────────────────────────────────────
    if candidate.schedule_slot is None:
        schedule_fit = neutral("schedule_fit", "No bye week available.")
    else:
        schedule_fit = _schedule_fit(candidate, context)

    # ── Risk ──────────────────────────────────────────────────────────────────
    if meta.injury_risk is None:
        risk = neutral("risk", "No injury data available.")
    else:
        risk = meta.injury_risk * 100.0

    # ── Consistency / schedule / form ─────────────────────────────────────────
    consistency = _consistency(meta.game_log)
    if consistency is None:
        consistency = neutral("consistency", "No usable game log.")

    sos = _strength_of_schedule(meta.schedule_difficulty)
    if sos is None:
        sos = neutral("strength_of_schedule", "No playoff-week schedule data.")

    recent_form = _recent_form(meta.recent_outputs, meta.season_average)
    if recent_form is None:
        recent_form = neutral("recent_form", "No recent games or season average.")

    vector = FactorVector(
        value_vs_expected=value_vs_expected,
        projected_output=projected,
        positional_scarcity=scarcity,
        team_need=team_need,
        schedule_fit=schedule_fit,
        risk=risk,
        upside=_upside(candidate),
        floor=_floor(candidate),
        consistency=consistency,
        strength_of_schedule=sos,
        recent_form=recent_form,
        stacking=_stacking(candidate, context),
        handcuff=_handcuff(candidate, context),
        keeper_value=_keeper_value(candidate, context),
        dynasty_value=_dynasty_value(candidate, context),
    )

    if warnings:
        logger.debug(
            "Candidate %s: %d factor(s) fell back to neutral (%s)",
            candidate.candidate_id, len(warnings), ", ".join(w.factor for w in warnings),
        )

    return FactorResult(factors=vector, warnings=warnings, prediction=prediction)


# ── Individual factors ────────────────────────────────────────────────────────

def _value_step(diff: float) -> float:
    if diff > 30:
        return 100.0
    if diff > 15:
        return 80.0
    if diff > 0:
        return 60.0
    if diff > -15:
        return 40.0
    if diff > -30:
        return 20.0
    return 0.0


def _projected_output(
    candidate: Candidate,
    context:   DraftContext,
    predictor: Optional[Predictor],
    cfg:       ScoringConfig,
) -> tuple[float, Optional[Prediction]]:
    base = candidate.projected_output
    if candidate.category in _RECEIVING_CATEGORIES:
        base *= _PPR_BOOST[context.league.scoring_system]

    prediction: Optional[Prediction] = None
    if predictor is not None:
        try:
            prediction = predictor.predict(build_features(candidate))
        except PredictorUnavailable as exc:
            logger.debug("Predictor unavailable for %s: %s", candidate.candidate_id, exc)
        if prediction is not None:
            base = (1.0 - cfg.predictor_blend) * base + cfg.predictor_blend * prediction.value

    max_output = cfg.category_max_output.get(candidate.category, cfg.default_max_output)
    return base / max_output * 100.0, prediction


def _positional_scarcity(candidate: Candidate, context: DraftContext, cfg: ScoringConfig) -> float:
    same = sorted(
        (c for c in context.available
         if c.category == candidate.category and c.candidate_id != candidate.candidate_id),
        key=lambda c: (-c.projected_output, c.candidate_id),
    )
    rank = sum(1 for c in same if c.projected_output > candidate.projected_output)
    pool = sorted(same + [candidate], key=lambda c: -c.projected_output)
    total = len(pool)

    top5, next5 = pool[:5], pool[5:10]
    tier_dropoff = 0.0
    if next5 and top5[0].projected_output > 0:
        tier_dropoff = (
            (top5[0].projected_output - next5[0].projected_output) / top5[0].projected_output
        )

    score = (1.0 - rank / total) * 50.0 + tier_dropoff * 50.0

    strengths = [
        s.strength for s in context.trend_signals
        if s.signal_type in _SCARCITY_SIGNALS and candidate.category in s.categories
    ]
    if strengths:
        score += max(strengths) * cfg.signal_scarcity_boost
    return score


def _team_need(candidate: Candidate, context: DraftContext) -> float:
    ideal = context.league.roster_targets.get(candidate.category, 0)
    if ideal <= 0:
        return 0.0
    owned = sum(1 for c in context.roster if c.category == candidate.category)
    return max(0, ideal - owned) / ideal * 100.0


def _schedule_fit(candidate: Candidate, context: DraftContext) -> float:
    conflicts = sum(
        1 for c in context.roster
        if c.schedule_slot == candidate.schedule_slot and c.category == candidate.category
    )
    if conflicts >= 2:
        return 20.0
    if conflicts == 1:
        return 60.0
    return 100.0


def _upside(candidate: Candidate) -> float:
    meta = candidate.metadata
    score = 50.0
    if meta.age is not None and meta.age <= 25:
        score += 20
    if meta.new_team or meta.new_coach:
        score += 15
    if meta.breakout_candidate:
        score += 15
    return score


def _floor(candidate: Candidate) -> float:
    meta = candidate.metadata
    score = 50.0
    if meta.years_experience is not None and meta.years_experience >= 5:
        score += 20
    if meta.consistency_rating is not None and meta.consistency_rating > 0.8:
        score += 20
    if meta.depth_chart == 1:
        score += 10
    return score


def _consistency(game_log: list[float]) -> Optional[float]:
    if len(game_log) < 2:
        return None
    mean = statistics.fmean(game_log)
    if mean <= 0:
        return None
    cv = statistics.pstdev(game_log) / mean
    return 100.0 - cv * 100.0


def _strength_of_schedule(difficulty: list[float]) -> Optional[float]:
    weeks = [difficulty[w - 1] for w in _PLAYOFF_WEEKS if w <= len(difficulty)]
    if not weeks:
        return None
    return 100.0 - statistics.fmean(weeks) * 20.0


def _recent_form(recent: list[float], season_average: Optional[float]) -> Optional[float]:
    if not recent or not season_average:
        return None
    return statistics.fmean(recent) / season_average * 50.0


def _stacking(candidate: Candidate, context: DraftContext) -> float:
    if candidate.team is None:
        return 0.0
    teammates = [c for c in context.roster if c.team == candidate.team]
    if candidate.category in ("WR", "TE"):
        if any(c.category == "QB" for c in teammates):
            rank = candidate.metadata.team_offense_rank
            return 100.0 if rank is not None and rank <= 10 else 80.0
    elif candidate.category == "QB":
        receivers = sum(1 for c in teammates if c.category in ("WR", "TE"))
        if receivers:
            return 80.0 + 10.0 * receivers
    return 0.0


def _handcuff(candidate: Candidate, context: DraftContext) -> float:
    if candidate.category != "RB" or candidate.metadata.depth_chart != 2 or candidate.team is None:
        return 0.0
    for starter in context.roster:
        if (
            starter.category == "RB"
            and starter.team == candidate.team
            and starter.metadata.depth_chart == 1
        ):
            starter_risk = (starter.metadata.injury_risk or 0.0) * 100.0
            return 90.0 if starter_risk > 70 else 70.0
    return 0.0


def _keeper_value(candidate: Candidate, context: DraftContext) -> float:
    if not context.league.keeper_league:
        return 0.0
    meta = candidate.metadata
    score = 50.0
    if meta.age is not None:
        if meta.age <= 24:
            score += 30
        elif meta.age <= 27:
            score += 15
    if meta.keeper_round is not None and meta.keeper_round >= 8:
        score += 20
    return score


def _dynasty_value(candidate: Candidate, context: DraftContext) -> float:
    if not context.league.dynasty_league:
        return 0.0
    meta = candidate.metadata
    score = 50.0
    if meta.age is not None:
        if meta.age <= 23:
            score += 40
        elif meta.age <= 26:
            score += 20
        elif meta.age >= 30:
            score -= 30
    if meta.contract_years is not None and meta.contract_years >= 3:
        score += 15
    if meta.real_draft_position is not None and meta.real_draft_position <= 50:
        score += 15
    return score


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
