"""
Weight profiles: the per-factor weights applied to a ``FactorVector``.

A profile is a pure function of its key ``(league configuration, strategy)``.
Defaults below are adjusted by multiplicative overrides:

    scoring_system == "ppr"   → consistency    × 1.2
    keeper_league             → keeper_value   × 3,  dynasty_value × 2
    dynasty_league            → dynasty_value  × 5,  risk          × 0.5
    strategy == "upside"      → upside         × 2,  floor         × 0.5
    strategy == "safe"        → floor          × 2,  upside        × 0.5,  risk × 1.5

Any other strategy string scores with the balanced (default) weights.

Profiles are cached per ``WeightProfileCache`` (one per engine instance).
An entry is reused for as long as the league configuration behind its
``league_id`` is unchanged; a changed configuration evicts every cached
strategy for that league.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Mapping, Optional

from draft_intel.errors import ScoringConfigurationError
from draft_intel.models.candidate import LeagueConfig
from draft_intel.scoring.factors import FACTOR_NAMES, FactorVector

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: dict[str, float] = {
    "value_vs_expected":     0.15,
    "projected_output":      0.20,
    "positional_scarcity":   0.15,
    "team_need":             0.10,
    "schedule_fit":          0.05,
    "risk":                 -0.10,
    "upside":                0.10,
    "floor":                 0.08,
    "consistency":           0.07,
    "strength_of_schedule":  0.05,
    "recent_form":           0.05,
    "stacking":              0.03,
    "handcuff":              0.02,
    "keeper_value":          0.03,
    "dynasty_value":         0.02,
}

_STRATEGY_MULTIPLIERS: dict[str, dict[str, float]] = {
    "upside": {"upside": 2.0, "floor": 0.5},
    "safe":   {"floor": 2.0, "upside": 0.5, "risk": 1.5},
}


@dataclass(frozen=True)
class WeightProfile:
    """Resolved weights for one ``(league, strategy)`` key.

    Attributes:
        league_id: League the profile was built for.
        strategy:  Strategy name the profile was built for.
        weights:   Factor name → weight.
    """

    league_id: str
    strategy:  str
    weights:   Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.weights:
            raise ScoringConfigurationError(
                f"Weight table for league '{self.league_id}' is empty."
            )
        unknown = set(self.weights) - set(FACTOR_NAMES)
        if unknown:
            raise ScoringConfigurationError(f"Unknown factors in weight table: {sorted(unknown)}")
        object.__setattr__(self, "weights", dict(self.weights))

    def apply(self, factors: FactorVector) -> float:
        """Return Σ factor × weight (unclamped)."""
        values = factors.as_dict()
        return sum(values[name] * w for name, w in self.weights.items())


def build_weight_profile(
    league: LeagueConfig,
    strategy: str = "balanced",
    base_weights: Optional[Mapping[str, float]] = None,
) -> WeightProfile:
    """Build the weight profile for ``(league, strategy)``.

    Args:
        league:       League configuration.
        strategy:     Strategy name.
        base_weights: Starting table; defaults to ``DEFAULT_WEIGHTS``.

    Returns:
        A new ``WeightProfile``.

    Raises:
        ScoringConfigurationError: If the resulting table is empty or
            names an unknown factor.
    """
    weights = dict(DEFAULT_WEIGHTS if base_weights is None else base_weights)

    multipliers: list[dict[str, float]] = []
    if league.scoring_system == "ppr":
        multipliers.append({"consistency": 1.2})
    if league.keeper_league:
        multipliers.append({"keeper_value": 3.0, "dynasty_value": 2.0})
    if league.dynasty_league:
        multipliers.append({"dynasty_value": 5.0, "risk": 0.5})
    if strategy in _STRATEGY_MULTIPLIERS:
        multipliers.append(_STRATEGY_MULTIPLIERS[strategy])

    for table in multipliers:
        for name, factor in table.items():
            if name in weights:
                weights[name] *= factor

    return WeightProfile(league_id=league.league_id, strategy=strategy, weights=weights)


def apply_overrides(profile: WeightProfile, multipliers: Mapping[str, float]) -> WeightProfile:
    """Return a copy of ``profile`` with per-factor multipliers applied.

    Used by callers that retune weights after reading a calibration report.

    Raises:
        ScoringConfigurationError: If ``multipliers`` names an unknown factor.
    """
    unknown = set(multipliers) - set(FACTOR_NAMES)
    if unknown:
        raise ScoringConfigurationError(f"Unknown factors in overrides: {sorted(unknown)}")
    weights = {
        name: w * multipliers.get(name, 1.0) for name, w in profile.weights.items()
    }
    return WeightProfile(league_id=profile.league_id, strategy=profile.strategy, weights=weights)


class WeightProfileCache:
    """Thread-safe cache of weight profiles keyed by ``(league_id, strategy)``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fingerprints: dict[str, str] = {}
        self._profiles: dict[tuple[str, str], WeightProfile] = {}

    def get(self, league: LeagueConfig, strategy: str) -> WeightProfile:
        fingerprint = league.fingerprint()
        with self._lock:
            if self._fingerprints.get(league.league_id) != fingerprint:
                self._invalidate(league.league_id)
                self._fingerprints[league.league_id] = fingerprint
            key = (league.league_id, strategy)
            profile = self._profiles.get(key)
            if profile is None:
                profile = build_weight_profile(league, strategy)
                self._profiles[key] = profile
            return profile

    def _invalidate(self, league_id: str) -> None:
        stale = [k for k in self._profiles if k[0] == league_id]
        for k in stale:
            del self._profiles[k]
        if stale:
            logger.info(
                "League '%s' configuration changed; dropped %d cached weight profile(s)",
                league_id, len(stale),
            )

    def __len__(self) -> int:
        return len(self._profiles)
