"""
Time and date utilities for season-aware calibration.

Key concepts:
  - Season weeks: week 1 begins on the configured season start date; records
    that carry no explicit week number derive one from their timestamp.
  - Period keys: sortable string labels used to bucket records into weekly,
    monthly, seasonal or yearly accuracy trends.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

# Dec–Feb is winter and is keyed to the year in which it ends.
_MONTH_SEASON: dict[int, str] = {
    12: "winter", 1: "winter", 2: "winter",
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "fall", 10: "fall", 11: "fall",
}
_SEASON_ORDER: dict[str, int] = {"winter": 1, "spring": 2, "summer": 3, "fall": 4}

VALID_TIMEFRAMES: frozenset[str] = frozenset({"weekly", "monthly", "seasonal", "yearly"})


def season_week(ts: datetime, season_start: Optional[date]) -> Optional[int]:
    """Return the 1-based season week for ``ts``, or ``None``.

    Returns ``None`` if ``season_start`` is unset or ``ts`` falls before it.

    Args:
        ts: Timestamp of the record.
        season_start: First day of week 1.

    Returns:
        Week number (1 = first week of the season), or ``None``.
    """
    if season_start is None:
        return None
    delta = (ts.date() - season_start).days
    if delta < 0:
        return None
    return delta // 7 + 1


def period_key(ts: datetime, timeframe: str) -> str:
    """Return a sortable period label for ``ts``.

    Examples: ``"2025-W07"`` (weekly), ``"2025-09"`` (monthly),
    ``"2025-4-fall"`` (seasonal), ``"2025"`` (yearly).

    Raises:
        ValueError: If ``timeframe`` is not one of ``VALID_TIMEFRAMES``.
    """
    if timeframe == "weekly":
        iso_year, iso_week, _ = ts.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if timeframe == "monthly":
        return f"{ts.year}-{ts.month:02d}"
    if timeframe == "seasonal":
        season = _MONTH_SEASON[ts.month]
        year = ts.year + 1 if ts.month == 12 else ts.year
        return f"{year}-{_SEASON_ORDER[season]}-{season}"
    if timeframe == "yearly":
        return str(ts.year)
    raise ValueError(
        f"Unknown timeframe '{timeframe}'. Expected one of {sorted(VALID_TIMEFRAMES)}."
    )


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
