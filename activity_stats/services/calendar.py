"""Calendar-day helpers for contribution maps."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

if TYPE_CHECKING:
    from activity_stats.services.event_classifier import DailyActivity

DEFAULT_WINDOW_DAYS = 365

# Upper bounds of intensity levels 1..3; anything above the last bound is level 4.
_INTENSITY_BOUNDS = (2, 5, 8)


def utc_day(moment: datetime) -> date:
    """Truncate a timestamp to its UTC calendar date (naive values are UTC)."""

    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(UTC).date()


def utc_today(now: Optional[datetime] = None) -> date:
    return utc_day(now or datetime.now(UTC))


def trailing_window(today: date, days: int = DEFAULT_WINDOW_DAYS) -> list[date]:
    """Dates of the ``days``-long window ending at ``today`` inclusive, oldest first."""

    if days <= 0:
        return []
    start = today - timedelta(days=days - 1)
    return [start + timedelta(days=offset) for offset in range(days)]


def empty_contribution_map(today: date, days: int = DEFAULT_WINDOW_DAYS) -> dict[date, int]:
    return {day: 0 for day in trailing_window(today, days)}


def active_dates(contributions: Mapping[date, int]) -> set[date]:
    return {day for day, count in contributions.items() if count > 0}


def live_contribution_map(
    activities: Iterable["DailyActivity"],
    *,
    today: date,
    days: int = DEFAULT_WINDOW_DAYS,
) -> dict[date, int]:
    """Fold daily activity counts onto a zero-filled window.

    Activities dated outside the window are ignored.
    """

    contributions = empty_contribution_map(today, days)
    for activity in activities:
        if activity.date in contributions:
            contributions[activity.date] += activity.count
    return contributions


def build_contribution_calendar(
    activities: Iterable["DailyActivity"],
    snapshot_map: Optional[Mapping[date, int]] = None,
    *,
    today: date,
    days: int = DEFAULT_WINDOW_DAYS,
) -> dict[date, int]:
    """Calendar for rendering: snapshot counts when present, live counts otherwise.

    Snapshot entries are copied verbatim, including any that fall outside the
    zero-filled window.
    """

    if snapshot_map:
        contributions = empty_contribution_map(today, days)
        contributions.update(snapshot_map)
        return contributions
    return live_contribution_map(activities, today=today, days=days)


def intensity_level(count: int) -> int:
    """Bucket a daily count into heat levels 0..4."""

    if count <= 0:
        return 0
    for level, bound in enumerate(_INTENSITY_BOUNDS, start=1):
        if count <= bound:
            return level
    return len(_INTENSITY_BOUNDS) + 1
