"""Current and longest streaks over a contribution map."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import AbstractSet, Mapping

from activity_stats.services.calendar import active_dates


@dataclass(frozen=True, slots=True)
class StreakSummary:
    current: int
    longest: int


def calculate_current_streak(active: AbstractSet[date], today: date) -> int:
    """Consecutive active days ending today, or yesterday while today has no activity yet."""

    one_day = timedelta(days=1)
    cursor = today
    if cursor not in active:
        cursor -= one_day
        if cursor not in active:
            return 0

    streak = 0
    while cursor in active:
        streak += 1
        cursor -= one_day
    return streak


def calculate_longest_streak(active: AbstractSet[date]) -> int:
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(active):
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def calculate_streaks(contributions: Mapping[date, int], *, today: date) -> StreakSummary:
    active = active_dates(contributions)
    if not active:
        return StreakSummary(current=0, longest=0)
    return StreakSummary(
        current=calculate_current_streak(active, today),
        longest=calculate_longest_streak(active),
    )
