"""Aggregate statistics for the live feed, the snapshot, and their merge."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Mapping, Sequence

from activity_stats.services.calendar import DEFAULT_WINDOW_DAYS, live_contribution_map
from activity_stats.services.event_classifier import ActivityType, DailyActivity
from activity_stats.services.streaks import calculate_streaks


@dataclass(frozen=True, slots=True)
class AggregateStats:
    """Summary handed to the rendering layer.

    After a merge the first four totals and the streaks may come from the
    snapshot while category totals and `recent_activity` come from the live
    feed.
    """

    total_contributions: int = 0
    total_commits: int = 0
    total_prs: int = 0
    total_issues: int = 0
    total_repos: int = 0
    active_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    recent_activity: tuple[DailyActivity, ...] = field(default_factory=tuple)

    @property
    def average_daily(self) -> float:
        """Mean contributions per active day, one decimal."""

        if self.active_days <= 0:
            return 0.0
        return round(self.total_contributions / self.active_days, 1)


def category_total(activities: Sequence[DailyActivity], activity_type: ActivityType) -> int:
    return sum(activity.count for activity in activities if activity.type == activity_type)


def compute_live_stats(
    activities: Sequence[DailyActivity],
    *,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> AggregateStats:
    """Stats from live activities alone; OTHER-type activity counts toward days and streaks only."""

    total_commits = category_total(activities, ActivityType.COMMIT)
    total_prs = category_total(activities, ActivityType.PULL_REQUEST)
    total_issues = category_total(activities, ActivityType.ISSUE)
    total_repos = category_total(activities, ActivityType.REPOSITORY_EVENT)
    streaks = calculate_streaks(live_contribution_map(activities, today=today, days=window_days), today=today)

    return AggregateStats(
        total_contributions=total_commits + total_prs + total_issues + total_repos,
        total_commits=total_commits,
        total_prs=total_prs,
        total_issues=total_issues,
        total_repos=total_repos,
        active_days=len({activity.date for activity in activities}),
        current_streak=streaks.current,
        longest_streak=streaks.longest,
        recent_activity=tuple(activities),
    )


def merge_snapshot_stats(
    live: AggregateStats,
    snapshot_map: Mapping[date, int],
    *,
    today: date,
) -> AggregateStats:
    """Override totals, active days and streaks with values from the snapshot map.

    An empty map leaves ``live`` untouched.
    """

    if not snapshot_map:
        return live

    streaks = calculate_streaks(snapshot_map, today=today)
    return replace(
        live,
        total_contributions=sum(snapshot_map.values()),
        active_days=sum(1 for count in snapshot_map.values() if count > 0),
        current_streak=streaks.current,
        longest_streak=streaks.longest,
    )
