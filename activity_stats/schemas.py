"""Response models for the HTTP API."""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from activity_stats.orchestrator import ReconciliationResult
from activity_stats.services.calendar import intensity_level
from activity_stats.services.event_classifier import DailyActivity


class DailyActivityOut(BaseModel):
    date: date
    type: str
    count: int
    repositories: list[str]

    @classmethod
    def from_activity(cls, activity: DailyActivity) -> "DailyActivityOut":
        return cls(
            date=activity.date,
            type=activity.type.value,
            count=activity.count,
            repositories=sorted(activity.repositories),
        )


class AggregateStatsOut(BaseModel):
    totalContributions: int
    totalCommits: int
    totalPRs: int
    totalIssues: int
    totalRepos: int
    activeDays: int
    currentStreak: int
    longestStreak: int
    averageDaily: float
    recentActivity: list[DailyActivityOut]


class ActivityResponse(BaseModel):
    """Reconciled stats plus provenance of each source."""

    username: str
    asOf: date
    statsSource: str
    snapshotStatus: str
    liveState: str
    stats: AggregateStatsOut
    contributionMap: Optional[dict[date, int]]

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> "ActivityResponse":
        stats = result.stats
        return cls(
            username=result.username,
            asOf=result.as_of,
            statsSource=result.stats_source,
            snapshotStatus=result.snapshot_status.value,
            liveState=result.live_state.value,
            stats=AggregateStatsOut(
                totalContributions=stats.total_contributions,
                totalCommits=stats.total_commits,
                totalPRs=stats.total_prs,
                totalIssues=stats.total_issues,
                totalRepos=stats.total_repos,
                activeDays=stats.active_days,
                currentStreak=stats.current_streak,
                longestStreak=stats.longest_streak,
                averageDaily=stats.average_daily,
                recentActivity=[DailyActivityOut.from_activity(activity) for activity in stats.recent_activity],
            ),
            contributionMap=result.contribution_map,
        )


class CalendarDay(BaseModel):
    date: date
    count: int
    level: int


class CalendarResponse(BaseModel):
    """Trailing-window calendar, oldest day first."""

    username: str
    total: int
    source: str
    days: list[CalendarDay]

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> "CalendarResponse":
        calendar = result.calendar()
        days = [
            CalendarDay(date=day, count=count, level=intensity_level(count))
            for day, count in sorted(calendar.items())
        ]
        return cls(
            username=result.username,
            total=sum(day.count for day in days),
            source=result.stats_source,
            days=days,
        )
