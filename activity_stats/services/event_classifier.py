"""Event classification and daily aggregation for the live activity feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from dateutil import parser as date_parser

from activity_stats.services.calendar import utc_day

logger = logging.getLogger(__name__)


class ActivityType(str, Enum):
    """Closed set of activity categories; declaration order is the same-day sort order."""

    COMMIT = "commit"
    PULL_REQUEST = "pr"
    ISSUE = "issue"
    REPOSITORY_EVENT = "repo"
    OTHER = "other"


_EVENT_KIND_TYPES: dict[str, ActivityType] = {
    "PushEvent": ActivityType.COMMIT,
    "PullRequestEvent": ActivityType.PULL_REQUEST,
    "IssuesEvent": ActivityType.ISSUE,
    "IssueCommentEvent": ActivityType.ISSUE,
    "CreateEvent": ActivityType.REPOSITORY_EVENT,
    "ForkEvent": ActivityType.REPOSITORY_EVENT,
    "WatchEvent": ActivityType.REPOSITORY_EVENT,
}

_TYPE_ORDER = {activity_type: index for index, activity_type in enumerate(ActivityType)}


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """One raw event from the upstream feed."""

    event_kind: str
    occurred_at: datetime
    repository: Optional[str] = None
    pushed_commit_count: Optional[int] = None


@dataclass(frozen=True, slots=True)
class DailyActivity:
    """Aggregated activity for one (date, type) pair."""

    date: date
    type: ActivityType
    count: int
    repositories: frozenset[str] = frozenset()


def classify_event_kind(event_kind: Any) -> ActivityType:
    if not isinstance(event_kind, str):
        return ActivityType.OTHER
    return _EVENT_KIND_TYPES.get(event_kind, ActivityType.OTHER)


def record_weight(record: ActivityRecord) -> int:
    """Pushes weigh their sub-commit count (at least 1); everything else weighs 1."""

    if classify_event_kind(record.event_kind) != ActivityType.COMMIT:
        return 1
    commits = record.pushed_commit_count
    if isinstance(commits, int) and commits > 0:
        return commits
    return 1


def record_from_event(event: dict[str, Any]) -> Optional[ActivityRecord]:
    """Build an `ActivityRecord` from a GitHub event payload.

    Returns None when the timestamp is missing or unparseable.
    """

    raw_timestamp = event.get("created_at")
    if not isinstance(raw_timestamp, str) or not raw_timestamp.strip():
        return None
    try:
        occurred_at = date_parser.isoparse(raw_timestamp)
    except (TypeError, ValueError):
        logger.debug("Dropping event with unparseable timestamp", extra={"created_at": raw_timestamp})
        return None

    repo = event.get("repo") if isinstance(event.get("repo"), dict) else {}
    repository = repo.get("name") if isinstance(repo.get("name"), str) and repo.get("name") else None

    payload = event.get("payload") if isinstance(event.get("payload"), dict) else {}
    commits = payload.get("commits")
    pushed_commit_count = len(commits) if isinstance(commits, list) else None
    if pushed_commit_count is None and isinstance(payload.get("size"), int):
        pushed_commit_count = payload["size"]

    return ActivityRecord(
        event_kind=str(event.get("type") or ""),
        occurred_at=occurred_at,
        repository=repository,
        pushed_commit_count=pushed_commit_count,
    )


def records_from_events(events: Iterable[dict[str, Any]]) -> list[ActivityRecord]:
    records: list[ActivityRecord] = []
    for event in events:
        record = record_from_event(event)
        if record is not None:
            records.append(record)
    return records


def aggregate_daily_activity(records: Iterable[ActivityRecord]) -> list[DailyActivity]:
    """Group records by (UTC date, type), newest date first."""

    counts: dict[tuple[date, ActivityType], int] = {}
    repositories: dict[tuple[date, ActivityType], set[str]] = {}

    for record in records:
        key = (utc_day(record.occurred_at), classify_event_kind(record.event_kind))
        counts[key] = counts.get(key, 0) + record_weight(record)
        names = repositories.setdefault(key, set())
        if record.repository:
            names.add(record.repository)

    activities = [
        DailyActivity(date=day, type=activity_type, count=count, repositories=frozenset(repositories[(day, activity_type)]))
        for (day, activity_type), count in counts.items()
    ]
    activities.sort(key=lambda item: (-item.date.toordinal(), _TYPE_ORDER[item.type]))
    return activities
