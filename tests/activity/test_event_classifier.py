from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from activity_stats.services.event_classifier import (
    ActivityRecord,
    ActivityType,
    aggregate_daily_activity,
    classify_event_kind,
    record_from_event,
    record_weight,
    records_from_events,
)


def _at(day: str, hour: int = 12) -> datetime:
    return datetime.fromisoformat(f"{day}T{hour:02d}:00:00+00:00")


def test_classify_event_kind_uses_fixed_mapping() -> None:
    assert classify_event_kind("PushEvent") == ActivityType.COMMIT
    assert classify_event_kind("PullRequestEvent") == ActivityType.PULL_REQUEST
    assert classify_event_kind("IssuesEvent") == ActivityType.ISSUE
    assert classify_event_kind("IssueCommentEvent") == ActivityType.ISSUE
    assert classify_event_kind("CreateEvent") == ActivityType.REPOSITORY_EVENT
    assert classify_event_kind("ForkEvent") == ActivityType.REPOSITORY_EVENT
    assert classify_event_kind("WatchEvent") == ActivityType.REPOSITORY_EVENT


def test_unknown_and_malformed_kinds_are_other() -> None:
    for kind in ("ReleaseEvent", "pushevent", "", None, 42):
        assert classify_event_kind(kind) == ActivityType.OTHER

    records = [ActivityRecord(event_kind=kind, occurred_at=_at("2026-03-01")) for kind in ("GollumEvent", "???")]
    activities = aggregate_daily_activity(records)

    assert {activity.type for activity in activities} == {ActivityType.OTHER}
    assert activities[0].count == 2


def test_two_pushes_same_day_sum_commit_weights() -> None:
    records = [
        ActivityRecord("PushEvent", _at("2026-03-01", 9), "acme/api", pushed_commit_count=3),
        ActivityRecord("PushEvent", _at("2026-03-01", 17), "acme/api", pushed_commit_count=0),
    ]

    activities = aggregate_daily_activity(records)

    assert len(activities) == 1
    assert activities[0].type == ActivityType.COMMIT
    assert activities[0].count == 4
    assert activities[0].repositories == frozenset({"acme/api"})


def test_push_weight_is_commit_count_with_minimum_one() -> None:
    assert record_weight(ActivityRecord("PushEvent", _at("2026-03-01"), pushed_commit_count=5)) == 5
    assert record_weight(ActivityRecord("PushEvent", _at("2026-03-01"), pushed_commit_count=0)) == 1
    assert record_weight(ActivityRecord("PushEvent", _at("2026-03-01"))) == 1
    assert record_weight(ActivityRecord("PullRequestEvent", _at("2026-03-01"), pushed_commit_count=9)) == 1


def test_groups_by_utc_date_and_sorts_newest_first_with_type_tiebreak() -> None:
    plus_nine = timezone(timedelta(hours=9))
    records = [
        ActivityRecord("IssuesEvent", _at("2026-03-01"), "acme/web"),
        # 2026-03-03 08:00 at +09:00 is still 2026-03-02 in UTC
        ActivityRecord("WatchEvent", datetime(2026, 3, 3, 8, 0, tzinfo=plus_nine), "acme/web"),
        ActivityRecord("PushEvent", _at("2026-03-02"), "acme/api", pushed_commit_count=2),
        ActivityRecord("PullRequestEvent", _at("2026-03-02"), "acme/api"),
        ActivityRecord("PullRequestEvent", _at("2026-03-02", 20), "acme/web"),
    ]

    activities = aggregate_daily_activity(records)

    assert [(activity.date, activity.type) for activity in activities] == [
        (date(2026, 3, 2), ActivityType.COMMIT),
        (date(2026, 3, 2), ActivityType.PULL_REQUEST),
        (date(2026, 3, 2), ActivityType.REPOSITORY_EVENT),
        (date(2026, 3, 1), ActivityType.ISSUE),
    ]
    assert activities[1].count == 2
    assert activities[1].repositories == frozenset({"acme/api", "acme/web"})


def test_missing_repository_is_skipped_and_empty_input_is_empty() -> None:
    activities = aggregate_daily_activity([ActivityRecord("IssuesEvent", _at("2026-03-01"), None)])

    assert activities[0].repositories == frozenset()
    assert aggregate_daily_activity([]) == []


def test_record_from_event_reads_github_payload() -> None:
    record = record_from_event(
        {
            "type": "PushEvent",
            "created_at": "2026-03-01T23:59:59Z",
            "repo": {"name": "acme/api"},
            "payload": {"commits": [{"message": "a"}, {"message": "b"}]},
        }
    )

    assert record is not None
    assert record.event_kind == "PushEvent"
    assert record.occurred_at.tzinfo is not None
    assert record.repository == "acme/api"
    assert record.pushed_commit_count == 2


def test_records_from_events_drops_unparseable_timestamps() -> None:
    records = records_from_events(
        [
            {"type": "PushEvent", "created_at": "not a date"},
            {"type": "WatchEvent"},
            {"type": "ForkEvent", "created_at": "2026-03-01T10:00:00Z", "repo": "broken"},
        ]
    )

    assert len(records) == 1
    assert records[0].event_kind == "ForkEvent"
    assert records[0].repository is None
