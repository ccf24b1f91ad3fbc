"""Pure reconciliation services: classification, streaks, snapshot parsing and stats."""

from activity_stats.services.event_classifier import (
    ActivityRecord,
    ActivityType,
    DailyActivity,
    aggregate_daily_activity,
    classify_event_kind,
)
from activity_stats.services.snapshot_loader import Snapshot, SnapshotLoader, SnapshotStatus
from activity_stats.services.stats import AggregateStats, compute_live_stats, merge_snapshot_stats
from activity_stats.services.streaks import StreakSummary, calculate_streaks

__all__ = [
    "ActivityRecord",
    "ActivityType",
    "DailyActivity",
    "aggregate_daily_activity",
    "classify_event_kind",
    "Snapshot",
    "SnapshotLoader",
    "SnapshotStatus",
    "AggregateStats",
    "compute_live_stats",
    "merge_snapshot_stats",
    "StreakSummary",
    "calculate_streaks",
]
