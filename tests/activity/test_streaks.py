from __future__ import annotations

from datetime import date, timedelta

from activity_stats.services.streaks import (
    StreakSummary,
    calculate_current_streak,
    calculate_longest_streak,
    calculate_streaks,
)

TODAY = date(2026, 3, 15)


def _days_ago(*offsets: int) -> set[date]:
    return {TODAY - timedelta(days=offset) for offset in offsets}


def test_current_streak_counts_back_from_today() -> None:
    assert calculate_current_streak(_days_ago(0, 1, 2, 4), TODAY) == 3


def test_current_streak_starts_yesterday_when_today_inactive() -> None:
    assert calculate_current_streak(_days_ago(1, 2), TODAY) == 2


def test_current_streak_zero_when_today_and_yesterday_inactive() -> None:
    assert calculate_current_streak(_days_ago(2, 3, 4), TODAY) == 0


def test_longest_streak_across_gaps() -> None:
    active = {date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 10)}

    assert calculate_longest_streak(active) == 3


def test_longest_streak_spans_month_and_year_boundaries() -> None:
    active = {date(2023, 12, 30), date(2023, 12, 31), date(2024, 1, 1), date(2024, 2, 29), date(2024, 3, 1)}

    assert calculate_longest_streak(active) == 3


def test_empty_map_and_all_zero_map_have_no_streaks() -> None:
    assert calculate_streaks({}, today=TODAY) == StreakSummary(current=0, longest=0)
    assert calculate_streaks({TODAY: 0, TODAY - timedelta(days=1): 0}, today=TODAY) == StreakSummary(0, 0)


def test_zero_counts_are_not_active_and_input_is_not_mutated() -> None:
    contributions = {TODAY: 0, TODAY - timedelta(days=1): 3, TODAY - timedelta(days=2): 1}
    before = dict(contributions)

    summary = calculate_streaks(contributions, today=TODAY)

    assert summary == StreakSummary(current=2, longest=2)
    assert contributions == before


def test_longest_covers_run_containing_most_recent_active_date() -> None:
    for offsets in [(0,), (1, 2, 3), (0, 1, 5, 6, 7, 8), (3, 4), (1, 10, 11, 12, 13, 14, 15)]:
        summary = calculate_streaks({day: 1 for day in _days_ago(*offsets)}, today=TODAY)
        assert summary.longest >= summary.current
