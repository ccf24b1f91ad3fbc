"""Reconciles the contribution snapshot with the live GitHub event feed."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, Callable, Optional

from activity_stats.clients.contracts import FetchResult, FetchState
from activity_stats.clients.github import GitHubActivityClient, sanitize_log_extra
from activity_stats.config.settings import settings
from activity_stats.services.cache import ResultCache
from activity_stats.services.calendar import build_contribution_calendar, utc_day
from activity_stats.services.event_classifier import aggregate_daily_activity, records_from_events
from activity_stats.services.live_feed import LiveFeedCollector, LiveFeedResult
from activity_stats.services.snapshot_loader import Snapshot, SnapshotLoader, SnapshotStatus, snapshot_status
from activity_stats.services.stats import AggregateStats, compute_live_stats, merge_snapshot_stats

logger = logging.getLogger(__name__)

STATS_SOURCE_SNAPSHOT = "snapshot"
STATS_SOURCE_LIVE = "live"


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Merged stats plus the winning contribution map and per-source provenance."""

    username: str
    as_of: date
    stats: AggregateStats
    contribution_map: Optional[dict[date, int]]
    snapshot_status: SnapshotStatus
    live_state: FetchState
    stats_source: str
    live_pages: int = 0
    window_days: int = 365

    def calendar(self) -> dict[date, int]:
        """Full trailing-window calendar, falling back to live activity counts."""

        return build_contribution_calendar(
            self.stats.recent_activity,
            self.contribution_map,
            today=self.as_of,
            days=self.window_days,
        )


class ReconciliationOrchestrator:
    """Runs the snapshot and live paths concurrently and merges them field by field."""

    def __init__(
        self,
        *,
        github_client_factory: Callable[[], Any] = GitHubActivityClient,
        snapshot_loader: Any | None = None,
        cache: ResultCache[ReconciliationResult] | None = None,
        clock: Callable[[], datetime] | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
        window_days: int | None = None,
        deadline_seconds: float | None = None,
        snapshot_owner: str | None = None,
    ) -> None:
        self._github_client_factory = github_client_factory
        self._snapshot_loader = snapshot_loader or SnapshotLoader()
        self._cache = cache if cache is not None else ResultCache(settings.RESULT_CACHE_TTL_SECONDS)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._page_size = page_size or settings.EVENTS_PAGE_SIZE
        self._max_pages = max_pages or settings.EVENTS_MAX_PAGES
        self._window_days = window_days or settings.CONTRIBUTION_WINDOW_DAYS
        self._deadline_seconds = deadline_seconds if deadline_seconds is not None else settings.RECONCILE_DEADLINE_SECONDS
        self._snapshot_owner = snapshot_owner or settings.GITHUB_USERNAME

    async def reconcile(self, username: str | None = None, *, use_cache: bool = True) -> ReconciliationResult:
        """Fetch both sources and build one `ReconciliationResult`.

        Source failures degrade to empty or absent data; cancellation of the
        calling task propagates.
        """

        login = username or settings.GITHUB_USERNAME
        today = utc_day(self._clock())
        cache_key = (login, today)

        if use_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Reconciliation served from cache", extra={"username": login})
                return cached

        logger.info(
            "Reconciliation started",
            extra=sanitize_log_extra(username=login, as_of=today.isoformat(), deadline_seconds=self._deadline_seconds),
        )

        live, snapshot_result = await asyncio.gather(
            self._run_live(login),
            self._run_snapshot(),
        )

        activities = aggregate_daily_activity(records_from_events(live.events))
        live_stats = compute_live_stats(activities, today=today, window_days=self._window_days)
        status = snapshot_status(snapshot_result)
        if status == SnapshotStatus.AVAILABLE and not snapshot_result.data.belongs_to(login, default_owner=self._snapshot_owner):
            logger.warning(
                "Snapshot belongs to another user, falling back to live feed",
                extra={"username": login, "snapshot_username": snapshot_result.data.username or self._snapshot_owner},
            )
            status = SnapshotStatus.MISMATCH

        if status == SnapshotStatus.AVAILABLE:
            snapshot: Snapshot = snapshot_result.data
            stats = merge_snapshot_stats(live_stats, snapshot.contribution_map, today=today)
            contribution_map: Optional[dict[date, int]] = dict(snapshot.contribution_map)
            stats_source = STATS_SOURCE_SNAPSHOT
        else:
            stats = live_stats
            contribution_map = None
            stats_source = STATS_SOURCE_LIVE

        result = ReconciliationResult(
            username=login,
            as_of=today,
            stats=stats,
            contribution_map=contribution_map,
            snapshot_status=status,
            live_state=live.state,
            stats_source=stats_source,
            live_pages=live.pages_fetched,
            window_days=self._window_days,
        )

        logger.info(
            "Reconciliation completed",
            extra=sanitize_log_extra(
                username=login,
                stats_source=stats_source,
                snapshot_status=status.value,
                live_state=live.state.value,
                live_stop_reason=live.stop_reason,
                total_contributions=stats.total_contributions,
                active_days=stats.active_days,
            ),
        )
        self._cache.set(cache_key, result)
        return result

    async def _run_live(self, username: str) -> LiveFeedResult:
        gathered = LiveFeedResult()
        async with self._github_client_factory() as client:
            collector = LiveFeedCollector(client, page_size=self._page_size, max_pages=self._max_pages)
            try:
                await self._with_deadline(collector.collect(username, gathered))
            except asyncio.TimeoutError:
                logger.warning(
                    "Live event feed hit the deadline, keeping gathered pages",
                    extra={"username": username, "event_count": len(gathered.events)},
                )
                gathered.stop_reason = "deadline"
                gathered.state = FetchState.OK if gathered.events else FetchState.FAILED
        return gathered

    async def _run_snapshot(self) -> FetchResult[Snapshot]:
        try:
            return await self._with_deadline(self._snapshot_loader.load())
        except asyncio.TimeoutError:
            logger.warning("Snapshot load hit the deadline, treating as unavailable")
            return FetchResult(state=FetchState.FAILED, error="deadline exceeded")

    async def _with_deadline(self, awaitable):
        if self._deadline_seconds is None or self._deadline_seconds <= 0:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self._deadline_seconds)
