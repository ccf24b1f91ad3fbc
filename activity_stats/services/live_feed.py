"""Sequential pagination over the public GitHub events feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from activity_stats.clients.contracts import FetchState
from activity_stats.clients.github import sanitize_log_extra
from activity_stats.config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveFeedResult:
    """Events gathered from the feed and why pagination stopped."""

    events: list[dict[str, Any]] = field(default_factory=list)
    pages_fetched: int = 0
    state: FetchState = FetchState.EMPTY
    stop_reason: str = "not_started"
    errors: list[str] = field(default_factory=list)


class LiveFeedCollector:
    """Requests event pages one after another until a short page or the page cap."""

    def __init__(
        self,
        github_client: Any,
        *,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> None:
        self._github_client = github_client
        self._page_size = page_size or settings.EVENTS_PAGE_SIZE
        self._max_pages = max_pages or settings.EVENTS_MAX_PAGES

    async def collect(self, username: str, result: Optional[LiveFeedResult] = None) -> LiveFeedResult:
        """Paginate the feed into ``result``.

        Passing a caller-owned ``result`` keeps the pages gathered so far
        visible if this coroutine is cancelled by a deadline.
        """

        gathered = result if result is not None else LiveFeedResult()
        gathered.stop_reason = "max_pages"

        for page in range(1, self._max_pages + 1):
            response = await self._github_client.list_public_events(
                username,
                page=page,
                per_page=self._page_size,
            )

            if response.is_rate_limited:
                gathered.errors.append(f"page {page}: {response.error or 'rate limited'}")
                gathered.stop_reason = "rate_limited"
                break
            if response.is_failed:
                gathered.errors.append(f"page {page}: {response.error or 'unknown'}")
                gathered.stop_reason = "failed"
                break

            events = list(response.data or [])
            if not events:
                gathered.stop_reason = "empty_page"
                break

            gathered.events.extend(events)
            gathered.pages_fetched = page
            if len(events) < self._page_size:
                gathered.stop_reason = "short_page"
                break

        gathered.state = self._final_state(gathered)
        logger.info(
            "Live event feed collected",
            extra=sanitize_log_extra(
                username=username,
                event_count=len(gathered.events),
                pages_fetched=gathered.pages_fetched,
                stop_reason=gathered.stop_reason,
                errors=gathered.errors,
            ),
        )
        return gathered

    @staticmethod
    def _final_state(gathered: LiveFeedResult) -> FetchState:
        if gathered.events:
            return FetchState.OK
        if gathered.stop_reason == "rate_limited":
            return FetchState.RATE_LIMITED
        if gathered.stop_reason == "failed":
            return FetchState.FAILED
        return FetchState.EMPTY
