"""Loader for the pre-computed contribution snapshot artifact."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import httpx
from dateutil import parser as date_parser

from activity_stats.clients.contracts import FetchResult, FetchState
from activity_stats.clients.github import sanitize_log_extra
from activity_stats.config.settings import settings

logger = logging.getLogger(__name__)


class SnapshotStatus(str, Enum):
    """Whether a usable snapshot took part in reconciliation."""

    ABSENT = "absent"
    EMPTY = "empty"
    AVAILABLE = "available"
    MISMATCH = "mismatch"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Authoritative wide-window daily contribution counts."""

    contribution_map: dict[date, int]
    total_contributions: int
    date_range: tuple[Optional[date], Optional[date]] = (None, None)
    fetched_at: Optional[datetime] = None
    username: Optional[str] = None

    def belongs_to(self, login: str, *, default_owner: Optional[str] = None) -> bool:
        """GitHub logins compare case-insensitively; unattributed artifacts belong to ``default_owner``."""

        owner = self.username or default_owner
        return bool(owner) and owner.casefold() == login.casefold()


def snapshot_status(result: FetchResult[Snapshot]) -> SnapshotStatus:
    if result.is_ok and result.data is not None and result.data.contribution_map:
        return SnapshotStatus.AVAILABLE
    if result.is_empty:
        return SnapshotStatus.EMPTY
    return SnapshotStatus.ABSENT


def _parse_date(raw: Any) -> Optional[date]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return date_parser.isoparse(raw)
    except (TypeError, ValueError):
        return None


def parse_snapshot(payload: Any) -> FetchResult[Snapshot]:
    """Validate an artifact payload.

    FAILED when it does not declare success or has no per-day table; EMPTY
    when the table has no usable entries.
    """

    if not isinstance(payload, dict):
        return FetchResult(state=FetchState.FAILED, error="Snapshot payload is not an object")
    if payload.get("success") is not True:
        return FetchResult(state=FetchState.FAILED, error="Snapshot does not declare success")

    raw_map = payload.get("contributionMap")
    if not isinstance(raw_map, dict):
        return FetchResult(state=FetchState.FAILED, error="Snapshot is missing contributionMap")

    contribution_map: dict[date, int] = {}
    for raw_day, raw_count in raw_map.items():
        day = _parse_date(raw_day)
        if day is None or isinstance(raw_count, bool) or not isinstance(raw_count, int) or raw_count < 0:
            logger.debug("Skipping invalid snapshot entry", extra={"day": raw_day, "count": raw_count})
            continue
        contribution_map[day] = raw_count

    total = payload.get("totalContributions")
    if isinstance(total, bool) or not isinstance(total, int):
        total = sum(contribution_map.values())

    date_range = payload.get("dateRange") if isinstance(payload.get("dateRange"), dict) else {}
    owner = payload.get("username")
    snapshot = Snapshot(
        contribution_map=contribution_map,
        total_contributions=total,
        date_range=(_parse_date(date_range.get("from")), _parse_date(date_range.get("to"))),
        fetched_at=_parse_datetime(payload.get("fetchedAt")),
        username=owner if isinstance(owner, str) and owner.strip() else None,
    )
    state = FetchState.OK if contribution_map else FetchState.EMPTY
    return FetchResult(state=state, data=snapshot)


class SnapshotLoader:
    """Fetches the snapshot artifact from a URL or a local path; never raises."""

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        path: Optional[str | Path] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url if url is not None else settings.SNAPSHOT_URL
        raw_path = path if path is not None else settings.SNAPSHOT_PATH
        self._path = Path(raw_path) if raw_path else None
        self._timeout_seconds = timeout_seconds or settings.GITHUB_TIMEOUT_SECONDS
        self._transport = transport

    async def load(self) -> FetchResult[Snapshot]:
        if self._url:
            raw = await self._fetch_url(self._url)
        elif self._path is not None:
            raw = await self._read_path(self._path)
        else:
            raw = FetchResult(state=FetchState.FAILED, error="No snapshot location configured")

        if not raw.is_ok:
            logger.warning(
                "Snapshot unavailable, falling back to live feed",
                extra=sanitize_log_extra(error=raw.error, status_code=raw.status_code),
            )
            return FetchResult(state=raw.state, status_code=raw.status_code, error=raw.error)

        result = parse_snapshot(raw.data)
        if result.is_failed:
            logger.warning("Invalid snapshot payload, falling back to live feed", extra={"error": result.error})
        elif result.is_empty:
            logger.warning("Snapshot has no daily counts, falling back to live feed")
        else:
            snapshot = result.data
            logger.info(
                "Loaded contribution snapshot",
                extra={
                    "days": len(snapshot.contribution_map),
                    "date_from": str(snapshot.date_range[0]),
                    "date_to": str(snapshot.date_range[1]),
                },
            )
        return result

    async def load_snapshot(self) -> Optional[Snapshot]:
        """Return the snapshot only when it is usable (OK and non-empty)."""

        result = await self.load()
        return result.data if snapshot_status(result) == SnapshotStatus.AVAILABLE else None

    async def _fetch_url(self, url: str) -> FetchResult[Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": settings.USER_AGENT, "Accept": "application/json"},
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return FetchResult(state=FetchState.OK, data=response.json(), status_code=response.status_code)
        except httpx.HTTPError as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            return FetchResult(state=FetchState.FAILED, status_code=status_code, error=str(exc))
        except ValueError as exc:
            return FetchResult(state=FetchState.FAILED, error=f"Invalid snapshot JSON: {exc}")

    async def _read_path(self, path: Path) -> FetchResult[Any]:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            return FetchResult(state=FetchState.OK, data=json.loads(text))
        except OSError as exc:
            return FetchResult(state=FetchState.FAILED, error=f"Snapshot file unreadable: {exc}")
        except ValueError as exc:
            return FetchResult(state=FetchState.FAILED, error=f"Invalid snapshot JSON: {exc}")
