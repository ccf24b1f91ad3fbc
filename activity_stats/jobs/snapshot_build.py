"""Build-time producer for the contribution snapshot artifact."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional

from activity_stats.clients.github import GitHubActivityClient, sanitize_log_extra
from activity_stats.config.settings import settings

logger = logging.getLogger(__name__)


def flatten_calendar(calendar: dict[str, Any]) -> dict[str, int]:
    """Flatten `weeks[].contributionDays[]` into a date -> count map."""

    contribution_map: dict[str, int] = {}
    weeks = calendar.get("weeks") if isinstance(calendar.get("weeks"), list) else []
    for week in weeks:
        days = week.get("contributionDays") if isinstance(week, dict) else None
        for day in days or []:
            if not isinstance(day, dict):
                continue
            raw_date = day.get("date")
            count = day.get("contributionCount")
            if isinstance(raw_date, str) and isinstance(count, int):
                contribution_map[raw_date] = count
    return contribution_map


async def build_snapshot(
    username: Optional[str] = None,
    *,
    client: Optional[GitHubActivityClient] = None,
    now: Optional[datetime] = None,
) -> Optional[dict[str, Any]]:
    """Fetch one year of contribution counts and return the artifact payload.

    Returns None when no token is configured or the GraphQL query fails.
    """

    login = username or settings.GITHUB_USERNAME
    end = now or datetime.now(UTC)
    start = end - timedelta(days=365)

    owned_client = client is None
    github_client = client or GitHubActivityClient()
    try:
        if not github_client.has_token:
            logger.warning("GITHUB_TOKEN not configured, skipping snapshot build", extra={"username": login})
            return None

        response = await github_client.fetch_contribution_calendar(login, start=start, end=end)
    finally:
        if owned_client:
            await github_client.aclose()

    if not response.is_ok or not response.data:
        logger.error(
            "Snapshot build failed",
            extra=sanitize_log_extra(username=login, state=response.state.value, error=response.error),
        )
        return None

    contribution_map = flatten_calendar(response.data)
    total = response.data.get("totalContributions")
    artifact = {
        "success": True,
        "username": login,
        "totalContributions": total if isinstance(total, int) else sum(contribution_map.values()),
        "contributionMap": contribution_map,
        "dateRange": {
            "from": start.date().isoformat(),
            "to": end.date().isoformat(),
        },
        "fetchedAt": end.isoformat(),
    }
    logger.info(
        "Snapshot built",
        extra={"username": login, "days": len(contribution_map), "total_contributions": artifact["totalContributions"]},
    )
    return artifact


def write_snapshot(path: str | Path, artifact: dict[str, Any]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(artifact, indent=2), encoding="utf-8")
    return target


async def run_snapshot_build(
    *,
    username: Optional[str] = None,
    output_path: Optional[str | Path] = None,
    client_factory: Callable[[], GitHubActivityClient] = GitHubActivityClient,
) -> dict[str, Any]:
    """Build and write the artifact; a skipped build is reported, not raised."""

    destination = output_path or settings.SNAPSHOT_PATH
    async with client_factory() as client:
        artifact = await build_snapshot(username, client=client)

    if artifact is None:
        return {"success": False, "written": None}
    if not destination:
        return {"success": False, "written": None, "error": "No SNAPSHOT_PATH configured"}

    written = write_snapshot(destination, artifact)
    logger.info("Snapshot written", extra={"path": str(written)})
    return {
        "success": True,
        "written": str(written),
        "days": len(artifact["contributionMap"]),
        "totalContributions": artifact["totalContributions"],
    }
