from __future__ import annotations

import json
from datetime import UTC, date, datetime
from typing import Any

import pytest

from activity_stats.clients.contracts import FetchResult, FetchState
from activity_stats.jobs.snapshot_build import build_snapshot, flatten_calendar, run_snapshot_build
from activity_stats.services.snapshot_loader import SnapshotLoader

NOW = datetime(2026, 3, 15, 6, 0, tzinfo=UTC)

CALENDAR = {
    "totalContributions": 5,
    "weeks": [
        {"contributionDays": [{"date": "2026-03-08", "contributionCount": 0}, {"date": "2026-03-09", "contributionCount": 2}]},
        {"contributionDays": [{"date": "2026-03-15", "contributionCount": 3}, {"date": None, "contributionCount": 1}]},
    ],
}


class FakeCalendarClient:
    def __init__(self, result: FetchResult[dict[str, Any]], *, has_token: bool = True) -> None:
        self.result = result
        self.has_token = has_token
        self.calls: list[tuple[str, datetime, datetime]] = []

    async def __aenter__(self) -> "FakeCalendarClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        return None

    async def fetch_contribution_calendar(self, username: str, *, start: datetime, end: datetime):
        self.calls.append((username, start, end))
        return self.result


def test_flatten_calendar_skips_malformed_days() -> None:
    assert flatten_calendar(CALENDAR) == {"2026-03-08": 0, "2026-03-09": 2, "2026-03-15": 3}
    assert flatten_calendar({}) == {}


@pytest.mark.asyncio
async def test_build_snapshot_returns_artifact_shape() -> None:
    client = FakeCalendarClient(FetchResult(state=FetchState.OK, data=CALENDAR))

    artifact = await build_snapshot("octocat", client=client, now=NOW)

    assert artifact["success"] is True
    assert artifact["username"] == "octocat"
    assert artifact["totalContributions"] == 5
    assert artifact["dateRange"] == {"from": "2025-03-15", "to": "2026-03-15"}
    assert artifact["contributionMap"]["2026-03-15"] == 3
    assert client.calls[0][0] == "octocat"


@pytest.mark.asyncio
async def test_build_snapshot_skips_without_token_or_on_failure() -> None:
    no_token = FakeCalendarClient(FetchResult(state=FetchState.OK, data=CALENDAR), has_token=False)
    failing = FakeCalendarClient(FetchResult(state=FetchState.FAILED, error="bad credentials", status_code=401))

    assert await build_snapshot("octocat", client=no_token, now=NOW) is None
    assert no_token.calls == []
    assert await build_snapshot("octocat", client=failing, now=NOW) is None


@pytest.mark.asyncio
async def test_written_artifact_round_trips_through_loader(tmp_path) -> None:
    output = tmp_path / "data" / "github-contributions.json"
    client = FakeCalendarClient(FetchResult(state=FetchState.OK, data=CALENDAR))

    summary = await run_snapshot_build(username="octocat", output_path=output, client_factory=lambda: client)

    assert summary["success"] is True
    assert json.loads(output.read_text(encoding="utf-8"))["success"] is True
    snapshot = await SnapshotLoader(url="", path=output).load_snapshot()
    assert snapshot is not None
    assert snapshot.contribution_map[date(2026, 3, 9)] == 2
    assert snapshot.username == "octocat"
