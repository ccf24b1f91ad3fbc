"""Async GitHub client for public events and the contribution calendar."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from activity_stats.clients.contracts import FetchResult, FetchState
from activity_stats.config.settings import settings

logger = logging.getLogger(__name__)

_REDACTED_VALUE = "***REDACTED***"
_SENSITIVE_KEYS = ("authorization", "token")
_TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,;]+"),
    re.compile(r"(?i)(token\s*[=:]\s*)[^\s,;&]+"),
    re.compile(r"(gh[pousr]_)[A-Za-z0-9]+"),
)

CONTRIBUTION_CALENDAR_QUERY = """
query($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


def sanitize_for_log(value: Any) -> Any:
    """Redact credentials from error strings and request params before logging."""

    if isinstance(value, dict):
        return {
            str(key): _REDACTED_VALUE if any(word in str(key).lower() for word in _SENSITIVE_KEYS) else sanitize_for_log(item)
            for key, item in value.items()
        }
    if isinstance(value, str):
        for pattern in _TOKEN_PATTERNS:
            value = pattern.sub(rf"\1{_REDACTED_VALUE}", value)
    return value


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Helper for `extra=` payloads in structured logging."""

    return {key: sanitize_for_log(value) for key, value in kwargs.items()}


class GitHubActivityClient:
    """Typed GitHub API client; rate limits and transport errors become `FetchResult`s."""

    API_VERSION = "2022-11-28"
    ACCEPT_JSON = "application/vnd.github+json"

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_base_seconds: Optional[float] = None,
        backoff_max_seconds: Optional[float] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token or settings.GITHUB_TOKEN
        self._timeout_seconds = timeout_seconds or settings.GITHUB_TIMEOUT_SECONDS
        self._max_attempts = max(1, max_attempts or settings.GITHUB_MAX_ATTEMPTS)
        self._backoff_base_seconds = backoff_base_seconds or settings.GITHUB_BACKOFF_BASE_SECONDS
        self._backoff_max_seconds = backoff_max_seconds or settings.GITHUB_BACKOFF_MAX_SECONDS
        self._base_url = base_url or settings.GITHUB_API_BASE_URL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> "GitHubActivityClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def list_public_events(
        self,
        username: str,
        *,
        page: int = 1,
        per_page: int = 100,
    ) -> FetchResult[list[dict[str, Any]]]:
        """Fetch one page of `/users/{username}/events/public`."""

        response = await self._request(
            "GET",
            f"/users/{username}/events/public",
            params={"per_page": per_page, "page": page},
        )
        if response.state != FetchState.OK:
            return response

        payload = response.data if isinstance(response.data, list) else []
        events = [event for event in payload if isinstance(event, dict)]
        if not events:
            return FetchResult(state=FetchState.EMPTY, data=[], status_code=response.status_code)
        return FetchResult(state=FetchState.OK, data=events, status_code=response.status_code)

    async def fetch_contribution_calendar(
        self,
        username: str,
        *,
        start: datetime,
        end: datetime,
    ) -> FetchResult[dict[str, Any]]:
        """Query the GraphQL contribution calendar for ``[start, end]``.

        Requires a token; the data is `user.contributionsCollection.contributionCalendar`.
        """

        if not self._token:
            return FetchResult(state=FetchState.FAILED, error="GraphQL API requires a token")

        response = await self._request(
            "POST",
            "/graphql",
            json={
                "query": CONTRIBUTION_CALENDAR_QUERY,
                "variables": {
                    "username": username,
                    "from": start.isoformat(),
                    "to": end.isoformat(),
                },
            },
        )
        if response.state != FetchState.OK:
            return response

        payload = response.data if isinstance(response.data, dict) else {}
        if payload.get("errors"):
            return FetchResult(
                state=FetchState.FAILED,
                status_code=response.status_code,
                error=f"GraphQL errors: {payload['errors']}",
            )

        user = (payload.get("data") or {}).get("user")
        if not isinstance(user, dict):
            return FetchResult(
                state=FetchState.FAILED,
                status_code=response.status_code,
                error="Invalid GraphQL response: missing user data",
            )

        calendar = (user.get("contributionsCollection") or {}).get("contributionCalendar")
        if not isinstance(calendar, dict):
            return FetchResult(state=FetchState.EMPTY, data={}, status_code=response.status_code)
        return FetchResult(state=FetchState.OK, data=calendar, status_code=response.status_code)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> FetchResult[Any]:
        client = await self._ensure_client()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential(multiplier=self._backoff_base_seconds, max=self._backoff_max_seconds),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(method, path, params=params, json=json)

                    if response.status_code in (403, 429):
                        logger.warning(
                            "GitHub API rate limit encountered",
                            extra=sanitize_log_extra(
                                path=path,
                                params=params,
                                status_code=response.status_code,
                                remaining=response.headers.get("x-ratelimit-remaining"),
                            ),
                        )
                        return FetchResult(
                            state=FetchState.RATE_LIMITED,
                            status_code=response.status_code,
                            error=f"GitHub rate limit encountered ({response.status_code})",
                        )

                    response.raise_for_status()
                    return FetchResult(
                        state=FetchState.OK,
                        data=response.json(),
                        status_code=response.status_code,
                    )
        except httpx.HTTPError as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(path=path, params=params, error=str(exc), status_code=status_code),
            )
            return FetchResult(state=FetchState.FAILED, status_code=status_code, error=str(exc))
        except ValueError as exc:
            logger.warning(
                "GitHub response was not valid JSON",
                extra=sanitize_log_extra(path=path, params=params, error=str(exc)),
            )
            return FetchResult(state=FetchState.FAILED, error=f"Invalid JSON: {exc}")

        return FetchResult(state=FetchState.FAILED, error="Unknown GitHub request failure")

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        headers = {
            "Accept": self.ACCEPT_JSON,
            "User-Agent": settings.USER_AGENT,
            "X-GitHub-Api-Version": self.API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client
