"""Transport-level clients for the snapshot artifact and the GitHub API."""

from activity_stats.clients.contracts import FetchResult, FetchState
from activity_stats.clients.github import GitHubActivityClient

__all__ = [
    "FetchResult",
    "FetchState",
    "GitHubActivityClient",
]
