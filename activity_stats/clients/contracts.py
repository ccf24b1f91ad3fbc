"""Typed fetch contracts shared by every upstream source."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FetchState(str, Enum):
    """Outcome of a single upstream fetch."""

    OK = "ok"
    EMPTY = "empty"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Result of an upstream fetch; failures are values, not exceptions."""

    state: FetchState
    data: Optional[T] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.state == FetchState.OK

    @property
    def is_empty(self) -> bool:
        return self.state == FetchState.EMPTY

    @property
    def is_rate_limited(self) -> bool:
        return self.state == FetchState.RATE_LIMITED

    @property
    def is_failed(self) -> bool:
        return self.state in (FetchState.FAILED, FetchState.RATE_LIMITED)
