"""Data models for the query cache."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Set

from application.services.query.keys import QueryKey

Fetcher = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    """Lifecycle of a cached read model."""

    IDLE = "idle"  # no data and nothing requested yet (e.g. disabled)
    LOADING = "loading"  # first fetch in flight
    SUCCESS = "success"
    ERROR = "error"  # last fetch failed; data keeps the last good value


@dataclass
class QueryOptions:
    """Per-subscription options.

    Attributes:
        stale_time: Seconds after which cached data is refetched on subscribe
            (None uses the client default)
        refetch_interval: Background polling period in seconds (None disables)
        enabled: Disabled subscriptions neither fetch nor poll
    """

    stale_time: Optional[float] = None
    refetch_interval: Optional[float] = None
    enabled: bool = True


@dataclass(frozen=True)
class QueryState:
    """Snapshot of a query entry as seen by a subscriber."""

    key: QueryKey
    data: Any = None
    status: QueryStatus = QueryStatus.IDLE
    error: Optional[BaseException] = None
    updated_at: Optional[float] = None
    is_fetching: bool = False
    is_invalidated: bool = False

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    @property
    def is_loading(self) -> bool:
        return self.status == QueryStatus.LOADING


@dataclass
class QueryEntry:
    """Cached read model for one key."""

    key: QueryKey
    fetcher: Fetcher
    data: Any = None
    updated_at: Optional[float] = None
    status: QueryStatus = QueryStatus.IDLE
    error: Optional[BaseException] = None
    invalidated: bool = False
    # Latest issued request generation; results tagged with an older one are dropped
    generation: int = 0
    refetch_pending: bool = False
    fetch_count: int = 0
    in_flight: Optional[asyncio.Task] = None
    poller: Optional[asyncio.Task] = None
    poll_interval: Optional[float] = None
    gc_handle: Optional[asyncio.TimerHandle] = None
    waiters: int = 0
    subscribers: Set[Any] = field(default_factory=set)

    @property
    def is_fetching(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    def active_subscribers(self) -> list:
        return [s for s in self.subscribers if s.enabled]

    def snapshot(self) -> QueryState:
        return QueryState(
            key=self.key,
            data=self.data,
            status=self.status,
            error=self.error,
            updated_at=self.updated_at,
            is_fetching=self.is_fetching,
            is_invalidated=self.invalidated,
        )
