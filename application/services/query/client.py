"""
Keyed query cache with background refetching.

Each key owns one ``QueryEntry``. Subscribers share the entry's cached
value and its single in-flight fetch. A fetch is started when a subscriber
arrives and the entry has no data, is invalidated, or is older than the
staleness window. Entries with a polling subscriber run one interval task
that stops as soon as no enabled subscriber is left. Unused entries are
dropped after ``gc_time`` seconds.

Every fetch is tagged with the entry's generation at issue time. A result
whose tag is no longer the latest (because the entry was invalidated or
written while the fetch was running) is discarded on arrival.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from application.services.query.keys import QueryKey, key_matches, make_key
from application.services.query.models import (
    Fetcher,
    QueryEntry,
    QueryOptions,
    QueryState,
    QueryStatus,
)
from application.services.query.subscription import QuerySubscription
from common.config.config import QUERY_GC_TIME_SECONDS, QUERY_STALE_TIME_SECONDS

logger = logging.getLogger(__name__)


class QueryClient:
    """Read-model cache shared by every view of one client session."""

    def __init__(
        self,
        stale_time: float = QUERY_STALE_TIME_SECONDS,
        gc_time: float = QUERY_GC_TIME_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the query client.

        Args:
            stale_time: Default staleness window in seconds
            gc_time: Seconds an unused entry is kept before removal
            clock: Monotonic time source
        """
        self.default_stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: Dict[QueryKey, QueryEntry] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        key: Any,
        fetcher: Fetcher,
        options: Optional[QueryOptions] = None,
    ) -> QuerySubscription:
        """Subscribe to a read model.

        Args:
            key: Query key (tuple) or a single resource name
            fetcher: Coroutine function returning the fresh value
            options: Staleness, polling and enabled flags

        Returns:
            Live subscription; call ``unsubscribe()`` when done
        """
        if self._closed:
            raise RuntimeError("QueryClient is closed")
        subscription = QuerySubscription(self, _as_key(key), fetcher, options or QueryOptions())
        self._attach(subscription)
        return subscription

    def _attach(self, subscription: QuerySubscription) -> None:
        entry = self._get_or_create(subscription.key, subscription.fetcher)
        entry.subscribers.add(subscription)
        self._cancel_gc(entry)
        if subscription.enabled:
            entry.fetcher = subscription.fetcher
            if self._needs_fetch(entry, subscription.options.stale_time):
                self._start_fetch(entry)
        self._sync_poller(entry)

    def _detach(self, subscription: QuerySubscription) -> None:
        entry = self._entries.get(subscription.key)
        if entry is None:
            return
        entry.subscribers.discard(subscription)
        self._sync_poller(entry)
        if not entry.subscribers:
            if entry.waiters == 0 and entry.is_fetching:
                # Nobody is left to see this result
                logger.debug(f"Cancelling in-flight fetch for {entry.key}, no subscribers left")
                entry.in_flight.cancel()
                entry.in_flight = None
                entry.refetch_pending = False
                if not entry.has_data:
                    entry.status = QueryStatus.IDLE
            self._schedule_gc(entry)

    def _on_enabled_changed(self, subscription: QuerySubscription) -> None:
        entry = self._entries.get(subscription.key)
        if entry is None:
            # The entry was removed while this subscription was held
            self._attach(subscription)
            return
        if subscription.enabled:
            entry.fetcher = subscription.fetcher
            if self._needs_fetch(entry, subscription.options.stale_time):
                self._start_fetch(entry)
        self._sync_poller(entry)

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    def get_state(self, key: Any) -> QueryState:
        key = _as_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return QueryState(key=key)
        return entry.snapshot()

    def get_query_data(self, key: Any) -> Any:
        entry = self._entries.get(_as_key(key))
        return entry.data if entry else None

    def set_query_data(self, key: Any, data: Any, fetcher: Optional[Fetcher] = None) -> None:
        """Write a value directly; a fetch already in flight for the key is superseded."""
        key = _as_key(key)
        entry = self._entries.get(key)
        if entry is None:
            if fetcher is None:
                raise ValueError(f"Unknown query {key}; a fetcher is required to create it")
            entry = self._get_or_create(key, fetcher)
            self._schedule_gc(entry)
        entry.generation += 1
        entry.data = data
        entry.updated_at = self._clock()
        entry.status = QueryStatus.SUCCESS
        entry.error = None
        entry.invalidated = False
        self._notify(entry)

    async def fetch_query(
        self,
        key: Any,
        fetcher: Fetcher,
        stale_time: Optional[float] = None,
    ) -> Any:
        """Read a value through the cache without subscribing.

        Returns cached data when it is fresh; otherwise joins (or starts) the
        key's fetch and waits for it. Fetch errors are raised to the caller.
        """
        key = _as_key(key)
        entry = self._get_or_create(key, fetcher)
        if not self._needs_fetch(entry, stale_time):
            return entry.data

        try:
            return await self._await_latest(entry)
        finally:
            if not entry.subscribers:
                self._schedule_gc(entry)

    async def refetch(self, key: Any) -> Any:
        """Fetch a known key now, joining a fetch that is already running."""
        key = _as_key(key)
        entry = self._entries.get(key)
        if entry is None:
            raise KeyError(key)
        return await self._await_latest(entry)

    def invalidate(self, prefix: Any) -> List[QueryKey]:
        """Mark every entry whose key starts with ``prefix`` as stale.

        Entries with an enabled subscriber are refetched right away. A fetch
        already running for a subscriber or a ``fetch_query`` caller is
        superseded and followed by exactly one new fetch.

        Returns:
            Keys that were invalidated
        """
        prefix = _as_key(prefix)
        matched = []
        for entry in list(self._entries.values()):
            if not key_matches(entry.key, prefix):
                continue
            matched.append(entry.key)
            entry.invalidated = True
            active = bool(entry.active_subscribers())
            if entry.is_fetching and (active or entry.waiters):
                entry.generation += 1
                entry.refetch_pending = True
            elif active:
                self._start_fetch(entry)
            else:
                continue
            self._notify(entry)
        logger.debug(f"Invalidated {len(matched)} queries for prefix {prefix}")
        return matched

    def invalidate_many(self, prefixes: Iterable[Any]) -> List[QueryKey]:
        """Invalidate several prefixes in one pass."""
        matched: List[QueryKey] = []
        for prefix in prefixes:
            for key in self.invalidate(prefix):
                if key not in matched:
                    matched.append(key)
        return matched

    def remove_queries(self, prefix: Any) -> int:
        """Drop matching entries, stopping their timers and fetches.

        Subscriptions still held on a dropped entry stay open; they attach to
        a fresh entry the next time they are enabled or re-keyed.
        """
        prefix = _as_key(prefix)
        removed = 0
        for key in [k for k in self._entries if key_matches(k, prefix)]:
            self._dispose(self._entries.pop(key))
            removed += 1
        return removed

    def clear(self) -> None:
        """Drop every entry; held subscriptions stay open as with ``remove_queries``."""
        for entry in self._entries.values():
            self._dispose(entry)
        self._entries.clear()

    def close(self) -> None:
        """Stop every timer and fetch; the client cannot be used afterwards."""
        for entry in self._entries.values():
            self._dispose(entry, close_subscribers=True)
        self._entries.clear()
        self._closed = True

    def keys(self) -> List[QueryKey]:
        return list(self._entries.keys())

    def fetch_count(self, key: Any) -> int:
        entry = self._entries.get(_as_key(key))
        return entry.fetch_count if entry else 0

    def is_polling(self, key: Any) -> bool:
        entry = self._entries.get(_as_key(key))
        return bool(entry and entry.poller and not entry.poller.done())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_or_create(self, key: QueryKey, fetcher: Fetcher) -> QueryEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = QueryEntry(key=key, fetcher=fetcher)
            self._entries[key] = entry
            logger.debug(f"Created query entry {key}")
        return entry

    def _needs_fetch(self, entry: QueryEntry, stale_time: Optional[float]) -> bool:
        if not entry.has_data or entry.invalidated:
            return True
        window = self.default_stale_time if stale_time is None else stale_time
        age = self._clock() - entry.updated_at
        if age >= window:
            return True
        logger.debug(f"Cache hit for {entry.key} (age: {age:.1f}s)")
        return False

    async def _await_latest(self, entry: QueryEntry) -> Any:
        """Wait for the entry's newest fetch, following any that supersede it.

        A fetch overtaken by ``invalidate()`` while awaited is not the answer;
        the wait moves on to the fetch that replaces it. A value written by
        ``set_query_data()`` meanwhile is returned as is. Errors are raised
        only from the newest fetch.
        """
        entry.waiters += 1
        try:
            while True:
                task = self._start_fetch(entry)
                generation = entry.generation
                try:
                    await asyncio.shield(task)
                except Exception:
                    if entry.generation == generation and not (
                        entry.is_fetching or entry.refetch_pending
                    ):
                        raise
                if not (entry.is_fetching or entry.refetch_pending or entry.invalidated):
                    return entry.data
        finally:
            entry.waiters -= 1

    def _start_fetch(self, entry: QueryEntry) -> asyncio.Task:
        if entry.is_fetching:
            return entry.in_flight

        entry.generation += 1
        entry.refetch_pending = False
        entry.fetch_count += 1
        if not entry.has_data:
            entry.status = QueryStatus.LOADING
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(entry, entry.generation)
        )
        task.add_done_callback(_consume_task_exception)
        entry.in_flight = task
        self._notify(entry)
        return task

    async def _run_fetch(self, entry: QueryEntry, generation: int) -> None:
        try:
            data = await entry.fetcher()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if generation == entry.generation:
                entry.error = e
                entry.status = QueryStatus.ERROR
                logger.warning(f"Fetch failed for {entry.key}, keeping last value: {e}")
            else:
                logger.debug(f"Ignoring superseded failure for {entry.key}")
            raise
        else:
            if generation != entry.generation:
                logger.debug(
                    f"Discarding superseded result for {entry.key} "
                    f"(generation {generation}, latest {entry.generation})"
                )
                return
            entry.data = data
            entry.updated_at = self._clock()
            entry.status = QueryStatus.SUCCESS
            entry.error = None
            entry.invalidated = False
        finally:
            if entry.in_flight is asyncio.current_task():
                entry.in_flight = None
            if self._entries.get(entry.key) is entry:
                self._notify(entry)
                if entry.refetch_pending and entry.active_subscribers():
                    self._start_fetch(entry)

    def _sync_poller(self, entry: QueryEntry) -> None:
        intervals = [
            s.options.refetch_interval
            for s in entry.active_subscribers()
            if s.options.refetch_interval
        ]
        interval = min(intervals) if intervals else None

        if interval == entry.poll_interval and (
            interval is None or (entry.poller and not entry.poller.done())
        ):
            return

        self._stop_poller(entry)
        if interval is None:
            return
        entry.poll_interval = interval
        entry.poller = asyncio.get_running_loop().create_task(self._poll(entry, interval))
        logger.debug(f"Polling {entry.key} every {interval}s")

    def _stop_poller(self, entry: QueryEntry) -> None:
        if entry.poller is not None:
            entry.poller.cancel()
            logger.debug(f"Stopped polling {entry.key}")
        entry.poller = None
        entry.poll_interval = None

    async def _poll(self, entry: QueryEntry, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            # A fetch still running absorbs this tick
            if not entry.is_fetching:
                self._start_fetch(entry)

    def _schedule_gc(self, entry: QueryEntry) -> None:
        self._cancel_gc(entry)
        loop = asyncio.get_running_loop()
        entry.gc_handle = loop.call_later(self.gc_time, self._collect, entry.key)

    def _cancel_gc(self, entry: QueryEntry) -> None:
        if entry.gc_handle is not None:
            entry.gc_handle.cancel()
            entry.gc_handle = None

    def _collect(self, key: QueryKey) -> None:
        entry = self._entries.get(key)
        if entry is None or entry.subscribers or entry.waiters:
            return
        logger.debug(f"Garbage-collecting unused query {key}")
        self._dispose(self._entries.pop(key))

    def _dispose(self, entry: QueryEntry, close_subscribers: bool = False) -> None:
        self._stop_poller(entry)
        self._cancel_gc(entry)
        if entry.in_flight is not None and not entry.in_flight.done():
            entry.in_flight.cancel()
        entry.in_flight = None
        if close_subscribers:
            for subscription in list(entry.subscribers):
                subscription._closed = True
        entry.subscribers.clear()

    def _notify(self, entry: QueryEntry) -> None:
        state = entry.snapshot()
        for subscription in list(entry.subscribers):
            subscription._emit(state)


def _as_key(key: Any) -> QueryKey:
    if isinstance(key, tuple):
        return key
    return make_key(key)


def _consume_task_exception(task: asyncio.Task) -> None:
    # Failures are recorded on the entry; retrieve them so asyncio does not warn
    if not task.cancelled():
        task.exception()
