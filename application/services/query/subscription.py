"""Live subscription handle returned by ``QueryClient.subscribe``."""

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from application.services.query.keys import QueryKey, make_key
from application.services.query.models import Fetcher, QueryOptions, QueryState

if TYPE_CHECKING:
    from application.services.query.client import QueryClient

logger = logging.getLogger(__name__)

StateListener = Callable[[QueryState], None]


class QuerySubscription:
    """One view's interest in a query key.

    The subscription can be disabled, re-enabled, or moved to another key
    (for example when the selected chat counterparty changes). Moving it
    detaches from the old key first, so the old key's polling stops before
    the new key is fetched.
    """

    def __init__(
        self,
        client: "QueryClient",
        key: QueryKey,
        fetcher: Fetcher,
        options: QueryOptions,
    ):
        self._client = client
        self.key = key
        self.fetcher = fetcher
        self.options = options
        self._listeners: List[StateListener] = []
        self._closed = False

    def __repr__(self) -> str:
        return f"QuerySubscription(key={self.key!r}, enabled={self.enabled})"

    def __enter__(self) -> "QuerySubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()

    @property
    def enabled(self) -> bool:
        return self.options.enabled and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> QueryState:
        return self._client.get_state(self.key)

    @property
    def data(self) -> Any:
        return self.state.data

    def set_enabled(self, enabled: bool) -> None:
        if self._closed or self.options.enabled == enabled:
            return
        self.options.enabled = enabled
        self._client._on_enabled_changed(self)

    def set_key(self, key: Any, fetcher: Optional[Fetcher] = None) -> None:
        """Point this subscription at a different key."""
        if self._closed:
            raise RuntimeError("Subscription is closed")
        new_key = make_key(key)
        if new_key == self.key and fetcher is None:
            return
        self._client._detach(self)
        logger.debug(f"Subscription moved from {self.key} to {new_key}")
        self.key = new_key
        if fetcher is not None:
            self.fetcher = fetcher
        self._client._attach(self)

    def on_change(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def refetch(self) -> Any:
        return await self._client.refetch(self.key)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._client._detach(self)
        self._closed = True
        self._listeners.clear()

    def _emit(self, state: QueryState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.exception(f"Query listener failed for {self.key}: {e}")
