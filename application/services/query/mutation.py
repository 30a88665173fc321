"""Writes that invalidate the read models they affect."""

import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from application.services.query.client import QueryClient
from application.services.query.keys import QueryKey, make_key

logger = logging.getLogger(__name__)


class Mutation:
    """Wraps a write call and invalidates declared keys once it succeeds.

    Failures invalidate nothing and are raised to the caller; there is no
    retry.

    Example:
        add_package = Mutation(
            query_client,
            lambda client_id, form: admin.create_package(client_id, form),
            invalidates=[ADMIN_CLIENTS, ADMIN_STATS],
        )
        await add_package.mutate(7, form)
    """

    def __init__(
        self,
        query_client: QueryClient,
        fn: Callable[..., Awaitable[Any]],
        invalidates: Iterable[Any] = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.query_client = query_client
        self.fn = fn
        self.invalidates: List[QueryKey] = [make_key(k) for k in invalidates]
        self.on_success = on_success
        self.on_error = on_error
        self.is_pending = False
        self.data: Any = None
        self.error: Optional[Exception] = None

    async def mutate(self, *args: Any, **kwargs: Any) -> Any:
        self.is_pending = True
        self.error = None
        try:
            result = await self.fn(*args, **kwargs)
        except Exception as e:
            self.error = e
            logger.info(f"Mutation failed, nothing invalidated: {e}")
            if self.on_error:
                self.on_error(e)
            raise
        finally:
            self.is_pending = False

        self.data = result
        if self.invalidates:
            self.query_client.invalidate_many(self.invalidates)
        if self.on_success:
            self.on_success(result)
        return result

    def reset(self) -> None:
        self.is_pending = False
        self.data = None
        self.error = None
