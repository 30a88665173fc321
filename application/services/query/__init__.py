"""Query cache and mutations for portal read models."""

from application.services.query.client import QueryClient
from application.services.query.keys import QueryKey, key_matches, make_key
from application.services.query.models import QueryOptions, QueryState, QueryStatus
from application.services.query.mutation import Mutation
from application.services.query.subscription import QuerySubscription

__all__ = [
    "Mutation",
    "QueryClient",
    "QueryKey",
    "QueryOptions",
    "QueryState",
    "QueryStatus",
    "QuerySubscription",
    "key_matches",
    "make_key",
]
