"""
Client routes package.

Contains the route guard, 401 handling and the client-side route table.
"""

from application.routes.guard import GuardState, RouteGuard, expire_session, handle_unauthorized
from application.routes.route_table import ROUTES, Route, RouteDecision, Router, resolve

__all__ = [
    "GuardState",
    "ROUTES",
    "Route",
    "RouteDecision",
    "RouteGuard",
    "Router",
    "expire_session",
    "handle_unauthorized",
    "resolve",
]
