"""
Client-side route table.

Public routes render without a session. Customer routes are guarded by the
customer session, admin routes (``/admin`` and below, except the admin
login) by the admin session. Anything else resolves to ``not-found``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from application.routes.guard import GuardState, RouteGuard

logger = logging.getLogger(__name__)

PUBLIC = "public"
CUSTOMER = "customer"
ADMIN = "admin"


@dataclass(frozen=True)
class Route:
    path: str
    name: str
    area: str


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of a navigation: the route to render or where to redirect."""

    path: str
    route: Route
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None


NOT_FOUND = Route(path="*", name="not-found", area=PUBLIC)

ROUTES: Dict[str, Route] = {
    route.path: route
    for route in (
        Route("/login", "login", PUBLIC),
        Route("/register", "register", PUBLIC),
        Route("/admin/login", "admin-login", PUBLIC),
        Route("/", "my-suite", CUSTOMER),
        Route("/dashboard", "dashboard", CUSTOMER),
        Route("/shipments", "shipments", CUSTOMER),
        Route("/archive", "archive", CUSTOMER),
        Route("/address", "address", CUSTOMER),
        Route("/delivery", "delivery", CUSTOMER),
        Route("/analytics", "analytics", CUSTOMER),
        Route("/settings", "settings", CUSTOMER),
        Route("/admin", "admin-clients", ADMIN),
        Route("/admin/shipments", "admin-shipments", ADMIN),
        Route("/admin/shipping-addresses", "admin-shipping-addresses", ADMIN),
        Route("/admin/discounts", "admin-discounts", ADMIN),
        Route("/admin/insured-packages", "admin-insured-packages", ADMIN),
        Route("/admin/customs-requests", "admin-customs-requests", ADMIN),
        Route("/admin/settings", "admin-settings", ADMIN),
    )
}


def resolve(path: str) -> Route:
    """Match a path (query string and trailing slash ignored) to a route."""
    clean = path.split("?", 1)[0].split("#", 1)[0]
    if len(clean) > 1:
        clean = clean.rstrip("/")
    return ROUTES.get(clean or "/", NOT_FOUND)


class Router:
    """Resolves paths and runs the guard of the route's area."""

    def __init__(self, customer_guard: RouteGuard, admin_guard: RouteGuard):
        self.guards = {CUSTOMER: customer_guard, ADMIN: admin_guard}

    async def navigate(self, path: str) -> RouteDecision:
        route = resolve(path)
        guard = self.guards.get(route.area)
        if guard is None:
            return RouteDecision(path=path, route=route)

        state = await guard.check()
        if state != GuardState.AUTHORIZED:
            logger.info(f"Navigation to {path} redirected to {guard.redirect_to}")
            return RouteDecision(path=path, route=route, redirect_to=guard.redirect_to)
        return RouteDecision(path=path, route=route)
