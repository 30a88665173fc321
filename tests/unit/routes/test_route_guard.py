"""
Unit tests for RouteGuard and Router.
"""

from unittest.mock import AsyncMock

import pytest

from application.routes import (
    GuardState,
    RouteGuard,
    Router,
    expire_session,
    handle_unauthorized,
    resolve,
)
from application.services.notifier import DESTRUCTIVE, Notifier
from common.exception.exceptions import TransportError, UnauthorizedError
from tests.fixtures.portal_fixtures import create_sessions, envelope


class TestRouteGuard:
    """checking -> authorized | unauthorized."""

    @pytest.mark.asyncio
    async def test_no_token_is_unauthorized_without_network_call(self):
        sessions = create_sessions()
        verify = AsyncMock()
        guard = RouteGuard(sessions.customer, verify)
        assert guard.state == GuardState.CHECKING

        state = await guard.check()

        assert state == GuardState.UNAUTHORIZED
        assert guard.redirect_to == "/login"
        verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_verify_clears_token(self):
        sessions = create_sessions(customer_token="expired")
        sessions.customer.update_user({"id": 1})
        notifier = Notifier()
        verify = AsyncMock(side_effect=UnauthorizedError())
        guard = RouteGuard(sessions.customer, verify, notifier)

        state = await guard.check()

        assert state == GuardState.UNAUTHORIZED
        assert sessions.customer.token is None
        assert sessions.customer.user is None
        verify.assert_called_once()
        assert notifier.last.title == "Session expired"
        assert notifier.last.description == "Please log in again"
        assert notifier.last.variant == DESTRUCTIVE

    @pytest.mark.asyncio
    async def test_network_failure_during_verify_is_unauthorized(self):
        sessions = create_sessions(admin_token="token")
        guard = RouteGuard(sessions.admin, AsyncMock(side_effect=TransportError("down")))

        assert await guard.check() == GuardState.UNAUTHORIZED
        assert guard.redirect_to == "/admin/login"
        assert sessions.admin.token is None

    @pytest.mark.asyncio
    async def test_successful_verify_makes_exactly_one_call(self):
        sessions = create_sessions(admin_token="token")
        verify = AsyncMock(return_value=envelope({"valid": True}))
        guard = RouteGuard(sessions.admin, verify)

        state = await guard.check()

        assert state == GuardState.AUTHORIZED
        assert guard.redirect_to is None
        assert sessions.admin.token == "token"
        verify.assert_called_once()

    @pytest.mark.asyncio
    async def test_each_check_reverifies(self):
        sessions = create_sessions(customer_token="token")
        verify = AsyncMock(return_value=envelope({}))
        guard = RouteGuard(sessions.customer, verify)

        await guard.check()
        await guard.check()

        assert verify.call_count == 2

    @pytest.mark.asyncio
    async def test_admin_failure_leaves_customer_session(self):
        sessions = create_sessions(customer_token="cust", admin_token="admin")
        guard = RouteGuard(sessions.admin, AsyncMock(side_effect=UnauthorizedError()))

        await guard.check()

        assert sessions.admin.token is None
        assert sessions.customer.token == "cust"


class TestRouter:
    """Route table resolution and guarded navigation."""

    @pytest.mark.parametrize(
        "path,name",
        [
            ("/", "my-suite"),
            ("/shipments", "shipments"),
            ("/settings/", "settings"),
            ("/archive?tab=returned", "archive"),
            ("/login", "login"),
            ("/admin", "admin-clients"),
            ("/admin/customs-requests", "admin-customs-requests"),
            ("/admin/login", "admin-login"),
            ("/nope", "not-found"),
            ("/admin/nope", "not-found"),
        ],
    )
    def test_resolve(self, path, name):
        assert resolve(path).name == name

    @staticmethod
    def make_router(customer_token=None, admin_token=None):
        sessions = create_sessions(customer_token=customer_token, admin_token=admin_token)
        customer_verify = AsyncMock(return_value=envelope({}))
        admin_verify = AsyncMock(return_value=envelope({}))
        router = Router(
            RouteGuard(sessions.customer, customer_verify),
            RouteGuard(sessions.admin, admin_verify),
        )
        return router, customer_verify, admin_verify

    @pytest.mark.asyncio
    async def test_public_route_needs_no_verify(self):
        router, customer_verify, admin_verify = self.make_router()

        decision = await router.navigate("/admin/login")

        assert decision.allowed
        customer_verify.assert_not_called()
        admin_verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_customer_route_without_token_redirects_to_login(self):
        router, customer_verify, _ = self.make_router(admin_token="admin")

        decision = await router.navigate("/dashboard")

        assert decision.redirect_to == "/login"
        assert not decision.allowed
        customer_verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_route_uses_admin_guard(self):
        router, customer_verify, admin_verify = self.make_router(customer_token="cust")

        decision = await router.navigate("/admin/discounts")

        assert decision.redirect_to == "/admin/login"
        admin_verify.assert_not_called()
        customer_verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_authorized_navigation(self):
        router, _, admin_verify = self.make_router(admin_token="admin")

        decision = await router.navigate("/admin/settings")

        assert decision.allowed
        assert decision.route.name == "admin-settings"
        admin_verify.assert_called_once()


class TestHandleUnauthorized:
    """A 401 from any call expires the session that sent the token."""

    def test_clears_the_rejected_session_only(self):
        sessions = create_sessions(customer_token="cust", admin_token="admin")
        notifier = Notifier()

        redirect = handle_unauthorized(UnauthorizedError(session=sessions.admin), notifier)

        assert redirect == "/admin/login"
        assert sessions.admin.token is None
        assert sessions.customer.token == "cust"
        assert notifier.last.title == "Session expired"
        assert notifier.last.variant == DESTRUCTIVE

    def test_error_without_session_only_notifies(self):
        notifier = Notifier()

        assert handle_unauthorized(UnauthorizedError(), notifier) is None
        assert notifier.last.title == "Session expired"

    def test_expire_session_returns_login_route(self):
        sessions = create_sessions(customer_token="cust")

        assert expire_session(sessions.customer) == "/login"
        assert sessions.customer.token is None
