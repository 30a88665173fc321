"""
Route guard for authenticated areas.

Each ``check()`` runs the full cycle ``checking -> authorized | unauthorized``:

- no stored token: unauthorized at once, no request is made
- token present, verify succeeds: authorized after exactly one call
- token present, verify fails: session cleared, "Session expired" notice,
  unauthorized

The verify result is not cached; every check re-verifies.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from application.services.notifier import DESTRUCTIVE, Notifier
from common.auth.session import SessionContext
from common.constants import SESSION_EXPIRED_DESCRIPTION, SESSION_EXPIRED_TITLE
from common.exception.exceptions import PortalError, UnauthorizedError

logger = logging.getLogger(__name__)

VerifyCall = Callable[[], Awaitable[Any]]


def expire_session(session: SessionContext, notifier: Optional[Notifier] = None) -> str:
    """Forget a rejected session and tell the user; returns its login route."""
    session.clear()
    if notifier:
        notifier.notify(SESSION_EXPIRED_TITLE, SESSION_EXPIRED_DESCRIPTION, DESTRUCTIVE)
    return session.login_route


def handle_unauthorized(
    error: UnauthorizedError, notifier: Optional[Notifier] = None
) -> Optional[str]:
    """Expire the session a 401 was issued for.

    Returns:
        Login route to redirect to, or None when the error carries no session
    """
    if error.session is None:
        logger.warning(f"Unauthorized response without a session: {error}")
        if notifier:
            notifier.notify(SESSION_EXPIRED_TITLE, SESSION_EXPIRED_DESCRIPTION, DESTRUCTIVE)
        return None
    logger.warning(f"{error.session.name} token rejected, clearing session")
    return expire_session(error.session, notifier)


class GuardState(str, Enum):
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


class RouteGuard:
    """Gates one session's routes on a verify call."""

    def __init__(
        self,
        session: SessionContext,
        verify: VerifyCall,
        notifier: Optional[Notifier] = None,
    ):
        """Initialize the guard.

        Args:
            session: Session whose token is checked and cleared
            verify: Coroutine function calling the session's verify endpoint
            notifier: Receives the "Session expired" notice
        """
        self.session = session
        self.verify = verify
        self.notifier = notifier
        self.state = GuardState.CHECKING

    @property
    def redirect_to(self) -> Optional[str]:
        if self.state == GuardState.UNAUTHORIZED:
            return self.session.login_route
        return None

    async def check(self) -> GuardState:
        self.state = GuardState.CHECKING

        if not self.session.is_authenticated:
            logger.info(f"No {self.session.name} token, redirecting to {self.session.login_route}")
            self.state = GuardState.UNAUTHORIZED
            return self.state

        try:
            await self.verify()
        except PortalError as e:
            logger.warning(f"{self.session.name} session verification failed: {e}")
            expire_session(self.session, self.notifier)
            self.state = GuardState.UNAUTHORIZED
            return self.state

        self.state = GuardState.AUTHORIZED
        return self.state
