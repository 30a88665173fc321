"""
Authentication operations.

These are the only API operations that write to the session storage:
logins persist the issued token, logouts clear it.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from application.models.request_models import LoginCredentials, RegistrationForm
from application.models.response_models import AuthPayload
from application.services.api.client import PortalApiClient

logger = logging.getLogger(__name__)


class AuthOperations:
    """Handles customer and admin authentication."""

    def __init__(self, client: PortalApiClient):
        """Initialize auth operations.

        Args:
            client: Portal API client
        """
        self.client = client

    @property
    def sessions(self):
        return self.client.sessions

    async def login(self, credentials: LoginCredentials) -> Dict[str, Any]:
        """Log a customer in and persist the issued token.

        Any previous customer token is dropped before the attempt.
        """
        self.sessions.customer.clear()
        response = await self.client.post(
            "/auth/login", json=credentials.model_dump(), skip_auth=True
        )
        self._start_session(self.sessions.customer, response)
        return response

    async def register(self, form: RegistrationForm) -> Dict[str, Any]:
        """Register a customer account and log it in."""
        self.sessions.customer.clear()
        response = await self.client.post(
            "/auth/register", json=form.model_dump(), skip_auth=True
        )
        self._start_session(self.sessions.customer, response)
        return response

    async def logout(self) -> Dict[str, Any]:
        """Log the customer out; the local session is cleared even if the call fails."""
        try:
            return await self.client.post("/auth/logout")
        finally:
            self.sessions.customer.clear()

    async def verify(self) -> Dict[str, Any]:
        return await self.client.get("/auth/verify")

    async def admin_login(self, credentials: LoginCredentials) -> Dict[str, Any]:
        """Log an admin in and persist the issued token."""
        self.sessions.admin.clear()
        response = await self.client.post(
            "/admin/auth/login", json=credentials.model_dump(), skip_auth=True
        )
        self._start_session(self.sessions.admin, response)
        return response

    async def admin_verify(self) -> Dict[str, Any]:
        return await self.client.get("/admin/auth/verify")

    async def admin_logout(self) -> Dict[str, Any]:
        try:
            return await self.client.post("/admin/auth/logout")
        finally:
            self.sessions.admin.clear()

    @staticmethod
    def _start_session(session, response: Dict[str, Any]) -> None:
        try:
            payload = AuthPayload.model_validate(response.get("data") or {})
        except ValidationError:
            payload = None
        if payload is None or not payload.token:
            logger.warning(f"Login response for {session.name} session carried no token")
            return
        session.start(payload.token, payload.user)
