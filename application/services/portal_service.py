"""
Main Portal Service - unified facade for one client session.

This service wires together:
- Session contexts (customer and admin) over one durable token store
- The HTTP client and every endpoint operation group
- The shared query cache and notifier
- Route guards and the route table
- Chat channels and the country scope
"""

import logging
from typing import Optional

from application.routes.guard import RouteGuard
from application.routes.route_table import Router
from application.services.api.account import AccountOperations
from application.services.api.admin import AdminOperations
from application.services.api.auth import AuthOperations
from application.services.api.chat import ChatOperations
from application.services.api.client import PortalApiClient
from application.services.api.packages import PackageOperations
from application.services.api.requests import BuyForMeOperations, NotificationOperations
from application.services.chat.admin_channel import AdminChatChannel
from application.services.chat.customer_channel import CustomerChatChannel
from application.services.country_scope import DEFAULT_COUNTRY, CountryScope
from application.services.notifier import Notifier
from application.services.query import QueryClient
from application.services.query.keys import ADMIN_KEYS, CUSTOMER_KEYS
from common.auth.session import FileTokenStorage, PortalSessions, TokenStorage

logger = logging.getLogger(__name__)


class PortalService:
    """
    Unified portal client.

    All collaborators share one query cache so that a mutation issued from
    any view invalidates the read models every other view is subscribed to.
    """

    def __init__(
        self,
        storage: Optional[TokenStorage] = None,
        base_url: Optional[str] = None,
        query_client: Optional[QueryClient] = None,
        notifier: Optional[Notifier] = None,
    ):
        """Initialize the portal service.

        Args:
            storage: Durable token store (defaults to the JSON file from config)
            base_url: API root (defaults to API_BASE_URL)
            query_client: Shared query cache (a new one by default)
            notifier: Toast sink (a new one by default)
        """
        self.storage = storage or FileTokenStorage()
        self.sessions = PortalSessions.from_storage(self.storage)
        self.api_client = PortalApiClient(self.sessions, base_url=base_url)
        self.query_client = query_client or QueryClient()
        self.notifier = notifier or Notifier()

        self.auth = AuthOperations(client=self.api_client)
        self.account = AccountOperations(client=self.api_client)
        self.packages = PackageOperations(client=self.api_client)
        self.buy_for_me = BuyForMeOperations(client=self.api_client)
        self.notifications = NotificationOperations(client=self.api_client)
        self.chat = ChatOperations(client=self.api_client)
        self.admin = AdminOperations(client=self.api_client)

        self.customer_guard = RouteGuard(self.sessions.customer, self.auth.verify, self.notifier)
        self.admin_guard = RouteGuard(self.sessions.admin, self.auth.admin_verify, self.notifier)
        self.router = Router(self.customer_guard, self.admin_guard)

    def admin_chat(self, **intervals) -> AdminChatChannel:
        return AdminChatChannel(self.query_client, self.chat, self.notifier, **intervals)

    def customer_chat(self, **intervals) -> CustomerChatChannel:
        return CustomerChatChannel(self.query_client, self.chat, self.notifier, **intervals)

    def country_scope(self, country: str = DEFAULT_COUNTRY) -> CountryScope:
        return CountryScope(self.query_client, self.packages, country)

    async def logout(self) -> None:
        """Log the customer out and drop the customer read models.

        Admin read models and the subscriptions held on either side are
        left alone.
        """
        try:
            await self.auth.logout()
        finally:
            self._drop_queries(CUSTOMER_KEYS)

    async def admin_logout(self) -> None:
        try:
            await self.auth.admin_logout()
        finally:
            self._drop_queries(ADMIN_KEYS)

    def _drop_queries(self, names) -> None:
        removed = sum(self.query_client.remove_queries(name) for name in names)
        logger.info(f"Dropped {removed} cached queries")

    def close(self) -> None:
        self.query_client.close()
        logger.info("Portal service closed")
