"""
Chat operations for both sides of the support chat.
"""

from typing import Any, Dict, Optional

from application.services.api.client import PortalApiClient
from common.config.config import CHAT_SUPPORT_ADMIN_ID


class ChatOperations:
    """Handles chat messages for customers and admins."""

    def __init__(self, client: PortalApiClient, support_admin_id: int = CHAT_SUPPORT_ADMIN_ID):
        """Initialize chat operations.

        Args:
            client: Portal API client
            support_admin_id: Admin account that receives customer messages
        """
        self.client = client
        self.support_admin_id = support_admin_id

    async def get_user_messages(self) -> Dict[str, Any]:
        return await self.client.get("/chat/messages")

    async def send_user_message(self, message: str) -> Dict[str, Any]:
        return await self.client.post(
            "/chat/messages",
            json={"message": message, "admin_id": self.support_admin_id},
        )

    async def get_admin_users(self) -> Dict[str, Any]:
        return await self.client.get("/admin/chat/users")

    async def get_admin_messages(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        return await self.client.get("/admin/chat/messages", params={"user_id": user_id})

    async def send_admin_message(self, message: str, user_id: int) -> Dict[str, Any]:
        return await self.client.post(
            "/admin/chat/messages", json={"message": message, "user_id": user_id}
        )
