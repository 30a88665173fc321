"""
Customer account operations: profile, address book, wallet, memberships, search.
"""

import logging
from typing import Any, Dict

from application.models.request_models import (
    AddressForm,
    PasswordChangeForm,
    UserProfileForm,
)
from application.services.api.client import PortalApiClient

logger = logging.getLogger(__name__)


class AccountOperations:
    """Handles the customer's own account data."""

    def __init__(self, client: PortalApiClient):
        self.client = client

    async def get_user(self) -> Dict[str, Any]:
        return await self.client.get("/user")

    async def update_user(self, form: UserProfileForm) -> Dict[str, Any]:
        response = await self.client.put("/user", json=form.model_dump())
        user = response.get("data")
        if isinstance(user, dict):
            self.client.sessions.customer.update_user(user)
        return response

    async def change_password(self, form: PasswordChangeForm) -> Dict[str, Any]:
        return await self.client.put("/user/password", json=form.model_dump())

    async def update_location(self, location: str) -> Dict[str, Any]:
        return await self.client.put("/user/location", json={"location": location})

    async def get_addresses(self) -> Dict[str, Any]:
        return await self.client.get("/addresses")

    async def create_address(self, form: AddressForm) -> Dict[str, Any]:
        return await self.client.post("/addresses", json=form.model_dump())

    async def update_address(self, address_id: int, form: AddressForm) -> Dict[str, Any]:
        return await self.client.put(f"/addresses/{address_id}", json=form.model_dump())

    async def delete_address(self, address_id: int) -> Dict[str, Any]:
        logger.info(f"Deleting address {address_id}")
        return await self.client.delete(f"/addresses/{address_id}")

    async def get_wallet(self) -> Dict[str, Any]:
        return await self.client.get("/wallet")

    async def get_memberships(self) -> Dict[str, Any]:
        return await self.client.get("/memberships")

    async def update_membership(self, membership_id: int) -> Dict[str, Any]:
        return await self.client.put(f"/memberships/{membership_id}")

    async def search_shipments(self, query: str) -> Dict[str, Any]:
        return await self.client.get("/search/shipments", params={"q": query})

    async def search_addresses(self, query: str) -> Dict[str, Any]:
        return await self.client.get("/search/addresses", params={"q": query})

    async def search_transactions(self, query: str) -> Dict[str, Any]:
        return await self.client.get("/search/transactions", params={"q": query})
