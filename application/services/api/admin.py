"""
Admin console operations.

All paths live under ``/admin`` and therefore authenticate with the
admin session.
"""

import logging
from typing import Any, Dict, Optional

from application.models.request_models import (
    AdminPasswordChangeForm,
    AdminProfileForm,
    CreatePackageRequest,
    DiscountForm,
    ShippingAddressForm,
)
from application.services.api.client import PortalApiClient

logger = logging.getLogger(__name__)


class AdminOperations:
    """Handles clients, packages, discounts, addresses and settings for admins."""

    def __init__(self, client: PortalApiClient):
        self.client = client

    # Clients and stats

    async def get_clients(self, search: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get("/admin/clients", params={"search": search})

    async def get_stats(self) -> Dict[str, Any]:
        return await self.client.get("/admin/stats")

    async def get_client_packages(self, client_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/admin/clients/{client_id}/packages")

    # Packages and shipments

    async def create_package(self, client_id: int, request: CreatePackageRequest) -> Dict[str, Any]:
        logger.info(f"Creating package for client {client_id}")
        payload = {"client_id": client_id, **request.model_dump(exclude_none=True)}
        return await self.client.post("/admin/packages", json=payload)

    async def get_shipments(self) -> Dict[str, Any]:
        return await self.client.get("/admin/shipments")

    async def get_archives(self) -> Dict[str, Any]:
        return await self.client.get("/admin/archives")

    async def update_package_status(self, package_id: int, status: str) -> Dict[str, Any]:
        logger.info(f"Setting package {package_id} status to {status}")
        return await self.client.put(
            f"/admin/packages/{package_id}/status", json={"status": status}
        )

    # Profile

    async def update_profile(self, form: AdminProfileForm) -> Dict[str, Any]:
        response = await self.client.put("/admin/profile", json=form.model_dump())
        admin = response.get("data")
        if isinstance(admin, dict):
            self.client.sessions.admin.update_user(admin)
        return response

    async def change_password(self, form: AdminPasswordChangeForm) -> Dict[str, Any]:
        return await self.client.put("/admin/password", json=form.model_dump())

    # Discounts

    async def get_discounts(self) -> Dict[str, Any]:
        return await self.client.get("/admin/discounts")

    async def create_discount(self, form: DiscountForm) -> Dict[str, Any]:
        return await self.client.post("/admin/discounts", json=form.model_dump())

    async def update_discount(self, discount_id: int, form: DiscountForm) -> Dict[str, Any]:
        return await self.client.put(f"/admin/discounts/{discount_id}", json=form.model_dump())

    async def delete_discount(self, discount_id: int) -> Dict[str, Any]:
        return await self.client.delete(f"/admin/discounts/{discount_id}")

    # Insurance

    async def get_insured_packages(self) -> Dict[str, Any]:
        return await self.client.get("/admin/insured-packages")

    async def get_insurance_statistics(self) -> Dict[str, Any]:
        return await self.client.get("/admin/insurance/statistics")

    # Shipping (warehouse) addresses

    async def get_shipping_addresses(self) -> Dict[str, Any]:
        return await self.client.get("/admin/shipping-addresses")

    async def create_shipping_address(self, form: ShippingAddressForm) -> Dict[str, Any]:
        return await self.client.post(
            "/admin/shipping-addresses", json=form.model_dump(exclude_none=True)
        )

    async def update_shipping_address(
        self, address_id: int, form: ShippingAddressForm
    ) -> Dict[str, Any]:
        return await self.client.put(
            f"/admin/shipping-addresses/{address_id}",
            json=form.model_dump(exclude_none=True),
        )

    async def delete_shipping_address(self, address_id: int) -> Dict[str, Any]:
        return await self.client.delete(f"/admin/shipping-addresses/{address_id}")

    # Buy-for-me and notifications

    async def get_buy_for_me_requests(self) -> Dict[str, Any]:
        return await self.client.get("/admin/buy-for-me-requests")

    async def send_notification(self, client_id: int, message: str) -> Dict[str, Any]:
        return await self.client.post(
            "/admin/notifications", json={"client_id": client_id, "message": message}
        )
