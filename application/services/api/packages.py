"""
Customer package operations.

List endpoints accept an optional shipping method (the selected country)
that scopes the result set.
"""

import logging
from typing import Any, Dict, Optional

from application.models.request_models import (
    ApplyDiscountRequest,
    DeliveryRequestForm,
    InsuranceRequest,
)
from application.services.api.client import PortalApiClient

logger = logging.getLogger(__name__)


class PackageOperations:
    """Handles packages, shipments, archive and delivery requests."""

    def __init__(self, client: PortalApiClient):
        self.client = client

    async def get_packages(self, shipping_method: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get("/packages", params={"shipping_method": shipping_method})

    async def get_all_packages(self) -> Dict[str, Any]:
        return await self.client.get("/packages/all")

    async def get_shipments(self, shipping_method: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get("/shipments", params={"shipping_method": shipping_method})

    async def get_archived_shipments(
        self, shipping_method: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.client.get("/archive", params={"shipping_method": shipping_method})

    async def get_returned_packages(
        self, shipping_method: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.client.get(
            "/archive/returned", params={"shipping_method": shipping_method}
        )

    async def request_return(self, package_id: int) -> Dict[str, Any]:
        logger.info(f"Requesting return of package {package_id}")
        return await self.client.post(f"/packages/{package_id}/return-request")

    async def request_shipping(self, package_id: int) -> Dict[str, Any]:
        logger.info(f"Requesting shipping of package {package_id}")
        return await self.client.post(f"/packages/{package_id}/shipping-request")

    async def apply_insurance(self, package_id: int, request: InsuranceRequest) -> Dict[str, Any]:
        return await self.client.post(
            f"/packages/{package_id}/insurance", json=request.model_dump()
        )

    async def apply_discount(self, request: ApplyDiscountRequest) -> Dict[str, Any]:
        return await self.client.post("/discounts/apply", json=request.model_dump())

    async def get_delivery_requests(self, country: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get("/delivery-requests", params={"country": country})

    async def create_delivery_request(self, form: DeliveryRequestForm) -> Dict[str, Any]:
        return await self.client.post(
            "/delivery-requests", json=form.model_dump(exclude_none=True)
        )

    async def get_shipping_locations(self) -> Dict[str, Any]:
        return await self.client.get("/shipping-locations")

    async def get_shipping_location(self, location_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/shipping-locations/{location_id}")
