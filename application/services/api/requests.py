"""
Buy-for-me purchase requests and customer notifications.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from application.models.request_models import BuyForMeForm, BuyForMeStatusUpdate
from application.services.api.client import PortalApiClient

logger = logging.getLogger(__name__)

# (filename, content, content type), as accepted by httpx multipart uploads
ImageUpload = Tuple[str, bytes, str]


class BuyForMeOperations:
    """Handles buy-for-me purchase requests."""

    def __init__(self, client: PortalApiClient):
        self.client = client

    async def create(
        self, form: BuyForMeForm, image: Optional[ImageUpload] = None
    ) -> Dict[str, Any]:
        """Submit a purchase request as multipart form data.

        Args:
            form: Request fields
            image: Optional product picture sent as ``product_image``

        Returns:
            Response envelope
        """
        files = {"product_image": image} if image else None
        return await self.client.post_multipart(
            "/buy-for-me-requests", data=form.to_form_fields(), files=files
        )

    async def list(
        self,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.client.get(
            "/buy-for-me-requests",
            params={"status": status, "page": page, "limit": limit},
        )

    async def get(self, request_id: int) -> Dict[str, Any]:
        return await self.client.get(f"/buy-for-me-requests/{request_id}")

    async def update_status(
        self, request_id: int, update: BuyForMeStatusUpdate
    ) -> Dict[str, Any]:
        logger.info(f"Setting buy-for-me request {request_id} to {update.status}")
        return await self.client.put(
            f"/buy-for-me-requests/{request_id}/status",
            json=update.model_dump(exclude_none=True),
        )


class NotificationOperations:
    """Handles the customer's notification inbox."""

    def __init__(self, client: PortalApiClient):
        self.client = client

    async def list(self) -> Dict[str, Any]:
        return await self.client.get("/notifications")

    async def mark_read(self, notification_id: int) -> Dict[str, Any]:
        return await self.client.put(f"/notifications/{notification_id}/read")

    async def mark_all_read(self) -> Dict[str, Any]:
        return await self.client.put("/notifications/read-all")

    async def delete(self, notification_id: int) -> Dict[str, Any]:
        return await self.client.delete(f"/notifications/{notification_id}")
