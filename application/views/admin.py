"""Admin console modals and editors."""

import logging
from typing import Any, Dict, List, Optional

from application.models.request_models import (
    AdminProfileForm,
    BuyForMeStatusUpdate,
    CreatePackageRequest,
    DiscountForm,
    ShippingAddressForm,
)
from application.models.response_models import (
    BuyForMeRequest,
    Discount,
    InsuranceStatistics,
    ShippingAddress,
)
from application.services.api.admin import AdminOperations
from application.services.api.requests import BuyForMeOperations
from application.services.notifier import Notifier
from application.services.query import Mutation, QueryClient, QueryOptions, make_key
from application.services.query.keys import (
    ADMIN_BUY_FOR_ME_REQUESTS,
    ADMIN_CLIENTS,
    ADMIN_DISCOUNTS,
    ADMIN_PROFILE,
    ADMIN_SHIPMENTS,
    ADMIN_SHIPPING_ADDRESSES,
    ADMIN_STATS,
    INSURANCE_STATISTICS,
    INSURED_PACKAGES,
)
from application.views.base import FormModal, ListPanel, parse_one
from common.exception.exceptions import PortalError

logger = logging.getLogger(__name__)


class AddPackageModal(FormModal):
    """Register a package for one client.

    A successful create refreshes both the client list and the stats summary.
    """

    form_class = CreatePackageRequest
    invalidates = [make_key(ADMIN_CLIENTS), make_key(ADMIN_STATS)]
    success_title = "Package created successfully"
    error_title = "Error creating package"
    error_message = "Failed to create package"

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        client_id: int,
        client_name: str = "",
        notifier: Optional[Notifier] = None,
    ):
        self.admin = admin
        self.client_id = client_id
        self.success_message = f"Package has been added for {client_name or 'client'}"
        super().__init__(query_client, notifier, CreatePackageRequest().model_dump())

    async def send(self, form: CreatePackageRequest) -> Dict[str, Any]:
        return await self.admin.create_package(self.client_id, form)


class SendNotificationModal(FormModal):
    """Send a free-text notification to one client."""

    invalidates = [make_key(ADMIN_CLIENTS)]
    success_title = "Notification sent"
    error_title = "Failed to send notification"
    error_message = "There was an error sending the notification. Please try again."

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        client_id: int,
        client_name: str = "",
        notifier: Optional[Notifier] = None,
    ):
        self.admin = admin
        self.client_id = client_id
        self.success_message = f"Notification sent successfully to {client_name or 'client'}"
        super().__init__(query_client, notifier, {"message": ""})

    def validate(self):
        message = (self.values.get("message") or "").strip()
        if not message:
            self.field_errors = {"message": ["Please enter a message"]}
            return None
        return message

    async def send(self, message: str) -> Dict[str, Any]:
        return await self.admin.send_notification(self.client_id, message)


class DiscountEditor(FormModal):
    """Create or edit a discount code; also deletes codes."""

    form_class = DiscountForm
    invalidates = [make_key(ADMIN_DISCOUNTS)]

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.admin = admin
        self.discount_id: Optional[int] = None
        super().__init__(query_client, notifier, DiscountForm().model_dump())
        self._delete = Mutation(query_client, admin.delete_discount, invalidates=self.invalidates)

    def edit(self, discount_id: int, values: Dict[str, Any]) -> None:
        self.discount_id = discount_id
        self.open(values)

    def create(self) -> None:
        self.discount_id = None
        self.open({})

    @property
    def success_message(self) -> str:
        if self.discount_id is None:
            return "Discount code created successfully"
        return "Discount code updated successfully"

    @property
    def error_message(self) -> str:
        if self.discount_id is None:
            return "Failed to create discount code"
        return "Failed to update discount code"

    async def send(self, form: DiscountForm) -> Dict[str, Any]:
        if self.discount_id is None:
            return await self.admin.create_discount(form)
        return await self.admin.update_discount(self.discount_id, form)

    async def delete(self, discount_id: int) -> bool:
        self.redirect_to = None
        try:
            await self._delete.mutate(discount_id)
        except PortalError as e:
            self._report_failure(e, "Failed to delete discount code")
            return False
        self.notifier.success("Success", "Discount code deleted successfully")
        return True


class ShippingAddressEditor(FormModal):
    """Create or edit a warehouse shipping address; also deletes them."""

    form_class = ShippingAddressForm
    invalidates = [make_key(ADMIN_SHIPPING_ADDRESSES)]
    error_message = "Failed to save shipping address"

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.admin = admin
        self.address_id: Optional[int] = None
        super().__init__(query_client, notifier, ShippingAddressForm().model_dump())
        self._delete = Mutation(
            query_client, admin.delete_shipping_address, invalidates=self.invalidates
        )

    def edit(self, address_id: int, values: Dict[str, Any]) -> None:
        self.address_id = address_id
        self.open(values)

    def create(self) -> None:
        self.address_id = None
        self.open({})

    @property
    def success_message(self) -> str:
        if self.address_id is None:
            return "Shipping address created successfully"
        return "Shipping address updated successfully"

    async def send(self, form: ShippingAddressForm) -> Dict[str, Any]:
        if self.address_id is None:
            return await self.admin.create_shipping_address(form)
        return await self.admin.update_shipping_address(self.address_id, form)

    async def delete(self, address_id: int) -> bool:
        self.redirect_to = None
        try:
            await self._delete.mutate(address_id)
        except PortalError as e:
            self._report_failure(e, "Failed to delete shipping address")
            return False
        self.notifier.success("Success", "Shipping address deleted successfully")
        return True


class BuyForMeStatusEditor(FormModal):
    """Update the status of a customer's buy-for-me request."""

    form_class = BuyForMeStatusUpdate
    invalidates = [make_key(ADMIN_BUY_FOR_ME_REQUESTS)]
    success_message = "Request updated successfully"
    error_message = "Failed to update request"

    def __init__(
        self,
        query_client: QueryClient,
        requests: BuyForMeOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.requests = requests
        self.request_id: Optional[int] = None
        super().__init__(query_client, notifier)

    def edit(self, request_id: int, values: Dict[str, Any]) -> None:
        self.request_id = request_id
        self.open(values)

    def close(self) -> None:
        super().close()
        self.request_id = None

    async def send(self, form: BuyForMeStatusUpdate) -> Dict[str, Any]:
        if self.request_id is None:
            raise ValueError("No buy-for-me request selected")
        return await self.requests.update_status(self.request_id, form)


class AdminProfileModal(FormModal):
    """Edit the signed-in admin's name and email.

    The profile read model is the admin user stored with the session.
    """

    form_class = AdminProfileForm
    invalidates = [make_key(ADMIN_PROFILE)]
    required_messages = {"name": "Name is required", "email": "Email is required"}
    success_message = "Profile updated successfully"
    error_message = "Failed to update profile"

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.admin = admin
        super().__init__(query_client, notifier, {"name": "", "email": ""})
        self.profile_subscription = self.watch(
            ADMIN_PROFILE, self._stored_profile, prefill=AdminProfileForm, fields=("name", "email")
        )

    async def _stored_profile(self) -> Dict[str, Any]:
        return {"success": True, "data": self.admin.client.sessions.admin.user}

    async def send(self, form: AdminProfileForm) -> Dict[str, Any]:
        return await self.admin.update_profile(form)


class AdminShipmentsPanel(ListPanel):
    """Every client's shipments, with a status action per package."""

    search_fields = ("client_name", "tracking_number", "description")

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, ADMIN_SHIPMENTS, admin.get_shipments, notifier)
        self._update_status = Mutation(
            query_client, admin.update_package_status, invalidates=[make_key(ADMIN_SHIPMENTS)]
        )

    async def update_status(self, package_id: int, status: str) -> bool:
        ok = await self._run(
            self._update_status, "Failed to update package status", package_id, status
        )
        if ok:
            self.notifier.success("Success", "Package status updated successfully")
        return ok


class InsuredPackagesPanel(ListPanel):
    """Insured packages and the insurance totals shown above them."""

    search_fields = ("tracking_number", "client_name", "description")

    def __init__(
        self,
        query_client: QueryClient,
        admin: AdminOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, INSURED_PACKAGES, admin.get_insured_packages, notifier)
        self.statistics_subscription = query_client.subscribe(
            make_key(INSURANCE_STATISTICS),
            admin.get_insurance_statistics,
            QueryOptions(enabled=False),
        )

    @property
    def statistics(self) -> Optional[InsuranceStatistics]:
        return parse_one(self.statistics_subscription.data, InsuranceStatistics)

    def open(self) -> None:
        super().open()
        self.statistics_subscription.set_enabled(True)

    def close(self) -> None:
        super().close()
        self.statistics_subscription.set_enabled(False)

    def dispose(self) -> None:
        super().dispose()
        self.statistics_subscription.unsubscribe()


class DiscountsPanel(ListPanel):
    model = Discount
    search_fields = ("code", "description")

    def __init__(self, query_client: QueryClient, admin: AdminOperations):
        super().__init__(query_client, ADMIN_DISCOUNTS, admin.get_discounts)


class ShippingAddressesPanel(ListPanel):
    model = ShippingAddress
    search_fields = ("title", "address", "city")

    def __init__(self, query_client: QueryClient, admin: AdminOperations):
        super().__init__(query_client, ADMIN_SHIPPING_ADDRESSES, admin.get_shipping_addresses)


class BuyForMeRequestsPanel(ListPanel):
    """All customers' buy-for-me requests, searchable by product or status."""

    model = BuyForMeRequest
    search_fields = ("product_name", "status", "tracking_number")

    def __init__(self, query_client: QueryClient, admin: AdminOperations):
        super().__init__(query_client, ADMIN_BUY_FOR_ME_REQUESTS, admin.get_buy_for_me_requests)

    def with_status(self, status: str) -> List[BuyForMeRequest]:
        return [request for request in self.items if request.status == status]
