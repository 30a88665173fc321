"""Customer-facing modals and panels."""

import logging
from typing import Any, Dict, List, Optional

from application.models.request_models import (
    AddressForm,
    ApplyDiscountRequest,
    BuyForMeForm,
    DeliveryRequestForm,
    InsuranceRequest,
    LocationUpdate,
    PasswordChangeForm,
    UserProfileForm,
)
from application.models.response_models import (
    Address,
    Membership,
    Notification,
    ShippingAddress,
    User,
    Wallet,
)
from application.services.api.account import AccountOperations
from application.services.api.packages import PackageOperations
from application.services.api.requests import (
    BuyForMeOperations,
    ImageUpload,
    NotificationOperations,
)
from application.services.notifier import Notifier
from application.services.query import Mutation, QueryClient, QueryOptions, make_key
from application.services.query.keys import (
    ADDRESSES,
    BUY_FOR_ME_REQUESTS,
    DELIVERY_REQUESTS,
    MEMBERSHIPS,
    PACKAGES,
    SHIPPING_LOCATIONS,
    USER,
    USER_NOTIFICATIONS,
    WALLET,
)
from application.views.base import FormModal, ListPanel, parse_one, parse_rows

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS_COUNTRY = "Iraq"
MIN_PASSWORD_LENGTH = 8
ALL_PACKAGES_KEY = make_key(PACKAGES, "all")


class AddressModal(FormModal):
    """Create or edit an address book entry."""

    form_class = AddressForm
    invalidates = [make_key(ADDRESSES)]

    def __init__(
        self,
        query_client: QueryClient,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
        address_id: Optional[int] = None,
        initial: Optional[Dict[str, Any]] = None,
    ):
        self.account = account
        self.address_id = address_id
        defaults = AddressForm(country=DEFAULT_ADDRESS_COUNTRY).model_dump()
        super().__init__(query_client, notifier, {**defaults, **(initial or {})})
        if address_id is None:
            self.success_message = "Address created successfully"
            self.error_message = "Failed to create address"
        else:
            self.success_message = "Address updated successfully"
            self.error_message = "Failed to update address"

    @property
    def mode(self) -> str:
        return "create" if self.address_id is None else "edit"

    async def send(self, form: AddressForm) -> Dict[str, Any]:
        if self.address_id is None:
            return await self.account.create_address(form)
        return await self.account.update_address(self.address_id, form)


class BuyForMeModal(FormModal):
    """Buy-for-me purchase request with an optional product image."""

    form_class = BuyForMeForm
    invalidates = [make_key(BUY_FOR_ME_REQUESTS)]
    success_message = "Your buy-for-me request has been submitted"
    error_message = "Failed to submit request"

    def __init__(
        self,
        query_client: QueryClient,
        requests: BuyForMeOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.requests = requests
        self.image: Optional[ImageUpload] = None
        super().__init__(query_client, notifier, {"currency": "USD", "quantity": 1})

    def attach_image(self, filename: str, content: bytes, content_type: str = "image/jpeg") -> None:
        self.image = (filename, content, content_type)

    def reset(self) -> None:
        super().reset()
        self.image = None

    async def send(self, form: BuyForMeForm) -> Dict[str, Any]:
        return await self.requests.create(form, image=self.image)


class DeliveryRequestModal(FormModal):
    """Home delivery request between two address book entries.

    A new pickup or delivery address may be given inline instead of an id.
    """

    form_class = DeliveryRequestForm
    invalidates = [make_key(DELIVERY_REQUESTS)]
    required_messages = {
        "package_description": "Package description is required",
        "delivery_date": "Delivery date is required",
        "delivery_time": "Delivery time is required",
    }
    success_message = "Delivery request created successfully"
    error_message = "Failed to create delivery request"

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.packages = packages
        initial = {
            "package_weight": 0,
            "package_length": 0,
            "package_width": 0,
            "package_height": 0,
            "package_value": 0,
            "package_description": "",
            "delivery_date": "",
            "delivery_time": "",
        }
        super().__init__(query_client, notifier, initial)
        self.address_subscription = self.watch(ADDRESSES, account.get_addresses)

    @property
    def addresses(self) -> List[Address]:
        return parse_rows(self.address_subscription.data, Address)

    @property
    def default_address(self) -> Optional[Address]:
        for address in self.addresses:
            if address.is_default:
                return address
        return None

    def check(self, form: DeliveryRequestForm) -> Dict[str, str]:
        errors = {}
        if not form.pickup_address_id and form.new_pickup_address is None:
            errors["pickup_address_id"] = "Please select a pickup address"
        if not form.delivery_address_id and form.new_delivery_address is None:
            errors["delivery_address_id"] = "Please select a delivery address"
        if form.package_weight < 0.1:
            errors["package_weight"] = "Weight must be at least 0.1 kg"
        for name, label in (("length", "Length"), ("width", "Width"), ("height", "Height")):
            if getattr(form, f"package_{name}") < 1:
                errors[f"package_{name}"] = f"{label} must be at least 1 cm"
        if form.package_value < 0:
            errors["package_value"] = "Value must be 0 or greater"
        return errors

    async def send(self, form: DeliveryRequestForm) -> Dict[str, Any]:
        return await self.packages.create_delivery_request(form)


class EditProfileModal(FormModal):
    """Edit the customer profile, starting from the cached user."""

    form_class = UserProfileForm
    invalidates = [make_key(USER)]
    required_messages = {
        "name": "Name is required",
        "phone": "Phone number is required",
        "location": "Location is required",
    }
    success_message = "Profile updated successfully"
    error_message = "Failed to update profile"

    def __init__(
        self,
        query_client: QueryClient,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.account = account
        initial = {"name": "", "email": "", "phone": "", "location": ""}
        super().__init__(query_client, notifier, initial)
        self.user_subscription = self.watch(
            USER, account.get_user, prefill=User, fields=tuple(initial)
        )

    @property
    def user(self) -> Optional[User]:
        return parse_one(self.user_subscription.data, User)

    def check(self, form: UserProfileForm) -> Dict[str, str]:
        if "@" not in form.email:
            return {"email": "Invalid email address"}
        return {}

    async def send(self, form: UserProfileForm) -> Dict[str, Any]:
        return await self.account.update_user(form)


class ChangeLocationModal(FormModal):
    """Move the customer to another warehouse location."""

    form_class = LocationUpdate
    invalidates = [make_key(USER)]
    required_messages = {"location": "Location is required"}
    success_message = "Location updated successfully"
    error_message = "Failed to update location"

    def __init__(
        self,
        query_client: QueryClient,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.account = account
        super().__init__(query_client, notifier, {"location": ""})
        self.user_subscription = self.watch(
            USER, account.get_user, prefill=User, fields=("location",)
        )

    async def send(self, form: LocationUpdate) -> Dict[str, Any]:
        return await self.account.update_location(form.location)


class ChangePasswordModal(FormModal):
    form_class = PasswordChangeForm
    required_messages = {
        "current_password": "Current password is required",
        "confirm_password": "Please confirm your password",
    }
    success_message = "Password changed successfully"
    error_message = "Failed to change password"

    def __init__(
        self,
        query_client: QueryClient,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.account = account
        initial = {"current_password": "", "new_password": "", "confirm_password": ""}
        super().__init__(query_client, notifier, initial)

    def check(self, form: PasswordChangeForm) -> Dict[str, str]:
        if len(form.new_password) < MIN_PASSWORD_LENGTH:
            return {"new_password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}
        if form.new_password != form.confirm_password:
            return {"confirm_password": "Passwords don't match"}
        return {}

    async def send(self, form: PasswordChangeForm) -> Dict[str, Any]:
        return await self.account.change_password(form)


class EditMembershipModal(FormModal):
    """Switch the customer's membership plan."""

    invalidates = [make_key(MEMBERSHIPS), make_key(USER)]
    success_message = "Membership updated successfully"
    error_message = "Failed to update membership"

    def __init__(
        self,
        query_client: QueryClient,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        self.account = account
        super().__init__(query_client, notifier, {"membership_id": None})
        self.membership_subscription = self.watch(MEMBERSHIPS, account.get_memberships)

    @property
    def memberships(self) -> List[Membership]:
        return parse_rows(self.membership_subscription.data, Membership)

    @property
    def active_membership(self) -> Optional[Membership]:
        for membership in self.memberships:
            if membership.is_active:
                return membership
        return None

    def choose(self, membership_id: int) -> None:
        self.set("membership_id", membership_id)

    def validate(self):
        membership_id = self.values.get("membership_id")
        if not membership_id:
            self.field_errors = {"membership_id": ["Please select a membership"]}
            return None
        return int(membership_id)

    async def send(self, membership_id: int) -> Dict[str, Any]:
        return await self.account.update_membership(membership_id)


class PackageActionModal(FormModal):
    """Base for actions applied to one of the customer's packages.

    The package list is loaded while the modal is open; a successful action
    refreshes every package list, country-scoped or not.
    """

    invalidates = [make_key(PACKAGES)]

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        notifier: Optional[Notifier] = None,
        initial: Optional[Dict[str, Any]] = None,
    ):
        self.packages = packages
        super().__init__(query_client, notifier, {"package_id": None, **(initial or {})})
        self.package_subscription = self.watch(ALL_PACKAGES_KEY, packages.get_all_packages)

    @property
    def package_choices(self) -> List[Dict[str, Any]]:
        return parse_rows(self.package_subscription.data)

    def choose(self, package_id: int) -> None:
        self.set("package_id", package_id)


class InsuranceModal(PackageActionModal):
    form_class = InsuranceRequest
    required_messages = {
        "package_id": "Please select a package",
        "insurance_value": "Please enter an insurance value",
    }
    success_message = "Insurance applied successfully"
    error_message = "Failed to apply insurance"

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, packages, notifier, {"insurance_value": ""})

    def check(self, form: InsuranceRequest) -> Dict[str, str]:
        if form.insurance_value <= 0:
            return {"insurance_value": "Insurance value must be greater than 0"}
        return {}

    async def send(self, form: InsuranceRequest) -> Dict[str, Any]:
        return await self.packages.apply_insurance(int(self.values["package_id"]), form)


class ApplyDiscountModal(PackageActionModal):
    form_class = ApplyDiscountRequest
    required_messages = {
        "discount_code": "Please enter a discount code",
        "package_id": "Please select a package",
    }
    success_message = "Discount code applied successfully"
    error_message = "Failed to apply discount code"

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, packages, notifier, {"discount_code": ""})

    async def send(self, form: ApplyDiscountRequest) -> Dict[str, Any]:
        return await self.packages.apply_discount(form)


class SettingsPanel:
    """Profile, membership and wallet summary of the settings page."""

    def __init__(self, query_client: QueryClient, account: AccountOperations):
        self.user_subscription = query_client.subscribe(
            make_key(USER), account.get_user, QueryOptions(enabled=False)
        )
        self.membership_subscription = query_client.subscribe(
            make_key(MEMBERSHIPS), account.get_memberships, QueryOptions(enabled=False)
        )
        self.wallet_subscription = query_client.subscribe(
            make_key(WALLET), account.get_wallet, QueryOptions(enabled=False)
        )
        self._subscriptions = [
            self.user_subscription,
            self.membership_subscription,
            self.wallet_subscription,
        ]

    @property
    def user(self) -> Optional[User]:
        return parse_one(self.user_subscription.data, User)

    @property
    def memberships(self) -> List[Membership]:
        return parse_rows(self.membership_subscription.data, Membership)

    @property
    def active_membership(self) -> Optional[Membership]:
        for membership in self.memberships:
            if membership.is_active:
                return membership
        return None

    @property
    def wallet(self) -> Optional[Wallet]:
        return parse_one(self.wallet_subscription.data, Wallet)

    def open(self) -> None:
        for subscription in self._subscriptions:
            subscription.set_enabled(True)

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.set_enabled(False)

    def dispose(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()


class WarehouseAddressesPanel(ListPanel):
    """Warehouse addresses a customer ships to, with their suite number."""

    model = ShippingAddress
    search_fields = ("title", "address", "city")

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        account: AccountOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, SHIPPING_LOCATIONS, packages.get_shipping_locations, notifier)
        self.user_subscription = query_client.subscribe(
            make_key(USER), account.get_user, QueryOptions(enabled=False)
        )

    @property
    def suite_number(self) -> Optional[str]:
        user = parse_one(self.user_subscription.data, User)
        return user.suite_number if user else None

    def open(self) -> None:
        super().open()
        self.user_subscription.set_enabled(True)

    def close(self) -> None:
        super().close()
        self.user_subscription.set_enabled(False)

    def dispose(self) -> None:
        super().dispose()
        self.user_subscription.unsubscribe()


class NotificationsPanel(ListPanel):
    """Notification inbox with read/delete actions."""

    model = Notification

    def __init__(
        self,
        query_client: QueryClient,
        notifications: NotificationOperations,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(query_client, USER_NOTIFICATIONS, notifications.list, notifier)
        self.notifications = notifications
        invalidates = [make_key(USER_NOTIFICATIONS)]
        self._mark_read = Mutation(query_client, notifications.mark_read, invalidates=invalidates)
        self._mark_all_read = Mutation(
            query_client, notifications.mark_all_read, invalidates=invalidates
        )
        self._delete = Mutation(query_client, notifications.delete, invalidates=invalidates)

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self.items if not (item.is_read or item.read_at))

    async def mark_read(self, notification_id: int) -> bool:
        return await self._run(self._mark_read, "Failed to mark notification as read", notification_id)

    async def mark_all_read(self) -> bool:
        ok = await self._run(self._mark_all_read, "Failed to mark notifications as read")
        if ok:
            self.notifier.success(
                "All notifications marked as read",
                "All your notifications have been marked as read.",
            )
        return ok

    async def delete(self, notification_id: int) -> bool:
        ok = await self._run(self._delete, "Failed to delete notification", notification_id)
        if ok:
            self.notifier.success("Notification deleted", "The notification has been removed.")
        return ok
