"""Headless view-models for the portal's forms and panels."""

from application.views.admin import (
    AddPackageModal,
    AdminProfileModal,
    AdminShipmentsPanel,
    BuyForMeRequestsPanel,
    BuyForMeStatusEditor,
    DiscountEditor,
    DiscountsPanel,
    InsuredPackagesPanel,
    SendNotificationModal,
    ShippingAddressEditor,
    ShippingAddressesPanel,
)
from application.views.base import (
    FormModal,
    ListPanel,
    parse_one,
    parse_rows,
    validation_field_errors,
)
from application.views.customer import (
    AddressModal,
    ApplyDiscountModal,
    BuyForMeModal,
    ChangeLocationModal,
    ChangePasswordModal,
    DeliveryRequestModal,
    EditMembershipModal,
    EditProfileModal,
    InsuranceModal,
    NotificationsPanel,
    PackageActionModal,
    SettingsPanel,
    WarehouseAddressesPanel,
)

__all__ = [
    "AddPackageModal",
    "AddressModal",
    "AdminProfileModal",
    "AdminShipmentsPanel",
    "ApplyDiscountModal",
    "BuyForMeModal",
    "BuyForMeRequestsPanel",
    "BuyForMeStatusEditor",
    "ChangeLocationModal",
    "ChangePasswordModal",
    "DeliveryRequestModal",
    "DiscountEditor",
    "DiscountsPanel",
    "EditMembershipModal",
    "EditProfileModal",
    "FormModal",
    "InsuranceModal",
    "InsuredPackagesPanel",
    "ListPanel",
    "NotificationsPanel",
    "PackageActionModal",
    "SendNotificationModal",
    "SettingsPanel",
    "ShippingAddressEditor",
    "ShippingAddressesPanel",
    "WarehouseAddressesPanel",
    "parse_one",
    "parse_rows",
    "validation_field_errors",
]
