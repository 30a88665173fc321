"""
Application models package.

Contains the request and response DTOs of the portal API.
"""

from application.models.request_models import (
    AddressForm,
    AdminPasswordChangeForm,
    AdminProfileForm,
    ApplyDiscountRequest,
    BuyForMeForm,
    BuyForMeStatusUpdate,
    CreatePackageRequest,
    DeliveryRequestForm,
    DiscountForm,
    InsuranceRequest,
    LocationUpdate,
    LoginCredentials,
    PasswordChangeForm,
    RegistrationForm,
    ShippingAddressForm,
    UserProfileForm,
)
from application.models.response_models import (
    Address,
    AuthPayload,
    BuyForMeRequest,
    ChatMessage,
    ChatUser,
    Discount,
    InsuranceStatistics,
    Membership,
    Notification,
    ShippingAddress,
    User,
    Wallet,
    WalletTransaction,
)

__all__ = [
    # Request models
    "AddressForm",
    "AdminPasswordChangeForm",
    "AdminProfileForm",
    "ApplyDiscountRequest",
    "BuyForMeForm",
    "BuyForMeStatusUpdate",
    "CreatePackageRequest",
    "DeliveryRequestForm",
    "DiscountForm",
    "InsuranceRequest",
    "LocationUpdate",
    "LoginCredentials",
    "PasswordChangeForm",
    "RegistrationForm",
    "ShippingAddressForm",
    "UserProfileForm",
    # Response models
    "Address",
    "AuthPayload",
    "BuyForMeRequest",
    "ChatMessage",
    "ChatUser",
    "Discount",
    "InsuranceStatistics",
    "Membership",
    "Notification",
    "ShippingAddress",
    "User",
    "Wallet",
    "WalletTransaction",
]
