"""
Request models for the portal API.

Defines the form payloads sent to the API server. Field names match the
server's snake_case contract.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

AddressType = Literal["home", "work", "other"]


class LoginCredentials(BaseModel):
    """Credentials for customer or admin login."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class RegistrationForm(BaseModel):
    """Customer self-registration."""

    name: str
    email: str
    phone: str
    location: str
    password: str
    confirm_password: str


class UserProfileForm(BaseModel):
    """Customer profile update."""

    name: str
    email: str
    phone: str
    location: str


class LocationUpdate(BaseModel):
    """Customer warehouse location change."""

    location: str = ""


class PasswordChangeForm(BaseModel):
    """Customer password change."""

    current_password: str
    new_password: str
    confirm_password: str


class AdminPasswordChangeForm(BaseModel):
    """Admin password change."""

    current_password: str
    new_password: str
    new_password_confirmation: str


class AdminProfileForm(BaseModel):
    """Admin profile update."""

    name: str
    email: str


class AddressForm(BaseModel):
    """Address book entry create/update."""

    name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""
    phone: str = ""
    type: AddressType = "home"
    is_default: bool = False


class DeliveryRequestForm(BaseModel):
    """Home delivery request."""

    pickup_address_id: Optional[int] = None
    delivery_address_id: Optional[int] = None
    new_pickup_address: Optional[AddressForm] = None
    new_delivery_address: Optional[AddressForm] = None
    package_weight: float
    package_length: float
    package_width: float
    package_height: float
    package_value: float
    package_description: str
    delivery_date: str
    delivery_time: str
    special_instructions: Optional[str] = None


class CreatePackageRequest(BaseModel):
    """Package registered by an admin on behalf of a client."""

    description: str = ""
    weight: float = 0
    price: float = 0
    country: str = ""
    shipping_method: str = ""
    status: str = "pending"
    estimated_arrival: Optional[str] = None
    notes: Optional[str] = None


class DiscountForm(BaseModel):
    """Admin discount code create/update."""

    code: str = ""
    description: str = ""
    discount_type: Literal["percentage", "fixed"] = "percentage"
    discount_value: float = 0
    min_order_amount: float = 0
    usage_limit: int = 0
    expires_at: str = ""


class ApplyDiscountRequest(BaseModel):
    """Customer applies a discount code to a package."""

    discount_code: str
    package_id: int


class InsuranceRequest(BaseModel):
    """Customer insures a package."""

    insurance_value: float


class ShippingAddressForm(BaseModel):
    """Admin warehouse (shipping) address create/update."""

    title: Optional[str] = None
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class BuyForMeForm(BaseModel):
    """Buy-for-me purchase request, sent as a multipart form."""

    product_name: str = Field(..., min_length=1)
    product_url: str = ""
    description: str = Field(..., min_length=10)
    estimated_price: float = Field(default=0, ge=0)
    currency: str = Field(default="USD", min_length=1)
    quantity: int = Field(default=1, ge=1)
    shipping_address: str = Field(..., min_length=1)
    special_instructions: str = ""

    def to_form_fields(self) -> dict:
        """Render every field as a string, the way multipart forms carry them."""
        fields = {}
        for key, value in self.model_dump().items():
            fields[key] = "" if value is None else str(value)
        return fields


class BuyForMeStatusUpdate(BaseModel):
    """Admin status change for a buy-for-me request."""

    status: str
    actual_price: Optional[float] = None
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None
