"""
Response models for the portal API.

Every endpoint answers with the envelope ``{success, data, message}``.
Resource models accept fields they do not declare so that newer servers
keep working with this client.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PortalModel(BaseModel):
    """Base for resources returned by the server."""

    model_config = ConfigDict(extra="allow")


class User(PortalModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    suite_number: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Address(PortalModel):
    id: int
    name: str
    street: str
    city: str
    state: Optional[str] = None
    country: str
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    is_default: bool = False
    type: str = "home"


class AuthPayload(PortalModel):
    """Login/registration result."""

    token: str
    user: Optional[Dict[str, Any]] = None


class WalletTransaction(PortalModel):
    id: int
    type: str
    amount: float
    currency: str
    description: Optional[str] = None
    status: str
    created_at: Optional[str] = None


class Wallet(PortalModel):
    balance: float = 0
    currency: str = "IQD"
    transactions: List[WalletTransaction] = Field(default_factory=list)


class Membership(PortalModel):
    id: int
    name: str
    type: str
    price: float
    currency: str
    features: List[str] = Field(default_factory=list)
    expires_at: Optional[str] = None
    is_active: bool = False


class Notification(PortalModel):
    id: int
    message: str
    read_at: Optional[str] = None
    is_read: Optional[bool] = None
    created_at: Optional[str] = None


class ChatMessage(PortalModel):
    """One chat message; ordering is by ``created_at`` on the server."""

    id: int
    message: str
    sender_type: Literal["admin", "user"]
    sender_name: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[str] = None


class ChatUser(PortalModel):
    """Conversation list row in the admin chat widget."""

    id: int
    name: str
    email: str = ""
    last_message: Optional[str] = None
    last_message_time: Optional[str] = None
    unread_count: int = 0


class Discount(PortalModel):
    id: int
    code: str
    description: Optional[str] = None
    discount_type: str = "percentage"
    discount_value: float = 0
    min_order_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    expires_at: Optional[str] = None


class ShippingAddress(PortalModel):
    id: int
    title: Optional[str] = None
    address: str
    city: str
    state: Optional[str] = None
    zip_code: Optional[str] = None


class BuyForMeRequest(PortalModel):
    id: int
    product_name: str
    status: str
    estimated_price: Optional[float] = None
    actual_price: Optional[float] = None
    currency: Optional[str] = None
    quantity: Optional[int] = None
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[str] = None


class InsuranceStatistics(PortalModel):
    total_insured_packages: int = 0
    total_insurance_value: float = 0
