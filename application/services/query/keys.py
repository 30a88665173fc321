"""Query key names and helpers.

A query key is a tuple: the resource name followed by its scope
parameters, e.g. ``("admin-chat-messages", 42)`` or ``("packages", "USA")``.
"""

from typing import Any, Tuple

QueryKey = Tuple[Any, ...]

# Customer read models
USER = "user"
ADDRESSES = "addresses"
MEMBERSHIPS = "memberships"
WALLET = "wallet"
SHIPPING_LOCATIONS = "shipping-locations"
PACKAGES = "packages"
SHIPMENTS = "shipments"
ARCHIVE = "archive"
RETURNED_PACKAGES = "returned-packages"
BUY_FOR_ME_REQUESTS = "buy-for-me-requests"
DELIVERY_REQUESTS = "delivery-requests"
USER_NOTIFICATIONS = "user-notifications"
USER_CHAT_MESSAGES = "user-chat-messages"

# Admin read models
ADMIN_CLIENTS = "admin-clients"
ADMIN_STATS = "admin-stats"
ADMIN_SHIPMENTS = "admin-shipments"
ADMIN_DISCOUNTS = "admin-discounts"
ADMIN_SHIPPING_ADDRESSES = "admin-shipping-addresses"
ADMIN_BUY_FOR_ME_REQUESTS = "admin-buy-for-me-requests"
ADMIN_PROFILE = "admin-profile"
INSURED_PACKAGES = "insured-packages"
INSURANCE_STATISTICS = "insurance-statistics"
ADMIN_CHAT_USERS = "admin-chat-users"
ADMIN_CHAT_MESSAGES = "admin-chat-messages"

CUSTOMER_KEYS = (
    USER,
    ADDRESSES,
    MEMBERSHIPS,
    WALLET,
    SHIPPING_LOCATIONS,
    PACKAGES,
    SHIPMENTS,
    ARCHIVE,
    RETURNED_PACKAGES,
    BUY_FOR_ME_REQUESTS,
    DELIVERY_REQUESTS,
    USER_NOTIFICATIONS,
    USER_CHAT_MESSAGES,
)
ADMIN_KEYS = (
    ADMIN_CLIENTS,
    ADMIN_STATS,
    ADMIN_SHIPMENTS,
    ADMIN_DISCOUNTS,
    ADMIN_SHIPPING_ADDRESSES,
    ADMIN_BUY_FOR_ME_REQUESTS,
    ADMIN_PROFILE,
    INSURED_PACKAGES,
    INSURANCE_STATISTICS,
    ADMIN_CHAT_USERS,
    ADMIN_CHAT_MESSAGES,
)


def make_key(*parts: Any) -> QueryKey:
    """Build a query key; a single tuple argument is taken as-is."""
    if len(parts) == 1 and isinstance(parts[0], tuple):
        return parts[0]
    return tuple(parts)


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    """True when ``prefix`` equals the leading elements of ``key``.

    >>> key_matches(("admin-clients", "bob"), ("admin-clients",))
    True
    >>> key_matches(("admin-clients",), ("admin-clients", "bob"))
    False
    """
    if len(prefix) > len(key):
        return False
    return key[: len(prefix)] == prefix
