"""Client-side constants shared across services."""

# ============================================================================
# Session storage keys
# ============================================================================

# Customer session slots
CUSTOMER_TOKEN_KEY = "auth_token"
CUSTOMER_USER_KEY = "user"

# Admin session slots
ADMIN_TOKEN_KEY = "adminToken"
ADMIN_USER_KEY = "adminUser"

# Paths starting with this prefix use the admin session
ADMIN_PATH_PREFIX = "/admin"

# ============================================================================
# Client-side routes
# ============================================================================

CUSTOMER_LOGIN_ROUTE = "/login"
ADMIN_LOGIN_ROUTE = "/admin/login"

# ============================================================================
# Notifications
# ============================================================================

SESSION_EXPIRED_TITLE = "Session expired"
SESSION_EXPIRED_DESCRIPTION = "Please log in again"

__all__ = [
    "CUSTOMER_TOKEN_KEY",
    "CUSTOMER_USER_KEY",
    "ADMIN_TOKEN_KEY",
    "ADMIN_USER_KEY",
    "ADMIN_PATH_PREFIX",
    "CUSTOMER_LOGIN_ROUTE",
    "ADMIN_LOGIN_ROUTE",
    "SESSION_EXPIRED_TITLE",
    "SESSION_EXPIRED_DESCRIPTION",
]
