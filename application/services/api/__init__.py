"""Portal API client package."""

from application.services.api.account import AccountOperations
from application.services.api.admin import AdminOperations
from application.services.api.auth import AuthOperations
from application.services.api.chat import ChatOperations
from application.services.api.client import PortalApiClient
from application.services.api.packages import PackageOperations
from application.services.api.requests import BuyForMeOperations, NotificationOperations

__all__ = [
    "AccountOperations",
    "AdminOperations",
    "AuthOperations",
    "BuyForMeOperations",
    "ChatOperations",
    "NotificationOperations",
    "PackageOperations",
    "PortalApiClient",
]
