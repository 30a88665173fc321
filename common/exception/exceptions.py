"""
Exceptions raised by the portal API client.

Taxonomy:
- ValidationApiError: HTTP 422 with field-keyed message lists
- UnauthorizedError: HTTP 401, the session token was rejected
- ApiError: any other non-2xx response
- TransportError: the request never produced an HTTP response
"""

from typing import Any, Dict, List, Optional


class PortalError(Exception):
    """Base class for all portal client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(PortalError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationApiError(ApiError):
    """Raised on HTTP 422; carries per-field error messages."""

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        status_code: int = 422,
    ):
        super().__init__(message, status_code)
        self.errors = errors or {}

    def first_error(self, field: str) -> Optional[str]:
        """Return the first message reported for a field, if any."""
        messages = self.errors.get(field) or []
        return messages[0] if messages else None


class UnauthorizedError(ApiError):
    """Raised on HTTP 401.

    ``session`` is the session context whose token was rejected, when the
    request went through the API client.
    """

    def __init__(
        self,
        message: str = "Unauthenticated",
        status_code: int = 401,
        session: Optional[Any] = None,
    ):
        super().__init__(message, status_code)
        self.session = session


class TransportError(PortalError):
    """Raised on network failures (DNS, refused connection, timeout)."""

    pass


__all__ = [
    "PortalError",
    "ApiError",
    "ValidationApiError",
    "UnauthorizedError",
    "TransportError",
]
