"""
Portal API client for making authenticated requests.

Picks the bearer token from the customer or admin session depending on
the request path and turns error responses into the exceptions defined in
``common.exception.exceptions``.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from common.auth.session import PortalSessions, SessionContext
from common.config.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from common.exception.exceptions import (
    ApiError,
    UnauthorizedError,
    ValidationApiError,
)
from common.utils.utils import send_request

logger = logging.getLogger(__name__)


class PortalApiClient:
    """HTTP client wrapper for the portal REST API."""

    def __init__(
        self,
        sessions: PortalSessions,
        base_url: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        """Initialize the API client.

        Args:
            sessions: Customer and admin session contexts
            base_url: API root (defaults to API_BASE_URL)
            timeout: Request timeout in seconds
        """
        self.sessions = sessions
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.timeout = timeout

    def session_for(self, path: str) -> SessionContext:
        return self.sessions.for_path(path)

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _build_headers(self, path: str, skip_auth: bool, json_body: bool) -> Dict[str, str]:
        """Build request headers.

        Args:
            path: API path, used to select the token namespace
            skip_auth: Do not send the Authorization header
            json_body: Request carries a JSON body (not multipart)

        Returns:
            Headers dictionary
        """
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"

        if not skip_auth:
            token = self.session_for(path).token
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        skip_auth: bool = False,
    ) -> Dict[str, Any]:
        """Make a portal API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path relative to the base URL
            json: JSON request body
            params: Query parameters; None values are dropped
            data: Multipart form fields
            files: Multipart file fields
            skip_auth: Do not send the bearer token

        Returns:
            Parsed response envelope ({"success", "data", "message"})

        Raises:
            ValidationApiError: On HTTP 422 with field errors
            UnauthorizedError: On HTTP 401
            ApiError: On any other non-2xx status
            TransportError: On network failure
        """
        url = self._build_url(path)
        multipart = files is not None or data is not None
        headers = self._build_headers(path, skip_auth, json_body=not multipart)
        clean_params = None
        if params:
            clean_params = {k: v for k, v in params.items() if v is not None and v != ""}

        response = await send_request(
            headers=headers,
            url=url,
            method=method,
            params=clean_params or None,
            json=json,
            data=data,
            files=files,
            timeout=self.timeout,
        )
        return self._process_response(response, method, url, self.session_for(path))

    def _process_response(
        self,
        response: httpx.Response,
        method: str,
        url: str,
        session: Optional[SessionContext] = None,
    ) -> Dict[str, Any]:
        """Process HTTP response and extract the envelope.

        Args:
            response: HTTP response object
            method: HTTP method used
            url: Request URL
            session: Session whose token was sent, attached to 401 errors

        Returns:
            Response envelope; a body that is not a JSON object (including an
            empty body) is wrapped as ``{"success": True, "data": body}``

        Raises:
            ApiError: If response status indicates failure
        """
        body = self._parse_body(response)
        status = response.status_code

        if 200 <= status < 300:
            logger.debug(f"{method.upper()} {url} succeeded (status: {status})")
            return body if isinstance(body, dict) else {"success": True, "data": body}

        message = None
        if isinstance(body, dict):
            message = body.get("message")

        if status == 422 and isinstance(body, dict) and body.get("errors"):
            logger.warning(f"{method.upper()} {url} rejected with validation errors")
            raise ValidationApiError(
                message or "Validation failed",
                errors=_normalize_field_errors(body["errors"]),
            )

        if status == 401:
            logger.warning(f"{method.upper()} {url} unauthorized")
            raise UnauthorizedError(message or f"API Error: {status}", session=session)

        error_msg = message or f"API Error: {status}"
        logger.error(f"{method.upper()} {url} failed (status {status}): {error_msg}")
        raise ApiError(error_msg, status)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    async def get(
        self, path: str, params: Optional[Dict[str, Any]] = None, skip_auth: bool = False
    ) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, skip_auth=skip_auth)

    async def post(
        self, path: str, json: Optional[Any] = None, skip_auth: bool = False
    ) -> Dict[str, Any]:
        return await self.request("POST", path, json=json, skip_auth=skip_auth)

    async def put(self, path: str, json: Optional[Any] = None) -> Dict[str, Any]:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Dict[str, Any]:
        return await self.request("DELETE", path)

    async def post_multipart(
        self,
        path: str,
        data: Dict[str, Any],
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """POST a multipart form (file uploads)."""
        return await self.request("POST", path, data=data, files=files or {})


def _normalize_field_errors(raw: Any) -> Dict[str, list]:
    """Coerce the server's ``errors`` object into ``{field: [messages]}``."""
    if not isinstance(raw, dict):
        return {"_": [str(raw)]}
    normalized = {}
    for field, messages in raw.items():
        if isinstance(messages, (list, tuple)):
            normalized[str(field)] = [str(m) for m in messages]
        else:
            normalized[str(field)] = [str(messages)]
    return normalized
