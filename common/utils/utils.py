"""Low-level HTTP helper shared by the API client."""

import logging
from typing import Any, Dict, Optional

import httpx

from common.config.config import HTTP_CONNECT_TIMEOUT_SECONDS, HTTP_TIMEOUT_SECONDS
from common.exception.exceptions import TransportError

logger = logging.getLogger(__name__)


async def send_request(
    headers: Dict[str, str],
    url: str,
    method: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Any] = None,
    data: Optional[Dict[str, Any]] = None,
    files: Optional[Dict[str, Any]] = None,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> httpx.Response:
    """Send one HTTP request and return the raw response.

    Status codes are not interpreted here; the caller decides what a
    non-2xx response means.

    Args:
        headers: Request headers
        url: Absolute URL
        method: HTTP method (GET, POST, PUT, DELETE, PATCH)
        params: Query parameters
        json: JSON body
        data: Form fields (multipart requests)
        files: Multipart file fields
        timeout: Request timeout in seconds

    Returns:
        HTTP response

    Raises:
        TransportError: If no response was received
        ValueError: If the HTTP method is unsupported
    """
    method_upper = method.upper()
    timeout_config = httpx.Timeout(timeout, connect=HTTP_CONNECT_TIMEOUT_SECONDS)

    try:
        async with httpx.AsyncClient(timeout=timeout_config, trust_env=False) as client:
            if method_upper == "GET":
                return await client.get(url, headers=headers, params=params)
            elif method_upper == "POST":
                if files is not None or data is not None:
                    return await client.post(
                        url, data=data, files=files, headers=headers, params=params
                    )
                return await client.post(url, json=json, headers=headers, params=params)
            elif method_upper == "PUT":
                return await client.put(url, json=json, headers=headers, params=params)
            elif method_upper == "DELETE":
                return await client.delete(url, headers=headers, params=params)
            elif method_upper == "PATCH":
                return await client.patch(url, json=json, headers=headers, params=params)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")
    except httpx.RequestError as e:
        error_msg = f"Request to {url} failed: {e}"
        logger.error(error_msg)
        raise TransportError(error_msg) from e
