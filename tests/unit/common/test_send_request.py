"""Tests for the low-level send_request helper."""

from unittest.mock import patch

import httpx
import pytest

from common.exception.exceptions import TransportError
from common.utils.utils import send_request
from tests.fixtures.portal_fixtures import create_http_response, create_mock_http_client


@pytest.mark.asyncio
async def test_send_request_returns_raw_response_for_error_status():
    """Non-2xx responses are returned, not raised."""
    response = create_http_response(500, {"message": "boom"})
    mock_client = create_mock_http_client(response)

    with patch("httpx.AsyncClient", return_value=mock_client):
        result = await send_request(headers={}, url="https://api.test/packages", method="GET")

    assert result is response
    mock_client.get.assert_called_once()


@pytest.mark.asyncio
async def test_send_request_posts_json_body():
    """POST without form data sends JSON."""
    mock_client = create_mock_http_client(create_http_response(200, {}))

    with patch("httpx.AsyncClient", return_value=mock_client):
        await send_request(
            headers={"Accept": "application/json"},
            url="https://api.test/addresses",
            method="post",
            json={"name": "Home"},
        )

    kwargs = mock_client.post.call_args.kwargs
    assert kwargs["json"] == {"name": "Home"}
    assert "files" not in kwargs


@pytest.mark.asyncio
async def test_send_request_posts_multipart_when_files_given():
    """POST with files sends form data and files instead of JSON."""
    mock_client = create_mock_http_client(create_http_response(201, {}))
    files = {"product_image": ("shoe.jpg", b"data", "image/jpeg")}

    with patch("httpx.AsyncClient", return_value=mock_client):
        await send_request(
            headers={},
            url="https://api.test/buy-for-me-requests",
            method="POST",
            data={"product_name": "Shoe"},
            files=files,
        )

    kwargs = mock_client.post.call_args.kwargs
    assert kwargs["data"] == {"product_name": "Shoe"}
    assert kwargs["files"] == files


@pytest.mark.asyncio
async def test_send_request_wraps_network_errors():
    """httpx.RequestError becomes TransportError."""
    mock_client = create_mock_http_client(create_http_response(200, {}))
    mock_client.get.side_effect = httpx.ConnectError("connection refused")

    with patch("httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(TransportError) as exc_info:
            await send_request(headers={}, url="https://api.test/user", method="GET")

    assert "https://api.test/user" in str(exc_info.value)


@pytest.mark.asyncio
async def test_send_request_rejects_unknown_method():
    mock_client = create_mock_http_client(create_http_response(200, {}))

    with patch("httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(ValueError):
            await send_request(headers={}, url="https://api.test/user", method="TRACE")
