"""
Unit tests for PortalApiClient.

Covers token namespace selection and the error taxonomy.
"""

from unittest.mock import AsyncMock, patch

import pytest

from application.services.api.client import PortalApiClient
from common.exception.exceptions import (
    ApiError,
    TransportError,
    UnauthorizedError,
    ValidationApiError,
)
from tests.fixtures.portal_fixtures import create_http_response, create_sessions, envelope

SEND_REQUEST = "application.services.api.client.send_request"


def make_client(customer_token="cust-token", admin_token="admin-token"):
    sessions = create_sessions(customer_token=customer_token, admin_token=admin_token)
    return PortalApiClient(sessions, base_url="https://api.test/api/")


class TestAuthHeaders:
    """Test bearer token selection by path."""

    @pytest.mark.asyncio
    async def test_customer_path_uses_customer_token(self):
        client = make_client()
        mock_send = AsyncMock(return_value=create_http_response(200, envelope([])))

        with patch(SEND_REQUEST, mock_send):
            await client.get("/packages")

        kwargs = mock_send.call_args.kwargs
        assert kwargs["url"] == "https://api.test/api/packages"
        assert kwargs["headers"]["Authorization"] == "Bearer cust-token"

    @pytest.mark.asyncio
    async def test_admin_path_uses_admin_token(self):
        client = make_client()
        mock_send = AsyncMock(return_value=create_http_response(200, envelope([])))

        with patch(SEND_REQUEST, mock_send):
            await client.get("/admin/clients")

        assert mock_send.call_args.kwargs["headers"]["Authorization"] == "Bearer admin-token"

    @pytest.mark.asyncio
    async def test_no_token_sends_no_authorization_header(self):
        client = make_client(customer_token=None)
        mock_send = AsyncMock(return_value=create_http_response(200, envelope({})))

        with patch(SEND_REQUEST, mock_send):
            await client.get("/user")

        assert "Authorization" not in mock_send.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_skip_auth(self):
        client = make_client()
        mock_send = AsyncMock(return_value=create_http_response(200, envelope({})))

        with patch(SEND_REQUEST, mock_send):
            await client.post("/auth/login", json={"email": "a@b.c"}, skip_auth=True)

        assert "Authorization" not in mock_send.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_multipart_has_no_json_content_type(self):
        client = make_client()
        mock_send = AsyncMock(return_value=create_http_response(201, envelope({"id": 1})))

        with patch(SEND_REQUEST, mock_send):
            await client.post_multipart("/buy-for-me-requests", data={"product_name": "Shoe"})

        kwargs = mock_send.call_args.kwargs
        assert "Content-Type" not in kwargs["headers"]
        assert kwargs["data"] == {"product_name": "Shoe"}
        assert kwargs["files"] == {}

    @pytest.mark.asyncio
    async def test_empty_params_are_dropped(self):
        client = make_client()
        mock_send = AsyncMock(return_value=create_http_response(200, envelope([])))

        with patch(SEND_REQUEST, mock_send):
            await client.get("/admin/clients", params={"search": None, "page": "", "limit": 10})

        assert mock_send.call_args.kwargs["params"] == {"limit": 10}


class TestResponseHandling:
    """Test the mapping of status codes onto the error taxonomy."""

    @pytest.mark.asyncio
    async def test_success_returns_envelope(self):
        client = make_client()
        body = envelope({"id": 1, "name": "Alice"}, message="ok")

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(200, body))):
            result = await client.get("/user")

        assert result == body

    @pytest.mark.asyncio
    async def test_success_wraps_bare_list(self):
        client = make_client()

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(200, [1, 2]))):
            result = await client.get("/packages")

        assert result == {"success": True, "data": [1, 2]}

    @pytest.mark.asyncio
    async def test_success_wraps_empty_body(self):
        client = make_client()

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(204, None))):
            result = await client.delete("/addresses/3")

        assert result == {"success": True, "data": None}

    @pytest.mark.asyncio
    async def test_422_raises_validation_error_with_fields(self):
        client = make_client()
        body = {
            "message": "The given data was invalid.",
            "errors": {"street": ["The street field is required."], "city": "Too short"},
        }

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(422, body))):
            with pytest.raises(ValidationApiError) as exc_info:
                await client.post("/addresses", json={})

        error = exc_info.value
        assert error.status_code == 422
        assert error.message == "The given data was invalid."
        assert error.first_error("street") == "The street field is required."
        assert error.errors["city"] == ["Too short"]

    @pytest.mark.asyncio
    async def test_422_without_errors_is_generic(self):
        client = make_client()

        with patch(
            SEND_REQUEST,
            AsyncMock(return_value=create_http_response(422, {"message": "Nope"})),
        ):
            with pytest.raises(ApiError) as exc_info:
                await client.post("/addresses", json={})

        assert not isinstance(exc_info.value, ValidationApiError)
        assert exc_info.value.message == "Nope"

    @pytest.mark.asyncio
    async def test_401_raises_unauthorized(self):
        client = make_client()

        with patch(
            SEND_REQUEST,
            AsyncMock(return_value=create_http_response(401, {"message": "Unauthenticated."})),
        ):
            with pytest.raises(UnauthorizedError) as exc_info:
                await client.get("/auth/verify")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path,namespace",
        [("/wallet", "customer"), ("/admin/discounts/4", "admin")],
    )
    async def test_401_carries_the_session_that_sent_the_token(self, path, namespace):
        client = make_client()

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(401, None))):
            with pytest.raises(UnauthorizedError) as exc_info:
                await client.get(path)

        assert exc_info.value.session is getattr(client.sessions, namespace)
        assert exc_info.value.message == "API Error: 401"

    @pytest.mark.asyncio
    async def test_500_without_body_uses_fallback_message(self):
        client = make_client()

        with patch(SEND_REQUEST, AsyncMock(return_value=create_http_response(500, None))):
            with pytest.raises(ApiError) as exc_info:
                await client.get("/admin/stats")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "API Error: 500"

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        client = make_client()

        with patch(SEND_REQUEST, AsyncMock(side_effect=TransportError("Request failed"))):
            with pytest.raises(TransportError):
                await client.get("/user")
