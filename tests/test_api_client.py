"""
Tests for the JSON:API client.
"""

import httpx
import pytest

from storefront.services.api_client import (
    ApiConnectionError,
    ApiError,
    JsonApiClient,
    error_message,
    relationship,
    resource_document,
)


class TestHeaders:
    """Test request headers."""

    @pytest.mark.asyncio
    async def test_bearer_token_is_sent(self, backend, make_client):
        """Test injected token ends up in the Authorization header."""
        backend.on("GET", "/ping", body={"ok": True})
        async with make_client(token="abc123") as client:
            await client.get("/ping")

        request = backend.calls[0]
        assert request.headers["Authorization"] == "Bearer abc123"
        assert request.headers["Accept"] == "application/vnd.api+json"

    @pytest.mark.asyncio
    async def test_no_token_no_authorization(self, backend, make_client):
        """Test anonymous calls carry no Authorization header."""
        backend.on("GET", "/ping", body={"ok": True})
        async with make_client() as client:
            await client.get("/ping")

        assert "Authorization" not in backend.calls[0].headers

    @pytest.mark.asyncio
    async def test_token_provider_is_called_per_request(self, backend):
        """Test a token provider supplies the current token."""
        backend.on("GET", "/ping", body={})
        tokens = iter(["first", "second"])
        client = JsonApiClient(
            "http://backend.test",
            token_provider=lambda: next(tokens),
            transport=httpx.MockTransport(backend),
        )
        await client.get("/ping")
        await client.get("/ping")
        await client.close()

        assert backend.calls[0].headers["Authorization"] == "Bearer first"
        assert backend.calls[1].headers["Authorization"] == "Bearer second"


class TestErrors:
    """Test error mapping."""

    @pytest.mark.asyncio
    async def test_http_error_raises_api_error(self, backend, make_client):
        """Test status >= 400 raises ApiError with the backend message."""
        backend.on("GET", "/boom", status=500, body={"message": "Server exploded"})
        async with make_client() as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get("/boom")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Server exploded"
        assert not exc_info.value.is_not_found

    @pytest.mark.asyncio
    async def test_not_found(self, backend, make_client):
        """Test 404 is flagged as not found."""
        async with make_client() as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get("/missing")

        assert exc_info.value.is_not_found

    @pytest.mark.asyncio
    async def test_transport_failure(self, backend, make_client):
        """Test network failures raise ApiConnectionError without a status."""
        backend.fail_connection("GET", "/down")
        async with make_client() as client:
            with pytest.raises(ApiConnectionError) as exc_info:
                await client.get("/down")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, backend, make_client):
        """Test 204 responses decode to None."""
        backend.on("DELETE", "/thing", status=204)
        async with make_client() as client:
            assert await client.delete("/thing") is None

    @pytest.mark.asyncio
    async def test_non_object_body_raises_type_error(self, backend, make_client):
        """Test a successful response must decode to a JSON object."""
        backend.on("GET", "/thing", body=[{"id": 1}])
        async with make_client() as client:
            with pytest.raises(TypeError):
                await client.get("/thing")

    def test_error_message_from_jsonapi_errors(self):
        """Test errors[0].detail is used when present."""
        payload = {"errors": [{"title": "Invalid", "detail": "Quantity too large"}]}
        assert error_message(payload, "fallback") == "Quantity too large"

    def test_error_message_default(self):
        """Test the default is used for unknown bodies."""
        assert error_message(None, "HTTP 500") == "HTTP 500"
        assert error_message({"foo": "bar"}, "HTTP 500") == "HTTP 500"


class TestDocuments:
    """Test request document builders."""

    def test_resource_document(self):
        """Test attributes and relationships are wrapped in data."""
        document = resource_document(
            "cart-items",
            {"quantity": 2},
            relationships={"product": relationship("products", 7)},
        )
        assert document == {
            "data": {
                "type": "cart-items",
                "attributes": {"quantity": 2},
                "relationships": {"product": {"data": {"type": "products", "id": "7"}}},
            }
        }

    def test_resource_document_with_id(self):
        """Test updates carry the resource id."""
        document = resource_document("shopping-carts", {}, resource_id=5)
        assert document["data"]["id"] == "5"
