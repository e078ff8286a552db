"""
Shared fixtures: a backend stand-in built on httpx.MockTransport.
"""

import json

import httpx
import pytest

from storefront.services.api_client import JsonApiClient


class FakeBackend:
    """
    Routes requests to canned responses and records every call.

    Handlers are registered per (method, path); a handler is either a
    (status, body) tuple or a callable taking the httpx.Request.
    """

    def __init__(self):
        self.routes = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body=None, handler=None):
        self.routes[(method.upper(), path)] = handler or (status, body)
        return self

    def fail_connection(self, method: str, path: str):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        return self.on(method, path, handler=handler)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.method == method and r.url.path == path]

    @staticmethod
    def body_of(request: httpx.Request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_client(backend):
    def factory(token=None):
        return JsonApiClient(
            "http://backend.test",
            token=token,
            transport=httpx.MockTransport(backend),
        )

    return factory


def cart_record(cart_id="1", **attributes):
    """JSON:API shopping-carts record"""
    base = {
        "sessionId": "sess-1",
        "status": "active",
        "currency": "MXN",
        "subtotalAmount": "100.00",
        "taxAmount": "16.00",
        "discountAmount": "0",
        "shippingAmount": "0",
        "totalAmount": "116.00",
        "itemsCount": 1,
    }
    base.update(attributes)
    return {"id": cart_id, "type": "shopping-carts", "attributes": base}


def item_record(item_id="10", cart_id="1", product_id="p1", quantity=1, **attributes):
    """JSON:API cart-items record"""
    base = {
        "shoppingCartId": cart_id,
        "productId": product_id,
        "productName": "Camiseta",
        "quantity": quantity,
        "unitPrice": "100.00",
        "subtotal": str(100.0 * quantity),
        "taxAmount": "16.00",
        "total": str(100.0 * quantity + 16),
    }
    base.update(attributes)
    return {"id": item_id, "type": "cart-items", "attributes": base}
