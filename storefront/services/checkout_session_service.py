"""
Checkout Session Service

Server-side checkout sessions: created from a cart, then updated with
shipping, billing and payment details until they reach a final status.
"""

import logging
from typing import Any, Optional

from pydantic.alias_generators import to_camel

from ..models.checkout import CheckoutSession
from .api_client import JsonApiClient, resource_document

logger = logging.getLogger(__name__)

CHECKOUT_SESSIONS_PATH = "/api/v1/checkout-sessions"


class CheckoutSessionService:
    """Checkout session endpoints"""

    def __init__(self, client: JsonApiClient):
        self.client = client

    async def create(
        self,
        shopping_cart_id: str,
        shipping_address_id: Optional[str] = None,
        billing_address_id: Optional[str] = None,
    ) -> CheckoutSession:
        """Open a checkout session for a cart"""
        attributes: dict[str, Any] = {"shoppingCartId": shopping_cart_id}
        if shipping_address_id is not None:
            attributes["shippingAddressId"] = shipping_address_id
        if billing_address_id is not None:
            attributes["billingAddressId"] = billing_address_id

        body = await self.client.post(
            CHECKOUT_SESSIONS_PATH,
            body=resource_document("checkout-sessions", attributes),
        )
        session = CheckoutSession.from_api(body["data"])
        logger.info(f"Checkout session {session.id} created for cart {shopping_cart_id}")
        return session

    async def get_by_id(self, session_id: str) -> CheckoutSession:
        body = await self.client.get(
            f"{CHECKOUT_SESSIONS_PATH}/{session_id}",
            params={"include": "shoppingCart,shippingAddress,billingAddress"},
        )
        return CheckoutSession.from_api(body["data"])

    async def update(self, session_id: str, **changes: Any) -> CheckoutSession:
        """
        Partial update.

        Keyword names are snake_case field names (shipping_method,
        shipping_amount, status, ...) and are sent as camelCase attributes.
        """
        attributes = {to_camel(key): value for key, value in changes.items()}
        body = await self.client.patch(
            f"{CHECKOUT_SESSIONS_PATH}/{session_id}",
            body=resource_document("checkout-sessions", attributes, resource_id=session_id),
        )
        return CheckoutSession.from_api(body["data"])
