"""
Shopping Cart Service

Cart and cart-item calls against the JSON:API backend.
"""

import logging
from typing import Any, Optional

from ..models.cart import Cart, CartItem
from ..models.order import PlacedOrder
from .api_client import ApiError, JsonApiClient, relationship, resource_document

logger = logging.getLogger(__name__)

CARTS_PATH = "/api/v1/shopping-carts"
CART_ITEMS_PATH = "/api/v1/cart-items"


def _drop_none(attributes: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in attributes.items() if value is not None}


class CartService:
    """Shopping cart endpoints"""

    def __init__(self, client: JsonApiClient):
        self.client = client

    async def get_current(
        self,
        session_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> Optional[Cart]:
        """
        Get the active cart for an anonymous session or the authenticated caller.

        The customer is resolved by the backend from the bearer token, so
        customer_id is never sent. Returns None when there is no cart yet.
        """
        params = {}
        if session_id:
            params["session_id"] = session_id

        try:
            body = await self.client.get(f"{CARTS_PATH}/current", params=params)
        except ApiError as e:
            if e.is_not_found:
                logger.debug(f"No active cart (session={session_id}, customer={customer_id})")
                return None
            raise

        data = (body or {}).get("data")
        if not data:
            logger.debug(f"No active cart (session={session_id}, customer={customer_id})")
            return None
        return Cart.from_api(data)

    async def get_by_id(self, cart_id: str) -> Cart:
        """Get cart by ID, with its items when the backend includes them"""
        body = await self.client.get(
            f"{CARTS_PATH}/{cart_id}",
            params={"include": "cartItems,cartItems.product"},
        )
        cart = Cart.from_api(body["data"])

        included = body.get("included") or []
        items = [
            CartItem.from_api(record)
            for record in included
            if record.get("type") == "cart-items"
        ]
        if items:
            cart.items = items
        return cart

    async def create(
        self,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: str = "active",
        currency: str = "MXN",
        expires_at: Optional[str] = None,
        **amounts: Any,
    ) -> Cart:
        """Create a new shopping cart"""
        attributes = {
            "sessionId": session_id,
            "userId": user_id,
            "status": status,
            "currency": currency,
            "expiresAt": expires_at,
            "totalAmount": amounts.get("total_amount", 0),
            "taxAmount": amounts.get("tax_amount", 0),
            "discountAmount": amounts.get("discount_amount", 0),
            "shippingAmount": amounts.get("shipping_amount", 0),
        }
        body = await self.client.post(
            CARTS_PATH,
            body=resource_document("shopping-carts", _drop_none(attributes)),
        )
        return Cart.from_api(body["data"])

    async def update_totals(
        self,
        cart_id: str,
        subtotal_amount: float,
        tax_amount: float,
        total_amount: float,
    ) -> Cart:
        """Update cart totals (partial attributes)"""
        body = await self.client.patch(
            f"{CARTS_PATH}/{cart_id}",
            body=resource_document(
                "shopping-carts",
                {
                    "subtotalAmount": subtotal_amount,
                    "taxAmount": tax_amount,
                    "totalAmount": total_amount,
                },
                resource_id=cart_id,
            ),
        )
        return Cart.from_api(body["data"])

    async def clear(self, cart_id: str) -> None:
        """Delete all items of a cart"""
        await self.client.delete(f"{CARTS_PATH}/{cart_id}/clear")

    async def delete(self, cart_id: str) -> None:
        """Delete a cart"""
        await self.client.delete(f"{CARTS_PATH}/{cart_id}")

    async def checkout(self, cart_id: str, order_data: dict[str, Any]) -> PlacedOrder:
        """Convert the cart into an order"""
        body = await self.client.post(f"{CARTS_PATH}/{cart_id}/checkout", body=order_data)
        order = PlacedOrder.from_response(body or {})
        logger.info(f"Cart {cart_id} checked out as order {order.id}")
        return order


class CartItemService:
    """Cart item endpoints"""

    def __init__(self, client: JsonApiClient):
        self.client = client

    async def list(self, cart_id: str) -> list[CartItem]:
        """Get all items of a cart"""
        body = await self.client.get(
            CART_ITEMS_PATH,
            params={"filter[shopping_cart_id]": cart_id},
        )
        return [CartItem.from_api(record) for record in body.get("data", [])]

    async def get_by_id(self, item_id: str) -> CartItem:
        body = await self.client.get(
            f"{CART_ITEMS_PATH}/{item_id}",
            params={"include": "product"},
        )
        return CartItem.from_api(body["data"])

    async def add(
        self,
        cart_id: str,
        product_id: str,
        quantity: int = 1,
        unit_price: Optional[float] = None,
        product_variant_id: Optional[str] = None,
    ) -> CartItem:
        """Add a product to the cart"""
        price = unit_price if unit_price is not None else 0
        relationships = {
            "shoppingCart": relationship("shopping-carts", cart_id),
            "product": relationship("products", product_id),
        }
        if product_variant_id is not None:
            relationships["productVariant"] = relationship("product-variants", product_variant_id)

        body = await self.client.post(
            CART_ITEMS_PATH,
            body=resource_document(
                "cart-items",
                {
                    "quantity": quantity,
                    "unitPrice": price,
                    "originalPrice": price,
                },
                relationships=relationships,
            ),
        )
        return CartItem.from_api(body["data"])

    async def update_quantity(self, item_id: str, quantity: int) -> CartItem:
        """Update item quantity"""
        body = await self.client.patch(
            f"{CART_ITEMS_PATH}/{item_id}",
            body=resource_document("cart-items", {"quantity": quantity}, resource_id=item_id),
        )
        return CartItem.from_api(body["data"])

    async def remove(self, item_id: str) -> None:
        """Remove an item from the cart"""
        await self.client.delete(f"{CART_ITEMS_PATH}/{item_id}")
