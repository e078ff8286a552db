"""
Cart state for a page view.

Holds the current cart, its items and per-operation request state, and
exposes the mutations the cart and checkout pages need. Failures are
logged and reported through the Notifier; nothing is raised to the caller.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from ..core.config import settings
from ..core.notifications import Notifier
from ..core.state import BatchFailure, BatchResult, RequestTracker
from ..models.cart import Cart, CartItem, CartStatus
from ..models.order import PlacedOrder
from ..services.api_client import BACKEND_ERRORS, ApiError, failure_reason
from ..services.cart_service import CartItemService, CartService

logger = logging.getLogger(__name__)


class CartState:
    """Current cart plus the operations that change it"""

    LOAD = "load"
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    CLEAR = "clear"
    CHECKOUT = "checkout"

    def __init__(
        self,
        carts: CartService,
        items: CartItemService,
        notifier: Optional[Notifier] = None,
        session_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ):
        self.carts = carts
        self.item_service = items
        self.notifier = notifier or Notifier(settings.locale)
        self.session_id = session_id
        self.customer_id = customer_id

        self.cart: Optional[Cart] = None
        self.items: list[CartItem] = []
        self.requests = RequestTracker()
        self._disposed = False

    # Flags

    @property
    def is_loading(self) -> bool:
        return self.requests.is_pending(self.LOAD)

    @property
    def is_adding(self) -> bool:
        return self.requests.is_pending(self.ADD)

    @property
    def is_updating(self) -> bool:
        return self.requests.any_pending(self.UPDATE)

    @property
    def is_removing(self) -> bool:
        return self.requests.any_pending(self.REMOVE)

    @property
    def is_clearing(self) -> bool:
        return self.requests.is_pending(self.CLEAR)

    @property
    def is_checking_out(self) -> bool:
        return self.requests.is_pending(self.CHECKOUT)

    def is_updating_item(self, item_id: str) -> bool:
        """Per-row marker for an in-flight quantity update"""
        return self.requests.is_pending(self.UPDATE, str(item_id))

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Discard the results of any request still in flight"""
        self._disposed = True

    # Reads

    async def load(self) -> Optional[Cart]:
        """Fetch the current cart and its items"""
        self.requests.start(self.LOAD)
        try:
            cart = await self.carts.get_current(
                session_id=self.session_id,
                customer_id=self.customer_id,
            )
            items = await self.item_service.list(cart.id) if cart else []
        except BACKEND_ERRORS as e:
            logger.error(f"Error loading cart: {e}")
            if not self._disposed:
                self.requests.fail(self.LOAD, failure_reason(e))
                self.notifier.error("load_failed")
            return self.cart

        if self._disposed:
            return self.cart

        self.cart = cart
        self.items = items
        if cart is not None:
            cart.items = items
        self.requests.succeed(self.LOAD)
        return self.cart

    async def refresh(self) -> Optional[Cart]:
        return await self.load()

    # Mutations

    async def _ensure_cart(self) -> Cart:
        """Create an active cart when the user has none yet"""
        if self.cart is not None:
            return self.cart

        expires_at = datetime.utcnow() + timedelta(days=settings.cart_ttl_days)
        cart = await self.carts.create(
            session_id=self.session_id,
            user_id=self.customer_id,
            status=CartStatus.ACTIVE.value,
            currency=settings.currency,
            expires_at=expires_at.isoformat(),
            total_amount=0,
            tax_amount=0,
            discount_amount=0,
            shipping_amount=0,
        )
        logger.info(f"Created cart {cart.id} (session={self.session_id})")
        if not self._disposed:
            self.cart = cart
        return cart

    async def add_product(
        self,
        product_id: str,
        quantity: int = 1,
        unit_price: Optional[float] = None,
    ) -> bool:
        """Add a product, creating the cart first if needed"""
        if quantity < 1:
            self.notifier.error("quantity_min")
            return False

        self.requests.start(self.ADD)
        try:
            cart = await self._ensure_cart()
            await self.item_service.add(cart.id, product_id, quantity, unit_price)
        except BACKEND_ERRORS as e:
            logger.error(f"Error adding product {product_id} to cart: {e}")
            if not self._disposed:
                self.requests.fail(self.ADD, failure_reason(e))
                self.notifier.error("add_failed")
            return False

        if self._disposed:
            return True

        self.requests.succeed(self.ADD)
        await self.refresh()
        return True

    async def add_products(self, lines: list[dict[str, Any]]) -> BatchResult[dict[str, Any]]:
        """
        Add several lines one after another.

        Each line is a dict with product_id and optional quantity/unit_price.
        A failed line does not undo the lines already added.
        """
        result: BatchResult[dict[str, Any]] = BatchResult()
        self.requests.start(self.ADD)

        for line in lines:
            try:
                cart = await self._ensure_cart()
                item = await self.item_service.add(
                    cart.id,
                    line["product_id"],
                    line.get("quantity", 1),
                    line.get("unit_price"),
                )
            except BACKEND_ERRORS as e:
                logger.error(f"Error adding product {line.get('product_id')} to cart: {e}")
                result.failed.append(BatchFailure(input=line, error=failure_reason(e)))
                continue
            result.succeeded.append(item)

        if self._disposed:
            return result

        if result.failed:
            self.requests.fail(self.ADD, f"{len(result.failed)} of {len(lines)} lines failed")
            self.notifier.error("add_failed")
        else:
            self.requests.succeed(self.ADD)

        if result.succeeded:
            await self.refresh()
        return result

    async def update_item_quantity(self, item_id: str, quantity: int) -> bool:
        """Change the quantity of one line; below 1 is rejected locally"""
        if quantity < 1:
            self.notifier.error("quantity_min")
            return False

        item_id = str(item_id)
        self.requests.start(self.UPDATE, item_id)
        try:
            await self.item_service.update_quantity(item_id, quantity)
        except BACKEND_ERRORS as e:
            logger.error(f"Error updating cart item {item_id}: {e}")
            if not self._disposed:
                self.requests.fail(self.UPDATE, failure_reason(e), item_id)
                self.notifier.error("update_failed")
            return False

        if self._disposed:
            return True

        self.requests.succeed(self.UPDATE, item_id)
        await self.refresh()
        return True

    async def remove_item(self, item_id: str) -> bool:
        """Remove one line; an item that is already gone counts as removed"""
        item_id = str(item_id)
        self.requests.start(self.REMOVE, item_id)
        try:
            await self.item_service.remove(item_id)
        except BACKEND_ERRORS as e:
            if not (isinstance(e, ApiError) and e.is_not_found):
                logger.error(f"Error removing cart item {item_id}: {e}")
                if not self._disposed:
                    self.requests.fail(self.REMOVE, failure_reason(e), item_id)
                    self.notifier.error("remove_failed")
                return False
            logger.debug(f"Cart item {item_id} was already removed")

        if self._disposed:
            return True

        self.requests.succeed(self.REMOVE, item_id)
        await self.refresh()
        return True

    async def clear_all_items(self) -> bool:
        """Empty the cart; no cart means nothing to do"""
        if self.cart is None:
            return True

        self.requests.start(self.CLEAR)
        try:
            await self.carts.clear(self.cart.id)
        except BACKEND_ERRORS as e:
            if not (isinstance(e, ApiError) and e.is_not_found):
                logger.error(f"Error clearing cart {self.cart.id}: {e}")
                if not self._disposed:
                    self.requests.fail(self.CLEAR, failure_reason(e))
                    self.notifier.error("clear_failed")
                return False

        if self._disposed:
            return True

        self.requests.succeed(self.CLEAR)
        await self.refresh()
        return True

    async def checkout_cart(self, order_data: dict[str, Any]) -> Optional[PlacedOrder]:
        """Turn the cart into an order; returns the order reference or None"""
        if self.cart is None:
            self.notifier.error("no_cart")
            return None

        self.requests.start(self.CHECKOUT)
        try:
            order = await self.carts.checkout(self.cart.id, order_data)
        except BACKEND_ERRORS + (ValueError,) as e:
            logger.error(f"Error during checkout of cart {self.cart.id}: {e}")
            if not self._disposed:
                self.requests.fail(self.CHECKOUT, failure_reason(e))
                self.notifier.error("checkout_failed")
            return None

        if self._disposed:
            return order

        self.requests.succeed(self.CHECKOUT)
        await self.refresh()
        return order
