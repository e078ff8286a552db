"""
Tests for the cart state flow.

Services are mocked; these tests cover state handling, notifications and
which calls are (or are not) issued. Malformed bodies are replayed through
the real services over FakeBackend.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from conftest import cart_record, item_record
from storefront.core.notifications import Notifier
from storefront.core.state import RequestPhase
from storefront.flows.cart_state import CartState
from storefront.models import Cart, CartItem, PlacedOrder
from storefront.services.api_client import ApiConnectionError, ApiError
from storefront.services.cart_service import CartItemService, CartService


def make_state(cart=None, items=None):
    carts = MagicMock()
    carts.get_current = AsyncMock(return_value=cart)
    carts.create = AsyncMock(return_value=Cart(id="new"))
    carts.clear = AsyncMock(return_value=None)
    carts.checkout = AsyncMock(return_value=PlacedOrder(id="900"))

    item_service = MagicMock()
    item_service.list = AsyncMock(return_value=items or [])
    item_service.add = AsyncMock(return_value=CartItem(id="10"))
    item_service.update_quantity = AsyncMock(return_value=CartItem(id="10", quantity=2))
    item_service.remove = AsyncMock(return_value=None)

    state = CartState(carts, item_service, notifier=Notifier("es"), session_id="sess-1")
    return state, carts, item_service


class TestLoad:
    """Test loading the cart."""

    @pytest.mark.asyncio
    async def test_load_cart_and_items(self):
        """Test the cart and its items are fetched."""
        state, carts, items = make_state(Cart(id="1"), [CartItem(id="10")])
        await state.load()

        assert state.cart.id == "1"
        assert [item.id for item in state.items] == ["10"]
        carts.get_current.assert_awaited_once_with(session_id="sess-1", customer_id=None)
        items.list.assert_awaited_once_with("1")
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_no_cart(self):
        """Test no cart means no item lookup."""
        state, carts, items = make_state(None)
        await state.load()

        assert state.cart is None
        assert state.items == []
        items.list.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_failure_keeps_state(self):
        """Test a failed load keeps the previous cart and notifies once."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        carts.get_current.side_effect = ApiError("boom", status_code=500)

        await state.load()

        assert state.cart.id == "1"
        assert len(state.notifier.errors) == 1
        assert state.notifier.errors[0].key == "load_failed"
        assert state.requests.get(CartState.LOAD).is_error


class TestAddProduct:
    """Test adding products."""

    @pytest.mark.asyncio
    async def test_creates_cart_lazily(self):
        """Test a cart is created before the first item."""
        state, carts, items = make_state(None)
        carts.get_current.return_value = None

        ok = await state.add_product("p1", 2, 50.0)

        assert ok is True
        kwargs = carts.create.await_args.kwargs
        assert kwargs["status"] == "active"
        assert kwargs["currency"] == "MXN"
        assert kwargs["session_id"] == "sess-1"
        assert kwargs["expires_at"]
        items.add.assert_awaited_once_with("new", "p1", 2, 50.0)

    @pytest.mark.asyncio
    async def test_existing_cart_is_reused(self):
        """Test no cart is created when one is loaded."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()

        await state.add_product("p1")

        carts.create.assert_not_awaited()
        items.add.assert_awaited_once_with("1", "p1", 1, None)

    @pytest.mark.asyncio
    async def test_add_failure_notifies(self):
        """Test a failed add returns False with one error notification."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        items.add.side_effect = ApiError("out of stock", status_code=422)

        ok = await state.add_product("p1")

        assert ok is False
        assert [n.key for n in state.notifier.errors] == ["add_failed"]
        assert not state.is_adding

    @pytest.mark.asyncio
    async def test_add_products_partial_failure(self):
        """Test a failed line does not undo earlier lines."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        items.add.side_effect = [CartItem(id="10"), ApiError("no stock", status_code=422), CartItem(id="12")]

        result = await state.add_products([
            {"product_id": "p1"},
            {"product_id": "p2", "quantity": 3},
            {"product_id": "p3"},
        ])

        assert [item.id for item in result.succeeded] == ["10", "12"]
        assert len(result.failed) == 1
        assert result.failed[0].input == {"product_id": "p2", "quantity": 3}
        assert result.failed[0].error == "no stock"
        assert result.partial
        assert not result.ok


class TestUpdateQuantity:
    """Test quantity changes."""

    @pytest.mark.asyncio
    async def test_quantity_below_one_makes_no_call(self):
        """Test quantity 0 is rejected locally."""
        state, carts, items = make_state(Cart(id="1"))

        ok = await state.update_item_quantity("10", 0)

        assert ok is False
        items.update_quantity.assert_not_awaited()
        assert state.notifier.errors[0].key == "quantity_min"

    @pytest.mark.asyncio
    async def test_update_refreshes(self):
        """Test a successful update refreshes the cart."""
        state, carts, items = make_state(Cart(id="1"))

        ok = await state.update_item_quantity("10", 2)

        assert ok is True
        items.update_quantity.assert_awaited_once_with("10", 2)
        carts.get_current.assert_awaited()
        assert not state.is_updating_item("10")

    @pytest.mark.asyncio
    async def test_rows_are_tracked_independently(self):
        """Test an in-flight update marks only its own row."""
        state, carts, items = make_state(Cart(id="1"))
        observed = {}

        async def slow_update(item_id, quantity):
            observed["10"] = state.is_updating_item("10")
            observed["11"] = state.is_updating_item("11")
            observed["any"] = state.is_updating
            return CartItem(id=item_id, quantity=quantity)

        items.update_quantity.side_effect = slow_update
        await state.update_item_quantity("10", 3)

        assert observed == {"10": True, "11": False, "any": True}


class TestRemoveItem:
    """Test item removal."""

    @pytest.mark.asyncio
    async def test_already_removed_is_success(self):
        """Test a 404 on removal is success without a notification."""
        state, carts, items = make_state(Cart(id="1"))
        items.remove.side_effect = ApiError("gone", status_code=404)

        assert await state.remove_item("10") is True
        assert state.notifier.notifications == []

    @pytest.mark.asyncio
    async def test_remove_twice(self):
        """Test removing the same item twice succeeds both times."""
        state, carts, items = make_state(Cart(id="1"))
        items.remove.side_effect = [None, ApiError("gone", status_code=404)]

        assert await state.remove_item("10") is True
        assert await state.remove_item("10") is True
        assert state.notifier.errors == []

    @pytest.mark.asyncio
    async def test_remove_failure(self):
        """Test other failures notify and return False."""
        state, carts, items = make_state(Cart(id="1"))
        items.remove.side_effect = ApiConnectionError("down")

        assert await state.remove_item("10") is False
        assert state.notifier.errors[0].key == "remove_failed"


class TestClear:
    """Test clearing the cart."""

    @pytest.mark.asyncio
    async def test_no_cart_is_noop(self):
        """Test clearing without a cart makes no call."""
        state, carts, items = make_state(None)

        assert await state.clear_all_items() is True
        carts.clear.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_not_found_is_success(self):
        """Test a 404 on clear counts as cleared."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        carts.clear.side_effect = ApiError("gone", status_code=404)

        assert await state.clear_all_items() is True
        assert state.notifier.errors == []


class TestCheckout:
    """Test cart checkout."""

    @pytest.mark.asyncio
    async def test_checkout_returns_order(self):
        """Test the placed order is returned and the cart refreshed."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        carts.get_current.return_value = None

        order = await state.checkout_cart({"customerName": "Ana"})

        assert order.id == "900"
        carts.checkout.assert_awaited_once_with("1", {"customerName": "Ana"})
        assert state.cart is None

    @pytest.mark.asyncio
    async def test_checkout_without_cart(self):
        """Test checkout with no cart reports an error."""
        state, carts, items = make_state(None)

        assert await state.checkout_cart({}) is None
        assert state.notifier.errors[0].key == "no_cart"
        carts.checkout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_checkout_failure(self):
        """Test a failed checkout keeps the cart and notifies."""
        state, carts, items = make_state(Cart(id="1"))
        await state.load()
        carts.checkout.side_effect = ApiError("payment declined", status_code=402)

        assert await state.checkout_cart({}) is None
        assert state.cart.id == "1"
        assert state.notifier.errors[0].key == "checkout_failed"
        assert not state.is_checking_out


class TestDispose:
    """Test disposal discards late results."""

    @pytest.mark.asyncio
    async def test_completion_after_dispose_is_discarded(self):
        """Test a response arriving after dispose leaves state and notifications untouched."""
        state, carts, items = make_state(Cart(id="1"))

        async def late_failure(*args, **kwargs):
            state.dispose()
            raise ApiError("boom", status_code=500)

        carts.get_current.side_effect = late_failure
        await state.load()

        assert state.cart is None
        assert state.notifier.notifications == []

    @pytest.mark.asyncio
    async def test_success_after_dispose_is_discarded(self):
        """Test a late success does not replace the cart."""
        state, carts, items = make_state(Cart(id="1"))

        async def late_success(*args, **kwargs):
            state.dispose()
            return Cart(id="2")

        carts.get_current.side_effect = late_success
        await state.load()

        assert state.cart is None
        assert state.is_disposed


class TestMalformedResponses:
    """Test responses that do not parse are handled like failed calls."""

    @pytest.mark.asyncio
    async def test_null_current_cart_is_no_cart(self, backend, make_client):
        """Test {"data": null} leaves the user without a cart and no error."""
        backend.on("GET", "/api/v1/shopping-carts/current", body={"data": None})
        async with make_client() as client:
            state = CartState(CartService(client), CartItemService(client), notifier=Notifier("es"))
            assert await state.load() is None

        assert state.notifier.errors == []
        assert state.requests.get(CartState.LOAD).phase == RequestPhase.SUCCESS
        assert backend.requests_to("GET", "/api/v1/cart-items") == []

    @pytest.mark.asyncio
    async def test_zero_quantity_item_fails_load(self, backend, make_client):
        """Test an item the models reject keeps the previous cart and notifies."""
        backend.on("GET", "/api/v1/shopping-carts/current", body={"data": cart_record("1")})
        backend.on("GET", "/api/v1/cart-items", body={"data": [item_record("10", quantity=0)]})
        async with make_client() as client:
            state = CartState(CartService(client), CartItemService(client), notifier=Notifier("es"))
            state.cart = Cart(id="old")

            assert (await state.load()).id == "old"

        assert state.items == []
        assert [n.key for n in state.notifier.errors] == ["load_failed"]
        assert state.requests.get(CartState.LOAD).is_error

    @pytest.mark.asyncio
    async def test_item_without_data_fails_add(self, backend, make_client):
        """Test a created item response without data notifies instead of raising."""
        backend.on("POST", "/api/v1/cart-items", status=201, body={"success": True})
        async with make_client() as client:
            state = CartState(CartService(client), CartItemService(client), notifier=Notifier("es"))
            state.cart = Cart(id="1")

            assert await state.add_product("p1") is False

        assert state.notifier.errors[0].key == "add_failed"
