"""Cart page routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request

from ..flows.cart_state import CartState
from ..flows.coupon import CouponApplication
from ..services.api_client import JsonApiClient
from ..services.coupon_service import CouponService
from .deps import (
    get_api_client,
    get_cart_state,
    get_session_id,
    keep_session,
    redirect_with_notice,
    templates,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("")
async def view_cart(
    request: Request,
    level: Optional[str] = Query(None),
    message: Optional[str] = Query(None),
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Cart page"""
    await cart.load()
    notices = [{"level": n.level.value, "message": n.message} for n in cart.notifier.drain()]
    if message:
        notices.insert(0, {"level": level or "info", "message": message})

    response = templates.TemplateResponse(
        request,
        "cart.html",
        {
            "cart": cart.cart,
            "items": cart.items,
            "notices": notices,
        },
    )
    return keep_session(request, response, session_id)


@router.post("/items")
async def add_item(
    request: Request,
    product_id: str = Form(...),
    quantity: int = Form(1),
    unit_price: Optional[float] = Form(None),
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Add a product to the cart"""
    await cart.load()
    await cart.add_product(product_id, quantity, unit_price)
    return redirect_with_notice(request, "/cart", cart.notifier, session_id)


@router.post("/items/{item_id}/quantity")
async def update_quantity(
    request: Request,
    item_id: str,
    quantity: int = Form(...),
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Change the quantity of a cart line"""
    await cart.update_item_quantity(item_id, quantity)
    return redirect_with_notice(request, "/cart", cart.notifier, session_id)


@router.post("/items/{item_id}/remove")
async def remove_item(
    request: Request,
    item_id: str,
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Remove a cart line"""
    await cart.remove_item(item_id)
    return redirect_with_notice(request, "/cart", cart.notifier, session_id)


@router.post("/clear")
async def clear_cart(
    request: Request,
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Remove every line of the cart"""
    await cart.load()
    await cart.clear_all_items()
    return redirect_with_notice(request, "/cart", cart.notifier, session_id)


@router.post("/coupon")
async def apply_coupon(
    request: Request,
    code: str = Form(...),
    client: JsonApiClient = Depends(get_api_client),
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Apply a coupon code to the cart"""
    await cart.load()
    coupons = CouponApplication(CouponService(client), cart)
    result = await coupons.apply_coupon(code)

    if not result.valid and not cart.notifier.notifications:
        # Business rejection: show the backend's reason
        return redirect_with_notice(request, "/cart", cart.notifier, session_id, message=result.error)

    return redirect_with_notice(request, "/cart", cart.notifier, session_id)


@router.post("/coupon/remove")
async def remove_coupon(
    request: Request,
    client: JsonApiClient = Depends(get_api_client),
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Remove the applied coupon"""
    await cart.load()
    coupons = CouponApplication(CouponService(client), cart)
    await coupons.remove_coupon()
    return redirect_with_notice(request, "/cart", cart.notifier, session_id)
