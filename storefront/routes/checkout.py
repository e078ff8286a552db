"""Checkout page routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from ..flows.cart_state import CartState
from ..flows.checkout_page import CheckoutForm, CheckoutPage
from ..services.api_client import BACKEND_ERRORS, ApiError, JsonApiClient
from ..services.order_service import OrderService
from .deps import get_api_client, get_cart_state, get_session_id, keep_session, templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])

CHECKBOX_ON = ("on", "true", "1", "yes")


def _render_checkout(request: Request, page: CheckoutPage, form: CheckoutForm, status_code: int = 200):
    notices = [{"level": n.level.value, "message": n.message} for n in page.notifier.drain()]
    invalid_field = page.last_validation.field if page.last_validation else None
    return templates.TemplateResponse(
        request,
        "checkout.html",
        {
            "cart": page.cart.cart,
            "items": page.cart.items,
            "form": form,
            "steps": page.stepper.steps(),
            "notices": notices,
            "invalid_field": invalid_field,
        },
        status_code=status_code,
    )


@router.get("/checkout")
async def checkout_page(
    request: Request,
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """Checkout form; an empty cart sends the user back to the cart page"""
    await cart.load()
    if cart.cart is None or not cart.items:
        return keep_session(request, RedirectResponse("/cart", status_code=303), session_id)

    page = CheckoutPage(cart)
    response = _render_checkout(request, page, CheckoutForm())
    return keep_session(request, response, session_id)


@router.post("/checkout")
async def submit_checkout(
    request: Request,
    cart: CartState = Depends(get_cart_state),
    session_id: str = Depends(get_session_id),
):
    """
    Place the order.

    Validation errors and failed checkouts re-render the form with the
    values as entered; success redirects to the order confirmation.
    """
    data = await request.form()
    values = {name: data[name] for name in CheckoutForm.model_fields if name in data}
    values["same_billing_address"] = str(data.get("same_billing_address", "")).lower() in CHECKBOX_ON
    form = CheckoutForm(**values)

    await cart.load()
    page = CheckoutPage(cart)

    order = await page.submit(form)
    if order is None:
        status_code = 400 if page.last_validation and not page.last_validation.valid else 502
        response = _render_checkout(request, page, form, status_code=status_code)
        return keep_session(request, response, session_id)

    return keep_session(request, RedirectResponse(page.navigator.location, status_code=303), session_id)


@router.get("/order-confirmation/{order_id}")
async def order_confirmation(
    request: Request,
    order_id: str,
    level: Optional[str] = Query(None),
    message: Optional[str] = Query(None),
    client: JsonApiClient = Depends(get_api_client),
):
    """Order confirmation page"""
    order = None
    try:
        order = await OrderService(client).get_by_id(order_id)
    except BACKEND_ERRORS as e:
        if isinstance(e, ApiError) and e.is_not_found:
            raise HTTPException(status_code=404, detail="Order not found")
        logger.error(f"Error loading order {order_id}: {e}")

    return templates.TemplateResponse(
        request,
        "order_confirmation.html",
        {
            "order_id": order_id,
            "order": order,
            "notices": [{"level": level or "info", "message": message}] if message else [],
        },
    )
