"""Shared route dependencies: backend client, cart session, templates"""

import logging
import os
import uuid
from typing import AsyncIterator, Optional
from urllib.parse import urlencode

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from ..core.config import settings
from ..core.notifications import Notifier, format_currency
from ..flows.cart_state import CartState
from ..services.api_client import JsonApiClient
from ..services.cart_service import CartItemService, CartService

logger = logging.getLogger(__name__)

templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=templates_dir)
templates.env.filters["currency"] = lambda amount, currency=None: format_currency(
    amount or 0.0, currency or settings.currency
)


def bearer_token(request: Request) -> Optional[str]:
    """Token of the incoming request, falling back to the configured one"""
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or settings.api_token
    return settings.api_token


async def get_api_client(request: Request) -> AsyncIterator[JsonApiClient]:
    """One backend client per request, carrying the caller's token"""
    client = JsonApiClient(
        base_url=settings.api_base_url,
        token=bearer_token(request),
        timeout=settings.api_timeout,
    )
    try:
        yield client
    finally:
        await client.close()


def get_session_id(request: Request) -> str:
    """Anonymous cart session id from the cookie, or a new one"""
    session_id = request.cookies.get(settings.cart_session_cookie)
    if not session_id:
        session_id = str(uuid.uuid4())
        request.state.new_cart_session = True
        logger.debug(f"Started cart session {session_id}")
    return session_id


def get_notifier() -> Notifier:
    return Notifier(settings.locale)


def get_cart_state(
    client: JsonApiClient = Depends(get_api_client),
    session_id: str = Depends(get_session_id),
    notifier: Notifier = Depends(get_notifier),
) -> CartState:
    return CartState(
        CartService(client),
        CartItemService(client),
        notifier=notifier,
        session_id=session_id,
    )


def keep_session(request: Request, response, session_id: str):
    """Attach the cart session cookie when it was just created"""
    if getattr(request.state, "new_cart_session", False):
        response.set_cookie(
            settings.cart_session_cookie,
            session_id,
            max_age=settings.cart_ttl_days * 24 * 60 * 60,
            httponly=True,
            samesite="lax",
        )
    return response


def redirect_with_notice(
    request: Request,
    path: str,
    notifier: Notifier,
    session_id: str,
    message: Optional[str] = None,
    level: str = "error",
):
    """Post/redirect/get, carrying the first notification in the query string"""
    notifications = notifier.drain()
    if message is None and notifications:
        level, message = notifications[0].level.value, notifications[0].message
    if message:
        path = f"{path}?{urlencode({'level': level, 'message': message})}"
    return keep_session(request, RedirectResponse(path, status_code=303), session_id)
