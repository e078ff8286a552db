# Backend services

from .api_client import ApiError, ApiConnectionError, JsonApiClient
from .cart_service import CartService, CartItemService
from .coupon_service import CouponService, normalize_code
from .checkout_session_service import CheckoutSessionService
from .order_service import OrderService

__all__ = [
    "ApiError",
    "ApiConnectionError",
    "JsonApiClient",
    "CartService",
    "CartItemService",
    "CouponService",
    "normalize_code",
    "CheckoutSessionService",
    "OrderService",
]
