# Storefront Models

from .base import ApiModel
from .cart import Cart, CartItem, CartStatus
from .coupon import Coupon, CouponType, CouponValidation, AppliedCoupon
from .checkout import (
    CheckoutSession,
    CheckoutStatus,
    TERMINAL_STATUSES,
    validate_status_transition,
)
from .order import (
    EcommerceOrder,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    ShippingStatus,
    PlacedOrder,
)

__all__ = [
    "ApiModel",
    "Cart",
    "CartItem",
    "CartStatus",
    "Coupon",
    "CouponType",
    "CouponValidation",
    "AppliedCoupon",
    "CheckoutSession",
    "CheckoutStatus",
    "TERMINAL_STATUSES",
    "validate_status_transition",
    "EcommerceOrder",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "ShippingStatus",
    "PlacedOrder",
]
