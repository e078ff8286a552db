# Page flows

from .cart_state import CartState
from .coupon import CouponApplication, CouponStatus
from .checkout_session import CheckoutSessionFlow
from .stepper import CheckoutStep, CheckoutStepper
from .checkout_page import CheckoutForm, CheckoutPage, FormValidation, Navigator

__all__ = [
    "CartState",
    "CouponApplication",
    "CouponStatus",
    "CheckoutSessionFlow",
    "CheckoutStep",
    "CheckoutStepper",
    "CheckoutForm",
    "CheckoutPage",
    "FormValidation",
    "Navigator",
]
