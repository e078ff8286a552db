"""
Coupon application on the current cart.

no_coupon -> validating -> applied
no_coupon -> validating -> rejected(reason) -> no_coupon   (dismiss)

A rejection never touches the discount already applied to the cart.
"""

import logging
from enum import Enum
from typing import Optional

from ..core.notifications import Notifier
from ..core.state import RequestTracker
from ..models.coupon import AppliedCoupon, CouponValidation
from ..services.api_client import BACKEND_ERRORS, failure_reason
from ..services.coupon_service import CouponService, normalize_code
from .cart_state import CartState

logger = logging.getLogger(__name__)


class CouponStatus(str, Enum):
    NO_COUPON = "no_coupon"
    VALIDATING = "validating"
    APPLIED = "applied"
    REJECTED = "rejected"


class CouponApplication:
    """Applies, validates and removes the coupon of a cart"""

    APPLY = "apply"
    REMOVE = "remove"
    VALIDATE = "validate"

    def __init__(self, coupons: CouponService, cart: CartState, notifier: Optional[Notifier] = None):
        self.coupons = coupons
        self.cart = cart
        self.notifier = notifier or cart.notifier
        self.requests = RequestTracker()

        self.status = CouponStatus.NO_COUPON
        self.applied: Optional[AppliedCoupon] = None
        self.rejection: Optional[str] = None

        existing = cart.cart.coupon_code if cart.cart else None
        if existing:
            self.applied = AppliedCoupon(code=existing, discount_amount=cart.cart.discount_amount)
            self.status = CouponStatus.APPLIED

    @property
    def is_applying(self) -> bool:
        return self.requests.is_pending(self.APPLY)

    @property
    def is_removing(self) -> bool:
        return self.requests.is_pending(self.REMOVE)

    @property
    def is_validating(self) -> bool:
        return self.requests.is_pending(self.VALIDATE)

    def _settle(self) -> None:
        self.status = CouponStatus.APPLIED if self.applied else CouponStatus.NO_COUPON

    def _generic_failure(self, operation: str, key: str, error: Exception) -> CouponValidation:
        self.requests.fail(operation, failure_reason(error))
        self.notifier.error(key)
        self._settle()
        return CouponValidation(valid=False, error=self.notifier.message(key))

    async def validate_coupon(self, code: str, cart_total: Optional[float] = None) -> CouponValidation:
        """Check a code without applying it; cart state is not touched"""
        self.requests.start(self.VALIDATE)
        try:
            result = await self.coupons.validate(code, cart_total)
        except BACKEND_ERRORS as e:
            logger.error(f"Error validating coupon {code}: {e}")
            self.requests.fail(self.VALIDATE, failure_reason(e))
            self.notifier.error("coupon_failed")
            return CouponValidation(valid=False, error=self.notifier.message("coupon_failed"))

        self.requests.succeed(self.VALIDATE)
        return result

    async def apply_coupon(self, code: str) -> CouponValidation:
        """
        Apply a coupon to the cart.

        A coupon already applied is replaced by whatever the backend decides
        for the new code.
        """
        if self.cart.cart is None:
            self.notifier.error("no_cart")
            return CouponValidation(valid=False, error=self.notifier.message("no_cart"))

        code = normalize_code(code)
        self.status = CouponStatus.VALIDATING
        self.requests.start(self.APPLY)
        try:
            result = await self.coupons.apply_to_cart(self.cart.cart.id, code)
        except BACKEND_ERRORS as e:
            logger.error(f"Error applying coupon {code}: {e}")
            return self._generic_failure(self.APPLY, "coupon_failed", e)

        if not result.valid:
            self.requests.fail(self.APPLY, result.error or "rejected")
            self.status = CouponStatus.REJECTED
            self.rejection = result.error
            return result

        self.requests.succeed(self.APPLY)
        self.applied = AppliedCoupon(
            code=code,
            discount_amount=result.discount_amount or 0.0,
            new_total=result.new_total,
            free_shipping=result.free_shipping,
        )
        self.rejection = None
        self.status = CouponStatus.APPLIED
        self.notifier.success("coupon_applied")
        await self.cart.refresh()
        return result

    async def remove_coupon(self) -> bool:
        """Detach the current coupon; nothing applied means nothing to do"""
        if self.applied is None or self.cart.cart is None:
            return True

        self.requests.start(self.REMOVE)
        try:
            await self.coupons.remove_from_cart(self.cart.cart.id)
        except BACKEND_ERRORS as e:
            logger.error(f"Error removing coupon from cart {self.cart.cart.id}: {e}")
            self._generic_failure(self.REMOVE, "coupon_remove_failed", e)
            return False

        self.requests.succeed(self.REMOVE)
        self.applied = None
        self.rejection = None
        self.status = CouponStatus.NO_COUPON
        self.notifier.success("coupon_removed")
        await self.cart.refresh()
        return True

    def dismiss(self) -> None:
        """Clear a rejection; a coupon applied before it stays applied"""
        if self.status == CouponStatus.REJECTED:
            self.rejection = None
            self._settle()
