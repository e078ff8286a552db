"""
Checkout page: form validation, order payload and submission.
"""

import logging
import re
from typing import Any, Optional

from pydantic import BaseModel

from ..core.config import settings
from ..core.notifications import Notifier, translate
from ..models.order import PlacedOrder
from .cart_state import CartState
from .stepper import CheckoutStep, CheckoutStepper

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class FormValidation(BaseModel):
    """Outcome of a local form check"""
    valid: bool
    field: Optional[str] = None
    error: Optional[str] = None
    key: Optional[str] = None


class CheckoutForm(BaseModel):
    """Customer, shipping and billing data entered on the checkout page"""
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""

    shipping_address_line1: str = ""
    shipping_address_line2: str = ""
    shipping_city: str = ""
    shipping_state: str = ""
    shipping_postal_code: str = ""
    shipping_country: str = settings.default_country

    same_billing_address: bool = True
    billing_address_line1: str = ""
    billing_address_line2: str = ""
    billing_city: str = ""
    billing_state: str = ""
    billing_postal_code: str = ""
    billing_country: str = settings.default_country

    payment_intent_id: Optional[str] = None
    notes: Optional[str] = None

    def validate_fields(self, locale: str = settings.locale) -> FormValidation:
        """Check required fields in page order; the first failure wins"""
        checks = [
            ("customer_name", "name_required", bool(self.customer_name.strip())),
            ("customer_email", "email_required", bool(self.customer_email.strip())),
            ("customer_email", "email_invalid", bool(EMAIL_PATTERN.match(self.customer_email.strip()))),
            ("shipping_address_line1", "address_required", bool(self.shipping_address_line1.strip())),
            ("shipping_city", "city_required", bool(self.shipping_city.strip())),
            ("shipping_state", "state_required", bool(self.shipping_state.strip())),
            ("shipping_postal_code", "postal_code_required", bool(self.shipping_postal_code.strip())),
        ]
        if not self.same_billing_address:
            checks += [
                ("billing_address_line1", "billing_address_required", bool(self.billing_address_line1.strip())),
                ("billing_city", "billing_city_required", bool(self.billing_city.strip())),
                ("billing_state", "billing_state_required", bool(self.billing_state.strip())),
                ("billing_postal_code", "billing_postal_code_required", bool(self.billing_postal_code.strip())),
            ]

        for field, key, ok in checks:
            if not ok:
                return FormValidation(valid=False, field=field, key=key, error=translate(key, locale))
        return FormValidation(valid=True)

    def to_order_payload(self) -> dict[str, Any]:
        """Order data sent to the cart checkout endpoint (camelCase)"""
        payload: dict[str, Any] = {
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "shippingAddressLine1": self.shipping_address_line1,
            "shippingAddressLine2": self.shipping_address_line2,
            "shippingCity": self.shipping_city,
            "shippingState": self.shipping_state,
            "shippingPostalCode": self.shipping_postal_code,
            "shippingCountry": self.shipping_country,
        }

        if self.payment_intent_id:
            payload["paymentIntentId"] = self.payment_intent_id

        if not self.same_billing_address:
            payload.update({
                "billingAddressLine1": self.billing_address_line1,
                "billingAddressLine2": self.billing_address_line2,
                "billingCity": self.billing_city,
                "billingState": self.billing_state,
                "billingPostalCode": self.billing_postal_code,
                "billingCountry": self.billing_country,
            })

        if self.notes:
            payload["notes"] = self.notes

        return payload


class Navigator:
    """Records where the page wants to send the user"""

    def __init__(self):
        self.history: list[str] = []

    def push(self, path: str) -> None:
        logger.debug(f"Navigate to {path}")
        self.history.append(path)

    @property
    def location(self) -> Optional[str]:
        return self.history[-1] if self.history else None


class CheckoutPage:
    """Checkout submission: validate, place the order, navigate"""

    def __init__(
        self,
        cart: CartState,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        stepper: Optional[CheckoutStepper] = None,
    ):
        self.cart = cart
        self.notifier = notifier or cart.notifier
        self.navigator = navigator or Navigator()
        self.stepper = stepper or CheckoutStepper()
        self.last_validation: Optional[FormValidation] = None

    @property
    def is_submitting(self) -> bool:
        return self.cart.is_checking_out

    async def submit(self, form: CheckoutForm) -> Optional[PlacedOrder]:
        """
        Validate the form and place the order.

        Returns the placed order, or None when validation or checkout fails.
        A failed checkout leaves the form as entered so the user can retry.
        """
        validation = form.validate_fields(self.notifier.locale)
        self.last_validation = validation
        if not validation.valid:
            self.notifier.error(validation.key)
            return None

        self._enter_review()

        order = await self.cart.checkout_cart(form.to_order_payload())
        if order is None:
            return None

        self.stepper.advance()
        self.notifier.success("order_placed")
        logger.info(f"Order {order.id} placed")
        self.navigator.push(f"/order-confirmation/{order.id}")
        return order

    def _enter_review(self) -> None:
        if not self.stepper.go_to(CheckoutStep.REVIEW):
            while self.stepper.current != CheckoutStep.REVIEW:
                self.stepper.advance()
