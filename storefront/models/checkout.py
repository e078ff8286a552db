"""Checkout session models"""

from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from .base import ApiModel, to_amount, to_id


class CheckoutStatus(str, Enum):
    """Checkout session status"""
    PENDING = "pending"
    PAYMENT_PENDING = "payment_pending"
    # processing and expired are only ever set by the backend
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset({
    CheckoutStatus.COMPLETED,
    CheckoutStatus.FAILED,
    CheckoutStatus.CANCELLED,
    CheckoutStatus.EXPIRED,
})

STATUS_TRANSITIONS: dict[CheckoutStatus, frozenset[CheckoutStatus]] = {
    CheckoutStatus.PENDING: frozenset({
        CheckoutStatus.PAYMENT_PENDING,
        CheckoutStatus.FAILED,
        CheckoutStatus.CANCELLED,
    }),
    CheckoutStatus.PAYMENT_PENDING: frozenset({
        CheckoutStatus.COMPLETED,
        CheckoutStatus.FAILED,
        CheckoutStatus.CANCELLED,
    }),
    CheckoutStatus.PROCESSING: frozenset({
        CheckoutStatus.COMPLETED,
        CheckoutStatus.FAILED,
        CheckoutStatus.CANCELLED,
    }),
    CheckoutStatus.COMPLETED: frozenset(),
    CheckoutStatus.FAILED: frozenset(),
    CheckoutStatus.CANCELLED: frozenset(),
    CheckoutStatus.EXPIRED: frozenset(),
}


def validate_status_transition(
    current: CheckoutStatus,
    new: CheckoutStatus,
) -> tuple[bool, Optional[str]]:
    """
    Validate if a status transition is allowed.
    Returns (is_valid, error_message)
    """
    allowed = STATUS_TRANSITIONS[current]
    if new not in allowed:
        if not allowed:
            return False, f"Checkout session is in final state '{current.value}' and cannot be modified"
        return False, (
            f"Cannot transition from '{current.value}' to '{new.value}'. "
            f"Valid transitions: {', '.join(sorted(s.value for s in allowed))}"
        )
    return True, None


class CheckoutSession(ApiModel):
    """Server-side record of an in-progress purchase attempt"""
    id: str
    shopping_cart_id: Optional[str] = None
    contact_id: Optional[str] = None
    status: CheckoutStatus = CheckoutStatus.PENDING
    shipping_method: Optional[str] = None
    shipping_address_id: Optional[str] = None
    billing_address_id: Optional[str] = None
    subtotal: float = 0.0
    shipping_amount: float = 0.0
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    total: float = 0.0
    currency: Optional[str] = None
    payment_method: Optional[str] = None
    payment_intent_id: Optional[str] = None
    sales_order_id: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator(
        "subtotal", "shipping_amount", "tax_amount", "discount_amount", "total",
        mode="before",
    )
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator(
        "id", "shopping_cart_id", "contact_id", "shipping_address_id",
        "billing_address_id", "sales_order_id",
        mode="before",
    )
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or CheckoutStatus.PENDING

    @property
    def calculated_total(self) -> float:
        """subtotal + shipping + tax - discount"""
        return round(self.subtotal + self.shipping_amount + self.tax_amount - self.discount_amount, 2)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def confirmation_path(self) -> Optional[str]:
        if self.status == CheckoutStatus.COMPLETED and self.sales_order_id:
            return f"/order-confirmation/{self.sales_order_id}"
        return None
