"""Ecommerce order models"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from .base import ApiModel, to_amount, to_id


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class ShippingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RETURNED = "returned"


class OrderItem(ApiModel):
    """Snapshot of a purchased product"""
    id: str
    product_id: Optional[str] = None
    product_name: str = ""
    product_sku: Optional[str] = None
    quantity: int = 1
    unit_price: float = 0.0
    discount: float = 0.0
    tax_amount: float = 0.0
    total_price: float = 0.0

    @field_validator("unit_price", "discount", "tax_amount", "total_price", mode="before")
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)


class EcommerceOrder(ApiModel):
    """Order produced by a successful checkout"""
    id: str
    order_number: str = ""
    customer_id: Optional[str] = None
    customer_email: str = ""
    customer_name: str = ""
    customer_phone: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    subtotal_amount: float = 0.0
    tax_amount: float = 0.0
    shipping_amount: float = 0.0
    discount_amount: float = 0.0
    total_amount: float = 0.0
    shipping_address_line1: str = ""
    shipping_address_line2: Optional[str] = None
    shipping_city: str = ""
    shipping_state: str = ""
    shipping_postal_code: str = ""
    shipping_country: str = ""
    billing_address_line1: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal_code: Optional[str] = None
    billing_country: Optional[str] = None
    notes: Optional[str] = None
    order_date: Optional[str] = None
    created_at: Optional[str] = None
    items: list[OrderItem] = []

    @field_validator(
        "subtotal_amount", "tax_amount", "shipping_amount", "discount_amount", "total_amount",
        mode="before",
    )
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("id", "customer_id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)

    @field_validator("status", "payment_status", "shipping_status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or "pending"


class PlacedOrder(BaseModel):
    """Order reference returned by a cart checkout"""
    id: str
    order_number: Optional[str] = None
    status: Optional[str] = None
    total_amount: Optional[float] = None
    raw: dict[str, Any] = {}

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> "PlacedOrder":
        """Read the new order id from data.id, id or orderId"""
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        attributes = data.get("attributes") if isinstance(data.get("attributes"), dict) else data

        order_id = (
            data.get("id")
            or body.get("id")
            or body.get("orderId")
            or body.get("order_id")
        )
        if order_id is None:
            raise ValueError("Checkout response does not contain an order id")

        total = attributes.get("totalAmount", attributes.get("total_amount"))
        return cls(
            id=str(order_id),
            order_number=attributes.get("orderNumber") or attributes.get("order_number"),
            status=attributes.get("status"),
            total_amount=float(total) if total is not None else None,
            raw=body,
        )
