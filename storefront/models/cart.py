"""Shopping cart models"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from .base import ApiModel, to_amount, to_id


class CartStatus(str, Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    CONVERTED = "converted"
    EXPIRED = "expired"


class CartItem(ApiModel):
    """Line of a shopping cart (cart-items)"""
    id: str
    shopping_cart_id: Optional[str] = None
    product_id: Optional[str] = None
    product_variant_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    unit_price: float = 0.0
    original_price: float = 0.0
    discount_percent: float = 0.0
    discount_amount: float = 0.0
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0
    status: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator(
        "unit_price", "original_price", "discount_percent", "discount_amount",
        "subtotal", "tax_rate", "tax_amount", "total",
        mode="before",
    )
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("id", "shopping_cart_id", "product_id", "product_variant_id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value: Any) -> Any:
        return 1 if value is None else value


class Cart(ApiModel):
    """Shopping cart (shopping-carts)"""
    id: str
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    status: CartStatus = CartStatus.ACTIVE
    currency: str = "MXN"
    coupon_code: Optional[str] = None
    subtotal_amount: float = 0.0
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    shipping_amount: float = 0.0
    total_amount: float = 0.0
    items_count: int = 0
    final_total: Optional[float] = None
    is_expired: bool = False
    can_apply_coupon: bool = True
    notes: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    expires_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    items: list[CartItem] = []

    @field_validator(
        "subtotal_amount", "tax_amount", "discount_amount", "shipping_amount", "total_amount",
        mode="before",
    )
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("id", "session_id", "user_id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)

    @field_validator("items_count", mode="before")
    @classmethod
    def default_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or CartStatus.ACTIVE

    @model_validator(mode="after")
    def default_final_total(self) -> "Cart":
        if self.final_total is None:
            self.final_total = self.total_amount
        return self

    @property
    def has_coupon(self) -> bool:
        return bool(self.coupon_code)
