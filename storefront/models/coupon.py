"""Coupon models"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .base import ApiModel, to_amount, to_id


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


class Coupon(ApiModel):
    """
    Discount coupon.

    The backend names these attributes couponType/value/minAmount/...; the
    discountType/discountValue/minOrderAmount/... spellings are accepted too.
    """
    id: Optional[str] = None
    code: str
    name: Optional[str] = None
    description: Optional[str] = None
    coupon_type: CouponType = Field(
        default=CouponType.PERCENTAGE,
        validation_alias=AliasChoices("couponType", "coupon_type", "discountType", "discount_type"),
    )
    value: float = Field(
        default=0.0,
        validation_alias=AliasChoices("value", "discountValue", "discount_value"),
    )
    min_amount: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("minAmount", "min_amount", "minOrderAmount", "min_order_amount"),
    )
    max_amount: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("maxAmount", "max_amount", "maxDiscount", "max_discount"),
    )
    max_uses: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("maxUses", "max_uses", "usageLimit", "usage_limit"),
    )
    used_count: int = Field(
        default=0,
        validation_alias=AliasChoices("usedCount", "used_count", "usageCount", "usage_count"),
    )
    starts_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("startsAt", "starts_at", "startDate", "start_date"),
    )
    expires_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("expiresAt", "expires_at", "endDate", "end_date"),
    )
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Optional[str]:
        return to_id(value)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("coupon_type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        if value == "fixed":
            return CouponType.FIXED_AMOUNT
        return value or CouponType.PERCENTAGE

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("used_count", mode="before")
    @classmethod
    def default_used_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("is_active", mode="before")
    @classmethod
    def default_active(cls, value: Any) -> Any:
        return True if value is None else value


class CouponValidation(ApiModel):
    """
    Result of validating or applying a coupon.

    Business-rule rejections (expired, inactive, minimum not met, usage
    exhausted, unknown code) are reported here, never raised.
    """
    valid: bool
    error: Optional[str] = None
    message: Optional[str] = None
    coupon: Optional[Coupon] = None
    discount_amount: Optional[float] = None
    new_total: Optional[float] = None
    free_shipping: bool = False

    @field_validator("free_shipping", mode="before")
    @classmethod
    def default_free_shipping(cls, value: Any) -> Any:
        return False if value is None else value


class AppliedCoupon(BaseModel):
    """Coupon attached to the cart's working state"""
    code: str
    discount_amount: float = 0.0
    new_total: Optional[float] = None
    free_shipping: bool = False
