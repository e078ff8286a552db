"""
Coupon Service

Validation and cart application of discount coupons, plus admin CRUD.
Business-rule rejections come back as CouponValidation values; only
transport failures raise.
"""

import logging
from typing import Any, Optional

from ..models.coupon import Coupon, CouponValidation
from .api_client import ApiConnectionError, ApiError, JsonApiClient, error_message, resource_document
from .cart_service import CARTS_PATH

logger = logging.getLogger(__name__)

COUPONS_PATH = "/api/v1/coupons"
DEFAULT_COUPON_ERROR = "Invalid coupon"


def normalize_code(code: str) -> str:
    """Codes are always sent trimmed and uppercased"""
    return code.strip().upper()


def _rejection(error: ApiError) -> CouponValidation:
    """Map an error response to an invalid result"""
    reason = error_message(error.payload, DEFAULT_COUPON_ERROR)
    return CouponValidation(valid=False, error=reason)


class CouponService:
    """Coupon endpoints"""

    def __init__(self, client: JsonApiClient):
        self.client = client

    async def validate(self, code: str, cart_total: Optional[float] = None) -> CouponValidation:
        """
        Check a coupon without applying it.

        Args:
            code: Coupon code as typed by the user
            cart_total: Current cart total, forwarded for minimum-amount checks

        Returns:
            CouponValidation; valid=False with the backend reason on rejection
        """
        params = {}
        if cart_total is not None:
            params["cart_total"] = cart_total

        try:
            body = await self.client.get(
                f"{COUPONS_PATH}/validate/{normalize_code(code)}",
                params=params or None,
            )
        except ApiConnectionError:
            raise
        except ApiError as e:
            logger.info(f"Coupon {normalize_code(code)} rejected: {e.message}")
            return _rejection(e)

        body = body or {}
        data = body.get("data")
        coupon = Coupon.from_api(data) if isinstance(data, dict) and data else None
        if "valid" in body:
            return CouponValidation.model_validate({**body, "coupon": coupon})
        return CouponValidation(valid=True, coupon=coupon)

    async def apply_to_cart(self, cart_id: str, code: str) -> CouponValidation:
        """Apply a coupon to a cart; the backend recomputes the totals"""
        try:
            body = await self.client.post(
                f"{CARTS_PATH}/{cart_id}/apply-coupon",
                body={"coupon_code": normalize_code(code)},
            )
        except ApiConnectionError:
            raise
        except ApiError as e:
            logger.info(f"Coupon {normalize_code(code)} rejected for cart {cart_id}: {e.message}")
            return _rejection(e)

        body = body or {}
        return CouponValidation(
            valid=body.get("valid", True),
            error=body.get("error"),
            message=body.get("message"),
            discount_amount=body.get("discount_amount", body.get("discountAmount")),
            new_total=body.get("new_total", body.get("newTotal")),
            free_shipping=body.get("free_shipping", body.get("freeShipping")),
        )

    async def remove_from_cart(self, cart_id: str) -> None:
        """Detach the coupon from a cart"""
        await self.client.post(f"{CARTS_PATH}/{cart_id}/remove-coupon")

    # Admin

    async def list(self, is_active: Optional[bool] = None) -> list[Coupon]:
        params = {}
        if is_active is not None:
            params["filter[is_active]"] = "true" if is_active else "false"
        body = await self.client.get(COUPONS_PATH, params=params or None)
        return [Coupon.from_api(record) for record in (body or {}).get("data", [])]

    async def get_by_id(self, coupon_id: str) -> Coupon:
        body = await self.client.get(f"{COUPONS_PATH}/{coupon_id}")
        return Coupon.from_api(body["data"])

    async def create(self, coupon: Coupon) -> Coupon:
        body = await self.client.post(
            COUPONS_PATH,
            body=resource_document("coupons", self._attributes(coupon)),
        )
        return Coupon.from_api(body["data"])

    async def update(self, coupon_id: str, **changes: Any) -> Coupon:
        """Partial update; keyword names are the snake_case field names"""
        attributes = {_CAMEL_FIELDS.get(key, key): value for key, value in changes.items()}
        if "code" in attributes:
            attributes["code"] = normalize_code(attributes["code"])
        body = await self.client.patch(
            f"{COUPONS_PATH}/{coupon_id}",
            body=resource_document("coupons", attributes, resource_id=coupon_id),
        )
        return Coupon.from_api(body["data"])

    async def delete(self, coupon_id: str) -> None:
        await self.client.delete(f"{COUPONS_PATH}/{coupon_id}")

    @staticmethod
    def _attributes(coupon: Coupon) -> dict[str, Any]:
        return {
            "code": normalize_code(coupon.code),
            "name": coupon.name,
            "description": coupon.description,
            "couponType": coupon.coupon_type.value,
            "value": coupon.value,
            "minAmount": coupon.min_amount,
            "maxAmount": coupon.max_amount,
            "maxUses": coupon.max_uses,
            "startsAt": coupon.starts_at,
            "expiresAt": coupon.expires_at,
            "isActive": coupon.is_active,
        }


_CAMEL_FIELDS = {
    "coupon_type": "couponType",
    "min_amount": "minAmount",
    "max_amount": "maxAmount",
    "max_uses": "maxUses",
    "starts_at": "startsAt",
    "expires_at": "expiresAt",
    "is_active": "isActive",
}
