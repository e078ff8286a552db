"""Sales order read path, used by the order confirmation page"""

import logging

from ..models.order import EcommerceOrder, OrderItem
from .api_client import JsonApiClient

logger = logging.getLogger(__name__)

SALES_ORDERS_PATH = "/api/v1/sales-orders"


class OrderService:
    def __init__(self, client: JsonApiClient):
        self.client = client

    async def get_by_id(self, order_id: str) -> EcommerceOrder:
        """Get an order with its item snapshots"""
        body = await self.client.get(
            f"{SALES_ORDERS_PATH}/{order_id}",
            params={"include": "items"},
        )
        order = EcommerceOrder.from_api(body["data"])

        items = [
            OrderItem.from_api(record)
            for record in body.get("included") or []
            if record.get("type") in ("sales-order-items", "order-items", "items")
        ]
        if items:
            order.items = items
        return order
