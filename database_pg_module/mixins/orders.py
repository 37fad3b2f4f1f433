"""
Order-related database operations.
"""
from __future__ import annotations

from typing import Any

ORDERS = "orders"
PENDING_ORDERS = "pending_orders"


class OrderMixin:
    """Mixin for orders and orders awaiting cashier approval."""

    def add_order(self, data: dict[str, Any]) -> str:
        return self.add_document(ORDERS, data)

    def get_order(self, order_id: str) -> dict[str, Any] | None:
        return self.get_document(ORDERS, order_id)

    def update_order(
        self,
        order_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any] | None:
        """Partial update; pass expected_version for a conditional write."""
        return self.update_document(ORDERS, order_id, changes, expected_version=expected_version)

    def find_order_by_delivery_ref(self, external_order_id: str, company: str) -> dict[str, Any] | None:
        """Look up an order by the delivery platform's (order id, company) pair."""
        found = self.find_documents(
            ORDERS,
            {"delivery_info.order_id": external_order_id, "delivery_info.company": company},
            limit=1,
        )
        return found[0] if found else None

    def get_orders_for_user(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_documents(ORDERS, {"user_id": user_id})

    def add_pending_order(self, data: dict[str, Any]) -> str:
        return self.add_document(PENDING_ORDERS, data)

    def get_pending_order(self, pending_id: str) -> dict[str, Any] | None:
        return self.get_document(PENDING_ORDERS, pending_id)

    def delete_pending_order(self, pending_id: str) -> bool:
        return self.delete_document(PENDING_ORDERS, pending_id)
