"""
Delivery platform integrations, webhook events and outbound audit logs.
"""
from __future__ import annotations

from typing import Any

DELIVERY_INTEGRATIONS = "delivery_integrations"
WEBHOOK_EVENTS = "delivery_webhook_events"
ORDER_STATUS_UPDATES = "order_status_updates"
BULK_PRICE_UPDATES = "bulk_price_updates"
ITEM_AVAILABILITY_UPDATES = "item_availability_updates"
MENU_SYNCS = "menu_syncs"

WEBHOOK_KEY_NAMESPACE = "delivery_webhook"


class DeliveryMixin:
    """Mixin for delivery integration data."""

    # ========== INTEGRATIONS ==========

    def add_delivery_integration(self, data: dict[str, Any]) -> str:
        return self.add_document(DELIVERY_INTEGRATIONS, data)

    def get_active_integration(self, user_id: str, company_id: str) -> dict[str, Any] | None:
        found = self.find_documents(
            DELIVERY_INTEGRATIONS,
            {"user_id": user_id, "delivery_company_id": company_id, "is_active": True},
            limit=1,
        )
        return found[0] if found else None

    def update_delivery_integration(
        self, integration_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        return self.update_document(DELIVERY_INTEGRATIONS, integration_id, changes)

    # ========== WEBHOOK EVENTS ==========

    def add_webhook_event(self, data: dict[str, Any], event_id: str | None = None) -> str:
        return self.add_document(WEBHOOK_EVENTS, data, doc_id=event_id)

    def get_webhook_event(self, event_id: str) -> dict[str, Any] | None:
        return self.get_document(WEBHOOK_EVENTS, event_id)

    def update_webhook_event(self, event_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        return self.update_document(WEBHOOK_EVENTS, event_id, changes)

    def claim_webhook_delivery(self, idempotency_key: str, event_id: str) -> str | None:
        """Bind an external delivery key to our event id; returns the earlier id on replay."""
        return self.claim_key(WEBHOOK_KEY_NAMESPACE, idempotency_key, event_id)

    # ========== AUDIT LOGS ==========

    def add_status_update_log(self, data: dict[str, Any]) -> str:
        return self.add_document(ORDER_STATUS_UPDATES, data)

    def get_status_update_logs(self, order_id: str) -> list[dict[str, Any]]:
        return self.find_documents(ORDER_STATUS_UPDATES, {"order_id": order_id})

    def add_bulk_price_update_log(self, data: dict[str, Any]) -> str:
        return self.add_document(BULK_PRICE_UPDATES, data)

    def add_item_availability_log(self, data: dict[str, Any]) -> str:
        return self.add_document(ITEM_AVAILABILITY_UPDATES, data)

    def add_menu_sync_log(self, data: dict[str, Any]) -> str:
        return self.add_document(MENU_SYNCS, data)
