"""
Database Protocol - Interface contract for document store implementations.

Both the PostgreSQL store (database_pg_module.Database) and the in-memory
store (app.core.memory_db.MemoryDatabase) conform to this protocol.
Documents are plain dicts carrying ``id`` and ``version`` keys.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

Document = dict[str, Any]
DocumentList = list[Document]


@runtime_checkable
class DatabaseProtocol(Protocol):
    """Protocol describing store methods used by services and routes."""

    # ========== CONNECTION MANAGEMENT ==========
    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Get a database connection (transaction scope)."""
        ...

    def close(self) -> None:
        ...

    # ========== DOCUMENT PRIMITIVES ==========
    def add_document(self, collection: str, data: Document, doc_id: str | None = None) -> str:
        ...

    def get_document(self, collection: str, doc_id: str) -> Document | None:
        ...

    def update_document(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> Document | None:
        """Apply dotted-path changes; raises ConcurrentModificationException on version mismatch."""
        ...

    def delete_document(self, collection: str, doc_id: str) -> bool:
        ...

    def find_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> DocumentList:
        ...

    def claim_key(self, namespace: str, key: str, value: str) -> str | None:
        ...

    # ========== TENANTS ==========
    def add_tenant(self, data: Document, tenant_id: str | None = None) -> str:
        ...

    def get_tenant(self, tenant_id: str) -> Document | None:
        ...

    # ========== STAFF ==========
    def add_department(self, data: Document) -> str:
        ...

    def get_departments(self, user_id: str) -> DocumentList:
        ...

    def get_department_by_role(self, user_id: str, role: str) -> Document | None:
        ...

    def add_waiter_assignment(self, data: Document) -> str:
        ...

    def get_waiter_assignments(self, user_id: str, active_only: bool = False) -> DocumentList:
        ...

    def add_waiter_call(self, data: Document) -> str:
        ...

    def get_waiter_call(self, call_id: str) -> Document | None:
        ...

    def update_waiter_call(self, call_id: str, changes: dict[str, Any]) -> Document | None:
        ...

    # ========== MENU ==========
    def get_menu_items(self, user_id: str) -> DocumentList:
        ...

    def get_menu_schedules(self, user_id: str) -> DocumentList:
        ...

    # ========== ORDERS ==========
    def add_order(self, data: Document) -> str:
        ...

    def get_order(self, order_id: str) -> Document | None:
        ...

    def update_order(
        self, order_id: str, changes: dict[str, Any], expected_version: int | None = None
    ) -> Document | None:
        ...

    def find_order_by_delivery_ref(self, external_order_id: str, company: str) -> Document | None:
        ...

    def get_orders_for_user(self, user_id: str) -> DocumentList:
        ...

    def add_pending_order(self, data: Document) -> str:
        ...

    def get_pending_order(self, pending_id: str) -> Document | None:
        ...

    def delete_pending_order(self, pending_id: str) -> bool:
        ...

    # ========== BILLING ==========
    def get_table_bill(self, bill_id: str) -> Document | None:
        ...

    def get_active_table_bill(self, user_id: str, table_number: str) -> Document | None:
        ...

    def add_payment_confirmation(self, data: Document) -> str:
        ...

    def get_payment_confirmation(self, confirmation_id: str) -> Document | None:
        ...

    # ========== DELIVERY ==========
    def get_active_integration(self, user_id: str, company_id: str) -> Document | None:
        ...

    def add_webhook_event(self, data: Document, event_id: str | None = None) -> str:
        ...

    def update_webhook_event(self, event_id: str, changes: dict[str, Any]) -> Document | None:
        ...

    def claim_webhook_delivery(self, idempotency_key: str, event_id: str) -> str | None:
        ...

    def add_status_update_log(self, data: Document) -> str:
        ...

    # ========== REPORTS ==========
    def add_day_report(self, data: Document) -> str:
        ...

    def add_feedback(self, data: Document, feedback_id: str | None = None) -> str:
        ...
