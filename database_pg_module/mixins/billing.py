"""
Table bills, payment confirmations and closed bills.
"""
from __future__ import annotations

from typing import Any

TABLE_BILLS = "table_bills"
PAYMENT_CONFIRMATIONS = "payment_confirmations"
BILLS = "bills"


class BillingMixin:
    """Mixin for table bill operations."""

    def add_table_bill(self, data: dict[str, Any]) -> str:
        return self.add_document(TABLE_BILLS, data)

    def get_table_bill(self, bill_id: str) -> dict[str, Any] | None:
        return self.get_document(TABLE_BILLS, bill_id)

    def get_active_table_bill(self, user_id: str, table_number: str) -> dict[str, Any] | None:
        found = self.find_documents(
            TABLE_BILLS,
            {"user_id": user_id, "table_number": table_number, "status": "active"},
            limit=1,
        )
        return found[0] if found else None

    def update_table_bill(
        self, bill_id: str, changes: dict[str, Any], expected_version: int | None = None
    ) -> dict[str, Any] | None:
        return self.update_document(TABLE_BILLS, bill_id, changes, expected_version=expected_version)

    def add_payment_confirmation(self, data: dict[str, Any]) -> str:
        return self.add_document(PAYMENT_CONFIRMATIONS, data)

    def get_payment_confirmation(self, confirmation_id: str) -> dict[str, Any] | None:
        return self.get_document(PAYMENT_CONFIRMATIONS, confirmation_id)

    def update_payment_confirmation(
        self, confirmation_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        return self.update_document(PAYMENT_CONFIRMATIONS, confirmation_id, changes)

    def add_bill(self, data: dict[str, Any]) -> str:
        return self.add_document(BILLS, data)
