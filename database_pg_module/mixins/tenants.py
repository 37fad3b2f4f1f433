"""
Restaurant (tenant) account operations.
"""
from __future__ import annotations

from typing import Any

USERS = "users"


class TenantMixin:
    """Mixin for restaurant accounts (the ``users`` collection)."""

    def add_tenant(self, data: dict[str, Any], tenant_id: str | None = None) -> str:
        return self.add_document(USERS, data, doc_id=tenant_id)

    def get_tenant(self, tenant_id: str) -> dict[str, Any] | None:
        return self.get_document(USERS, tenant_id)

    def update_tenant(self, tenant_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        return self.update_document(USERS, tenant_id, changes)
