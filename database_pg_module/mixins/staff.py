"""
Departments, waiter assignments and waiter calls.
"""
from __future__ import annotations

from typing import Any

DEPARTMENTS = "departments"
WAITER_ASSIGNMENTS = "waiter_assignments"
WAITER_CALLS = "waiter_calls"


class StaffMixin:
    """Mixin for restaurant staff routing data."""

    # ========== DEPARTMENTS ==========

    def add_department(self, data: dict[str, Any]) -> str:
        return self.add_document(DEPARTMENTS, data)

    def get_department(self, department_id: str) -> dict[str, Any] | None:
        return self.get_document(DEPARTMENTS, department_id)

    def get_departments(self, user_id: str) -> list[dict[str, Any]]:
        """All departments of a tenant in display order."""
        return self.find_documents(DEPARTMENTS, {"user_id": user_id}, order_by="order")

    def get_department_by_role(self, user_id: str, role: str) -> dict[str, Any] | None:
        """First department with the role; a tenant normally has one per role."""
        found = self.find_documents(
            DEPARTMENTS, {"user_id": user_id, "role": role}, order_by="order", limit=1
        )
        return found[0] if found else None

    def update_department(self, department_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        return self.update_document(DEPARTMENTS, department_id, changes)

    def delete_department(self, department_id: str) -> bool:
        return self.delete_document(DEPARTMENTS, department_id)

    # ========== WAITER ASSIGNMENTS ==========

    def add_waiter_assignment(self, data: dict[str, Any]) -> str:
        return self.add_document(WAITER_ASSIGNMENTS, data)

    def get_waiter_assignment(self, assignment_id: str) -> dict[str, Any] | None:
        return self.get_document(WAITER_ASSIGNMENTS, assignment_id)

    def get_waiter_assignments(self, user_id: str, active_only: bool = False) -> list[dict[str, Any]]:
        """Assignments ordered by start_table (the routing iteration order)."""
        filters: dict[str, Any] = {"user_id": user_id}
        if active_only:
            filters["is_active"] = True
        return self.find_documents(WAITER_ASSIGNMENTS, filters, order_by="start_table")

    def update_waiter_assignment(
        self, assignment_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        return self.update_document(WAITER_ASSIGNMENTS, assignment_id, changes)

    def delete_waiter_assignment(self, assignment_id: str) -> bool:
        return self.delete_document(WAITER_ASSIGNMENTS, assignment_id)

    # ========== WAITER CALLS ==========

    def add_waiter_call(self, data: dict[str, Any]) -> str:
        return self.add_document(WAITER_CALLS, data)

    def get_waiter_call(self, call_id: str) -> dict[str, Any] | None:
        return self.get_document(WAITER_CALLS, call_id)

    def get_waiter_calls(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_documents(WAITER_CALLS, {"user_id": user_id})

    def update_waiter_call(self, call_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        return self.update_document(WAITER_CALLS, call_id, changes)
