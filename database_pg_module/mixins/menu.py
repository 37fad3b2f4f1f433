"""
Menu items and menu schedules.
"""
from __future__ import annotations

from typing import Any

MENU_ITEMS = "menu_items"
MENU_SCHEDULES = "menu_schedules"


class MenuMixin:
    """Mixin for menu catalog operations."""

    def add_menu_item(self, data: dict[str, Any]) -> str:
        return self.add_document(MENU_ITEMS, data)

    def get_menu_item(self, item_id: str) -> dict[str, Any] | None:
        return self.get_document(MENU_ITEMS, item_id)

    def get_menu_items(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_documents(MENU_ITEMS, {"user_id": user_id})

    def update_menu_item(self, item_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        return self.update_document(MENU_ITEMS, item_id, changes)

    def add_menu_schedule(self, data: dict[str, Any]) -> str:
        return self.add_document(MENU_SCHEDULES, data)

    def get_menu_schedule(self, schedule_id: str) -> dict[str, Any] | None:
        return self.get_document(MENU_SCHEDULES, schedule_id)

    def get_menu_schedules(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_documents(MENU_SCHEDULES, {"user_id": user_id}, order_by="order")

    def update_menu_schedule(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        return self.update_document(MENU_SCHEDULES, schedule_id, changes)

    def delete_menu_schedule(self, schedule_id: str) -> bool:
        return self.delete_document(MENU_SCHEDULES, schedule_id)
