"""Callback filters for staff inline buttons."""
from __future__ import annotations

from typing import Any

from aiogram import types
from aiogram.filters import BaseFilter

from app.domain.callbacks import StaffCallback


class StaffCallbackFilter(BaseFilter):
    """Match `{action}_{entity}_{id}` payloads for one entity.

    On a match the parsed payload is passed to the handler as `staff_callback`.
    """

    def __init__(self, entity: str, *actions: str) -> None:
        self.entity = entity
        self.actions = frozenset(actions)

    async def __call__(self, callback: types.CallbackQuery) -> bool | dict[str, Any]:  # type: ignore[override]
        parsed = StaffCallback.try_unpack(callback.data)
        if parsed is None or parsed.entity != self.entity:
            return False
        if self.actions and parsed.action not in self.actions:
            return False
        return {"staff_callback": parsed}
