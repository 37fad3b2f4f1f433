"""
Menu schedule resolution.

A schedule is a daily window (start inclusive, end exclusive) on selected
weekdays, numbered 0=Sunday..6=Saturday. Items without active schedules are
governed only by their `available` flag.
"""
from __future__ import annotations

import locale
from datetime import datetime
from typing import Any

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import TenantNotFoundException
from app.domain.entities import MenuItem, MenuSchedule, ScheduledMenuItem

DAYS_PER_WEEK = 7


def weekday_index(moment: datetime) -> int:
    """Day of week with Sunday as 0."""
    return (moment.weekday() + 1) % DAYS_PER_WEEK


def is_schedule_current(schedule: MenuSchedule, now: datetime) -> bool:
    if not schedule.is_active or weekday_index(now) not in schedule.days_of_week:
        return False
    return schedule.start <= now.time() < schedule.end


def distance_to_next_start(schedule: MenuSchedule, now: datetime) -> tuple[int, str] | None:
    """(days ahead, start time) of the schedule's next opening, None if it never opens."""
    if not schedule.is_active or not schedule.days_of_week:
        return None
    today = weekday_index(now)
    current_time = now.strftime("%H:%M")
    for days_ahead in range(DAYS_PER_WEEK + 1):
        if (today + days_ahead) % DAYS_PER_WEEK not in schedule.days_of_week:
            continue
        if days_ahead == 0 and current_time >= schedule.start_time:
            continue
        return days_ahead, schedule.start_time
    return None


def resolve_item(
    item: MenuItem, schedules_by_id: dict[str, MenuSchedule], now: datetime
) -> ScheduledMenuItem:
    item_schedules = [
        schedules_by_id[schedule_id]
        for schedule_id in item.schedule_ids
        if schedule_id in schedules_by_id and schedules_by_id[schedule_id].is_active
    ]
    if not item_schedules:
        return ScheduledMenuItem(item=item, is_currently_available=item.available)

    current = next((s for s in item_schedules if is_schedule_current(s, now)), None)
    if current is not None:
        return ScheduledMenuItem(
            item=item,
            is_currently_available=item.available,
            current_schedule=current,
            active_schedules=item_schedules,
        )

    next_schedule = None
    best_distance = None
    for schedule in item_schedules:
        distance = distance_to_next_start(schedule, now)
        # Strict comparison keeps the earlier schedule on ties
        if distance is not None and (best_distance is None or distance < best_distance):
            best_distance = distance
            next_schedule = schedule
    return ScheduledMenuItem(
        item=item,
        is_currently_available=False,
        next_available_schedule=next_schedule,
        active_schedules=item_schedules,
    )


def resolve_schedules(
    items: list[MenuItem], schedules: list[MenuSchedule], now: datetime
) -> list[ScheduledMenuItem]:
    """Annotate every item with its availability at `now`."""
    schedules_by_id = {schedule.id: schedule for schedule in schedules if schedule.id}
    return [resolve_item(item, schedules_by_id, now) for item in items]


def sort_for_display(entries: list[ScheduledMenuItem]) -> list[ScheduledMenuItem]:
    """Available first, then by category and name (locale-aware)."""
    return sorted(
        entries,
        key=lambda entry: (
            not entry.is_currently_available,
            locale.strxfrm(entry.item.category),
            locale.strxfrm(entry.item.name),
        ),
    )


class MenuService:
    """Loads a tenant's menu and applies schedules."""

    def __init__(self, db: Any):
        self.db = AsyncDBProxy.wrap(db)

    async def get_scheduled_menu(
        self, tenant_id: str, now: datetime | None = None
    ) -> list[ScheduledMenuItem]:
        if not await self.db.get_tenant(tenant_id):
            raise TenantNotFoundException(tenant_id)
        items = [MenuItem.from_document(doc) for doc in await self.db.get_menu_items(tenant_id)]
        schedules = [
            MenuSchedule.from_document(doc) for doc in await self.db.get_menu_schedules(tenant_id)
        ]
        resolved = resolve_schedules(items, schedules, now or datetime.now())
        return sort_for_display(resolved)
