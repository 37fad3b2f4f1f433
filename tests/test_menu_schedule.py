from __future__ import annotations

from datetime import datetime

import pytest

from app.core.exceptions import TenantNotFoundException
from app.domain.entities import MenuItem, MenuSchedule
from app.services.menu_schedule import (
    distance_to_next_start,
    is_schedule_current,
    resolve_item,
    resolve_schedules,
    sort_for_display,
    weekday_index,
)

# 2024-05-06 is a Monday
MONDAY_NOON = datetime(2024, 5, 6, 12, 0)
MONDAY_EVENING = datetime(2024, 5, 6, 20, 0)

MON, TUE, WED = 1, 2, 3


def _schedule(schedule_id: str, start: str, end: str, days: list[int], **kwargs) -> MenuSchedule:
    return MenuSchedule(
        id=schedule_id,
        user_id="cafe1",
        name=schedule_id.title(),
        start_time=start,
        end_time=end,
        days_of_week=days,
        **kwargs,
    )


def _item(name: str, schedule_ids: list[str] | None = None, **kwargs) -> MenuItem:
    return MenuItem(
        id=name.lower(),
        user_id="cafe1",
        name=name,
        price=5,
        schedule_ids=schedule_ids or [],
        **kwargs,
    )


def test_weekday_index_starts_on_sunday() -> None:
    assert weekday_index(datetime(2024, 5, 5)) == 0
    assert weekday_index(MONDAY_NOON) == MON
    assert weekday_index(datetime(2024, 5, 11)) == 6


def test_window_is_start_inclusive_end_exclusive() -> None:
    lunch = _schedule("lunch", "11:00", "15:00", [MON])

    assert is_schedule_current(lunch, datetime(2024, 5, 6, 11, 0))
    assert is_schedule_current(lunch, datetime(2024, 5, 6, 14, 59))
    assert not is_schedule_current(lunch, datetime(2024, 5, 6, 15, 0))
    assert not is_schedule_current(lunch, datetime(2024, 5, 7, 12, 0))


def test_item_available_inside_its_window() -> None:
    lunch = _schedule("lunch", "11:00", "15:00", [MON])

    entry = resolve_item(_item("Soup", ["lunch"]), {"lunch": lunch}, MONDAY_NOON)

    assert entry.is_currently_available
    assert entry.current_schedule.id == "lunch"
    assert entry.next_available_schedule is None


def test_unavailable_flag_still_wins_inside_window() -> None:
    lunch = _schedule("lunch", "11:00", "15:00", [MON])

    entry = resolve_item(_item("Soup", ["lunch"], available=False), {"lunch": lunch}, MONDAY_NOON)

    assert not entry.is_currently_available
    assert entry.current_schedule.id == "lunch"


def test_next_schedule_after_closing() -> None:
    schedules = {
        "lunch": _schedule("lunch", "11:00", "15:00", [MON]),
        "tuesday": _schedule("tuesday", "09:00", "12:00", [TUE]),
    }

    entry = resolve_item(_item("Soup", ["lunch", "tuesday"]), schedules, MONDAY_EVENING)

    assert not entry.is_currently_available
    assert entry.next_available_schedule.id == "tuesday"
    assert [s.id for s in entry.active_schedules] == ["lunch", "tuesday"]


def test_later_today_beats_tomorrow() -> None:
    dinner = _schedule("dinner", "18:00", "22:00", [MON, TUE])

    assert distance_to_next_start(dinner, MONDAY_NOON) == (0, "18:00")
    assert distance_to_next_start(dinner, MONDAY_EVENING) == (1, "18:00")


def test_same_weekday_next_week() -> None:
    lunch = _schedule("lunch", "11:00", "15:00", [MON])

    assert distance_to_next_start(lunch, MONDAY_EVENING) == (7, "11:00")


def test_ties_keep_the_first_schedule() -> None:
    schedules = {
        "a": _schedule("a", "09:00", "10:00", [WED]),
        "b": _schedule("b", "09:00", "11:00", [WED]),
    }

    entry = resolve_item(_item("Toast", ["a", "b"]), schedules, MONDAY_EVENING)

    assert entry.next_available_schedule.id == "a"


def test_item_without_schedules_uses_flag() -> None:
    entries = resolve_schedules(
        [_item("Water"), _item("Juice", available=False)], [], MONDAY_NOON
    )

    assert [e.is_currently_available for e in entries] == [True, False]
    assert entries[0].active_schedules == []


def test_inactive_and_unknown_schedules_are_ignored() -> None:
    closed = _schedule("closed", "11:00", "15:00", [MON], is_active=False)

    entries = resolve_schedules([_item("Soup", ["closed", "missing"])], [closed], MONDAY_EVENING)

    assert entries[0].is_currently_available
    assert entries[0].next_available_schedule is None


def test_display_order() -> None:
    lunch = _schedule("lunch", "11:00", "15:00", [MON])
    items = [
        _item("Wine", category="Drinks"),
        _item("Soup", ["lunch"], category="Mains"),
        _item("Beer", category="Drinks"),
        _item("Cake", category="Desserts", available=False),
    ]

    ordered = sort_for_display(resolve_schedules(items, [lunch], MONDAY_EVENING))

    assert [e.item.name for e in ordered] == ["Beer", "Wine", "Cake", "Soup"]


def test_schedule_validation() -> None:
    with pytest.raises(ValueError):
        _schedule("bad", "15:00", "11:00", [MON])
    with pytest.raises(ValueError):
        _schedule("bad", "25:00", "26:00", [MON])
    with pytest.raises(ValueError):
        _schedule("bad", "11:00", "12:00", [7])


@pytest.mark.asyncio
async def test_menu_service_reads_store(services, memory_db, tenant) -> None:
    schedule_id = memory_db.add_menu_schedule(
        _schedule("x", "11:00", "15:00", [MON]).to_document()
    )
    memory_db.add_menu_item(
        MenuItem(user_id=tenant, name="Soup", price=6, schedule_ids=[schedule_id]).to_document()
    )
    memory_db.add_menu_item(MenuItem(user_id=tenant, name="Bread", price=1).to_document())

    menu = await services.menu.get_scheduled_menu(tenant, now=MONDAY_NOON)

    assert [(e.item.name, e.is_currently_available) for e in menu] == [
        ("Bread", True),
        ("Soup", True),
    ]
    assert menu[1].current_schedule.id == schedule_id


@pytest.mark.asyncio
async def test_menu_service_unknown_tenant(services) -> None:
    with pytest.raises(TenantNotFoundException):
        await services.menu.get_scheduled_menu("ghost")
