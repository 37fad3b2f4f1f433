"""
Notification Dispatcher - routes staff notifications to Telegram chats.

Destinations come from the tenant's departments:
- cashier department: new orders, payments, waiter calls, bill requests
- kitchen department (or per-item department): preparation tickets
- admin department: reports, feedback, escalations

Delivery is best effort. A failed or unroutable message is logged and
reported as False; callers never see an exception from here.
"""
from __future__ import annotations

import html
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from aiogram import Bot
from aiogram.types import InlineKeyboardMarkup

from app.core.async_db import AsyncDBProxy
from app.core.config import DefaultChats
from app.core.utils import utc_now_iso
from app.domain.entities import WaiterAssignment, WaiterCall
from app.domain.value_objects import DepartmentRole
from app.keyboards import (
    delivery_order_keyboard,
    kitchen_ticket_keyboard,
    payment_keyboard,
    pending_order_keyboard,
    unassigned_call_keyboard,
    waiter_call_keyboard,
)
from app.templates.notifications import render
from logging_config import logger


class NotificationKind:
    NEW_ORDER = "new_order"
    DELIVERY_ORDER = "delivery_order"
    KITCHEN_TICKET = "kitchen_ticket"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    WAITER_CALL = "waiter_call"
    BILL_REQUEST = "bill_request"
    CANCELLATION = "cancellation"
    DRIVER_ASSIGNED = "driver_assigned"
    ORDER_STATUS = "order_status"
    DAY_REPORT = "day_report"
    FEEDBACK = "feedback"
    TEST_MESSAGE = "test_message"


# Decision notifications carry a fixed pair of action buttons
ACTION_KEYBOARDS = {
    NotificationKind.NEW_ORDER: pending_order_keyboard,
    NotificationKind.DELIVERY_ORDER: delivery_order_keyboard,
    NotificationKind.KITCHEN_TICKET: kitchen_ticket_keyboard,
    NotificationKind.PAYMENT_CONFIRMATION: payment_keyboard,
}


@dataclass(frozen=True, slots=True)
class Destinations:
    cashier: str | None
    kitchen: str | None
    admin: str | None


@dataclass(frozen=True, slots=True)
class WaiterCallRouting:
    call_id: str
    target_chat_id: str | None
    waiter_name: str | None
    assignment_id: str | None
    delivered: bool
    cashier_informed: bool = False


def _table_as_int(table_number: Any) -> int | None:
    try:
        return int(str(table_number).strip())
    except (TypeError, ValueError):
        return None


def find_waiter_for_table(
    assignments: list[dict[str, Any]], table_number: Any
) -> WaiterAssignment | None:
    """First active assignment whose inclusive range covers the table.

    Overlapping ranges are allowed; the earliest in iteration order
    (ascending start_table) wins.
    """
    table = _table_as_int(table_number)
    if table is None:
        return None
    for raw in assignments:
        assignment = WaiterAssignment.from_document(raw)
        if assignment.is_active and assignment.covers(table):
            return assignment
    return None


def _chat(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


class NotificationDispatcher:
    """Sends staff notifications for one deployment (all tenants)."""

    def __init__(self, db: Any, bot: Bot, default_chats: DefaultChats | None = None) -> None:
        self.db = AsyncDBProxy.wrap(db)
        self.bot = bot
        self.default_chats = default_chats or DefaultChats()

    # =========================================================================
    # ROUTING
    # =========================================================================

    async def resolve_destinations(self, tenant_id: str) -> Destinations:
        tenant = await self.db.get_tenant(tenant_id) or {}
        telegram_settings = tenant.get("telegram_settings") or {}
        legacy_chat = _chat(tenant.get("telegram_chat_id"))

        cashier_dept = await self.db.get_department_by_role(tenant_id, DepartmentRole.CASHIER.value)
        kitchen_dept = await self.db.get_department_by_role(tenant_id, DepartmentRole.KITCHEN.value)
        admin_dept = await self.db.get_department_by_role(tenant_id, DepartmentRole.ADMIN.value)

        cashier = (
            _chat((cashier_dept or {}).get("telegram_chat_id"))
            or _chat(telegram_settings.get("cashier_chat_id"))
            or legacy_chat
            or self.default_chats.cashier
        )
        kitchen = (
            _chat((kitchen_dept or {}).get("telegram_chat_id"))
            or _chat(telegram_settings.get("kitchen_chat_id"))
            or self.default_chats.kitchen
        )
        admin = (
            _chat((admin_dept or {}).get("telegram_chat_id"))
            or _chat((cashier_dept or {}).get("admin_chat_id"))
            or _chat(telegram_settings.get("admin_chat_id"))
            or legacy_chat
            or self.default_chats.admin
        )
        return Destinations(cashier=cashier, kitchen=kitchen, admin=admin)

    # =========================================================================
    # DELIVERY
    # =========================================================================

    async def dispatch(
        self,
        kind: str,
        payload: dict[str, Any],
        destination: str | None,
        *,
        action_id: str | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
        photo: str | None = None,
    ) -> bool:
        """Render and send one notification. Returns False instead of raising."""
        if not destination:
            logger.warning(f"⚠️ No chat configured for {kind} notification, skipped")
            return False

        try:
            text = render(kind, payload)
            if reply_markup is None and action_id and kind in ACTION_KEYBOARDS:
                reply_markup = ACTION_KEYBOARDS[kind](action_id)
        except Exception as e:
            logger.error(f"Failed to build {kind} notification: {e}")
            return False

        if photo:
            try:
                await self.bot.send_photo(destination, photo=photo, caption="📸 Payment screenshot")
            except Exception as e:
                # The decision message below still carries the screenshot link
                logger.warning(f"Could not send photo for {kind} to {destination}: {e}")
                text += f'\n\n🔗 <a href="{html.escape(photo, quote=True)}">View screenshot</a>'

        try:
            await self.bot.send_message(
                destination, text, parse_mode="HTML", reply_markup=reply_markup
            )
        except Exception as e:
            logger.error(f"Failed to send {kind} notification to {destination}: {e}")
            return False

        logger.info(f"📨 {kind} notification sent to {destination}")
        return True

    # =========================================================================
    # FLOWS
    # =========================================================================

    async def notify_pending_order(self, tenant_id: str, pending: dict[str, Any]) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        return await self.dispatch(
            NotificationKind.NEW_ORDER, pending, destinations.cashier, action_id=pending["id"]
        )

    async def notify_delivery_order(
        self, tenant_id: str, order: dict[str, Any], company_name: str
    ) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        delivery_info = order.get("delivery_info") or {}
        payload = {
            "company_name": company_name,
            "external_order_id": delivery_info.get("order_id"),
            "items": order.get("items", []),
            "total_amount": order.get("total_amount"),
            "payment_status": order.get("payment_status"),
            "customer": order.get("customer_info") or {},
            "address": delivery_info.get("address"),
            "notes": order.get("notes"),
        }
        return await self.dispatch(
            NotificationKind.DELIVERY_ORDER, payload, destinations.cashier, action_id=order["id"]
        )

    async def notify_kitchen(self, tenant_id: str, order: dict[str, Any]) -> int:
        """Send one preparation ticket per department; returns tickets delivered."""
        departments = {dept["id"]: dept for dept in await self.db.get_departments(tenant_id)}
        destinations = await self.resolve_destinations(tenant_id)
        kitchen_dept = next(
            (d for d in departments.values() if d.get("role") == DepartmentRole.KITCHEN.value), None
        )

        # Order lines may omit the department; the menu item knows it
        menu_departments = {
            menu_item["id"]: menu_item.get("department")
            for menu_item in await self.db.get_menu_items(tenant_id)
        }

        groups: OrderedDict[str | None, list[dict[str, Any]]] = OrderedDict()
        for item in order.get("items", []):
            dept_id = item.get("department") or menu_departments.get(item.get("id"))
            groups.setdefault(dept_id if dept_id in departments else None, []).append(item)

        sent = 0
        for dept_id, items in groups.items():
            department = departments.get(dept_id) if dept_id else kitchen_dept
            chat_id = _chat((department or {}).get("telegram_chat_id")) or destinations.kitchen
            payload = {
                "department_name": (department or {}).get("name", "Kitchen"),
                "icon": (department or {}).get("icon"),
                "table_number": order.get("table_number"),
                "items": items,
                "timestamp": order.get("timestamp"),
                "order_id": order["id"],
            }
            if await self.dispatch(
                NotificationKind.KITCHEN_TICKET, payload, chat_id, action_id=order["id"]
            ):
                sent += 1
        return sent

    async def notify_payment_confirmation(
        self, tenant_id: str, confirmation: dict[str, Any]
    ) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        return await self.dispatch(
            NotificationKind.PAYMENT_CONFIRMATION,
            confirmation,
            destinations.cashier,
            action_id=confirmation["id"],
            photo=confirmation.get("screenshot_url"),
        )

    async def notify_cancellation(
        self, tenant_id: str, order: dict[str, Any], company_name: str, reason: str
    ) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        payload = {
            "company_name": company_name,
            "order_id": order.get("id"),
            "external_order_id": (order.get("delivery_info") or {}).get("order_id"),
            "reason": reason,
        }
        return await self.dispatch(NotificationKind.CANCELLATION, payload, destinations.cashier)

    async def notify_driver_assigned(
        self, tenant_id: str, order: dict[str, Any], company_name: str
    ) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        delivery_info = order.get("delivery_info") or {}
        payload = {
            "company_name": company_name,
            "external_order_id": delivery_info.get("order_id"),
            "driver_name": delivery_info.get("driver_name"),
            "driver_phone": delivery_info.get("driver_phone"),
            "estimated_pickup_time": delivery_info.get("estimated_pickup_time"),
        }
        return await self.dispatch(NotificationKind.DRIVER_ASSIGNED, payload, destinations.cashier)

    async def notify_order_status(self, tenant_id: str, order: dict[str, Any]) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        payload = {
            "order_id": order.get("id"),
            "status": order.get("status"),
            "table_number": order.get("table_number"),
        }
        return await self.dispatch(NotificationKind.ORDER_STATUS, payload, destinations.kitchen)

    async def send_waiter_call(self, tenant_id: str, table_number: str) -> WaiterCallRouting:
        """Record a waiter call and route it to the table's waiter or the cashier."""
        assignments = await self.db.get_waiter_assignments(tenant_id, active_only=True)
        assignment = find_waiter_for_table(assignments, table_number)

        now = utc_now_iso()
        call = WaiterCall(
            user_id=tenant_id,
            table_number=str(table_number),
            timestamp=now,
            assignment_id=assignment.id if assignment else None,
            waiter_name=assignment.waiter_name if assignment else None,
        )
        call_id = await self.db.add_waiter_call(call.to_document())
        destinations = await self.resolve_destinations(tenant_id)
        payload = {"table_number": table_number, "timestamp": now, "call_id": call_id}

        if assignment and assignment.telegram_chat_id:
            delivered = await self.dispatch(
                NotificationKind.WAITER_CALL,
                {**payload, "waiter_name": assignment.waiter_name, "to_waiter": True},
                assignment.telegram_chat_id,
                reply_markup=waiter_call_keyboard(call_id),
            )
            # Cashier gets an informational copy without buttons
            cashier_informed = await self.dispatch(
                NotificationKind.WAITER_CALL,
                {**payload, "waiter_name": assignment.waiter_name},
                destinations.cashier,
            )
            return WaiterCallRouting(
                call_id=call_id,
                target_chat_id=assignment.telegram_chat_id,
                waiter_name=assignment.waiter_name,
                assignment_id=assignment.id,
                delivered=delivered,
                cashier_informed=cashier_informed,
            )

        delivered = await self.dispatch(
            NotificationKind.WAITER_CALL,
            payload,
            destinations.cashier,
            reply_markup=unassigned_call_keyboard(call_id),
        )
        return WaiterCallRouting(
            call_id=call_id,
            target_chat_id=destinations.cashier,
            waiter_name=assignment.waiter_name if assignment else None,
            assignment_id=assignment.id if assignment else None,
            delivered=delivered,
        )

    async def send_bill_request(
        self, tenant_id: str, table_number: str, total: float | None = None
    ) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        payload = {"table_number": table_number, "total": total, "timestamp": utc_now_iso()}
        return await self.dispatch(NotificationKind.BILL_REQUEST, payload, destinations.cashier)

    async def send_day_report(self, tenant_id: str, report: dict[str, Any]) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        return await self.dispatch(NotificationKind.DAY_REPORT, report, destinations.admin)

    async def send_feedback(self, tenant_id: str, feedback: dict[str, Any]) -> bool:
        destinations = await self.resolve_destinations(tenant_id)
        return await self.dispatch(NotificationKind.FEEDBACK, feedback, destinations.admin)

    async def send_test_message(self, chat_id: str, message: str | None = None) -> bool:
        payload = {"message": message, "timestamp": utc_now_iso()}
        return await self.dispatch(NotificationKind.TEST_MESSAGE, payload, chat_id)


_notification_dispatcher: NotificationDispatcher | None = None


def get_notification_dispatcher() -> NotificationDispatcher | None:
    """Get the notification dispatcher singleton."""
    return _notification_dispatcher


def init_notification_dispatcher(
    db: Any, bot: Bot, default_chats: DefaultChats | None = None
) -> NotificationDispatcher:
    """Initialize the notification dispatcher singleton."""
    global _notification_dispatcher
    _notification_dispatcher = NotificationDispatcher(db, bot, default_chats)
    return _notification_dispatcher
