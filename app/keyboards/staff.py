"""Inline action keyboards attached to staff notifications."""
from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from app.domain.callbacks import CallbackAction, CallbackEntity, StaffCallback


def _pair(
    entity: str, entity_id: str, first: tuple[str, str], second: tuple[str, str]
) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for text, action in (first, second):
        builder.button(
            text=text, callback_data=StaffCallback(action, entity, str(entity_id)).pack()
        )
    builder.adjust(2)
    return builder.as_markup()


def pending_order_keyboard(pending_id: str) -> InlineKeyboardMarkup:
    return _pair(
        CallbackEntity.PENDING,
        pending_id,
        ("✅ Approve Order", CallbackAction.APPROVE),
        ("❌ Reject Order", CallbackAction.REJECT),
    )


def delivery_order_keyboard(order_id: str) -> InlineKeyboardMarkup:
    return _pair(
        CallbackEntity.DELIVERY,
        order_id,
        ("✅ Accept", CallbackAction.ACCEPT),
        ("❌ Reject", CallbackAction.REJECT),
    )


def payment_keyboard(confirmation_id: str) -> InlineKeyboardMarkup:
    return _pair(
        CallbackEntity.PAYMENT,
        confirmation_id,
        ("✅ Accept Payment", CallbackAction.APPROVE),
        ("❌ Reject Payment", CallbackAction.REJECT),
    )


def kitchen_ticket_keyboard(order_id: str) -> InlineKeyboardMarkup:
    return _pair(
        CallbackEntity.ORDER,
        order_id,
        ("✅ Ready", CallbackAction.READY),
        ("⏰ Delay", CallbackAction.DELAY),
    )


def waiter_call_keyboard(call_id: str) -> InlineKeyboardMarkup:
    """Buttons for the assigned waiter."""
    return _pair(
        CallbackEntity.CALL,
        call_id,
        ("✅ On My Way", CallbackAction.ACK),
        ("⏰ Busy - 5 min", CallbackAction.DELAY),
    )


def unassigned_call_keyboard(call_id: str) -> InlineKeyboardMarkup:
    """Buttons for the cashier when no waiter covers the table."""
    return _pair(
        CallbackEntity.CALL,
        call_id,
        ("✅ Acknowledged", CallbackAction.ACK),
        ("👤 Assign Waiter", CallbackAction.ASSIGN),
    )
