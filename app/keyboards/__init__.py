"""Keyboards package - inline action buttons for staff chats.

Usage:
    from app.keyboards import pending_order_keyboard, waiter_call_keyboard
"""

from .staff import (
    delivery_order_keyboard,
    kitchen_ticket_keyboard,
    payment_keyboard,
    pending_order_keyboard,
    unassigned_call_keyboard,
    waiter_call_keyboard,
)

__all__ = [
    "delivery_order_keyboard",
    "kitchen_ticket_keyboard",
    "payment_keyboard",
    "pending_order_keyboard",
    "unassigned_call_keyboard",
    "waiter_call_keyboard",
]
