"""HTML message templates for staff notifications.

Every renderer takes the plain payload dict the dispatcher receives and
returns Telegram HTML. User-supplied strings are always escaped.
"""
from __future__ import annotations

import html
from typing import Any, Callable

from app.core.utils import parse_iso

STARS_TOTAL = 5


def _esc(value: Any) -> str:
    return html.escape(str(value)) if value not in (None, "") else ""


def _money(value: Any) -> str:
    try:
        return f"${float(value or 0):.2f}"
    except (TypeError, ValueError):
        return "$0.00"


def _when(value: Any) -> str:
    parsed = parse_iso(value) if value else None
    return parsed.strftime("%Y-%m-%d %H:%M") if parsed else _esc(value)


def _short_id(value: Any) -> str:
    return _esc(str(value or "")[:8])


def _item_lines(items: list[dict[str, Any]], with_price: bool = True) -> str:
    lines = []
    for item in items or []:
        line = f"• {_esc(item.get('name'))} x{item.get('quantity', 1)}"
        if with_price:
            line += f" - {_money(item.get('total'))}"
        lines.append(line)
    return "\n".join(lines)


def render_new_order(payload: dict[str, Any]) -> str:
    text = f"🍽️ <b>New Order Pending Approval - Table {_esc(payload.get('table_number'))}</b>\n\n"
    text += _item_lines(payload.get("items", [])) + "\n\n"
    text += f"💰 <b>Total: {_money(payload.get('total_amount'))}</b>\n"
    text += f"🕐 <b>Time:</b> {_when(payload.get('timestamp'))}\n\n"
    text += "⚠️ <b>Awaiting approval...</b>"
    return text


def render_delivery_order(payload: dict[str, Any]) -> str:
    customer = payload.get("customer") or {}
    text = f"🛵 <b>New {_esc(payload.get('company_name'))} Order</b>\n"
    text += f"📋 <b>External ID:</b> {_esc(payload.get('external_order_id'))}\n\n"
    text += _item_lines(payload.get("items", [])) + "\n\n"
    text += f"💰 <b>Subtotal: {_money(payload.get('total_amount'))}</b>\n"
    if payload.get("payment_status") == "paid":
        text += "💳 Paid online\n"
    if customer.get("name"):
        text += f"👤 <b>Customer:</b> {_esc(customer.get('name'))}\n"
    if customer.get("phone"):
        text += f"📞 {_esc(customer.get('phone'))}\n"
    if payload.get("address"):
        text += f"📍 {_esc(payload.get('address'))}\n"
    if payload.get("notes"):
        text += f"📝 <i>{_esc(payload.get('notes'))}</i>\n"
    return text.rstrip()


def render_kitchen_ticket(payload: dict[str, Any]) -> str:
    icon = payload.get("icon") or "👨‍🍳"
    text = (
        f"{icon} <b>{_esc(payload.get('department_name'))} Order - "
        f"Table {_esc(payload.get('table_number'))}</b>\n\n"
    )
    text += _item_lines(payload.get("items", []), with_price=False) + "\n\n"
    text += f"🕐 <b>Time:</b> {_when(payload.get('timestamp'))}\n"
    text += f"📋 <b>Order ID:</b> {_short_id(payload.get('order_id'))}\n\n"
    text += "<b>Status: APPROVED - Start Preparation</b>"
    return text


def render_payment_confirmation(payload: dict[str, Any]) -> str:
    method = payload.get("method")
    method_label = "Bank Transfer" if method == "bank_transfer" else "Mobile Money"
    text = f"💳 <b>Payment Verification Needed - Table {_esc(payload.get('table_number'))}</b>\n\n"
    text += f"💰 <b>Amount:</b> {_money(payload.get('amount'))}\n"
    text += f"💳 <b>Method:</b> {method_label}\n"
    text += f"🕐 <b>Time:</b> {_when(payload.get('timestamp'))}\n\n"
    text += "⚠️ <b>Please verify the payment screenshot</b>"
    return text


def render_waiter_call(payload: dict[str, Any]) -> str:
    table = _esc(payload.get("table_number"))
    if payload.get("waiter_name") and payload.get("to_waiter"):
        text = f"📞 <b>Table {table} is calling you</b>\n"
        text += f"👤 {_esc(payload.get('waiter_name'))}\n"
        text += f"🕐 {_when(payload.get('timestamp'))}"
        return text
    if payload.get("waiter_name"):
        text = f"📞 <b>Table {table} is calling the waiter</b>\n"
        text += f"👤 <b>Assigned:</b> {_esc(payload.get('waiter_name'))}\n"
        text += f"🕐 {_when(payload.get('timestamp'))}"
        return text
    text = f"📞 <b>Table {table} is calling the waiter</b>\n"
    text += f"🕐 {_when(payload.get('timestamp'))}\n\n"
    text += "⚠️ <b>No waiter assigned to this table</b>"
    return text


def render_bill_request(payload: dict[str, Any]) -> str:
    text = f"💸 <b>Table {_esc(payload.get('table_number'))} is requesting the bill</b>\n"
    if payload.get("total") is not None:
        text += f"💰 <b>Total:</b> {_money(payload.get('total'))}\n"
    text += f"🕐 {_when(payload.get('timestamp'))}"
    return text


def render_cancellation(payload: dict[str, Any]) -> str:
    text = f"❌ <b>{_esc(payload.get('company_name'))} order cancelled</b>\n\n"
    text += f"📋 <b>External ID:</b> {_esc(payload.get('external_order_id'))}\n"
    text += f"📋 <b>Order:</b> {_short_id(payload.get('order_id'))}\n"
    text += f"💬 <b>Reason:</b> {_esc(payload.get('reason'))}"
    return text


def render_driver_assigned(payload: dict[str, Any]) -> str:
    text = f"🚗 <b>Driver assigned - {_esc(payload.get('company_name'))}</b>\n\n"
    text += f"📋 <b>External ID:</b> {_esc(payload.get('external_order_id'))}\n"
    text += f"👤 <b>Driver:</b> {_esc(payload.get('driver_name')) or 'Unknown'}\n"
    if payload.get("driver_phone"):
        text += f"📞 {_esc(payload.get('driver_phone'))}\n"
    if payload.get("estimated_pickup_time"):
        text += f"⏱ <b>Pickup ETA:</b> {_when(payload.get('estimated_pickup_time'))}"
    return text.rstrip()


def render_order_status(payload: dict[str, Any]) -> str:
    text = f"🔄 <b>Order {_short_id(payload.get('order_id'))}</b> is now "
    text += f"<b>{_esc(payload.get('status'))}</b>"
    if payload.get("table_number"):
        text += f" (Table {_esc(payload.get('table_number'))})"
    return text


def render_day_report(payload: dict[str, Any]) -> str:
    cashier = payload.get("cashier_info") or {}
    kitchen = payload.get("kitchen") or {}
    top_items = payload.get("most_ordered_items") or []

    text = "📊 <b>Day Closing Report</b>\n"
    text += f"📅 {_esc(payload.get('date'))}\n"
    text += f"👤 <b>Cashier:</b> {_esc(cashier.get('name'))} ({_esc(cashier.get('shift'))} shift)\n\n"
    text += f"📈 <b>Orders:</b> {payload.get('total_orders', 0)}\n"
    text += f"💰 <b>Revenue:</b> {_money(payload.get('total_revenue'))}\n"
    text += f"💳 <b>Payments Processed:</b> {payload.get('total_payments', 0)}\n"
    text += f"🏆 <b>Most Active Table:</b> {_esc(payload.get('most_active_table'))}\n"
    text += f"📞 <b>Waiter Calls:</b> {payload.get('waiter_calls', 0)}\n\n"
    text += "🍽️ <b>Top Ordered Items:</b>\n"
    if top_items:
        for index, item in enumerate(top_items[:5], start=1):
            text += f"{index}. {_esc(item.get('name'))} ({item.get('count')} orders)\n"
    else:
        text += "No orders today\n"
    text += (
        f"\n👨‍🍳 <b>Kitchen:</b> {kitchen.get('orders', 0)} orders "
        f"(Avg: {kitchen.get('avg_prep_time', 15)}min)\n\n"
    )
    if cashier.get("notes"):
        text += f"📝 <b>Notes:</b> {_esc(cashier.get('notes'))}\n\n"
    text += "✅ <b>Day closed successfully!</b>"
    return text


def render_feedback(payload: dict[str, Any]) -> str:
    rating = max(1, min(STARS_TOTAL, int(payload.get("rating") or 1)))
    customer = payload.get("customer_info") or {}
    name = customer.get("name") or customer.get("telegram_username") or "Anonymous Customer"

    text = "📝 <b>New Customer Feedback</b>\n\n"
    text += f"🏷️ <b>Table {_esc(payload.get('table_number'))}</b>\n"
    text += f"👤 <b>Customer:</b> {_esc(name)}\n\n"
    text += f"⭐ <b>Rating:</b> {'⭐' * rating}{'☆' * (STARS_TOTAL - rating)} ({rating}/5)\n\n"
    if payload.get("comment"):
        text += f'💬 <b>Comment:</b>\n<i>"{_esc(payload.get("comment"))}"</i>\n'
    text += f"📋 <b>Order:</b> {_short_id(payload.get('order_id'))}...\n"
    text += f"🕐 <b>Submitted:</b> {_when(payload.get('timestamp'))}\n"
    if rating >= 4:
        text += "🎉 <b>Great feedback! Keep it up!</b>"
    elif rating >= 3:
        text += "👍 <b>Good feedback. Room for improvement.</b>"
    else:
        text += "⚠️ <b>Low rating. Consider following up with customer.</b>"
    return text


def render_test_message(payload: dict[str, Any]) -> str:
    text = "🤖 <b>Test Message</b>\n\n"
    if payload.get("message"):
        text += f"{_esc(payload.get('message'))}\n\n"
    text += "✅ Your Telegram integration is working correctly!\n"
    text += f"🕐 {_when(payload.get('timestamp'))}"
    return text


RENDERERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "new_order": render_new_order,
    "delivery_order": render_delivery_order,
    "kitchen_ticket": render_kitchen_ticket,
    "payment_confirmation": render_payment_confirmation,
    "waiter_call": render_waiter_call,
    "bill_request": render_bill_request,
    "cancellation": render_cancellation,
    "driver_assigned": render_driver_assigned,
    "order_status": render_order_status,
    "day_report": render_day_report,
    "feedback": render_feedback,
    "test_message": render_test_message,
}


def render(kind: str, payload: dict[str, Any]) -> str:
    try:
        renderer = RENDERERS[kind]
    except KeyError:
        raise ValueError(f"No template for notification kind {kind!r}") from None
    return renderer(payload)
