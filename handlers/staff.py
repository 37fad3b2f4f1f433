"""Staff inline-button handlers.

Cashier, kitchen and waiter chats receive notifications with action buttons;
each button press lands here as a `StaffCallback` and is turned into a
service call. Every callback is answered so the button stops spinning.
"""
from __future__ import annotations

from typing import Any

from aiogram import Router, types

from app.core.exceptions import InvalidStateException, NotFoundException, OrderNotFoundException
from app.core.utils import utc_now_iso
from app.domain.callbacks import CallbackAction, CallbackEntity, StaffCallback
from app.domain.value_objects import WaiterCallStatus
from logging_config import logger

from .filters import StaffCallbackFilter

router = Router(name="staff")

# Module dependencies
services: Any | None = None

ORDER_NOT_FOUND = "❌ Order not found or already processed"
ERROR_ANSWER = "Error processing request"


def setup_dependencies(wired_services: Any) -> None:
    """Setup module dependencies."""
    global services
    services = wired_services
    logger.info("✅ Staff handlers initialized")


async def _reply(callback: types.CallbackQuery, text: str) -> None:
    if callback.message:
        await callback.message.answer(text)


def _short(entity_id: str) -> str:
    return entity_id[:8]


def _method_label(method: Any) -> str:
    return str(method or "").replace("_", " ")


# =============================================================================
# PENDING TABLE ORDERS (cashier)
# =============================================================================


@router.callback_query(StaffCallbackFilter(CallbackEntity.PENDING))
async def handle_pending_order(callback: types.CallbackQuery, staff_callback: StaffCallback) -> None:
    try:
        if staff_callback.action == CallbackAction.APPROVE:
            order = await services.lifecycle.approve_pending_order(staff_callback.entity_id)
            await _reply(
                callback,
                f"✅ Order approved for Table {order['table_number']}!\n\n"
                "📋 Order sent to kitchen\n💰 Added to table bill",
            )
        else:
            pending = await services.db.get_pending_order(staff_callback.entity_id)
            await services.lifecycle.reject_pending_order(staff_callback.entity_id)
            await _reply(callback, f"❌ Order rejected for Table {pending['table_number']}")
        await callback.answer()
    except OrderNotFoundException:
        await _reply(callback, ORDER_NOT_FOUND)
        await callback.answer()
    except Exception as e:
        logger.error(f"Error handling {callback.data}: {e}", exc_info=True)
        await callback.answer(ERROR_ANSWER)


# =============================================================================
# PAYMENT CONFIRMATIONS (cashier)
# =============================================================================


@router.callback_query(StaffCallbackFilter(CallbackEntity.PAYMENT))
async def handle_payment(callback: types.CallbackQuery, staff_callback: StaffCallback) -> None:
    confirmation_id = staff_callback.entity_id
    try:
        if staff_callback.action == CallbackAction.APPROVE:
            confirmation = await services.billing.approve_payment(confirmation_id)
            await _reply(
                callback,
                f"✅ Payment approved for Table {confirmation['table_number']}!\n"
                f"💰 Amount: ${float(confirmation['amount']):.2f}\n"
                f"💳 Method: {_method_label(confirmation.get('method'))}",
            )
        else:
            confirmation = await services.billing.reject_payment(confirmation_id)
            await _reply(
                callback,
                f"❌ Payment rejected for Table {confirmation['table_number']}\n"
                f"💰 Amount: ${float(confirmation['amount']):.2f}",
            )
        await callback.answer()
    except (NotFoundException, InvalidStateException) as e:
        await _reply(callback, f"❌ {e.message}")
        await callback.answer()
    except Exception as e:
        logger.error(f"Error handling {callback.data}: {e}", exc_info=True)
        await callback.answer(ERROR_ANSWER)


# =============================================================================
# WAITER CALLS (waiter or cashier)
# =============================================================================


@router.callback_query(StaffCallbackFilter(CallbackEntity.CALL))
async def handle_waiter_call(callback: types.CallbackQuery, staff_callback: StaffCallback) -> None:
    call_id = staff_callback.entity_id
    try:
        call = await services.db.get_waiter_call(call_id)
        if not call:
            await _reply(callback, "❌ Waiter call not found")
            await callback.answer()
            return
        table = call.get("table_number")

        if staff_callback.action == CallbackAction.ACK:
            await services.db.update_waiter_call(
                call_id,
                {
                    "status": WaiterCallStatus.ACKNOWLEDGED.value,
                    "acknowledged_at": utc_now_iso(),
                },
            )
            await _reply(callback, f"✅ Acknowledged! On the way to Table {table}")
        elif staff_callback.action == CallbackAction.DELAY:
            await _reply(callback, f"⏰ Table {table} - Will be there in 5 minutes")
        else:
            await _reply(
                callback,
                f"👤 No waiter covers Table {table}.\n"
                "Assign one in the dashboard under Waiter Management.",
            )
        await callback.answer()
    except Exception as e:
        logger.error(f"Error handling {callback.data}: {e}", exc_info=True)
        await callback.answer(ERROR_ANSWER)


# =============================================================================
# KITCHEN TICKETS (department chats)
# =============================================================================


@router.callback_query(StaffCallbackFilter(CallbackEntity.ORDER))
async def handle_kitchen_ticket(callback: types.CallbackQuery, staff_callback: StaffCallback) -> None:
    order_id = staff_callback.entity_id
    try:
        if staff_callback.action == CallbackAction.READY:
            await services.lifecycle.mark_ready(order_id)
            await _reply(callback, f"✅ Order {_short(order_id)} marked as ready!")
        else:
            await _reply(callback, f"⏰ Order {_short(order_id)} - Additional time needed")
        await callback.answer()
    except OrderNotFoundException:
        await _reply(callback, ORDER_NOT_FOUND)
        await callback.answer()
    except InvalidStateException as e:
        await _reply(callback, f"⚠️ {e.message}")
        await callback.answer()
    except Exception as e:
        logger.error(f"Error handling {callback.data}: {e}", exc_info=True)
        await callback.answer(ERROR_ANSWER)


# =============================================================================
# DELIVERY PLATFORM ORDERS (cashier)
# =============================================================================


@router.callback_query(StaffCallbackFilter(CallbackEntity.DELIVERY))
async def handle_delivery_order(callback: types.CallbackQuery, staff_callback: StaffCallback) -> None:
    order_id = staff_callback.entity_id
    try:
        if staff_callback.action == CallbackAction.ACCEPT:
            result = await services.lifecycle.accept_delivery_order(order_id)
            verb = "accepted"
        else:
            result = await services.lifecycle.reject_delivery_order(order_id)
            verb = "rejected"

        if result.success:
            await _reply(callback, f"✅ Delivery order {_short(order_id)} {verb}")
        else:
            retry = " (retry later)" if result.retryable else ""
            await _reply(callback, f"❌ Platform update failed: {result.error}{retry}")
        await callback.answer()
    except OrderNotFoundException:
        await _reply(callback, ORDER_NOT_FOUND)
        await callback.answer()
    except InvalidStateException as e:
        await _reply(callback, f"⚠️ {e.message}")
        await callback.answer()
    except Exception as e:
        logger.error(f"Error handling {callback.data}: {e}", exc_info=True)
        await callback.answer(ERROR_ANSWER)
