from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.callbacks import StaffCallback
from app.domain.entities import DeliveryInfo, Order, OrderItem
from handlers import commands, staff
from handlers.filters import StaffCallbackFilter


@pytest.fixture()
def wired(services):
    staff.setup_dependencies(services)
    commands.setup_dependencies(services)
    yield services
    staff.setup_dependencies(None)
    commands.setup_dependencies(None)


def _callback(data: str) -> MagicMock:
    callback = MagicMock()
    callback.data = data
    callback.answer = AsyncMock()
    callback.message.answer = AsyncMock()
    return callback


def _replies(callback: MagicMock) -> list[str]:
    return [call.args[0] for call in callback.message.answer.await_args_list]


async def _pending(services, tenant: str, table: str = "5") -> dict:
    return await services.lifecycle.place_pending_order(
        tenant, table, [{"id": "tea", "name": "Tea", "quantity": 1, "price": 2}]
    )


# =============================================================================
# FILTER
# =============================================================================


@pytest.mark.asyncio
async def test_filter_matches_entity_and_actions() -> None:
    pending_filter = StaffCallbackFilter("pending")
    ready_only = StaffCallbackFilter("order", "ready")

    result = await pending_filter(_callback("approve_pending_abc"))
    assert result == {"staff_callback": StaffCallback("approve", "pending", "abc")}
    assert await pending_filter(_callback("approve_payment_abc")) is False
    assert await pending_filter(_callback("something else")) is False
    assert await ready_only(_callback("delay_order_abc")) is False
    assert await ready_only(_callback("ready_order_abc")) == {
        "staff_callback": StaffCallback("ready", "order", "abc")
    }


# =============================================================================
# PENDING ORDERS
# =============================================================================


@pytest.mark.asyncio
async def test_approve_pending_order(wired, memory_db, tenant) -> None:
    pending = await _pending(wired, tenant)
    callback = _callback(f"approve_pending_{pending['id']}")

    await staff.handle_pending_order(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback) == [
        "✅ Order approved for Table 5!\n\n📋 Order sent to kitchen\n💰 Added to table bill"
    ]
    callback.answer.assert_awaited_once_with()
    assert memory_db.get_active_table_bill(tenant, "5") is not None


@pytest.mark.asyncio
async def test_reject_pending_order(wired, memory_db, tenant) -> None:
    pending = await _pending(wired, tenant, table="3")
    callback = _callback(f"reject_pending_{pending['id']}")

    await staff.handle_pending_order(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback) == ["❌ Order rejected for Table 3"]
    assert memory_db.get_pending_order(pending["id"]) is None


@pytest.mark.asyncio
async def test_already_processed_pending_order(wired, tenant) -> None:
    callback = _callback("approve_pending_gone")

    await staff.handle_pending_order(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback) == ["❌ Order not found or already processed"]
    callback.answer.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_unexpected_error_is_answered(wired, tenant, monkeypatch) -> None:
    monkeypatch.setattr(
        wired.lifecycle, "approve_pending_order", AsyncMock(side_effect=RuntimeError("db down"))
    )
    callback = _callback("approve_pending_x")

    await staff.handle_pending_order(callback, StaffCallback.unpack(callback.data))

    callback.answer.assert_awaited_once_with("Error processing request")


# =============================================================================
# PAYMENTS
# =============================================================================


@pytest.mark.asyncio
async def test_payment_buttons(wired, tenant) -> None:
    confirmation = await wired.billing.submit_payment_confirmation(tenant, "2", 11.5, "bank_transfer")
    approve = _callback(f"approve_payment_{confirmation['id']}")
    again = _callback(f"reject_payment_{confirmation['id']}")

    await staff.handle_payment(approve, StaffCallback.unpack(approve.data))
    await staff.handle_payment(again, StaffCallback.unpack(again.data))

    assert _replies(approve) == [
        "✅ Payment approved for Table 2!\n💰 Amount: $11.50\n💳 Method: bank transfer"
    ]
    assert _replies(again) == ["❌ Payment already approved"]


# =============================================================================
# WAITER CALLS
# =============================================================================


@pytest.mark.asyncio
async def test_waiter_call_buttons(wired, memory_db, tenant) -> None:
    routing = await wired.notifications.send_waiter_call(tenant, "7")

    ack = _callback(f"ack_call_{routing.call_id}")
    await staff.handle_waiter_call(ack, StaffCallback.unpack(ack.data))
    delay = _callback(f"delay_call_{routing.call_id}")
    await staff.handle_waiter_call(delay, StaffCallback.unpack(delay.data))
    assign = _callback(f"assign_call_{routing.call_id}")
    await staff.handle_waiter_call(assign, StaffCallback.unpack(assign.data))

    assert _replies(ack) == ["✅ Acknowledged! On the way to Table 7"]
    assert _replies(delay) == ["⏰ Table 7 - Will be there in 5 minutes"]
    assert _replies(assign)[0].startswith("👤 No waiter covers Table 7.")
    call = memory_db.get_waiter_call(routing.call_id)
    assert call["status"] == "acknowledged"
    assert call["acknowledged_at"]


@pytest.mark.asyncio
async def test_unknown_waiter_call(wired) -> None:
    callback = _callback("ack_call_nope")

    await staff.handle_waiter_call(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback) == ["❌ Waiter call not found"]


# =============================================================================
# KITCHEN AND DELIVERY
# =============================================================================


@pytest.mark.asyncio
async def test_kitchen_ready_button(wired, memory_db, tenant) -> None:
    order = await wired.lifecycle.approve_pending_order((await _pending(wired, tenant))["id"])
    callback = _callback(f"ready_order_{order['id']}")

    await staff.handle_kitchen_ticket(callback, StaffCallback.unpack(callback.data))
    await staff.handle_kitchen_ticket(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback)[0] == f"✅ Order {order['id'][:8]} marked as ready!"
    # ready -> ready is a no-op transition
    assert _replies(callback)[1] == f"✅ Order {order['id'][:8]} marked as ready!"
    assert memory_db.get_order(order["id"])["status"] == "ready"


@pytest.mark.asyncio
async def test_kitchen_button_on_delivered_order(wired, memory_db, tenant) -> None:
    order = await wired.lifecycle.approve_pending_order((await _pending(wired, tenant))["id"])
    memory_db.update_order(order["id"], {"status": "delivered"})
    callback = _callback(f"ready_order_{order['id']}")

    await staff.handle_kitchen_ticket(callback, StaffCallback.unpack(callback.data))

    assert _replies(callback) == ["⚠️ Order is already delivered"]


@pytest.mark.asyncio
async def test_delivery_accept_button(wired, memory_db, tenant, monkeypatch) -> None:
    order_id = memory_db.add_order(
        Order(
            user_id=tenant,
            table_number="DELIVERY",
            items=[OrderItem(id="a", name="A", quantity=1, price=1)],
            total_amount=1,
            timestamp="2024-05-06T12:00:00+00:00",
            delivery_info=DeliveryInfo(company="grubhub", order_id="GH-1"),
        ).to_document()
    )
    accept = _callback(f"accept_delivery_{order_id}")

    await staff.handle_delivery_order(accept, StaffCallback.unpack(accept.data))

    assert _replies(accept) == [f"✅ Delivery order {order_id[:8]} accepted"]
    assert memory_db.get_order(order_id)["status"] == "confirmed"


# =============================================================================
# COMMANDS
# =============================================================================


def test_table_welcome_escapes_ids() -> None:
    text = commands.build_table_welcome("<cafe>", "1", "https://menu.example.com/menu?cafe=x&table=1")

    assert "&lt;cafe&gt;" in text
    assert 'href="https://menu.example.com/menu?cafe=x&amp;table=1"' in text


def test_status_message_time() -> None:
    text = commands.build_status_message(datetime(2024, 5, 6, 8, 30))

    assert "2024-05-06 08:30:00" in text


@pytest.mark.asyncio
async def test_start_with_table_link(wired, tenant) -> None:
    message = MagicMock()
    message.answer = AsyncMock()
    command = MagicMock(args=f"{tenant}_4")

    await commands.cmd_start(message, command)

    text = message.answer.await_args.args[0]
    assert "<b>Table:</b> 4" in text
    assert "cafe=cafe1&amp;table=4" in text


@pytest.mark.asyncio
async def test_plain_start() -> None:
    message = MagicMock()
    message.answer = AsyncMock()

    await commands.cmd_start(message, MagicMock(args=None))

    assert message.answer.await_args.args[0] == commands.build_welcome_message()
