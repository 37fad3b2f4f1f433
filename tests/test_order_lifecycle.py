from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import (
    ExternalCallException,
    InvalidStateException,
    OrderNotFoundException,
    UnsupportedCompanyException,
    ValidationException,
)
from app.domain.entities import DeliveryInfo, Order, OrderItem
from conftest import CASHIER_CHAT, KITCHEN_CHAT, sent_chats


def _delivery_order(memory_db, tenant_id: str, status: str = "pending", company: str = "uber_eats") -> str:
    order = Order(
        user_id=tenant_id,
        table_number="DELIVERY",
        items=[OrderItem(id="burger", name="Burger", quantity=2, price=8.5)],
        total_amount=17.0,
        status=status,
        timestamp="2024-05-06T12:00:00+00:00",
        delivery_info=DeliveryInfo(company=company, order_id="UE-1001"),
    )
    return memory_db.add_order(order.to_document())


@pytest.mark.asyncio
async def test_update_status_pushes_then_records(services, memory_db, tenant) -> None:
    order_id = _delivery_order(memory_db, tenant)

    result = await services.lifecycle.update_status(order_id, "accepted", 15, "uber_eats")

    assert result.success
    assert result.internal_status == "confirmed"
    stored = memory_db.get_order(order_id)
    assert stored["status"] == "confirmed"
    assert stored["estimated_prep_time"] == 15
    assert stored["accepted_at"]
    logs = memory_db.get_status_update_logs(order_id)
    assert len(logs) == 1
    assert logs[0]["delivery_company_order_id"] == "UE-1001"
    assert logs[0]["success"] is True


@pytest.mark.asyncio
async def test_recorded_status_is_announced_to_the_kitchen(services, memory_db, bot, tenant) -> None:
    order_id = _delivery_order(memory_db, tenant)

    await services.lifecycle.update_status(order_id, "ready", None, "uber_eats")

    assert sent_chats(bot) == [KITCHEN_CHAT]
    assert f"<b>Order {order_id[:8]}</b> is now <b>ready</b>" in bot.send_message.await_args.args[1]


@pytest.mark.asyncio
async def test_platform_failure_leaves_order_untouched(services, memory_db, tenant, monkeypatch) -> None:
    order_id = _delivery_order(memory_db, tenant)
    client = services.registry.get("uber_eats")
    monkeypatch.setattr(
        client,
        "update_order_status",
        AsyncMock(side_effect=ExternalCallException("Uber Eats responded 503", "uber_eats", retryable=True)),
    )

    result = await services.lifecycle.update_status(order_id, "ready", None, "uber_eats")

    assert not result.success
    assert result.retryable
    assert result.error == "Uber Eats responded 503"
    stored = memory_db.get_order(order_id)
    assert stored["status"] == "pending"
    assert stored["version"] == 1
    logs = memory_db.get_status_update_logs(order_id)
    assert [(log["success"], log["error_message"]) for log in logs] == [
        (False, "Uber Eats responded 503")
    ]


@pytest.mark.asyncio
async def test_status_survives_a_concurrent_payment_write(services, memory_db, tenant, monkeypatch) -> None:
    order_id = _delivery_order(memory_db, tenant)

    async def platform_call(*args):
        memory_db.update_order(order_id, {"payment_status": "paid"})

    monkeypatch.setattr(
        services.registry.get("uber_eats"), "update_order_status", AsyncMock(side_effect=platform_call)
    )

    result = await services.lifecycle.update_status(order_id, "accepted", 15, "uber_eats")

    assert result.success
    stored = memory_db.get_order(order_id)
    assert stored["status"] == "confirmed"
    assert stored["payment_status"] == "paid"
    assert stored["version"] == 3
    assert [log["success"] for log in memory_db.get_status_update_logs(order_id)] == [True]


@pytest.mark.asyncio
async def test_status_overtaken_by_cancellation_is_audited(services, memory_db, tenant, monkeypatch) -> None:
    order_id = _delivery_order(memory_db, tenant)

    async def platform_call(*args):
        memory_db.update_order(order_id, {"status": "cancelled"})

    monkeypatch.setattr(
        services.registry.get("uber_eats"), "update_order_status", AsyncMock(side_effect=platform_call)
    )

    result = await services.lifecycle.update_status(order_id, "ready", None, "uber_eats")

    assert not result.success
    assert result.error
    assert memory_db.get_order(order_id)["status"] == "cancelled"
    logs = memory_db.get_status_update_logs(order_id)
    assert [log["success"] for log in logs] == [False]
    assert logs[0]["error_message"] == result.error


@pytest.mark.asyncio
async def test_unsupported_company_is_rejected_before_any_write(services, memory_db, tenant) -> None:
    order_id = _delivery_order(memory_db, tenant)

    with pytest.raises(UnsupportedCompanyException):
        await services.lifecycle.update_status(order_id, "accepted", None, "fake_corp")

    assert memory_db.get_order(order_id)["status"] == "pending"


@pytest.mark.asyncio
async def test_company_defaults_to_the_order_platform(services, memory_db, tenant) -> None:
    order_id = _delivery_order(memory_db, tenant, company="doordash")

    result = await services.lifecycle.accept_delivery_order(order_id, 20)

    assert result.success
    assert memory_db.get_status_update_logs(order_id)[0]["delivery_company"] == "doordash"


@pytest.mark.asyncio
async def test_missing_and_table_orders_are_refused(services, memory_db, tenant) -> None:
    with pytest.raises(OrderNotFoundException):
        await services.lifecycle.update_status("nope", "accepted")

    table_order = Order(
        user_id=tenant,
        table_number="4",
        items=[OrderItem(id="tea", name="Tea", quantity=1, price=2)],
        total_amount=2,
        timestamp="2024-05-06T12:00:00+00:00",
    )
    order_id = memory_db.add_order(table_order.to_document())
    with pytest.raises(InvalidStateException, match="Not a delivery order"):
        await services.lifecycle.update_status(order_id, "accepted")


@pytest.mark.asyncio
async def test_terminal_order_cannot_change(services, memory_db, tenant) -> None:
    order_id = _delivery_order(memory_db, tenant, status="cancelled")

    with pytest.raises(InvalidStateException):
        await services.lifecycle.update_status(order_id, "ready")


@pytest.mark.asyncio
async def test_table_order_flow(services, memory_db, bot, tenant) -> None:
    pending = await services.lifecycle.place_pending_order(
        tenant,
        "5",
        [
            {"id": "burger", "name": "Burger", "quantity": 2, "price": 10},
            {"id": "cola", "name": "Cola", "quantity": 1, "price": 3},
        ],
    )
    assert pending["total_amount"] == 23.0
    assert sent_chats(bot) == [CASHIER_CHAT]
    markup = bot.send_message.await_args.kwargs["reply_markup"]
    assert markup.inline_keyboard[0][0].callback_data == f"approve_pending_{pending['id']}"

    order = await services.lifecycle.approve_pending_order(pending["id"])

    assert order["status"] == "confirmed"
    assert order["confirmed_at"]
    assert memory_db.get_pending_order(pending["id"]) is None
    bill = memory_db.get_active_table_bill(tenant, "5")
    assert bill["subtotal"] == 23.0
    assert bill["tax"] == 3.45
    assert bill["total"] == 26.45
    assert bill["order_ids"] == [order["id"]]
    assert sent_chats(bot)[-1] == KITCHEN_CHAT

    with pytest.raises(OrderNotFoundException):
        await services.lifecycle.approve_pending_order(pending["id"])


@pytest.mark.asyncio
async def test_empty_cart_is_rejected(services, tenant) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await services.lifecycle.place_pending_order(tenant, "5", [])
    assert exc_info.value.required == ["items"]


@pytest.mark.asyncio
async def test_mark_ready_follows_transition_rules(services, memory_db, tenant) -> None:
    pending = await services.lifecycle.place_pending_order(
        tenant, "2", [{"id": "soup", "name": "Soup", "quantity": 1, "price": 6}]
    )
    order = await services.lifecycle.approve_pending_order(pending["id"])

    ready = await services.lifecycle.mark_ready(order["id"])
    assert ready["status"] == "ready"
    assert ready["ready_at"]

    await services.lifecycle.set_table_order_status(order["id"], "delivered")
    with pytest.raises(InvalidStateException):
        await services.lifecycle.mark_ready(order["id"])
