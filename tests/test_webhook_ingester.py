from __future__ import annotations

import pytest

from app.domain.entities import DeliveryIntegration, IntegrationSettings
from conftest import CASHIER_CHAT, sent_chats


def _order_placed(order_id: str = "UE-42", **overrides):
    data = {
        "id": order_id,
        "restaurantId": "cafe1",
        "customer": {
            "name": "Dana",
            "phone": "+15550100",
            "deliveryAddress": {"street": "1 Main St", "city": "Springfield"},
        },
        "items": [
            {"id": "burger", "name": "Burger", "quantity": 2, "price": 9.5},
            {"id": "fries", "name": "Fries", "quantity": 1, "price": 3},
        ],
        "subtotal": 22.0,
        "paymentStatus": "paid",
        "specialInstructions": "No onions",
    }
    data.update(overrides)
    return data


def _enable_auto_accept(memory_db, tenant_id: str, company: str = "uber_eats") -> None:
    integration = DeliveryIntegration(
        user_id=tenant_id,
        delivery_company_id=company,
        settings=IntegrationSettings(auto_accept_orders=True, default_prep_time=25),
    )
    memory_db.add_delivery_integration(integration.to_document())


@pytest.mark.asyncio
async def test_order_placed_creates_pending_delivery_order(services, memory_db, bot, tenant) -> None:
    result = await services.ingester.ingest("uber_eats", "order_placed", _order_placed())

    assert result.success
    assert result.message == "Webhook processed successfully"
    order = memory_db.get_order(result.order_id)
    assert order["status"] == "pending"
    assert order["table_number"] == "DELIVERY"
    assert order["payment_status"] == "paid"
    assert order["total_amount"] == 22.0
    assert order["notes"] == "No onions"
    assert order["delivery_info"]["company"] == "uber_eats"
    assert order["delivery_info"]["order_id"] == "UE-42"
    assert order["delivery_info"]["address"]["city"] == "Springfield"

    event = memory_db.get_webhook_event(result.event_id)
    assert event["processed"] is True
    assert event["processed_at"]
    assert sent_chats(bot) == [CASHIER_CHAT]
    markup = bot.send_message.await_args.kwargs["reply_markup"]
    assert markup.inline_keyboard[0][0].callback_data == f"accept_delivery_{result.order_id}"


@pytest.mark.asyncio
async def test_auto_accept_confirms_through_the_platform(services, memory_db, tenant) -> None:
    _enable_auto_accept(memory_db, tenant)

    result = await services.ingester.ingest("uber_eats", "order_placed", _order_placed())

    order = memory_db.get_order(result.order_id)
    assert order["status"] == "confirmed"
    assert order["estimated_prep_time"] == 25
    assert len(memory_db.get_status_update_logs(result.order_id)) == 1


@pytest.mark.asyncio
async def test_auto_accept_for_unsupported_company_keeps_order_pending(services, memory_db, tenant) -> None:
    _enable_auto_accept(memory_db, tenant, company="postmates")

    result = await services.ingester.ingest("postmates", "order_placed", _order_placed("PM-1"))

    assert result.success
    assert memory_db.get_order(result.order_id)["status"] == "pending"


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["restaurantId", "customer", "items", "subtotal"])
async def test_order_placed_requires_fields(services, memory_db, tenant, missing) -> None:
    data = _order_placed()
    del data[missing]

    result = await services.ingester.ingest("uber_eats", "order_placed", data)

    assert not result.success
    assert result.error == f"Missing required field: {missing}"
    event = memory_db.get_webhook_event(result.event_id)
    assert event["processed"] is False
    assert event["error_message"] == result.error


@pytest.mark.asyncio
async def test_unknown_event_type_is_logged_as_failed(services, memory_db) -> None:
    result = await services.ingester.ingest("doordash", "menu_updated", {"orderId": "1"})

    assert not result.success
    assert result.error == "Unknown event type: menu_updated"
    assert memory_db.get_webhook_event(result.event_id)["type"] == "menu_updated"


@pytest.mark.asyncio
async def test_cancelling_unknown_order_fails(services, memory_db) -> None:
    result = await services.ingester.ingest("uber_eats", "order_cancelled", {"orderId": "missing"})

    assert not result.success
    event = memory_db.get_webhook_event(result.event_id)
    assert event["processed"] is False
    assert event["error_message"] == "Order not found"


@pytest.mark.asyncio
async def test_cancellation_records_reason(services, memory_db, bot, tenant) -> None:
    placed = await services.ingester.ingest("uber_eats", "order_placed", _order_placed())

    result = await services.ingester.ingest(
        "uber_eats", "order_cancelled", {"orderId": "UE-42", "reason": "Customer request"}
    )

    assert result.success
    order = memory_db.get_order(placed.order_id)
    assert order["status"] == "cancelled"
    assert order["cancellation_reason"] == "Customer request"
    assert order["cancelled_at"]
    assert len(sent_chats(bot)) == 2


@pytest.mark.asyncio
async def test_cancelling_delivered_order_is_refused(services, memory_db, tenant) -> None:
    placed = await services.ingester.ingest("uber_eats", "order_placed", _order_placed())
    memory_db.update_order(placed.order_id, {"status": "delivered"})

    result = await services.ingester.ingest("uber_eats", "order_cancelled", {"orderId": "UE-42"})

    assert not result.success
    assert result.error == "Order is already delivered"


@pytest.mark.asyncio
async def test_same_order_id_on_another_platform_is_not_matched(services, memory_db, tenant) -> None:
    await services.ingester.ingest("uber_eats", "order_placed", _order_placed())

    result = await services.ingester.ingest("doordash", "order_cancelled", {"orderId": "UE-42"})

    assert not result.success


@pytest.mark.asyncio
async def test_replayed_event_returns_original(services, memory_db, tenant) -> None:
    first = await services.ingester.ingest(
        "uber_eats", "order_placed", _order_placed(), external_event_id="evt-1"
    )
    second = await services.ingester.ingest(
        "uber_eats", "order_placed", _order_placed(), external_event_id="evt-1"
    )

    assert second.duplicate
    assert second.success
    assert second.event_id == first.event_id
    assert len(memory_db.get_orders_for_user(tenant)) == 1


@pytest.mark.asyncio
async def test_failed_event_is_handled_again_on_retry(services, memory_db, tenant) -> None:
    early = await services.ingester.ingest(
        "uber_eats", "order_cancelled", {"orderId": "UE-42"}, external_event_id="evt-c1"
    )
    placed = await services.ingester.ingest("uber_eats", "order_placed", _order_placed())
    retried = await services.ingester.ingest(
        "uber_eats", "order_cancelled", {"orderId": "UE-42"}, external_event_id="evt-c1"
    )

    assert early.error == "Order not found"
    assert retried.success
    assert retried.duplicate
    assert retried.event_id == early.event_id
    assert memory_db.get_order(placed.order_id)["status"] == "cancelled"
    original = memory_db.get_webhook_event(early.event_id)
    assert original["processed"] is True
    assert original["error_message"] is None
    assert original["attempts"] == 2


@pytest.mark.asyncio
async def test_processed_replay_is_logged_as_duplicate(services, memory_db, tenant) -> None:
    first = await services.ingester.ingest(
        "uber_eats", "order_placed", _order_placed(), external_event_id="evt-2"
    )
    await services.ingester.ingest(
        "uber_eats", "order_placed", _order_placed(), external_event_id="evt-2"
    )

    replays = memory_db.find_documents("delivery_webhook_events", {"duplicate_of": first.event_id})
    assert len(replays) == 1
    assert memory_db.get_webhook_event(first.event_id)["attempts"] == 1


@pytest.mark.asyncio
async def test_event_ids_are_scoped_per_company(services, memory_db, tenant) -> None:
    first = await services.ingester.ingest(
        "uber_eats", "order_placed", _order_placed(), external_event_id="evt-1"
    )
    second = await services.ingester.ingest(
        "doordash", "order_placed", _order_placed("DD-7"), external_event_id="evt-1"
    )

    assert not second.duplicate
    assert second.event_id != first.event_id


@pytest.mark.asyncio
async def test_payment_for_unknown_order_is_a_no_op(services) -> None:
    result = await services.ingester.ingest("grubhub", "payment_confirmed", {"orderId": "nope"})

    assert result.success
    assert result.order_id is None


@pytest.mark.asyncio
async def test_payment_confirmed_marks_order_paid(services, memory_db, tenant) -> None:
    placed = await services.ingester.ingest(
        "grubhub", "order_placed", _order_placed("GH-9", paymentStatus="pending")
    )
    assert memory_db.get_order(placed.order_id)["payment_status"] == "pending"

    await services.ingester.ingest("grubhub", "payment_confirmed", {"orderId": "GH-9"})

    order = memory_db.get_order(placed.order_id)
    assert order["payment_status"] == "paid"
    assert order["paid_at"]


@pytest.mark.asyncio
async def test_delivery_assigned_sets_driver(services, memory_db, bot, tenant) -> None:
    placed = await services.ingester.ingest("doordash", "order_placed", _order_placed("DD-1"))

    result = await services.ingester.ingest(
        "doordash",
        "delivery_assigned",
        {
            "orderId": "DD-1",
            "driverName": "Sam",
            "driverPhone": "+15550199",
            "estimatedPickupTime": "2024-05-06T12:30:00Z",
        },
    )

    assert result.success
    info = memory_db.get_order(placed.order_id)["delivery_info"]
    assert info["driver_name"] == "Sam"
    assert info["driver_phone"] == "+15550199"
    assert info["estimated_pickup_time"] == "2024-05-06T12:30:00Z"
    assert info["order_id"] == "DD-1"
    assert "Sam" in bot.send_message.await_args.args[1]
