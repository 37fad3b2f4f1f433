from __future__ import annotations

import pytest

from app.core.exceptions import (
    ConcurrentModificationException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from app.domain.entities import OrderItem
from app.services.billing_service import MERGE_ATTEMPTS, bill_amounts, merge_items
from conftest import CASHIER_CHAT, sent_chats


def _items(*lines: tuple[str, int, float]) -> list[OrderItem]:
    return [
        OrderItem(id=item_id, name=item_id.title(), quantity=qty, price=price)
        for item_id, qty, price in lines
    ]


def test_merge_adds_quantities_and_totals() -> None:
    existing = [{"id": "tea", "name": "Tea", "quantity": 1, "price": 2.5, "total": 2.5}]

    merged = merge_items(existing, _items(("tea", 2, 2.5), ("cake", 1, 4)))

    assert merged[0]["quantity"] == 3
    assert merged[0]["total"] == 7.5
    assert merged[1]["id"] == "cake"
    assert merged[1]["total"] == 4.0
    # input list is not mutated
    assert existing[0]["quantity"] == 1


def test_bill_amounts_round_to_cents() -> None:
    amounts = bill_amounts([{"total": 0.1}, {"total": 0.2}], 0.1)

    assert amounts == {"subtotal": 0.3, "tax": 0.03, "total": 0.33}


@pytest.mark.asyncio
async def test_bill_opened_then_merged(services, memory_db, tenant) -> None:
    first = await services.billing.add_to_table_bill(tenant, "4", _items(("tea", 1, 2)), order_id="o1")
    second = await services.billing.add_to_table_bill(
        tenant, 4, _items(("tea", 1, 2), ("cake", 2, 5)), order_id="o2"
    )

    assert second["id"] == first["id"]
    assert second["order_ids"] == ["o1", "o2"]
    assert [(i["id"], i["quantity"]) for i in second["items"]] == [("tea", 2), ("cake", 2)]
    assert second["subtotal"] == 14.0
    assert second["tax"] == 2.1
    assert second["total"] == 16.1


@pytest.mark.asyncio
async def test_tenant_tax_rate_is_used(services, memory_db, tenant) -> None:
    memory_db.update_tenant(tenant, {"settings.tax_rate": 0.1})

    bill = await services.billing.add_to_table_bill(tenant, "1", _items(("soup", 1, 10)))

    assert bill["tax"] == 1.0


@pytest.mark.asyncio
async def test_merge_gives_up_after_repeated_conflicts(services, memory_db, tenant, monkeypatch) -> None:
    await services.billing.add_to_table_bill(tenant, "4", _items(("tea", 1, 2)))
    calls = []

    def always_conflict(bill_id, changes, expected_version=None):
        calls.append(bill_id)
        raise ConcurrentModificationException("table_bills", bill_id, expected_version, expected_version + 1)

    monkeypatch.setattr(memory_db, "update_table_bill", always_conflict)

    with pytest.raises(ConcurrentModificationException):
        await services.billing.add_to_table_bill(tenant, "4", _items(("tea", 1, 2)))
    assert len(calls) == MERGE_ATTEMPTS


@pytest.mark.asyncio
async def test_payment_approval_closes_bill(services, memory_db, bot, tenant) -> None:
    bill = await services.billing.add_to_table_bill(tenant, "6", _items(("pasta", 2, 11)))
    confirmation = await services.billing.submit_payment_confirmation(
        tenant, "6", 25.3, "bank_transfer", screenshot_url="https://img.example.com/p.png"
    )
    assert sent_chats(bot) == [CASHIER_CHAT]
    bot.send_photo.assert_awaited_once()

    approved = await services.billing.approve_payment(confirmation["id"])

    assert approved["status"] == "approved"
    assert approved["processed_at"]
    paid = memory_db.get_table_bill(bill["id"])
    assert paid["status"] == "paid"
    assert paid["payment_confirmation_id"] == confirmation["id"]
    assert memory_db.get_active_table_bill(tenant, "6") is None
    closed = memory_db.find_documents("bills")
    assert len(closed) == 1
    assert closed[0]["total"] == bill["total"]
    assert closed[0]["payment_method"] == "bank_transfer"

    with pytest.raises(InvalidStateException, match="Payment already approved"):
        await services.billing.approve_payment(confirmation["id"])


@pytest.mark.asyncio
async def test_approval_retries_when_an_order_lands_on_the_bill(services, memory_db, tenant, monkeypatch) -> None:
    bill = await services.billing.add_to_table_bill(tenant, "6", _items(("pasta", 1, 10)))
    confirmation = await services.billing.submit_payment_confirmation(tenant, "6", 11.5, "mobile_money")
    original_update = memory_db.update_table_bill
    interleaved = []

    def update_after_new_order(bill_id, changes, expected_version=None):
        if not interleaved:
            interleaved.append(bill_id)
            original_update(bill_id, {"items": bill["items"] * 2, "total": 23.0})
        return original_update(bill_id, changes, expected_version=expected_version)

    monkeypatch.setattr(memory_db, "update_table_bill", update_after_new_order)

    approved = await services.billing.approve_payment(confirmation["id"])

    assert approved["status"] == "approved"
    assert memory_db.get_table_bill(bill["id"])["status"] == "paid"
    assert [b["total"] for b in memory_db.find_documents("bills")] == [23.0]


@pytest.mark.asyncio
async def test_failed_bill_close_keeps_payment_pending(services, memory_db, tenant, monkeypatch) -> None:
    await services.billing.add_to_table_bill(tenant, "6", _items(("pasta", 1, 10)))
    confirmation = await services.billing.submit_payment_confirmation(tenant, "6", 11.5, "mobile_money")

    def always_conflict(bill_id, changes, expected_version=None):
        raise ConcurrentModificationException("table_bills", bill_id, expected_version, expected_version + 1)

    monkeypatch.setattr(memory_db, "update_table_bill", always_conflict)

    with pytest.raises(ConcurrentModificationException):
        await services.billing.approve_payment(confirmation["id"])

    assert memory_db.get_payment_confirmation(confirmation["id"])["status"] == "pending"
    assert memory_db.find_documents("bills") == []
    monkeypatch.undo()

    approved = await services.billing.approve_payment(confirmation["id"])

    assert approved["status"] == "approved"
    assert memory_db.get_active_table_bill(tenant, "6") is None


@pytest.mark.asyncio
async def test_new_order_after_payment_opens_new_bill(services, memory_db, tenant) -> None:
    first = await services.billing.add_to_table_bill(tenant, "6", _items(("pasta", 1, 11)))
    confirmation = await services.billing.submit_payment_confirmation(tenant, "6", 12.65, "mobile_money")
    await services.billing.approve_payment(confirmation["id"])

    second = await services.billing.add_to_table_bill(tenant, "6", _items(("pasta", 1, 11)))

    assert second["id"] != first["id"]
    assert second["status"] == "active"


@pytest.mark.asyncio
async def test_payment_rejection_keeps_bill_open(services, memory_db, tenant) -> None:
    await services.billing.add_to_table_bill(tenant, "2", _items(("tea", 1, 2)))
    confirmation = await services.billing.submit_payment_confirmation(tenant, "2", 2.3, "mobile_money")

    rejected = await services.billing.reject_payment(confirmation["id"])

    assert rejected["status"] == "rejected"
    assert memory_db.get_active_table_bill(tenant, "2") is not None


@pytest.mark.asyncio
async def test_invalid_payment_method(services, tenant) -> None:
    with pytest.raises(ValidationException, match="Unsupported payment method"):
        await services.billing.submit_payment_confirmation(tenant, "2", 10, "cash")


@pytest.mark.asyncio
async def test_unknown_confirmation(services) -> None:
    with pytest.raises(NotFoundException):
        await services.billing.approve_payment("missing")
