from __future__ import annotations

from datetime import date

import pytest

from app.core.exceptions import DuplicateSubmissionException, TenantNotFoundException, ValidationException
from app.domain.entities import CashierInfo
from app.services.report_service import build_day_report
from conftest import ADMIN_CHAT, sent_chats, sent_texts


def _feedback(tenant_id: str, **overrides) -> dict:
    feedback = {
        "user_id": tenant_id,
        "order_id": "order-123456789",
        "table_number": "8",
        "rating": 5,
        "comment": "Lovely <b>soup</b>",
        "customer_info": {"name": "Kim"},
    }
    feedback.update(overrides)
    return feedback


@pytest.mark.asyncio
async def test_feedback_goes_to_admin_once(services, memory_db, bot, tenant) -> None:
    stored = await services.feedback.submit_feedback("session_1_abc", _feedback(tenant))

    assert stored["id"]
    assert stored["session_id"] == "session_1_abc"
    assert sent_chats(bot) == [ADMIN_CHAT]
    text = sent_texts(bot)[0]
    assert "⭐⭐⭐⭐⭐" in text
    assert "&lt;b&gt;soup&lt;/b&gt;" in text
    assert "Kim" in text

    with pytest.raises(DuplicateSubmissionException):
        await services.feedback.submit_feedback("session_1_abc", _feedback(tenant, rating=1))
    assert len(sent_chats(bot)) == 1


@pytest.mark.asyncio
async def test_store_claim_blocks_resubmission_after_cache_loss(services, tenant) -> None:
    await services.feedback.submit_feedback("session_2_abc", _feedback(tenant))
    services.sessions.clear("session_2_abc")

    with pytest.raises(DuplicateSubmissionException):
        await services.feedback.submit_feedback("session_2_abc", _feedback(tenant))


@pytest.mark.asyncio
async def test_feedback_validation(services, tenant) -> None:
    with pytest.raises(ValidationException):
        await services.feedback.submit_feedback("session_3_abc", _feedback(tenant, rating=6))
    with pytest.raises(ValidationException):
        await services.feedback.submit_feedback("", _feedback(tenant))

    # a rejected attempt does not use up the session
    await services.feedback.submit_feedback("session_3_abc", _feedback(tenant, rating=3))


def _order(timestamp: str, table: str, items: list[tuple[str, int]], total: float, **extra) -> dict:
    return {
        "timestamp": timestamp,
        "table_number": table,
        "items": [{"name": name, "quantity": qty} for name, qty in items],
        "total_amount": total,
        **extra,
    }


def test_day_report_aggregates_only_that_day() -> None:
    orders = [
        _order("2024-05-06T09:00:00+00:00", "3", [("Coffee", 2)], 6, payment_status="paid"),
        _order("2024-05-06T12:00:00+00:00", "3", [("Coffee", 1), ("Bagel", 1)], 7.5,
               estimated_prep_time=10),
        _order("2024-05-06T13:00:00+00:00", "5", [("Salad", 1)], 9, estimated_prep_time=20),
        _order("2024-05-05T13:00:00+00:00", "9", [("Cake", 10)], 50),
    ]
    calls = [{"timestamp": "2024-05-06T10:00:00+00:00"}, {"timestamp": "2024-05-04T10:00:00+00:00"}]

    report = build_day_report("cafe1", CashierInfo(name="Jo"), orders, calls, date(2024, 5, 6))

    assert report.total_orders == 3
    assert report.total_revenue == 22.5
    assert report.total_payments == 1
    assert report.waiter_calls == 1
    assert report.most_active_table == "3"
    assert [(i.name, i.count) for i in report.most_ordered_items] == [
        ("Coffee", 3),
        ("Bagel", 1),
        ("Salad", 1),
    ]
    assert report.kitchen.orders == 3
    assert report.kitchen.avg_prep_time == 15


def test_empty_day_report() -> None:
    report = build_day_report("cafe1", CashierInfo(name="Jo"), [], [], date(2024, 5, 6))

    assert report.total_orders == 0
    assert report.most_active_table == "None"
    assert report.most_ordered_items == []
    assert report.kitchen.avg_prep_time == 15


@pytest.mark.asyncio
async def test_day_report_is_stored_and_sent(services, memory_db, bot, tenant) -> None:
    report = await services.reports.create_day_report(
        tenant, {"name": "Jo", "shift": "evening", "notes": "Quiet day"}, today=date(2024, 5, 6)
    )

    assert report["date"] == "2024-05-06"
    assert memory_db.get_day_reports(tenant)[0]["cashier_info"]["name"] == "Jo"
    assert sent_chats(bot) == [ADMIN_CHAT]
    text = sent_texts(bot)[0]
    assert "Day Closing Report" in text
    assert "No orders today" in text
    assert "Quiet day" in text


@pytest.mark.asyncio
async def test_day_report_unknown_tenant(services) -> None:
    with pytest.raises(TenantNotFoundException):
        await services.reports.create_day_report("ghost", CashierInfo(name="Jo"))
