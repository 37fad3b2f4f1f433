"""
Report Service - day closing reports.

Aggregates the tenant's orders and waiter calls for one UTC date, stores the
report and sends it to the admin chat.
"""
from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import TenantNotFoundException
from app.core.utils import round_money, utc_now, utc_now_iso
from app.domain.entities import CashierInfo, DayReport
from app.domain.entities.report import KitchenStats, TopItem
from logging_config import logger

TOP_ITEMS_LIMIT = 5
DEFAULT_PREP_TIME = 15


def _on_day(document: dict[str, Any], day: str) -> bool:
    return str(document.get("timestamp") or "").startswith(day)


def build_day_report(
    tenant_id: str,
    cashier_info: CashierInfo,
    orders: list[dict[str, Any]],
    waiter_calls: list[dict[str, Any]],
    day: date,
) -> DayReport:
    """Pure aggregation over already loaded documents."""
    day_str = day.isoformat()
    todays_orders = [order for order in orders if _on_day(order, day_str)]
    todays_calls = [call for call in waiter_calls if _on_day(call, day_str)]

    item_counts: Counter[str] = Counter()
    table_counts: Counter[str] = Counter()
    prep_times = []
    for order in todays_orders:
        for item in order.get("items", []):
            item_counts[item.get("name", "?")] += int(item.get("quantity") or 0)
        table_counts[str(order.get("table_number"))] += 1
        if order.get("estimated_prep_time"):
            prep_times.append(int(order["estimated_prep_time"]))

    return DayReport(
        user_id=tenant_id,
        date=day_str,
        total_orders=len(todays_orders),
        total_revenue=round_money(sum(float(o.get("total_amount") or 0) for o in todays_orders)),
        total_payments=sum(1 for o in todays_orders if o.get("payment_status") == "paid"),
        waiter_calls=len(todays_calls),
        most_ordered_items=[
            TopItem(name=name, count=count)
            for name, count in item_counts.most_common(TOP_ITEMS_LIMIT)
        ],
        most_active_table=table_counts.most_common(1)[0][0] if table_counts else "None",
        cashier_info=cashier_info,
        kitchen=KitchenStats(
            orders=len(todays_orders),
            avg_prep_time=round(sum(prep_times) / len(prep_times)) if prep_times else DEFAULT_PREP_TIME,
        ),
        created_at=utc_now_iso(),
    )


class ReportService:
    def __init__(self, db: Any, dispatcher: Any = None):
        self.db = AsyncDBProxy.wrap(db)
        self.dispatcher = dispatcher

    async def create_day_report(
        self,
        tenant_id: str,
        cashier_info: CashierInfo | dict[str, Any],
        today: date | None = None,
    ) -> dict[str, Any]:
        if not await self.db.get_tenant(tenant_id):
            raise TenantNotFoundException(tenant_id)
        if isinstance(cashier_info, dict):
            cashier_info = CashierInfo.model_validate(cashier_info)

        orders = await self.db.get_orders_for_user(tenant_id)
        calls = await self.db.get_waiter_calls(tenant_id)
        report = build_day_report(
            tenant_id, cashier_info, orders, calls, today or utc_now().date()
        )

        report_id = await self.db.add_day_report(report.to_document())
        stored = {**report.to_document(), "id": report_id}
        logger.info(
            f"📊 Day report {report_id} for {tenant_id}: "
            f"{report.total_orders} orders, ${report.total_revenue:.2f}"
        )
        if self.dispatcher is not None:
            await self.dispatcher.send_day_report(tenant_id, stored)
        return stored
