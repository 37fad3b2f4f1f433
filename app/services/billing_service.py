"""
Billing Service - running table bills and payment confirmations.

Approved orders are merged into the table's active bill. A customer pays
outside the platform and uploads a screenshot; the cashier approves or
rejects it from Telegram, and approval closes the bill.
"""
from __future__ import annotations

from typing import Any

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import (
    ConcurrentModificationException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from app.core.utils import round_money, utc_now_iso
from app.domain.entities import Bill, OrderItem, PaymentConfirmation, TableBill
from app.domain.value_objects import ConfirmationStatus, PaymentMethod, TableBillStatus
from logging_config import logger

DEFAULT_TAX_RATE = 0.15
# Conditional writes on a table bill are retried this many times before giving up
MERGE_ATTEMPTS = 3


def merge_items(existing: list[dict[str, Any]], new_items: list[OrderItem]) -> list[dict[str, Any]]:
    """Merge order lines by item id; quantities and totals add up."""
    merged = [dict(item) for item in existing]
    index = {item["id"]: item for item in merged}
    for item in new_items:
        current = index.get(item.id)
        if current is None:
            line = item.model_dump(mode="json")
            merged.append(line)
            index[item.id] = line
            continue
        current["quantity"] = int(current.get("quantity", 0)) + item.quantity
        current["total"] = round_money(float(current.get("total") or 0) + float(item.total or 0))
    return merged


def bill_amounts(items: list[dict[str, Any]], tax_rate: float) -> dict[str, float]:
    subtotal = round_money(sum(float(item.get("total") or 0) for item in items))
    tax = round_money(subtotal * tax_rate)
    return {"subtotal": subtotal, "tax": tax, "total": round_money(subtotal + tax)}


class BillingService:
    """Table bills and the payment review flow."""

    def __init__(self, db: Any, dispatcher: Any = None, default_tax_rate: float = DEFAULT_TAX_RATE):
        self.db = AsyncDBProxy.wrap(db)
        self.dispatcher = dispatcher
        self.default_tax_rate = default_tax_rate

    async def tax_rate_for(self, tenant_id: str) -> float:
        tenant = await self.db.get_tenant(tenant_id) or {}
        rate = (tenant.get("settings") or {}).get("tax_rate")
        return float(rate) if rate is not None else self.default_tax_rate

    async def get_active_bill(self, tenant_id: str, table_number: str) -> dict[str, Any] | None:
        return await self.db.get_active_table_bill(tenant_id, str(table_number))

    async def add_to_table_bill(
        self,
        tenant_id: str,
        table_number: str,
        items: list[OrderItem],
        order_id: str | None = None,
    ) -> dict[str, Any]:
        """Merge items into the table's active bill, opening one if needed."""
        tax_rate = await self.tax_rate_for(tenant_id)
        table_number = str(table_number)

        for attempt in range(1, MERGE_ATTEMPTS + 1):
            bill = await self.db.get_active_table_bill(tenant_id, table_number)
            now = utc_now_iso()

            if bill is None:
                merged = merge_items([], items)
                new_bill = TableBill(
                    user_id=tenant_id,
                    table_number=table_number,
                    items=merged,
                    order_ids=[order_id] if order_id else [],
                    created_at=now,
                    updated_at=now,
                    **bill_amounts(merged, tax_rate),
                )
                bill_id = await self.db.add_table_bill(new_bill.to_document())
                logger.info(f"🧾 Opened bill {bill_id} for table {table_number}")
                return await self.db.get_table_bill(bill_id)

            merged = merge_items(bill.get("items", []), items)
            order_ids = list(bill.get("order_ids", []))
            if order_id and order_id not in order_ids:
                order_ids.append(order_id)
            changes = {
                "items": merged,
                "order_ids": order_ids,
                "updated_at": now,
                **bill_amounts(merged, tax_rate),
            }
            try:
                return await self.db.update_table_bill(
                    bill["id"], changes, expected_version=bill["version"]
                )
            except ConcurrentModificationException:
                logger.warning(
                    f"Bill {bill['id']} changed while merging (attempt {attempt}/{MERGE_ATTEMPTS})"
                )
        raise ConcurrentModificationException(
            "table_bills", bill["id"], bill["version"], bill["version"] + 1
        )

    # =========================================================================
    # PAYMENT CONFIRMATIONS
    # =========================================================================

    async def submit_payment_confirmation(
        self,
        tenant_id: str,
        table_number: str,
        amount: float,
        method: str,
        screenshot_url: str | None = None,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        try:
            payment_method = PaymentMethod(method)
        except ValueError:
            raise ValidationException(f"Unsupported payment method: {method}") from None

        confirmation = PaymentConfirmation(
            user_id=tenant_id,
            table_number=str(table_number),
            amount=round_money(amount),
            method=payment_method,
            screenshot_url=screenshot_url,
            timestamp=utc_now_iso(),
            session_id=session_id,
        )
        confirmation_id = await self.db.add_payment_confirmation(confirmation.to_document())
        stored = await self.db.get_payment_confirmation(confirmation_id)
        logger.info(f"💳 Payment confirmation {confirmation_id} submitted for table {table_number}")

        if self.dispatcher is not None:
            await self.dispatcher.notify_payment_confirmation(tenant_id, stored)
        return stored

    async def _pending_confirmation(self, confirmation_id: str) -> dict[str, Any]:
        confirmation = await self.db.get_payment_confirmation(confirmation_id)
        if not confirmation:
            raise NotFoundException("Payment confirmation not found")
        if confirmation.get("status") != ConfirmationStatus.PENDING.value:
            raise InvalidStateException(f"Payment already {confirmation.get('status')}")
        return confirmation

    async def approve_payment(self, confirmation_id: str) -> dict[str, Any]:
        """Close the table bill into a Bill, then mark the payment approved.

        The confirmation only flips once the bill is closed, so a conflict
        leaves the payment pending and the button can be pressed again.
        """
        confirmation = await self._pending_confirmation(confirmation_id)
        now = utc_now_iso()

        bill = await self._close_active_bill(confirmation, now)
        if bill is None:
            logger.warning(
                f"No active bill for table {confirmation['table_number']} "
                f"when approving payment {confirmation_id}"
            )

        updated = await self.db.update_payment_confirmation(
            confirmation_id,
            {"status": ConfirmationStatus.APPROVED.value, "processed_at": now},
        )
        logger.info(f"✅ Payment {confirmation_id} approved")
        return updated

    async def _close_active_bill(
        self, confirmation: dict[str, Any], now: str
    ) -> dict[str, Any] | None:
        for attempt in range(1, MERGE_ATTEMPTS + 1):
            bill = await self.db.get_active_table_bill(
                confirmation["user_id"], confirmation["table_number"]
            )
            if bill is None:
                return None
            try:
                await self.db.update_table_bill(
                    bill["id"],
                    {
                        "status": TableBillStatus.PAID.value,
                        "paid_at": now,
                        "payment_confirmation_id": confirmation["id"],
                        "updated_at": now,
                    },
                    expected_version=bill["version"],
                )
            except ConcurrentModificationException:
                logger.warning(
                    f"Bill {bill['id']} changed while closing (attempt {attempt}/{MERGE_ATTEMPTS})"
                )
                continue

            closed = Bill(
                user_id=bill["user_id"],
                table_number=bill["table_number"],
                table_bill_id=bill["id"],
                items=bill.get("items", []),
                subtotal=bill.get("subtotal", 0),
                tax=bill.get("tax", 0),
                total=bill.get("total", 0),
                payment_method=confirmation.get("method"),
                payment_confirmation_id=confirmation["id"],
                closed_at=now,
            )
            await self.db.add_bill(closed.to_document())
            logger.info(f"🧾 Bill {bill['id']} closed")
            return bill
        raise ConcurrentModificationException(
            "table_bills", bill["id"], bill["version"], bill["version"] + 1
        )

    async def reject_payment(self, confirmation_id: str) -> dict[str, Any]:
        await self._pending_confirmation(confirmation_id)
        updated = await self.db.update_payment_confirmation(
            confirmation_id,
            {"status": ConfirmationStatus.REJECTED.value, "processed_at": utc_now_iso()},
        )
        logger.info(f"❌ Payment {confirmation_id} rejected")
        return updated
