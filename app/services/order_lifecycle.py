"""
Order Lifecycle Manager - moves orders through their statuses.

Two kinds of orders share one collection:
- table orders: cart -> pending order -> cashier approval -> kitchen tickets
- delivery orders: created by the webhook ingester, status changes are pushed
  to the delivery platform first and only persisted once it accepts them
"""
from __future__ import annotations

from typing import Any

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import (
    ConcurrentModificationException,
    ExternalCallException,
    InvalidStateException,
    OrderNotFoundException,
    ValidationException,
)
from app.core.utils import utc_now_iso
from app.domain.entities import CustomerInfo, Order, OrderItem, PendingOrder
from app.domain.entities.order import items_total
from app.domain.order import ExternalStatus, OrderStatus, StatusUpdateResult, map_external_status
from app.domain.order_fsm import validate_order_transition
from app.integrations.delivery import DeliveryClientRegistry
from logging_config import logger

STATUS_WRITE_ATTEMPTS = 3


class OrderLifecycleManager:
    """Order status changes for table and delivery orders."""

    def __init__(
        self,
        db: Any,
        dispatcher: Any = None,
        registry: DeliveryClientRegistry | None = None,
        billing: Any = None,
    ) -> None:
        self.db = AsyncDBProxy.wrap(db)
        self.dispatcher = dispatcher
        self.registry = registry or DeliveryClientRegistry()
        self.billing = billing

    # =========================================================================
    # DELIVERY ORDERS
    # =========================================================================

    async def update_status(
        self,
        order_id: str,
        new_status: str,
        estimated_time: int | None = None,
        company_id: str | None = None,
        timestamp: str | None = None,
    ) -> StatusUpdateResult:
        """Push a status to the delivery platform, then record it locally.

        Raises OrderNotFoundException, InvalidStateException or
        UnsupportedCompanyException before anything is sent. A platform
        failure is returned as an unsuccessful result and the order is left
        as it was. Every attempt lands in the status audit log.
        """
        order = await self.db.get_order(order_id)
        if not order:
            raise OrderNotFoundException(order_id)

        delivery_info = order.get("delivery_info")
        if not delivery_info:
            raise InvalidStateException("Not a delivery order")

        internal_status = map_external_status(new_status)
        check = validate_order_transition(
            current_status=order.get("status"), target_status=internal_status
        )
        if not check.allowed:
            raise InvalidStateException(check.reason or "Status change not allowed")

        company_id = company_id or delivery_info.get("company")
        client = self.registry.get(company_id)
        external_order_id = delivery_info.get("order_id")

        try:
            await client.update_order_status(external_order_id, new_status, estimated_time)
        except ExternalCallException as e:
            logger.error(f"❌ {client.name} rejected status {new_status} for order {order_id}: {e}")
            await self._log_status_update(
                order_id, external_order_id, company_id, new_status, estimated_time, timestamp,
                error=e.message,
            )
            return StatusUpdateResult(
                success=False,
                order_id=order_id,
                status=new_status,
                estimated_time=estimated_time,
                error=e.message,
                retryable=e.retryable,
            )

        now = utc_now_iso()
        changes = {
            "status": internal_status,
            f"{new_status}_at": now,
            "estimated_prep_time": estimated_time,
            "updated_at": now,
        }
        error = await self._write_platform_status(order, internal_status, changes)
        await self._log_status_update(
            order_id, external_order_id, company_id, new_status, estimated_time, timestamp,
            error=error,
        )
        if error:
            return StatusUpdateResult(
                success=False,
                order_id=order_id,
                status=new_status,
                estimated_time=estimated_time,
                error=error,
            )

        logger.info(f"🔄 Order {order_id} -> {internal_status} ({client.name})")
        if self.dispatcher is not None:
            await self.dispatcher.notify_order_status(
                order["user_id"], {**order, "status": internal_status}
            )
        return StatusUpdateResult(
            success=True,
            order_id=order_id,
            status=new_status,
            estimated_time=estimated_time,
            internal_status=internal_status,
        )

    async def _write_platform_status(
        self, order: dict[str, Any], internal_status: str, changes: dict[str, Any]
    ) -> str | None:
        """Persist a status the platform already accepted; returns an error or None.

        Concurrent writers (payment or driver webhooks) only touch other
        fields, so on a version conflict the order is re-read, the transition
        checked again and the same absolute changes re-applied.
        """
        order_id = order["id"]
        for attempt in range(1, STATUS_WRITE_ATTEMPTS + 1):
            try:
                await self.db.update_order(order_id, changes, expected_version=order["version"])
                return None
            except ConcurrentModificationException:
                logger.warning(
                    f"Order {order_id} changed while recording {internal_status} "
                    f"(attempt {attempt}/{STATUS_WRITE_ATTEMPTS})"
                )
            order = await self.db.get_order(order_id)
            if not order:
                return "Order was deleted while updating"
            check = validate_order_transition(
                current_status=order.get("status"), target_status=internal_status
            )
            if not check.allowed:
                logger.error(f"Order {order_id} moved on before {internal_status} was recorded")
                return check.reason or "Status change not allowed"
        return "Order kept changing while updating"

    async def _log_status_update(
        self,
        order_id: str,
        external_order_id: str | None,
        company_id: str,
        status: str,
        estimated_time: int | None,
        timestamp: str | None,
        error: str | None = None,
    ) -> None:
        await self.db.add_status_update_log(
            {
                "order_id": order_id,
                "delivery_company_order_id": external_order_id,
                "delivery_company": company_id,
                "status": status,
                "estimated_time": estimated_time,
                "timestamp": timestamp or utc_now_iso(),
                "success": error is None,
                "error_message": error,
            }
        )

    async def accept_delivery_order(
        self, order_id: str, estimated_time: int | None = None
    ) -> StatusUpdateResult:
        return await self.update_status(order_id, ExternalStatus.ACCEPTED, estimated_time)

    async def reject_delivery_order(self, order_id: str) -> StatusUpdateResult:
        return await self.update_status(order_id, ExternalStatus.CANCELLED)

    # =========================================================================
    # TABLE ORDERS
    # =========================================================================

    async def place_pending_order(
        self,
        tenant_id: str,
        table_number: str,
        items: list[dict[str, Any]],
        customer_info: dict[str, Any] | None = None,
        session_id: str | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Store the cart as a pending order and ask the cashier to approve it."""
        if not items:
            raise ValidationException("Order has no items", required=["items"])
        try:
            order_items = [OrderItem.model_validate(item) for item in items]
        except ValueError as e:
            raise ValidationException(f"Invalid order items: {e}") from e

        pending = PendingOrder(
            user_id=tenant_id,
            table_number=str(table_number),
            items=order_items,
            total_amount=items_total(order_items),
            timestamp=utc_now_iso(),
            customer_info=CustomerInfo.model_validate(customer_info) if customer_info else None,
            session_id=session_id,
            notes=notes,
        )
        pending_id = await self.db.add_pending_order(pending.to_document())
        stored = await self.db.get_pending_order(pending_id)
        logger.info(f"🛒 Pending order {pending_id} for table {table_number}")

        if self.dispatcher is not None:
            await self.dispatcher.notify_pending_order(tenant_id, stored)
        return stored

    async def approve_pending_order(self, pending_id: str) -> dict[str, Any]:
        """Turn a pending order into a confirmed order and start preparation."""
        pending = await self.db.get_pending_order(pending_id)
        if not pending:
            raise OrderNotFoundException(pending_id)

        now = utc_now_iso()
        order = Order(
            user_id=pending["user_id"],
            table_number=pending["table_number"],
            items=pending["items"],
            total_amount=pending["total_amount"],
            status=OrderStatus.CONFIRMED,
            timestamp=now,
            customer_info=pending.get("customer_info"),
            session_id=pending.get("session_id"),
            notes=pending.get("notes"),
        )
        document = order.to_document()
        document["confirmed_at"] = now
        order_id = await self.db.add_order(document)
        stored = await self.db.get_order(order_id)

        if self.billing is not None:
            await self.billing.add_to_table_bill(
                pending["user_id"], pending["table_number"], order.items, order_id=order_id
            )
        if self.dispatcher is not None:
            await self.dispatcher.notify_kitchen(pending["user_id"], stored)

        await self.db.delete_pending_order(pending_id)
        logger.info(f"✅ Pending order {pending_id} approved as order {order_id}")
        return stored

    async def reject_pending_order(self, pending_id: str) -> bool:
        pending = await self.db.get_pending_order(pending_id)
        if not pending:
            raise OrderNotFoundException(pending_id)
        await self.db.delete_pending_order(pending_id)
        logger.info(f"❌ Pending order {pending_id} rejected")
        return True

    async def set_table_order_status(self, order_id: str, new_status: str) -> dict[str, Any]:
        """Local status change for a table order (no platform involved)."""
        order = await self.db.get_order(order_id)
        if not order:
            raise OrderNotFoundException(order_id)

        target = OrderStatus.normalize(new_status)
        check = validate_order_transition(current_status=order.get("status"), target_status=target)
        if not check.allowed:
            raise InvalidStateException(check.reason or "Status change not allowed")

        now = utc_now_iso()
        try:
            updated = await self.db.update_order(
                order_id,
                {"status": target, f"{target}_at": now, "updated_at": now},
                expected_version=order["version"],
            )
        except ConcurrentModificationException:
            logger.warning(f"Order {order_id} changed while setting {target}")
            raise
        logger.info(f"🔄 Order {order_id} -> {target}")
        return updated

    async def mark_ready(self, order_id: str) -> dict[str, Any]:
        return await self.set_table_order_status(order_id, OrderStatus.READY)


_order_lifecycle: OrderLifecycleManager | None = None


def get_order_lifecycle() -> OrderLifecycleManager | None:
    """Get the order lifecycle manager singleton."""
    return _order_lifecycle


def init_order_lifecycle(
    db: Any,
    dispatcher: Any = None,
    registry: DeliveryClientRegistry | None = None,
    billing: Any = None,
) -> OrderLifecycleManager:
    """Initialize the order lifecycle manager singleton."""
    global _order_lifecycle
    _order_lifecycle = OrderLifecycleManager(db, dispatcher, registry, billing)
    return _order_lifecycle
