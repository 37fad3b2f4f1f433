"""
Delivery Webhook Ingester - turns platform events into order changes.

Every event is first written to the webhook event log (processed=False),
then handled, then marked processed or annotated with the error. Platforms
retry deliveries, so events that carry an id are claimed once: a replay of
a processed event returns the original, a replay of a failed one is handled
again against the original log entry.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import CafeBotException
from app.core.idempotency import webhook_idempotency_key
from app.core.utils import new_id, utc_now_iso
from app.domain.entities import CustomerInfo, DeliveryInfo, DeliveryWebhookEvent, Order, OrderItem
from app.domain.order import DELIVERY_TABLE, ExternalStatus, OrderStatus, PaymentStatus
from app.domain.order_fsm import validate_order_transition
from app.domain.value_objects import DeliveryEventType
from app.integrations.delivery import get_company
from logging_config import logger

ORDER_REQUIRED_FIELDS = ("restaurantId", "customer", "items", "subtotal")
DEFAULT_CANCELLATION_REASON = "Cancelled by delivery company"


@dataclass(frozen=True, slots=True)
class HandlerResult:
    success: bool
    error: str | None = None
    order_id: str | None = None


@dataclass(frozen=True, slots=True)
class IngestResult:
    success: bool
    event_id: str
    message: str | None = None
    error: str | None = None
    duplicate: bool = False
    order_id: str | None = None


def _company_name(company: str) -> str:
    entry = get_company(company)
    return entry.name if entry else company


class DeliveryWebhookIngester:
    """Logs, deduplicates and applies delivery platform events."""

    def __init__(self, db: Any, dispatcher: Any = None, lifecycle: Any = None) -> None:
        self.db = AsyncDBProxy.wrap(db)
        self.dispatcher = dispatcher
        self.lifecycle = lifecycle
        self._handlers: dict[str, Callable[[dict[str, Any], str], Awaitable[HandlerResult]]] = {
            DeliveryEventType.ORDER_PLACED.value: self.handle_order_placed,
            DeliveryEventType.ORDER_CANCELLED.value: self.handle_order_cancelled,
            DeliveryEventType.PAYMENT_CONFIRMED.value: self.handle_payment_confirmed,
            DeliveryEventType.DELIVERY_ASSIGNED.value: self.handle_delivery_assigned,
        }

    async def ingest(
        self,
        company: str,
        event_type: str,
        data: dict[str, Any],
        external_event_id: str | None = None,
    ) -> IngestResult:
        event_id = new_id()
        event = DeliveryWebhookEvent(
            type=event_type,
            delivery_company=company,
            restaurant_id=_as_str(data.get("restaurantId")),
            order_id=_as_str(data.get("orderId") or data.get("id")),
            data=data,
            timestamp=utc_now_iso(),
            external_event_id=external_event_id,
        )
        await self.db.add_webhook_event(event.to_document(), event_id=event_id)
        logger.info(f"📥 {company} webhook {event_type} logged as {event_id}")

        # Claimed after the log write so a key never points at a missing event
        idempotency_key = webhook_idempotency_key(company, external_event_id)
        if idempotency_key:
            original_id = await self.db.claim_webhook_delivery(idempotency_key, event_id)
            if original_id:
                return await self._replayed(
                    original_id, event_id, idempotency_key, event_type, data, company
                )

        result = await self._process(event_type, data, company)
        return await self._record(event_id, company, event_type, result)

    async def _record(
        self,
        event_id: str,
        company: str,
        event_type: str,
        result: HandlerResult,
        *,
        duplicate: bool = False,
        **changes: Any,
    ) -> IngestResult:
        if result.success:
            await self.db.update_webhook_event(
                event_id,
                {"processed": True, "processed_at": utc_now_iso(), "error_message": None, **changes},
            )
            return IngestResult(
                success=True,
                event_id=event_id,
                message="Webhook processed successfully",
                duplicate=duplicate,
                order_id=result.order_id,
            )

        await self.db.update_webhook_event(
            event_id, {"processed": False, "error_message": result.error, **changes}
        )
        logger.warning(f"⚠️ {company} webhook {event_type} failed: {result.error}")
        return IngestResult(success=False, event_id=event_id, error=result.error, duplicate=duplicate)

    async def _replayed(
        self,
        original_id: str,
        event_id: str,
        idempotency_key: str,
        event_type: str,
        data: dict[str, Any],
        company: str,
    ) -> IngestResult:
        """Processed originals are answered from the log; failed ones are handled again."""
        await self.db.update_webhook_event(
            event_id,
            {"processed": True, "processed_at": utc_now_iso(), "duplicate_of": original_id},
        )
        original = await self.db.get_webhook_event(original_id) or {}

        if original.get("processed"):
            logger.info(f"🔁 Duplicate webhook {idempotency_key}, original event {original_id}")
            return IngestResult(
                success=True,
                event_id=original_id,
                message="Webhook already processed",
                duplicate=True,
            )

        if not original.get("error_message"):
            # First delivery is still being handled
            return IngestResult(
                success=False,
                event_id=original_id,
                error="Webhook already received",
                duplicate=True,
            )

        logger.info(f"🔁 Retrying failed webhook {idempotency_key} (event {original_id})")
        result = await self._process(event_type, data, company)
        return await self._record(
            original_id,
            company,
            event_type,
            result,
            duplicate=True,
            attempts=int(original.get("attempts") or 1) + 1,
        )

    async def _process(self, event_type: str, data: dict[str, Any], company: str) -> HandlerResult:
        handler = self._handlers.get(event_type)
        if handler is None:
            return HandlerResult(False, f"Unknown event type: {event_type}")
        try:
            return await handler(data, company)
        except Exception as e:
            logger.error(f"Error processing {event_type} from {company}: {e}")
            return HandlerResult(False, str(e))

    # =========================================================================
    # HANDLERS
    # =========================================================================

    async def handle_order_placed(self, data: dict[str, Any], company: str) -> HandlerResult:
        for field in ORDER_REQUIRED_FIELDS:
            if not data.get(field):
                return HandlerResult(False, f"Missing required field: {field}")

        tenant_id = str(data["restaurantId"])
        customer = data["customer"] or {}
        items = [
            OrderItem(
                id=str(item.get("id")),
                name=str(item.get("name")),
                quantity=item.get("quantity") or 1,
                price=item.get("price") or 0,
                total=item.get("total"),
            )
            for item in data["items"]
        ]
        order = Order(
            user_id=tenant_id,
            table_number=DELIVERY_TABLE,
            items=items,
            total_amount=data["subtotal"],
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.from_platform(data.get("paymentStatus")),
            timestamp=utc_now_iso(),
            customer_info=CustomerInfo(
                name=customer.get("name"),
                phone=customer.get("phone"),
                email=customer.get("email"),
            ),
            notes=data.get("specialInstructions"),
            delivery_info=DeliveryInfo(
                company=company,
                order_id=str(data.get("id") or data.get("orderId")),
                address=customer.get("deliveryAddress"),
                estimated_delivery_time=_as_str(data.get("estimatedDeliveryTime")),
            ),
        )
        order_id = await self.db.add_order(order.to_document())
        stored = await self.db.get_order(order_id)
        logger.info(f"🛵 New {company} order {order_id} for restaurant {tenant_id}")

        if self.dispatcher is not None:
            await self.dispatcher.notify_delivery_order(tenant_id, stored, _company_name(company))

        await self._auto_accept(tenant_id, company, order_id)
        return HandlerResult(True, order_id=order_id)

    async def _auto_accept(self, tenant_id: str, company: str, order_id: str) -> None:
        integration = await self.db.get_active_integration(tenant_id, company)
        settings = (integration or {}).get("settings") or {}
        if not settings.get("auto_accept_orders") or self.lifecycle is None:
            return

        prep_time = settings.get("default_prep_time")
        try:
            result = await self.lifecycle.update_status(
                order_id, ExternalStatus.ACCEPTED, prep_time, company
            )
        except CafeBotException as e:
            # The order stays pending for the cashier to accept manually
            logger.warning(f"Auto-accept of order {order_id} failed: {e.message}")
            return
        if result.success:
            logger.info(f"🤖 Order {order_id} auto-accepted ({prep_time} min)")
        else:
            logger.warning(f"Auto-accept of order {order_id} failed: {result.error}")

    async def handle_order_cancelled(self, data: dict[str, Any], company: str) -> HandlerResult:
        order = await self._find_order(data, company)
        if not order:
            return HandlerResult(False, "Order not found")

        check = validate_order_transition(
            current_status=order.get("status"), target_status=OrderStatus.CANCELLED
        )
        if not check.allowed:
            return HandlerResult(False, check.reason)

        reason = data.get("reason") or DEFAULT_CANCELLATION_REASON
        updated = await self.db.update_order(
            order["id"],
            {
                "status": OrderStatus.CANCELLED,
                "cancelled_at": utc_now_iso(),
                "cancellation_reason": reason,
            },
            expected_version=order["version"],
        )
        logger.info(f"❌ {company} cancelled order {order['id']}: {reason}")

        if self.dispatcher is not None:
            await self.dispatcher.notify_cancellation(
                order["user_id"], updated, _company_name(company), reason
            )
        return HandlerResult(True, order_id=order["id"])

    async def handle_payment_confirmed(self, data: dict[str, Any], company: str) -> HandlerResult:
        order = await self._find_order(data, company)
        if order:
            await self.db.update_order(
                order["id"],
                {"payment_status": PaymentStatus.PAID, "paid_at": utc_now_iso()},
            )
            logger.info(f"💳 {company} payment confirmed for order {order['id']}")
        else:
            logger.info(f"{company} payment for unknown order {data.get('orderId')} ignored")
        return HandlerResult(True, order_id=order["id"] if order else None)

    async def handle_delivery_assigned(self, data: dict[str, Any], company: str) -> HandlerResult:
        order = await self._find_order(data, company)
        if not order:
            logger.info(f"{company} driver for unknown order {data.get('orderId')} ignored")
            return HandlerResult(True)

        updated = await self.db.update_order(
            order["id"],
            {
                "delivery_info.driver_name": data.get("driverName"),
                "delivery_info.driver_phone": data.get("driverPhone"),
                "delivery_info.estimated_pickup_time": _as_str(data.get("estimatedPickupTime")),
                "driver_assigned_at": utc_now_iso(),
            },
        )
        if self.dispatcher is not None:
            await self.dispatcher.notify_driver_assigned(
                order["user_id"], updated, _company_name(company)
            )
        return HandlerResult(True, order_id=order["id"])

    async def _find_order(self, data: dict[str, Any], company: str) -> dict[str, Any] | None:
        external_id = data.get("orderId")
        if external_id is None:
            return None
        return await self.db.find_order_by_delivery_ref(str(external_id), company)


def _as_str(value: Any) -> str | None:
    return str(value) if value is not None else None


_webhook_ingester: DeliveryWebhookIngester | None = None


def get_webhook_ingester() -> DeliveryWebhookIngester | None:
    """Get the webhook ingester singleton."""
    return _webhook_ingester


def init_webhook_ingester(db: Any, dispatcher: Any = None, lifecycle: Any = None) -> DeliveryWebhookIngester:
    """Initialize the webhook ingester singleton."""
    global _webhook_ingester
    _webhook_ingester = DeliveryWebhookIngester(db, dispatcher, lifecycle)
    return _webhook_ingester
