"""Order entities: table orders, pending orders and delivery orders."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from app.core.utils import round_money
from app.domain.entities.base import DocumentModel
from app.domain.order import OrderStatus, PaymentStatus


class OrderItem(BaseModel):
    """A line on an order; total defaults to price x quantity."""

    id: str
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)
    total: float | None = None
    department: str | None = None

    @model_validator(mode="after")
    def _fill_total(self) -> "OrderItem":
        if self.total is None:
            self.total = round_money(self.price * self.quantity)
        return self


class CustomerInfo(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    telegram_username: str | None = None


class DeliveryInfo(BaseModel):
    """Link between an internal order and the platform's order."""

    company: str
    order_id: str
    address: Any = None
    estimated_delivery_time: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    estimated_pickup_time: str | None = None


def items_total(items: list[OrderItem]) -> float:
    return round_money(sum(item.total or 0 for item in items))


class Order(DocumentModel):
    user_id: str
    table_number: str
    items: list[OrderItem]
    total_amount: float = Field(..., ge=0)
    status: str = OrderStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    timestamp: str
    customer_info: CustomerInfo | None = None
    delivery_info: DeliveryInfo | None = None
    notes: str | None = None
    estimated_prep_time: int | None = None
    cancellation_reason: str | None = None
    session_id: str | None = None

    @property
    def is_delivery(self) -> bool:
        return self.delivery_info is not None


class PendingOrder(DocumentModel):
    """Customer cart waiting for the cashier to approve it."""

    user_id: str
    table_number: str
    items: list[OrderItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    timestamp: str
    customer_info: CustomerInfo | None = None
    session_id: str | None = None
    notes: str | None = None
