"""Table bills, payment confirmations and closed bills."""
from __future__ import annotations

from pydantic import Field

from app.domain.entities.base import DocumentModel
from app.domain.entities.order import OrderItem
from app.domain.value_objects import ConfirmationStatus, PaymentMethod, TableBillStatus


class TableBill(DocumentModel):
    """Running bill for a table; approved orders are merged into it."""

    user_id: str
    table_number: str
    items: list[OrderItem] = Field(default_factory=list)
    order_ids: list[str] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    status: TableBillStatus = TableBillStatus.ACTIVE
    created_at: str
    updated_at: str
    payment_confirmation_id: str | None = None
    paid_at: str | None = None


class PaymentConfirmation(DocumentModel):
    user_id: str
    table_number: str
    amount: float = Field(..., ge=0)
    method: PaymentMethod
    screenshot_url: str | None = None
    status: ConfirmationStatus = ConfirmationStatus.PENDING
    timestamp: str
    processed_at: str | None = None
    session_id: str | None = None


class Bill(DocumentModel):
    """Closed bill created when a payment is approved."""

    user_id: str
    table_number: str
    table_bill_id: str
    items: list[OrderItem]
    subtotal: float
    tax: float
    total: float
    payment_method: PaymentMethod | None = None
    payment_confirmation_id: str
    closed_at: str
