"""Day reports and customer feedback."""
from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.entities.base import DocumentModel


class CashierInfo(BaseModel):
    name: str
    shift: str = "day"
    notes: str | None = None


class TopItem(BaseModel):
    name: str
    count: int


class KitchenStats(BaseModel):
    orders: int = 0
    avg_prep_time: int = 15


class DayReport(DocumentModel):
    user_id: str
    date: str
    total_orders: int = 0
    total_revenue: float = 0.0
    total_payments: int = 0
    waiter_calls: int = 0
    most_ordered_items: list[TopItem] = Field(default_factory=list)
    most_active_table: str = "N/A"
    cashier_info: CashierInfo
    kitchen: KitchenStats = Field(default_factory=KitchenStats)
    created_at: str


class FeedbackCustomer(BaseModel):
    name: str | None = None
    telegram_username: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.telegram_username or "Anonymous Customer"


class OrderFeedback(DocumentModel):
    user_id: str
    order_id: str
    table_number: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=1000)
    timestamp: str
    session_id: str | None = None
    customer_info: FeedbackCustomer = Field(default_factory=FeedbackCustomer)
