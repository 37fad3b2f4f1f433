"""Order domain types and status vocabularies."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


class OrderStatus:
    """Internal order lifecycle statuses."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    ALL = frozenset({PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED})

    @classmethod
    def normalize(cls, status: str | None) -> str:
        """Lower-case and map legacy aliases ("approved" came from older bot builds)."""
        value = str(status or "").strip().lower()
        aliases = {"approved": cls.CONFIRMED, "completed": cls.DELIVERED}
        return aliases.get(value, value)


class PaymentStatus:
    """Payment status stored in orders.payment_status."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @classmethod
    def from_platform(cls, raw: str | None) -> str:
        """Delivery platforms only tell us whether the order is already paid."""
        return cls.PAID if str(raw or "").strip().lower() == cls.PAID else cls.PENDING


class ExternalStatus:
    """Status vocabulary restaurants use when reporting to delivery platforms."""

    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    CANCELLED = "cancelled"


# External status -> internal status; anything else passes through unchanged
EXTERNAL_TO_INTERNAL: Mapping[str, str] = {
    ExternalStatus.ACCEPTED: OrderStatus.CONFIRMED,
    ExternalStatus.PREPARING: OrderStatus.PREPARING,
    ExternalStatus.READY: OrderStatus.READY,
    ExternalStatus.CANCELLED: OrderStatus.CANCELLED,
}


def map_external_status(status: str) -> str:
    """Internal status for an external one (unknown values are kept as-is)."""
    return EXTERNAL_TO_INTERNAL.get(status, status)


DELIVERY_TABLE = "DELIVERY"


@dataclass(frozen=True, slots=True)
class StatusUpdateResult:
    """Outcome of pushing a status change to a delivery platform."""

    success: bool
    order_id: str
    status: str
    estimated_time: int | None = None
    internal_status: str | None = None
    error: str | None = None
    retryable: bool = False
