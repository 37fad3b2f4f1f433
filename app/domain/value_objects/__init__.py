"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class DepartmentRole(str, Enum):
    """Which notification classes a department receives."""

    KITCHEN = "kitchen"
    CASHIER = "cashier"
    ADMIN = "admin"


class WaiterCallStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    COMPLETED = "completed"


class TableBillStatus(str, Enum):
    ACTIVE = "active"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"

    @property
    def label(self) -> str:
        return "Bank Transfer" if self is PaymentMethod.BANK_TRANSFER else "Mobile Money"


class ConfirmationStatus(str, Enum):
    """Payment confirmation review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuthType(str, Enum):
    """How a delivery platform authenticates our API calls."""

    OAUTH = "oauth"
    API_KEY = "api_key"
    BASIC = "basic"


class DeliveryEventType(str, Enum):
    ORDER_PLACED = "order_placed"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_CONFIRMED = "payment_confirmed"
    DELIVERY_ASSIGNED = "delivery_assigned"


class SyncStatus(str, Enum):
    NEVER = "never"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"
