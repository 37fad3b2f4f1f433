"""Domain package."""

from .order import OrderStatus, PaymentStatus, map_external_status
from .value_objects import (
    AuthType,
    ConfirmationStatus,
    DeliveryEventType,
    DepartmentRole,
    PaymentMethod,
    SyncStatus,
    TableBillStatus,
    WaiterCallStatus,
)

__all__ = [
    "OrderStatus",
    "PaymentStatus",
    "map_external_status",
    "AuthType",
    "ConfirmationStatus",
    "DeliveryEventType",
    "DepartmentRole",
    "PaymentMethod",
    "SyncStatus",
    "TableBillStatus",
    "WaiterCallStatus",
]
