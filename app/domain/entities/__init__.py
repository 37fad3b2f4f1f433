"""Domain entities (pydantic models stored as documents)."""

from .base import DocumentModel
from .billing import Bill, PaymentConfirmation, TableBill
from .delivery import DeliveryCompany, DeliveryIntegration, DeliveryWebhookEvent, IntegrationSettings
from .menu import MenuItem, MenuSchedule, ScheduledMenuItem
from .order import CustomerInfo, DeliveryInfo, Order, OrderItem, PendingOrder
from .report import CashierInfo, DayReport, OrderFeedback
from .session import CafeTableSession, DeepLinkParams, TelegramUser
from .staff import Department, WaiterAssignment, WaiterCall
from .tenant import TelegramSettings, Tenant

__all__ = [
    "DocumentModel",
    "Tenant",
    "TelegramSettings",
    "Department",
    "WaiterAssignment",
    "WaiterCall",
    "MenuItem",
    "MenuSchedule",
    "ScheduledMenuItem",
    "Order",
    "OrderItem",
    "PendingOrder",
    "CustomerInfo",
    "DeliveryInfo",
    "TableBill",
    "PaymentConfirmation",
    "Bill",
    "DeliveryIntegration",
    "DeliveryWebhookEvent",
    "DeliveryCompany",
    "IntegrationSettings",
    "CafeTableSession",
    "DeepLinkParams",
    "TelegramUser",
    "DayReport",
    "CashierInfo",
    "OrderFeedback",
]
