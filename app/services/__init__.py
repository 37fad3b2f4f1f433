"""Business services orchestrating domain logic."""

from .billing_service import BillingService
from .feedback_service import FeedbackService
from .menu_schedule import MenuService, resolve_schedules, sort_for_display
from .notification_dispatcher import (
    Destinations,
    NotificationDispatcher,
    NotificationKind,
    WaiterCallRouting,
    find_waiter_for_table,
    get_notification_dispatcher,
    init_notification_dispatcher,
)
from .order_lifecycle import OrderLifecycleManager, get_order_lifecycle, init_order_lifecycle
from .report_service import ReportService
from .webhook_ingester import (
    DeliveryWebhookIngester,
    IngestResult,
    get_webhook_ingester,
    init_webhook_ingester,
)

__all__ = [
    "BillingService",
    "DeliveryWebhookIngester",
    "Destinations",
    "FeedbackService",
    "IngestResult",
    "MenuService",
    "NotificationDispatcher",
    "NotificationKind",
    "OrderLifecycleManager",
    "ReportService",
    "WaiterCallRouting",
    "find_waiter_for_table",
    "get_notification_dispatcher",
    "get_order_lifecycle",
    "get_webhook_ingester",
    "init_notification_dispatcher",
    "init_order_lifecycle",
    "init_webhook_ingester",
    "resolve_schedules",
    "sort_for_display",
]
