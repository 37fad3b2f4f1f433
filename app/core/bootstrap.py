"""Application bootstrap wiring bot, dispatcher, db and services."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.fsm.storage.memory import MemoryStorage

from app.integrations.delivery import DeliveryClientRegistry
from app.services import (
    BillingService,
    FeedbackService,
    MenuService,
    ReportService,
    init_notification_dispatcher,
    init_order_lifecycle,
    init_webhook_ingester,
)

from .async_db import AsyncDBProxy
from .config import Settings
from .database import create_database
from .session_store import SessionStore
from logging_config import logger


@dataclass(slots=True)
class Services:
    """Everything request handlers need, built once per process.

    `db` is the AsyncDBProxy; its `.sync` property exposes the raw store.
    """

    db: AsyncDBProxy
    bot: Bot
    settings: Settings
    registry: Any
    notifications: Any
    billing: Any
    lifecycle: Any
    ingester: Any
    menu: Any
    reports: Any
    feedback: Any
    sessions: SessionStore
    dispatcher: Dispatcher | None = None


def build_services(
    db: Any,
    bot: Bot,
    settings: Settings,
    dispatcher: Dispatcher | None = None,
    registry: Any = None,
) -> Services:
    """Wire the domain services around one store and one bot."""
    db = AsyncDBProxy.wrap(db)
    registry = registry or DeliveryClientRegistry(settings.delivery)
    notifications = init_notification_dispatcher(db, bot, settings.default_chats)
    billing = BillingService(db, notifications, default_tax_rate=settings.tax_rate)
    lifecycle = init_order_lifecycle(db, notifications, registry, billing)
    ingester = init_webhook_ingester(db, notifications, lifecycle)
    sessions = SessionStore(ttl=settings.session_ttl_seconds)

    return Services(
        db=db,
        bot=bot,
        settings=settings,
        registry=registry,
        notifications=notifications,
        billing=billing,
        lifecycle=lifecycle,
        ingester=ingester,
        menu=MenuService(db),
        reports=ReportService(db, notifications),
        feedback=FeedbackService(db, sessions, notifications),
        sessions=sessions,
        dispatcher=dispatcher,
    )


def build_application(settings: Settings) -> tuple[Bot, Dispatcher, Any, Services]:
    """Create bot runtime components from configuration."""
    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode="HTML"))
    db = create_database(settings.database_url, allow_memory=settings.is_dev)

    # Button handlers are stateless; nothing needs to survive a restart
    dispatcher = Dispatcher(storage=MemoryStorage())
    logger.info("💾 Using MemoryStorage for aiogram FSM")

    services = build_services(db, bot, settings, dispatcher)
    return bot, dispatcher, db, services
