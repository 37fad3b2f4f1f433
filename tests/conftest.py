"""Shared pytest fixtures: in-memory store, mocked bot and wired services."""
from __future__ import annotations

import os

# Must be set before app.api.rate_limit is imported
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST_TOKEN")
os.environ.setdefault("RATE_LIMIT_DISABLED", "1")
os.environ.setdefault("ENVIRONMENT", "test")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.api_server import create_api_app
from app.api.deps import set_services
from app.core.bootstrap import build_services
from app.core.config import DefaultChats, DeliveryConfig, Settings, WebhookConfig
from app.core.memory_db import MemoryDatabase
from app.domain.entities import Department, Tenant
from app.integrations.delivery import DeliveryClientRegistry

TENANT_ID = "cafe1"
CASHIER_CHAT = "-100111"
KITCHEN_CHAT = "-100222"
ADMIN_CHAT = "-100333"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        bot_token="123456:TEST_TOKEN",
        bot_username="test_cafe_bot",
        database_url=None,
        webhook=WebhookConfig(enabled=False, url="", path="/api/telegram/webhook", secret_token=""),
        default_chats=DefaultChats(),
        delivery=DeliveryConfig(),
        fallback_menu_url="https://menu.example.com/menu",
        environment="test",
    )


@pytest.fixture()
def memory_db() -> MemoryDatabase:
    return MemoryDatabase()


@pytest.fixture()
def bot() -> MagicMock:
    """Bot double recording outgoing Telegram calls."""
    mock_bot = MagicMock()
    mock_bot.send_message = AsyncMock()
    mock_bot.send_photo = AsyncMock()
    mock_bot.set_webhook = AsyncMock(return_value=True)
    mock_bot.get_webhook_info = AsyncMock()
    return mock_bot


@pytest.fixture()
def registry() -> DeliveryClientRegistry:
    return DeliveryClientRegistry(DeliveryConfig(), latency=0)


@pytest.fixture()
def tenant(memory_db: MemoryDatabase) -> str:
    """Restaurant with cashier, kitchen and admin departments."""
    memory_db.add_tenant(Tenant(business_name="Test Cafe").to_document(), tenant_id=TENANT_ID)
    for role, chat_id, order in (
        ("cashier", CASHIER_CHAT, 1),
        ("kitchen", KITCHEN_CHAT, 2),
        ("admin", ADMIN_CHAT, 3),
    ):
        memory_db.add_department(
            Department(
                user_id=TENANT_ID,
                name=role.title(),
                role=role,
                telegram_chat_id=chat_id,
                order=order,
            ).to_document()
        )
    return TENANT_ID


@pytest.fixture()
def services(memory_db, bot, settings, registry):
    return build_services(memory_db, bot, settings, registry=registry)


@pytest.fixture()
def client(services):
    app = create_api_app(services)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    set_services(None)


def sent_chats(bot: MagicMock) -> list[str]:
    """Chat ids of every send_message call, in order."""
    return [call.args[0] for call in bot.send_message.await_args_list]


def sent_texts(bot: MagicMock) -> list[str]:
    return [call.args[1] for call in bot.send_message.await_args_list]
