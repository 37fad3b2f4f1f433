"""Environment-driven configuration objects for the bot and API."""
from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"true", "1", "yes", "y", "on"}


def _optional_str(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(slots=True)
class WebhookConfig:
    enabled: bool
    url: str
    path: str
    secret_token: str


@dataclass(slots=True)
class DefaultChats:
    """Deployment-wide fallback chats used when a tenant has no department for a role."""

    admin: str | None = None
    cashier: str | None = None
    kitchen: str | None = None


@dataclass(slots=True)
class DeliveryConfig:
    simulate: bool = True
    request_timeout: float = 10.0
    # Per-company credentials, keyed by company id (uber_eats, doordash, grubhub)
    credentials: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class Settings:
    bot_token: str
    bot_username: str
    database_url: str | None
    webhook: WebhookConfig
    default_chats: DefaultChats
    delivery: DeliveryConfig
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    fallback_menu_url: str = "https://example.com/menu"
    tax_rate: float = 0.15
    auth_max_age_seconds: int = 86400
    session_ttl_seconds: int = 12 * 3600
    environment: str = "production"

    @property
    def telegram_bot_token(self) -> str:
        """Alias for bot_token."""
        return self.bot_token

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local", "test")


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    token = os.getenv("TELEGRAM_BOT_TOKEN")
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN environment variable is not set")

    webhook_url = os.getenv("WEBHOOK_URL", "").rstrip("/")
    use_webhook = _str_to_bool(os.getenv("USE_WEBHOOK"), default=bool(webhook_url))
    if use_webhook and not webhook_url:
        print("⚠️ USE_WEBHOOK=true but WEBHOOK_URL is empty, falling back to polling")
        use_webhook = False

    # Telegram echoes this token back in X-Telegram-Bot-Api-Secret-Token
    secret_token = os.getenv("SECRET_TOKEN", "")
    if use_webhook and not secret_token:
        secret_token = secrets.token_urlsafe(32)
        print("⚠️ SECRET_TOKEN not set, auto-generated for webhook security")

    webhook = WebhookConfig(
        enabled=use_webhook,
        url=webhook_url,
        path=os.getenv("WEBHOOK_PATH", "/api/telegram/webhook"),
        secret_token=secret_token,
    )

    default_chats = DefaultChats(
        admin=_optional_str("DEFAULT_ADMIN_CHAT_ID"),
        cashier=_optional_str("DEFAULT_CASHIER_CHAT_ID") or _optional_str("DEFAULT_ADMIN_CHAT_ID"),
        kitchen=_optional_str("DEFAULT_KITCHEN_CHAT_ID") or _optional_str("DEFAULT_ADMIN_CHAT_ID"),
    )

    credentials = {
        company: value
        for company, value in (
            ("uber_eats", _optional_str("UBER_EATS_TOKEN")),
            ("doordash", _optional_str("DOORDASH_API_KEY")),
            ("grubhub", _optional_str("GRUBHUB_CREDENTIALS")),
        )
        if value
    }
    delivery = DeliveryConfig(
        simulate=_str_to_bool(os.getenv("DELIVERY_SIMULATE"), default=True),
        request_timeout=float(os.getenv("DELIVERY_TIMEOUT_SECONDS", "10")),
        credentials=credentials,
    )

    return Settings(
        bot_token=token,
        bot_username=os.getenv("BOT_USERNAME", "cafe_menu_bot").lstrip("@"),
        database_url=_optional_str("DATABASE_URL"),
        webhook=webhook,
        default_chats=default_chats,
        delivery=delivery,
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", os.getenv("PORT", "8000"))),
        fallback_menu_url=os.getenv("FALLBACK_MENU_URL", "https://example.com/menu"),
        tax_rate=float(os.getenv("TAX_RATE", "0.15")),
        auth_max_age_seconds=int(os.getenv("AUTH_MAX_AGE_SECONDS", "86400")),
        session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(12 * 3600))),
        environment=os.getenv("ENVIRONMENT", "production"),
    )
