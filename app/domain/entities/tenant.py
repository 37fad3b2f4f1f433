"""Restaurant account entity."""
from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.entities.base import DocumentModel


class TelegramSettings(BaseModel):
    """Per-tenant chat overrides predating departments."""

    admin_chat_id: str | None = None
    cashier_chat_id: str | None = None
    kitchen_chat_id: str | None = None


class TenantSettings(BaseModel):
    currency: str = "USD"
    language: str = "en"
    tax_rate: float = Field(0.15, ge=0, le=1)


class Tenant(DocumentModel):
    """A restaurant using the platform."""

    business_name: str = Field(..., min_length=1, max_length=120)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    telegram_chat_id: str | None = Field(None, description="Legacy single notification chat")
    telegram_settings: TelegramSettings = Field(default_factory=TelegramSettings)
    number_of_tables: int = Field(10, ge=1)
    settings: TenantSettings = Field(default_factory=TenantSettings)
    is_active: bool = True
