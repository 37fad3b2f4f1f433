"""Delivery platform integration entities."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities.base import DocumentModel
from app.domain.value_objects import AuthType, SyncStatus


class IntegrationSettings(BaseModel):
    auto_accept_orders: bool = False
    default_prep_time: int = Field(20, ge=0, description="Minutes")
    markup_percentage: float = Field(0, ge=0)
    sync_frequency: str = "manual"


class DeliveryIntegration(DocumentModel):
    """A tenant's connection to one delivery company."""

    user_id: str
    delivery_company_id: str
    is_active: bool = True
    settings: IntegrationSettings = Field(default_factory=IntegrationSettings)
    sync_status: SyncStatus = SyncStatus.NEVER
    last_sync_at: str | None = None
    error_message: str | None = None


class DeliveryWebhookEvent(DocumentModel):
    """Append-only log entry for every inbound platform event."""

    type: str
    delivery_company: str
    restaurant_id: str | None = None
    order_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str
    processed: bool = False
    processed_at: str | None = None
    error_message: str | None = None
    external_event_id: str | None = None
    attempts: int = 1
    duplicate_of: str | None = None


class DeliveryCompany(BaseModel):
    """Catalog entry describing a supported delivery company."""

    id: str
    name: str
    description: str
    commission: float
    api_base_url: str
    auth_type: AuthType
    features: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    supported_features: dict[str, bool] = Field(default_factory=dict)
    setup_steps: list[str] = Field(default_factory=list)

    class Config:
        use_enum_values = True
