"""Delivery platform clients (Uber Eats, DoorDash, Grubhub)."""

from app.integrations.delivery.base import DeliveryPlatformClient, PlatformResponse
from app.integrations.delivery.catalog import DELIVERY_COMPANIES, get_company, list_companies
from app.integrations.delivery.platforms import DoorDashClient, GrubhubClient, UberEatsClient
from app.integrations.delivery.registry import DeliveryClientRegistry

__all__ = [
    "DELIVERY_COMPANIES",
    "DeliveryClientRegistry",
    "DeliveryPlatformClient",
    "DoorDashClient",
    "GrubhubClient",
    "PlatformResponse",
    "UberEatsClient",
    "get_company",
    "list_companies",
]
