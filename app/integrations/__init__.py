"""Integrations package - connections to external systems."""

from app.integrations.delivery import DeliveryClientRegistry, DeliveryPlatformClient

__all__ = ["DeliveryClientRegistry", "DeliveryPlatformClient"]
