"""Request throttling for the public API.

Delivery platforms post from a handful of shared egress addresses, so their
webhooks are keyed by company as well as address. Everything else is keyed
by the customer's address as seen through the proxy.
"""
from __future__ import annotations

import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-route budgets, overridable per deployment
DELIVERY_WEBHOOK_LIMIT = os.getenv("RATE_LIMIT_DELIVERY_WEBHOOK", "300/minute")
CUSTOMER_LIMIT = os.getenv("RATE_LIMIT_CUSTOMER", "10/minute")
ADMIN_LIMIT = os.getenv("RATE_LIMIT_ADMIN", "60/minute")


def client_address(request: Request) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    if hops:
        return hops[0]

    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip

    return get_remote_address(request)


def request_key(request: Request) -> str:
    company = request.headers.get("X-Delivery-Company", "").strip().lower()
    address = client_address(request)
    return f"{company}@{address}" if company else address


def rate_limiting_enabled() -> bool:
    return os.getenv("RATE_LIMIT_DISABLED", "").strip().lower() not in {"1", "true", "yes"}


def build_limiter() -> Limiter:
    enabled = rate_limiting_enabled()
    options = {
        "key_func": request_key,
        "default_limits": [os.getenv("RATE_LIMIT_DEFAULT", "100/minute")] if enabled else [],
        "enabled": enabled,
    }
    storage_uri = os.getenv("RATE_LIMIT_STORAGE_URI")
    if storage_uri:
        options["storage_uri"] = storage_uri
    return Limiter(**options)


limiter = build_limiter()


__all__ = [
    "ADMIN_LIMIT",
    "CUSTOMER_LIMIT",
    "DELIVERY_WEBHOOK_LIMIT",
    "client_address",
    "limiter",
    "request_key",
]
