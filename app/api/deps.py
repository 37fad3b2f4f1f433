"""Shared FastAPI dependencies (services are set by api_server.py)."""
from __future__ import annotations

from fastapi import HTTPException

from app.core.bootstrap import Services

_services: Services | None = None


def set_services(services: Services | None) -> None:
    global _services
    _services = services


def get_services() -> Services:
    """Dependency to get the wired services."""
    if _services is None:
        raise HTTPException(status_code=503, detail="Service not available")
    return _services
