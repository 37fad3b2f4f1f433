"""Per-platform clients: status vocabularies and auth schemes."""
from __future__ import annotations

import base64
import time
from typing import Any

from app.integrations.delivery.base import DeliveryPlatformClient


class UberEatsClient(DeliveryPlatformClient):
    """Uber Eats Marketplace API (OAuth bearer token)."""

    company_id = "uber_eats"
    simulated_latency = 0.5
    status_map = {
        "accepted": "accepted",
        "preparing": "preparing",
        "ready": "ready_for_pickup",
        "cancelled": "cancelled",
    }

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.credentials}"}

    def status_payload(self, status: str, estimated_time: int | None) -> dict[str, Any]:
        # Uber wants an absolute ready time in epoch milliseconds
        ready_at = int(time.time() * 1000) + estimated_time * 60_000 if estimated_time else None
        return {"status": self.map_status(status), "estimated_ready_time": ready_at}


class DoorDashClient(DeliveryPlatformClient):
    """DoorDash Drive/Marketplace API (API key)."""

    company_id = "doordash"
    simulated_latency = 0.4
    status_map = {
        "accepted": "confirmed",
        "preparing": "in_preparation",
        "ready": "ready_for_pickup",
        "cancelled": "cancelled",
    }

    def auth_headers(self) -> dict[str, str]:
        return {"X-API-Key": str(self.credentials)}


class GrubhubClient(DeliveryPlatformClient):
    """Grubhub partner API (HTTP basic auth, upper-case statuses)."""

    company_id = "grubhub"
    simulated_latency = 0.6
    status_map = {
        "accepted": "CONFIRMED",
        "preparing": "PREPARING",
        "ready": "READY",
        "cancelled": "CANCELLED",
    }

    def map_status(self, status: str) -> str:
        return self.status_map.get(status, status.upper())

    def auth_headers(self) -> dict[str, str]:
        # credentials are "username:password"
        token = base64.b64encode(str(self.credentials).encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}
