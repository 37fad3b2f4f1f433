"""
Common client for delivery platform partner APIs.

Each platform subclass owns its status vocabulary, auth headers and request
shapes. By default clients run in simulation mode: they wait a
platform-typical latency and report success without any network traffic,
which is how restaurants try integrations before they receive credentials.
With simulation off, calls go out over aiohttp. Timeouts, connection errors
and 5xx responses raise a retryable ExternalCallException; 4xx responses
raise a terminal one. Nothing here retries.
"""
from __future__ import annotations

import abc
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

import aiohttp

from app.core.exceptions import ExternalCallException
from app.domain.entities import DeliveryCompany
from logging_config import logger


@dataclass(slots=True)
class PlatformResponse:
    success: bool
    message: str
    external_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class DeliveryPlatformClient(abc.ABC):
    """Capabilities shared by every delivery platform."""

    company_id: ClassVar[str]
    status_map: ClassVar[Mapping[str, str]]
    simulated_latency: ClassVar[float] = 0.5

    def __init__(
        self,
        company: DeliveryCompany,
        credentials: str | None = None,
        *,
        simulate: bool = True,
        latency: float | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.company = company
        self.credentials = credentials
        self.simulate = simulate
        self.latency = self.simulated_latency if latency is None else latency
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def name(self) -> str:
        return self.company.name

    def map_status(self, status: str) -> str:
        """Platform vocabulary for one of our external statuses."""
        return self.status_map.get(status, status)

    @abc.abstractmethod
    def auth_headers(self) -> dict[str, str]:
        """Authorization headers for the platform's auth scheme."""

    def status_payload(self, status: str, estimated_time: int | None) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.map_status(status)}
        if estimated_time is not None:
            payload["prep_time_minutes"] = estimated_time
        return payload

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def update_order_status(
        self, external_order_id: str, status: str, estimated_time: int | None = None
    ) -> PlatformResponse:
        logger.info(f"🚚 Updating {self.name} order {external_order_id} to {status}")
        if self.simulate:
            await self._simulate()
        else:
            await self._request(
                "PUT",
                f"/orders/{external_order_id}/status",
                self.status_payload(status, estimated_time),
            )
        return PlatformResponse(
            success=True,
            message=f"Order status updated to {status} in {self.name}",
            external_id=external_order_id,
        )

    async def bulk_update_prices(self, items: list[dict[str, Any]]) -> PlatformResponse:
        logger.info(f"💲 Updating {len(items)} prices in {self.name}")
        if self.simulate:
            await self._simulate()
        else:
            await self._request(
                "POST",
                "/menu/prices",
                {"items": [{"id": item.get("id"), "price": item.get("price")} for item in items]},
            )
        return PlatformResponse(
            success=True,
            message=f"Updated {len(items)} prices in {self.name}",
            data={"updated_items": len(items)},
        )

    async def update_item_availability(self, item_id: str, is_available: bool) -> PlatformResponse:
        logger.info(f"📦 Setting {self.name} item {item_id} available={is_available}")
        if self.simulate:
            await self._simulate()
        else:
            await self._request(
                "PUT", f"/menu/items/{item_id}/availability", {"available": is_available}
            )
        state = "available" if is_available else "unavailable"
        return PlatformResponse(
            success=True,
            message=f"Item marked {state} in {self.name}",
            external_id=item_id,
        )

    async def sync_menu(
        self, restaurant_profile: dict[str, Any], menu: list[dict[str, Any]]
    ) -> PlatformResponse:
        logger.info(f"🔄 Syncing {len(menu)} menu items to {self.name}")
        if self.simulate:
            await self._simulate()
        else:
            await self._request("PUT", "/store/menu", {"store": restaurant_profile, "items": menu})
        return PlatformResponse(
            success=True,
            message=f"Menu synced to {self.name}",
            data={"items_count": len(menu)},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _simulate(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.credentials:
            raise ExternalCallException(
                f"{self.name} credentials are not configured", self.company_id
            )

        url = f"{self.company.api_base_url}{path}"
        started = time.monotonic()
        try:
            async with aiohttp.ClientSession(
                timeout=self.timeout, headers=self.auth_headers()
            ) as session:
                async with session.request(method, url, json=payload) as resp:
                    if resp.status >= 500:
                        raise ExternalCallException(
                            f"{self.name} responded {resp.status}", self.company_id, retryable=True
                        )
                    if resp.status >= 400:
                        detail = (await resp.text())[:200]
                        raise ExternalCallException(
                            f"{self.name} rejected the request ({resp.status}): {detail}",
                            self.company_id,
                        )
                    if resp.content_type == "application/json":
                        return await resp.json()
                    return {}
        except asyncio.TimeoutError as e:
            raise ExternalCallException(
                f"{self.name} request timed out", self.company_id, retryable=True
            ) from e
        except aiohttp.ClientError as e:
            raise ExternalCallException(
                f"{self.name} is unreachable: {e}", self.company_id, retryable=True
            ) from e
        finally:
            logger.debug(f"{method} {url} took {time.monotonic() - started:.2f}s")
