"""Resolve a delivery company id to a configured platform client."""
from __future__ import annotations

from app.core.config import DeliveryConfig
from app.core.exceptions import DeliveryCompanyNotFoundException, UnsupportedCompanyException
from app.domain.entities import DeliveryCompany
from app.integrations.delivery.base import DeliveryPlatformClient
from app.integrations.delivery.catalog import get_company
from app.integrations.delivery.platforms import DoorDashClient, GrubhubClient, UberEatsClient

CLIENT_CLASSES: dict[str, type[DeliveryPlatformClient]] = {
    UberEatsClient.company_id: UberEatsClient,
    DoorDashClient.company_id: DoorDashClient,
    GrubhubClient.company_id: GrubhubClient,
}


class DeliveryClientRegistry:
    """Builds one client per company and caches it."""

    def __init__(self, config: DeliveryConfig | None = None, latency: float | None = None):
        self.config = config or DeliveryConfig()
        # Overrides every platform's simulated latency (tests use 0)
        self.latency = latency
        self._clients: dict[str, DeliveryPlatformClient] = {}

    def company(self, company_id: str) -> DeliveryCompany:
        company = get_company(company_id)
        if company is None:
            raise DeliveryCompanyNotFoundException(company_id)
        return company

    def get(self, company_id: str) -> DeliveryPlatformClient:
        """Client for company_id; UnsupportedCompanyException if we cannot talk to it."""
        client = self._clients.get(company_id)
        if client is not None:
            return client

        client_cls = CLIENT_CLASSES.get(company_id)
        company = get_company(company_id)
        if client_cls is None or company is None:
            raise UnsupportedCompanyException(company_id)

        client = client_cls(
            company,
            self.config.credentials.get(company_id),
            simulate=self.config.simulate,
            latency=self.latency,
            timeout=self.config.request_timeout,
        )
        self._clients[company_id] = client
        return client
