"""
Main Database class combining all mixins.
"""
from __future__ import annotations

import os

from .core import DatabaseCore
from .documents import DocumentMixin
from .mixins import (
    BillingMixin,
    DeliveryMixin,
    MenuMixin,
    OrderMixin,
    ReportMixin,
    StaffMixin,
    TenantMixin,
)
from .schema import SchemaMixin
from logging_config import logger


class Database(
    DatabaseCore,
    SchemaMixin,
    DocumentMixin,
    TenantMixin,
    StaffMixin,
    MenuMixin,
    OrderMixin,
    BillingMixin,
    DeliveryMixin,
    ReportMixin,
):
    """
    PostgreSQL Database for CafeBot.

    DocumentMixin provides the JSONB primitives; the domain mixins
    (tenants, staff, menu, orders, billing, delivery, reports) are written
    against those primitives only, so the in-memory store reuses them.
    """

    def __init__(self, database_url=None):
        """Initialize database with connection pool and schema."""
        super().__init__(database_url)
        # Skip init_db if SKIP_DB_INIT is set (for existing databases)
        if not os.getenv("SKIP_DB_INIT"):
            self.init_db()
            logger.info("✅ Database initialized with all mixins")
        else:
            logger.info("⏭️  Skipping database initialization (SKIP_DB_INIT=1)")
