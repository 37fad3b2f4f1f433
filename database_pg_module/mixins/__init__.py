"""Domain mixins; each one only relies on the document primitives."""
from __future__ import annotations

from .billing import BillingMixin
from .delivery import DeliveryMixin
from .menu import MenuMixin
from .orders import OrderMixin
from .reports import ReportMixin
from .staff import StaffMixin
from .tenants import TenantMixin

__all__ = [
    "BillingMixin",
    "DeliveryMixin",
    "MenuMixin",
    "OrderMixin",
    "ReportMixin",
    "StaffMixin",
    "TenantMixin",
]
