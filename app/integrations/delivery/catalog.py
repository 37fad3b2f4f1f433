"""Catalog of delivery companies restaurants can connect to."""
from __future__ import annotations

from app.domain.entities import DeliveryCompany
from app.domain.value_objects import AuthType

DELIVERY_COMPANIES: tuple[DeliveryCompany, ...] = (
    DeliveryCompany(
        id="uber_eats",
        name="Uber Eats",
        description="Connect with millions of customers through Uber Eats",
        commission=15,
        api_base_url="https://api.uber.com/v1/eats",
        auth_type=AuthType.OAUTH,
        features=[
            "Real-time order notifications",
            "Menu synchronization",
            "Customer reviews and ratings",
            "Marketing tools and promotions",
        ],
        requirements=[
            "Valid business license",
            "Food safety certification",
            "Bank account for payouts",
        ],
        supported_features={
            "menu_sync": True,
            "order_receiving": True,
            "status_updates": True,
            "real_time_updates": True,
        },
        setup_steps=[
            "Create Uber Eats partner account",
            "Complete restaurant verification",
            "Configure menu and pricing",
            "Set up payout information",
        ],
    ),
    DeliveryCompany(
        id="doordash",
        name="DoorDash",
        description="Reach customers in your area with DoorDash delivery",
        commission=18,
        api_base_url="https://api.doordash.com/v1",
        auth_type=AuthType.API_KEY,
        features=[
            "DashPass customer base",
            "Advanced analytics dashboard",
            "Promotional campaigns",
            "Customer support integration",
        ],
        requirements=[
            "Business registration",
            "Health department permits",
            "Liability insurance",
        ],
        supported_features={
            "menu_sync": True,
            "order_receiving": True,
            "status_updates": True,
            "real_time_updates": False,
        },
        setup_steps=[
            "Register on DoorDash for Business",
            "Upload required documents",
            "Menu setup and photo upload",
            "Banking information setup",
        ],
    ),
    DeliveryCompany(
        id="grubhub",
        name="Grubhub",
        description="Join the Grubhub network for food delivery",
        commission=20,
        api_base_url="https://api.grubhub.com/v1",
        auth_type=AuthType.BASIC,
        features=[
            "Grubhub+ loyalty program",
            "Order management tools",
            "Performance insights",
            "Marketing support",
        ],
        requirements=[
            "Restaurant license",
            "Food handler certification",
            "Commercial insurance",
        ],
        supported_features={
            "menu_sync": True,
            "order_receiving": True,
            "status_updates": True,
            "real_time_updates": True,
        },
        setup_steps=[
            "Apply for Grubhub partnership",
            "Complete onboarding process",
            "Menu and pricing configuration",
            "Payment setup",
        ],
    ),
    # Listed for onboarding; orders arrive through the Uber Eats integration
    DeliveryCompany(
        id="postmates",
        name="Postmates (Uber)",
        description="Deliver through the Postmates network",
        commission=16,
        api_base_url="https://api.postmates.com/v1",
        auth_type=AuthType.OAUTH,
        features=[
            "Fleet delivery network",
            "Real-time tracking",
            "Customer communication",
            "Order analytics",
        ],
        requirements=[
            "Business verification",
            "Menu digitization",
            "Quality standards compliance",
        ],
        supported_features={
            "menu_sync": True,
            "order_receiving": True,
            "status_updates": True,
            "real_time_updates": True,
        },
        setup_steps=[
            "Partner application",
            "Restaurant verification",
            "Menu setup",
            "Go live",
        ],
    ),
)

_BY_ID = {company.id: company for company in DELIVERY_COMPANIES}


def get_company(company_id: str) -> DeliveryCompany | None:
    return _BY_ID.get(company_id)


def list_companies() -> list[DeliveryCompany]:
    return list(DELIVERY_COMPANIES)
