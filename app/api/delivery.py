"""
Delivery platform endpoints.

Inbound: the platform webhook (orders, cancellations, payments, drivers).
Outbound: status, price, availability and menu pushes initiated by the
restaurant dashboard.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_services
from app.api.rate_limit import DELIVERY_WEBHOOK_LIMIT, limiter
from app.core.bootstrap import Services
from app.core.exceptions import ExternalCallException, ValidationException
from app.core.idempotency import extract_external_event_id
from app.core.utils import new_id, round_money, utc_now_iso
from app.domain.value_objects import SyncStatus
from app.integrations.delivery import list_companies
from logging_config import logger

router = APIRouter(prefix="/api/delivery", tags=["delivery"])


def _require(required: list[str], present: bool) -> None:
    if not present:
        raise ValidationException("Missing required fields", required=required)


def _minutes(value: Any) -> int | None:
    """estimatedTime as whole minutes; platforms multiply it, so strings are refused."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationException("estimatedTime must be a whole number of minutes")
    return value


def _failure(error: str, status_code: int = 400, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


@router.post("/webhook")
@limiter.limit(DELIVERY_WEBHOOK_LIMIT)
async def delivery_webhook(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Inbound platform event: header X-Delivery-Company, body {type, data}."""
    company = request.headers.get("X-Delivery-Company")
    event_type = payload.get("type")
    data = payload.get("data")
    _require(
        ["X-Delivery-Company header", "type", "data"],
        bool(company and event_type and isinstance(data, dict) and data),
    )

    external_event_id = extract_external_event_id(request.headers.get("X-Delivery-Event-Id"), data)
    result = await services.ingester.ingest(company, event_type, data, external_event_id)

    if result.success:
        body = {"success": True, "message": result.message, "eventId": result.event_id}
        if result.duplicate:
            body["duplicate"] = True
        return body
    body = {"success": False, "error": result.error, "eventId": result.event_id}
    if result.duplicate:
        body["duplicate"] = True
    return JSONResponse(status_code=400, content=body)


@router.post("/update-order-status")
@limiter.limit("120/minute")
async def update_order_status(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    order_id = payload.get("orderId")
    status = payload.get("status")
    company_id = payload.get("deliveryCompanyId")
    _require(
        ["orderId", "status", "deliveryCompanyId"],
        bool(order_id and status and company_id),
    )

    result = await services.lifecycle.update_status(
        str(order_id),
        str(status),
        _minutes(payload.get("estimatedTime")),
        str(company_id),
        timestamp=payload.get("timestamp"),
    )
    if not result.success:
        return _failure(result.error or "Status update failed", orderId=result.order_id)
    return {
        "success": True,
        "message": "Order status updated successfully",
        "orderId": result.order_id,
        "status": result.status,
        "estimatedTime": result.estimated_time,
    }


@router.post("/bulk-update-prices")
@limiter.limit("60/minute")
async def bulk_update_prices(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    restaurant_id = payload.get("restaurantId")
    items = payload.get("items")
    company_id = payload.get("companyId")
    _require(
        ["restaurantId", "items (array)", "companyId"],
        bool(restaurant_id and isinstance(items, list)),
    )

    client = services.registry.get(str(company_id or ""))
    try:
        response = await client.bulk_update_prices(items)
    except ExternalCallException as e:
        logger.error(f"❌ Bulk price update to {client.name} failed: {e.message}")
        return _failure(e.message)

    await services.db.add_bulk_price_update_log(
        {
            "restaurant_id": restaurant_id,
            "company_id": company_id,
            "items_count": len(items),
            "timestamp": utc_now_iso(),
            "success": True,
        }
    )
    return {
        "success": True,
        "message": "Prices updated successfully",
        "updatedItems": response.data.get("updated_items", len(items)),
        "companyId": company_id,
    }


@router.post("/update-item-availability")
@limiter.limit("120/minute")
async def update_item_availability(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    restaurant_id = payload.get("restaurantId")
    item_id = payload.get("itemId")
    is_available = payload.get("isAvailable")
    company_id = payload.get("companyId")
    _require(
        ["restaurantId", "itemId", "isAvailable"],
        bool(restaurant_id and item_id and isinstance(is_available, bool)),
    )

    client = services.registry.get(str(company_id or ""))
    try:
        await client.update_item_availability(str(item_id), is_available)
    except ExternalCallException as e:
        logger.error(f"❌ Availability update to {client.name} failed: {e.message}")
        return _failure(e.message)

    await services.db.add_item_availability_log(
        {
            "restaurant_id": restaurant_id,
            "item_id": item_id,
            "is_available": is_available,
            "company_id": company_id,
            "timestamp": utc_now_iso(),
            "success": True,
        }
    )
    return {
        "success": True,
        "message": "Item availability updated successfully",
        "itemId": item_id,
        "isAvailable": is_available,
        "companyId": company_id,
    }


def _menu_for_platform(items: list[dict[str, Any]], markup_percentage: float) -> list[dict[str, Any]]:
    factor = 1 + (markup_percentage or 0) / 100
    return [
        {
            "id": item["id"],
            "name": item.get("name"),
            "description": item.get("description", ""),
            "category": item.get("category"),
            "price": round_money(float(item.get("price") or 0) * factor),
            "available": item.get("available", True),
            "image_url": item.get("image_url"),
        }
        for item in items
    ]


@router.post("/sync-menu")
@limiter.limit("30/minute")
async def sync_menu(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Push the tenant's menu to a platform and record the sync status."""
    user_id = payload.get("userId")
    company_id = payload.get("companyId")
    _require(["companyId", "userId"], bool(user_id and company_id))

    services.registry.company(str(company_id))
    client = services.registry.get(str(company_id))
    integration = await services.db.get_active_integration(str(user_id), str(company_id))
    markup = ((integration or {}).get("settings") or {}).get("markup_percentage", 0)

    profile = payload.get("restaurantProfile")
    if not profile:
        tenant = await services.db.get_tenant(str(user_id)) or {}
        profile = {
            "restaurant_name": tenant.get("business_name"),
            "address": tenant.get("address"),
            "phone": tenant.get("phone"),
        }
    menu = payload.get("menu")
    if not isinstance(menu, list):
        menu = _menu_for_platform(await services.db.get_menu_items(str(user_id)), markup)

    if integration:
        await services.db.update_delivery_integration(
            integration["id"], {"sync_status": SyncStatus.SYNCING.value}
        )

    try:
        response = await client.sync_menu(profile, menu)
    except ExternalCallException as e:
        logger.error(f"❌ Menu sync to {client.name} failed: {e.message}")
        await _record_sync(services, integration, user_id, company_id, len(menu), e.message)
        return _failure(e.message)

    await _record_sync(services, integration, user_id, company_id, len(menu), None)
    return {
        "success": True,
        "message": "Menu synced successfully",
        "syncId": response.external_id or new_id(),
        "itemsCount": len(menu),
    }


async def _record_sync(
    services: Services,
    integration: dict[str, Any] | None,
    user_id: str,
    company_id: str,
    items_count: int,
    error: str | None,
) -> None:
    now = utc_now_iso()
    status = SyncStatus.ERROR.value if error else SyncStatus.SUCCESS.value
    if integration:
        await services.db.update_delivery_integration(
            integration["id"],
            {"sync_status": status, "last_sync_at": now, "error_message": error},
        )
    await services.db.add_menu_sync_log(
        {
            "user_id": user_id,
            "company_id": company_id,
            "items_count": items_count,
            "status": status,
            "error_message": error,
            "timestamp": now,
        }
    )


@router.get("/companies")
async def companies():
    return {
        "success": True,
        "companies": [company.model_dump(mode="json") for company in list_companies()],
    }
