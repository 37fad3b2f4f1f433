"""Restaurant dashboard endpoints: staff routing, menu schedules and reports."""
from __future__ import annotations

from datetime import date
from typing import Any, NamedTuple

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_services
from app.api.rate_limit import ADMIN_LIMIT, limiter
from app.core.bootstrap import Services
from app.core.exceptions import NotFoundException, ValidationException
from app.domain.entities import CashierInfo, Department, MenuSchedule, WaiterAssignment
from app.domain.entities.base import DocumentModel
from logging_config import logger

router = APIRouter(prefix="/api/admin", tags=["admin"])


class Resource(NamedTuple):
    model: type[DocumentModel]
    singular: str
    plural: str


RESOURCES: dict[str, Resource] = {
    "departments": Resource(Department, "department", "departments"),
    "waiter-assignments": Resource(WaiterAssignment, "waiter_assignment", "waiter_assignments"),
    "menu-schedules": Resource(MenuSchedule, "menu_schedule", "menu_schedules"),
}


def _resource(name: str) -> Resource:
    resource = RESOURCES.get(name)
    if resource is None:
        raise NotFoundException(f"Unknown resource: {name}")
    return resource


def _validate(model: type[DocumentModel], data: dict[str, Any]) -> DocumentModel:
    try:
        return model.model_validate(data)
    except ValueError as e:
        raise ValidationException(f"Invalid {model.__name__}: {e}") from e


async def _owned(services: Services, resource: Resource, tenant_id: str, doc_id: str) -> dict:
    """Load a document and check it belongs to the tenant."""
    existing = await getattr(services.db, f"get_{resource.singular}")(doc_id)
    if not existing or existing.get("user_id") != tenant_id:
        raise NotFoundException(f"{resource.model.__name__} not found")
    return existing


# Must stay above the generic /{resource_name} routes
@router.post("/{tenant_id}/day-report")
@limiter.limit("10/minute")
async def day_report(
    tenant_id: str,
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Close the day: aggregate today's activity and send it to the admin chat."""
    try:
        cashier_info = CashierInfo.model_validate(payload.get("cashierInfo") or {})
    except ValueError:
        raise ValidationException(
            "Missing required fields", required=["cashierInfo.name"]
        ) from None
    try:
        today = date.fromisoformat(payload["date"]) if payload.get("date") else None
    except (TypeError, ValueError):
        raise ValidationException("date must be YYYY-MM-DD") from None

    report = await services.reports.create_day_report(tenant_id, cashier_info, today=today)
    return {"success": True, "report": report}


@router.get("/{tenant_id}/{resource_name}")
async def list_resources(
    tenant_id: str,
    resource_name: str,
    services: Services = Depends(get_services),
):
    resource = _resource(resource_name)
    documents = await getattr(services.db, f"get_{resource.plural}")(tenant_id)
    return {"success": True, resource.plural: documents}


@router.post("/{tenant_id}/{resource_name}")
@limiter.limit(ADMIN_LIMIT)
async def create_resource(
    tenant_id: str,
    resource_name: str,
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    resource = _resource(resource_name)
    entity = _validate(resource.model, {**payload, "user_id": tenant_id})
    doc_id = await getattr(services.db, f"add_{resource.singular}")(entity.to_document())
    logger.info(f"🛠 Created {resource.singular} {doc_id} for {tenant_id}")
    return {"success": True, "id": doc_id}


@router.put("/{tenant_id}/{resource_name}/{doc_id}")
@limiter.limit(ADMIN_LIMIT)
async def update_resource(
    tenant_id: str,
    resource_name: str,
    doc_id: str,
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Partial update; the merged document is re-validated before writing."""
    resource = _resource(resource_name)
    existing = await _owned(services, resource, tenant_id, doc_id)
    entity = _validate(resource.model, {**existing, **payload, "user_id": tenant_id})
    updated = await getattr(services.db, f"update_{resource.singular}")(
        doc_id, entity.to_document()
    )
    return {"success": True, resource.singular: updated}


@router.delete("/{tenant_id}/{resource_name}/{doc_id}")
async def delete_resource(
    tenant_id: str,
    resource_name: str,
    doc_id: str,
    services: Services = Depends(get_services),
):
    resource = _resource(resource_name)
    await _owned(services, resource, tenant_id, doc_id)
    await getattr(services.db, f"delete_{resource.singular}")(doc_id)
    logger.info(f"🗑 Deleted {resource.singular} {doc_id} for {tenant_id}")
    return {"success": True}
