"""
Customer-facing endpoints used by the table menu web app.

A visit starts with POST /api/sessions; later calls may pass the returned
sessionId instead of repeating cafeId/tableNumber.
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_services
from app.api.rate_limit import CUSTOMER_LIMIT, limiter
from app.core.bootstrap import Services
from app.core.exceptions import AuthorizationException, ValidationException
from app.domain.entities import TelegramUser
from app.services.session_service import (
    create_session,
    generate_deep_link,
    generate_fallback_url,
    parse_start_parameter,
    parse_url_params,
    validate_telegram_auth,
)
from logging_config import logger

router = APIRouter(prefix="/api", tags=["customer"])


def _table_context(services: Services, payload: dict[str, Any]) -> tuple[str, str, str | None]:
    """Resolve (tenant, table, session) from a stored session or explicit ids."""
    session_id = payload.get("sessionId")
    if session_id:
        session = services.sessions.get(str(session_id))
        if session is not None:
            return session.cafe_id, session.table_id, session.session_id

    tenant_id = payload.get("cafeId") or payload.get("userId")
    table_number = payload.get("tableNumber") or payload.get("tableId")
    if not tenant_id or not table_number:
        raise ValidationException("Missing required fields", required=["cafeId", "tableNumber"])
    return str(tenant_id), str(table_number), str(session_id) if session_id else None


@router.post("/sessions")
@limiter.limit("30/minute")
async def start_session(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Open a table session from a deep link, a QR URL or explicit ids."""
    params = parse_start_parameter(payload.get("startParam")) or parse_url_params(payload.get("url"))
    if params is None:
        cafe_id, table_id = payload.get("cafeId"), payload.get("tableId")
        if not cafe_id or not table_id:
            raise ValidationException(
                "Missing required fields", required=["startParam or url or cafeId+tableId"]
            )
        cafe_id, table_id = str(cafe_id), str(table_id)
    else:
        cafe_id, table_id = params.cafe_id, params.table_id

    telegram_user = None
    auth = payload.get("telegramUser")
    if auth:
        if not validate_telegram_auth(
            auth,
            services.settings.bot_token,
            max_age=services.settings.auth_max_age_seconds,
        ):
            raise AuthorizationException("Telegram authentication failed")
        telegram_user = TelegramUser.model_validate(auth)

    session = create_session(cafe_id, table_id, telegram_user)
    services.sessions.store(session)
    logger.info(
        f"🪑 Session {session.session_id} at {cafe_id}/table {table_id}"
        f" ({'guest' if session.is_guest else 'telegram'})"
    )
    return {
        "success": True,
        "session": session.model_dump(mode="json"),
        "deepLink": generate_deep_link(cafe_id, table_id, services.settings.bot_username),
        "fallbackUrl": generate_fallback_url(
            cafe_id, table_id, services.settings.fallback_menu_url
        ),
    }


@router.get("/menu/{tenant_id}")
async def get_menu(tenant_id: str, services: Services = Depends(get_services)):
    entries = await services.menu.get_scheduled_menu(tenant_id)
    return {
        "success": True,
        "items": [entry.model_dump(mode="json") for entry in entries],
    }


@router.post("/orders")
@limiter.limit("20/minute")
async def place_order(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    tenant_id, table_number, session_id = _table_context(services, payload)
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationException("Missing required fields", required=["items"])

    pending = await services.lifecycle.place_pending_order(
        tenant_id,
        table_number,
        items,
        customer_info=payload.get("customerInfo"),
        session_id=session_id,
        notes=payload.get("notes"),
    )
    return {
        "success": True,
        "message": "Order sent for approval",
        "pendingOrderId": pending["id"],
        "totalAmount": pending["total_amount"],
    }


@router.post("/waiter-call")
@limiter.limit(CUSTOMER_LIMIT)
async def call_waiter(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    tenant_id, table_number, _ = _table_context(services, payload)
    routing = await services.notifications.send_waiter_call(tenant_id, table_number)
    return {"success": routing.delivered, "routing": asdict(routing)}


@router.post("/bill-request")
@limiter.limit(CUSTOMER_LIMIT)
async def request_bill(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    tenant_id, table_number, _ = _table_context(services, payload)
    bill = await services.billing.get_active_bill(tenant_id, table_number)
    total = bill.get("total") if bill else None
    sent = await services.notifications.send_bill_request(tenant_id, table_number, total)
    return {"success": sent, "total": total, "billId": bill.get("id") if bill else None}


@router.post("/payment-confirmations")
@limiter.limit(CUSTOMER_LIMIT)
async def confirm_payment(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    tenant_id, table_number, session_id = _table_context(services, payload)
    amount = payload.get("amount")
    method = payload.get("method")
    if not isinstance(amount, (int, float)) or isinstance(amount, bool) or not method:
        raise ValidationException("Missing required fields", required=["amount", "method"])

    confirmation = await services.billing.submit_payment_confirmation(
        tenant_id,
        table_number,
        float(amount),
        str(method),
        screenshot_url=payload.get("screenshotUrl"),
        session_id=session_id,
    )
    return {
        "success": True,
        "message": "Payment confirmation sent to cashier",
        "confirmationId": confirmation["id"],
    }


@router.post("/feedback")
@limiter.limit(CUSTOMER_LIMIT)
async def submit_feedback(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    session_id = payload.get("sessionId")
    if not session_id:
        raise ValidationException("Missing required fields", required=["sessionId"])
    session = services.sessions.get(str(session_id))

    feedback = {
        "user_id": payload.get("cafeId") or (session.cafe_id if session else None),
        "table_number": payload.get("tableNumber") or (session.table_id if session else None),
        "order_id": payload.get("orderId"),
        "rating": payload.get("rating"),
        "comment": payload.get("comment") or "",
        "customer_info": payload.get("customerInfo") or {},
    }
    stored = await services.feedback.submit_feedback(str(session_id), feedback)
    return {"success": True, "feedbackId": stored["id"]}
