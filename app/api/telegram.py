"""Telegram webhook receiver and bot maintenance endpoints."""
from __future__ import annotations

from aiogram import types
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_services
from app.api.rate_limit import limiter
from app.core.bootstrap import Services
from app.core.exceptions import ValidationException
from logging_config import logger

router = APIRouter(prefix="/api/telegram", tags=["telegram"])


@router.post("/webhook")
async def telegram_webhook(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Handle incoming Telegram updates via webhook."""
    secret_token = services.settings.webhook.secret_token
    if secret_token:
        hdr = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
        if hdr != secret_token:
            logger.warning("Invalid secret token")
            return JSONResponse(status_code=403, content={"ok": False, "error": "Forbidden"})

    if services.dispatcher is None:
        logger.warning("⚠️ Telegram update received but no dispatcher is attached")
        return {"ok": True}

    # Telegram retries non-2xx responses, so malformed updates are acknowledged
    try:
        update = types.Update.model_validate(payload, context={"bot": services.bot})
    except Exception as e:
        logger.error(f"Webhook validation error: {repr(e)}")
        return {"ok": True}

    await services.dispatcher.feed_update(services.bot, update)
    return {"ok": True}


@router.post("/setup-webhook")
@limiter.limit("5/minute")
async def setup_webhook(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    webhook = services.settings.webhook
    url = payload.get("url") or (f"{webhook.url}{webhook.path}" if webhook.url else None)
    if not url:
        raise ValidationException("Missing required fields", required=["url"])

    await services.bot.set_webhook(
        url=url,
        secret_token=webhook.secret_token or None,
        allowed_updates=["message", "callback_query"],
    )
    logger.info(f"✅ Webhook set: {url}")
    return {"success": True, "url": url}


@router.get("/webhook-info")
async def webhook_info(services: Services = Depends(get_services)):
    info = await services.bot.get_webhook_info()
    return {"success": True, "info": info.model_dump(mode="json", exclude_none=True)}


@router.post("/test-message")
@limiter.limit("10/minute")
async def test_message(
    payload: dict,
    request: Request,
    services: Services = Depends(get_services),
):
    """Send a probe message to verify a chat id is reachable."""
    chat_id = payload.get("chatId")
    if not chat_id:
        raise ValidationException("Missing required fields", required=["chatId"])

    sent = await services.notifications.send_test_message(str(chat_id), payload.get("message"))
    if not sent:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Failed to send message", "chatId": str(chat_id)},
        )
    return {"success": True, "message": "Test message sent", "chatId": str(chat_id)}
