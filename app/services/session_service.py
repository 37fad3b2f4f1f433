"""
Session/Identity resolution for table visits.

A customer arrives through a Telegram deep link (`start=<cafe>_<table>`) or
the QR fallback URL (`?cafe=..&table=..`). Optionally they log in with the
Telegram Login Widget, whose payload is checked for freshness and signature.
"""
from __future__ import annotations

import hashlib
import hmac
import secrets
import string
import time
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse

from app.domain.entities import CafeTableSession, DeepLinkParams, TelegramUser
from logging_config import logger

AUTH_MAX_AGE_SECONDS = 86400
SESSION_ID_ALPHABET = string.ascii_lowercase + string.digits
AUTH_REQUIRED_FIELDS = ("id", "first_name", "auth_date", "hash")


def generate_deep_link(cafe_id: str, table_id: str, bot_username: str) -> str:
    return f"https://t.me/{bot_username}?start={cafe_id}_{table_id}"


def generate_fallback_url(cafe_id: str, table_id: str, base_url: str) -> str:
    return f"{base_url}?{urlencode({'cafe': cafe_id, 'table': table_id})}"


def parse_start_parameter(param: str | None) -> DeepLinkParams | None:
    """`<cafe>_<table>` with exactly two non-empty parts."""
    if not param:
        return None
    parts = param.split("_")
    if len(parts) != 2 or not all(parts):
        return None
    return DeepLinkParams(cafe_id=parts[0], table_id=parts[1])


def parse_url_params(url: str | None) -> DeepLinkParams | None:
    if not url:
        return None
    try:
        query = parse_qs(urlparse(url).query)
    except ValueError:
        return None
    cafe_id = (query.get("cafe") or [""])[0]
    table_id = (query.get("table") or [""])[0]
    if not cafe_id or not table_id:
        return None
    return DeepLinkParams(cafe_id=cafe_id, table_id=table_id)


def telegram_auth_hash(auth: dict[str, Any], bot_token: str) -> str:
    """Login Widget signature: HMAC-SHA256 keyed with sha256(bot_token)."""
    data_check_string = "\n".join(
        f"{key}={value}"
        for key, value in sorted(auth.items())
        if key != "hash" and value is not None
    )
    secret_key = hashlib.sha256(bot_token.encode()).digest()
    return hmac.new(
        key=secret_key,
        msg=data_check_string.encode(),
        digestmod=hashlib.sha256,
    ).hexdigest()


def validate_telegram_auth(
    auth: dict[str, Any] | None,
    bot_token: str | None = None,
    now: float | None = None,
    max_age: int = AUTH_MAX_AGE_SECONDS,
) -> bool:
    """Check required fields, auth_date freshness and (with a token) the hash."""
    if not auth or any(not auth.get(field) for field in AUTH_REQUIRED_FIELDS):
        return False

    try:
        auth_date = int(auth["auth_date"])
    except (TypeError, ValueError):
        return False
    current = int(now if now is not None else time.time())
    if current - auth_date > max_age:
        return False

    if bot_token:
        expected = telegram_auth_hash(auth, bot_token)
        if not hmac.compare_digest(expected, str(auth["hash"])):
            logger.warning(f"Telegram auth hash mismatch for user {auth.get('id')}")
            return False
    return True


def generate_session_id(now_ms: int | None = None) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(SESSION_ID_ALPHABET) for _ in range(9))
    return f"session_{stamp}_{suffix}"


def create_session(
    cafe_id: str, table_id: str, telegram_user: TelegramUser | None = None
) -> CafeTableSession:
    now_ms = int(time.time() * 1000)
    return CafeTableSession(
        cafe_id=cafe_id,
        table_id=table_id,
        session_id=generate_session_id(now_ms),
        timestamp=now_ms,
        telegram_user=telegram_user,
        is_guest=telegram_user is None,
    )
