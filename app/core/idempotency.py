"""
Idempotency helpers for inbound events and one-shot submissions.

Keys are claimed through the store's unique key table, so a replayed
delivery webhook or a second feedback for the same session is detected
even across processes.
"""
from __future__ import annotations

from typing import Any

FEEDBACK_NAMESPACE = "feedback_session"


def normalize_idempotency_key(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def webhook_idempotency_key(company: str, external_event_id: str | None) -> str | None:
    """`company:event_id`, or None when the platform sent no event id."""
    event_id = normalize_idempotency_key(external_event_id)
    if not event_id:
        return None
    return f"{company}:{event_id}"


def extract_external_event_id(header_value: str | None, data: dict[str, Any] | None) -> str | None:
    """Event id from the X-Delivery-Event-Id header, else from the payload."""
    header = normalize_idempotency_key(header_value)
    if header:
        return header
    if isinstance(data, dict):
        value = data.get("eventId")
        return normalize_idempotency_key(str(value)) if value is not None else None
    return None
