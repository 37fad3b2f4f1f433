"""Inline-button callback payloads.

Every staff button carries ``{action}_{entity}_{entity_id}``. Building and
parsing both go through :class:`StaffCallback`, so a payload produced by a
notification always parses back into the same triple in the bot handlers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

# Telegram rejects callback_data longer than 64 bytes
MAX_CALLBACK_BYTES = 64


class CallbackAction:
    APPROVE = "approve"
    REJECT = "reject"
    ACCEPT = "accept"
    ACK = "ack"
    DELAY = "delay"
    ASSIGN = "assign"
    READY = "ready"


class CallbackEntity:
    PENDING = "pending"  # pending table order awaiting the cashier
    PAYMENT = "payment"  # payment confirmation
    CALL = "call"  # waiter call
    ORDER = "order"  # kitchen ticket for a confirmed order
    DELIVERY = "delivery"  # order received from a delivery platform


ACTIONS_BY_ENTITY: Mapping[str, frozenset[str]] = {
    CallbackEntity.PENDING: frozenset({CallbackAction.APPROVE, CallbackAction.REJECT}),
    CallbackEntity.PAYMENT: frozenset({CallbackAction.APPROVE, CallbackAction.REJECT}),
    CallbackEntity.CALL: frozenset(
        {CallbackAction.ACK, CallbackAction.DELAY, CallbackAction.ASSIGN}
    ),
    CallbackEntity.ORDER: frozenset({CallbackAction.READY, CallbackAction.DELAY}),
    CallbackEntity.DELIVERY: frozenset({CallbackAction.ACCEPT, CallbackAction.REJECT}),
}


class CallbackDecodeError(ValueError):
    """callback_data is not a payload this bot produced."""


@dataclass(frozen=True, slots=True)
class StaffCallback:
    action: str
    entity: str
    entity_id: str

    def pack(self) -> str:
        allowed = ACTIONS_BY_ENTITY.get(self.entity)
        if allowed is None or self.action not in allowed:
            raise ValueError(f"Unsupported callback {self.action!r} for {self.entity!r}")
        if not self.entity_id:
            raise ValueError("Callback entity_id must not be empty")
        payload = f"{self.action}_{self.entity}_{self.entity_id}"
        if len(payload.encode("utf-8")) > MAX_CALLBACK_BYTES:
            raise ValueError(f"Callback payload exceeds {MAX_CALLBACK_BYTES} bytes: {payload}")
        return payload

    @classmethod
    def unpack(cls, data: str | None) -> StaffCallback:
        """Parse callback_data; the entity id may itself contain underscores."""
        parts = (data or "").split("_", 2)
        if len(parts) != 3 or not all(parts):
            raise CallbackDecodeError(f"Malformed callback data: {data!r}")
        action, entity, entity_id = parts
        if action not in ACTIONS_BY_ENTITY.get(entity, frozenset()):
            raise CallbackDecodeError(f"Unknown callback {action!r} for {entity!r}")
        return cls(action=action, entity=entity, entity_id=entity_id)

    @classmethod
    def try_unpack(cls, data: str | None) -> StaffCallback | None:
        try:
            return cls.unpack(data)
        except CallbackDecodeError:
            return None
