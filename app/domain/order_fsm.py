"""Order status transition rules (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from app.domain.order import OrderStatus


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.CONFIRMED: frozenset(
        {
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PREPARING: frozenset(
        {
            OrderStatus.READY,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.READY: frozenset(
        {
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_order_transition(
    *,
    current_status: str | None,
    target_status: str,
) -> TransitionValidationResult:
    """Check a status change against the transition matrix.

    Platform-specific statuses outside the internal vocabulary pass through
    unchecked; only moves out of a terminal status are always refused.
    """
    if not target_status:
        return TransitionValidationResult(False, "New status is required")

    target = OrderStatus.normalize(target_status)
    current = OrderStatus.normalize(current_status) if current_status is not None else None

    if current == target:
        return TransitionValidationResult(True)

    if current in TERMINAL_STATUSES:
        return TransitionValidationResult(False, f"Order is already {current}")

    if current in ALLOWED_TRANSITIONS and target in ALLOWED_TRANSITIONS:
        if target not in ALLOWED_TRANSITIONS[current]:
            return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed")

    return TransitionValidationResult(True)
