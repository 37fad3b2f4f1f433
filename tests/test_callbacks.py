from __future__ import annotations

import pytest

from app.domain.callbacks import CallbackDecodeError, StaffCallback
from app.keyboards import (
    kitchen_ticket_keyboard,
    pending_order_keyboard,
    unassigned_call_keyboard,
    waiter_call_keyboard,
)


def _callback_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def test_pack_format() -> None:
    assert StaffCallback("approve", "pending", "abc123").pack() == "approve_pending_abc123"


def test_unpack_keeps_underscores_in_entity_id() -> None:
    parsed = StaffCallback.unpack("ready_order_table_7_xyz")
    assert parsed == StaffCallback("ready", "order", "table_7_xyz")


def test_pack_rejects_action_not_allowed_for_entity() -> None:
    with pytest.raises(ValueError):
        StaffCallback("ready", "payment", "p1").pack()


def test_pack_rejects_oversized_payload() -> None:
    with pytest.raises(ValueError):
        StaffCallback("approve", "pending", "x" * 64).pack()


@pytest.mark.parametrize(
    "data",
    [None, "", "approve_pending", "approve_pending_", "explode_pending_1", "approve_unknown_1"],
)
def test_unpack_rejects_foreign_payloads(data) -> None:
    with pytest.raises(CallbackDecodeError):
        StaffCallback.unpack(data)
    assert StaffCallback.try_unpack(data) is None


def test_keyboards_emit_parseable_payloads() -> None:
    assert _callback_data(pending_order_keyboard("p1")) == ["approve_pending_p1", "reject_pending_p1"]
    assert _callback_data(kitchen_ticket_keyboard("o1")) == ["ready_order_o1", "delay_order_o1"]
    assert _callback_data(waiter_call_keyboard("c1")) == ["ack_call_c1", "delay_call_c1"]
    assert _callback_data(unassigned_call_keyboard("c1")) == ["ack_call_c1", "assign_call_c1"]
    for data in _callback_data(pending_order_keyboard("p1")):
        assert StaffCallback.try_unpack(data) is not None
