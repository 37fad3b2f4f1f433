"""Departments, waiter assignments and waiter calls."""
from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from app.domain.entities.base import DocumentModel
from app.domain.value_objects import DepartmentRole, WaiterCallStatus


def _check_hhmm(value: str | None) -> str | None:
    if value is None:
        return value
    hours, sep, minutes = value.partition(":")
    if not sep or not (hours.isdigit() and minutes.isdigit()):
        raise ValueError("time must be HH:MM")
    if not (0 <= int(hours) <= 23 and 0 <= int(minutes) <= 59):
        raise ValueError("time must be HH:MM")
    return f"{int(hours):02d}:{int(minutes):02d}"


class Department(DocumentModel):
    """A staff group with its own Telegram chat."""

    user_id: str
    name: str = Field(..., min_length=1, max_length=60)
    role: DepartmentRole
    telegram_chat_id: str = Field(..., min_length=1)
    admin_chat_id: str | None = Field(None, description="Escalation chat (cashier departments)")
    order: int = 0
    icon: str | None = None


class WaiterAssignment(DocumentModel):
    """A waiter responsible for an inclusive range of tables."""

    user_id: str
    waiter_name: str = Field(..., min_length=1)
    start_table: int = Field(..., ge=1)
    end_table: int = Field(..., ge=1)
    is_active: bool = True
    telegram_chat_id: str | None = None
    shift_start_time: str | None = None
    shift_end_time: str | None = None
    working_days: list[int] | None = Field(None, description="0=Sunday .. 6=Saturday")

    @field_validator("shift_start_time", "shift_end_time")
    @classmethod
    def _validate_shift(cls, value: str | None) -> str | None:
        return _check_hhmm(value)

    @field_validator("working_days")
    @classmethod
    def _validate_days(cls, value: list[int] | None) -> list[int] | None:
        if value is not None and any(day < 0 or day > 6 for day in value):
            raise ValueError("working_days must be within 0..6")
        return value

    @model_validator(mode="after")
    def _validate_range(self) -> "WaiterAssignment":
        if self.start_table > self.end_table:
            raise ValueError("start_table must not exceed end_table")
        return self

    def covers(self, table_number: int) -> bool:
        return self.start_table <= table_number <= self.end_table


class WaiterCall(DocumentModel):
    user_id: str
    table_number: str
    status: WaiterCallStatus = WaiterCallStatus.PENDING
    timestamp: str
    assignment_id: str | None = None
    waiter_name: str | None = None
    acknowledged_at: str | None = None
