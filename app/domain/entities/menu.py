"""Menu items and time-windowed menu schedules."""
from __future__ import annotations

from datetime import time

from pydantic import BaseModel, Field, field_validator, model_validator

from app.domain.entities.base import DocumentModel


def parse_hhmm(value: str) -> time:
    hours, _, minutes = value.partition(":")
    return time(int(hours), int(minutes))


class MenuItem(DocumentModel):
    user_id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = "Other"
    available: bool = True
    schedule_ids: list[str] = Field(default_factory=list)
    preparation_time: int = Field(15, ge=0, description="Minutes")
    department: str | None = Field(None, description="Department id preparing this item")
    image_url: str | None = None


class MenuSchedule(DocumentModel):
    """Named daily window (e.g. Breakfast 07:00-11:00) on selected weekdays."""

    user_id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    start_time: str
    end_time: str
    days_of_week: list[int] = Field(default_factory=lambda: list(range(7)), description="0=Sunday")
    is_active: bool = True
    order: int = 0

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_time(cls, value: str) -> str:
        try:
            parsed = parse_hhmm(value)
        except ValueError as e:
            raise ValueError("time must be HH:MM") from e
        return parsed.strftime("%H:%M")

    @field_validator("days_of_week")
    @classmethod
    def _validate_days(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week must be within 0..6")
        return sorted(set(value))

    @model_validator(mode="after")
    def _validate_window(self) -> "MenuSchedule":
        # Windows are compared on the same clock day; midnight spans are not supported
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self

    @property
    def start(self) -> time:
        return parse_hhmm(self.start_time)

    @property
    def end(self) -> time:
        return parse_hhmm(self.end_time)


class ScheduledMenuItem(BaseModel):
    """A menu item annotated with its availability at a given moment."""

    item: MenuItem
    is_currently_available: bool
    current_schedule: MenuSchedule | None = None
    next_available_schedule: MenuSchedule | None = None
    active_schedules: list[MenuSchedule] = Field(default_factory=list)
