"""Customer table sessions and Telegram identities."""
from __future__ import annotations

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    """Telegram Login Widget payload."""

    id: int
    first_name: str
    last_name: str | None = None
    username: str | None = None
    photo_url: str | None = None
    auth_date: int
    hash: str


class DeepLinkParams(BaseModel):
    cafe_id: str = Field(..., min_length=1)
    table_id: str = Field(..., min_length=1)


class CafeTableSession(BaseModel):
    """A customer's visit to one table; guests have no Telegram user."""

    cafe_id: str
    table_id: str
    session_id: str
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")
    telegram_user: TelegramUser | None = None
    is_guest: bool = True
