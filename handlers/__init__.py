"""
Handlers package - bot handlers using aiogram Router

commands.py   - /start (table deep links), /status, /help
staff.py      - inline buttons on staff notifications
filters.py    - StaffCallback filter shared by the staff router
"""
from __future__ import annotations

from typing import Any

from aiogram import Router

from . import commands, staff


def setup_dependencies(services: Any) -> None:
    commands.setup_dependencies(services)
    staff.setup_dependencies(services)


def get_routers() -> list[Router]:
    return [commands.router, staff.router]


__all__ = ["get_routers", "setup_dependencies"]
