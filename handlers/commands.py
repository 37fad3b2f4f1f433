"""Bot commands: /start (with table deep links), /status, /help."""
from __future__ import annotations

import html
from datetime import datetime
from typing import Any

from aiogram import Router, types
from aiogram.filters import Command, CommandObject, CommandStart

from app.services.session_service import generate_fallback_url, parse_start_parameter
from logging_config import logger

router = Router(name="commands")

# Module dependencies
services: Any | None = None


def setup_dependencies(wired_services: Any) -> None:
    """Setup module dependencies."""
    global services
    services = wired_services


def build_welcome_message() -> str:
    return (
        "🤖 <b>Restaurant Bot</b>\n\n"
        "Welcome! This bot will notify you about:\n"
        "• 🍽️ New orders\n"
        "• 💳 Payment confirmations\n"
        "• 📞 Waiter calls\n"
        "• 📊 Daily reports\n\n"
        "Use /help for more commands."
    )


def build_table_welcome(cafe_id: str, table_id: str, menu_url: str | None) -> str:
    text = (
        "🍽️ <b>Welcome!</b>\n\n"
        f"🏪 <b>Cafe:</b> {html.escape(cafe_id)}\n"
        f"🪑 <b>Table:</b> {html.escape(table_id)}\n\n"
        "Browse the menu, order and call a waiter right from your phone."
    )
    if menu_url:
        text += f"\n\n📋 <a href=\"{html.escape(menu_url)}\">Open menu</a>"
    return text


def build_status_message(now: datetime | None = None) -> str:
    moment = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return (
        "📊 <b>Bot Status</b>\n\n"
        "✅ <b>Online and operational</b>\n"
        f"🕐 <b>Last update:</b> {moment}\n"
        "🔗 <b>Webhook:</b> Active\n"
        "📱 <b>Notifications:</b> Enabled\n\n"
        "All systems running normally!"
    )


HELP_MESSAGE = (
    "🆘 <b>Help & Commands</b>\n\n"
    "<b>Available Commands:</b>\n"
    "/start - Welcome message\n"
    "/status - Check bot status\n"
    "/help - Show this help\n\n"
    "<b>Notifications:</b>\n"
    "• Order approvals with ✅/❌ buttons\n"
    "• Payment confirmations with approve/reject\n"
    "• Waiter calls with acknowledgment\n"
    "• Kitchen orders with ready/delay buttons\n\n"
    "<b>Support:</b>\n"
    "Contact your restaurant admin for assistance."
)


@router.message(CommandStart())
async def cmd_start(message: types.Message, command: CommandObject) -> None:
    # Deep link from a table QR code: /start <cafe>_<table>
    params = parse_start_parameter(command.args)
    if params is None:
        await message.answer(build_welcome_message())
        return

    user_id = message.from_user.id if message.from_user else None
    logger.info(f"🔗 /start from {user_id} at {params.cafe_id}/table {params.table_id}")
    menu_url = None
    if services is not None:
        menu_url = generate_fallback_url(
            params.cafe_id, params.table_id, services.settings.fallback_menu_url
        )
    await message.answer(build_table_welcome(params.cafe_id, params.table_id, menu_url))


@router.message(Command("status"))
async def cmd_status(message: types.Message) -> None:
    await message.answer(build_status_message())


@router.message(Command("help"))
async def cmd_help(message: types.Message) -> None:
    await message.answer(HELP_MESSAGE)
