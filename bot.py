"""
CafeBot - Main Module

Telegram bot and HTTP API for restaurant table ordering: staff notifications
with inline actions, waiter calls, table bills and delivery platform orders.
Architecture: aiogram 3.x routers for the bot, FastAPI for the HTTP API.
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from types import FrameType

from app.api.api_server import run_api_server
from app.core.bootstrap import build_application
from app.core.config import load_settings
from app.core.sentry_integration import init_sentry
from handlers import get_routers, setup_dependencies
from logging_config import configure_logging, logger

# =============================================================================
# CONFIGURATION
# =============================================================================
# Load typed settings
settings = load_settings()
configure_logging()

USE_WEBHOOK: bool = settings.webhook.enabled
WEBHOOK_URL: str = settings.webhook.url
WEBHOOK_PATH: str = settings.webhook.path
SECRET_TOKEN: str = settings.webhook.secret_token

# Webhook updates arrive through the API server, so polling mode may disable it
ENABLE_API = os.getenv("ENABLE_API", "1").strip().lower() in {"1", "true", "yes"}

# =============================================================================
# APPLICATION BOOTSTRAP
# =============================================================================

bot, dp, db, services = build_application(settings)

# =============================================================================
# SENTRY INITIALIZATION
# =============================================================================


def _init_sentry() -> bool:
    """Initialize Sentry for error tracking."""
    logger.info("🔧 Initializing Sentry error tracking...")
    try:
        enabled = init_sentry(
            environment=settings.environment,
            sample_rate=1.0,
            traces_sample_rate=0.1,
        )
    except Exception as e:
        logger.warning(f"⚠️ Sentry initialization failed: {e}")
        return False
    if not enabled:
        logger.info("⚠️ Sentry not enabled (SENTRY_DSN not set)")
    return enabled


sentry_enabled = _init_sentry()

# =============================================================================
# HANDLER REGISTRATION
# =============================================================================


def _register_handlers() -> None:
    """Register all bot routers."""
    setup_dependencies(services)
    for router in get_routers():
        dp.include_router(router)
    logger.info("✅ Handlers registered")


# =============================================================================
# LIFECYCLE HOOKS
# =============================================================================


async def on_startup() -> None:
    """Actions on bot startup."""
    if USE_WEBHOOK:
        webhook_url = f"{WEBHOOK_URL}{WEBHOOK_PATH}"
        try:
            await bot.set_webhook(
                url=webhook_url,
                drop_pending_updates=True,
                secret_token=SECRET_TOKEN or None,
                allowed_updates=dp.resolve_used_update_types(),
            )
            logger.info(f"✅ Webhook set: {webhook_url}")
        except Exception as e:
            logger.error(f"⚠️ Failed to set webhook: {e}")
            logger.warning(
                "Bot will continue running, but may not receive updates until webhook is fixed"
            )
    else:
        try:
            await bot.delete_webhook(drop_pending_updates=True)
            logger.info("✅ Polling mode activated")
        except Exception as e:
            logger.warning(f"Failed to delete webhook: {e}")


async def on_shutdown() -> None:
    """Actions on bot shutdown."""
    await bot.session.close()

    try:
        if db and hasattr(db, "close"):
            db.close()
            logger.info("Database closed")
    except Exception as e:
        logger.warning(f"Failed to close database: {e}")

    logger.info("👋 Bot stopped")


# =============================================================================
# SIGNAL HANDLING
# =============================================================================

shutdown_event = asyncio.Event()


def signal_handler(sig: int, frame: FrameType | None) -> None:
    """Handle termination signals."""
    logger.info(f"Received signal {sig}, initiating shutdown...")
    shutdown_event.set()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def main() -> None:
    """Main bot entry point."""
    logger.info("=" * 50)
    logger.info("🚀 Starting CafeBot")
    logger.info("=" * 50)
    logger.info("📊 Database: PostgreSQL" if settings.database_url else "📊 Database: in-memory")
    logger.info(f"🔄 Mode: {'Webhook' if USE_WEBHOOK else 'Polling'}")
    logger.info(f"🚚 Delivery clients: {'simulated' if settings.delivery.simulate else 'live'}")
    logger.info("=" * 50)

    api_task = None
    if ENABLE_API or USE_WEBHOOK:
        api_task = asyncio.create_task(
            run_api_server(services, host=settings.api_host, port=settings.api_port)
        )

    await on_startup()

    polling_task = None
    if not USE_WEBHOOK:
        polling_task = asyncio.create_task(
            dp.start_polling(
                bot,
                allowed_updates=dp.resolve_used_update_types(),
                drop_pending_updates=True,
                handle_signals=False,
            )
        )

    try:
        await shutdown_event.wait()
        logger.info("Shutting down...")
    finally:
        await _cancel(polling_task)
        await _cancel(api_task)
        await on_shutdown()


# =============================================================================
# STARTUP
# =============================================================================

if __name__ == "__main__":
    _register_handlers()

    # Setup signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Run the bot
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Bot crashed: {e}")
        sys.exit(1)
