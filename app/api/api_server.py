"""
FastAPI server for the restaurant API.

Runs alongside the Telegram bot: delivery platform webhooks, the Telegram
webhook receiver, the customer web app and the restaurant dashboard.
"""
from __future__ import annotations

import os
import urllib.parse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.admin import router as admin_router
from app.api.customer import router as customer_router
from app.api.delivery import router as delivery_router
from app.api.deps import set_services
from app.api.errors import register_exception_handlers
from app.api.rate_limit import limiter
from app.api.telegram import router as telegram_router
from app.core.bootstrap import Services
from logging_config import logger


def _origin_from_url(value: str | None) -> str | None:
    if not value:
        return None
    try:
        parsed = urllib.parse.urlsplit(value.strip())
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def _allowed_origins(is_dev: bool) -> list[str]:
    allowed_origins = [
        # Telegram WebApp
        "https://web.telegram.org",
        "https://telegram.org",
    ]

    for env_name in ("WEBAPP_URL", "DASHBOARD_URL", "FALLBACK_MENU_URL"):
        origin = _origin_from_url(os.getenv(env_name))
        if origin and origin not in allowed_origins:
            allowed_origins.append(origin)

    extra_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if extra_origins:
        for raw in extra_origins.split(","):
            origin = _origin_from_url(raw)
            if origin and origin not in allowed_origins:
                allowed_origins.append(origin)

    # Only allow localhost in development
    if is_dev:
        allowed_origins.extend(
            [
                "http://localhost:3000",
                "http://localhost:5173",
                "http://localhost:8080",
                "http://127.0.0.1:8080",
            ]
        )
    return allowed_origins


def create_api_app(services: Services | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Wired services from the bot process; routes answer 503
            until they are set.
    """
    # Set immediately so ASGI adapters that skip lifespan still see services
    if services is not None:
        set_services(services)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Restaurant API starting...")
        yield
        logger.info("👋 Restaurant API shutting down...")

    app = FastAPI(
        title="CafeBot API",
        description="Restaurant ordering, staff notifications and delivery integrations",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    is_dev = services.settings.is_dev if services is not None else False
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(is_dev),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "X-Requested-With",
            "X-Delivery-Company",
            "X-Delivery-Event-Id",
            "X-Telegram-Bot-Api-Secret-Token",
        ],
        expose_headers=["Content-Length", "Content-Type"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.include_router(delivery_router)
    app.include_router(telegram_router)
    app.include_router(customer_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        return {"service": "CafeBot API", "version": "1.0.0", "docs": "/api/docs"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


async def run_api_server(services: Services, host: str = "0.0.0.0", port: int = 8000):
    """
    Run FastAPI server as async task.

    Started alongside the bot in both polling and webhook mode.
    """
    app = create_api_app(services)

    config = uvicorn.Config(app, host=host, port=port, log_level="info", access_log=True)
    server = uvicorn.Server(config)

    logger.info(f"🌐 Starting CafeBot API on http://{host}:{port}")
    await server.serve()
