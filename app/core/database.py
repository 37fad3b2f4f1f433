"""Database factory - PostgreSQL in deployments, memory store for local runs."""
from __future__ import annotations

from logging_config import logger


def create_database(database_url: str | None, allow_memory: bool = False):
    """Return the document store for the configured environment."""
    if not database_url:
        if not allow_memory:
            raise ValueError(
                "❌ DATABASE_URL is required!\n"
                "For local development set ENVIRONMENT=development to use the in-memory store,\n"
                "or start PostgreSQL with Docker:\n"
                "  docker run -d -p 5432:5432 -e POSTGRES_PASSWORD=password postgres"
            )
        from app.core.memory_db import MemoryDatabase

        logger.warning("⚠️ DATABASE_URL not set - using in-memory store (data is lost on restart)")
        return MemoryDatabase()

    from database_pg_module import Database

    logger.info("🐘 Using PostgreSQL database")
    return Database(database_url=database_url)
