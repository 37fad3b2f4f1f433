"""
Database schema initialization.
"""
from __future__ import annotations

from logging_config import logger

# Lookups the services run on every webhook / waiter call
_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_documents_collection_seq ON documents (collection, seq)",
    "CREATE INDEX IF NOT EXISTS idx_documents_data ON documents USING GIN (data jsonb_path_ops)",
    """
    CREATE INDEX IF NOT EXISTS idx_orders_delivery_ref
    ON documents ((data #>> '{delivery_info,order_id}'), (data #>> '{delivery_info,company}'))
    WHERE collection = 'orders'
    """,
)


class SchemaMixin:
    """Mixin for database schema initialization."""

    def init_db(self):
        """Create the document and unique-key tables if missing."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data JSONB NOT NULL DEFAULT '{}'::jsonb,
                    version INTEGER NOT NULL DEFAULT 1,
                    seq BIGSERIAL,
                    created_at TIMESTAMPTZ DEFAULT NOW(),
                    updated_at TIMESTAMPTZ DEFAULT NOW(),
                    PRIMARY KEY (collection, id)
                )
                """
            )

            # Idempotency keys for webhook deliveries
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS unique_keys (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    created_at TIMESTAMPTZ DEFAULT NOW(),
                    PRIMARY KEY (namespace, key)
                )
                """
            )

            for statement in _INDEXES:
                cursor.execute(statement)

        logger.info("✅ Database schema ready")
