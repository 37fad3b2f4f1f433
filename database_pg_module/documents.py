"""
Document primitives on top of a JSONB table.

Every record lives in ``documents(collection, id, data, version, seq)``.
Callers see plain dicts with two extra keys: ``id`` and ``version``.
Dotted keys (``delivery_info.order_id``) address nested fields both in
filters and in partial updates.
"""
from __future__ import annotations

import copy
import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.core.exceptions import ConcurrentModificationException
from logging_config import logger


RESERVED_KEYS = ("id", "version")


def strip_reserved(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in RESERVED_KEYS}


def set_path(data: dict[str, Any], path: str, value: Any) -> None:
    """Assign value at a dotted path, creating intermediate dicts."""
    parts = path.split(".")
    target = data
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def get_path(data: dict[str, Any], path: str, default: Any = None) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def apply_changes(data: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of data with dotted-path changes applied."""
    updated = copy.deepcopy(data)
    for path, value in changes.items():
        set_path(updated, path, copy.deepcopy(value))
    return updated


def nest_filters(filters: dict[str, Any]) -> dict[str, Any]:
    """Turn {"a.b": 1} into {"a": {"b": 1}} for JSONB containment queries."""
    nested: dict[str, Any] = {}
    for path, value in filters.items():
        set_path(nested, path, value)
    return nested


def matches(data: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    missing = object()
    return all(get_path(data, path, missing) == value for path, value in filters.items())


def sort_key(order_by: str | None):
    """Key for ascending sort on a field; documents lacking it go last."""

    def _key(doc: dict[str, Any]):
        value = get_path(doc, order_by) if order_by else None
        return (value is None, value if value is not None else 0)

    return _key


def to_document(doc_id: str, version: int, data: dict[str, Any]) -> dict[str, Any]:
    document = dict(data)
    document["id"] = doc_id
    document["version"] = version
    return document


class DocumentMixin:
    """PostgreSQL implementation of the document primitives."""

    def add_document(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Insert a document and return its id."""
        doc_id = doc_id or uuid.uuid4().hex
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO documents (collection, id, data, version)
                VALUES (%s, %s, %s, 1)
                """,
                (collection, doc_id, Jsonb(strip_reserved(data))),
            )
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "SELECT id, data, version FROM documents WHERE collection = %s AND id = %s",
                (collection, doc_id),
            )
            row = cursor.fetchone()
        if not row:
            return None
        return to_document(row["id"], row["version"], row["data"])

    def update_document(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any] | None:
        """Apply dotted-path changes; None if the document does not exist.

        With expected_version the write only happens if nobody else bumped the
        version since the caller read the document.
        """
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                """
                SELECT data, version FROM documents
                WHERE collection = %s AND id = %s
                FOR UPDATE
                """,
                (collection, doc_id),
            )
            row = cursor.fetchone()
            if not row:
                return None
            if expected_version is not None and row["version"] != expected_version:
                raise ConcurrentModificationException(
                    collection, doc_id, expected_version, row["version"]
                )
            data = apply_changes(row["data"], strip_reserved(changes))
            version = row["version"] + 1
            cursor.execute(
                """
                UPDATE documents
                SET data = %s, version = %s, updated_at = NOW()
                WHERE collection = %s AND id = %s
                """,
                (Jsonb(data), version, collection, doc_id),
            )
        return to_document(doc_id, version, data)

    def delete_document(self, collection: str, doc_id: str) -> bool:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM documents WHERE collection = %s AND id = %s",
                (collection, doc_id),
            )
            return cursor.rowcount > 0

    def find_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Equality filters on dotted paths; insertion order unless order_by is given."""
        query = "SELECT id, data, version FROM documents WHERE collection = %s"
        params: list[Any] = [collection]
        if filters:
            query += " AND data @> %s"
            params.append(Jsonb(nest_filters(filters)))
        if order_by:
            query += " ORDER BY data #> %s NULLS LAST, seq"
            params.append(order_by.split("."))
        else:
            query += " ORDER BY seq"
        if limit:
            query += " LIMIT %s"
            params.append(limit)

        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [to_document(row["id"], row["version"], row["data"]) for row in rows]

    def claim_key(self, namespace: str, key: str, value: str) -> str | None:
        """Reserve a unique key.

        Returns None when the key was free (and is now bound to value),
        otherwise the value stored by the first claimant.
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO unique_keys (namespace, key, value)
                VALUES (%s, %s, %s)
                ON CONFLICT (namespace, key) DO NOTHING
                RETURNING value
                """,
                (namespace, key, value),
            )
            if cursor.fetchone():
                return None
            cursor.execute(
                "SELECT value FROM unique_keys WHERE namespace = %s AND key = %s",
                (namespace, key),
            )
            row = cursor.fetchone()
        existing = row[0] if row else None
        logger.info(f"🔁 Key {namespace}:{key} already claimed by {existing}")
        return existing
