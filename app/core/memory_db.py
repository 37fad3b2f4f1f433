"""In-process document store for local development and tests.

Implements the same primitives as the PostgreSQL DocumentMixin and reuses
the domain mixins unchanged, so services cannot tell the two apart.
"""
from __future__ import annotations

import copy
import itertools
import threading
import uuid
from contextlib import contextmanager
from typing import Any

from app.core.exceptions import ConcurrentModificationException, DatabaseException
from database_pg_module.documents import (
    apply_changes,
    matches,
    sort_key,
    strip_reserved,
    to_document,
)
from database_pg_module.mixins import (
    BillingMixin,
    DeliveryMixin,
    MenuMixin,
    OrderMixin,
    ReportMixin,
    StaffMixin,
    TenantMixin,
)


class _Record:
    __slots__ = ("seq", "version", "data")

    def __init__(self, seq: int, version: int, data: dict[str, Any]):
        self.seq = seq
        self.version = version
        self.data = data


class MemoryDocumentMixin:
    """Thread-safe dict-backed document primitives."""

    def __init__(self) -> None:
        self.db_name = "memory"
        self._collections: dict[str, dict[str, _Record]] = {}
        self._keys: dict[tuple[str, str], str] = {}
        self._seq = itertools.count(1)
        self._lock = threading.RLock()

    @contextmanager
    def get_connection(self):
        """No real connection; present for interface parity."""
        with self._lock:
            yield self

    def close(self) -> None:
        with self._lock:
            self._collections.clear()
            self._keys.clear()

    def add_document(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        with self._lock:
            records = self._collections.setdefault(collection, {})
            if doc_id in records:
                raise DatabaseException(f"{collection}/{doc_id} already exists")
            records[doc_id] = _Record(next(self._seq), 1, copy.deepcopy(strip_reserved(data)))
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._collections.get(collection, {}).get(doc_id)
            if record is None:
                return None
            return to_document(doc_id, record.version, copy.deepcopy(record.data))

    def update_document(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any] | None:
        with self._lock:
            record = self._collections.get(collection, {}).get(doc_id)
            if record is None:
                return None
            if expected_version is not None and record.version != expected_version:
                raise ConcurrentModificationException(
                    collection, doc_id, expected_version, record.version
                )
            record.data = apply_changes(record.data, strip_reserved(changes))
            record.version += 1
            return to_document(doc_id, record.version, copy.deepcopy(record.data))

    def delete_document(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def find_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            records = sorted(
                self._collections.get(collection, {}).items(), key=lambda item: item[1].seq
            )
            found = [
                to_document(doc_id, record.version, copy.deepcopy(record.data))
                for doc_id, record in records
                if matches(record.data, filters)
            ]
        if order_by:
            # sorted() is stable, so ties keep insertion order
            found.sort(key=sort_key(order_by))
        return found[:limit] if limit else found

    def claim_key(self, namespace: str, key: str, value: str) -> str | None:
        with self._lock:
            existing = self._keys.get((namespace, key))
            if existing is not None:
                return existing
            self._keys[(namespace, key)] = value
            return None


class MemoryDatabase(
    MemoryDocumentMixin,
    TenantMixin,
    StaffMixin,
    MenuMixin,
    OrderMixin,
    BillingMixin,
    DeliveryMixin,
    ReportMixin,
):
    """Drop-in replacement for database_pg_module.Database without PostgreSQL."""
