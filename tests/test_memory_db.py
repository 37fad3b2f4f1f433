from __future__ import annotations

import pytest

from app.core.exceptions import ConcurrentModificationException, DatabaseException
from app.core.memory_db import MemoryDatabase


@pytest.fixture()
def db() -> MemoryDatabase:
    return MemoryDatabase()


def test_documents_carry_id_and_version(db) -> None:
    doc_id = db.add_document("things", {"name": "a", "id": "ignored", "version": 99})

    document = db.get_document("things", doc_id)

    assert document == {"name": "a", "id": doc_id, "version": 1}


def test_explicit_ids_must_be_unique(db) -> None:
    db.add_document("things", {"name": "a"}, doc_id="x")

    with pytest.raises(DatabaseException):
        db.add_document("things", {"name": "b"}, doc_id="x")


def test_conditional_update(db) -> None:
    doc_id = db.add_document("things", {"count": 1})

    updated = db.update_document("things", doc_id, {"count": 2}, expected_version=1)
    assert updated["version"] == 2

    with pytest.raises(ConcurrentModificationException) as exc_info:
        db.update_document("things", doc_id, {"count": 3}, expected_version=1)
    assert (exc_info.value.expected, exc_info.value.actual) == (1, 2)
    assert db.get_document("things", doc_id)["count"] == 2


def test_dotted_updates_and_filters(db) -> None:
    doc_id = db.add_document("orders", {"delivery_info": {"company": "uber_eats", "order_id": "1"}})
    db.add_document("orders", {"delivery_info": {"company": "doordash", "order_id": "1"}})

    db.update_document("orders", doc_id, {"delivery_info.driver_name": "Sam"})

    found = db.find_documents(
        "orders", {"delivery_info.order_id": "1", "delivery_info.company": "uber_eats"}
    )
    assert [d["id"] for d in found] == [doc_id]
    assert found[0]["delivery_info"] == {"company": "uber_eats", "order_id": "1", "driver_name": "Sam"}


def test_find_order_and_limit(db) -> None:
    for name, order in (("c", 3), ("a", 1), ("none", None), ("b", 2)):
        db.add_document("things", {"name": name, "order": order})

    names = [d["name"] for d in db.find_documents("things", order_by="order")]

    assert names == ["a", "b", "c", "none"]
    assert len(db.find_documents("things", limit=2)) == 2


def test_returned_documents_are_copies(db) -> None:
    doc_id = db.add_document("things", {"tags": ["x"]})

    db.get_document("things", doc_id)["tags"].append("y")

    assert db.get_document("things", doc_id)["tags"] == ["x"]


def test_claim_key(db) -> None:
    assert db.claim_key("ns", "k", "first") is None
    assert db.claim_key("ns", "k", "second") == "first"
    assert db.claim_key("other", "k", "third") is None


def test_missing_documents(db) -> None:
    assert db.get_document("things", "nope") is None
    assert db.update_document("things", "nope", {"a": 1}) is None
    assert db.delete_document("things", "nope") is False
