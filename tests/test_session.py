from __future__ import annotations

import re

from app.core.session_store import SessionStore
from app.services.session_service import (
    create_session,
    generate_deep_link,
    generate_fallback_url,
    generate_session_id,
    parse_start_parameter,
    parse_url_params,
    telegram_auth_hash,
    validate_telegram_auth,
)

BOT_TOKEN = "123456:TEST_TOKEN"
NOW = 1_700_000_000


def _signed_auth(**overrides) -> dict:
    auth = {
        "id": 42,
        "first_name": "Ana",
        "username": "ana",
        "auth_date": NOW - 60,
    }
    auth.update(overrides)
    auth["hash"] = telegram_auth_hash(auth, BOT_TOKEN)
    return auth


def test_start_parameter() -> None:
    params = parse_start_parameter("cafe_5")

    assert params.cafe_id == "cafe"
    assert params.table_id == "5"


def test_start_parameter_rejects_malformed() -> None:
    for value in (None, "", "cafe", "a_b_c", "_5", "cafe_"):
        assert parse_start_parameter(value) is None


def test_url_params() -> None:
    params = parse_url_params("https://menu.example.com/menu?cafe=abc&table=12&utm=qr")

    assert (params.cafe_id, params.table_id) == ("abc", "12")
    assert parse_url_params("https://menu.example.com/menu?cafe=abc") is None
    assert parse_url_params(None) is None


def test_links() -> None:
    assert generate_deep_link("abc", "12", "cafe_bot") == "https://t.me/cafe_bot?start=abc_12"
    assert (
        generate_fallback_url("abc", "12", "https://menu.example.com/menu")
        == "https://menu.example.com/menu?cafe=abc&table=12"
    )


def test_fallback_url_round_trips_through_parser() -> None:
    url = generate_fallback_url("my cafe", "7", "https://menu.example.com/menu")

    params = parse_url_params(url)

    assert (params.cafe_id, params.table_id) == ("my cafe", "7")


def test_valid_auth() -> None:
    assert validate_telegram_auth(_signed_auth(), BOT_TOKEN, now=NOW)


def test_tampered_auth_fails_hash_check() -> None:
    auth = _signed_auth()
    auth["first_name"] = "Eve"

    assert not validate_telegram_auth(auth, BOT_TOKEN, now=NOW)
    # Without a token only fields and freshness are checked
    assert validate_telegram_auth(auth, now=NOW)


def test_stale_auth_fails() -> None:
    auth = _signed_auth(auth_date=NOW - 86401)

    assert not validate_telegram_auth(auth, BOT_TOKEN, now=NOW)
    assert validate_telegram_auth(auth, BOT_TOKEN, now=NOW, max_age=90000)


def test_auth_missing_fields() -> None:
    auth = _signed_auth()
    del auth["first_name"]

    assert not validate_telegram_auth(auth, BOT_TOKEN, now=NOW)
    assert not validate_telegram_auth(None, BOT_TOKEN, now=NOW)
    assert not validate_telegram_auth({**_signed_auth(), "auth_date": "soon"}, now=NOW)


def test_session_id_format() -> None:
    session_id = generate_session_id(now_ms=1700000000123)

    assert re.fullmatch(r"session_1700000000123_[a-z0-9]{9}", session_id)
    assert generate_session_id(1) != generate_session_id(1)


def test_guest_session() -> None:
    session = create_session("abc", "3")

    assert session.is_guest
    assert session.telegram_user is None
    assert session.session_id.startswith("session_")


def test_session_store_feedback_flag() -> None:
    store = SessionStore(ttl=60)
    session = create_session("abc", "3")
    store.store(session)

    assert store.get(session.session_id) == session
    assert store.mark_feedback_submitted(session.session_id) is True
    assert store.mark_feedback_submitted(session.session_id) is False
    assert store.has_feedback_been_submitted(session.session_id)

    store.clear(session.session_id)
    assert store.get(session.session_id) is None
    assert not store.has_feedback_been_submitted(session.session_id)
