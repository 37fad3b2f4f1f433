"""In-process table session cache.

Sessions expire on their own after the configured TTL. The feedback flag is
keyed by session id and lives as long as the session does.
"""
from __future__ import annotations

import threading

from cachetools import TTLCache

from app.domain.entities import CafeTableSession

DEFAULT_SESSION_TTL = 4 * 60 * 60


class SessionStore:
    """TTL-bound storage for CafeTableSession objects."""

    def __init__(self, ttl: int = DEFAULT_SESSION_TTL, maxsize: int = 10000):
        self._sessions: TTLCache[str, CafeTableSession] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._feedback: TTLCache[str, bool] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.Lock()

    def store(self, session: CafeTableSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> CafeTableSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
            self._feedback.pop(session_id, None)

    def has_feedback_been_submitted(self, session_id: str) -> bool:
        with self._lock:
            return bool(self._feedback.get(session_id))

    def mark_feedback_submitted(self, session_id: str) -> bool:
        """Set the flag; False if it was already set."""
        with self._lock:
            if self._feedback.get(session_id):
                return False
            self._feedback[session_id] = True
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
