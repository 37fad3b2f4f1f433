"""Awaitable facade over the blocking document store."""
from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

import anyio

T = TypeVar("T")


class AsyncDBProxy:
    """Run every store method in anyio's worker threads.

    Services and API routes only ever hold the proxy, so an event loop never
    blocks on a psycopg round trip. Plain attributes are returned as-is.
    """

    def __init__(self, db: Any, limiter: anyio.CapacityLimiter | None = None):
        self._db = db
        self._limiter = limiter
        self._wrapped: dict[str, Callable[..., Any]] = {}

    @classmethod
    def wrap(cls, db: Any) -> "AsyncDBProxy":
        """Return db unchanged if it is already proxied."""
        if db is None or isinstance(db, cls):
            return db
        return cls(db)

    @property
    def sync(self) -> Any:
        """The underlying blocking store (tests and startup code only)."""
        return self._db

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run an arbitrary blocking callable against the store."""
        call = functools.partial(func, *args, **kwargs)
        return await anyio.to_thread.run_sync(call, limiter=self._limiter)

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        attr = getattr(self._db, name)
        if not callable(attr):
            return attr

        cached = self._wrapped.get(name)
        if cached is not None:
            return cached

        # Looked up per call so a replaced store method is picked up
        @functools.wraps(attr)
        async def _call(*args: Any, **kwargs: Any):
            return await self.run(getattr(self._db, name), *args, **kwargs)

        self._wrapped[name] = _call
        return _call
