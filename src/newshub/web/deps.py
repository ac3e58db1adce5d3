"""Request dependencies — read-only connections, bearer auth, rate limiting."""

from __future__ import annotations

import sqlite3
import threading
import time
from contextlib import contextmanager
from typing import Callable, Generator

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newshub.storage.users import resolve_token

security = HTTPBearer(auto_error=False)


@contextmanager
def get_readonly_connection(database_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Open a read-only SQLite connection with WAL mode.

    Uses URI mode to enforce read-only access. Sets query_only pragma
    as an additional safeguard. Yields the connection and closes on exit.
    """
    conn = sqlite3.connect(f"file:{database_path}?mode=ro", uri=True)
    conn.execute("PRAGMA query_only=ON")
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


class RateLimiter:
    """Fixed one-minute window request counter per key."""

    def __init__(self, limit: int, window_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._windows: dict[object, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: object) -> bool:
        """Count a request. Returns False when the key is over its limit."""
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self._window:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
        return count <= self._limit


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Resolve the bearer token to a user, or reject with 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = resolve_token(request.app.state.database_path, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def throttled_user(request: Request, user: dict = Depends(get_current_user)) -> dict:
    """Authenticated user, subject to the per-user request rate limit."""
    limiter: RateLimiter = request.app.state.rate_limiter
    if not limiter.hit(user["id"]):
        raise HTTPException(
            status_code=429,
            detail="Too Many Requests",
            headers={"Retry-After": "60"},
        )
    return user
