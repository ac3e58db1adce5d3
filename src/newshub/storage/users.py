"""API users and bearer tokens."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timezone

from newshub.storage.connection import get_connection

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_user(database_path: str, email: str, name: str) -> int:
    """Insert a user and return its id. Raises sqlite3.IntegrityError if the email exists."""
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        cur = conn.execute(
            "INSERT INTO users (email, name, created_at) VALUES (?, ?, ?)",
            (email.strip().lower(), name, now),
        )
        user_id = cur.lastrowid
    logger.info("Created user %s (%s)", user_id, email)
    return user_id


def get_user_by_email(database_path: str, email: str) -> dict | None:
    with get_connection(database_path) as conn:
        row = conn.execute(
            "SELECT id, email, name, created_at FROM users WHERE email = ?",
            (email.strip().lower(),),
        ).fetchone()
    return dict(row) if row is not None else None


def issue_token(database_path: str, user_id: int, name: str = "default") -> str:
    """Create a new API token for a user and return the raw token.

    Only the sha256 of the token is stored; the raw value cannot be
    recovered later.
    """
    token = secrets.token_urlsafe(32)
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO api_tokens (token_hash, user_id, name, created_at) "
            "VALUES (?, ?, ?, ?)",
            (hash_token(token), user_id, name, now),
        )
    logger.info("Issued token '%s' for user %s", name, user_id)
    return token


def resolve_token(database_path: str, token: str) -> dict | None:
    """Return the user owning a raw token, or None. Touches last_used_at."""
    token_hash = hash_token(token)
    with get_connection(database_path) as conn:
        row = conn.execute(
            "SELECT u.id, u.email, u.name FROM api_tokens t "
            "JOIN users u ON u.id = t.user_id WHERE t.token_hash = ?",
            (token_hash,),
        ).fetchone()
        if row is None:
            return None
        conn.execute(
            "UPDATE api_tokens SET last_used_at = ? WHERE token_hash = ?",
            (datetime.now(timezone.utc).isoformat(), token_hash),
        )
    return dict(row)
