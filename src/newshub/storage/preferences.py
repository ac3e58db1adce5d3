"""Per-user content preferences.

Every function is scoped by ``user_id``: a preference owned by someone else
behaves exactly like one that does not exist.
"""

from __future__ import annotations

from datetime import datetime, timezone

from newshub.storage.connection import get_connection

_COLUMNS = "id, user_id, category, source, author, created_at, updated_at"
_FIELDS = ("category", "source", "author")


def list_preferences(database_path: str, user_id: int) -> list[dict]:
    with get_connection(database_path) as conn:
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM preferences WHERE user_id = ? ORDER BY id",
            (user_id,),
        ).fetchall()
    return [dict(r) for r in rows]


def create_preference(database_path: str, user_id: int, fields: dict) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        cur = conn.execute(
            "INSERT INTO preferences "
            "(user_id, category, source, author, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                user_id,
                fields.get("category"),
                fields.get("source"),
                fields.get("author"),
                now,
                now,
            ),
        )
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM preferences WHERE id = ?", (cur.lastrowid,)
        ).fetchone()
    return dict(row)


def update_preference(
    database_path: str, user_id: int, preference_id: int, fields: dict
) -> dict | None:
    """Apply the given fields to one of the user's preferences. None if not found."""
    changes = {k: fields[k] for k in _FIELDS if k in fields}
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    assignments = ", ".join(f"{key} = ?" for key in changes)
    with get_connection(database_path) as conn:
        cur = conn.execute(
            f"UPDATE preferences SET {assignments} WHERE id = ? AND user_id = ?",
            [*changes.values(), preference_id, user_id],
        )
        if cur.rowcount == 0:
            return None
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM preferences WHERE id = ?", (preference_id,)
        ).fetchone()
    return dict(row)


def delete_preference(database_path: str, user_id: int, preference_id: int) -> bool:
    with get_connection(database_path) as conn:
        cur = conn.execute(
            "DELETE FROM preferences WHERE id = ? AND user_id = ?",
            (preference_id, user_id),
        )
        deleted = cur.rowcount > 0
    return deleted
