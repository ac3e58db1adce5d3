"""Read-only query functions for the web API."""

from __future__ import annotations

import json

from newshub.web.deps import get_readonly_connection

_ARTICLE_COLUMNS = (
    "id, title, content, author, published_at, source, category, "
    "created_at, updated_at"
)
_ORDER = "ORDER BY published_at DESC, id DESC"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _paginate(conn, where_clause: str, params: list, page: int, per_page: int):
    offset = (page - 1) * per_page
    total = conn.execute(
        f"SELECT COUNT(*) FROM articles {where_clause}", params
    ).fetchone()[0]
    rows = conn.execute(
        f"SELECT {_ARTICLE_COLUMNS} FROM articles {where_clause} {_ORDER} "
        f"LIMIT ? OFFSET ?",
        [*params, per_page, offset],
    ).fetchall()
    return [dict(r) for r in rows], total


# ---------------------------------------------------------------------------
# list_articles
# ---------------------------------------------------------------------------
def list_articles(
    database_path: str,
    *,
    filters: dict | None = None,
    page: int = 1,
    per_page: int = 10,
) -> tuple[list[dict], int]:
    """Return a paginated, filtered list of articles, newest first.

    Filters: ``search`` (substring of title, content or author, ASCII
    case-insensitive), ``author`` (exact), ``published_at`` (a
    ``YYYY-MM-DD`` UTC calendar date).
    """
    filters = filters or {}
    conditions: list[str] = []
    params: list[object] = []

    if "search" in filters:
        conditions.append(
            "(title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\' "
            "OR author LIKE ? ESCAPE '\\')"
        )
        pattern = f"%{_escape_like(filters['search'])}%"
        params.extend([pattern, pattern, pattern])

    if "author" in filters:
        conditions.append("author = ?")
        params.append(filters["author"])

    if "published_at" in filters:
        conditions.append("date(published_at) = ?")
        params.append(filters["published_at"])

    where_clause = ""
    if conditions:
        where_clause = "WHERE " + " AND ".join(conditions)

    with get_readonly_connection(database_path) as conn:
        return _paginate(conn, where_clause, params, page, per_page)


# ---------------------------------------------------------------------------
# personalized_feed
# ---------------------------------------------------------------------------
def personalized_feed(
    database_path: str, user_id: int, page: int = 1, per_page: int = 10
) -> tuple[list[dict], int]:
    """Return articles matching any of the user's preferred categories, sources or authors.

    Values are OR-ed across all of the user's preference rows. A user without
    any preference values gets the unfiltered list.
    """
    with get_readonly_connection(database_path) as conn:
        pref_rows = conn.execute(
            "SELECT category, source, author FROM preferences WHERE user_id = ?",
            (user_id,),
        ).fetchall()

        conditions: list[str] = []
        params: list[object] = []
        for column in ("category", "source", "author"):
            values = sorted({r[column] for r in pref_rows if r[column]})
            if values:
                placeholders = ", ".join("?" for _ in values)
                conditions.append(f"{column} IN ({placeholders})")
                params.extend(values)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " OR ".join(conditions)

        return _paginate(conn, where_clause, params, page, per_page)


# ---------------------------------------------------------------------------
# list_ingestion_runs
# ---------------------------------------------------------------------------
def list_ingestion_runs(
    database_path: str, page: int = 1, per_page: int = 50
) -> tuple[list[dict], int]:
    """Return a paginated list of ingestion runs, newest first."""
    offset = (page - 1) * per_page
    with get_readonly_connection(database_path) as conn:
        total = conn.execute("SELECT COUNT(*) FROM ingestion_runs").fetchone()[0]
        rows = conn.execute(
            "SELECT id, started_at, finished_at, status, result, error "
            "FROM ingestion_runs ORDER BY started_at DESC LIMIT ? OFFSET ?",
            (per_page, offset),
        ).fetchall()

    runs = []
    for r in rows:
        runs.append({
            "id": r["id"],
            "started_at": r["started_at"],
            "finished_at": r["finished_at"],
            "status": r["status"],
            "result": json.loads(r["result"]),
            "error": r["error"],
        })
    return runs, total
