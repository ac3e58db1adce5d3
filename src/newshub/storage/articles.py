"""Article Store — keyed article persistence with insert-if-absent."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from newshub.ingestion.normalize import ArticleCandidate
from newshub.storage.connection import get_connection

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, title, content, author, published_at, source, category, "
    "created_at, updated_at"
)
_UPDATABLE = frozenset({"title", "content", "author", "published_at", "source", "category"})


class DuplicateArticleError(Exception):
    """An article with the same (title, published_at) already exists."""


@dataclass(frozen=True)
class Article:
    """A stored article."""

    id: int
    title: str
    content: str
    author: str
    published_at: str | None
    source: str | None
    category: str | None
    created_at: str
    updated_at: str

    def to_dict(self) -> dict:
        return asdict(self)


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(**{key: row[key] for key in row.keys()})


def _is_dedup_conflict(exc: sqlite3.IntegrityError) -> bool:
    return "articles.title" in str(exc) and "articles.published_at" in str(exc)


class ArticleStore:
    """SQLite-backed article collection.

    Uniqueness of ``(title, published_at)`` is enforced by a table constraint,
    so ``insert_if_absent`` is a single atomic conditional insert and is safe
    under overlapping ingestion cycles.
    """

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path

    def exists_by_title_and_published_at(self, title: str, published_at: str) -> bool:
        with get_connection(self._database_path) as conn:
            row = conn.execute(
                "SELECT 1 FROM articles WHERE title = ? AND published_at = ?",
                (title, published_at),
            ).fetchone()
        return row is not None

    def insert_if_absent(self, candidate: ArticleCandidate) -> Article | None:
        """Insert the candidate unless its dedup key is taken.

        Returns the stored Article, or None when a record with the same
        ``(title, published_at)`` already existed. Existing rows are never
        modified.
        """
        now = datetime.now(timezone.utc).isoformat()
        with get_connection(self._database_path) as conn:
            cur = conn.execute(
                "INSERT INTO articles "
                "(title, content, author, published_at, source, category, "
                "created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(title, published_at) DO NOTHING",
                (
                    candidate.title,
                    candidate.content,
                    candidate.author,
                    candidate.published_at,
                    candidate.source,
                    candidate.category,
                    now,
                    now,
                ),
            )
            if cur.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (cur.lastrowid,)
            ).fetchone()
        logger.debug("Inserted article %s (%s)", row["id"], candidate.title)
        return _row_to_article(row)

    def insert(self, candidate: ArticleCandidate) -> Article:
        """Insert unconditionally. Raises DuplicateArticleError on a key clash."""
        return self.create(asdict(candidate))

    def create(self, fields: dict) -> Article:
        """Create an article from API fields. Raises DuplicateArticleError on a key clash."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            with get_connection(self._database_path) as conn:
                cur = conn.execute(
                    "INSERT INTO articles "
                    "(title, content, author, published_at, source, category, "
                    "created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        fields["title"],
                        fields["content"],
                        fields["author"],
                        fields.get("published_at"),
                        fields.get("source"),
                        fields.get("category"),
                        now,
                        now,
                    ),
                )
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (cur.lastrowid,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            if _is_dedup_conflict(exc):
                raise DuplicateArticleError(fields["title"]) from exc
            raise
        return _row_to_article(row)

    def get(self, article_id: int) -> Article | None:
        with get_connection(self._database_path) as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
        return _row_to_article(row) if row is not None else None

    def update(self, article_id: int, fields: dict) -> Article | None:
        """Apply a partial update. Returns None if the article does not exist."""
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        assignments = ", ".join(f"{key} = ?" for key in changes)
        try:
            with get_connection(self._database_path) as conn:
                cur = conn.execute(
                    f"UPDATE articles SET {assignments} WHERE id = ?",
                    [*changes.values(), article_id],
                )
                if cur.rowcount == 0:
                    return None
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (article_id,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            if _is_dedup_conflict(exc):
                raise DuplicateArticleError(changes.get("title", article_id)) from exc
            raise
        return _row_to_article(row)

    def delete(self, article_id: int) -> bool:
        with get_connection(self._database_path) as conn:
            cur = conn.execute("DELETE FROM articles WHERE id = ?", (article_id,))
            deleted = cur.rowcount > 0
        return deleted

    def count(self) -> int:
        with get_connection(self._database_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]
