"""Normalization — map provider-specific records onto the canonical article shape."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

UNKNOWN_AUTHOR = "Unknown"

RawProviderRecord = dict

_FRACTION_RE = re.compile(r"\.(\d+)")


class NormalizationError(ValueError):
    """Raised when a raw record lacks a field the article cannot exist without."""


@dataclass(frozen=True)
class FieldMap:
    """Where each canonical field lives in one provider's records.

    Paths are dotted (``fields.bodyText``). Chains are tried in order and the
    first present, non-null value wins; the trailing default applies otherwise.
    """

    title: str
    published_at: str
    content: tuple[str, ...]
    author: tuple[str, ...]
    source: tuple[str, ...] = ()
    source_default: str | None = None
    category: tuple[str, ...] = ()


FIELD_MAPS: dict[str, FieldMap] = {
    "headlines": FieldMap(
        title="title",
        published_at="publishedAt",
        content=("content", "description"),
        author=("author",),
        source=("source.name",),
        source_default="NewsAPI",
    ),
    "editorial": FieldMap(
        title="webTitle",
        published_at="webPublicationDate",
        content=("fields.bodyText",),
        author=("fields.byline",),
        source_default="The Guardian",
        category=("sectionName",),
    ),
    "digest": FieldMap(
        title="title",
        published_at="published_date",
        content=("abstract",),
        author=("byline",),
        source_default="The New York Times",
        category=("section",),
    ),
}


@dataclass(frozen=True)
class ArticleCandidate:
    """A normalized article ready for insert-if-absent."""

    title: str
    content: str
    author: str
    published_at: str
    source: str | None = None
    category: str | None = None


def _lookup(record: RawProviderRecord, path: str):
    """Resolve a dotted path in nested dicts. Returns None when any hop is missing."""
    value = record
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


def _first_present(record: RawProviderRecord, chain: tuple[str, ...], default):
    for path in chain:
        value = _lookup(record, path)
        if value is not None:
            return value
    return default


def normalize_timestamp(value: str) -> str:
    """Parse an ISO 8601 timestamp and return it as a UTC isoformat string.

    Accepts a trailing ``Z`` and any number of fractional-second digits
    (kept to microsecond precision); naive timestamps are assumed to be UTC.
    Raises ValueError if the value cannot be parsed or falls outside the
    representable range once converted to UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc).isoformat()
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {value!r}") from exc


def normalize(raw: RawProviderRecord, source_kind: str) -> ArticleCandidate:
    """Convert a raw provider record into an ArticleCandidate.

    Pure: no network or storage access. Missing optional fields fall back to
    the defaults of the source's field map; a missing title or an absent or
    unparseable publish timestamp raises NormalizationError.
    """
    field_map = FIELD_MAPS.get(source_kind)
    if field_map is None:
        raise ValueError(f"Unknown source kind '{source_kind}'")

    title = _lookup(raw, field_map.title)
    if not isinstance(title, str) or not title.strip():
        raise NormalizationError(f"{source_kind} record has no '{field_map.title}'")

    raw_timestamp = _lookup(raw, field_map.published_at)
    if not isinstance(raw_timestamp, str) or not raw_timestamp.strip():
        raise NormalizationError(
            f"{source_kind} record '{title}' has no '{field_map.published_at}'"
        )
    try:
        published_at = normalize_timestamp(raw_timestamp)
    except ValueError as exc:
        raise NormalizationError(
            f"{source_kind} record '{title}' has invalid timestamp '{raw_timestamp}'"
        ) from exc

    content = _first_present(raw, field_map.content, "")
    author = _first_present(raw, field_map.author, UNKNOWN_AUTHOR)
    source = _first_present(raw, field_map.source, field_map.source_default)
    category = _first_present(raw, field_map.category, None)

    return ArticleCandidate(
        title=title.strip(),
        content=str(content),
        author=str(author).strip() or UNKNOWN_AUTHOR,
        published_at=published_at,
        source=source,
        category=category or None,
    )
