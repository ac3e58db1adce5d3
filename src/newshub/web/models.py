"""Pydantic v2 request and response models for the newshub web API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from newshub.ingestion.normalize import normalize_timestamp


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------
class Article(BaseModel):
    id: int
    title: str
    content: str
    author: str
    published_at: str | None
    source: str | None = None
    category: str | None = None
    created_at: str
    updated_at: str


class ArticleListResponse(BaseModel):
    articles: list[Article]
    total: int
    page: int
    per_page: int
    pages: int


def _canonical_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return normalize_timestamp(value.isoformat())


def _in_utc_range(value: datetime | None) -> datetime | None:
    """Reject datetimes that cannot be expressed in UTC."""
    _canonical_timestamp(value)
    return value


class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    author: str = Field(min_length=1, max_length=255)
    published_at: datetime | None = None
    source: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=255)

    @field_validator("published_at")
    @classmethod
    def published_at_in_range(cls, value: datetime | None) -> datetime | None:
        return _in_utc_range(value)

    def to_fields(self) -> dict:
        fields = self.model_dump()
        fields["published_at"] = _canonical_timestamp(self.published_at)
        return fields


class ArticleUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    author: str | None = Field(default=None, min_length=1, max_length=255)
    published_at: datetime | None = None
    source: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=255)

    @field_validator("published_at")
    @classmethod
    def published_at_in_range(cls, value: datetime | None) -> datetime | None:
        return _in_utc_range(value)

    def to_fields(self) -> dict:
        """Only the fields the client actually sent."""
        fields = self.model_dump(exclude_unset=True)
        for required in ("title", "content", "author"):
            if required in fields and fields[required] is None:
                del fields[required]
        if "published_at" in fields:
            fields["published_at"] = _canonical_timestamp(self.published_at)
        return fields


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
class Preference(BaseModel):
    id: int
    user_id: int
    category: str | None
    source: str | None
    author: str | None
    created_at: str
    updated_at: str


class PreferenceIn(BaseModel):
    category: str | None = Field(default=None, max_length=255)
    source: str | None = Field(default=None, max_length=255)
    author: str | None = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Ingestion runs
# ---------------------------------------------------------------------------
class IngestionRun(BaseModel):
    id: str
    started_at: str
    finished_at: str
    status: str
    result: dict
    error: str | None


class IngestionRunListResponse(BaseModel):
    runs: list[IngestionRun]
    total: int
    page: int
    per_page: int
    pages: int
