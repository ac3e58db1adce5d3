"""Tests for newshub.storage.articles — the keyed article store."""

from __future__ import annotations

import pytest

from newshub.ingestion.normalize import ArticleCandidate
from newshub.storage.articles import Article, ArticleStore, DuplicateArticleError
from newshub.storage.schema import init_db


def _candidate(**overrides) -> ArticleCandidate:
    fields = {
        "title": "Rates held",
        "content": "The bank held rates.",
        "author": "Jo Econ",
        "published_at": "2024-03-01T12:00:00+00:00",
        "source": "BBC News",
        "category": None,
    }
    fields.update(overrides)
    return ArticleCandidate(**fields)


@pytest.fixture()
def store(tmp_path):
    path = str(tmp_path / "test.db")
    init_db(path)
    return ArticleStore(path)


class TestInsertIfAbsent:
    def test_inserts_new(self, store):
        stored = store.insert_if_absent(_candidate())
        assert isinstance(stored, Article)
        assert stored.id == 1
        assert stored.title == "Rates held"
        assert stored.source == "BBC News"
        assert stored.created_at == stored.updated_at
        assert store.count() == 1

    def test_existing_key_returns_none(self, store):
        store.insert_if_absent(_candidate())
        assert store.insert_if_absent(_candidate(content="different")) is None
        assert store.count() == 1
        assert store.get(1).content == "The bank held rates."

    def test_exists_by_title_and_published_at(self, store):
        store.insert_if_absent(_candidate())
        assert store.exists_by_title_and_published_at("Rates held", "2024-03-01T12:00:00+00:00")
        assert not store.exists_by_title_and_published_at("Rates held", "2024-03-02T12:00:00+00:00")
        assert not store.exists_by_title_and_published_at("Rates Held", "2024-03-01T12:00:00+00:00")


class TestInsert:
    def test_insert_raises_on_duplicate(self, store):
        store.insert(_candidate())
        with pytest.raises(DuplicateArticleError):
            store.insert(_candidate())

    def test_create_without_published_at(self, store):
        first = store.create({"title": "Undated", "content": "c", "author": "a"})
        second = store.create({"title": "Undated", "content": "c", "author": "a"})
        assert first.published_at is None
        assert second.id != first.id


class TestUpdateDelete:
    def test_partial_update(self, store):
        article = store.insert_if_absent(_candidate())
        updated = store.update(article.id, {"content": "Revised.", "id": 99})
        assert updated.id == article.id
        assert updated.content == "Revised."
        assert updated.title == article.title

    def test_update_missing_returns_none(self, store):
        assert store.update(42, {"title": "x"}) is None

    def test_update_into_existing_key_raises(self, store):
        store.insert_if_absent(_candidate(title="One"))
        other = store.insert_if_absent(_candidate(title="Two"))
        with pytest.raises(DuplicateArticleError):
            store.update(other.id, {"title": "One"})

    def test_delete(self, store):
        article = store.insert_if_absent(_candidate())
        assert store.delete(article.id) is True
        assert store.get(article.id) is None
        assert store.delete(article.id) is False

    def test_to_dict(self, store):
        data = store.insert_if_absent(_candidate()).to_dict()
        assert data["title"] == "Rates held"
        assert set(data) == {
            "id", "title", "content", "author", "published_at",
            "source", "category", "created_at", "updated_at",
        }
