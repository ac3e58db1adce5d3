"""Tests for newshub.storage.users and newshub.storage.preferences."""

from __future__ import annotations

import sqlite3

import pytest

from newshub.storage.connection import get_connection
from newshub.storage.preferences import (
    create_preference,
    delete_preference,
    list_preferences,
    update_preference,
)
from newshub.storage.schema import init_db
from newshub.storage.users import (
    create_user,
    get_user_by_email,
    hash_token,
    issue_token,
    resolve_token,
)


@pytest.fixture()
def db_path(tmp_path):
    path = str(tmp_path / "test.db")
    init_db(path)
    return path


class TestUsers:
    def test_create_and_lookup(self, db_path):
        user_id = create_user(db_path, "Reader@Example.com", "Reader")
        user = get_user_by_email(db_path, "reader@example.com")
        assert user["id"] == user_id
        assert user["email"] == "reader@example.com"

    def test_duplicate_email_raises(self, db_path):
        create_user(db_path, "a@example.com", "A")
        with pytest.raises(sqlite3.IntegrityError):
            create_user(db_path, "A@example.com", "A again")

    def test_unknown_email(self, db_path):
        assert get_user_by_email(db_path, "nobody@example.com") is None


class TestTokens:
    def test_issue_and_resolve(self, db_path):
        user_id = create_user(db_path, "a@example.com", "A")
        token = issue_token(db_path, user_id)
        user = resolve_token(db_path, token)
        assert user["id"] == user_id
        assert user["email"] == "a@example.com"

    def test_only_hash_is_stored(self, db_path):
        user_id = create_user(db_path, "a@example.com", "A")
        token = issue_token(db_path, user_id)
        with get_connection(db_path) as conn:
            stored = conn.execute("SELECT token_hash FROM api_tokens").fetchone()[0]
        assert stored == hash_token(token)
        assert stored != token

    def test_resolve_touches_last_used(self, db_path):
        user_id = create_user(db_path, "a@example.com", "A")
        token = issue_token(db_path, user_id, name="laptop")
        resolve_token(db_path, token)
        with get_connection(db_path) as conn:
            row = conn.execute("SELECT name, last_used_at FROM api_tokens").fetchone()
        assert row["name"] == "laptop"
        assert row["last_used_at"] is not None

    def test_unknown_token(self, db_path):
        assert resolve_token(db_path, "not-a-token") is None

    def test_tokens_are_distinct(self, db_path):
        user_id = create_user(db_path, "a@example.com", "A")
        assert issue_token(db_path, user_id) != issue_token(db_path, user_id)


class TestPreferences:
    @pytest.fixture()
    def users(self, db_path):
        return create_user(db_path, "a@example.com", "A"), create_user(db_path, "b@example.com", "B")

    def test_create_and_list(self, db_path, users):
        alice, _ = users
        pref = create_preference(db_path, alice, {"category": "technology"})
        assert pref["user_id"] == alice
        assert pref["category"] == "technology"
        assert pref["source"] is None
        assert list_preferences(db_path, alice) == [pref]

    def test_list_is_owner_scoped(self, db_path, users):
        alice, bob = users
        create_preference(db_path, alice, {"author": "Jane"})
        assert list_preferences(db_path, bob) == []

    def test_update(self, db_path, users):
        alice, _ = users
        pref = create_preference(db_path, alice, {"category": "tech", "source": "BBC News"})
        updated = update_preference(db_path, alice, pref["id"], {"source": "The Guardian"})
        assert updated["source"] == "The Guardian"
        assert updated["category"] == "tech"

    def test_update_can_clear_field(self, db_path, users):
        alice, _ = users
        pref = create_preference(db_path, alice, {"category": "tech"})
        updated = update_preference(db_path, alice, pref["id"], {"category": None})
        assert updated["category"] is None

    def test_update_other_users_preference(self, db_path, users):
        alice, bob = users
        pref = create_preference(db_path, alice, {"category": "tech"})
        assert update_preference(db_path, bob, pref["id"], {"category": "sport"}) is None
        assert list_preferences(db_path, alice)[0]["category"] == "tech"

    def test_delete_is_owner_scoped(self, db_path, users):
        alice, bob = users
        pref = create_preference(db_path, alice, {"category": "tech"})
        assert delete_preference(db_path, bob, pref["id"]) is False
        assert delete_preference(db_path, alice, pref["id"]) is True
        assert list_preferences(db_path, alice) == []
