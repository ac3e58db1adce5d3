"""Tests for newshub.ingestion.registry — adapter registry."""

from __future__ import annotations

import newshub.ingestion  # noqa: F401
from newshub.ingestion.adapter import ProviderAdapter
from newshub.ingestion.digest_adapter import DigestAdapter
from newshub.ingestion.editorial_adapter import EditorialAdapter
from newshub.ingestion.headlines_adapter import HeadlinesAdapter
from newshub.ingestion.registry import (
    _REGISTRY,
    get_adapter_class,
    register_adapter,
    registered_kinds,
)


class _DummyAdapter(ProviderAdapter):
    url = "https://example.invalid/feed"

    @property
    def name(self) -> str:
        return "dummy"

    def params(self, api_key: str) -> dict:
        return {"key": api_key}

    def extract_records(self, payload: dict) -> list:
        return []


class TestRegistry:
    def setup_method(self):
        self._original = dict(_REGISTRY)

    def teardown_method(self):
        _REGISTRY.clear()
        _REGISTRY.update(self._original)

    def test_register_and_lookup(self):
        register_adapter("dummy", _DummyAdapter)
        assert get_adapter_class("dummy") is _DummyAdapter

    def test_lookup_unknown_returns_none(self):
        assert get_adapter_class("nonexistent") is None

    def test_registered_kinds_sorted(self):
        register_adapter("zzz", _DummyAdapter)
        register_adapter("aaa", _DummyAdapter)
        kinds = registered_kinds()
        assert kinds[0] == "aaa"
        assert "zzz" in kinds

    def test_providers_registered_by_default(self):
        assert get_adapter_class("headlines") is HeadlinesAdapter
        assert get_adapter_class("editorial") is EditorialAdapter
        assert get_adapter_class("digest") is DigestAdapter

    def test_adapter_names_match_registered_kinds(self):
        for kind in ("headlines", "editorial", "digest"):
            assert get_adapter_class(kind)().name == kind
