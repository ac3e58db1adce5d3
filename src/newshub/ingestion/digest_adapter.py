"""Digest provider adapter — home-section top stories from The New York Times."""

from __future__ import annotations

from newshub.ingestion.adapter import ProviderAdapter, records_at
from newshub.ingestion.normalize import RawProviderRecord


class DigestAdapter(ProviderAdapter):
    """Adapter for the NYT Top Stories API.

    The endpoint has no page-size parameter; results are truncated to the
    configured page size after decoding.
    """

    url = "https://api.nytimes.com/svc/topstories/v2/home.json"

    @property
    def name(self) -> str:
        return "digest"

    def params(self, api_key: str) -> dict:
        return {"api-key": api_key}

    def extract_records(self, payload: dict) -> list[RawProviderRecord]:
        return records_at(payload, "results")
