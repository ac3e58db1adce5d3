"""Headlines provider adapter — top headlines from NewsAPI."""

from __future__ import annotations

from newshub.ingestion.adapter import ProviderAdapter, records_at
from newshub.ingestion.normalize import RawProviderRecord


class HeadlinesAdapter(ProviderAdapter):
    """Adapter for the NewsAPI top-headlines endpoint."""

    url = "https://newsapi.org/v2/top-headlines"

    @property
    def name(self) -> str:
        return "headlines"

    def params(self, api_key: str) -> dict:
        return {"language": "en", "pageSize": self._page_size, "apiKey": api_key}

    def extract_records(self, payload: dict) -> list[RawProviderRecord]:
        return records_at(payload, "articles")
