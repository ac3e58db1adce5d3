"""Editorial provider adapter — latest content from The Guardian."""

from __future__ import annotations

from newshub.ingestion.adapter import ProviderAdapter, records_at
from newshub.ingestion.normalize import RawProviderRecord


class EditorialAdapter(ProviderAdapter):
    """Adapter for the Guardian content search endpoint.

    Requests ``bodyText`` and ``byline`` so that article text and author come
    back nested under ``fields`` on each result.
    """

    url = "https://content.guardianapis.com/search"

    @property
    def name(self) -> str:
        return "editorial"

    def params(self, api_key: str) -> dict:
        return {
            "api-key": api_key,
            "show-fields": "bodyText,byline",
            "page-size": self._page_size,
        }

    def extract_records(self, payload: dict) -> list[RawProviderRecord]:
        return records_at(payload, "response.results")
