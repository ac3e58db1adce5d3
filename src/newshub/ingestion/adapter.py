"""Provider adapter interface and the shared HTTP fetch path."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

from newshub.ingestion.normalize import ArticleCandidate, RawProviderRecord, normalize

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
_MAX_BODY_CHARS = 500


@dataclass(frozen=True)
class FetchFailure:
    """Why a provider fetch produced no records."""

    source: str
    detail: str
    status_code: int | None = None


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one provider fetch: records, or a failure."""

    source: str
    records: list[RawProviderRecord] = field(default_factory=list)
    failure: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class ProviderAdapter(ABC):
    """Abstract base class for news provider adapters.

    Each adapter targets one external endpoint. Subclasses supply the URL,
    query parameters and the location of the result list; the base class
    performs the request and converts every transport, status or decoding
    problem into a FetchFailure instead of raising.
    """

    url: str = ""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._page_size = page_size

    @property
    @abstractmethod
    def name(self) -> str:
        """Source kind, also the key into the normalizer's field maps."""

    @abstractmethod
    def params(self, api_key: str) -> dict:
        """Query parameters for a single pull."""

    @abstractmethod
    def extract_records(self, payload: dict) -> list[RawProviderRecord]:
        """Pull the result list out of a decoded response body.

        Returns an empty list when the result key is absent. Raises
        ValueError when the body does not have the expected shape.
        """

    def configure(self, config: dict) -> None:
        """Accept adapter-specific configuration."""
        self._page_size = int(config.get("page_size", self._page_size))

    def fetch(self, api_key: str, timeout: float = 15.0) -> FetchResult:
        """Fetch the current batch of raw records from the provider."""
        if not api_key:
            logger.warning("No API key configured for %s; skipping fetch", self.name)
            return self._failure("API key not configured")

        try:
            resp = httpx.get(self.url, params=self.params(api_key), timeout=timeout)
        except httpx.TimeoutException:
            logger.warning("Timed out fetching %s after %.1fs", self.name, timeout)
            return self._failure(f"timed out after {timeout}s")
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", self.name, exc)
            return self._failure(f"request failed: {exc}")

        if not resp.is_success:
            logger.error(
                "Failed to fetch from %s: HTTP %d", self.name, resp.status_code
            )
            return self._failure(resp.text[:_MAX_BODY_CHARS], resp.status_code)

        try:
            payload = resp.json()
            if not isinstance(payload, dict):
                raise ValueError("response body is not a JSON object")
            records = self.extract_records(payload)
        except ValueError as exc:
            logger.error("Unparseable response from %s: %s", self.name, exc)
            return self._failure(f"unparseable response: {exc}", resp.status_code)

        records = records[: self._page_size]
        logger.info("Fetched %d records from %s", len(records), self.name)
        return FetchResult(source=self.name, records=records)

    def fetch_and_normalize(
        self, api_key: str, timeout: float = 15.0
    ) -> list[ArticleCandidate]:
        """Fetch and normalize in one step, dropping records that fail normalization."""
        result = self.fetch(api_key, timeout=timeout)
        candidates: list[ArticleCandidate] = []
        for raw in result.records:
            try:
                candidates.append(normalize(raw, self.name))
            except ValueError:
                logger.warning("Dropping malformed %s record", self.name)
        return candidates

    def _failure(self, detail: str, status_code: int | None = None) -> FetchResult:
        return FetchResult(
            source=self.name,
            failure=FetchFailure(source=self.name, detail=detail, status_code=status_code),
        )


def records_at(payload: dict, path: str) -> list[RawProviderRecord]:
    """Return the list found at a dotted path, or [] when the path is absent."""
    value = payload
    for key in path.split("."):
        if not isinstance(value, dict):
            raise ValueError(f"expected an object at '{key}' in '{path}'")
        value = value.get(key)
        if value is None:
            return []
    if not isinstance(value, list):
        raise ValueError(f"'{path}' is not a list")
    return [item for item in value if isinstance(item, dict)]
