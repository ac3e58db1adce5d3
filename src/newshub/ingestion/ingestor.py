"""Deduplicating ingestor — runs one ingestion cycle across configured providers."""

from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass, field

from newshub.ingestion.adapter import FetchFailure, FetchResult, ProviderAdapter
from newshub.ingestion.normalize import NormalizationError, normalize
from newshub.ingestion.registry import get_adapter_class
from newshub.storage.articles import ArticleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderKeys:
    """API keys for each provider, passed in explicitly rather than read globally."""

    headlines: str = ""
    editorial: str = ""
    digest: str = ""

    def for_source(self, kind: str) -> str:
        return getattr(self, kind, "")


@dataclass
class SourceReport:
    """Per-source outcome of one cycle."""

    source: str
    status: str = "ok"  # "ok" or "failed"
    fetched: int = 0
    new: int = 0
    duplicates: int = 0
    invalid: int = 0
    errors: int = 0
    error: str | None = None
    status_code: int | None = None


@dataclass
class IngestionReport:
    """Result of one ingestion cycle.

    ``status`` lets a caller tell a clean run ("ok") from one where some
    providers failed ("partial") or all of them did ("failed").
    """

    sources: list[SourceReport] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return sum(s.new for s in self.sources)

    @property
    def failed_sources(self) -> list[str]:
        return [s.source for s in self.sources if s.status == "failed"]

    @property
    def status(self) -> str:
        failed = len(self.failed_sources)
        if self.sources and failed == len(self.sources):
            return "failed"
        if failed:
            return "partial"
        return "ok"

    def source(self, name: str) -> SourceReport | None:
        for report in self.sources:
            if report.source == name:
                return report
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "new_count": self.new_count,
            "sources": [asdict(s) for s in self.sources],
        }


class Ingestor:
    """Fetch from every configured provider and commit new articles.

    Fetches run concurrently, one task per provider; each task's failure or
    timeout is confined to its own source report. Commits are sequential.
    """

    def __init__(
        self,
        keys: ProviderKeys,
        store: ArticleStore,
        timeout_seconds: float = 15.0,
        max_workers: int = 3,
        adapter_config: dict | None = None,
    ) -> None:
        self._keys = keys
        self._store = store
        self._timeout = timeout_seconds
        self._max_workers = max_workers
        self._adapter_config = adapter_config or {}

    def run_cycle(self, sources: list[str]) -> IngestionReport:
        """Run one ingestion cycle over the given source kinds, in order."""
        sources = list(dict.fromkeys(sources))
        report = IngestionReport()
        adapters: dict[str, ProviderAdapter] = {}
        for kind in sources:
            adapter_cls = get_adapter_class(kind)
            if adapter_cls is None:
                logger.warning("Unknown source '%s', skipping", kind)
                continue
            adapter = adapter_cls()
            adapter.configure(self._adapter_config)
            adapters[kind] = adapter

        results = self._fetch_all(adapters)

        for kind in sources:
            if kind not in adapters:
                report.sources.append(
                    SourceReport(source=kind, status="failed", error="unknown source")
                )
                continue
            report.sources.append(self._commit(kind, results[kind]))

        logger.info(
            "Ingestion cycle %s: %d new article(s); failed sources: %s",
            report.status,
            report.new_count,
            ", ".join(report.failed_sources) or "none",
        )
        return report

    def _fetch_all(self, adapters: dict[str, ProviderAdapter]) -> dict[str, FetchResult]:
        if not adapters:
            return {}
        results: dict[str, FetchResult] = {}
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self._max_workers, len(adapters))),
            thread_name_prefix="ingest",
        )
        try:
            futures = {
                executor.submit(
                    adapter.fetch, self._keys.for_source(kind), self._timeout
                ): kind
                for kind, adapter in adapters.items()
            }
            done, not_done = wait(futures, timeout=self._timeout * 2)
            for future in done:
                kind = futures[future]
                try:
                    results[kind] = future.result()
                except Exception as exc:
                    logger.exception("Fetch task for '%s' raised", kind)
                    results[kind] = _failed(kind, f"fetch raised: {exc}")
            for future in not_done:
                kind = futures[future]
                logger.error("Fetch from '%s' did not finish within the cycle deadline", kind)
                results[kind] = _failed(kind, "cycle deadline exceeded")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    def _commit(self, kind: str, result: FetchResult) -> SourceReport:
        if result.failure is not None:
            return SourceReport(
                source=kind,
                status="failed",
                error=result.failure.detail,
                status_code=result.failure.status_code,
            )

        report = SourceReport(source=kind, fetched=len(result.records))
        for raw in result.records:
            try:
                candidate = normalize(raw, kind)
            except NormalizationError as exc:
                logger.warning("Skipping invalid %s record: %s", kind, exc)
                report.invalid += 1
                continue

            try:
                stored = self._store.insert_if_absent(candidate)
            except sqlite3.Error:
                logger.exception("Failed to store %s article '%s'", kind, candidate.title)
                report.errors += 1
                continue

            if stored is None:
                report.duplicates += 1
            else:
                report.new += 1

        logger.info(
            "Source %s: %d fetched, %d new, %d duplicate, %d invalid, %d error(s)",
            kind, report.fetched, report.new, report.duplicates,
            report.invalid, report.errors,
        )
        return report


def _failed(kind: str, detail: str) -> FetchResult:
    return FetchResult(source=kind, failure=FetchFailure(source=kind, detail=detail))
