"""Scheduled job functions — ingestion cycle and its run ledger."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone

import newshub.ingestion  # noqa: F401  — triggers adapter registration
from newshub.config import Config
from newshub.ingestion.ingestor import IngestionReport, Ingestor, ProviderKeys
from newshub.storage.articles import ArticleStore
from newshub.storage.connection import get_connection

logger = logging.getLogger(__name__)


def _record_run(
    database_path: str,
    started_at: str,
    status: str,
    result: dict,
    error: str | None = None,
) -> None:
    """Insert an ingestion run record into the ingestion_runs table."""
    finished_at = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO ingestion_runs "
            "(id, started_at, finished_at, status, result, error) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                str(uuid.uuid4()),
                started_at,
                finished_at,
                status,
                json.dumps(result),
                error,
            ),
        )


def _record_source_failure(database_path: str, source: str, error_msg: str) -> int:
    """Record a provider fetch failure. Returns updated consecutive_failures count."""
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO source_errors "
            "(source, consecutive_failures, last_error, last_failed_at) "
            "VALUES (?, 1, ?, ?) "
            "ON CONFLICT(source) DO UPDATE SET "
            "consecutive_failures = consecutive_failures + 1, "
            "last_error = ?, last_failed_at = ?",
            (source, error_msg, now, error_msg, now),
        )
        row = conn.execute(
            "SELECT consecutive_failures FROM source_errors WHERE source = ?",
            (source,),
        ).fetchone()
    return row["consecutive_failures"] if row else 1


def _record_source_success(database_path: str, source: str) -> None:
    """Reset consecutive failure count for a provider after a successful fetch."""
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO source_errors "
            "(source, consecutive_failures, last_succeeded_at) "
            "VALUES (?, 0, ?) "
            "ON CONFLICT(source) DO UPDATE SET "
            "consecutive_failures = 0, last_succeeded_at = ?",
            (source, now, now),
        )


def build_ingestor(config: Config) -> Ingestor:
    """Construct an Ingestor from application config."""
    return Ingestor(
        keys=ProviderKeys(
            headlines=config.headlines_api_key,
            editorial=config.editorial_api_key,
            digest=config.digest_api_key,
        ),
        store=ArticleStore(config.database_path),
        timeout_seconds=config.provider_timeout_seconds,
        max_workers=config.ingestion_max_workers,
        adapter_config={"page_size": config.provider_page_size},
    )


def _track_source_health(config: Config, report: IngestionReport) -> None:
    for source_report in report.sources:
        if source_report.status == "ok":
            _record_source_success(config.database_path, source_report.source)
            continue
        consecutive = _record_source_failure(
            config.database_path, source_report.source, source_report.error or ""
        )
        if consecutive >= config.source_failure_alert_threshold:
            logger.error(
                "Provider '%s' has failed %d consecutive run(s): %s",
                source_report.source,
                consecutive,
                source_report.error,
            )


def run_ingestion(
    config: Config, sources: list[str] | None = None
) -> IngestionReport | None:
    """Run one ingestion cycle and record it in the run ledger.

    Returns the cycle report, or None if the cycle crashed before producing
    one. Never raises, so a scheduler keeps firing on later intervals.
    """
    started_at = datetime.now(timezone.utc).isoformat()
    sources = list(sources or config.ingestion_sources)

    try:
        report = build_ingestor(config).run_cycle(sources)
        _track_source_health(config, report)
        _record_run(config.database_path, started_at, report.status, report.to_dict())
    except Exception:
        logger.exception("Ingestion failed")
        try:
            _record_run(
                config.database_path, started_at, "error",
                {"sources": sources}, error="Ingestion failed (see logs)",
            )
        except Exception:
            logger.exception("Could not record failed ingestion run")
        return None

    return report
