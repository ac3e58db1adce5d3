"""Ingestion pipeline — provider fetching, normalization, and deduplicated storage."""

from newshub.ingestion.digest_adapter import DigestAdapter
from newshub.ingestion.editorial_adapter import EditorialAdapter
from newshub.ingestion.headlines_adapter import HeadlinesAdapter
from newshub.ingestion.registry import register_adapter

register_adapter("headlines", HeadlinesAdapter)
register_adapter("editorial", EditorialAdapter)
register_adapter("digest", DigestAdapter)
