"""Adapter registry — maps source kinds to provider adapter classes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from newshub.ingestion.adapter import ProviderAdapter

_REGISTRY: dict[str, type[ProviderAdapter]] = {}


def register_adapter(kind: str, cls: type[ProviderAdapter]) -> None:
    """Register an adapter class for a given source kind."""
    _REGISTRY[kind] = cls


def get_adapter_class(kind: str) -> type[ProviderAdapter] | None:
    """Look up an adapter class by source kind. Returns None if not found."""
    return _REGISTRY.get(kind)


def registered_kinds() -> list[str]:
    """Return a sorted list of all registered source kinds."""
    return sorted(_REGISTRY)
