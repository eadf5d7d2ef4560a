from __future__ import annotations

from collections.abc import Iterable

from .base import StorageClient

_registry: dict[str, type[StorageClient]] = {}


def register_provider(tag: str, provider: type[StorageClient]) -> None:
    name = tag.strip()
    if not name:
        raise ValueError("Provider tag must be non-empty")
    if not (isinstance(provider, type) and issubclass(provider, StorageClient)):
        raise TypeError(f"Provider {name} must be a StorageClient subclass")
    if provider is StorageClient:
        raise TypeError("Cannot register the abstract StorageClient")
    if name in _registry:
        raise ValueError(f"Provider already registered: {name}")
    _registry[name] = provider


def get_provider(tag: str) -> type[StorageClient] | None:
    return _registry.get(tag.strip())


def list_providers() -> Iterable[str]:
    return _registry.keys()
