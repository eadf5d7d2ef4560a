from .base import StorageClient
from .registry import get_provider, list_providers, register_provider

__all__ = ["StorageClient", "get_provider", "list_providers", "register_provider"]
