from .errors import (
    AbstractMethodError,
    AbstractProviderError,
    ConfigurationError,
    MissingConfigurationError,
    MissingProviderError,
    NoDefaultInstanceError,
    OperationTimeoutError,
    StorageError,
    UnknownMethodError,
    UnknownProviderError,
)
from .facade import Storage, default_storage
from .providers import StorageClient, get_provider, list_providers, register_provider

__all__ = [
    "AbstractMethodError",
    "AbstractProviderError",
    "ConfigurationError",
    "MissingConfigurationError",
    "MissingProviderError",
    "NoDefaultInstanceError",
    "OperationTimeoutError",
    "Storage",
    "StorageClient",
    "StorageError",
    "UnknownMethodError",
    "UnknownProviderError",
    "default_storage",
    "get_provider",
    "list_providers",
    "register_provider",
]
