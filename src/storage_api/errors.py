from __future__ import annotations


class StorageError(Exception):
    """Base class for all storage facade errors."""


class ConfigurationError(StorageError):
    """Setup mistake detected at the point of misuse; raised synchronously."""


class MissingConfigurationError(ConfigurationError):
    def __init__(self, instance: str) -> None:
        super().__init__(f"Storage API: Configuration for {instance} is missing")
        self.instance = instance


class MissingProviderError(ConfigurationError):
    def __init__(self, instance: str) -> None:
        super().__init__(f"Storage API: Provider for {instance} is not specified")
        self.instance = instance


class UnknownProviderError(ConfigurationError):
    def __init__(self, instance: str, tag: str) -> None:
        super().__init__(f"Storage API: Provider {tag!r} for {instance} is not registered")
        self.instance = instance
        self.tag = tag


class NoDefaultInstanceError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("Storage API: No default provider is specified")


class UnknownMethodError(ConfigurationError):
    def __init__(self, provider: str, method: str) -> None:
        super().__init__(f"StorageClient: {provider} has no hookable method {method!r}")
        self.provider = provider
        self.method = method


class AbstractProviderError(StorageError, TypeError):
    """Raised when the abstract client itself is instantiated."""

    def __init__(self) -> None:
        super().__init__("StorageClient: Cannot initialize abstract class")


class AbstractMethodError(StorageError, NotImplementedError):
    """Raised when a provider does not override a contract operation."""

    def __init__(self, method: str) -> None:
        super().__init__(f"StorageClient: Cannot invoke abstract method {method!r}")
        self.method = method


class OperationTimeoutError(StorageError, TimeoutError):
    def __init__(self, method: str, timeout: float) -> None:
        super().__init__(f"StorageClient: {method} did not complete within {timeout}s")
        self.method = method
        self.timeout = timeout
