from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from .errors import (
    MissingConfigurationError,
    MissingProviderError,
    NoDefaultInstanceError,
    UnknownMethodError,
    UnknownProviderError,
)
from .hooks import Hook, Phase
from .providers.base import StorageClient
from .providers.registry import get_provider
from .settings import Settings
from .settings import settings as app_settings

log = structlog.get_logger("storage-api.facade")

DEFAULT_INSTANCE = "default instance"
CALL_TIMEOUT = "call timeout"

InstanceConfig = Mapping[str, Any]


class Storage:
    """
    Registers storage instances and hands out their provider clients.

    Clients are constructed lazily on first use of an instance name and cached
    for the life of the object (or until `exit`). Setup mistakes raise
    immediately; I/O failures surface when the returned awaitables run.
    """

    def __init__(
        self,
        config: Mapping[str, InstanceConfig] | None = None,
        *,
        settings: Mapping[str, Any] | None = None,
    ) -> None:
        self._config: dict[str, InstanceConfig] = dict(config or {})
        self._settings: dict[str, Any] = dict(settings or {})
        self._cache: dict[str, StorageClient] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> Storage:
        """Build a facade from STORAGE_* environment settings."""
        source = source or app_settings
        return cls(
            {name: dict(record) for name, record in source.STORAGE_INSTANCES.items()},
            settings=source.storage_settings(),
        )

    def init(self, config: Mapping[str, InstanceConfig]) -> Storage:
        """Replace the whole configuration table."""
        with self._lock:
            self._config = dict(config)
        log.info(
            "storage_configured",
            component="facade",
            flow="configure",
            meta={"instances": sorted(self._config)},
        )
        return self

    def add(self, instance: str, config: InstanceConfig) -> Storage:
        """Add or overwrite the configuration of a single instance."""
        with self._lock:
            self._config[instance] = config
            cached = instance in self._cache
        log.info(
            "instance_configured",
            component="facade",
            flow="configure",
            meta={"instance": instance, "cached": cached},
        )
        return self

    def settings(self, key: str, value: Any) -> None:
        self._settings[key] = value

    def setting(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def instances(self) -> list[str]:
        return list(self._config)

    def is_cached(self, instance: str) -> bool:
        return instance in self._cache

    def get(self, instance: str | None = None) -> Awaitable[StorageClient]:
        """
        Resolve an instance and return an awaitable that initializes it.

        Raises configuration errors right away; `_init` failures are raised
        when the result is awaited.
        """
        if instance is None:
            instance = self._settings.get(DEFAULT_INSTANCE)
        if not instance:
            raise NoDefaultInstanceError()

        client = self._resolve(instance)
        return self._initialize(instance, client)

    def pre(self, *args: Any) -> Storage:
        """`pre(method, hook)` for every configured instance, or `pre(instance, method, hook)`."""
        return self._register_hook("pre", *args)

    def post(self, *args: Any) -> Storage:
        """`post(method, hook)` for every configured instance, or `post(instance, method, hook)`."""
        return self._register_hook("post", *args)

    async def exit(self) -> None:
        """
        Tear down every cached client concurrently.
        All of them are attempted; the first failure is raised afterwards.
        """
        with self._lock:
            clients = list(self._cache.items())

        results = await asyncio.gather(
            *(self._teardown(instance, client) for instance, client in clients),
            return_exceptions=True,
        )

        with self._lock:
            for instance, client in clients:
                if self._cache.get(instance) is client:
                    del self._cache[instance]

        failures = [result for result in results if isinstance(result, BaseException)]
        log.info(
            "storage_exited",
            component="facade",
            flow="exit",
            meta={"instances": [name for name, _ in clients], "failed": len(failures)},
        )
        if failures:
            raise failures[0]

    def _resolve(self, instance: str) -> StorageClient:
        with self._lock:
            client = self._cache.get(instance)
            if client is not None:
                return client

            record = self._config.get(instance)
            if record is None:
                log.warning(
                    "instance_config_missing",
                    component="facade",
                    flow="resolve",
                    meta={"instance": instance, "configured": sorted(self._config)},
                )
                raise MissingConfigurationError(instance)

            provider = record.get("provider")
            if not provider:
                raise MissingProviderError(instance)

            options = {key: value for key, value in record.items() if key != "provider"}
            client = self._provider_factory(instance, provider)(options)

            timeout = self._settings.get(CALL_TIMEOUT)
            if timeout is not None:
                client.call_timeout = float(timeout)

            self._cache[instance] = client

        log.info(
            "instance_created",
            component="facade",
            flow="resolve",
            meta={"instance": instance, "provider": type(client).__name__},
        )
        return client

    @staticmethod
    def _provider_factory(instance: str, provider: Any) -> Callable[[dict[str, Any]], Any]:
        if isinstance(provider, str):
            provider_cls = get_provider(provider)
            if provider_cls is None:
                raise UnknownProviderError(instance, provider)
            return provider_cls
        return provider

    async def _initialize(self, instance: str, client: StorageClient) -> StorageClient:
        try:
            await client._init()
        except Exception:
            log.exception(
                "instance_init_failed",
                component="facade",
                flow="get",
                meta={"instance": instance, "provider": type(client).__name__},
            )
            raise
        return client

    async def _teardown(self, instance: str, client: StorageClient) -> None:
        try:
            await client._exit()
        except Exception:
            log.exception(
                "instance_exit_failed",
                component="facade",
                flow="exit",
                meta={"instance": instance, "provider": type(client).__name__},
            )
            raise

    def _register_hook(self, phase: Phase, *args: Any) -> Storage:
        instance: str | None
        if len(args) == 2:  # noqa: PLR2004
            instance = None
            method, hook = args
        elif len(args) == 3:  # noqa: PLR2004
            instance, method, hook = args
        else:
            raise TypeError(f"{phase}() takes ([instance], method, hook), got {len(args)} arguments")

        with self._lock:
            targets = list(self._config) if instance is None else [instance]
            clients = [self._resolve(name) for name in targets]
            # all-or-nothing: validate every target before attaching to any
            if not callable(hook):
                raise TypeError(f"Hook for {phase} {method} must be callable")
            for client in clients:
                hookable = getattr(type(client), "hookable_methods", None)
                if hookable is not None and method not in hookable:
                    raise UnknownMethodError(type(client).__name__, method)
            for client in clients:
                if phase == "pre":
                    client.pre(method, hook)
                else:
                    client.post(method, hook)

        log.debug(
            "hook_registered",
            component="facade",
            flow="hooks",
            meta={
                "phase": phase,
                "method": method,
                "generic": instance is None,
                "instances": targets,
            },
        )
        return self


default_storage = Storage()


def init(config: Mapping[str, InstanceConfig]) -> Storage:
    return default_storage.init(config)


def add(instance: str, config: InstanceConfig) -> Storage:
    return default_storage.add(instance, config)


def settings(key: str, value: Any) -> None:
    default_storage.settings(key, value)


def get(instance: str | None = None) -> Awaitable[StorageClient]:
    return default_storage.get(instance)


def pre(*args: Any) -> Storage:
    return default_storage.pre(*args)


def post(*args: Any) -> Storage:
    return default_storage.post(*args)


async def exit() -> None:  # noqa: A001
    await default_storage.exit()


__all__ = [
    "CALL_TIMEOUT",
    "DEFAULT_INSTANCE",
    "Hook",
    "Storage",
    "add",
    "default_storage",
    "exit",
    "get",
    "init",
    "post",
    "pre",
    "settings",
]
