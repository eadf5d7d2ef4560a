from __future__ import annotations

import asyncio
import contextvars
import functools
import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, ClassVar

from ..errors import (
    AbstractMethodError,
    AbstractProviderError,
    OperationTimeoutError,
    UnknownMethodError,
)
from ..hooks import Hook, HookRegistry, Phase

# (client id, method, implementation) triples whose hook chain is running in the current task.
_active_chains: contextvars.ContextVar[frozenset[tuple[int, str, Callable[..., Any]]]] = (
    contextvars.ContextVar("storage_api_active_chains", default=frozenset())
)


def _hooked(method: str, func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    @functools.wraps(func)
    async def wrapper(self: StorageClient, *args: Any, **kwargs: Any) -> Any:
        client_id = id(self)
        active = _active_chains.get()
        entry = (client_id, method, func)

        async def operation(*op_args: Any, **op_kwargs: Any) -> Any:
            token = _active_chains.set(_active_chains.get() | {entry})
            try:
                return await func(self, *op_args, **op_kwargs)
            finally:
                _active_chains.reset(token)

        if entry not in active and any(c == client_id and m == method for c, m, _ in active):
            # super() call from an overriding implementation: hooks already ran for this call
            return await operation(*args, **kwargs)

        chain = self._hooks.run(method, operation, args, kwargs, owner=self.provider_name)
        if self.call_timeout is None:
            return await chain

        scope = asyncio.timeout(self.call_timeout)
        try:
            async with scope:
                return await chain
        except TimeoutError:
            if scope.expired():
                raise OperationTimeoutError(method, self.call_timeout) from None
            raise

    wrapper.__storage_hooked__ = True  # type: ignore[attr-defined]
    return wrapper


class StorageClient:
    """
    Abstract storage provider client.

    Providers subclass it and implement the coroutines `upload`, `remove` and
    `exists`, plus optionally `_init` / `_exit` for connection lifecycle.
    Every hookable method a subclass defines or inherits (mixins included)
    runs through the client's pre/post hook chain.

    A `super()` call into a parent implementation of the method being run
    skips the hooks, since they already ran for the outer call. Calling
    `self.<method>()` again from inside an implementation runs them anew.
    Tasks spawned by an operation inherit that bookkeeping, so a task that
    reaches a parent implementation without going through `self.<method>()`
    also skips the hooks.
    """

    hookable_methods: ClassVar[tuple[str, ...]] = ("upload", "remove", "exists")

    _hooks: HookRegistry
    call_timeout: float | None

    def __new__(cls, *args: Any, **kwargs: Any) -> StorageClient:
        if cls is StorageClient:
            raise AbstractProviderError()
        self = super().__new__(cls)
        self._hooks = HookRegistry()
        self.call_timeout = None
        return self

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        self.config: dict[str, Any] = dict(config or {})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for method in cls.hookable_methods:
            func = getattr(cls, method, None)
            if func is None or getattr(func, "__storage_hooked__", False):
                continue
            if func is StorageClient.__dict__.get(method):
                continue
            if not inspect.iscoroutinefunction(func):
                raise TypeError(f"{cls.__name__}.{method} must be a coroutine function")
            setattr(cls, method, _hooked(method, func))

    @property
    def provider_name(self) -> str:
        return type(self).__name__

    def upload(self, file: Any, filename: str) -> Awaitable[None]:
        """Persist `file` under `filename`."""
        raise AbstractMethodError("upload")

    def remove(self, filename: str) -> Awaitable[None]:
        """Delete the object stored under `filename`."""
        raise AbstractMethodError("remove")

    def exists(self, filename: str) -> Awaitable[bool]:
        """Return True if `filename` is present."""
        raise AbstractMethodError("exists")

    async def _init(self) -> None:
        """Establish connections/resources. Called on every `Storage.get`, keep it idempotent."""

    async def _exit(self) -> None:
        """Release resources. Called once per cached client during teardown."""

    def pre(self, method: str, hook: Hook) -> StorageClient:
        return self._add_hook("pre", method, hook)

    def post(self, method: str, hook: Hook) -> StorageClient:
        return self._add_hook("post", method, hook)

    def hooks(self, phase: Phase, method: str) -> list[Hook]:
        return self._hooks.get(phase, method)

    def _add_hook(self, phase: Phase, method: str, hook: Hook) -> StorageClient:
        if method not in type(self).hookable_methods:
            raise UnknownMethodError(self.provider_name, method)
        self._hooks.add(phase, method, hook)
        return self
