from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Literal

import structlog

log = structlog.get_logger("storage-api.hooks")

Phase = Literal["pre", "post"]
Hook = Callable[..., Awaitable[None] | None]

PHASES: tuple[Phase, ...] = ("pre", "post")


class HookRegistry:
    """Ordered pre/post hooks of one provider client, keyed by method name."""

    def __init__(self) -> None:
        self._hooks: dict[Phase, dict[str, list[Hook]]] = {phase: {} for phase in PHASES}

    def add(self, phase: Phase, method: str, hook: Hook) -> None:
        if phase not in self._hooks:
            raise ValueError(f"Unknown hook phase: {phase}")
        if not callable(hook):
            raise TypeError(f"Hook for {phase} {method} must be callable")
        self._hooks[phase].setdefault(method, []).append(hook)

    def get(self, phase: Phase, method: str) -> list[Hook]:
        """Return a snapshot of the hooks for a phase/method, in registration order."""
        return list(self._hooks[phase].get(method, ()))

    def count(self, phase: Phase, method: str) -> int:
        return len(self._hooks[phase].get(method, ()))

    async def run(
        self,
        method: str,
        operation: Callable[..., Awaitable[Any]],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        *,
        owner: str,
    ) -> Any:
        """
        Run pre hooks, the operation, then post hooks.
        The first exception anywhere aborts the rest of the chain and propagates.
        """
        pre_hooks = self.get("pre", method)
        post_hooks = self.get("post", method)

        step = "pre"
        try:
            await _call_each(pre_hooks, args, kwargs)
            step = "operation"
            result = await operation(*args, **kwargs)
            step = "post"
            await _call_each(post_hooks, (result, *args), kwargs)
        except Exception as exc:
            log.warning(
                "hook_chain_aborted",
                component="hooks",
                flow=method,
                meta={
                    "provider": owner,
                    "step": step,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise
        return result


async def _call_each(hooks: Iterable[Hook], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
    for hook in hooks:
        outcome = hook(*args, **kwargs)
        if inspect.isawaitable(outcome):
            await outcome
