from __future__ import annotations

import asyncio
from typing import Any

import pytest

from storage_api.errors import MissingConfigurationError, UnknownMethodError
from storage_api.facade import Storage
from tests.fakes import CallLog, FakeProvider, PlainProvider


def _run(coro):
    return asyncio.run(coro)


def _storage(log: CallLog, *names: str) -> Storage:
    return Storage({name: {"provider": FakeProvider, "log": log} for name in names})


def test_instance_hooks_wrap_operation_in_registration_order() -> None:
    log = CallLog()
    storage = _storage(log, "custom")
    storage.pre("custom", "upload", lambda file, filename: log.record("pre1", filename))
    storage.pre("custom", "upload", lambda file, filename: log.record("pre2", filename))
    storage.post("custom", "upload", lambda result, file, filename: log.record("post1"))
    storage.post("custom", "upload", lambda result, file, filename: log.record("post2"))

    async def scenario() -> None:
        client = await storage.get("custom")
        await client.upload("a.txt", "b.txt")

    _run(scenario())

    assert log.names() == ["pre1", "pre2", "upload", "post1", "post2"]


def test_failing_pre_hook_aborts_operation() -> None:
    log = CallLog()
    storage = _storage(log, "custom")

    async def deny(file: Any, filename: str) -> None:
        raise PermissionError(f"{filename} is read-only")

    storage.pre("custom", "upload", deny)
    storage.post("custom", "upload", lambda *args: log.record("post"))

    async def scenario() -> None:
        client = await storage.get("custom")
        await client.upload("a.txt", "b.txt")

    with pytest.raises(PermissionError, match="read-only"):
        _run(scenario())
    assert log.events == []


def test_generic_hook_fans_out_to_configured_instances_only() -> None:
    log = CallLog()
    storage = _storage(log, "a", "b")
    storage.pre("upload", lambda file, filename: log.record("generic", filename))
    storage.add("c", {"provider": FakeProvider, "log": log})

    async def scenario() -> None:
        for name in ("a", "b", "c"):
            client = await storage.get(name)
            await client.upload(b"x", f"{name}.txt")

    _run(scenario())

    assert log.events == [
        ("generic", "a.txt"),
        ("upload", b"x", "a.txt"),
        ("generic", "b.txt"),
        ("upload", b"x", "b.txt"),
        ("upload", b"x", "c.txt"),
    ]


def test_generic_and_instance_hooks_accumulate() -> None:
    log = CallLog()
    storage = _storage(log, "custom")
    storage.pre("custom", "exists", lambda filename: log.record("instance"))
    storage.pre("exists", lambda filename: log.record("generic"))

    async def scenario() -> bool:
        client = await storage.get("custom")
        return await client.exists("a.txt")

    assert _run(scenario()) is False
    assert log.names() == ["instance", "generic", "exists"]


def test_post_hook_receives_result() -> None:
    log = CallLog()
    storage = _storage(log, "custom")
    storage.post("custom", "exists", lambda result, filename: log.record("post", result))

    async def scenario() -> None:
        client = await storage.get("custom")
        await client.upload(b"x", "a.txt")
        await client.exists("a.txt")

    _run(scenario())

    assert log.events[-1] == ("post", True)


def test_hook_registration_errors_are_synchronous() -> None:
    storage = _storage(CallLog(), "custom")

    with pytest.raises(MissingConfigurationError):
        storage.pre("missing", "upload", lambda *args: None)
    with pytest.raises(UnknownMethodError):
        storage.post("custom", "rename", lambda *args: None)
    with pytest.raises(TypeError):
        storage.pre("upload")


def test_registration_is_chainable() -> None:
    storage = _storage(CallLog(), "custom")
    hook = lambda *args: None  # noqa: E731

    assert storage.pre("custom", "upload", hook).post("upload", hook) is storage
    client = storage._resolve("custom")
    assert client.hooks("pre", "upload") == [hook]
    assert client.hooks("post", "upload") == [hook]


def test_generic_hook_is_all_or_nothing() -> None:
    log = CallLog()
    storage = Storage(
        {"a": {"provider": FakeProvider, "log": log}, "b": {"provider": PlainProvider}}
    )
    hook = lambda filename: log.record("pre-download")  # noqa: E731

    with pytest.raises(UnknownMethodError):
        storage.pre("download", hook)

    assert storage._resolve("a").hooks("pre", "download") == []

    storage.pre("a", "download", hook)
    assert storage._resolve("a").hooks("pre", "download") == [hook]


def test_non_callable_generic_hook_attaches_nowhere() -> None:
    storage = _storage(CallLog(), "a", "b")

    with pytest.raises(TypeError):
        storage.post("upload", "not callable")

    assert storage._resolve("a").hooks("post", "upload") == []
    assert storage._resolve("b").hooks("post", "upload") == []
