from __future__ import annotations

import asyncio

from examples import in_memory


def test_example_flow_uploads_downloads_and_exits() -> None:
    assert asyncio.run(in_memory.main()) == b"license text"


def test_example_download_is_hookable() -> None:
    seen: list[str] = []
    client = in_memory.InMemoryProvider({"database": "test"})
    client.pre("download", lambda filename: seen.append(f"download:{filename}"))

    async def scenario() -> bytes:
        await client.upload(b"x", "a.txt")
        return await client.download("a.txt")

    assert asyncio.run(scenario()) == b"x"
    assert seen == ["download:a.txt"]
    assert client.database == "test"
