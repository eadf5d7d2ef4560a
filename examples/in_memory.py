"""
Configure an instance, hook into its uploads, then upload, download and tear down.

Run from the repository root with the package installed:
    python examples/in_memory.py
"""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar

import structlog

from storage_api import Storage, StorageClient
from storage_api.logging import setup_logging

log = structlog.get_logger("storage-api.examples")


class InMemoryProvider(StorageClient):
    """Keeps files in a dict; `download` is hookable like the core operations."""

    hookable_methods: ClassVar[tuple[str, ...]] = ("upload", "remove", "exists", "download")

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        super().__init__(config)
        self.database = self.config.get("database", "default")
        self.files: dict[str, bytes] = {}
        self.connected = False

    async def upload(self, file: bytes, filename: str) -> None:
        self.files[filename] = file

    async def remove(self, filename: str) -> None:
        del self.files[filename]

    async def exists(self, filename: str) -> bool:
        return filename in self.files

    async def download(self, filename: str) -> bytes:
        return self.files[filename]

    async def _init(self) -> None:
        self.connected = True

    async def _exit(self) -> None:
        self.connected = False
        self.files.clear()


async def main() -> bytes:
    storage = Storage({"custom": {"provider": InMemoryProvider, "database": "test"}})

    storage.pre(
        "custom",
        "upload",
        lambda file, filename: log.info(
            "pre_upload", component="example", flow="example", meta={"file": filename}
        ),
    )
    storage.pre(
        "upload",
        lambda file, filename: log.info(
            "generic_pre_upload", component="example", flow="example", meta={"file": filename}
        ),
    )

    client = await storage.get("custom")
    try:
        await client.upload(b"license text", "testing/license.md")
        content = await client.download("testing/license.md")
    finally:
        await storage.exit()

    log.info(
        "example_completed", component="example", flow="example", meta={"bytes": len(content)}
    )
    return content


if __name__ == "__main__":
    setup_logging(plain_text=True)
    asyncio.run(main())
