import asyncio
import json
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable


class JsonDocumentStore:
    """One JSON document on disk. Every read-modify-write runs under a single asyncio lock.

    The lock only serializes writers inside this process, so each document has exactly one
    owning process (the API). Writes go to a uniquely named temp file in the same directory
    and are renamed over the target, so a crash mid-write never leaves a truncated document.
    File I/O runs in a worker thread to keep the event loop free.
    """

    def __init__(self, path: Path, default_factory: Callable[[], dict[str, Any]]) -> None:
        self.path = path
        self._default_factory = default_factory
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return self._default_factory()
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _dump(self, document: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(document, tmp, indent=2, ensure_ascii=False)
        try:
            os.replace(tmp.name, self.path)
        except OSError:
            os.unlink(tmp.name)
            raise

    async def read(self) -> dict[str, Any]:
        async with self._lock:
            return await asyncio.to_thread(self._load)

    @asynccontextmanager
    async def update(self) -> AsyncIterator[dict[str, Any]]:
        """Yield the document for in-place edits; persisted only if the block exits cleanly."""
        async with self._lock:
            document = await asyncio.to_thread(self._load)
            yield document
            await asyncio.to_thread(self._dump, document)
