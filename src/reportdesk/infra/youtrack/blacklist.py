from pathlib import Path
from typing import Iterable, Optional, Sequence

from reportdesk.infra.youtrack.json_store import JsonDocumentStore


def _normalize(tags: Iterable[object]) -> list[str]:
    seen: dict[str, None] = {}
    for tag in tags:
        if isinstance(tag, str) and tag.strip():
            seen.setdefault(tag.strip(), None)
    return list(seen)


class TagsBlacklist:
    """Tags that are never sent to YouTrack."""

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    @classmethod
    def in_dir(cls, tasks_dir: Path) -> "TagsBlacklist":
        return cls(JsonDocumentStore(tasks_dir / "youtrack-tags-blacklist.json", lambda: {"blacklist": []}))

    async def get(self) -> list[str]:
        doc = await self._store.read()
        raw = doc.get("blacklist")
        return sorted(_normalize(raw)) if isinstance(raw, list) else []

    async def replace(self, tags: Sequence[str]) -> list[str]:
        normalized = sorted(_normalize(tags))
        async with self._store.update() as doc:
            doc["blacklist"] = normalized
        return normalized

    async def add_tag(self, tag: str) -> list[str]:
        async with self._store.update() as doc:
            current = _normalize(doc.get("blacklist") or [])
            tag = tag.strip()
            if tag and tag not in current:
                current.append(tag)
            doc["blacklist"] = sorted(current)
        return doc["blacklist"]

    async def remove_tag(self, tag: str) -> list[str]:
        async with self._store.update() as doc:
            tag = tag.strip()
            doc["blacklist"] = sorted(t for t in _normalize(doc.get("blacklist") or []) if t != tag)
        return doc["blacklist"]

    async def filter_tags(self, tags: Optional[Sequence[str]]) -> list[str]:
        """Drop blacklisted tags, comparing trimmed and case-insensitively."""
        if not tags:
            return []
        blocked = {t.lower() for t in await self.get()}
        return [t for t in tags if t.strip() and t.strip().lower() not in blocked]
