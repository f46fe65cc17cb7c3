"""Markdown task manifest (``tasks-manifest.json``): browsing, metadata edits, YouTrack links."""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Optional

from reportdesk.domain.enums import LocalTaskPriority, LocalTaskStatus
from reportdesk.domain.errors import ConflictError, NotFoundError
from reportdesk.domain.models.youtrack import LocalTask
from reportdesk.infra.youtrack.json_store import JsonDocumentStore
from reportdesk.infra.youtrack.projects import ProjectStore

logger = logging.getLogger(__name__)

# Line under the "## Status" heading of a task file.
STATUS_LABELS: dict[LocalTaskStatus, str] = {
    LocalTaskStatus.BACKLOG: "📋 Backlog",
    LocalTaskStatus.PLANNED: "📅 Planned",
    LocalTaskStatus.IN_PROGRESS: "⏳ In progress",
    LocalTaskStatus.COMPLETED: "✅ Completed",
    LocalTaskStatus.CANCELLED: "❌ Cancelled",
}
_STATUS_LINE = re.compile(r"(^## Status\n)(.+)$", re.MULTILINE)


def _issue_ids(raw: dict[str, Any]) -> list[str]:
    ids = raw.get("youtrackIssueIds") or []
    return [i for i in ids if isinstance(i, str) and i]


def _tags(raw: dict[str, Any]) -> list[str]:
    return [t for t in raw.get("tags") or [] if isinstance(t, str) and t.strip()]


def _find(doc: dict[str, Any], task_id: str) -> dict[str, Any]:
    for raw in doc.get("tasks", []):
        if raw.get("id") == task_id:
            return raw
    raise NotFoundError(f"Task with id '{task_id}' not found")


def _read_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8") if path.is_file() else ""


def _rewrite_status_line(path: Path, status: LocalTaskStatus) -> None:
    if not path.is_file():
        return
    content = path.read_text(encoding="utf-8")
    updated = _STATUS_LINE.sub(lambda m: m.group(1) + STATUS_LABELS[status], content, count=1)
    if updated != content:
        path.write_text(updated, encoding="utf-8")


class LocalTaskStore:
    def __init__(
        self,
        tasks_dir: Path,
        manifest: Optional[JsonDocumentStore] = None,
        projects: Optional[ProjectStore] = None,
    ) -> None:
        self._tasks_dir = tasks_dir
        self._manifest = manifest or JsonDocumentStore(tasks_dir / "tasks-manifest.json", lambda: {"tasks": []})
        self._projects = projects or ProjectStore.in_dir(tasks_dir)

    def _to_task(self, raw: dict[str, Any], names: dict[str, str], content: str = "") -> LocalTask:
        data = dict(raw)
        data["priority"] = raw.get("priority") or LocalTaskPriority.MEDIUM.value
        data["youtrackIssueIds"] = _issue_ids(raw)
        data["tags"] = _tags(raw)
        data["project"] = names.get(raw.get("projectId") or "")
        data["content"] = content
        return LocalTask.model_validate(data)

    async def _project_names(self) -> dict[str, str]:
        return {p.id: p.name for p in await self._projects.list_projects()}

    async def list_tasks(self) -> list[LocalTask]:
        """Manifest entries in file order, without markdown bodies."""
        doc = await self._manifest.read()
        names = await self._project_names()
        return [self._to_task(raw, names) for raw in doc.get("tasks", [])]

    async def get_task(self, task_id: str) -> LocalTask:
        """Manifest entry plus the markdown body of its file."""
        doc = await self._manifest.read()
        raw = _find(doc, task_id)
        content = await asyncio.to_thread(_read_markdown, self._tasks_dir / raw["file"])
        return self._to_task(raw, await self._project_names(), content)

    async def update_meta(self, task_id: str, changes: dict[str, Any]) -> LocalTask:
        """Apply manifest field changes (camelCase keys).

        ``project`` is a name: it is resolved (or created) to a ``projectId``; None clears it.
        A status change is mirrored into the markdown file's status line.
        """
        changes = dict(changes)
        if "project" in changes:
            name = changes.pop("project")
            changes["projectId"] = (await self._projects.get_or_create(name)).id if name else None

        async with self._manifest.update() as doc:
            raw = _find(doc, task_id)
            raw.update(changes)
            if raw.get("projectId") is None:
                raw.pop("projectId", None)
            raw["priority"] = raw.get("priority") or LocalTaskPriority.MEDIUM.value
            updated = dict(raw)

        status = changes.get("status")
        if status:
            await asyncio.to_thread(_rewrite_status_line, self._tasks_dir / updated["file"], LocalTaskStatus(status))
        logger.info("Updated task %s: %s", task_id, ", ".join(sorted(changes)))
        return self._to_task(updated, await self._project_names())

    async def remove_project(self, project_id: str) -> int:
        """Clear ``projectId`` from every task that has it and drop the project. Returns tasks touched."""
        updated = 0
        async with self._manifest.update() as doc:
            for raw in doc.get("tasks", []):
                if raw.get("projectId") == project_id:
                    raw.pop("projectId")
                    updated += 1
        await self._projects.remove(project_id)
        logger.info("Removed project %s from %d task(s)", project_id, updated)
        return updated

    async def get_links(self, task_id: str) -> list[str]:
        doc = await self._manifest.read()
        return _issue_ids(_find(doc, task_id))

    async def add_link(self, task_id: str, issue_id: str) -> list[str]:
        async with self._manifest.update() as doc:
            raw = _find(doc, task_id)
            ids = _issue_ids(raw)
            if issue_id in ids:
                raise ConflictError(f"Link to YouTrack issue '{issue_id}' already exists")
            ids.append(issue_id)
            raw["youtrackIssueIds"] = ids
        return ids

    async def remove_link(self, task_id: str, issue_id: str) -> list[str]:
        async with self._manifest.update() as doc:
            raw = _find(doc, task_id)
            ids = _issue_ids(raw)
            if issue_id not in ids:
                raise NotFoundError(f"Link to YouTrack issue '{issue_id}' not found")
            ids.remove(issue_id)
            if ids:
                raw["youtrackIssueIds"] = ids
            else:
                raw.pop("youtrackIssueIds", None)
        return ids
