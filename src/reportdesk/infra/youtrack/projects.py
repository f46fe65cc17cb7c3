"""Project names for local tasks (``projects-metadata.json``).

The file maps project id to ``{"name": ...}``; the manifest only stores ``projectId``.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from reportdesk.domain.errors import BadRequestError, NotFoundError
from reportdesk.domain.models.youtrack import Project
from reportdesk.infra.youtrack.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)


def _projects(doc: dict[str, Any]) -> dict[str, dict[str, Any]]:
    projects = doc.get("projects")
    if not isinstance(projects, dict):
        projects = {}
        doc["projects"] = projects
    return projects


def _name(record: Any) -> Optional[str]:
    if isinstance(record, dict) and isinstance(record.get("name"), str):
        return record["name"].strip()
    return None


def _clean(name: str) -> str:
    trimmed = name.strip()
    if not trimmed:
        raise BadRequestError("Project name must not be empty")
    return trimmed


class ProjectStore:
    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    @classmethod
    def in_dir(cls, tasks_dir: Path) -> "ProjectStore":
        return cls(JsonDocumentStore(tasks_dir / "projects-metadata.json", lambda: {"projects": {}}))

    async def list_projects(self) -> list[Project]:
        doc = await self._store.read()
        projects = []
        for project_id, record in _projects(doc).items():
            name = _name(record)
            if name is not None:
                projects.append(Project(id=project_id, name=name))
        return projects

    async def get(self, project_id: str) -> Optional[Project]:
        for project in await self.list_projects():
            if project.id == project_id:
                return project
        return None

    async def get_or_create(self, name: str) -> Project:
        """Case-insensitive lookup by name; creates the project when no match exists."""
        trimmed = _clean(name)
        async with self._store.update() as doc:
            projects = _projects(doc)
            for project_id, record in projects.items():
                existing = _name(record)
                if existing is not None and existing.lower() == trimmed.lower():
                    return Project(id=project_id, name=existing)
            project_id = str(uuid.uuid4())
            projects[project_id] = {"name": trimmed}
        logger.info("Created project %s (%s)", trimmed, project_id)
        return Project(id=project_id, name=trimmed)

    async def rename(self, project_id: str, name: str) -> Project:
        trimmed = _clean(name)
        async with self._store.update() as doc:
            projects = _projects(doc)
            if _name(projects.get(project_id)) is None:
                raise NotFoundError(f"Project with id '{project_id}' not found")
            projects[project_id] = {**projects[project_id], "name": trimmed}
        return Project(id=project_id, name=trimmed)

    async def remove(self, project_id: str) -> bool:
        async with self._store.update() as doc:
            return _projects(doc).pop(project_id, None) is not None
