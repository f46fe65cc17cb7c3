"""Issue templates stored as ``youtrack-templates/{id}.json``."""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from reportdesk.domain.errors import ConflictError, NotFoundError
from reportdesk.domain.models.youtrack import YouTrackTemplate

logger = logging.getLogger(__name__)

_TEMPLATE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")
_TITLE_PREFIX = re.compile(r"^\s*[A-Z]+-\d+:\s*", re.IGNORECASE)
_VARIABLES = ("taskId", "title", "content", "status", "branch")


def clean_title(title: str) -> str:
    """``TASK-053: Fix export`` -> ``Fix export``."""
    return _TITLE_PREFIX.sub("", title, count=1).strip()


def clean_content(content: str) -> str:
    """Keep only what follows the first ``---`` line (status/branch preamble goes)."""
    if not content:
        return ""
    lines = content.splitlines()
    for index, line in enumerate(lines):
        if line.strip() == "---":
            return "\n".join(lines[index + 1:]).strip()
    return content.strip()


def substitute(template: str, variables: dict[str, str]) -> str:
    result = template
    for name in _VARIABLES:
        result = result.replace("{{" + name + "}}", variables.get(name) or "")
    return result


class RenderedTemplate(BaseModel):
    summary: str
    description: str
    custom_fields: list[dict[str, Any]]
    project_id: str
    parent_issue_id: Optional[str] = None


class TemplateStore:
    def __init__(self, templates_dir: Path) -> None:
        self._dir = templates_dir
        self._lock = asyncio.Lock()

    @classmethod
    def in_dir(cls, tasks_dir: Path) -> "TemplateStore":
        return cls(tasks_dir / "youtrack-templates")

    def _path(self, template_id: str) -> Path:
        if not _TEMPLATE_ID.match(template_id):
            raise NotFoundError(f"Template with id '{template_id}' not found")
        return self._dir / f"{template_id}.json"

    def _write(self, template: YouTrackTemplate) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        payload = template.model_dump(mode="json", by_alias=True, exclude_none=True)
        self._path(template.id).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def _read(self, template_id: str) -> Optional[YouTrackTemplate]:
        path = self._path(template_id)
        if not path.is_file():
            return None
        return YouTrackTemplate.model_validate_json(path.read_text(encoding="utf-8"))

    def _load_all(self) -> list[YouTrackTemplate]:
        if not self._dir.is_dir():
            return []
        templates = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                templates.append(YouTrackTemplate.model_validate_json(path.read_text(encoding="utf-8")))
            except ValidationError as e:
                logger.warning("Skipping invalid template %s: %s", path.name, e)
        return templates

    def _unlink(self, template_id: str) -> None:
        path = self._path(template_id)
        if not path.is_file():
            raise NotFoundError(f"Template with id '{template_id}' not found")
        path.unlink()

    async def list_templates(self) -> list[YouTrackTemplate]:
        return await asyncio.to_thread(self._load_all)

    async def get(self, template_id: str) -> YouTrackTemplate:
        template = await asyncio.to_thread(self._read, template_id)
        if template is None:
            raise NotFoundError(f"Template with id '{template_id}' not found")
        return template

    async def create(self, template: YouTrackTemplate) -> YouTrackTemplate:
        async with self._lock:
            if await asyncio.to_thread(self._read, template.id) is not None:
                raise ConflictError(f"Template with id '{template.id}' already exists")
            await asyncio.to_thread(self._write, template)
        return template

    async def update(self, template_id: str, changes: dict[str, Any]) -> YouTrackTemplate:
        """Merge ``changes`` (snake_case keys) over the stored template; the id never changes."""
        async with self._lock:
            existing = await asyncio.to_thread(self._read, template_id)
            if existing is None:
                raise NotFoundError(f"Template with id '{template_id}' not found")
            merged = {**existing.model_dump(), **changes, "id": template_id}
            template = YouTrackTemplate.model_validate(merged)
            await asyncio.to_thread(self._write, template)
        return template

    async def delete(self, template_id: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._unlink, template_id)

    async def render(self, template_id: str, variables: dict[str, str]) -> RenderedTemplate:
        template = await asyncio.to_thread(self._read, template_id)
        if template is None:
            raise NotFoundError(f"Template '{template_id}' not found")

        cleaned = {
            **variables,
            "title": clean_title(variables.get("title", "")),
            "content": clean_content(variables.get("content", "")),
        }
        custom_fields = [
            {"name": name, "$type": field.type, "value": field.value.model_dump(exclude_none=True)}
            for name, field in (template.custom_fields or {}).items()
        ]
        parent = (template.parent_issue_id or "").strip() or None
        return RenderedTemplate(
            summary=substitute(template.summary_template, cleaned),
            description=substitute(template.description_template, cleaned),
            custom_fields=custom_fields,
            project_id=template.project_id,
            parent_issue_id=parent,
        )
