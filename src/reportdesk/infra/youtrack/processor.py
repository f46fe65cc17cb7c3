"""Create/link/unlink YouTrack issues now, or defer them to the queue when YouTrack is down."""

import asyncio
import logging
from typing import Any, Optional

from pydantic import BaseModel

from reportdesk.domain.enums import QueueOperationType
from reportdesk.domain.errors import DomainError, UpstreamUnavailableError
from reportdesk.domain.models.youtrack import (
    CustomFieldOverride,
    FieldValue,
    QueueOperation,
    QueueOperationData,
    TypedField,
)
from reportdesk.infra.youtrack.blacklist import TagsBlacklist
from reportdesk.infra.youtrack.client import YouTrackClient, YouTrackUnavailableError
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.queue import YouTrackQueue
from reportdesk.infra.youtrack.templates import TemplateStore

logger = logging.getLogger(__name__)

DEFAULT_FIELD_TYPE = "SingleEnumIssueCustomField"
PREVIEW_FIELDS = "idReadable,summary,state(name),priority(name)"


class SyncOutcome(BaseModel):
    local_task_id: str
    youtrack_issue_id: str = ""
    youtrack_issue_url: str = ""
    youtrack_issue_ids: list[str] = []
    queued: bool = False
    operation_id: Optional[str] = None


class OperationError(BaseModel):
    operation_id: str
    error: str


class ProcessingSummary(BaseModel):
    processed: int = 0
    failed: int = 0
    errors: list[OperationError] = []


class IssuePreview(BaseModel):
    id_readable: str
    summary: str = ""
    state: Optional[str] = None
    priority: Optional[str] = None


class IssueLink(BaseModel):
    youtrack_issue_id: str
    youtrack_issue_url: Optional[str] = None
    youtrack_data: Optional[IssuePreview] = None


def _field_value(value: Any) -> dict[str, Any]:
    if isinstance(value, str):
        return {"name": value}
    if isinstance(value, FieldValue):
        return value.model_dump(exclude_none=True)
    return dict(value)


def merge_custom_fields(
    template_fields: list[dict[str, Any]],
    overrides: Optional[dict[str, CustomFieldOverride]],
) -> list[dict[str, Any]]:
    """Overrides replace the template's fields when given.

    A typed override is used as is; a bare value keeps the template field's ``$type``,
    or falls back to a single-enum field when the template has no such field.
    """
    if not overrides:
        return template_fields
    by_name = {f["name"]: f for f in template_fields}
    merged = []
    for name, value in overrides.items():
        if isinstance(value, TypedField):
            merged.append({"name": name, "$type": value.type, "value": _field_value(value.value)})
        elif name in by_name:
            merged.append({**by_name[name], "value": _field_value(value)})
        else:
            merged.append({"name": name, "$type": DEFAULT_FIELD_TYPE, "value": _field_value(value)})
    return merged


def _named(issue: dict[str, Any], key: str) -> Optional[str]:
    value = issue.get(key)
    return value.get("name") if isinstance(value, dict) else None


class YouTrackSyncService:
    def __init__(
        self,
        client: YouTrackClient,
        queue: YouTrackQueue,
        tasks: LocalTaskStore,
        templates: TemplateStore,
        blacklist: TagsBlacklist,
        max_attempts: int = 5,
    ) -> None:
        self._client = client
        self._queue = queue
        self._tasks = tasks
        self._templates = templates
        self._blacklist = blacklist
        self._max_attempts = max_attempts
        self._pass_lock = asyncio.Lock()

    def is_available(self) -> bool:
        return self._client.is_available()

    # --- remote actions ---

    async def _create_issue(
        self,
        task_id: str,
        template_id: str,
        custom_fields: Optional[dict[str, CustomFieldOverride]],
    ) -> dict[str, Any]:
        task = await self._tasks.get_task(task_id)
        # local task number and branch stay out of the YouTrack issue
        rendered = await self._templates.render(
            template_id,
            {"taskId": "", "title": task.title, "content": task.content, "status": task.status, "branch": ""},
        )
        project_id = await self._client.get_project_id() if rendered.project_id == "0-0" else rendered.project_id

        description = rendered.description
        tags = await self._blacklist.filter_tags(task.tags)
        if tags:
            description = f"{description}\n\nTags: {', '.join(tags)}"

        issue = await self._client.create_issue(
            {
                "project": {"id": project_id},
                "summary": rendered.summary,
                "description": description,
                "customFields": merge_custom_fields(rendered.custom_fields, custom_fields),
            }
        )
        issue_id = issue.get("idReadable") or issue["id"]

        if rendered.parent_issue_id:
            try:
                await self._client.apply_command([issue_id], f"subtask of {rendered.parent_issue_id}")
            except DomainError:
                logger.exception("Failed to make %s a subtask of %s", issue_id, rendered.parent_issue_id)

        await self._tasks.add_link(task_id, issue_id)
        logger.info("Created YouTrack issue %s for task %s", issue_id, task_id)
        return {"youtrackIssueId": issue_id, "youtrackIssueUrl": self._client.issue_url(issue_id)}

    async def _link_issue(self, task_id: str, issue_id: str) -> dict[str, Any]:
        await self._client.get_issue(issue_id)
        await self._tasks.add_link(task_id, issue_id)
        return {"success": True}

    async def _unlink_issue(self, task_id: str, issue_id: str) -> dict[str, Any]:
        await self._tasks.remove_link(task_id, issue_id)
        return {"success": True}

    # --- request flows: run now, or queue when YouTrack is unreachable ---

    async def create_issue(
        self,
        task_id: str,
        template_id: str = "default",
        custom_fields: Optional[dict[str, CustomFieldOverride]] = None,
    ) -> SyncOutcome:
        task = await self._tasks.get_task(task_id)
        data = QueueOperationData(task_id=task_id, template_id=template_id, custom_fields=custom_fields)
        if self.is_available():
            try:
                result = await self._create_issue(task_id, template_id, custom_fields)
            except UpstreamUnavailableError as e:
                logger.warning("YouTrack unavailable, deferring issue creation for %s: %s", task_id, e.detail)
            else:
                return SyncOutcome(
                    local_task_id=task_id,
                    youtrack_issue_id=result["youtrackIssueId"],
                    youtrack_issue_url=result["youtrackIssueUrl"],
                    youtrack_issue_ids=await self._tasks.get_links(task_id),
                )
        operation = await self._queue.enqueue(QueueOperationType.CREATE_ISSUE, data)
        return SyncOutcome(
            local_task_id=task_id,
            youtrack_issue_ids=task.youtrack_issue_ids,
            queued=True,
            operation_id=operation.id,
        )

    async def link_issue(self, task_id: str, issue_id: str) -> SyncOutcome:
        current = await self._tasks.get_links(task_id)
        if self.is_available():
            try:
                await self._link_issue(task_id, issue_id)
            except UpstreamUnavailableError as e:
                logger.warning("YouTrack unavailable, deferring link %s -> %s: %s", task_id, issue_id, e.detail)
            else:
                return SyncOutcome(
                    local_task_id=task_id,
                    youtrack_issue_id=issue_id,
                    youtrack_issue_url=self._client.issue_url(issue_id),
                    youtrack_issue_ids=await self._tasks.get_links(task_id),
                )
        operation = await self._queue.enqueue(
            QueueOperationType.LINK_ISSUE, QueueOperationData(task_id=task_id, youtrack_issue_id=issue_id)
        )
        return SyncOutcome(
            local_task_id=task_id,
            youtrack_issue_id=issue_id,
            youtrack_issue_ids=current,
            queued=True,
            operation_id=operation.id,
        )

    async def unlink_issue(self, task_id: str, issue_id: str) -> SyncOutcome:
        current = await self._tasks.get_links(task_id)
        if self.is_available():
            remaining = await self._tasks.remove_link(task_id, issue_id)
            return SyncOutcome(local_task_id=task_id, youtrack_issue_id=issue_id, youtrack_issue_ids=remaining)
        operation = await self._queue.enqueue(
            QueueOperationType.UNLINK_ISSUE, QueueOperationData(task_id=task_id, youtrack_issue_id=issue_id)
        )
        return SyncOutcome(
            local_task_id=task_id,
            youtrack_issue_id=issue_id,
            youtrack_issue_ids=current,
            queued=True,
            operation_id=operation.id,
        )

    async def get_links(self, task_id: str, include_details: bool = False) -> list[IssueLink]:
        issue_ids = await self._tasks.get_links(task_id)
        fetch = include_details and self.is_available()
        links = []
        for issue_id in issue_ids:
            link = IssueLink(youtrack_issue_id=issue_id)
            if self._client.is_configured():
                link.youtrack_issue_url = self._client.issue_url(issue_id)
            if fetch:
                try:
                    link.youtrack_data = await self.preview_issue(issue_id)
                except UpstreamUnavailableError:
                    logger.warning("No details for issue %s, YouTrack unavailable", issue_id)
                    fetch = False
                except DomainError as e:
                    logger.warning("No details for issue %s: %s", issue_id, e.detail)
            links.append(link)
        return links

    async def preview_issue(self, issue_id: str) -> IssuePreview:
        if not self.is_available():
            raise YouTrackUnavailableError("YouTrack is not configured or temporarily unavailable.")
        issue = await self._client.get_issue(issue_id, fields=PREVIEW_FIELDS)
        return IssuePreview(
            id_readable=issue.get("idReadable") or issue.get("id") or issue_id,
            summary=issue.get("summary") or "",
            state=_named(issue, "state"),
            priority=_named(issue, "priority"),
        )

    # --- queue processing ---

    async def process_operation(self, operation: QueueOperation) -> bool:
        """One attempt at a queued operation. Failures are recorded on the ledger and re-raised.

        Returns False without touching YouTrack when the operation could not be claimed.
        """
        if await self._queue.mark_processing(operation.id) is None:
            return False
        data = operation.data
        try:
            if operation.type == QueueOperationType.CREATE_ISSUE:
                result = await self._create_issue(data.task_id, data.template_id or "default", data.custom_fields)
            elif operation.type == QueueOperationType.LINK_ISSUE:
                result = await self._link_issue(data.task_id, data.youtrack_issue_id or "")
            else:
                result = await self._unlink_issue(data.task_id, data.youtrack_issue_id or "")
        except Exception as e:
            await self._queue.mark_failed_attempt(operation.id, getattr(e, "detail", None) or str(e), self._max_attempts)
            raise
        await self._queue.mark_completed(operation.id, result)
        return True

    async def process_pending_operations(self) -> ProcessingSummary:
        """Run one pass over the pending operations. Overlapping callers wait for the running pass."""
        async with self._pass_lock:
            return await self._run_pass()

    async def _run_pass(self) -> ProcessingSummary:
        summary = ProcessingSummary()
        if not self.is_available():
            return summary

        for operation in await self._queue.pending():
            try:
                attempted = await self.process_operation(operation)
            except Exception as e:
                summary.failed += 1
                summary.errors.append(OperationError(operation_id=operation.id, error=getattr(e, "detail", None) or str(e)))
                if self._client.is_unavailable():
                    logger.warning("YouTrack went unavailable, stopping queue pass")
                    break
            else:
                if attempted:
                    summary.processed += 1

        logger.info("YouTrack queue pass: %d processed, %d failed", summary.processed, summary.failed)
        return summary
