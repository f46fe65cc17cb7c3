from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from reportdesk.api.schemas.base import CamelModel
from reportdesk.domain.models.youtrack import CustomFieldOverride, TypedField


class CreateIssueRequest(CamelModel):
    task_id: str
    template_id: str = "default"
    custom_fields: Optional[dict[str, CustomFieldOverride]] = None


class LinkIssueRequest(CamelModel):
    youtrack_issue_id: str = Field(min_length=1)


class SyncResponse(CamelModel):
    local_task_id: str
    youtrack_issue_id: str
    youtrack_issue_url: str
    youtrack_issue_ids: list[str]
    queued: Optional[bool] = None
    operation_id: Optional[str] = None


class UnlinkResponse(CamelModel):
    local_task_id: str
    removed_issue_id: str
    youtrack_issue_ids: list[str]
    queued: Optional[bool] = None
    operation_id: Optional[str] = None


class IssuePreviewResponse(CamelModel):
    id_readable: str
    summary: str
    state: Optional[str] = None
    priority: Optional[str] = None


class IssueLinkResponse(CamelModel):
    youtrack_issue_id: str
    youtrack_issue_url: Optional[str] = None
    youtrack_data: Optional[IssuePreviewResponse] = None


class TaskLinksResponse(CamelModel):
    local_task_id: str
    youtrack_issue_ids: list[str]
    links: list[IssueLinkResponse]


class ConfigResponse(CamelModel):
    base_url: Optional[str] = None


class TemplateUpdateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[str] = None
    parent_issue_id: Optional[str] = None
    summary_template: Optional[str] = None
    description_template: Optional[str] = None
    custom_fields: Optional[dict[str, TypedField]] = None


class QueueOperationSummary(CamelModel):
    id: str
    type: str
    status: str
    created_at: datetime
    attempts: int
    last_attempt_at: Optional[datetime] = None
    error: Optional[str] = None
    data: dict[str, Any]


class QueueStatusResponse(CamelModel):
    pending: int
    processing: int
    completed: int
    failed: int
    operations: list[QueueOperationSummary]


class OperationErrorResponse(CamelModel):
    operation_id: str
    error: str


class ProcessQueueResponse(CamelModel):
    processed: int
    failed: int
    errors: list[OperationErrorResponse]


class BlacklistResponse(CamelModel):
    blacklist: list[str]


class BlacklistReplaceRequest(CamelModel):
    blacklist: list[str]


class BlacklistAddRequest(CamelModel):
    tag: str
