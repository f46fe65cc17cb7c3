import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from reportdesk.api.schemas.base import CamelModel, Pagination
from reportdesk.db.models.report_task import ReportTask
from reportdesk.domain.enums import Currency, TaskStatus
from reportdesk.domain.models.history import Metadata
from reportdesk.domain.models.status import get_permissions


class CreateTaskRequest(CamelModel):
    branch_id: uuid.UUID
    period_start: date
    period_end: date
    account_mask: Optional[str] = Field(None, max_length=20)
    account_second_order: Optional[str] = Field(None, max_length=2)
    currency: Currency
    format: str
    report_type: str
    source: Optional[str] = Field(None, max_length=20)

    @field_validator("period_end")
    @classmethod
    def _period_order(cls, v: date, info: ValidationInfo) -> date:
        start = info.data.get("period_start")
        if start is not None and v < start:
            raise ValueError("periodEnd must be on or after periodStart")
        return v


class TaskResponse(CamelModel):
    id: uuid.UUID
    created_at: datetime
    created_by: Optional[str] = None
    branch_id: uuid.UUID
    branch_name: str
    period_start: date
    period_end: date
    account_mask: Optional[str] = None
    account_second_order: Optional[str] = None
    currency: str
    format: str
    report_type: str
    source: Optional[str] = None
    status: str
    file_size: Optional[int] = None
    files_count: int = 0
    file_url: Optional[str] = None
    error_message: Optional[str] = None
    last_status_changed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: datetime
    can_cancel: bool = False
    can_delete: bool = False
    can_start: bool = False

    @classmethod
    def from_task(cls, task: ReportTask) -> "TaskResponse":
        perms = get_permissions(task.status)
        return cls.model_validate(task).model_copy(
            update={"can_cancel": perms.can_cancel, "can_delete": perms.can_delete, "can_start": perms.can_start}
        )


class TaskList(CamelModel):
    tasks: list[TaskResponse]
    pagination: Pagination


class TaskIdsRequest(CamelModel):
    ids: list[uuid.UUID] = Field(min_length=1)


class CancelTaskResponse(CamelModel):
    id: uuid.UUID
    status: str
    updated_at: datetime


class UpdateStatusRequest(CamelModel):
    status: TaskStatus
    comment: Optional[str] = None
    metadata: Optional[Metadata] = None


class BulkDeleteItem(CamelModel):
    task_id: uuid.UUID
    success: bool
    reason: Optional[str] = None


class BulkDeleteResponse(CamelModel):
    deleted: int
    failed: int
    results: list[BulkDeleteItem]


class BulkCancelItem(CamelModel):
    task_id: uuid.UUID
    success: bool
    status: Optional[str] = None
    updated_at: Optional[datetime] = None
    reason: Optional[str] = None


class BulkCancelResponse(CamelModel):
    cancelled: int
    failed: int
    results: list[BulkCancelItem]


class BulkStartItem(CamelModel):
    task_id: uuid.UUID
    success: bool
    status: Optional[str] = None
    started_at: Optional[datetime] = None
    reason: Optional[str] = None


class BulkStartResponse(CamelModel):
    started: int
    failed: int
    results: list[BulkStartItem]
