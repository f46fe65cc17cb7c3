import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from reportdesk.api.schemas.base import CamelModel, Pagination
from reportdesk.api.schemas.tasks import TaskResponse


class CreatePackageRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    created_by: str = Field(min_length=1, max_length=255)


class RenamePackageRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class PackageIdsRequest(CamelModel):
    package_ids: list[uuid.UUID] = Field(min_length=1)


class PackageTaskIdsRequest(CamelModel):
    task_ids: list[uuid.UUID] = Field(min_length=1)


class PackageResponse(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    created_by: str
    updated_at: datetime
    status: str
    last_copied_to_tfr_at: Optional[datetime] = None
    tasks_count: int
    total_size: int


class PackageList(CamelModel):
    packages: list[PackageResponse]
    pagination: Pagination


class PackageTaskResponse(TaskResponse):
    added_at: datetime


class PackageDetailResponse(PackageResponse):
    tasks: list[PackageTaskResponse]
    pagination: Pagination


class RenamePackageResponse(CamelModel):
    id: uuid.UUID
    name: str
    updated_at: datetime


class PackageDeleteItem(CamelModel):
    package_id: uuid.UUID
    success: bool
    reason: Optional[str] = None


class PackageDeleteResponse(CamelModel):
    deleted: int
    failed: int
    results: list[PackageDeleteItem]


class AddTasksError(CamelModel):
    task_id: uuid.UUID
    reason: str


class AddTasksResponse(CamelModel):
    added: int
    already_in_package: int
    not_found: int
    errors: list[AddTasksError]


class RemoveTasksItem(CamelModel):
    task_id: uuid.UUID
    success: bool
    reason: Optional[str] = None


class RemoveTasksResponse(CamelModel):
    removed: int
    failed: int
    results: list[RemoveTasksItem]


class CopyToTfrResponse(CamelModel):
    id: uuid.UUID
    last_copied_to_tfr_at: datetime
    message: str


class PackageHistoryEntry(CamelModel):
    status: str
    previous_status: Optional[str] = None
    changed_at: datetime
    changed_by: str
