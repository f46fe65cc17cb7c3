from typing import Optional

from pydantic import Field

from reportdesk.api.schemas.base import CamelModel
from reportdesk.domain.enums import LocalTaskPriority, LocalTaskStatus


class LocalTaskResponse(CamelModel):
    id: str
    title: str
    status: str
    priority: str
    file: str
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    branch: Optional[str] = None
    youtrack_issue_ids: list[str] = []
    tags: list[str] = []
    project: Optional[str] = None


class LocalTaskDetailResponse(LocalTaskResponse):
    content: str


class UpdateLocalTaskRequest(CamelModel):
    """Only the fields present in the body are written."""

    title: Optional[str] = None
    status: Optional[LocalTaskStatus] = None
    priority: Optional[LocalTaskPriority] = None
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    branch: Optional[str] = None
    tags: Optional[list[str]] = None
    project: Optional[str] = None


class ProjectResponse(CamelModel):
    id: str
    name: str


class ProjectRequest(CamelModel):
    name: str = Field(min_length=1)


class RemoveProjectResponse(CamelModel):
    updated: int
