import uuid
from datetime import datetime
from typing import Optional

from reportdesk.api.schemas.base import CamelModel, Pagination
from reportdesk.db.models.task_file import ReportTaskFile
from reportdesk.report.files import PresignedUrl


class TaskFileResponse(CamelModel):
    id: uuid.UUID
    task_id: uuid.UUID
    file_name: str
    file_size: int
    file_type: str
    status: str
    storage_url: str
    download_url: Optional[str] = None
    download_url_expires_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_file(cls, task_file: ReportTaskFile, link: Optional[PresignedUrl]) -> "TaskFileResponse":
        response = cls.model_validate(task_file)
        response.download_url = link.url if link else None
        response.download_url_expires_at = link.expires_at if link else None
        return response


class TaskFileList(CamelModel):
    task_id: uuid.UUID
    files: list[TaskFileResponse]
    pagination: Pagination
