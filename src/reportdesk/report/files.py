"""Task output files: listing with download links, retry of failed conversions."""

import uuid
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.config import Settings
from reportdesk.db.models.task_file import ReportTaskFile
from reportdesk.db.repos.task_file_repo import TaskFileRepo
from reportdesk.db.repos.task_repo import TaskRepo
from reportdesk.db.session import utcnow
from reportdesk.domain.enums import FileStatus, SortOrder
from reportdesk.domain.errors import BadRequestError, ConflictError, FeatureNotImplementedError, NotFoundError


class PresignedUrl(BaseModel):
    url: str
    expires_at: datetime


def storage_url_for(settings: Settings, task_id: uuid.UUID, file_name: str) -> str:
    return f"s3://{settings.storage_bucket_name}/reports/{task_id}/{file_name}"


def presign(settings: Settings, file_id: uuid.UUID, file_name: str, now: Optional[datetime] = None) -> PresignedUrl:
    """Time-limited download link served by the mock file storage."""
    now = now or utcnow()
    base = settings.mock_file_storage_url.rstrip("/")
    return PresignedUrl(
        url=f"{base}/{file_id}/{quote(file_name, safe='')}",
        expires_at=now + timedelta(hours=settings.presigned_url_expiration_hours),
    )


class TaskFilesService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._settings = settings
        self._tasks = TaskRepo(session)
        self._files = TaskFileRepo(session)

    async def list_files(
        self,
        task_id: uuid.UUID,
        status: Optional[FileStatus] = None,
        sort_by: str = "status",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[ReportTaskFile, Optional[PresignedUrl]]], int]:
        """Files of a task paired with a fresh download link (COMPLETED files only)."""
        if await self._tasks.get_by_id(task_id) is None:
            raise NotFoundError(f"Task with id '{task_id}' not found")

        files, total = await self._files.list_for_task(
            task_id,
            status=status.value if status else None,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=offset,
        )
        now = utcnow()
        return [
            (f, presign(self._settings, f.id, f.file_name, now) if f.status == FileStatus.COMPLETED.value else None)
            for f in files
        ], total

    async def retry_file(self, task_id: uuid.UUID, file_id: uuid.UUID) -> None:
        if await self._tasks.get_by_id(task_id) is None:
            raise NotFoundError(f"Task with id '{task_id}' not found")
        task_file = await self._files.get_by_id(file_id)
        if task_file is None:
            raise NotFoundError(f"File with id '{file_id}' not found")
        if task_file.task_id != task_id:
            raise BadRequestError(f"File '{file_id}' does not belong to task '{task_id}'")
        if task_file.status != FileStatus.FAILED.value:
            raise ConflictError(f"Only FAILED files can be retried, file is {task_file.status}")
        raise FeatureNotImplementedError("Retrying file conversion is not implemented yet")
