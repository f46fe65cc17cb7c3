import uuid
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import get_db, get_settings
from reportdesk.api.schemas.base import Pagination
from reportdesk.api.schemas.files import TaskFileList, TaskFileResponse
from reportdesk.config import Settings
from reportdesk.domain.enums import FileStatus, SortOrder
from reportdesk.report.files import TaskFilesService

router = APIRouter(prefix="/api/v1/report-6406/tasks", tags=["report-6406-task-files"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get("/{task_id}/files", response_model=TaskFileList)
async def list_task_files(
    task_id: uuid.UUID,
    db: DbDep,
    settings: SettingsDep,
    status: Optional[FileStatus] = Query(None),
    sort_by: Literal["status", "fileName", "fileSize", "createdAt"] = Query("status", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> TaskFileList:
    files, total = await TaskFilesService(db, settings).list_files(
        task_id, status=status, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=page * limit
    )
    return TaskFileList(
        task_id=task_id,
        files=[TaskFileResponse.from_file(f, link) for f, link in files],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/{task_id}/files/{file_id}/retry")
async def retry_task_file(task_id: uuid.UUID, file_id: uuid.UUID, db: DbDep, settings: SettingsDep) -> None:
    """Always ends in an error response: 404, 400, 409, or 501 once the file qualifies."""
    await TaskFilesService(db, settings).retry_file(task_id, file_id)
