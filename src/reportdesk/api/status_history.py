import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import get_db
from reportdesk.api.schemas.base import Pagination
from reportdesk.api.schemas.history import HistoryEntryResponse, HistoryList
from reportdesk.report.lifecycle import TaskLifecycleService

router = APIRouter(prefix="/api/v1/report-6406/tasks", tags=["report-6406-status-history"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("/{task_id}/status-history", response_model=HistoryList)
async def get_status_history(
    task_id: uuid.UUID,
    db: DbDep,
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> HistoryList:
    entries, total = await TaskLifecycleService(db).get_history(task_id, limit=limit, offset=page * limit)
    return HistoryList(
        task_id=task_id,
        history=[HistoryEntryResponse.model_validate(e) for e in entries],
        pagination=Pagination.build(page, limit, total),
    )
