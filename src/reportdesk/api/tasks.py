import uuid
from datetime import date
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import UserContext, get_db, get_settings, get_user_context
from reportdesk.api.schemas.base import Pagination
from reportdesk.api.schemas.export import ExportRequest, ExportResponse
from reportdesk.api.schemas.tasks import (
    BulkCancelItem,
    BulkCancelResponse,
    BulkDeleteItem,
    BulkDeleteResponse,
    BulkStartItem,
    BulkStartResponse,
    CancelTaskResponse,
    CreateTaskRequest,
    TaskIdsRequest,
    TaskList,
    TaskResponse,
    UpdateStatusRequest,
)
from reportdesk.config import Settings
from reportdesk.db.repos.task_repo import TaskRepo
from reportdesk.domain.enums import ReportType, SortOrder, TaskStatus
from reportdesk.domain.errors import BadRequestError
from reportdesk.report.bulk import BulkOperationExecutor
from reportdesk.report.export import CsvExportService
from reportdesk.report.lifecycle import TaskLifecycleService

router = APIRouter(prefix="/api/v1/report-6406/tasks", tags=["report-6406-tasks"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
UserDep = Annotated[UserContext, Depends(get_user_context)]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(body: CreateTaskRequest, db: DbDep, user: UserDep) -> TaskResponse:
    task = await TaskLifecycleService(db).create_task(
        branch_id=body.branch_id,
        period_start=body.period_start,
        period_end=body.period_end,
        currency=body.currency.value,
        format=body.format,
        report_type=body.report_type,
        source=body.source,
        account_mask=body.account_mask,
        account_second_order=body.account_second_order,
        actor=user.user_name,
    )
    await db.commit()
    return TaskResponse.from_task(task)


@router.get("", response_model=TaskList)
async def list_tasks(
    db: DbDep,
    status: Optional[list[TaskStatus]] = Query(None),
    branch_id: Optional[uuid.UUID] = Query(None, alias="branchId"),
    report_type: Optional[list[ReportType]] = Query(None, alias="reportType"),
    period_start_from: Optional[date] = Query(None, alias="periodStartFrom"),
    period_start_to: Optional[date] = Query(None, alias="periodStartTo"),
    # A package id, or "null" for tasks that belong to no package
    package_id: Optional[str] = Query(None, alias="packageId"),
    sort_by: Literal["createdAt", "branchId", "status", "periodStart"] = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> TaskList:
    tasks, total = await TaskRepo(db).list_tasks(
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=page * limit,
        statuses=[s.value for s in status] if status else None,
        branch_ids=[branch_id] if branch_id else None,
        report_types=[r.value for r in report_type] if report_type else None,
        period_start_from=period_start_from,
        period_start_to=period_start_to,
        **_package_filter(package_id),
    )
    return TaskList(
        tasks=[TaskResponse.from_task(t) for t in tasks],
        pagination=Pagination.build(page, limit, total),
    )


def _package_filter(value: Optional[str]) -> dict:
    if value is None:
        return {}
    if value == "null":
        return {"without_package": True}
    try:
        return {"package_id": uuid.UUID(value)}
    except ValueError:
        raise BadRequestError(f"Invalid packageId: {value}") from None


@router.delete("", response_model=BulkDeleteResponse)
async def bulk_delete(body: TaskIdsRequest, db: DbDep, settings: SettingsDep) -> BulkDeleteResponse:
    result = await BulkOperationExecutor(db, settings).delete(body.ids)
    return BulkDeleteResponse(
        deleted=result.succeeded,
        failed=result.failed,
        results=[BulkDeleteItem(task_id=r.task_id, success=r.success, reason=r.reason) for r in result.results],
    )


@router.post("/start", response_model=BulkStartResponse)
async def bulk_start(body: TaskIdsRequest, db: DbDep, settings: SettingsDep, user: UserDep) -> BulkStartResponse:
    """Start a batch. 507 for the whole call when storage cannot take it."""
    result = await BulkOperationExecutor(db, settings).start(body.ids, actor=user.user_name)
    return BulkStartResponse(
        started=result.succeeded,
        failed=result.failed,
        results=[
            BulkStartItem(
                task_id=r.task_id, success=r.success, status=r.status, started_at=r.started_at, reason=r.reason
            )
            for r in result.results
        ],
    )


@router.post("/cancel", response_model=BulkCancelResponse)
async def bulk_cancel(body: TaskIdsRequest, db: DbDep, settings: SettingsDep, user: UserDep) -> BulkCancelResponse:
    result = await BulkOperationExecutor(db, settings).cancel(body.ids, actor=user.user_name)
    return BulkCancelResponse(
        cancelled=result.succeeded,
        failed=result.failed,
        results=[
            BulkCancelItem(
                task_id=r.task_id, success=r.success, status=r.status, updated_at=r.updated_at, reason=r.reason
            )
            for r in result.results
        ],
    )


@router.post("/export", response_model=ExportResponse)
async def export_tasks(body: ExportRequest, db: DbDep, settings: SettingsDep) -> ExportResponse:
    descriptor = await CsvExportService(db, settings).export(
        columns=body.columns,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
        statuses=[s.value for s in body.statuses] if body.statuses else None,
        branch_ids=body.branch_ids,
        report_types=[r.value for r in body.report_types] if body.report_types else None,
        formats=[f.value for f in body.formats] if body.formats else None,
        period_start_from=body.period_start_from,
        period_start_to=body.period_start_to,
        period_end_from=body.period_end_from,
        period_end_to=body.period_end_to,
        created_at_from=body.created_at_from,
        created_at_to=body.created_at_to,
    )
    return ExportResponse.model_validate(descriptor.model_dump())


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: uuid.UUID, db: DbDep) -> TaskResponse:
    task = await TaskLifecycleService(db).get_task(task_id)
    return TaskResponse.from_task(task)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: uuid.UUID, db: DbDep) -> Response:
    await TaskLifecycleService(db).delete_task(task_id)
    await db.commit()
    return Response(status_code=204)


@router.post("/{task_id}/cancel", response_model=CancelTaskResponse)
async def cancel_task(task_id: uuid.UUID, db: DbDep, user: UserDep) -> CancelTaskResponse:
    task = await TaskLifecycleService(db).cancel_task(task_id, actor=user.user_name)
    await db.commit()
    return CancelTaskResponse(id=task.id, status=task.status, updated_at=task.updated_at)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_status(task_id: uuid.UUID, body: UpdateStatusRequest, db: DbDep, user: UserDep) -> TaskResponse:
    """Status report from the generation pipeline."""
    task, _ = await TaskLifecycleService(db).transition(
        task_id, body.status, actor=user.user_name, comment=body.comment, details=body.metadata
    )
    await db.commit()
    return TaskResponse.from_task(task)
