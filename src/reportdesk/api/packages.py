import uuid
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import UserContext, get_db, get_user_context
from reportdesk.api.schemas.base import Pagination
from reportdesk.api.schemas.packages import (
    AddTasksError,
    AddTasksResponse,
    CopyToTfrResponse,
    CreatePackageRequest,
    PackageDeleteItem,
    PackageDeleteResponse,
    PackageDetailResponse,
    PackageHistoryEntry,
    PackageIdsRequest,
    PackageList,
    PackageResponse,
    PackageTaskIdsRequest,
    PackageTaskResponse,
    RemoveTasksItem,
    RemoveTasksResponse,
    RenamePackageRequest,
    RenamePackageResponse,
)
from reportdesk.api.schemas.tasks import TaskResponse
from reportdesk.domain.enums import SortOrder
from reportdesk.report.packages import PackageService

router = APIRouter(prefix="/api/v1/report-6406/packages", tags=["report-6406-packages"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
UserDep = Annotated[UserContext, Depends(get_user_context)]


@router.post("", response_model=PackageResponse, status_code=201)
async def create_package(body: CreatePackageRequest, db: DbDep) -> PackageResponse:
    package = await PackageService(db).create_package(body.name, created_by=body.created_by)
    await db.commit()
    return PackageResponse.model_validate(package)


@router.get("", response_model=PackageList)
async def list_packages(
    db: DbDep,
    search: Optional[str] = Query(None, max_length=255),
    sort_by: Literal["createdAt", "name", "tasksCount", "totalSize"] = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PackageList:
    packages, total = await PackageService(db).list_packages(
        search=search, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=page * limit
    )
    return PackageList(
        packages=[PackageResponse.model_validate(p) for p in packages],
        pagination=Pagination.build(page, limit, total),
    )


@router.delete("", response_model=PackageDeleteResponse)
async def bulk_delete_packages(body: PackageIdsRequest, db: DbDep) -> PackageDeleteResponse:
    results = await PackageService(db).bulk_delete(body.package_ids)
    return PackageDeleteResponse(
        deleted=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success),
        results=[PackageDeleteItem(package_id=r.item_id, success=r.success, reason=r.reason) for r in results],
    )


@router.get("/{package_id}", response_model=PackageDetailResponse)
async def get_package(
    package_id: uuid.UUID,
    db: DbDep,
    sort_by: Literal["createdAt", "branchId", "status", "periodStart"] = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PackageDetailResponse:
    """Package with one page of its tasks."""
    service = PackageService(db)
    package = await service.get_package(package_id)
    rows, total = await service.list_tasks(
        package_id, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=page * limit
    )
    tasks = [
        PackageTaskResponse(**TaskResponse.from_task(task).model_dump(), added_at=added_at)
        for task, added_at in rows
    ]
    return PackageDetailResponse(
        **PackageResponse.model_validate(package).model_dump(),
        tasks=tasks,
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/{package_id}", response_model=RenamePackageResponse)
async def rename_package(package_id: uuid.UUID, body: RenamePackageRequest, db: DbDep) -> RenamePackageResponse:
    package = await PackageService(db).rename(package_id, body.name)
    await db.commit()
    return RenamePackageResponse(id=package.id, name=package.name, updated_at=package.updated_at)


@router.post("/{package_id}/tasks", response_model=AddTasksResponse)
async def add_tasks(package_id: uuid.UUID, body: PackageTaskIdsRequest, db: DbDep) -> AddTasksResponse:
    result = await PackageService(db).add_tasks(package_id, body.task_ids)
    await db.commit()
    return AddTasksResponse(
        added=result.added,
        already_in_package=result.already_in_package,
        not_found=result.not_found,
        errors=[AddTasksError(task_id=e.item_id, reason=e.reason or "") for e in result.errors],
    )


@router.delete("/{package_id}/tasks", response_model=RemoveTasksResponse)
async def remove_tasks(package_id: uuid.UUID, body: PackageTaskIdsRequest, db: DbDep) -> RemoveTasksResponse:
    results = await PackageService(db).remove_tasks(package_id, body.task_ids)
    return RemoveTasksResponse(
        removed=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success),
        results=[RemoveTasksItem(task_id=r.item_id, success=r.success, reason=r.reason) for r in results],
    )


@router.post("/{package_id}/copy-to-tfr", response_model=CopyToTfrResponse)
async def copy_to_tfr(package_id: uuid.UUID, db: DbDep, user: UserDep) -> CopyToTfrResponse:
    package = await PackageService(db).copy_to_tfr(package_id, actor=user.user_name)
    await db.commit()
    return CopyToTfrResponse(
        id=package.id,
        last_copied_to_tfr_at=package.last_copied_to_tfr_at,
        message="Package successfully copied to TFR",
    )


@router.get("/{package_id}/status-history", response_model=list[PackageHistoryEntry])
async def get_package_status_history(package_id: uuid.UUID, db: DbDep) -> list[PackageHistoryEntry]:
    entries = await PackageService(db).get_status_history(package_id)
    return [PackageHistoryEntry.model_validate(e) for e in entries]


@router.delete("/{package_id}", status_code=204)
async def delete_package(package_id: uuid.UUID, db: DbDep) -> Response:
    await PackageService(db).delete_package(package_id)
    await db.commit()
    return Response(status_code=204)
