import uuid
from datetime import date, datetime
from typing import Optional, Sequence

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.package import ReportPackageTask
from reportdesk.db.models.report_task import ReportTask, TaskStatusHistory
from reportdesk.db.models.task_file import ReportTaskFile
from reportdesk.domain.enums import SortOrder

SORT_COLUMNS = {
    "createdAt": ReportTask.created_at,
    "branchId": ReportTask.branch_id,
    "status": ReportTask.status,
    "periodStart": ReportTask.period_start,
    "updatedAt": ReportTask.updated_at,
}


def _apply_filters(
    stmt: Select,
    statuses: Optional[Sequence[str]] = None,
    branch_ids: Optional[Sequence[uuid.UUID]] = None,
    report_types: Optional[Sequence[str]] = None,
    formats: Optional[Sequence[str]] = None,
    period_start_from: Optional[date] = None,
    period_start_to: Optional[date] = None,
    period_end_from: Optional[date] = None,
    period_end_to: Optional[date] = None,
    created_at_from: Optional[datetime] = None,
    created_at_to: Optional[datetime] = None,
    package_id: Optional[uuid.UUID] = None,
    without_package: bool = False,
) -> Select:
    """AND all given clauses; multi-value filters match any of their values."""
    if statuses:
        stmt = stmt.where(ReportTask.status.in_(statuses))
    if branch_ids:
        stmt = stmt.where(ReportTask.branch_id.in_(branch_ids))
    if report_types:
        stmt = stmt.where(ReportTask.report_type.in_(report_types))
    if formats:
        stmt = stmt.where(ReportTask.format.in_(formats))
    if period_start_from is not None:
        stmt = stmt.where(ReportTask.period_start >= period_start_from)
    if period_start_to is not None:
        stmt = stmt.where(ReportTask.period_start <= period_start_to)
    if period_end_from is not None:
        stmt = stmt.where(ReportTask.period_end >= period_end_from)
    if period_end_to is not None:
        stmt = stmt.where(ReportTask.period_end <= period_end_to)
    if created_at_from is not None:
        stmt = stmt.where(ReportTask.created_at >= created_at_from)
    if created_at_to is not None:
        stmt = stmt.where(ReportTask.created_at <= created_at_to)
    if package_id is not None:
        stmt = stmt.where(
            ReportTask.id.in_(select(ReportPackageTask.task_id).where(ReportPackageTask.package_id == package_id))
        )
    if without_package:
        stmt = stmt.where(ReportTask.id.not_in(select(ReportPackageTask.task_id)))
    return stmt


def _order(stmt: Select, sort_by: str, sort_order: SortOrder) -> Select:
    column = SORT_COLUMNS[sort_by]
    if sort_order == SortOrder.ASC:
        return stmt.order_by(column.asc(), ReportTask.id.asc())
    return stmt.order_by(column.desc(), ReportTask.id.desc())


class TaskRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, task_id: uuid.UUID) -> Optional[ReportTask]:
        result = await self._session.execute(select(ReportTask).where(ReportTask.id == task_id))
        return result.scalar_one_or_none()

    async def create(self, **fields) -> ReportTask:
        task = ReportTask(**fields)
        self._session.add(task)
        await self._session.flush()
        return task

    async def update_status(self, task_id: uuid.UUID, expected: str, **values) -> bool:
        """Write ``values`` only if the row still has status ``expected``.

        A single conditional UPDATE, so of two writers that read the same status only one
        matches. Returns False when the row has moved on (or is gone).
        """
        result = await self._session.execute(
            update(ReportTask)
            .where(ReportTask.id == task_id, ReportTask.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_tasks(
        self,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
        **filters,
    ) -> tuple[list[ReportTask], int]:
        """Filtered, sorted page of tasks. Returns (tasks, total_count)."""
        count_result = await self._session.execute(
            _apply_filters(select(func.count(ReportTask.id)), **filters)
        )
        total = count_result.scalar() or 0

        stmt = _order(_apply_filters(select(ReportTask), **filters), sort_by, sort_order)
        result = await self._session.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def list_for_export(
        self,
        limit: int,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        **filters,
    ) -> list[ReportTask]:
        stmt = _order(_apply_filters(select(ReportTask), **filters), sort_by, sort_order)
        result = await self._session.execute(stmt.limit(limit))
        return list(result.scalars().all())

    async def delete(self, task: ReportTask) -> None:
        """Delete a task together with its history, files and package memberships."""
        await self._session.execute(delete(ReportPackageTask).where(ReportPackageTask.task_id == task.id))
        await self._session.execute(delete(TaskStatusHistory).where(TaskStatusHistory.task_id == task.id))
        await self._session.execute(delete(ReportTaskFile).where(ReportTaskFile.task_id == task.id))
        await self._session.delete(task)
        await self._session.flush()
