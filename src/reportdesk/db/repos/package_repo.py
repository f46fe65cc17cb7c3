import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.package import PackageStatusHistory, ReportPackage, ReportPackageTask
from reportdesk.db.models.report_task import ReportTask
from reportdesk.db.session import utcnow
from reportdesk.domain.enums import SortOrder

SORT_COLUMNS = {
    "createdAt": ReportPackage.created_at,
    "name": ReportPackage.name,
    "tasksCount": ReportPackage.tasks_count,
    "totalSize": ReportPackage.total_size,
}

TASK_SORT_COLUMNS = {
    "createdAt": ReportTask.created_at,
    "branchId": ReportTask.branch_id,
    "status": ReportTask.status,
    "periodStart": ReportTask.period_start,
}


class PackageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, package_id: uuid.UUID) -> Optional[ReportPackage]:
        result = await self._session.execute(select(ReportPackage).where(ReportPackage.id == package_id))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[ReportPackage]:
        result = await self._session.execute(select(ReportPackage).where(ReportPackage.name == name))
        return result.scalar_one_or_none()

    async def create(self, **fields) -> ReportPackage:
        package = ReportPackage(**fields)
        self._session.add(package)
        await self._session.flush()
        return package

    async def list_packages(
        self,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ReportPackage], int]:
        """Page of packages, optionally filtered by a name substring. Returns (packages, total_count)."""
        count_stmt = select(func.count(ReportPackage.id))
        stmt = select(ReportPackage)
        if search:
            pattern = f"%{search}%"
            count_stmt = count_stmt.where(ReportPackage.name.ilike(pattern))
            stmt = stmt.where(ReportPackage.name.ilike(pattern))
        total = (await self._session.execute(count_stmt)).scalar() or 0

        column = SORT_COLUMNS[sort_by]
        if sort_order == SortOrder.ASC:
            stmt = stmt.order_by(column.asc(), ReportPackage.id.asc())
        else:
            stmt = stmt.order_by(column.desc(), ReportPackage.id.desc())
        result = await self._session.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def list_tasks(
        self,
        package_id: uuid.UUID,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[ReportTask, datetime]], int]:
        """Member tasks with the time each was added. Returns ((task, added_at) rows, total_count)."""
        count_result = await self._session.execute(
            select(func.count()).select_from(ReportPackageTask).where(ReportPackageTask.package_id == package_id)
        )
        total = count_result.scalar() or 0

        column = TASK_SORT_COLUMNS[sort_by]
        if sort_order == SortOrder.ASC:
            order = (column.asc(), ReportTask.id.asc())
        else:
            order = (column.desc(), ReportTask.id.desc())
        result = await self._session.execute(
            select(ReportTask, ReportPackageTask.added_at)
            .join(ReportPackageTask, ReportPackageTask.task_id == ReportTask.id)
            .where(ReportPackageTask.package_id == package_id)
            .order_by(*order)
            .limit(limit)
            .offset(offset)
        )
        return [(task, added_at) for task, added_at in result.all()], total

    async def get_link(self, package_id: uuid.UUID, task_id: uuid.UUID) -> Optional[ReportPackageTask]:
        return await self._session.get(ReportPackageTask, (package_id, task_id))

    async def add_task(self, package_id: uuid.UUID, task_id: uuid.UUID) -> ReportPackageTask:
        link = ReportPackageTask(package_id=package_id, task_id=task_id)
        self._session.add(link)
        await self._session.flush()
        return link

    async def remove_task(self, link: ReportPackageTask) -> None:
        await self._session.delete(link)
        await self._session.flush()

    async def package_ids_for_task(self, task_id: uuid.UUID) -> list[uuid.UUID]:
        result = await self._session.execute(
            select(ReportPackageTask.package_id).where(ReportPackageTask.task_id == task_id)
        )
        return list(result.scalars().all())

    async def refresh_stats(self, package: ReportPackage) -> None:
        """Recompute tasks_count and total_size from the current members."""
        result = await self._session.execute(
            select(func.count(ReportTask.id), func.coalesce(func.sum(ReportTask.file_size), 0))
            .join(ReportPackageTask, ReportPackageTask.task_id == ReportTask.id)
            .where(ReportPackageTask.package_id == package.id)
        )
        count, size = result.one()
        package.tasks_count = count
        package.total_size = size
        package.updated_at = utcnow()
        await self._session.flush()

    async def update_status(self, package_id: uuid.UUID, expected: str, **values) -> bool:
        """Conditional status write; False when the package is no longer in ``expected``."""
        result = await self._session.execute(
            update(ReportPackage)
            .where(ReportPackage.id == package_id, ReportPackage.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def delete(self, package: ReportPackage) -> None:
        """Delete a package with its memberships and history. Member tasks are kept."""
        await self._session.execute(delete(ReportPackageTask).where(ReportPackageTask.package_id == package.id))
        await self._session.execute(
            delete(PackageStatusHistory).where(PackageStatusHistory.package_id == package.id)
        )
        await self._session.delete(package)
        await self._session.flush()
