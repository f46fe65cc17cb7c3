import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.report_task import ReportTask
from reportdesk.db.models.task_file import ReportTaskFile
from reportdesk.domain.enums import FileStatus, SortOrder

FILE_SORT_COLUMNS = {
    "status": ReportTaskFile.status,
    "fileName": ReportTaskFile.file_name,
    "fileSize": ReportTaskFile.file_size,
    "createdAt": ReportTaskFile.created_at,
}


class TaskFileRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, file_id: uuid.UUID) -> Optional[ReportTaskFile]:
        result = await self._session.execute(select(ReportTaskFile).where(ReportTaskFile.id == file_id))
        return result.scalar_one_or_none()

    async def add(
        self,
        task: ReportTask,
        file_name: str,
        file_type: str,
        storage_url: str,
        file_size: int = 0,
        status: FileStatus = FileStatus.PENDING,
    ) -> ReportTaskFile:
        """Register an output artifact and bump the task's file counter."""
        task_file = ReportTaskFile(
            task_id=task.id,
            file_name=file_name,
            file_type=file_type,
            storage_url=storage_url,
            file_size=file_size,
            status=status.value,
        )
        self._session.add(task_file)
        task.files_count = (task.files_count or 0) + 1
        await self._session.flush()
        return task_file

    async def list_for_task(
        self,
        task_id: uuid.UUID,
        status: Optional[str] = None,
        sort_by: str = "status",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ReportTaskFile], int]:
        conditions = [ReportTaskFile.task_id == task_id]
        if status:
            conditions.append(ReportTaskFile.status == status)

        count_result = await self._session.execute(select(func.count(ReportTaskFile.id)).where(*conditions))
        total = count_result.scalar() or 0

        column = FILE_SORT_COLUMNS[sort_by]
        order = column.asc() if sort_order == SortOrder.ASC else column.desc()
        result = await self._session.execute(
            select(ReportTaskFile)
            .where(*conditions)
            .order_by(order, ReportTaskFile.file_name)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def used_bytes(self) -> int:
        """Total size of completed files."""
        result = await self._session.execute(
            select(func.coalesce(func.sum(ReportTaskFile.file_size), 0)).where(
                ReportTaskFile.status == FileStatus.COMPLETED.value
            )
        )
        return int(result.scalar() or 0)
