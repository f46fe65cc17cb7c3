import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.report_task import TaskStatusHistory
from reportdesk.domain.models.history import Metadata


class StatusHistoryRepo:
    """Append-only access to task status history."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self,
        task_id: uuid.UUID,
        status: str,
        previous_status: Optional[str] = None,
        changed_by: Optional[str] = None,
        comment: Optional[str] = None,
        details: Optional[Metadata] = None,
    ) -> TaskStatusHistory:
        """Add the next entry for the task. Sequence numbers start at 1."""
        result = await self._session.execute(
            select(func.coalesce(func.max(TaskStatusHistory.sequence), 0)).where(TaskStatusHistory.task_id == task_id)
        )
        entry = TaskStatusHistory(
            task_id=task_id,
            status=status,
            previous_status=previous_status,
            sequence=result.scalar_one() + 1,
            changed_by=changed_by,
            comment=comment,
            details=details,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def list_for_task(
        self,
        task_id: uuid.UUID,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[TaskStatusHistory], int]:
        """Newest first. Returns (entries, total_count)."""
        count_result = await self._session.execute(
            select(func.count(TaskStatusHistory.id)).where(TaskStatusHistory.task_id == task_id)
        )
        total = count_result.scalar() or 0

        result = await self._session.execute(
            select(TaskStatusHistory)
            .where(TaskStatusHistory.task_id == task_id)
            .order_by(TaskStatusHistory.sequence.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def latest(self, task_id: uuid.UUID) -> Optional[TaskStatusHistory]:
        entries, _ = await self.list_for_task(task_id, limit=1)
        return entries[0] if entries else None
