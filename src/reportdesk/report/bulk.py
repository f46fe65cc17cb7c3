"""Apply delete/cancel/start to a batch of tasks with per-item outcomes."""

import logging
import uuid
from datetime import datetime
from typing import Awaitable, Callable, Literal, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.config import Settings
from reportdesk.db.models.report_task import ReportTask
from reportdesk.domain.errors import DomainError
from reportdesk.report.lifecycle import TaskLifecycleService
from reportdesk.report.storage import StorageAdmissionController

logger = logging.getLogger(__name__)

BulkAction = Literal["delete", "cancel", "start"]


class BulkItemResult(BaseModel):
    task_id: uuid.UUID
    success: bool
    reason: Optional[str] = None
    status: Optional[str] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None


class BulkResult(BaseModel):
    action: BulkAction
    results: list[BulkItemResult]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class BulkOperationExecutor:
    """Runs each item in its own transaction: a failed item never undoes or blocks the others."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._lifecycle = TaskLifecycleService(session)
        self._admission = StorageAdmissionController(session, settings)

    async def delete(self, task_ids: Sequence[uuid.UUID]) -> BulkResult:
        async def _delete(task_id: uuid.UUID) -> BulkItemResult:
            await self._lifecycle.delete_task(task_id)
            return BulkItemResult(task_id=task_id, success=True)

        return await self._run("delete", task_ids, _delete)

    async def cancel(self, task_ids: Sequence[uuid.UUID], actor: Optional[str] = None) -> BulkResult:
        async def _cancel(task_id: uuid.UUID) -> BulkItemResult:
            task = await self._lifecycle.cancel_task(task_id, actor=actor)
            return _item_from_task(task)

        return await self._run("cancel", task_ids, _cancel)

    async def start(self, task_ids: Sequence[uuid.UUID], actor: Optional[str] = None) -> BulkResult:
        """Start a batch. Raises InsufficientStorageError before touching any task."""
        await self._admission.ensure_admission(self._admission.required_bytes_for(len(task_ids)))

        async def _start(task_id: uuid.UUID) -> BulkItemResult:
            task = await self._lifecycle.start_task(task_id, actor=actor)
            item = _item_from_task(task)
            item.started_at = task.started_at
            return item

        return await self._run("start", task_ids, _start)

    async def _run(
        self,
        action: BulkAction,
        task_ids: Sequence[uuid.UUID],
        apply: Callable[[uuid.UUID], Awaitable[BulkItemResult]],
    ) -> BulkResult:
        results: list[BulkItemResult] = []
        for task_id in task_ids:
            try:
                item = await apply(task_id)
                await self._session.commit()
            except DomainError as e:
                await self._session.rollback()
                item = BulkItemResult(task_id=task_id, success=False, reason=e.detail)
            except SQLAlchemyError:
                await self._session.rollback()
                logger.exception("Bulk %s failed on task %s", action, task_id)
                item = BulkItemResult(task_id=task_id, success=False, reason="Database error")
            results.append(item)

        result = BulkResult(action=action, results=results)
        logger.info("Bulk %s: %d succeeded, %d failed", action, result.succeeded, result.failed)
        return result


def _item_from_task(task: ReportTask) -> BulkItemResult:
    return BulkItemResult(task_id=task.id, success=True, status=task.status, updated_at=task.updated_at)
