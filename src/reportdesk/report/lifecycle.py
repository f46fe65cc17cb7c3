"""Report task lifecycle: creation, validated status transitions, deletion."""

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.report_task import ReportTask, TaskStatusHistory
from reportdesk.db.repos.package_repo import PackageRepo
from reportdesk.db.repos.reference_repo import ReferenceRepo
from reportdesk.db.repos.status_history_repo import StatusHistoryRepo
from reportdesk.db.repos.task_repo import TaskRepo
from reportdesk.db.session import utcnow
from reportdesk.domain.enums import FileFormat, ReportType, TaskStatus
from reportdesk.domain.errors import ConflictError, NotFoundError
from reportdesk.domain.models.history import Metadata
from reportdesk.domain.models.status import FINISHING_STATUSES, can_perform, check_transition

logger = logging.getLogger(__name__)


class TaskLifecycleService:
    """Owns report task state. Every status change goes through ``transition``."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._tasks = TaskRepo(session)
        self._history = StatusHistoryRepo(session)
        self._references = ReferenceRepo(session)
        self._packages = PackageRepo(session)

    async def get_task(self, task_id: uuid.UUID) -> ReportTask:
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Report task with id '{task_id}' not found")
        return task

    async def create_task(
        self,
        branch_id: uuid.UUID,
        period_start: date,
        period_end: date,
        currency: str,
        format: str,
        report_type: str,
        source: Optional[str] = None,
        account_mask: Optional[str] = None,
        account_second_order: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> ReportTask:
        """Insert a task in ``created`` status with its initial history entry."""
        branch = await self._references.get_branch(branch_id)
        if branch is None:
            raise NotFoundError(f"Branch with id '{branch_id}' not found")
        if report_type not in ReportType._value2member_map_:
            raise NotFoundError(f"Report type '{report_type}' not found")
        if format not in FileFormat._value2member_map_:
            raise NotFoundError(f"File format '{format}' not found")
        if source is not None and await self._references.get_source(source) is None:
            raise NotFoundError(f"Source '{source}' not found")

        task = await self._tasks.create(
            branch_id=branch.id,
            branch_name=branch.name,
            period_start=period_start,
            period_end=period_end,
            currency=currency,
            format=format,
            report_type=report_type,
            source=source,
            account_mask=account_mask,
            account_second_order=account_second_order,
            created_by=actor,
            status=TaskStatus.CREATED.value,
        )
        await self._history.append(
            task_id=task.id,
            status=TaskStatus.CREATED.value,
            previous_status=None,
            changed_by=actor,
            comment="Task created",
        )
        logger.info("Created report task %s for branch %s (%s)", task.id, branch.code, report_type)
        return task

    async def transition(
        self,
        task_id: uuid.UUID,
        target: TaskStatus,
        actor: Optional[str] = None,
        comment: Optional[str] = None,
        details: Optional[Metadata] = None,
    ) -> tuple[ReportTask, TaskStatusHistory]:
        """Validate and apply a status change, appending the matching history entry.

        Both writes are flushed in the caller's transaction; nothing is written when the
        transition is rejected. The status write is conditional on the status read here, so a
        concurrent transition of the same task makes this one fail with ConflictError.
        """
        task = await self.get_task(task_id)
        previous = task.status
        check_transition(previous, target)

        now = utcnow()
        values = {"status": target.value, "last_status_changed_at": now, "updated_at": now}
        if target == TaskStatus.STARTED:
            values["started_at"] = now
        elif target in FINISHING_STATUSES:
            values["completed_at"] = now
        if not await self._tasks.update_status(task.id, expected=previous, **values):
            raise ConflictError(f"Task {task_id} is no longer in {previous} status")
        await self._session.refresh(task)

        entry = await self._history.append(
            task_id=task.id,
            status=target.value,
            previous_status=previous,
            changed_by=actor,
            comment=comment,
            details=details,
        )
        logger.info("Task %s: %s -> %s (by %s)", task.id, previous, target.value, actor)
        return task, entry

    async def start_task(self, task_id: uuid.UUID, actor: Optional[str] = None) -> ReportTask:
        task, _ = await self.transition(task_id, TaskStatus.STARTED, actor=actor, comment="Task started")
        return task

    async def cancel_task(self, task_id: uuid.UUID, actor: Optional[str] = None) -> ReportTask:
        task, _ = await self.transition(task_id, TaskStatus.KILLED_DAPP, actor=actor, comment="Task cancelled")
        return task

    async def delete_task(self, task_id: uuid.UUID) -> None:
        task = await self.get_task(task_id)
        if not can_perform(task.status, "delete"):
            raise ConflictError(f"Cannot delete task in {task.status} status")
        package_ids = await self._packages.package_ids_for_task(task.id)
        await self._tasks.delete(task)
        for package_id in package_ids:
            package = await self._packages.get_by_id(package_id)
            if package is not None:
                await self._packages.refresh_stats(package)
        logger.info("Deleted report task %s", task_id)

    async def get_history(
        self,
        task_id: uuid.UUID,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[TaskStatusHistory], int]:
        await self.get_task(task_id)
        return await self._history.list_for_task(task_id, limit=limit, offset=offset)
