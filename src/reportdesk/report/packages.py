"""Report packages: named groups of finished tasks that are copied to TFR together."""

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.package import PackageStatusHistory, ReportPackage
from reportdesk.db.models.report_task import ReportTask
from reportdesk.db.repos.package_history_repo import PackageHistoryRepo
from reportdesk.db.repos.package_repo import PackageRepo
from reportdesk.db.repos.task_repo import TaskRepo
from reportdesk.db.session import utcnow
from reportdesk.domain.enums import PackageStatus, SortOrder
from reportdesk.domain.errors import BadRequestError, ConflictError, DomainError, NotFoundError
from reportdesk.domain.models.package import check_package_transition

logger = logging.getLogger(__name__)


class PackageItemResult(BaseModel):
    item_id: uuid.UUID
    success: bool
    reason: Optional[str] = None


class AddTasksResult(BaseModel):
    added: int = 0
    already_in_package: int = 0
    not_found: int = 0
    errors: list[PackageItemResult] = []


class PackageService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._packages = PackageRepo(session)
        self._history = PackageHistoryRepo(session)
        self._tasks = TaskRepo(session)

    async def get_package(self, package_id: uuid.UUID) -> ReportPackage:
        package = await self._packages.get_by_id(package_id)
        if package is None:
            raise NotFoundError(f"Package with id '{package_id}' not found")
        return package

    async def create_package(self, name: str, created_by: str) -> ReportPackage:
        name = name.strip()
        if not name:
            raise BadRequestError("Package name must not be empty")
        if await self._packages.get_by_name(name) is not None:
            raise ConflictError(f"Package '{name}' already exists")
        package = await self._packages.create(name=name, created_by=created_by, status=PackageStatus.CREATE.value)
        await self._history.append(package.id, PackageStatus.CREATE.value, changed_by=created_by)
        logger.info("Created package %s (%s) by %s", package.id, name, created_by)
        return package

    async def list_packages(
        self,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ReportPackage], int]:
        return await self._packages.list_packages(
            search=search, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=offset
        )

    async def list_tasks(
        self,
        package_id: uuid.UUID,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[ReportTask, datetime]], int]:
        await self.get_package(package_id)
        return await self._packages.list_tasks(
            package_id, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=offset
        )

    async def rename(self, package_id: uuid.UUID, name: str) -> ReportPackage:
        package = await self.get_package(package_id)
        name = name.strip()
        if not name:
            raise BadRequestError("Package name must not be empty")
        if name != package.name:
            if await self._packages.get_by_name(name) is not None:
                raise ConflictError(f"Package '{name}' already exists")
            package.name = name
            await self._session.flush()
        return package

    async def delete_package(self, package_id: uuid.UUID) -> None:
        package = await self.get_package(package_id)
        if package.status == PackageStatus.TRANSFER.value:
            raise ConflictError("Cannot delete a package while it is being copied to TFR")
        await self._packages.delete(package)
        logger.info("Deleted package %s", package_id)

    async def bulk_delete(self, package_ids: Sequence[uuid.UUID]) -> list[PackageItemResult]:
        """Delete each package in its own transaction."""
        results = []
        for package_id in package_ids:
            results.append(await self._commit_item(package_id, self.delete_package(package_id)))
        return results

    async def add_tasks(self, package_id: uuid.UUID, task_ids: Sequence[uuid.UUID]) -> AddTasksResult:
        """Add tasks to a package; duplicates and unknown ids are counted, not raised."""
        package = await self.get_package(package_id)
        result = AddTasksResult()
        for task_id in dict.fromkeys(task_ids):
            if await self._tasks.get_by_id(task_id) is None:
                result.not_found += 1
                result.errors.append(PackageItemResult(item_id=task_id, success=False, reason="Task not found"))
            elif await self._packages.get_link(package.id, task_id) is not None:
                result.already_in_package += 1
            else:
                await self._packages.add_task(package.id, task_id)
                result.added += 1
        await self._packages.refresh_stats(package)
        logger.info("Package %s: added %d task(s)", package_id, result.added)
        return result

    async def remove_task(self, package_id: uuid.UUID, task_id: uuid.UUID) -> None:
        link = await self._packages.get_link(package_id, task_id)
        if link is None:
            raise NotFoundError(f"Task '{task_id}' is not in package '{package_id}'")
        await self._packages.remove_task(link)
        await self._packages.refresh_stats(await self.get_package(package_id))

    async def remove_tasks(self, package_id: uuid.UUID, task_ids: Sequence[uuid.UUID]) -> list[PackageItemResult]:
        await self.get_package(package_id)
        results = []
        for task_id in task_ids:
            results.append(await self._commit_item(task_id, self.remove_task(package_id, task_id)))
        return results

    async def copy_to_tfr(self, package_id: uuid.UUID, actor: str) -> ReportPackage:
        """Move the package through pack_transfer to pack_done and stamp the copy time.

        The pack_transfer step is committed on its own, so a second copy of the same package
        started meanwhile is rejected with ConflictError.
        """
        package = await self.get_package(package_id)
        if package.tasks_count == 0:
            raise BadRequestError("Cannot copy empty package to TFR")

        await self._transition(package, PackageStatus.TRANSFER, actor)
        await self._session.commit()

        await self._transition(package, PackageStatus.DONE, actor, last_copied_to_tfr_at=utcnow())
        logger.info("Copied package %s (%d task(s)) to TFR", package.id, package.tasks_count)
        return package

    async def get_status_history(self, package_id: uuid.UUID) -> list[PackageStatusHistory]:
        await self.get_package(package_id)
        return await self._history.list_for_package(package_id)

    async def _transition(self, package: ReportPackage, target: PackageStatus, actor: str, **values) -> None:
        previous = package.status
        check_package_transition(previous, target)
        values.update(status=target.value, updated_at=utcnow())
        if not await self._packages.update_status(package.id, expected=previous, **values):
            raise ConflictError(f"Package {package.id} is no longer in {previous} status")
        await self._session.refresh(package)
        await self._history.append(package.id, target.value, changed_by=actor, previous_status=previous)

    async def _commit_item(self, item_id: uuid.UUID, operation) -> PackageItemResult:
        try:
            await operation
            await self._session.commit()
        except DomainError as e:
            await self._session.rollback()
            return PackageItemResult(item_id=item_id, success=False, reason=e.detail)
        except SQLAlchemyError:
            await self._session.rollback()
            logger.exception("Package operation failed on %s", item_id)
            return PackageItemResult(item_id=item_id, success=False, reason="Database error")
        return PackageItemResult(item_id=item_id, success=True)
