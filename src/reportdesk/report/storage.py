"""Storage volume snapshot and the admission check gating task starts."""

import logging
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.config import Settings
from reportdesk.db.repos.task_file_repo import TaskFileRepo
from reportdesk.domain.errors import InsufficientStorageError
from reportdesk.report.sizes import format_bytes_fixed

logger = logging.getLogger(__name__)


class StorageVolumeSnapshot(BaseModel):
    total_bytes: int
    used_bytes: int
    free_bytes: int
    used_percent: float
    total_human: str
    used_human: str
    free_human: str
    warning: Optional[str] = None


class AdmissionDecision(BaseModel):
    admitted: bool
    required_bytes: int
    free_bytes: int
    detail: str


class StorageAdmissionController:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._files = TaskFileRepo(session)
        self._total_bytes = settings.storage_max_size_bytes
        self._warning_threshold = settings.storage_warning_threshold
        self._reserve_per_task = settings.storage_task_reserve_bytes

    async def snapshot(self) -> StorageVolumeSnapshot:
        used = await self._files.used_bytes()
        total = self._total_bytes
        free = total - used
        used_percent = round(used / total * 100, 2) if total else 100.0

        warning = None
        if used_percent >= self._warning_threshold:
            warning = (
                f"Storage usage is above {self._warning_threshold:g}%. Consider cleaning up old reports."
            )

        return StorageVolumeSnapshot(
            total_bytes=total,
            used_bytes=used,
            free_bytes=free,
            used_percent=used_percent,
            total_human=format_bytes_fixed(total),
            used_human=format_bytes_fixed(used),
            free_human=format_bytes_fixed(free),
            warning=warning,
        )

    def required_bytes_for(self, task_count: int) -> int:
        return self._reserve_per_task * task_count

    async def check_admission(self, required_bytes: int) -> AdmissionDecision:
        snapshot = await self.snapshot()
        free = max(snapshot.free_bytes, 0)
        if required_bytes > free:
            return AdmissionDecision(
                admitted=False,
                required_bytes=required_bytes,
                free_bytes=free,
                detail=(
                    f"Not enough storage: required {format_bytes_fixed(required_bytes)}, "
                    f"available {format_bytes_fixed(free)}"
                ),
            )
        return AdmissionDecision(
            admitted=True,
            required_bytes=required_bytes,
            free_bytes=free,
            detail=f"Storage available: {format_bytes_fixed(free)} free",
        )

    async def ensure_admission(self, required_bytes: int) -> AdmissionDecision:
        decision = await self.check_admission(required_bytes)
        if not decision.admitted:
            logger.warning("Admission rejected: %s", decision.detail)
            raise InsufficientStorageError(
                decision.detail,
                context={"requiredBytes": decision.required_bytes, "freeBytes": decision.free_bytes},
            )
        return decision
