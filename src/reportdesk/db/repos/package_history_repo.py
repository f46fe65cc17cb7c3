import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.package import PackageStatusHistory


class PackageHistoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self,
        package_id: uuid.UUID,
        status: str,
        changed_by: str,
        previous_status: Optional[str] = None,
    ) -> PackageStatusHistory:
        result = await self._session.execute(
            select(func.coalesce(func.max(PackageStatusHistory.sequence), 0)).where(
                PackageStatusHistory.package_id == package_id
            )
        )
        entry = PackageStatusHistory(
            package_id=package_id,
            status=status,
            previous_status=previous_status,
            sequence=result.scalar_one() + 1,
            changed_by=changed_by,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def list_for_package(self, package_id: uuid.UUID) -> list[PackageStatusHistory]:
        """Newest first."""
        result = await self._session.execute(
            select(PackageStatusHistory)
            .where(PackageStatusHistory.package_id == package_id)
            .order_by(PackageStatusHistory.sequence.desc())
        )
        return list(result.scalars().all())
