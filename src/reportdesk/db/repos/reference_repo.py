import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.db.models.reference import Branch, Source


class ReferenceRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_branch(self, branch_id: uuid.UUID) -> Optional[Branch]:
        result = await self._session.execute(select(Branch).where(Branch.id == branch_id))
        return result.scalar_one_or_none()

    async def list_branches(self) -> list[Branch]:
        result = await self._session.execute(select(Branch).order_by(Branch.code))
        return list(result.scalars().all())

    async def get_source(self, code: str) -> Optional[Source]:
        result = await self._session.execute(select(Source).where(Source.code == code))
        return result.scalar_one_or_none()

    async def list_sources(self) -> list[Source]:
        result = await self._session.execute(select(Source).order_by(Source.code))
        return list(result.scalars().all())

    async def get_or_create_branch(self, code: str, name: str) -> Branch:
        result = await self._session.execute(select(Branch).where(Branch.code == code))
        branch = result.scalar_one_or_none()
        if branch is None:
            branch = Branch(code=code, name=name)
            self._session.add(branch)
            await self._session.flush()
        return branch

    async def get_or_create_source(self, code: str, name: str, ris: Optional[str] = None) -> Source:
        source = await self.get_source(code)
        if source is None:
            source = Source(code=code, name=name, ris=ris)
            self._session.add(source)
            await self._session.flush()
        return source
