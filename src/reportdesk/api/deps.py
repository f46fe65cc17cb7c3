from typing import AsyncGenerator, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reportdesk.config import Settings, settings
from reportdesk.container import Container
from reportdesk.domain.enums import UserRole
from reportdesk.domain.errors import BadRequestError
from reportdesk.infra.youtrack.blacklist import TagsBlacklist
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.processor import YouTrackSyncService
from reportdesk.infra.youtrack.projects import ProjectStore
from reportdesk.infra.youtrack.queue import YouTrackQueue
from reportdesk.infra.youtrack.templates import TemplateStore


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


def get_settings() -> Settings:
    return settings


@inject
def get_youtrack_sync(
    sync: YouTrackSyncService = Depends(Provide[Container.youtrack_sync]),
) -> YouTrackSyncService:
    return sync


@inject
def get_youtrack_queue(queue: YouTrackQueue = Depends(Provide[Container.youtrack_queue])) -> YouTrackQueue:
    return queue


@inject
def get_local_tasks(tasks: LocalTaskStore = Depends(Provide[Container.local_tasks])) -> LocalTaskStore:
    return tasks


@inject
def get_projects(projects: ProjectStore = Depends(Provide[Container.projects])) -> ProjectStore:
    return projects


@inject
def get_templates(templates: TemplateStore = Depends(Provide[Container.templates])) -> TemplateStore:
    return templates


@inject
def get_tags_blacklist(blacklist: TagsBlacklist = Depends(Provide[Container.tags_blacklist])) -> TagsBlacklist:
    return blacklist


class UserContext(BaseModel):
    user_id: str
    user_name: str
    role: UserRole


def get_user_context(
    x_user_role: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
) -> UserContext:
    """Header-based stand-in for authentication."""
    role = (x_user_role or UserRole.USER.value).lower()
    if role not in {r.value for r in UserRole}:
        raise BadRequestError(f"Invalid user role: {x_user_role}. Expected one of: user, manager, admin")
    return UserContext(
        user_id=x_user_id or "anonymous",
        user_name=x_user_name or "Anonymous User",
        role=UserRole(role),
    )
