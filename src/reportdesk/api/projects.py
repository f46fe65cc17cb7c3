from typing import Annotated

from fastapi import APIRouter, Depends

from reportdesk.api.deps import get_local_tasks, get_projects
from reportdesk.api.schemas.local_tasks import ProjectRequest, ProjectResponse, RemoveProjectResponse
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.projects import ProjectStore

router = APIRouter(prefix="/api/projects", tags=["projects"])

ProjectsDep = Annotated[ProjectStore, Depends(get_projects)]


@router.get("", response_model=list[ProjectResponse])
async def list_projects(projects: ProjectsDep) -> list[ProjectResponse]:
    return [ProjectResponse.model_validate(p.model_dump()) for p in await projects.list_projects()]


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(body: ProjectRequest, projects: ProjectsDep) -> ProjectResponse:
    """Returns the existing project when one already has this name (case-insensitive)."""
    project = await projects.get_or_create(body.name)
    return ProjectResponse.model_validate(project.model_dump())


@router.patch("/{project_id}", response_model=ProjectResponse)
async def rename_project(project_id: str, body: ProjectRequest, projects: ProjectsDep) -> ProjectResponse:
    project = await projects.rename(project_id, body.name)
    return ProjectResponse.model_validate(project.model_dump())


@router.delete("/{project_id}", response_model=RemoveProjectResponse)
async def remove_project(
    project_id: str,
    tasks: Annotated[LocalTaskStore, Depends(get_local_tasks)],
) -> RemoveProjectResponse:
    return RemoveProjectResponse(updated=await tasks.remove_project(project_id))
