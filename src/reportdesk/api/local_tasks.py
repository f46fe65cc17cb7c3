from typing import Annotated

from fastapi import APIRouter, Depends

from reportdesk.api.deps import get_local_tasks
from reportdesk.api.schemas.local_tasks import LocalTaskDetailResponse, LocalTaskResponse, UpdateLocalTaskRequest
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

TasksDep = Annotated[LocalTaskStore, Depends(get_local_tasks)]


@router.get("", response_model=list[LocalTaskResponse])
async def list_local_tasks(tasks: TasksDep) -> list[LocalTaskResponse]:
    return [LocalTaskResponse.model_validate(t.model_dump()) for t in await tasks.list_tasks()]


@router.get("/{task_id}", response_model=LocalTaskDetailResponse)
async def get_local_task(task_id: str, tasks: TasksDep) -> LocalTaskDetailResponse:
    """Manifest entry with its markdown body."""
    task = await tasks.get_task(task_id)
    return LocalTaskDetailResponse.model_validate(task.model_dump())


@router.patch("/{task_id}", response_model=LocalTaskResponse)
async def update_local_task(task_id: str, body: UpdateLocalTaskRequest, tasks: TasksDep) -> LocalTaskResponse:
    changes = body.model_dump(mode="json", by_alias=True, exclude_unset=True)
    task = await tasks.update_meta(task_id, changes)
    return LocalTaskResponse.model_validate(task.model_dump())
