from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from reportdesk.api.deps import (
    get_settings,
    get_tags_blacklist,
    get_templates,
    get_youtrack_queue,
    get_youtrack_sync,
)
from reportdesk.api.schemas.youtrack import (
    BlacklistAddRequest,
    BlacklistReplaceRequest,
    BlacklistResponse,
    ConfigResponse,
    CreateIssueRequest,
    IssueLinkResponse,
    IssuePreviewResponse,
    LinkIssueRequest,
    ProcessQueueResponse,
    QueueOperationSummary,
    QueueStatusResponse,
    SyncResponse,
    TaskLinksResponse,
    TemplateUpdateRequest,
    UnlinkResponse,
)
from reportdesk.config import Settings
from reportdesk.domain.enums import QueueOperationStatus
from reportdesk.domain.errors import BadRequestError
from reportdesk.domain.models.youtrack import YouTrackTemplate
from reportdesk.infra.youtrack.blacklist import TagsBlacklist
from reportdesk.infra.youtrack.processor import SyncOutcome, YouTrackSyncService
from reportdesk.infra.youtrack.queue import YouTrackQueue
from reportdesk.infra.youtrack.templates import TemplateStore

router = APIRouter(prefix="/api/youtrack", tags=["youtrack"])

SyncDep = Annotated[YouTrackSyncService, Depends(get_youtrack_sync)]
QueueDep = Annotated[YouTrackQueue, Depends(get_youtrack_queue)]
TemplatesDep = Annotated[TemplateStore, Depends(get_templates)]
BlacklistDep = Annotated[TagsBlacklist, Depends(get_tags_blacklist)]


def _sync_response(outcome: SyncOutcome) -> SyncResponse:
    return SyncResponse(
        local_task_id=outcome.local_task_id,
        youtrack_issue_id=outcome.youtrack_issue_id,
        youtrack_issue_url=outcome.youtrack_issue_url,
        youtrack_issue_ids=outcome.youtrack_issue_ids,
        queued=True if outcome.queued else None,
        operation_id=outcome.operation_id,
    )


# --- issues and links ---


@router.post("/tasks", response_model=SyncResponse, response_model_exclude_none=True)
async def create_issue(body: CreateIssueRequest, sync: SyncDep) -> SyncResponse:
    """Create a YouTrack issue from a local task, or queue it while YouTrack is down."""
    outcome = await sync.create_issue(body.task_id, body.template_id, body.custom_fields)
    return _sync_response(outcome)


@router.post("/tasks/{task_id}/link", response_model=SyncResponse, response_model_exclude_none=True)
async def link_issue(task_id: str, body: LinkIssueRequest, sync: SyncDep) -> SyncResponse:
    outcome = await sync.link_issue(task_id, body.youtrack_issue_id)
    return _sync_response(outcome)


@router.delete(
    "/tasks/{task_id}/link/{issue_id}", response_model=UnlinkResponse, response_model_exclude_none=True
)
async def unlink_issue(task_id: str, issue_id: str, sync: SyncDep) -> UnlinkResponse:
    outcome = await sync.unlink_issue(task_id, issue_id)
    return UnlinkResponse(
        local_task_id=task_id,
        removed_issue_id=issue_id,
        youtrack_issue_ids=outcome.youtrack_issue_ids,
        queued=True if outcome.queued else None,
        operation_id=outcome.operation_id,
    )


@router.get("/tasks/{task_id}", response_model=TaskLinksResponse, response_model_exclude_none=True)
async def get_task_links(
    task_id: str,
    sync: SyncDep,
    include_details: bool = Query(False, alias="includeDetails"),
) -> TaskLinksResponse:
    links = await sync.get_links(task_id, include_details=include_details)
    return TaskLinksResponse(
        local_task_id=task_id,
        youtrack_issue_ids=[link.youtrack_issue_id for link in links],
        links=[IssueLinkResponse.model_validate(link.model_dump()) for link in links],
    )


@router.get("/issues/{issue_id}", response_model=IssuePreviewResponse, response_model_exclude_none=True)
async def preview_issue(issue_id: str, sync: SyncDep) -> IssuePreviewResponse:
    preview = await sync.preview_issue(issue_id)
    return IssuePreviewResponse.model_validate(preview.model_dump())


@router.get("/config", response_model=ConfigResponse)
async def get_config(settings: Annotated[Settings, Depends(get_settings)]) -> ConfigResponse:
    return ConfigResponse(base_url=settings.youtrack_url.rstrip("/") or None)


# --- templates ---


@router.get("/templates", response_model=list[YouTrackTemplate], response_model_exclude_none=True)
async def list_templates(templates: TemplatesDep) -> list[YouTrackTemplate]:
    return await templates.list_templates()


@router.get("/templates/{template_id}", response_model=YouTrackTemplate, response_model_exclude_none=True)
async def get_template(template_id: str, templates: TemplatesDep) -> YouTrackTemplate:
    return await templates.get(template_id)


@router.post("/templates", response_model=YouTrackTemplate, response_model_exclude_none=True, status_code=201)
async def create_template(body: YouTrackTemplate, templates: TemplatesDep) -> YouTrackTemplate:
    return await templates.create(body)


@router.put("/templates/{template_id}", response_model=YouTrackTemplate, response_model_exclude_none=True)
async def update_template(template_id: str, body: TemplateUpdateRequest, templates: TemplatesDep) -> YouTrackTemplate:
    return await templates.update(template_id, body.model_dump(exclude_unset=True))


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(template_id: str, templates: TemplatesDep) -> Response:
    await templates.delete(template_id)
    return Response(status_code=204)


# --- queue ---


@router.get("/queue", response_model=QueueStatusResponse, response_model_exclude_none=True)
async def get_queue(queue: QueueDep) -> QueueStatusResponse:
    operations = await queue.all()
    counts = {status: 0 for status in QueueOperationStatus}
    for op in operations:
        counts[op.status] += 1
    return QueueStatusResponse(
        pending=counts[QueueOperationStatus.PENDING],
        processing=counts[QueueOperationStatus.PROCESSING],
        completed=counts[QueueOperationStatus.COMPLETED],
        failed=counts[QueueOperationStatus.FAILED],
        operations=[
            QueueOperationSummary(
                id=op.id,
                type=op.type.value,
                status=op.status.value,
                created_at=op.created_at,
                attempts=op.attempts,
                last_attempt_at=op.last_attempt_at,
                error=op.error,
                data=op.data.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
            for op in operations
        ],
    )


@router.delete("/queue/{operation_id}", status_code=204)
async def remove_queue_operation(operation_id: str, queue: QueueDep) -> Response:
    await queue.remove(operation_id)
    return Response(status_code=204)


@router.post("/queue/process", response_model=ProcessQueueResponse)
async def process_queue(sync: SyncDep) -> ProcessQueueResponse:
    if not sync.is_available():
        raise BadRequestError("YouTrack is not configured or temporarily unavailable")
    summary = await sync.process_pending_operations()
    return ProcessQueueResponse.model_validate(summary.model_dump())


# --- tag blacklist ---


@router.get("/tags/blacklist", response_model=BlacklistResponse)
async def get_blacklist(blacklist: BlacklistDep) -> BlacklistResponse:
    return BlacklistResponse(blacklist=await blacklist.get())


@router.post("/tags/blacklist", response_model=BlacklistResponse)
async def replace_blacklist(body: BlacklistReplaceRequest, blacklist: BlacklistDep) -> BlacklistResponse:
    return BlacklistResponse(blacklist=await blacklist.replace(body.blacklist))


@router.put("/tags/blacklist", response_model=BlacklistResponse)
async def add_blacklist_tag(body: BlacklistAddRequest, blacklist: BlacklistDep) -> BlacklistResponse:
    return BlacklistResponse(blacklist=await blacklist.add_tag(body.tag))


@router.delete("/tags/blacklist/{tag}", response_model=BlacklistResponse)
async def remove_blacklist_tag(tag: str, blacklist: BlacklistDep) -> BlacklistResponse:
    return BlacklistResponse(blacklist=await blacklist.remove_tag(tag))
