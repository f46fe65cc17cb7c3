import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reportdesk.api.local_tasks import router as local_tasks_router
from reportdesk.api.packages import router as packages_router
from reportdesk.api.problems import register_exception_handlers
from reportdesk.api.projects import router as projects_router
from reportdesk.api.references import router as references_router
from reportdesk.api.status_history import router as status_history_router
from reportdesk.api.storage import router as storage_router
from reportdesk.api.task_files import router as task_files_router
from reportdesk.api.tasks import router as tasks_router
from reportdesk.api.youtrack import router as youtrack_router
from reportdesk.config import settings
from reportdesk.container import Container
from reportdesk.infra.youtrack.processor import YouTrackSyncService

logger = logging.getLogger("reportdesk.api")


async def _startup_queue_pass(sync: YouTrackSyncService, delay: float) -> None:
    """Best-effort drain of the YouTrack queue shortly after boot."""
    await asyncio.sleep(delay)
    try:
        summary = await sync.process_pending_operations()
    except Exception:
        logger.exception("Startup YouTrack queue pass failed")
        return
    if summary.processed or summary.failed:
        logger.info("Startup YouTrack queue pass: %d processed, %d failed", summary.processed, summary.failed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    queue_pass = asyncio.create_task(
        _startup_queue_pass(container.youtrack_sync(), container.settings().youtrack_queue_startup_delay_seconds)
    )
    yield
    queue_pass.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await queue_pass
    await container.http_client().close()
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="ReportDesk", version="0.1.0", lifespan=lifespan)

register_exception_handlers(app, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tasks_router)
app.include_router(status_history_router)
app.include_router(task_files_router)
app.include_router(storage_router)
app.include_router(references_router)
app.include_router(packages_router)
app.include_router(youtrack_router)
app.include_router(local_tasks_router)
app.include_router(projects_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
