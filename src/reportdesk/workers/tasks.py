"""Celery tasks for background processing."""

import asyncio
import logging
from typing import Optional

import httpx

from reportdesk.workers.celery_app import celery_app

logger = logging.getLogger(__name__)

QUEUE_PROCESS_PATH = "/api/youtrack/queue/process"


@celery_app.task(name="process_youtrack_queue")
def process_youtrack_queue_task() -> dict:
    """Ask the API to drain pending YouTrack operations.

    The API process owns the queue ledger and the task manifest, so the worker never opens
    those files itself; it triggers the same pass as ``POST /api/youtrack/queue/process``.
    """
    return asyncio.run(_process_youtrack_queue_async())


async def _process_youtrack_queue_async(http: Optional[httpx.AsyncClient] = None) -> dict:
    from reportdesk.config import settings

    url = settings.api_base_url.rstrip("/") + QUEUE_PROCESS_PATH
    if http is None:
        async with httpx.AsyncClient(timeout=settings.worker_api_timeout_seconds) as client:
            response = await client.post(url)
    else:
        response = await http.post(url)

    if response.status_code == 400:
        # YouTrack not configured or cooling down; the next beat tries again.
        logger.info("YouTrack queue pass skipped: %s", response.text)
        return {"status": "skipped", "processed": 0, "failed": 0}
    response.raise_for_status()
    summary = response.json()
    logger.info("YouTrack queue pass: %d processed, %d failed", summary["processed"], summary["failed"])
    return {"status": "ok", "processed": summary["processed"], "failed": summary["failed"]}
