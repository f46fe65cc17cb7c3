"""Celery application: broker, serializers and the periodic YouTrack queue drain."""

from celery import Celery

from reportdesk.config import settings

celery_app = Celery(
    "reportdesk",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["reportdesk.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
    result_expires=86400,
)

celery_app.conf.beat_schedule = {
    "process-youtrack-queue": {
        "task": "process_youtrack_queue",
        "schedule": float(settings.youtrack_queue_process_interval_seconds),
    },
}
