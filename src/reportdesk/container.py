from dependency_injector import containers, providers

from reportdesk.config import Settings
from reportdesk.db.session import build_engine, build_session_factory
from reportdesk.infra.http.rate_limited_client import RateLimitedClient
from reportdesk.infra.youtrack.blacklist import TagsBlacklist
from reportdesk.infra.youtrack.client import YouTrackClient
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.processor import YouTrackSyncService
from reportdesk.infra.youtrack.projects import ProjectStore
from reportdesk.infra.youtrack.queue import YouTrackQueue
from reportdesk.infra.youtrack.templates import TemplateStore


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["reportdesk.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.youtrack_rate_per_second,
        timeout=settings.provided.youtrack_timeout_seconds,
    )

    youtrack_client = providers.Singleton(
        YouTrackClient,
        http_client=http_client,
        base_url=settings.provided.youtrack_url,
        token=settings.provided.youtrack_token,
        project_id=settings.provided.youtrack_project_id,
        cooldown_seconds=settings.provided.youtrack_cooldown_seconds,
    )

    youtrack_queue = providers.Singleton(YouTrackQueue.in_dir, tasks_dir=settings.provided.tasks_path)
    tags_blacklist = providers.Singleton(TagsBlacklist.in_dir, tasks_dir=settings.provided.tasks_path)
    templates = providers.Singleton(TemplateStore.in_dir, tasks_dir=settings.provided.tasks_path)
    projects = providers.Singleton(ProjectStore.in_dir, tasks_dir=settings.provided.tasks_path)
    local_tasks = providers.Singleton(LocalTaskStore, tasks_dir=settings.provided.tasks_path, projects=projects)

    youtrack_sync = providers.Singleton(
        YouTrackSyncService,
        client=youtrack_client,
        queue=youtrack_queue,
        tasks=local_tasks,
        templates=templates,
        blacklist=tags_blacklist,
        max_attempts=settings.provided.youtrack_queue_max_attempts,
    )
