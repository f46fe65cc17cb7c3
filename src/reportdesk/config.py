from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "reportdesk"
    redis_url: str = "redis://localhost:6379/0"
    debug: bool = False

    # Report storage
    storage_max_size_bytes: int = 1099511627776  # 1 TiB
    storage_warning_threshold: float = 85.0  # percent
    storage_task_reserve_bytes: int = 104857600  # reserved per started task
    storage_bucket_name: str = "mock-reports-bucket"
    mock_file_storage_url: str = "http://localhost:3000/mock-files"
    presigned_url_expiration_hours: int = 1
    csv_export_max_records: int = 10000

    # Task viewer / YouTrack
    tasks_dir: str = "../docs/tasks"
    youtrack_url: str = ""
    youtrack_token: str = ""
    youtrack_project_id: str = ""
    youtrack_timeout_seconds: float = 5.0
    youtrack_cooldown_seconds: float = 60.0
    youtrack_rate_per_second: float = 5.0
    youtrack_queue_max_attempts: int = 5
    youtrack_queue_startup_delay_seconds: float = 5.0
    youtrack_queue_process_interval_seconds: int = 300
    # Base URL the Celery beat task calls to trigger a queue pass in the API process
    api_base_url: str = "http://localhost:8000"
    worker_api_timeout_seconds: float = 120.0

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def tasks_path(self) -> Path:
        return Path(self.tasks_dir).resolve()

    class Config:
        env_file = ".env"


settings = Settings()
