"""CSV export of report tasks."""

import csv
import io
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.config import Settings
from reportdesk.db.models.report_task import ReportTask
from reportdesk.db.repos.task_repo import TaskRepo
from reportdesk.db.session import utcnow
from reportdesk.domain.enums import SortOrder

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else ""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# column key -> (header, value getter); insertion order is the default column order
EXPORT_COLUMNS: dict[str, tuple[str, Callable[[ReportTask], str]]] = {
    "id": ("ID", lambda t: str(t.id)),
    "createdAt": ("Created At", lambda t: _iso(t.created_at)),
    "createdBy": ("Created By", lambda t: _text(t.created_by)),
    "branchId": ("Branch ID", lambda t: str(t.branch_id)),
    "branchName": ("Branch Name", lambda t: t.branch_name),
    "periodStart": ("Period Start", lambda t: t.period_start.isoformat()),
    "periodEnd": ("Period End", lambda t: t.period_end.isoformat()),
    "accountMask": ("Account Mask", lambda t: _text(t.account_mask)),
    "accountSecondOrder": ("Account Second Order", lambda t: _text(t.account_second_order)),
    "currency": ("Currency", lambda t: t.currency),
    "format": ("Format", lambda t: t.format),
    "reportType": ("Report Type", lambda t: t.report_type),
    "source": ("Source", lambda t: _text(t.source)),
    "status": ("Status", lambda t: t.status),
    "fileSize": ("File Size", lambda t: str(t.file_size or 0)),
    "filesCount": ("Files Count", lambda t: str(t.files_count or 0)),
    "startedAt": ("Started At", lambda t: _iso(t.started_at)),
    "completedAt": ("Completed At", lambda t: _iso(t.completed_at)),
    "errorMessage": ("Error Message", lambda t: _text(t.error_message)),
}


class ExportDescriptor(BaseModel):
    export_id: uuid.UUID
    status: str = "COMPLETED"
    file_name: str
    file_url: str
    file_size: int
    download_url_expires_at: datetime
    records_count: int
    created_at: datetime


def render_tasks_csv(tasks: Sequence[ReportTask], columns: Optional[Sequence[str]] = None) -> str:
    """Header row plus one row per task, quoted where needed, rows joined by newlines."""
    keys = list(columns) if columns else list(EXPORT_COLUMNS)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow([EXPORT_COLUMNS[key][0] for key in keys])
    for task in tasks:
        writer.writerow([EXPORT_COLUMNS[key][1](task) for key in keys])
    return buf.getvalue().rstrip("\n")


def export_file_name(now: datetime) -> str:
    return f"report-6406-tasks-export-{now.replace(microsecond=0).isoformat().replace(':', '-')}.csv"


class CsvExportService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._tasks = TaskRepo(session)
        self._max_records = settings.csv_export_max_records
        self._storage_url = settings.mock_file_storage_url.rstrip("/")
        self._url_ttl = timedelta(hours=settings.presigned_url_expiration_hours)

    async def export(
        self,
        columns: Optional[Sequence[str]] = None,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
        statuses: Optional[Sequence[str]] = None,
        branch_ids: Optional[Sequence[uuid.UUID]] = None,
        report_types: Optional[Sequence[str]] = None,
        formats: Optional[Sequence[str]] = None,
        period_start_from: Optional[date] = None,
        period_start_to: Optional[date] = None,
        period_end_from: Optional[date] = None,
        period_end_to: Optional[date] = None,
        created_at_from: Optional[datetime] = None,
        created_at_to: Optional[datetime] = None,
    ) -> ExportDescriptor:
        tasks = await self._tasks.list_for_export(
            limit=self._max_records,
            sort_by=sort_by,
            sort_order=sort_order,
            statuses=statuses,
            branch_ids=branch_ids,
            report_types=report_types,
            formats=formats,
            period_start_from=period_start_from,
            period_start_to=period_start_to,
            period_end_from=period_end_from,
            period_end_to=period_end_to,
            created_at_from=created_at_from,
            created_at_to=created_at_to,
        )
        content = render_tasks_csv(tasks, columns)

        now = utcnow()
        file_name = export_file_name(now)
        descriptor = ExportDescriptor(
            export_id=uuid.uuid4(),
            file_name=file_name,
            file_url=f"{self._storage_url}/exports/{file_name}",
            file_size=len(content.encode("utf-8")),
            download_url_expires_at=now + self._url_ttl,
            records_count=len(tasks),
            created_at=now,
        )
        logger.info("Exported %d tasks to %s (%d bytes)", len(tasks), file_name, descriptor.file_size)
        return descriptor
