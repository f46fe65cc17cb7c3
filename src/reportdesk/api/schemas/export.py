import uuid
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import field_validator

from reportdesk.api.schemas.base import CamelModel, ScalarOrList
from reportdesk.domain.enums import FileFormat, ReportType, SortOrder, TaskStatus
from reportdesk.report.export import EXPORT_COLUMNS


class ExportRequest(CamelModel):
    statuses: Optional[ScalarOrList[TaskStatus]] = None
    branch_ids: Optional[ScalarOrList[uuid.UUID]] = None
    report_types: Optional[ScalarOrList[ReportType]] = None
    formats: Optional[ScalarOrList[FileFormat]] = None
    period_start_from: Optional[date] = None
    period_start_to: Optional[date] = None
    period_end_from: Optional[date] = None
    period_end_to: Optional[date] = None
    created_at_from: Optional[datetime] = None
    created_at_to: Optional[datetime] = None
    columns: Optional[ScalarOrList[str]] = None
    sort_by: Literal["createdAt", "branchId", "status", "periodStart", "updatedAt"] = "createdAt"
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("columns")
    @classmethod
    def _known_columns(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        unknown = [c for c in v if c not in EXPORT_COLUMNS]
        if unknown:
            raise ValueError(f"Unknown export columns: {', '.join(unknown)}")
        return v


class ExportResponse(CamelModel):
    export_id: uuid.UUID
    status: str
    file_name: str
    file_url: str
    file_size: int
    download_url_expires_at: datetime
    records_count: int
    created_at: datetime
