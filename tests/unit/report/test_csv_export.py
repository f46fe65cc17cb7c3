import csv
import io
import uuid
from datetime import date, datetime
from typing import Optional

import pytest

from reportdesk.config import Settings
from reportdesk.db.models.report_task import ReportTask
from reportdesk.domain.enums import SortOrder
from reportdesk.report.export import EXPORT_COLUMNS, CsvExportService, export_file_name, render_tasks_csv
from reportdesk.report.lifecycle import TaskLifecycleService


def _task(branch_name: str, status: str = "created", error: Optional[str] = None) -> ReportTask:
    return ReportTask(
        id=uuid.uuid4(),
        created_at=datetime(2026, 3, 1, 10, 30, 0),
        updated_at=datetime(2026, 3, 1, 10, 30, 0),
        created_by="Anna Petrova",
        branch_id=uuid.uuid4(),
        branch_name=branch_name,
        period_start=date(2026, 1, 1),
        period_end=date(2026, 1, 31),
        currency="RUB",
        format="TXT",
        report_type="LSOZ",
        status=status,
        files_count=0,
        error_message=error,
    )


class TestRenderCsv:
    def test_round_trip_preserves_fields(self):
        tasks = [
            _task("Branch North"),
            _task("Branch, East"),
            _task('Branch "South"', status="failed", error="line one\nline two"),
        ]
        content = render_tasks_csv(tasks)

        rows = list(csv.reader(io.StringIO(content)))
        assert rows[0] == [header for header, _ in EXPORT_COLUMNS.values()]
        assert len(rows) == 4

        branch_col = rows[0].index("Branch Name")
        assert [r[branch_col] for r in rows[1:]] == ["Branch North", "Branch, East", 'Branch "South"']
        error_col = rows[0].index("Error Message")
        assert rows[3][error_col] == "line one\nline two"
        assert rows[1][rows[0].index("ID")] == str(tasks[0].id)

    def test_quotes_only_where_needed(self):
        content = render_tasks_csv([_task("Branch, East")], columns=["branchName", "status"])
        assert content == 'Branch Name,Status\n"Branch, East",created'

    def test_header_only_when_empty(self):
        assert render_tasks_csv([], columns=["id", "status"]) == "ID,Status"

    def test_file_name_has_no_colons(self):
        name = export_file_name(datetime(2026, 3, 1, 10, 30, 15, 123456))
        assert name == "report-6406-tasks-export-2026-03-01T10-30-15.csv"


class TestCsvExportService:
    async def test_export_filters_and_describes(self, session, branch):
        lifecycle = TaskLifecycleService(session)
        for report_type in ("LSOZ", "LSOZ", "KROS"):
            await lifecycle.create_task(
                branch_id=branch.id,
                period_start=date(2026, 1, 1),
                period_end=date(2026, 1, 31),
                currency="RUB",
                format="TXT",
                report_type=report_type,
            )
        await session.flush()

        settings = Settings(mock_file_storage_url="http://files.test/mock")
        descriptor = await CsvExportService(session, settings).export(
            report_types=["LSOZ"], sort_order=SortOrder.ASC
        )

        assert descriptor.records_count == 2
        assert descriptor.status == "COMPLETED"
        assert descriptor.file_url == f"http://files.test/mock/exports/{descriptor.file_name}"
        assert descriptor.file_size > 0
        assert (descriptor.download_url_expires_at - descriptor.created_at).total_seconds() == pytest.approx(3600)

    async def test_export_respects_record_cap(self, session, branch):
        lifecycle = TaskLifecycleService(session)
        for _ in range(3):
            await lifecycle.create_task(
                branch_id=branch.id,
                period_start=date(2026, 2, 1),
                period_end=date(2026, 2, 28),
                currency="FOREIGN",
                format="XML",
                report_type="LSOS",
            )
        descriptor = await CsvExportService(session, Settings(csv_export_max_records=2)).export()
        assert descriptor.records_count == 2
