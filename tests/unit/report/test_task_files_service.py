import uuid
from datetime import date, datetime

import pytest

from reportdesk.config import Settings
from reportdesk.db.repos.task_file_repo import TaskFileRepo
from reportdesk.domain.enums import FileStatus, SortOrder
from reportdesk.domain.errors import BadRequestError, ConflictError, FeatureNotImplementedError, NotFoundError
from reportdesk.report.files import TaskFilesService, presign, storage_url_for
from reportdesk.report.lifecycle import TaskLifecycleService

SETTINGS = Settings(mock_file_storage_url="http://files.test/mock/", storage_bucket_name="reports-bucket")


async def _task(session, branch):
    return await TaskLifecycleService(session).create_task(
        branch_id=branch.id,
        period_start=date(2026, 1, 1),
        period_end=date(2026, 1, 31),
        currency="RUB",
        format="TXT",
        report_type="LSOZ",
    )


def test_storage_url_layout():
    task_id = uuid.UUID("11111111-1111-1111-1111-111111111111")
    assert storage_url_for(SETTINGS, task_id, "a.txt") == (
        "s3://reports-bucket/reports/11111111-1111-1111-1111-111111111111/a.txt"
    )


def test_presign_escapes_file_name():
    file_id = uuid.UUID("22222222-2222-2222-2222-222222222222")
    now = datetime(2026, 3, 1, 12, 0, 0)
    url = presign(SETTINGS, file_id, "report 01/02.txt", now)
    assert url.url == "http://files.test/mock/22222222-2222-2222-2222-222222222222/report%2001%2F02.txt"
    assert url.expires_at == datetime(2026, 3, 1, 13, 0, 0)


class TestListFiles:
    async def test_download_links_only_for_completed(self, session, branch):
        task = await _task(session, branch)
        files = TaskFileRepo(session)
        await files.add(task, "done.txt", "TXT", "s3://b/done.txt", 10, FileStatus.COMPLETED)
        await files.add(task, "broken.txt", "TXT", "s3://b/broken.txt", 0, FileStatus.FAILED)

        pairs, total = await TaskFilesService(session, SETTINGS).list_files(
            task.id, sort_by="fileName", sort_order=SortOrder.ASC
        )

        assert total == 2
        assert [f.file_name for f, _ in pairs] == ["broken.txt", "done.txt"]
        assert pairs[0][1] is None
        assert pairs[1][1].url.endswith("/done.txt")

    async def test_status_filter(self, session, branch):
        task = await _task(session, branch)
        files = TaskFileRepo(session)
        await files.add(task, "a.txt", "TXT", "s3://b/a.txt", 1, FileStatus.COMPLETED)
        await files.add(task, "b.txt", "TXT", "s3://b/b.txt", 1, FileStatus.PENDING)

        pairs, total = await TaskFilesService(session, SETTINGS).list_files(task.id, status=FileStatus.PENDING)
        assert total == 1
        assert pairs[0][0].file_name == "b.txt"

    async def test_unknown_task(self, session):
        with pytest.raises(NotFoundError):
            await TaskFilesService(session, SETTINGS).list_files(uuid.uuid4())


class TestRetryFile:
    async def test_checks_in_order(self, session, branch):
        service = TaskFilesService(session, SETTINGS)
        task = await _task(session, branch)
        other = await _task(session, branch)
        files = TaskFileRepo(session)
        failed = await files.add(task, "f.txt", "TXT", "s3://b/f.txt", 0, FileStatus.FAILED)
        done = await files.add(task, "d.txt", "TXT", "s3://b/d.txt", 5, FileStatus.COMPLETED)

        with pytest.raises(NotFoundError, match="Task"):
            await service.retry_file(uuid.uuid4(), failed.id)
        with pytest.raises(NotFoundError, match="File"):
            await service.retry_file(task.id, uuid.uuid4())
        with pytest.raises(BadRequestError):
            await service.retry_file(other.id, failed.id)
        with pytest.raises(ConflictError):
            await service.retry_file(task.id, done.id)
        with pytest.raises(FeatureNotImplementedError):
            await service.retry_file(task.id, failed.id)
