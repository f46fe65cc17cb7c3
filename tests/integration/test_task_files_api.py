"""Integration tests for task file listing and retry."""

import uuid
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from reportdesk.api.deps import get_db, get_settings
from reportdesk.api.main import app
from reportdesk.config import Settings
from reportdesk.db.repos.task_file_repo import TaskFileRepo
from reportdesk.domain.enums import FileStatus
from reportdesk.report.lifecycle import TaskLifecycleService

BASE = "/api/v1/report-6406/tasks"


@pytest.fixture()
async def files_setup(session, branch):
    lifecycle = TaskLifecycleService(session)
    tasks = []
    for _ in range(2):
        tasks.append(
            await lifecycle.create_task(
                branch_id=branch.id,
                period_start=date(2026, 1, 1),
                period_end=date(2026, 1, 31),
                currency="RUB",
                format="TXT",
                report_type="LSOZ",
            )
        )
    repo = TaskFileRepo(session)
    done = await repo.add(tasks[0], "done.txt", "TXT", "s3://b/done.txt", 2048, FileStatus.COMPLETED)
    failed = await repo.add(tasks[0], "failed.txt", "TXT", "s3://b/failed.txt", 0, FileStatus.FAILED)
    await session.commit()
    return {"task_id": str(tasks[0].id), "other_id": str(tasks[1].id), "done": str(done.id), "failed": str(failed.id)}


@pytest.fixture()
async def client(session):
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_settings] = lambda: Settings(mock_file_storage_url="http://files.test/mock")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class TestListFiles:
    async def test_download_url_only_for_completed(self, client, files_setup):
        resp = await client.get(f"{BASE}/{files_setup['task_id']}/files", params={"sortBy": "fileName", "sortOrder": "ASC"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["pagination"]["totalItems"] == 2
        done, failed = data["files"]
        assert done["fileName"] == "done.txt"
        assert done["downloadUrl"] == f"http://files.test/mock/{files_setup['done']}/done.txt"
        assert done["downloadUrlExpiresAt"] is not None
        assert failed["downloadUrl"] is None

    async def test_filter_by_status(self, client, files_setup):
        resp = await client.get(f"{BASE}/{files_setup['task_id']}/files", params={"status": "FAILED"})
        assert [f["fileName"] for f in resp.json()["files"]] == ["failed.txt"]

    async def test_unknown_task(self, client):
        resp = await client.get(f"{BASE}/{uuid.uuid4()}/files")
        assert resp.status_code == 404


class TestRetryFile:
    async def test_error_order(self, client, files_setup):
        task_id, other_id = files_setup["task_id"], files_setup["other_id"]

        resp = await client.post(f"{BASE}/{uuid.uuid4()}/files/{files_setup['failed']}/retry")
        assert resp.status_code == 404
        resp = await client.post(f"{BASE}/{task_id}/files/{uuid.uuid4()}/retry")
        assert resp.status_code == 404
        resp = await client.post(f"{BASE}/{other_id}/files/{files_setup['failed']}/retry")
        assert resp.status_code == 400
        resp = await client.post(f"{BASE}/{task_id}/files/{files_setup['done']}/retry")
        assert resp.status_code == 409
        resp = await client.post(f"{BASE}/{task_id}/files/{files_setup['failed']}/retry")
        assert resp.status_code == 501
        assert resp.json()["type"] == "https://tools.ietf.org/html/rfc7231#section-6.6.2"
