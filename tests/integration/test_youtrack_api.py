"""Integration tests for the YouTrack sync endpoints with an unconfigured YouTrack."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from reportdesk.api.deps import get_settings, get_tags_blacklist, get_templates, get_youtrack_queue, get_youtrack_sync
from reportdesk.api.main import _startup_queue_pass, app
from reportdesk.config import Settings
from reportdesk.infra.youtrack.blacklist import TagsBlacklist
from reportdesk.infra.youtrack.client import YouTrackClient
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.processor import YouTrackSyncService
from reportdesk.infra.youtrack.queue import YouTrackQueue
from reportdesk.infra.youtrack.templates import TemplateStore

BASE = "/api/youtrack"

TEMPLATE = {
    "id": "default",
    "name": "Default",
    "projectId": "0-7",
    "summaryTemplate": "{{title}}",
    "descriptionTemplate": "{{content}}",
    "customFields": {"Priority": {"$type": "SingleEnumIssueCustomField", "value": {"name": "Normal"}}},
}


@pytest.fixture()
async def client(tmp_path):
    manifest = {"tasks": [{"id": "TASK-053", "title": "Fix export", "file": "TASK-053.md", "tags": ["wip"]}]}
    (tmp_path / "tasks-manifest.json").write_text(json.dumps(manifest), encoding="utf-8")

    queue = YouTrackQueue.in_dir(tmp_path)
    templates = TemplateStore.in_dir(tmp_path)
    blacklist = TagsBlacklist.in_dir(tmp_path)
    sync = YouTrackSyncService(YouTrackClient(AsyncMock()), queue, LocalTaskStore(tmp_path), templates, blacklist)

    app.dependency_overrides[get_youtrack_sync] = lambda: sync
    app.dependency_overrides[get_youtrack_queue] = lambda: queue
    app.dependency_overrides[get_templates] = lambda: templates
    app.dependency_overrides[get_tags_blacklist] = lambda: blacklist
    app.dependency_overrides[get_settings] = lambda: Settings(youtrack_url="https://yt.example.com/")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class TestIssuesWhileUnavailable:
    async def test_create_is_queued(self, client):
        resp = await client.post(f"{BASE}/tasks", json={"taskId": "TASK-053"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["queued"] is True
        assert data["localTaskId"] == "TASK-053"
        assert data["youtrackIssueIds"] == []

        queue = (await client.get(f"{BASE}/queue")).json()
        assert queue["pending"] == 1
        assert queue["operations"][0]["id"] == data["operationId"]
        assert queue["operations"][0]["type"] == "create_issue"
        assert queue["operations"][0]["data"] == {"taskId": "TASK-053", "templateId": "default"}

    async def test_link_is_queued(self, client):
        resp = await client.post(f"{BASE}/tasks/TASK-053/link", json={"youtrackIssueId": "RD-1"})
        assert resp.json()["queued"] is True
        assert resp.json()["youtrackIssueId"] == "RD-1"

    async def test_unknown_task(self, client):
        resp = await client.post(f"{BASE}/tasks", json={"taskId": "TASK-999"})
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")

    async def test_links_without_details(self, client):
        resp = await client.get(f"{BASE}/tasks/TASK-053", params={"includeDetails": "true"})
        assert resp.json() == {"localTaskId": "TASK-053", "youtrackIssueIds": [], "links": []}

    async def test_issue_preview_unavailable(self, client):
        resp = await client.get(f"{BASE}/issues/RD-1")
        assert resp.status_code == 503

    async def test_process_queue_rejected(self, client):
        resp = await client.post(f"{BASE}/queue/process")
        assert resp.status_code == 400

    async def test_config(self, client):
        assert (await client.get(f"{BASE}/config")).json() == {"baseUrl": "https://yt.example.com"}


class TestQueueAPI:
    async def test_remove_operation(self, client):
        queued = (await client.post(f"{BASE}/tasks", json={"taskId": "TASK-053"})).json()

        resp = await client.delete(f"{BASE}/queue/{queued['operationId']}")
        assert resp.status_code == 204
        assert (await client.get(f"{BASE}/queue")).json()["operations"] == []

        resp = await client.delete(f"{BASE}/queue/{queued['operationId']}")
        assert resp.status_code == 404


class TestTemplatesAPI:
    async def test_crud(self, client):
        resp = await client.post(f"{BASE}/templates", json=TEMPLATE)
        assert resp.status_code == 201
        assert resp.json()["customFields"]["Priority"]["$type"] == "SingleEnumIssueCustomField"
        assert (await client.post(f"{BASE}/templates", json=TEMPLATE)).status_code == 409

        listed = (await client.get(f"{BASE}/templates")).json()
        assert [t["id"] for t in listed] == ["default"]

        resp = await client.put(f"{BASE}/templates/default", json={"name": "Renamed"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Renamed"
        assert resp.json()["projectId"] == "0-7"

        assert (await client.delete(f"{BASE}/templates/default")).status_code == 204
        assert (await client.get(f"{BASE}/templates/default")).status_code == 404

    async def test_invalid_template_id(self, client):
        resp = await client.post(f"{BASE}/templates", json={**TEMPLATE, "id": "bad id"})
        assert resp.status_code == 422


class TestBlacklistAPI:
    async def test_blacklist_routes(self, client):
        assert (await client.get(f"{BASE}/tags/blacklist")).json() == {"blacklist": []}

        resp = await client.put(f"{BASE}/tags/blacklist", json={"tag": " wip "})
        assert resp.json() == {"blacklist": ["wip"]}

        resp = await client.post(f"{BASE}/tags/blacklist", json={"blacklist": ["beta", "alpha", "beta"]})
        assert resp.json() == {"blacklist": ["alpha", "beta"]}

        resp = await client.delete(f"{BASE}/tags/blacklist/alpha")
        assert resp.json() == {"blacklist": ["beta"]}


class TestStartupQueuePass:
    async def test_failure_is_logged_not_raised(self, caplog):
        sync = MagicMock()
        sync.process_pending_operations = AsyncMock(side_effect=RuntimeError("ledger unreadable"))
        await _startup_queue_pass(sync, 0)
        assert "Startup YouTrack queue pass failed" in caplog.text

    async def test_runs_one_pass(self):
        sync = MagicMock()
        sync.process_pending_operations = AsyncMock(return_value=MagicMock(processed=0, failed=0))
        await _startup_queue_pass(sync, 0)
        sync.process_pending_operations.assert_awaited_once()
