"""Integration tests for browsing local markdown tasks and their projects."""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from reportdesk.api.deps import get_local_tasks, get_projects
from reportdesk.api.main import app
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.projects import ProjectStore


@pytest.fixture()
async def client(tmp_path):
    manifest = {
        "tasks": [
            {"id": "TASK-053", "title": "Fix export", "status": "backlog", "file": "TASK-053.md", "priority": "high"},
        ]
    }
    (tmp_path / "tasks-manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    (tmp_path / "TASK-053.md").write_text("## Status\n📋 Backlog\n", encoding="utf-8")

    projects = ProjectStore.in_dir(tmp_path)
    tasks = LocalTaskStore(tmp_path, projects=projects)
    app.dependency_overrides[get_local_tasks] = lambda: tasks
    app.dependency_overrides[get_projects] = lambda: projects
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class TestTasksAPI:
    async def test_list_and_get(self, client):
        resp = await client.get("/api/tasks")
        assert resp.status_code == 200
        [task] = resp.json()
        assert task["id"] == "TASK-053"
        assert task["priority"] == "high"
        assert "content" not in task

        detail = (await client.get("/api/tasks/TASK-053")).json()
        assert detail["content"] == "## Status\n📋 Backlog\n"

    async def test_get_unknown_is_404(self, client):
        resp = await client.get("/api/tasks/TASK-999")
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")

    async def test_patch_status_and_project(self, client):
        resp = await client.patch("/api/tasks/TASK-053", json={"status": "in-progress", "project": "Reports"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "in-progress"
        assert data["project"] == "Reports"

        detail = (await client.get("/api/tasks/TASK-053")).json()
        assert detail["content"] == "## Status\n⏳ In progress\n"

    async def test_patch_rejects_unknown_status(self, client):
        resp = await client.patch("/api/tasks/TASK-053", json={"status": "done"})
        assert resp.status_code == 422


class TestProjectsAPI:
    async def test_lifecycle(self, client):
        resp = await client.post("/api/projects", json={"name": "Reports"})
        assert resp.status_code == 201
        project = resp.json()

        resp = await client.patch(f"/api/projects/{project['id']}", json={"name": "Reporting"})
        assert resp.json() == {"id": project["id"], "name": "Reporting"}

        await client.patch("/api/tasks/TASK-053", json={"project": "Reporting"})
        resp = await client.delete(f"/api/projects/{project['id']}")
        assert resp.json() == {"updated": 1}
        assert (await client.get("/api/projects")).json() == []
        assert (await client.get("/api/tasks")).json()[0]["project"] is None

    async def test_rename_unknown_is_404(self, client):
        resp = await client.patch("/api/projects/nope", json={"name": "X"})
        assert resp.status_code == 404

    async def test_blank_name_is_400(self, client):
        resp = await client.post("/api/projects", json={"name": "   "})
        assert resp.status_code == 400
