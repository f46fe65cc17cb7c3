import json

import pytest

from reportdesk.domain.errors import NotFoundError
from reportdesk.infra.youtrack.local_tasks import LocalTaskStore
from reportdesk.infra.youtrack.projects import ProjectStore

TASK_MD = "# TASK-053: Fix export\n\n## Status\n⏳ In progress\n\n---\nExport breaks on commas\n"


@pytest.fixture()
def tasks_dir(tmp_path):
    manifest = {
        "tasks": [
            {
                "id": "TASK-053",
                "title": "TASK-053: Fix export",
                "status": "in-progress",
                "file": "TASK-053.md",
                "createdDate": "2026-10-01",
                "tags": ["export", ""],
                "projectId": "p-1",
            },
            {"id": "TASK-054", "title": "Plan Q4", "status": "backlog", "file": "TASK-054.md"},
        ]
    }
    projects = {"projects": {"p-1": {"name": "Reports"}}}
    (tmp_path / "tasks-manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    (tmp_path / "projects-metadata.json").write_text(json.dumps(projects), encoding="utf-8")
    (tmp_path / "TASK-053.md").write_text(TASK_MD, encoding="utf-8")
    return tmp_path


@pytest.fixture()
def store(tasks_dir):
    return LocalTaskStore(tasks_dir)


def _manifest(tasks_dir):
    return json.loads((tasks_dir / "tasks-manifest.json").read_text(encoding="utf-8"))


class TestBrowse:
    async def test_list_resolves_projects_and_defaults(self, store):
        tasks = await store.list_tasks()

        assert [t.id for t in tasks] == ["TASK-053", "TASK-054"]
        first, second = tasks
        assert first.project == "Reports"
        assert first.tags == ["export"]
        assert first.priority == "medium"
        assert first.content == ""
        assert second.project is None

    async def test_get_includes_markdown(self, store):
        task = await store.get_task("TASK-053")
        assert task.content == TASK_MD
        assert task.created_date == "2026-10-01"


class TestUpdateMeta:
    async def test_status_change_rewrites_markdown(self, store, tasks_dir):
        task = await store.update_meta("TASK-053", {"status": "completed", "completedDate": "2026-10-19"})

        assert task.status == "completed"
        assert task.completed_date == "2026-10-19"
        content = (tasks_dir / "TASK-053.md").read_text(encoding="utf-8")
        assert "## Status\n✅ Completed\n" in content
        assert content.endswith("Export breaks on commas\n")

    async def test_project_name_is_resolved_or_created(self, store, tasks_dir):
        same = await store.update_meta("TASK-054", {"project": "reports"})
        assert same.project == "Reports"
        assert _manifest(tasks_dir)["tasks"][1]["projectId"] == "p-1"

        created = await store.update_meta("TASK-054", {"project": "Infra"})
        assert created.project == "Infra"
        assert [p.name for p in await ProjectStore.in_dir(tasks_dir).list_projects()] == ["Reports", "Infra"]

    async def test_clearing_project(self, store, tasks_dir):
        task = await store.update_meta("TASK-053", {"project": None})
        assert task.project is None
        assert "projectId" not in _manifest(tasks_dir)["tasks"][0]

    async def test_missing_markdown_file_is_ignored(self, store):
        task = await store.update_meta("TASK-054", {"status": "planned"})
        assert task.status == "planned"

    async def test_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            await store.update_meta("TASK-999", {"title": "x"})


class TestRemoveProject:
    async def test_clears_tasks_and_metadata(self, store, tasks_dir):
        assert await store.remove_project("p-1") == 1
        assert "projectId" not in _manifest(tasks_dir)["tasks"][0]
        assert await ProjectStore.in_dir(tasks_dir).list_projects() == []
