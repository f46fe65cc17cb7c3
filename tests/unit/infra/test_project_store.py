import json

import pytest

from reportdesk.domain.errors import BadRequestError, NotFoundError
from reportdesk.infra.youtrack.projects import ProjectStore


@pytest.fixture()
def projects(tmp_path):
    return ProjectStore.in_dir(tmp_path)


class TestProjectStore:
    async def test_empty_when_file_missing(self, projects):
        assert await projects.list_projects() == []

    async def test_get_or_create_is_case_insensitive(self, projects, tmp_path):
        created = await projects.get_or_create("  Reports ")
        again = await projects.get_or_create("REPORTS")

        assert again.id == created.id
        assert created.name == "Reports"
        raw = json.loads((tmp_path / "projects-metadata.json").read_text(encoding="utf-8"))
        assert raw == {"projects": {created.id: {"name": "Reports"}}}

    async def test_rename(self, projects):
        project = await projects.get_or_create("Reports")
        renamed = await projects.rename(project.id, "Reporting")
        assert renamed.name == "Reporting"
        assert (await projects.get(project.id)).name == "Reporting"

    async def test_rename_unknown(self, projects):
        with pytest.raises(NotFoundError):
            await projects.rename("nope", "Reports")

    async def test_blank_name_rejected(self, projects):
        with pytest.raises(BadRequestError):
            await projects.get_or_create("   ")

    async def test_skips_malformed_records(self, tmp_path, projects):
        (tmp_path / "projects-metadata.json").write_text(
            json.dumps({"projects": {"a": {"name": "Ok"}, "b": "broken", "c": {"title": "x"}}}), encoding="utf-8"
        )
        assert [p.id for p in await projects.list_projects()] == ["a"]
