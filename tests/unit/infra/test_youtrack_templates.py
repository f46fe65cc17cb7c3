import pytest

from reportdesk.domain.errors import ConflictError, NotFoundError
from reportdesk.domain.models.youtrack import YouTrackTemplate
from reportdesk.infra.youtrack.templates import TemplateStore, clean_content, clean_title, substitute


def _template(**overrides) -> YouTrackTemplate:
    fields = {
        "id": "default",
        "name": "Default",
        "projectId": "0-7",
        "summaryTemplate": "[{{status}}] {{title}}",
        "descriptionTemplate": "{{content}}\n\nBranch: {{branch}}",
        "customFields": {"Priority": {"$type": "SingleEnumIssueCustomField", "value": {"name": "Normal"}}},
    }
    fields.update(overrides)
    return YouTrackTemplate.model_validate(fields)


@pytest.fixture()
def store(tmp_path):
    return TemplateStore.in_dir(tmp_path)


class TestCleaning:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("TASK-053: Fix export", "Fix export"),
            ("  rd-7:   Lower case prefix", "Lower case prefix"),
            ("No prefix here", "No prefix here"),
            ("TASK-1 missing colon", "TASK-1 missing colon"),
        ],
    )
    def test_clean_title(self, title, expected):
        assert clean_title(title) == expected

    def test_clean_content_drops_preamble(self):
        assert clean_content("Status: open\nBranch: main\n---\n\nBody\n--- not a rule\n") == "Body\n--- not a rule"

    def test_clean_content_without_separator(self):
        assert clean_content("  Just text \n") == "Just text"

    def test_substitute_unknown_values_become_empty(self):
        assert substitute("{{taskId}}/{{branch}}/{{other}}", {"taskId": "T-1"}) == "T-1//{{other}}"


class TestTemplateStore:
    async def test_crud(self, store):
        assert await store.list_templates() == []
        await store.create(_template())
        with pytest.raises(ConflictError):
            await store.create(_template())

        updated = await store.update("default", {"name": "Renamed", "id": "other"})
        assert updated.id == "default"
        assert updated.name == "Renamed"
        assert updated.custom_fields["Priority"].value.name == "Normal"
        assert [t.name for t in await store.list_templates()] == ["Renamed"]

        await store.delete("default")
        with pytest.raises(NotFoundError):
            await store.get("default")
        with pytest.raises(NotFoundError):
            await store.delete("default")

    async def test_update_missing(self, store):
        with pytest.raises(NotFoundError):
            await store.update("ghost", {"name": "x"})

    async def test_path_like_id_is_not_found(self, store):
        with pytest.raises(NotFoundError):
            await store.get("../secrets")

    async def test_invalid_files_are_skipped(self, store, tmp_path):
        await store.create(_template())
        (tmp_path / "youtrack-templates" / "broken.json").write_text('{"id": "broken"}', encoding="utf-8")
        assert [t.id for t in await store.list_templates()] == ["default"]

    async def test_render(self, store):
        await store.create(_template(parentIssueId="  "))
        rendered = await store.render(
            "default",
            {
                "taskId": "",
                "title": "TASK-053: Fix export",
                "content": "Status: open\n---\nDo the thing",
                "status": "open",
                "branch": "",
            },
        )
        assert rendered.summary == "[open] Fix export"
        assert rendered.description == "Do the thing\n\nBranch: "
        assert rendered.project_id == "0-7"
        assert rendered.parent_issue_id is None
        assert rendered.custom_fields == [
            {"name": "Priority", "$type": "SingleEnumIssueCustomField", "value": {"name": "Normal"}}
        ]

    async def test_render_missing_template(self, store):
        with pytest.raises(NotFoundError, match="Template 'nope' not found"):
            await store.render("nope", {})
