import json

import pytest

from reportdesk.infra.youtrack.blacklist import TagsBlacklist


@pytest.fixture()
def blacklist(tmp_path):
    return TagsBlacklist.in_dir(tmp_path)


class TestTagsBlacklist:
    async def test_missing_file_is_empty(self, blacklist):
        assert await blacklist.get() == []

    async def test_replace_normalizes(self, blacklist, tmp_path):
        result = await blacklist.replace(["  wip ", "", "draft", "wip"])
        assert result == ["draft", "wip"]
        raw = json.loads((tmp_path / "youtrack-tags-blacklist.json").read_text(encoding="utf-8"))
        assert raw == {"blacklist": ["draft", "wip"]}

    async def test_add_and_remove_are_idempotent(self, blacklist):
        assert await blacklist.add_tag("wip") == ["wip"]
        assert await blacklist.add_tag("wip") == ["wip"]
        assert await blacklist.add_tag("alpha") == ["alpha", "wip"]
        assert await blacklist.remove_tag("wip") == ["alpha"]
        assert await blacklist.remove_tag("wip") == ["alpha"]

    async def test_filter_is_case_insensitive_and_keeps_order(self, blacklist):
        await blacklist.replace(["Internal"])
        assert await blacklist.filter_tags(["feature", "Internal", "prod"]) == ["feature", "prod"]
        assert await blacklist.filter_tags(["internal", "INTERNAL ", "ops"]) == ["ops"]

    async def test_filter_without_tags(self, blacklist):
        assert await blacklist.filter_tags(None) == []
