"""Tests for YouTrackClient: error mapping and the cooldown window."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from reportdesk.domain.errors import NotFoundError
from reportdesk.infra.youtrack.client import (
    YouTrackClient,
    YouTrackNotConfiguredError,
    YouTrackRejectedError,
    YouTrackUnavailableError,
)


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def client(mock_http):
    return YouTrackClient(mock_http, base_url="https://yt.example.com/", token="perm:abc", cooldown_seconds=60)


def _response(status_code=200, data=None, content_type="application/json", text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = {"content-type": content_type}
    resp.json.return_value = data
    resp.text = text
    return resp


class TestConfiguration:
    def test_trailing_slash_trimmed(self, client):
        assert client.base_url == "https://yt.example.com"
        assert client.issue_url("RD-1") == "https://yt.example.com/issue/RD-1"

    async def test_not_configured(self, mock_http):
        client = YouTrackClient(mock_http)
        assert client.is_available() is False
        with pytest.raises(YouTrackNotConfiguredError):
            await client.get_issue("RD-1")
        mock_http.request.assert_not_called()

    async def test_sends_bearer_token(self, client, mock_http):
        mock_http.request.return_value = _response(data={"idReadable": "RD-1"})
        await client.get_issue("RD-1")
        args, kwargs = mock_http.request.call_args
        assert args == ("GET", "https://yt.example.com/api/issues/RD-1")
        assert kwargs["headers"]["Authorization"] == "Bearer perm:abc"


class TestErrorMapping:
    async def test_server_error_arms_cooldown(self, client, mock_http):
        mock_http.request.return_value = _response(status_code=502)
        with pytest.raises(YouTrackUnavailableError):
            await client.get_issue("RD-1")
        assert client.is_unavailable() is True
        assert client.is_available() is False

    async def test_client_error_does_not_arm_cooldown(self, client, mock_http):
        mock_http.request.return_value = _response(status_code=400, text="bad query")
        with pytest.raises(YouTrackRejectedError) as exc_info:
            await client.get_issue("RD-1")
        assert exc_info.value.status_code == 400
        assert client.is_available() is True

    async def test_not_found(self, client, mock_http):
        mock_http.request.return_value = _response(status_code=404)
        with pytest.raises(NotFoundError):
            await client.get_issue("RD-404")
        assert client.is_available() is True

    async def test_timeout_arms_cooldown(self, client, mock_http):
        mock_http.request.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(YouTrackUnavailableError, match="timed out"):
            await client.get_issue("RD-1")
        assert client.is_unavailable() is True

    async def test_connection_error_arms_cooldown(self, client, mock_http):
        mock_http.request.side_effect = httpx.ConnectError("refused")
        with pytest.raises(YouTrackUnavailableError, match="Failed to connect"):
            await client.get_issue("RD-1")
        assert client.is_unavailable() is True

    def test_zero_cooldown_clears_window(self, client):
        client.set_unavailable_for(60)
        assert client.is_unavailable() is True
        client.set_unavailable_for(0)
        assert client.is_unavailable() is False


class TestIssues:
    async def test_create_issue_fetches_readable_id_when_missing(self, client, mock_http):
        mock_http.request.side_effect = [
            _response(data={"id": "2-17"}),
            _response(data={"idReadable": "RD-17"}),
        ]
        issue = await client.create_issue({"summary": "x"})
        assert issue["idReadable"] == "RD-17"
        assert mock_http.request.call_count == 2

    async def test_non_json_body_is_empty(self, client, mock_http):
        mock_http.request.return_value = _response(content_type="text/plain")
        assert await client.apply_command(["RD-1"], "subtask of RD-0") is None

    async def test_apply_command_without_issues_is_noop(self, client, mock_http):
        await client.apply_command([], "subtask of RD-0")
        mock_http.request.assert_not_called()

    async def test_project_id_prefers_configured(self, mock_http):
        client = YouTrackClient(mock_http, base_url="https://yt", token="t", project_id="0-5")
        assert await client.get_project_id() == "0-5"
        mock_http.request.assert_not_called()

    async def test_project_id_falls_back_to_first_project(self, client, mock_http):
        mock_http.request.return_value = _response(data=[{"id": "0-1", "name": "Reports"}, {"id": "0-2"}])
        assert await client.get_project_id() == "0-1"

    async def test_no_projects(self, client, mock_http):
        mock_http.request.return_value = _response(data=[])
        with pytest.raises(NotFoundError):
            await client.get_project_id()
