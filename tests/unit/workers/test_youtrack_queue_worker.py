from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from reportdesk.config import settings
from reportdesk.workers.celery_app import celery_app
from reportdesk.workers.tasks import _process_youtrack_queue_async, process_youtrack_queue_task


def _response(status_code=200, data=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data
    resp.text = text
    return resp


@pytest.fixture()
def mock_http():
    return AsyncMock()


def test_beat_schedule_drains_queue():
    entry = celery_app.conf.beat_schedule["process-youtrack-queue"]
    assert entry["task"] == process_youtrack_queue_task.name == "process_youtrack_queue"
    assert entry["schedule"] == float(settings.youtrack_queue_process_interval_seconds)


async def test_triggers_pass_in_api_process(mock_http, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "api_base_url", "http://api:8000/")
    monkeypatch.setattr(settings, "tasks_dir", str(tmp_path))
    mock_http.post.return_value = _response(data={"processed": 2, "failed": 1, "errors": []})

    result = await _process_youtrack_queue_async(mock_http)

    assert result == {"status": "ok", "processed": 2, "failed": 1}
    mock_http.post.assert_awaited_once_with("http://api:8000/api/youtrack/queue/process")
    # The worker never touches the ledger or manifest files
    assert list(tmp_path.iterdir()) == []


async def test_skips_when_youtrack_not_available(mock_http):
    mock_http.post.return_value = _response(status_code=400, text="YouTrack is not configured")

    result = await _process_youtrack_queue_async(mock_http)

    assert result == {"status": "skipped", "processed": 0, "failed": 0}


async def test_api_error_propagates(mock_http):
    resp = _response(status_code=500)
    resp.raise_for_status.side_effect = httpx.HTTPStatusError("boom", request=MagicMock(), response=MagicMock())
    mock_http.post.return_value = resp

    with pytest.raises(httpx.HTTPStatusError):
        await _process_youtrack_queue_async(mock_http)
