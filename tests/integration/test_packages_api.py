"""Integration tests for the report-6406 package endpoints."""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from reportdesk.api.deps import get_db
from reportdesk.api.main import app

BASE = "/api/v1/report-6406/packages"
TASKS = "/api/v1/report-6406/tasks"


@pytest.fixture()
async def client(session, branch):
    await session.commit()
    app.dependency_overrides[get_db] = lambda: session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _package(client, name="January"):
    resp = await client.post(BASE, json={"name": name, "createdBy": "Anna Petrova"})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _task(client, branch):
    body = {
        "branchId": str(branch.id),
        "periodStart": "2026-01-01",
        "periodEnd": "2026-01-31",
        "currency": "RUB",
        "format": "TXT",
        "reportType": "LSOZ",
    }
    resp = await client.post(TASKS, json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestPackages:
    async def test_create_and_list(self, client):
        created = await _package(client)
        assert created["status"] == "pack_create"
        assert created["tasksCount"] == 0
        await _package(client, "February")

        resp = await client.get(BASE, params={"search": "janu", "sortBy": "name", "sortOrder": "ASC"})
        assert resp.status_code == 200
        data = resp.json()
        assert [p["name"] for p in data["packages"]] == ["January"]
        assert data["pagination"]["totalItems"] == 1

    async def test_duplicate_name_is_conflict(self, client):
        await _package(client)
        resp = await client.post(BASE, json={"name": "January", "createdBy": "x"})
        assert resp.status_code == 409

    async def test_detail_lists_tasks(self, client, branch):
        package = await _package(client)
        task = await _task(client, branch)

        resp = await client.post(f"{BASE}/{package['id']}/tasks", json={"taskIds": [task["id"], str(uuid.uuid4())]})
        assert resp.status_code == 200
        assert resp.json()["added"] == 1
        assert resp.json()["notFound"] == 1

        detail = (await client.get(f"{BASE}/{package['id']}")).json()
        assert detail["tasksCount"] == 1
        assert detail["tasks"][0]["id"] == task["id"]
        assert detail["tasks"][0]["canStart"] is True
        assert "addedAt" in detail["tasks"][0]

        listed = (await client.get(TASKS, params={"packageId": package["id"]})).json()
        assert [t["id"] for t in listed["tasks"]] == [task["id"]]
        assert (await client.get(TASKS, params={"packageId": "null"})).json()["tasks"] == []
        assert (await client.get(TASKS, params={"packageId": "nope"})).status_code == 400

    async def test_rename(self, client):
        package = await _package(client)
        resp = await client.patch(f"{BASE}/{package['id']}", json={"name": "Q1"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Q1"

    async def test_copy_to_tfr(self, client, branch):
        package = await _package(client)
        resp = await client.post(f"{BASE}/{package['id']}/copy-to-tfr")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cannot copy empty package to TFR"

        task = await _task(client, branch)
        await client.post(f"{BASE}/{package['id']}/tasks", json={"taskIds": [task["id"]]})
        resp = await client.post(f"{BASE}/{package['id']}/copy-to-tfr", headers={"X-User-Name": "Ivan"})
        assert resp.status_code == 200
        assert resp.json()["message"] == "Package successfully copied to TFR"
        assert resp.json()["lastCopiedToTfrAt"]

        history = (await client.get(f"{BASE}/{package['id']}/status-history")).json()
        assert [h["status"] for h in history] == ["pack_done", "pack_transfer", "pack_create"]
        assert history[0]["changedBy"] == "Ivan"

    async def test_copy_unknown_package(self, client):
        resp = await client.post(f"{BASE}/{uuid.uuid4()}/copy-to-tfr")
        assert resp.status_code == 404

    async def test_bulk_delete(self, client):
        package = await _package(client)
        resp = await client.request("DELETE", BASE, json={"packageIds": [package["id"], str(uuid.uuid4())]})
        assert resp.status_code == 200
        data = resp.json()
        assert (data["deleted"], data["failed"]) == (1, 1)
        assert (await client.get(f"{BASE}/{package['id']}")).status_code == 404

    async def test_remove_tasks(self, client, branch):
        package = await _package(client)
        task = await _task(client, branch)
        await client.post(f"{BASE}/{package['id']}/tasks", json={"taskIds": [task["id"]]})

        resp = await client.request("DELETE", f"{BASE}/{package['id']}/tasks", json={"taskIds": [task["id"]]})
        assert resp.json()["removed"] == 1
        assert (await client.get(f"{BASE}/{package['id']}")).json()["tasksCount"] == 0


class TestReferenceLists:
    async def test_currencies_and_formats(self, client):
        currencies = (await client.get("/api/v1/report-6406/references/currencies")).json()
        assert [c["code"] for c in currencies] == ["RUB", "FOREIGN"]
        formats = (await client.get("/api/v1/report-6406/references/formats")).json()
        assert [f["code"] for f in formats] == ["TXT", "XLSX", "XML"]
        types = (await client.get("/api/v1/report-6406/references/report-types")).json()
        assert {"code": "KROS_VOS", "name": "KROS VOS"} in types
