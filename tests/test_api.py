"""Tests for the pipeline HTTP API."""

import pytest

from pipeline_registry.models.base import ScheduleStatus
from tests.helpers import encode_yaml, seed_schedule, workflow_yaml

ALICE = {"X-User-Name": "alice"}
BOB = {"X-User-Name": "bob"}
ROOT = {"X-User-Name": "root"}


def create_body(name: str, desc: str = "") -> dict:
    return {"yaml_raw": encode_yaml(workflow_yaml(name)), "desc": desc}


async def create(client, name: str, headers: dict = ALICE) -> dict:
    response = await client.post("/api/pipeline", json=create_body(name), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestPipelineApi:
    """Tests for /api/pipeline endpoints."""

    @pytest.mark.asyncio
    async def test_create(self, client):
        response = await client.post("/api/pipeline", json=create_body("demo", "x"), headers=ALICE)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "demo"
        assert data["pipeline_id"].startswith("ppl-")
        assert data["pipeline_version_id"].startswith("pplver-")

    @pytest.mark.asyncio
    async def test_create_duplicate(self, client):
        await create(client, "demo")
        response = await client.post("/api/pipeline", json=create_body("demo"), headers=ALICE)

        assert response.status_code == 409
        assert response.json()["code"] == "DuplicatedName"

    @pytest.mark.asyncio
    async def test_missing_user_header(self, client):
        response = await client.get("/api/pipeline")

        assert response.status_code == 401
        assert response.json()["code"] == "AuthenticationFailed"

    @pytest.mark.asyncio
    async def test_malformed_yaml(self, client):
        body = {"yaml_raw": encode_yaml("name: [demo\n")}
        response = await client.post("/api/pipeline", json=body, headers=ALICE)

        assert response.status_code == 400
        assert response.json()["code"] == "MalformedYaml"

    @pytest.mark.asyncio
    async def test_conflicting_source(self, client):
        body = {"yaml_raw": encode_yaml(workflow_yaml("demo")), "yaml_path": "./run.yaml"}
        response = await client.post("/api/pipeline", json=body, headers=ALICE)

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_create_from_filesystem(self, client, fs_root):
        (fs_root / "run.yaml").write_text(workflow_yaml("from_fs"))
        response = await client.post("/api/pipeline", json={"fs_name": "data"}, headers=ALICE)

        assert response.status_code == 201
        assert response.json()["name"] == "from_fs"

    @pytest.mark.asyncio
    async def test_update_and_get(self, client):
        created = await create(client, "demo")
        pipeline_id = created["pipeline_id"]

        response = await client.put(
            f"/api/pipeline/{pipeline_id}", json=create_body("demo", "v2"), headers=ALICE
        )
        assert response.status_code == 200
        version_id = response.json()["pipeline_version_id"]

        response = await client.get(f"/api/pipeline/{pipeline_id}", headers=ALICE)
        assert response.status_code == 200
        data = response.json()
        assert data["pipeline"]["desc"] == "v2"
        versions = data["pipeline_versions"]["pipeline_version_list"]
        assert [v["pipeline_version_id"] for v in versions] == [
            created["pipeline_version_id"],
            version_id,
        ]

        response = await client.get(f"/api/pipeline/{pipeline_id}/{version_id}", headers=ALICE)
        assert response.status_code == 200
        assert response.json()["pipeline_version"]["pipeline_yaml"] == workflow_yaml("demo")

    @pytest.mark.asyncio
    async def test_list_pages(self, client):
        for i in range(3):
            await create(client, f"demo_{i}")

        response = await client.get("/api/pipeline", params={"maxKeys": 2}, headers=ALICE)
        assert response.status_code == 200
        first = response.json()
        assert [p["name"] for p in first["pipeline_list"]] == ["demo_0", "demo_1"]
        assert first["truncated"] is True
        assert first["max_keys"] == 2

        response = await client.get(
            "/api/pipeline",
            params={"maxKeys": 2, "marker": first["next_marker"]},
            headers=ALICE,
        )
        second = response.json()
        assert [p["name"] for p in second["pipeline_list"]] == ["demo_2"]
        assert second["next_marker"] == ""
        assert second["truncated"] is False

    @pytest.mark.asyncio
    async def test_list_invalid_marker(self, client):
        response = await client.get("/api/pipeline", params={"marker": "bogus"}, headers=ALICE)

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidMarker"

    @pytest.mark.asyncio
    async def test_list_user_filter(self, client):
        await create(client, "demo", ALICE)
        await create(client, "other", BOB)

        response = await client.get("/api/pipeline", params={"userFilter": "bob"}, headers=ALICE)
        assert response.status_code == 400

        response = await client.get(
            "/api/pipeline", params={"userFilter": "alice,bob"}, headers=ROOT
        )
        assert response.status_code == 200
        assert [p["username"] for p in response.json()["pipeline_list"]] == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_access_denied(self, client):
        created = await create(client, "demo")

        response = await client.get(f"/api/pipeline/{created['pipeline_id']}", headers=BOB)

        assert response.status_code == 403
        assert response.json()["code"] == "AccessDenied"

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        response = await client.get("/api/pipeline/ppl-999999", headers=ALICE)

        assert response.status_code == 404
        assert response.json()["code"] == "NotFound"

    @pytest.mark.asyncio
    async def test_delete_version_and_pipeline(self, client):
        created = await create(client, "demo")
        pipeline_id = created["pipeline_id"]
        response = await client.put(
            f"/api/pipeline/{pipeline_id}", json=create_body("demo"), headers=ALICE
        )
        second_version = response.json()["pipeline_version_id"]

        response = await client.delete(
            f"/api/pipeline/{pipeline_id}/{created['pipeline_version_id']}", headers=ALICE
        )
        assert response.status_code == 204

        response = await client.delete(
            f"/api/pipeline/{pipeline_id}/{second_version}", headers=ALICE
        )
        assert response.status_code == 409
        assert response.json()["code"] == "ActionNotAllowed"

        response = await client.delete(f"/api/pipeline/{pipeline_id}", headers=ALICE)
        assert response.status_code == 204

        response = await client.get(f"/api/pipeline/{pipeline_id}", headers=ALICE)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_with_running_schedule(self, client, test_session):
        created = await create(client, "demo")
        schedule = await seed_schedule(
            test_session, "schedule-000001", created["pipeline_id"], created["pipeline_version_id"]
        )

        response = await client.delete(f"/api/pipeline/{created['pipeline_id']}", headers=ALICE)
        assert response.status_code == 409
        assert response.json()["code"] == "ActionNotAllowed"

        schedule.status = ScheduleStatus.terminated
        await test_session.commit()

        response = await client.delete(f"/api/pipeline/{created['pipeline_id']}", headers=ALICE)
        assert response.status_code == 204
