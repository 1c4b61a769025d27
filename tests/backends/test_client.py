from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from planstore.backends import RemoteProjectClient, create_remote_backend
from planstore.contracts import (
    PermissionDeniedError,
    PlanStoreConfig,
    ProjectMetadata,
    RecordNotFoundError,
    RecordOrigin,
    RemoteTransportError,
)
from tests.fakes.remote import BASE_URL, FakeProjectService


def _client(handler: Any) -> RemoteProjectClient:
    return RemoteProjectClient(BASE_URL, max_retries=0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_create_sends_wire_body_and_returns_id(service: FakeProjectService) -> None:
    client = _client(service.handler)

    project_id = await client.create("user-1", {"tasks": []}, ProjectMetadata(name="Tower", tags=["a"]))

    request = service.requests[-1]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/projects"
    assert json.loads(request.content) == {
        "userId": "user-1",
        "projectData": {"tasks": []},
        "name": "Tower",
        "description": "",
        "isPublic": False,
        "tags": ["a"],
    }
    assert project_id in service.projects


@pytest.mark.asyncio
async def test_import_sends_original_id(service: FakeProjectService) -> None:
    client = _client(service.handler)

    project_id = await client.import_project("user-1", {"tasks": []}, ProjectMetadata(), original_id="project_1_x")

    assert service.requests[-1].url.path == "/api/projects/import"
    assert json.loads(service.requests[-1].content)["originalId"] == "project_1_x"
    assert service.projects[project_id]["originalId"] == "project_1_x"


@pytest.mark.asyncio
async def test_get_maps_record_and_passes_user_id(service: FakeProjectService) -> None:
    project_id = service.seed(user_id="user-1", name="Tower", data={"tasks": [{"id": "a"}]})
    client = _client(service.handler)

    record = await client.get(project_id, "user-1")

    assert record.id == project_id
    assert record.user_id == "user-1"
    assert record.project_data == {"tasks": [{"id": "a"}]}
    assert record.origin == RecordOrigin.REMOTE
    assert service.requests[-1].url.params["userId"] == "user-1"


@pytest.mark.asyncio
async def test_status_codes_map_to_errors(service: FakeProjectService) -> None:
    project_id = service.seed(user_id="user-2", name="Theirs")
    client = _client(service.handler)

    with pytest.raises(RecordNotFoundError, match="Project not found"):
        await client.get("ffffffffffffffffffffffff", "user-1")
    with pytest.raises(PermissionDeniedError, match="Access denied"):
        await client.delete(project_id, "user-1")

    service.fail_status = 500
    with pytest.raises(RemoteTransportError) as exc_info:
        await client.list_for_user("user-1")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_bad_request_is_a_transport_failure() -> None:
    client = _client(lambda request: httpx.Response(400, json={"success": False, "message": "name too long"}))

    with pytest.raises(RemoteTransportError, match="name too long") as exc_info:
        await client.create("user-1", {"tasks": []}, ProjectMetadata())

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_connection_failure_and_timeout_are_transport_failures() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(RemoteTransportError, match="unreachable"):
        await _client(refuse).list_public()
    with pytest.raises(RemoteTransportError, match="timed out"):
        await _client(stall).get("abc", "user-1")


@pytest.mark.asyncio
async def test_invalid_json_is_a_transport_failure() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"<html>proxy error</html>"))

    with pytest.raises(RemoteTransportError, match="invalid JSON"):
        await client.list_public()


@pytest.mark.asyncio
async def test_list_for_user_fills_missing_owner(service: FakeProjectService) -> None:
    service.seed(user_id="user-1", name="One")
    service.seed(user_id="user-1", name="Two")
    service.seed(user_id="user-2", name="Other")
    client = _client(service.handler)

    summaries = await client.list_for_user("user-1")

    assert [summary.name for summary in summaries] == ["Two", "One"]
    assert {summary.user_id for summary in summaries} == {"user-1"}
    assert service.requests[-1].url.path == "/api/projects/user/user-1"


@pytest.mark.asyncio
async def test_update_and_delete(service: FakeProjectService) -> None:
    project_id = service.seed(user_id="user-1", name="Tower")
    client = _client(service.handler)

    await client.update(project_id, "user-1", {"tasks": [{"id": "b"}]}, ProjectMetadata(name="Tower 2"))
    assert service.projects[project_id]["name"] == "Tower 2"

    await client.delete(project_id, "user-1")
    assert project_id not in service.projects


@pytest.mark.asyncio
async def test_client_closes_only_owned_http_client() -> None:
    shared = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])))
    async with RemoteProjectClient(BASE_URL, http_client=shared) as client:
        assert await client.list_public() == []

    assert shared.is_closed is False
    await shared.aclose()


def test_factory_uses_resolved_base_url() -> None:
    backend = create_remote_backend(PlanStoreConfig(environment="production", origin="https://plans.example.com/"))

    assert isinstance(backend, RemoteProjectClient)
    assert backend.base_url == "https://plans.example.com/api"
