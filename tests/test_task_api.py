# tests/test_task_api.py

from __future__ import annotations

import json
import logging

import httpx
import pytest

from kanban_sync.tasks.task_api import ApiError, TaskApiClient
from kanban_sync.tasks.task_models import Task, TaskStatus


class Recorder:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def body(self, i: int = -1):
        return json.loads(self.requests[i].content)


def _client(handler) -> TaskApiClient:
    http = httpx.AsyncClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))
    return TaskApiClient(http=http)


@pytest.mark.asyncio
async def test_list_tasks_maps_every_record() -> None:
    rec = Recorder(
        httpx.Response(200, json=[{"id": 1, "title": "A", "status": "DONE"}, {"id": 2, "title": "B"}])
    )
    api = _client(rec)

    tasks = await api.list_tasks()

    assert [t.id for t in tasks] == ["TASK-1", "TASK-2"]
    assert tasks[0].status == TaskStatus.DONE
    req = rec.requests[0]
    assert (req.method, req.url.path) == ("GET", "/tasks")
    assert req.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_get_task_strips_display_prefix() -> None:
    rec = Recorder(httpx.Response(200, json={"id": 5, "title": "E"}))
    api = _client(rec)

    task = await api.get_task("TASK-5")

    assert task.id == "TASK-5"
    assert rec.requests[0].url.path == "/tasks/5"


@pytest.mark.asyncio
async def test_create_posts_wire_payload() -> None:
    rec = Recorder(httpx.Response(201, json={"id": 7, "title": "X", "status": "TODO"}))
    api = _client(rec)

    created = await api.create_task({"title": "X", "priority": "high"})

    assert created.id == "TASK-7"
    assert rec.requests[0].method == "POST"
    assert rec.body() == {"title": "X", "status": "TODO", "priority": "HIGH"}


@pytest.mark.asyncio
async def test_update_puts_full_task_with_bare_id() -> None:
    rec = Recorder(httpx.Response(200, json={"id": 3, "title": "new", "status": "FINISHED"}))
    api = _client(rec)
    task = Task(id="TASK-3", title="new", status="done")

    updated = await api.update_task("TASK-3", task)

    assert updated.status == TaskStatus.DONE
    req = rec.requests[0]
    assert (req.method, req.url.path) == ("PUT", "/tasks/3")
    assert rec.body()["id"] == "3"
    assert rec.body()["status"] == "finished"


@pytest.mark.asyncio
async def test_update_status_patches_status_endpoint() -> None:
    rec = Recorder(httpx.Response(200, json={"id": 1, "title": "A", "status": "IN_PROGRESS"}))
    api = _client(rec)

    task = await api.update_task_status("TASK-1", TaskStatus.INPROGRESS)

    assert task.status == TaskStatus.INPROGRESS
    req = rec.requests[0]
    assert (req.method, req.url.path) == ("PATCH", "/tasks/1/status")
    assert rec.body() == {"status": "IN_PROGRESS"}


@pytest.mark.asyncio
async def test_delete_accepts_empty_body() -> None:
    rec = Recorder(httpx.Response(204))
    api = _client(rec)

    assert await api.delete_task("1") is None
    assert (rec.requests[0].method, rec.requests[0].url.path) == ("DELETE", "/tasks/1")


@pytest.mark.asyncio
async def test_error_message_comes_from_body(caplog: pytest.LogCaptureFixture) -> None:
    api = _client(Recorder(httpx.Response(400, json={"message": "Title too long"})))

    with caplog.at_level(logging.ERROR, logger="kanban_sync.tasks.task_api"):
        with pytest.raises(ApiError) as exc_info:
            await api.create_task({"title": "x" * 500})

    assert str(exc_info.value) == "Title too long"
    assert exc_info.value.status_code == 400
    assert "Title too long" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="<html>oops</html>"),
        httpx.Response(500, json={"error": "no message field"}),
        httpx.Response(500, json=["not", "an", "object"]),
        httpx.Response(500, json={"message": ""}),
        httpx.Response(500),
    ],
)
async def test_error_message_falls_back_to_status(response: httpx.Response) -> None:
    api = _client(Recorder(response))

    with pytest.raises(ApiError) as exc_info:
        await api.list_tasks()

    assert str(exc_info.value) == "HTTP error! status: 500"


@pytest.mark.asyncio
async def test_transport_errors_are_normalised(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = _client(handler)

    with caplog.at_level(logging.ERROR, logger="kanban_sync.tasks.task_api"):
        with pytest.raises(ApiError) as exc_info:
            await api.get_task("TASK-1")

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert "API request failed" in caplog.text


@pytest.mark.asyncio
async def test_non_json_success_body_is_an_api_error() -> None:
    api = _client(Recorder(httpx.Response(200, text="not json")))

    with pytest.raises(ApiError):
        await api.list_tasks()


@pytest.mark.asyncio
async def test_malformed_task_record_is_an_api_error(caplog: pytest.LogCaptureFixture) -> None:
    api = _client(Recorder(httpx.Response(200, json={"id": 5, "title": "E", "assignee": "bob"})))

    with caplog.at_level(logging.ERROR, logger="kanban_sync.tasks.task_api"):
        with pytest.raises(ApiError, match="Malformed task") as exc_info:
            await api.get_task("TASK-5")

    assert exc_info.value.__cause__ is not None
    assert "malformed task" in caplog.text


@pytest.mark.asyncio
async def test_non_mapping_list_item_is_an_api_error(caplog: pytest.LogCaptureFixture) -> None:
    api = _client(Recorder(httpx.Response(200, json=[{"id": 1, "title": "A"}, "oops", None])))

    with caplog.at_level(logging.ERROR, logger="kanban_sync.tasks.task_api"):
        with pytest.raises(ApiError, match="task list item"):
            await api.list_tasks()

    assert "unexpected task list item payload" in caplog.text


@pytest.mark.asyncio
async def test_owned_client_is_closed() -> None:
    async with TaskApiClient("http://backend.test/") as api:
        assert api._http.base_url.host == "backend.test"
    assert api._http.is_closed
