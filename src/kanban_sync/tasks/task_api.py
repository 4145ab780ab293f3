# src/kanban_sync/tasks/task_api.py

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .task_models import Task, TaskStatus, TaskValidationError, strip_display_id
from .task_transform import status_to_wire, to_domain, to_wire

logger = logging.getLogger(__name__)

TASKS_PATH = "/tasks"

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiError(RuntimeError):
    """Uniform remote failure. Raw transport exceptions never leave this module."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_message_from_response(response: httpx.Response) -> str:
    """
    Human-readable message for a non-success response.

    The body is decoded as an optional JSON object with an optional string
    `message`; anything else falls back to the status code.
    """
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        body = response.json()
    except (ValueError, UnicodeDecodeError):
        return fallback
    if not isinstance(body, dict):
        return fallback
    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return fallback


def _task_path(task_id: str) -> str:
    bare = strip_display_id(task_id)
    if not bare:
        logger.error("API request rejected: empty task id %r", task_id)
        raise ApiError("Task id is required")
    return f"{TASKS_PATH}/{bare}"


class TaskApiClient:
    """
    Async client for the backend `/tasks` resource.

    Every payload crossing the boundary goes through the transform layer:
    outbound with to_wire, inbound with to_domain.

    The httpx client can be injected (tests use httpx.MockTransport); when it is
    not, one is created from base_url and owned (closed) by this object.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_http = http is None
        if http is None:
            http = httpx.AsyncClient(
                base_url=base_url.rstrip("/"),
                headers=DEFAULT_HEADERS,
                timeout=timeout,
            )
        self._http = http
        logger.info("TaskApiClient ready base_url=%s", self._http.base_url)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> TaskApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- low-level helpers ----

    async def _request(self, method: str, path: str, *, payload: Any = None) -> Any:
        content = None if payload is None else json.dumps(payload, ensure_ascii=False)
        try:
            response = await self._http.request(
                method, path, content=content, headers=DEFAULT_HEADERS
            )
        except httpx.HTTPError as e:
            logger.error("API request failed: %s %s (%s: %s)", method, path, e.__class__.__name__, e)
            raise ApiError(f"Network error: {e}") from e

        if response.is_error:
            message = error_message_from_response(response)
            logger.error(
                "API request failed: %s %s status=%s message=%s",
                method,
                path,
                response.status_code,
                message,
            )
            raise ApiError(message, status_code=response.status_code)

        if not response.content:
            return None

        try:
            return response.json()
        except (ValueError, UnicodeDecodeError) as e:
            logger.error("API request failed: %s %s returned a non-JSON body", method, path)
            raise ApiError(
                f"Invalid JSON in response (status: {response.status_code})",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _one(body: Any, what: str) -> Task:
        if not isinstance(body, Mapping):
            logger.error("API returned unexpected %s payload: %r", what, type(body).__name__)
            raise ApiError(f"Unexpected response for {what}")
        try:
            return to_domain(body)
        except TaskValidationError as e:
            logger.error("API returned malformed %s: %s", what, e)
            raise ApiError(f"Malformed {what} in response: {e}") from e

    # ---- public API ----

    async def list_tasks(self) -> list[Task]:
        body = await self._request("GET", TASKS_PATH)
        if not isinstance(body, list):
            logger.error("API returned unexpected list payload: %r", type(body).__name__)
            raise ApiError("Unexpected response for task list")
        return [self._one(item, "task list item") for item in body]

    async def get_task(self, task_id: str) -> Task:
        body = await self._request("GET", _task_path(task_id))
        return self._one(body, "task")

    async def create_task(self, data: Task | Mapping[str, Any]) -> Task:
        body = await self._request("POST", TASKS_PATH, payload=to_wire(data))
        return self._one(body, "created task")

    async def update_task(self, task_id: str, data: Task | Mapping[str, Any]) -> Task:
        payload = to_wire(data, {"id": task_id})
        body = await self._request("PUT", _task_path(task_id), payload=payload)
        return self._one(body, "updated task")

    async def update_task_status(self, task_id: str, status: TaskStatus | str) -> Task:
        payload = {"status": status_to_wire(status)}
        body = await self._request("PATCH", f"{_task_path(task_id)}/status", payload=payload)
        return self._one(body, "task status")

    async def delete_task(self, task_id: str) -> Any:
        return await self._request("DELETE", _task_path(task_id))
