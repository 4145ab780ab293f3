# src/kanban_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task store.

The store depends on Protocols instead of concrete implementations, so the
HTTP client and the error sink can be swapped (tests use in-memory fakes).
"""

from typing import Any, Mapping, Protocol

from ..tasks.task_models import Task, TaskStatus


class TaskApi(Protocol):
    """Remote `/tasks` collection. Implementations raise a single uniform error type."""

    async def list_tasks(self) -> list[Task]: ...
    async def get_task(self, task_id: str) -> Task: ...
    async def create_task(self, data: Task | Mapping[str, Any]) -> Task: ...
    async def update_task(self, task_id: str, data: Task | Mapping[str, Any]) -> Task: ...
    async def update_task_status(self, task_id: str, status: TaskStatus | str) -> Task: ...
    async def delete_task(self, task_id: str) -> Any: ...


class ErrorSink(Protocol):
    def show(self, message: str, details: str = "") -> None: ...
    def clear(self) -> None: ...
