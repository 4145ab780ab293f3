# src/kanban_sync/tasks/task_store.py

from __future__ import annotations

import contextlib
import itertools
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import replace
from functools import partial
from typing import Any

from ..core.ports import ErrorSink, TaskApi
from .task_models import Task, TaskNotFoundError, TaskStatus, TaskValidationError

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory owner of the task collection, kept in sync with the backend.

    Mutations are optimistic:
    - snapshot the affected task, apply the change locally right away,
    - call the backend,
    - on success replace the local copy with the server's task (commit),
      on failure restore the last confirmed value (rollback), report to the error
      sink and re-raise.

    fetch_tasks() is the only bulk operation; it replaces the collection only on success.

    Per-task ordering:
    every mutation takes a fresh in-flight token for its task id. A response whose
    token is no longer the latest for that id is stale: it neither commits nor rolls
    back, because a newer operation owns the local slot. Its error is still reported.
    While mutations are in flight the store tracks the last value the server
    confirmed for the id (the pre-mutation value, then any successful response,
    stale ones included); the latest mutation rolls back to that value, never to
    another mutation's unconfirmed optimistic value.

    Known gap: a failed delete re-inserts the task but does not restore the selection.
    """

    def __init__(
        self,
        api: TaskApi,
        errors: ErrorSink,
        *,
        initial_tasks: Iterable[Task] = (),
    ) -> None:
        self._api = api
        self._errors = errors
        self._tasks: list[Task] = list(initial_tasks)
        self._inflight: dict[str, int] = {}
        # last server-confirmed value of every task with a mutation in flight
        self._confirmed: dict[str, Task] = {}
        self._tokens = itertools.count(1)

        ids = [t.id for t in self._tasks]
        if len(ids) != len(set(ids)):
            raise TaskValidationError("Duplicate task ids in initial collection")

        self.selected_task: Task | None = None
        self.is_loading = False
        self.show_create_modal = False

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    # ---- low-level helpers ----

    @contextlib.contextmanager
    def _error_boundary(self, message: str) -> Iterator[None]:
        """Report any failure to the error sink, then let it propagate unchanged."""
        try:
            yield
        except Exception as e:
            self._errors.show(message, str(e) or e.__class__.__name__)
            raise

    @contextlib.contextmanager
    def _optimistic(
        self, task_id: str, snapshot: Task, restore: Callable[[Task], None]
    ) -> Iterator[int]:
        """
        Scope of one optimistic mutation (OPTIMISTIC state).

        `snapshot` is the task as it was before this mutation. It becomes the
        confirmed value only when no other mutation on the id is in flight;
        otherwise it may be an unconfirmed optimistic value and is ignored.

        Leaving the block with an exception (cancellation included) restores the
        last confirmed value through `restore`, unless a newer mutation on the same
        id took over.
        """
        token = next(self._tokens)
        if task_id not in self._inflight:
            self._confirmed[task_id] = snapshot
        self._inflight[task_id] = token
        try:
            yield token
        except BaseException:
            if self._inflight.get(task_id) == token:
                restore(self._confirmed[task_id])
                logger.info("Rolled back task %s", task_id)
            else:
                logger.info("Stale failure for task %s ignored (newer operation in flight)", task_id)
            raise
        finally:
            if self._inflight.get(task_id) == token:
                del self._inflight[task_id]
                self._confirmed.pop(task_id, None)

    def _commit(self, task_id: str, token: int, server_task: Task) -> None:
        # a stale success is still the server's word on this task
        if task_id in self._confirmed:
            self._confirmed[task_id] = server_task
        if self._inflight.get(task_id) != token:
            logger.info("Stale response for task %s discarded", task_id)
            return
        if not self._replace(task_id, server_task):
            logger.warning("Task %s vanished before commit (collection reloaded?)", task_id)
            return
        logger.debug("Committed task %s", task_id)

    def _index_of(self, task_id: str | None) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return -1

    def _require_index(self, task_id: str | None) -> int:
        if not task_id:
            raise TaskValidationError("Task id is required")
        index = self._index_of(task_id)
        if index < 0:
            raise TaskNotFoundError(task_id)
        return index

    def _replace(self, task_id: str, task: Task) -> bool:
        index = self._index_of(task_id)
        if index < 0:
            return False
        self._tasks[index] = task
        return True

    def _upsert(self, task: Task) -> None:
        if task.id is None or not self._replace(task.id, task):
            self._tasks.append(task)

    # ---- queries ----

    def get_task(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        return self._tasks[index] if index >= 0 else None

    # ---- remote operations ----

    async def fetch_tasks(self) -> list[Task]:
        with self._error_boundary("Failed to load tasks"):
            self.is_loading = True
            try:
                fetched = await self._api.list_tasks()
            finally:
                self.is_loading = False
            self._tasks = list(fetched)
            logger.info("Loaded %d task(s)", len(self._tasks))
            return self.tasks

    async def refresh_task(self, task_id: str) -> Task:
        """Re-read one task from the backend and put it in place (or append it)."""
        with self._error_boundary("Failed to load task"):
            if not task_id:
                raise TaskValidationError("Task id is required")
            task = await self._api.get_task(task_id)
            self._upsert(task)
            return task

    async def create_task(self, data: Task | Mapping[str, Any]) -> Task:
        """
        Create a task on the backend and append the server's copy.

        Nothing is inserted before the server answers: a new task has no
        identity to roll back to.
        """
        with self._error_boundary("Failed to create task"):
            record = data.to_dict() if isinstance(data, Task) else dict(data)
            record.pop("id", None)
            title = record.pop("title", None)
            if not isinstance(title, str) or not title.strip():
                raise TaskValidationError("Task title is required")
            draft = Task(id=None, title=title).merged(record)

            created = await self._api.create_task(draft)
            self._upsert(created)
            logger.info("Created task %s", created.id)
            return created

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        with self._error_boundary("Failed to update task"):
            index = self._require_index(task_id)
            snapshot = self._tasks[index]
            optimistic = snapshot.merged(updates)
            self._tasks[index] = optimistic

            with self._optimistic(task_id, snapshot, partial(self._replace, task_id)) as token:
                server_task = await self._api.update_task(task_id, optimistic)
                self._commit(task_id, token, server_task)
            return server_task

    async def move_task(self, task_id: str, new_status: TaskStatus | str) -> Task:
        """Change a task's column through the dedicated status endpoint."""
        with self._error_boundary("Failed to move task"):
            if not task_id:
                raise TaskValidationError("Task id is required")
            status = TaskStatus.parse(new_status)
            index = self._require_index(task_id)
            snapshot = self._tasks[index]
            self._tasks[index] = replace(snapshot, status=status)

            with self._optimistic(task_id, snapshot, partial(self._replace, task_id)) as token:
                server_task = await self._api.update_task_status(task_id, status)
                self._commit(task_id, token, server_task)
            return server_task

    async def delete_task(self, task_id: str) -> None:
        with self._error_boundary("Failed to delete task"):
            index = self._require_index(task_id)
            removed = self._tasks.pop(index)
            if self.selected_task is not None and self.selected_task.id == task_id:
                self.selected_task = None

            def _reinsert(confirmed: Task) -> None:
                if self._index_of(task_id) < 0:
                    self._tasks.insert(min(index, len(self._tasks)), confirmed)

            with self._optimistic(task_id, removed, _reinsert):
                await self._api.delete_task(task_id)
            logger.info("Deleted task %s", task_id)

    # ---- local UI state ----

    def select_task(self, task: Task | None) -> None:
        self.selected_task = task

    def clear_selected_task(self) -> None:
        self.selected_task = None

    def open_create_modal(self) -> None:
        self.show_create_modal = True

    def close_create_modal(self) -> None:
        self.show_create_modal = False
