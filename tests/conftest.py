# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from kanban_sync.core.error_signal import ErrorSignal
from kanban_sync.core.state import AppState
from kanban_sync.tasks.task_store import TaskStore

from .fakes import FakeTaskApi, make_task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than reading the real environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="kanban-test",
        log_level="DEBUG",
        api_base_url="http://backend.test",
        http_timeout_seconds=1.0,
        data_dir=tmp_path / "data",
    )


@pytest.fixture()
def errors() -> ErrorSignal:
    return ErrorSignal()


@pytest.fixture()
def api() -> FakeTaskApi:
    return FakeTaskApi()


@pytest.fixture()
def store(api: FakeTaskApi, errors: ErrorSignal) -> TaskStore:
    """Store preloaded with a small board: TASK-1 (todo), TASK-2 (inprogress), TASK-3 (done)."""
    return TaskStore(
        api,
        errors,
        initial_tasks=[
            make_task(1, "todo", priority="high", type="story"),
            make_task(2, "inprogress"),
            make_task(3, "done", assignee={"name": "Jane Smith", "avatar": "JS"}),
        ],
    )


@pytest.fixture()
def state(settings: SimpleNamespace, api: FakeTaskApi, errors: ErrorSignal, store: TaskStore) -> AppState:
    """AppState wired with the in-memory fake backend."""
    return AppState(settings=settings, api=api, errors=errors, store=store)
