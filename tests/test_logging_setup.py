# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from kanban_sync.logging_setup import _ConsoleNoiseFilter, console_threshold, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler) or any(
            isinstance(f, _ConsoleNoiseFilter) for f in handler.filters
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.captureWarnings(False)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("kanban_sync.tasks.task_store", logging.NOTSET),
        ("kanban_sync.tasks.task_api", logging.WARNING),
        ("kanban_sync", logging.NOTSET),
        ("kanban_sync_other", logging.ERROR),
        ("httpx", logging.ERROR),
        ("py.warnings", logging.ERROR),
    ],
)
def test_console_threshold(name: str, expected: int) -> None:
    assert console_threshold(name) == expected


def test_console_filter_hides_api_client_info() -> None:
    noise = _ConsoleNoiseFilter()

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert noise.filter(record("kanban_sync.tasks.task_store", logging.INFO))
    assert not noise.filter(record("kanban_sync.tasks.task_api", logging.INFO))
    assert noise.filter(record("kanban_sync.tasks.task_api", logging.ERROR))
    assert not noise.filter(record("httpx", logging.WARNING))


def test_setup_logging_writes_everything_to_file(tmp_path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")

    logging.getLogger("kanban_sync.tasks.task_api").debug("request detail")
    for handler in restore_root_logging.handlers:
        handler.flush()

    assert log_file == tmp_path / "logs" / "kanban.log"
    assert "request detail" in log_file.read_text(encoding="utf-8")
    assert sum(isinstance(h, logging.FileHandler) for h in restore_root_logging.handlers) == 1
