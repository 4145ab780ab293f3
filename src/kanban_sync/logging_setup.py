# src/kanban_sync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "kanban.log"

# Minimum level shown on the console per logger. The console connector prints
# store failures itself, so the API client's per-request errors stay in the file.
_CONSOLE_MIN_LEVEL: dict[str, int] = {
    "kanban_sync.tasks.task_api": logging.WARNING,
    "kanban_sync": logging.NOTSET,
}


class _ConsoleNoiseFilter(logging.Filter):
    """Per-logger console threshold; anything outside kanban_sync needs ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def console_threshold(name: str) -> int:
    for prefix, level in _CONSOLE_MIN_LEVEL.items():
        if name == prefix or name.startswith(prefix + "."):
            return level
    return logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/kanban",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send logs to stderr (filtered) and to <log_dir>/kanban.log (everything).

    Replaces whatever handlers the root logger had. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    # request lines from the HTTP stack are too chatty even for the file
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
