# src/kanban_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the HTTP client, error signal and task store into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.error_signal import ErrorSignal
from ..core.state import AppState
from ..tasks.task_api import TaskApiClient
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    api = TaskApiClient(settings.api_base_url, timeout=settings.http_timeout_seconds)
    errors = ErrorSignal()
    store = TaskStore(api, errors)

    return AppState(settings=settings, api=api, errors=errors, store=store)


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown: close the HTTP client (no exceptions should escape)."""
    close = getattr(state.api, "aclose", None)
    if close is None:
        return
    try:
        await close()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)
