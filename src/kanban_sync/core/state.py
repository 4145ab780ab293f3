# src/kanban_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore
from .error_signal import ErrorSignal
from .ports import TaskApi


@dataclass
class AppState:
    """
    Everything a front-end needs, wired once by the composition root.

    The store and the error signal are owned here and handed out by reference;
    nothing looks them up globally.
    """

    settings: Any
    api: TaskApi
    errors: ErrorSignal
    store: TaskStore
