# src/kanban_sync/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from enum import StrEnum
from typing import Any

DISPLAY_ID_PREFIX = "TASK-"


class TaskValidationError(ValueError):
    """Local precondition failure. Raised before any remote call is made."""


class TaskNotFoundError(TaskValidationError):
    """The requested task id is not present in the live collection."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskStatus(StrEnum):
    """Board column a task lives in."""

    TODO = "todo"
    INPROGRESS = "inprogress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus:
        try:
            return cls(raw)
        except ValueError:
            raise TaskValidationError(
                f"Invalid status: {raw!r} (expected one of: {', '.join(s.value for s in cls)})"
            ) from None


@dataclass(frozen=True, slots=True)
class Assignee:
    """
    Who a task is assigned to.

    A record received from the backend is kept as received: `name` and `avatar`
    are read from it, every other key rides along in `extra`, and to_dict()
    gives the same mapping back. Defaults apply only when there is no record.
    """

    name: str | None = "Unassigned"
    avatar: str | None = "UN"
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def coerce(cls, raw: Any) -> Assignee:
        if raw is None:
            return cls()
        if isinstance(raw, Assignee):
            return raw
        if isinstance(raw, Mapping):
            return cls(
                name=raw.get("name"),
                avatar=raw.get("avatar"),
                extra={k: v for k, v in raw.items() if k not in ("name", "avatar")},
            )
        raise TaskValidationError(f"Invalid assignee: {raw!r}")

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        if self.name is not None:
            out["name"] = self.name
        if self.avatar is not None:
            out["avatar"] = self.avatar
        return out


@dataclass(frozen=True, slots=True)
class Task:
    """
    Domain task as held by the store.

    Instances are immutable: every mutation produces a new Task, so a reference
    kept before a change is a complete snapshot of the prior value.
    """

    id: str | None
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: str = "medium"
    type: str = "task"
    assignee: Assignee = field(default_factory=Assignee)

    def __post_init__(self) -> None:
        if not isinstance(self.title, str) or not self.title.strip():
            raise TaskValidationError("Task title is required")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "status", TaskStatus.parse(self.status))
        object.__setattr__(self, "description", str(self.description or ""))
        object.__setattr__(self, "priority", str(self.priority or "medium").lower())
        object.__setattr__(self, "type", str(self.type or "task").lower())
        object.__setattr__(self, "assignee", Assignee.coerce(self.assignee))

    def merged(self, updates: Mapping[str, Any]) -> Task:
        """Return a new validated Task with `updates` applied. The id is fixed."""
        allowed = {f.name for f in fields(self)} - {"id"}
        unknown = set(updates) - allowed - {"id"}
        if unknown:
            raise TaskValidationError(f"Unknown task field(s): {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in updates.items() if k in allowed}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["status"] = self.status.value
        out["assignee"] = self.assignee.to_dict()
        return out


def to_display_id(raw_id: Any) -> str | None:
    """Wire id -> display id ("7" -> "TASK-7"). Missing ids stay missing."""
    if raw_id is None or raw_id == "":
        return None
    text = str(raw_id)
    if text.startswith(DISPLAY_ID_PREFIX):
        return text
    return f"{DISPLAY_ID_PREFIX}{text}"


def strip_display_id(task_id: Any) -> str | None:
    """Display id -> wire id. Idempotent; ids without the prefix pass through."""
    if task_id is None:
        return None
    text = str(task_id)
    if text.startswith(DISPLAY_ID_PREFIX):
        return text[len(DISPLAY_ID_PREFIX):]
    return text
