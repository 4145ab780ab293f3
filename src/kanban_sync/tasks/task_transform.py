# src/kanban_sync/tasks/task_transform.py

"""
Mapping between the backend (wire) task record and the domain Task.

Both directions are pure and total over well-formed mappings.

Status vocabularies are NOT inverses of each other:
- inbound accepts TODO / IN_PROGRESS / INPROGRESS / DONE / FINISHED (any case),
- outbound sends TODO / IN_PROGRESS / finished (lowercase) for done.

The backend currently accepts the lowercase "finished"; keep it as-is until the
expected outbound vocabulary is confirmed server-side.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .task_models import Assignee, Task, TaskStatus, strip_display_id, to_display_id

UNTITLED = "Untitled Task"

_STATUS_FROM_WIRE: dict[str, TaskStatus] = {
    "TODO": TaskStatus.TODO,
    "IN_PROGRESS": TaskStatus.INPROGRESS,
    "INPROGRESS": TaskStatus.INPROGRESS,
    "DONE": TaskStatus.DONE,
    "FINISHED": TaskStatus.DONE,
}

_STATUS_TO_WIRE: dict[str, str] = {
    TaskStatus.TODO.value: "TODO",
    TaskStatus.INPROGRESS.value: "IN_PROGRESS",
    TaskStatus.DONE.value: "finished",
}


def status_from_wire(raw: Any) -> TaskStatus:
    if not isinstance(raw, str):
        return TaskStatus.TODO
    return _STATUS_FROM_WIRE.get(raw.upper(), TaskStatus.TODO)


def status_to_wire(status: Any) -> str:
    key = status.value if isinstance(status, TaskStatus) else status
    return _STATUS_TO_WIRE.get(key, "TODO") if isinstance(key, str) else "TODO"


def _lower_or(raw: Any, default: str) -> str:
    if raw is None or raw == "":
        return default
    return str(raw).lower()


def _upper_or_none(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw).upper()


def to_domain(wire: Mapping[str, Any]) -> Task:
    """Backend record -> Task, applying defaults for every missing field."""
    title = wire.get("title") or wire.get("description") or UNTITLED
    return Task(
        id=to_display_id(wire.get("id")),
        title=str(title),
        description=str(wire.get("description") or ""),
        status=status_from_wire(wire.get("status")),
        priority=_lower_or(wire.get("priority"), "medium"),
        type=_lower_or(wire.get("type"), "task"),
        assignee=Assignee.coerce(wire.get("assignee")),
    )


def to_wire(task: Task | Mapping[str, Any], override: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Task (or a partial task-shaped mapping) -> backend record.

    `override` is merged onto the record before conversion, e.g. to force an id
    onto a partial update payload. Keys with no value are left out.
    """
    record: dict[str, Any] = task.to_dict() if isinstance(task, Task) else dict(task)
    if override:
        record.update(override)

    assignee = record.get("assignee")
    if isinstance(assignee, Assignee):
        assignee = assignee.to_dict()

    wire = {
        "id": strip_display_id(record.get("id")),
        "title": record.get("title"),
        "description": record.get("description"),
        "status": status_to_wire(record.get("status")),
        "priority": _upper_or_none(record.get("priority")),
        "type": _upper_or_none(record.get("type")),
        "assignee": assignee,
    }
    return {k: v for k, v in wire.items() if v is not None}
