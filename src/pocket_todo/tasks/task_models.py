# src/pocket_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    completed: bool = False

    def to_dict(self) -> dict[str, str | bool]:
        return {"id": self.id, "text": self.text, "completed": self.completed}


@dataclass(frozen=True, slots=True)
class EditDraft:
    """Read-only view of the active edit session (for rendering the edit form)."""

    target_id: str
    draft_text: str


class TaskEventKind(StrEnum):
    LOADED = "loaded"
    ADDED = "added"
    REMOVED = "removed"
    TOGGLED = "toggled"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class TaskEvent:
    """
    Notification published by TaskStore after a successful mutation.

    Notes:
    - For REMOVED, `task` is the task that was removed and `index` the position
      it held. The task is already gone from the collection; any fade-out is up
      to the subscriber.
    - For LOADED, `task` and `index` are None.
    """

    kind: TaskEventKind
    task: Task | None = None
    index: int | None = None
