# src/pocket_todo/tasks/task_errors.py

from __future__ import annotations

from enum import StrEnum


class EditError(StrEnum):
    """Result codes returned to the presentation layer for rejected edit commands."""

    NOT_FOUND = "not_found"
    ALREADY_EDITING = "already_editing"
    INVALID_STATE = "invalid_state"


class EditSessionError(Exception):
    error: EditError


class TaskNotFoundError(EditSessionError):
    error = EditError.NOT_FOUND

    def __init__(self, task_id: str) -> None:
        super().__init__(f"no task with id {task_id!r}")
        self.task_id = task_id


class AlreadyEditingError(EditSessionError):
    error = EditError.ALREADY_EDITING

    def __init__(self, target_id: str) -> None:
        super().__init__(f"task {target_id!r} is already being edited")
        self.target_id = target_id


class InvalidEditStateError(EditSessionError):
    error = EditError.INVALID_STATE

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} requires an active edit session")
        self.operation = operation
