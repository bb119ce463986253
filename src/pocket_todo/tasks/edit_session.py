# src/pocket_todo/tasks/edit_session.py

from __future__ import annotations

"""
Edit session.

One edit at a time, layered on TaskStore:

    IDLE --begin(id)--> EDITING --update_draft(text)--> EDITING
    EDITING --commit()/cancel()--> IDLE

The session only references its target by id. If the target disappears while
editing, commit() degrades to a store no-op and the session still returns to IDLE.
"""

import logging
from enum import StrEnum

from .task_errors import AlreadyEditingError, InvalidEditStateError, TaskNotFoundError
from .task_models import EditDraft
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class EditState(StrEnum):
    IDLE = "idle"
    EDITING = "editing"


class EditSession:
    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._target_id: str | None = None
        self._draft_text = ""

    @property
    def state(self) -> EditState:
        return EditState.IDLE if self._target_id is None else EditState.EDITING

    @property
    def active(self) -> bool:
        return self._target_id is not None

    @property
    def target_id(self) -> str | None:
        return self._target_id

    @property
    def draft_text(self) -> str | None:
        return None if self._target_id is None else self._draft_text

    def snapshot(self) -> EditDraft | None:
        if self._target_id is None:
            return None
        return EditDraft(target_id=self._target_id, draft_text=self._draft_text)

    def begin(self, task_id: str) -> EditDraft:
        if self._target_id is not None:
            raise AlreadyEditingError(self._target_id)

        task = self._store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        self._target_id = task.id
        self._draft_text = task.text
        logger.debug("Edit started id=%s", task.id)
        return EditDraft(target_id=task.id, draft_text=task.text)

    def update_draft(self, text: str) -> None:
        if self._target_id is None:
            raise InvalidEditStateError("update_draft")
        self._draft_text = text

    def commit(self) -> bool:
        """Apply the draft to the target task. Returns True if the store changed."""
        if self._target_id is None:
            return False

        target_id = self._target_id
        applied = self._store.update_text(target_id, self._draft_text)
        self._clear()

        if not applied:
            logger.debug("Edit commit was a no-op id=%s", target_id)
        return applied

    def cancel(self) -> None:
        if self._target_id is None:
            return
        logger.debug("Edit cancelled id=%s", self._target_id)
        self._clear()

    def _clear(self) -> None:
        self._target_id = None
        self._draft_text = ""
