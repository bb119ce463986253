# src/pocket_todo/tasks/task_api.py

from __future__ import annotations

"""
Presentation-facing helpers.

Thin functions over AppState that the UI calls directly. Data commands
(add/delete/toggle/commit/cancel) are void; edit commands that can be refused
return an EditError code instead of raising, so nothing from the core reaches
the presentation layer as an unhandled exception.

Call these from the event loop thread: saves are scheduled on the running loop,
and a mutation attempted without one raises RuntimeError before anything changes.
"""

import logging

from ..core.state import AppState
from .task_errors import EditError, EditSessionError
from .task_models import EditDraft, Task

logger = logging.getLogger(__name__)


def add_task(state: AppState, text: str) -> None:
    state.task_store.add(text)


def delete_task(state: AppState, task_id: str) -> None:
    state.task_store.delete(task_id)


def toggle_complete(state: AppState, task_id: str) -> None:
    state.task_store.toggle_complete(task_id)


def begin_edit(state: AppState, task_id: str) -> EditError | None:
    try:
        state.editor.begin(task_id)
    except EditSessionError as e:
        logger.info("begin_edit refused id=%s: %s", task_id, e)
        return e.error
    return None


def update_draft(state: AppState, text: str) -> EditError | None:
    try:
        state.editor.update_draft(text)
    except EditSessionError as e:
        logger.info("update_draft refused: %s", e)
        return e.error
    return None


def commit_edit(state: AppState) -> None:
    state.editor.commit()


def cancel_edit(state: AppState) -> None:
    state.editor.cancel()


def current_tasks(state: AppState) -> tuple[Task, ...]:
    return state.task_store.tasks


def current_draft(state: AppState) -> EditDraft | None:
    return state.editor.snapshot()
