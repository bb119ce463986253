# src/pocket_todo/tasks/task_store.py

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import uuid
from collections.abc import Callable
from dataclasses import replace

from ..core.ports import TaskListener
from .task_gateway import PersistenceGateway
from .task_models import Task, TaskEvent, TaskEventKind

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    Authoritative ordered task collection.

    Rules:
    - insertion order is display order; delete closes the gap
    - every successful mutation schedules exactly one save of the full collection
      and publishes one TaskEvent; no-ops do neither
    - mutations issued before initialize() completes are queued and replayed,
      in arrival order, right after the stored collection is applied

    Mutation methods return True if they changed the collection, False for a
    no-op or for a mutation queued behind the initial load.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._gateway = gateway
        self._id_factory = id_factory or new_task_id
        self._tasks: list[Task] = []
        self._listeners: list[TaskListener] = []
        self._listener_tasks: set[asyncio.Future[object]] = set()
        self._load_task: asyncio.Task[None] | None = None
        self._ready = False
        self._queued: list[tuple[str, Callable[[], bool]]] = []

    # ---- read-only view ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def ready(self) -> bool:
        return self._ready

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return isinstance(task_id, str) and self._index_of(task_id) is not None

    # ---- startup ----

    async def initialize(self) -> None:
        """Load the stored collection exactly once. Safe to call (and await) repeatedly."""
        if self._load_task is None:
            self._load_task = asyncio.get_running_loop().create_task(self._load_once())
        await asyncio.shield(self._load_task)

    async def _load_once(self) -> None:
        loaded = await self._gateway.load()
        self._tasks = list(loaded)
        self._ready = True
        logger.info("TaskStore ready tasks=%d queued=%d", len(self._tasks), len(self._queued))
        self._publish(TaskEvent(TaskEventKind.LOADED))

        queued, self._queued = self._queued, []
        for name, op in queued:
            logger.debug("Replaying queued %s", name)
            op()

    # ---- events ----

    def subscribe(self, listener: TaskListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, event: TaskEvent) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
            except Exception:
                logger.exception("Task listener failed kind=%s", event.kind.value)
                continue
            if inspect.isawaitable(result):
                fut = asyncio.ensure_future(result)
                self._listener_tasks.add(fut)
                fut.add_done_callback(self._listener_tasks.discard)

    # ---- mutations ----

    def add(self, text: str) -> bool:
        return self._run("add", lambda: self._add(text))

    def delete(self, task_id: str) -> bool:
        return self._run("delete", lambda: self._delete(task_id))

    def toggle_complete(self, task_id: str) -> bool:
        return self._run("toggle_complete", lambda: self._toggle(task_id))

    def update_text(self, task_id: str, new_text: str) -> bool:
        return self._run("update_text", lambda: self._update_text(task_id, new_text))

    def _run(self, name: str, op: Callable[[], bool]) -> bool:
        if not self._ready:
            self._queued.append((name, op))
            logger.debug("Queued %s until initial load completes", name)
            return False
        # saves are scheduled on the loop; fail before the collection changes
        asyncio.get_running_loop()
        return op()

    def _add(self, text: str) -> bool:
        clean = (text or "").strip()
        if not clean:
            logger.debug("add ignored: empty text")
            return False

        task = Task(id=self._fresh_id(), text=clean, completed=False)
        self._tasks.append(task)
        logger.debug("Task added id=%s", task.id)
        self._commit(TaskEvent(TaskEventKind.ADDED, task, len(self._tasks) - 1))
        return True

    def _delete(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("delete ignored: no task id=%s", task_id)
            return False

        task = self._tasks.pop(idx)
        logger.debug("Task removed id=%s index=%d", task_id, idx)
        self._commit(TaskEvent(TaskEventKind.REMOVED, task, idx))
        return True

    def _toggle(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("toggle ignored: no task id=%s", task_id)
            return False

        task = self._tasks[idx]
        self._tasks[idx] = replace(task, completed=not task.completed)
        logger.debug("Task toggled id=%s completed=%s", task_id, not task.completed)
        self._commit(TaskEvent(TaskEventKind.TOGGLED, self._tasks[idx], idx))
        return True

    def _update_text(self, task_id: str, new_text: str) -> bool:
        clean = (new_text or "").strip()
        if not clean:
            logger.debug("update_text ignored: empty text id=%s", task_id)
            return False

        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("update_text ignored: no task id=%s", task_id)
            return False

        task = self._tasks[idx]
        if task.text == clean:
            return False

        self._tasks[idx] = replace(task, text=clean)
        logger.debug("Task updated id=%s", task_id)
        self._commit(TaskEvent(TaskEventKind.UPDATED, self._tasks[idx], idx))
        return True

    # ---- helpers ----

    def _commit(self, event: TaskEvent) -> None:
        self._gateway.save(self._tasks)
        self._publish(event)

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _fresh_id(self) -> str:
        taken = {t.id for t in self._tasks}
        while True:
            candidate = self._id_factory()
            if candidate and candidate not in taken:
                return candidate
            logger.debug("Task id collision on %r; drawing again", candidate)

