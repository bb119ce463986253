# src/pocket_todo/tasks/task_gateway.py

from __future__ import annotations

"""
Persistence gateway.

Serialization boundary between the task collection and an opaque key-value store:
- one fixed key holds the whole collection as a JSON array,
- load never raises (missing or corrupt data -> empty collection),
- saves are fire-and-forget but reach the store in the order they were issued.
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.ports import KeyValueStorage
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "tasks"


class CorruptTaskData(ValueError):
    """Stored value is not a valid task-collection encoding."""


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def _decode_item(item: Any, pos: int) -> Task:
    if not isinstance(item, dict):
        raise CorruptTaskData(f"item {pos} is not an object")

    task_id = item.get("id")
    text = item.get("text")
    completed = item.get("completed")

    if not isinstance(task_id, str) or not task_id:
        raise CorruptTaskData(f"item {pos} has no valid id")
    if not isinstance(text, str) or not text.strip():
        raise CorruptTaskData(f"item {pos} has no valid text")
    # bool only: json 0/1 are ints and do not count
    if not isinstance(completed, bool):
        raise CorruptTaskData(f"item {pos} has no valid completed flag")

    return Task(id=task_id, text=text, completed=completed)


def decode_tasks(raw: str) -> tuple[Task, ...]:
    """
    Parse a stored value. Raises CorruptTaskData on anything that is not a
    valid collection; never returns a partial result.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise CorruptTaskData(f"not JSON: {e}") from e

    if not isinstance(data, list):
        raise CorruptTaskData("top-level value is not an array")

    tasks = tuple(_decode_item(item, pos) for pos, item in enumerate(data))

    seen: set[str] = set()
    for t in tasks:
        if t.id in seen:
            raise CorruptTaskData(f"duplicate id {t.id!r}")
        seen.add(t.id)

    return tasks


class PersistenceGateway:
    """
    Async load/save of the full task collection under one fixed key.

    Ordering:
    - save() snapshots the collection synchronously, so the written value is
      exactly the collection at the time of the mutation
    - each write awaits the previous one before calling storage.set(), so an
      earlier slow write can never overtake a later one
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = DEFAULT_STORAGE_KEY) -> None:
        if not key:
            raise ValueError("storage key is required")
        self._storage = storage
        self._key = key
        self._tail: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._seq = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def pending_writes(self) -> int:
        return len(self._in_flight)

    async def load(self) -> tuple[Task, ...]:
        try:
            raw = await self._storage.get(self._key)
        except Exception:
            logger.exception("Task load failed key=%s; starting empty.", self._key)
            return ()

        if raw is None:
            logger.info("No stored tasks under key=%s; starting empty.", self._key)
            return ()

        try:
            tasks = decode_tasks(raw)
        except CorruptTaskData as e:
            logger.warning("Stored tasks under key=%s are corrupt (%s); starting empty.", self._key, e)
            return ()

        logger.info("Loaded %d tasks from key=%s", len(tasks), self._key)
        return tasks

    def save(self, tasks: Iterable[Task]) -> asyncio.Task[None]:
        """
        Schedule a write of the full collection. Must be called from a running loop.

        The returned task never raises; callers may ignore it.
        """
        payload = encode_tasks(tasks)
        self._seq += 1
        seq = self._seq

        previous = self._tail
        write = asyncio.get_running_loop().create_task(
            self._write_after(previous, payload, seq),
            name=f"pocket_todo.save#{seq}",
        )
        self._tail = write
        self._in_flight.add(write)
        write.add_done_callback(self._in_flight.discard)
        return write

    async def flush(self) -> None:
        """
        Wait until every write issued so far has finished.

        Cancelling the caller stops the wait, never the writes themselves.
        """
        tail = self._tail
        if tail is not None:
            await asyncio.wait({tail})

    async def _write_after(self, previous: asyncio.Task[None] | None, payload: str, seq: int) -> None:
        if previous is not None:
            # wait() does not re-raise the predecessor's outcome, so a cancelled
            # earlier write cannot stop this one
            await asyncio.wait({previous})
            if previous.cancelled():
                logger.warning("Task save seq=%s was cancelled; continuing with seq=%s", seq - 1, seq)

        try:
            await self._storage.set(self._key, payload)
            logger.debug("Saved tasks seq=%s key=%s bytes=%d", seq, self._key, len(payload))
        except Exception:
            logger.exception("Task save failed seq=%s key=%s; in-memory state kept.", seq, self._key)
