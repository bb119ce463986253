# src/pocket_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage backend and the presentation layer swappable and makes testing easier.
"""

from typing import Any, Protocol

from ..tasks.task_models import TaskEvent


class KeyValueStorage(Protocol):
    """
    Opaque durable key-value store.

    The core only ever reads and writes serialized strings; it knows nothing
    about where or how they are kept.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    def close(self) -> None: ...


class TaskListener(Protocol):
    """
    Presentation-side subscriber for task events.

    May return an awaitable; it is scheduled on the running loop and never awaited
    by the mutation that triggered it.
    """

    def __call__(self, event: TaskEvent) -> Any: ...
