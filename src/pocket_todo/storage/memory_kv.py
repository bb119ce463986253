# src/pocket_todo/storage/memory_kv.py

from __future__ import annotations


class MemoryKeyValueStore:
    """Dict-backed store for demos and runs that should not touch the disk."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def close(self) -> None:
        return
