# src/pocket_todo/core/bootstrap.py

"""
Composition root.

- loads settings once,
- ensures local (gitignored) directories exist,
- picks the storage backend and wires gateway -> store -> edit session into AppState,
- sequences the initial load and the final flush.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import get_settings
from ..logging_setup import level_from_name, setup_logging
from ..storage.memory_kv import MemoryKeyValueStore
from ..storage.sqlite_kv import SqliteKeyValueStore
from ..tasks.edit_session import EditSession
from ..tasks.task_gateway import PersistenceGateway
from ..tasks.task_store import TaskStore
from .ports import KeyValueStorage
from .state import AppState

logger = logging.getLogger(__name__)


def init_logging(settings=None) -> None:
    """Install console + file logging from settings. Call once, before create_initial_state()."""
    if settings is None:
        settings = get_settings()
    setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/pocket_todo"),
        console_level=level_from_name(getattr(settings, "log_level", "INFO")),
    )


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def _make_storage(settings) -> KeyValueStorage:
    backend = str(getattr(settings, "storage_backend", "sqlite") or "sqlite").lower()
    if backend == "memory":
        logger.info("Using in-memory storage; tasks will not survive a restart.")
        return MemoryKeyValueStore()
    if backend != "sqlite":
        logger.warning("Unknown storage backend %r; falling back to sqlite.", backend)

    _ensure_local_dirs(settings)
    return SqliteKeyValueStore(settings.storage_path)


def create_initial_state(
    *,
    settings=None,
    storage: KeyValueStorage | None = None,
    id_factory: Callable[[], str] | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and storage injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    The returned state is not loaded yet: await start(state) before rendering.
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        storage = _make_storage(settings)

    gateway = PersistenceGateway(storage, key=getattr(settings, "storage_key", None) or "tasks")
    store = TaskStore(gateway, id_factory=id_factory)

    return AppState(
        settings=settings,
        storage=storage,
        gateway=gateway,
        task_store=store,
        editor=EditSession(store),
    )


async def start(state: AppState) -> None:
    """Run the initial load. Mutations issued before this resolves are queued, not lost."""
    await state.task_store.initialize()


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.gateway.flush()
    except Exception:
        logger.exception("Failed to flush pending task writes.")

    try:
        state.storage.close()
    except Exception:
        logger.debug("Storage close failed.", exc_info=True)
