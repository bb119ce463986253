# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pocket_todo.core.bootstrap import create_initial_state
from pocket_todo.core.state import AppState
from pocket_todo.tasks.task_gateway import PersistenceGateway
from pocket_todo.tasks.task_store import TaskStore

from .fakes import FakeKeyValueStorage, SequenceIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="pocket-todo-test",
        log_level="DEBUG",
        storage_backend="sqlite",
        storage_key="tasks",
        data_dir=tmp_path / "data",
        storage_path=tmp_path / "data" / "tasks.sqlite3",
    )


@pytest.fixture()
def storage() -> FakeKeyValueStorage:
    return FakeKeyValueStorage()


@pytest.fixture()
def gateway(storage: FakeKeyValueStorage) -> PersistenceGateway:
    return PersistenceGateway(storage)


@pytest.fixture()
def store(gateway: PersistenceGateway) -> TaskStore:
    """Not initialized: tests await store.initialize() themselves."""
    return TaskStore(gateway, id_factory=SequenceIds())


@pytest.fixture()
def state(settings: SimpleNamespace, storage: FakeKeyValueStorage) -> AppState:
    """AppState wired with the fake storage (no disk access)."""
    return create_initial_state(settings=settings, storage=storage, id_factory=SequenceIds())
