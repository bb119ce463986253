# src/pocket_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.edit_session import EditSession
from ..tasks.task_gateway import PersistenceGateway
from ..tasks.task_store import TaskStore
from .ports import KeyValueStorage


@dataclass(slots=True)
class AppState:
    # Settings are kept on the state for the presentation layer; the core never reads them.
    settings: Any

    storage: KeyValueStorage
    gateway: PersistenceGateway
    task_store: TaskStore
    editor: EditSession
