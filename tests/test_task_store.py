# tests/test_task_store.py

from __future__ import annotations

import asyncio
import json

import pytest

from pocket_todo.tasks.task_gateway import PersistenceGateway, decode_tasks, encode_tasks
from pocket_todo.tasks.task_models import Task, TaskEvent, TaskEventKind
from pocket_todo.tasks.task_store import TaskStore

from .fakes import FakeKeyValueStorage, sequence_ids


def _stored(storage: FakeKeyValueStorage) -> tuple[Task, ...]:
    return decode_tasks(storage.data["tasks"])


@pytest.mark.asyncio
async def test_add_appends_trimmed_task_and_saves(store: TaskStore, storage, gateway) -> None:
    await store.initialize()

    assert store.add("  Buy milk  ")
    await gateway.flush()

    assert store.tasks == (Task("id-1", "Buy milk", False),)
    assert len(storage.writes) == 1
    assert _stored(storage) == store.tasks


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
async def test_add_empty_text_is_noop(store: TaskStore, storage, gateway, text: str) -> None:
    await store.initialize()

    assert not store.add(text)
    await gateway.flush()

    assert store.tasks == ()
    assert storage.writes == []


@pytest.mark.asyncio
async def test_order_is_kept_and_delete_closes_gap(store: TaskStore, gateway) -> None:
    await store.initialize()
    for text in ("a", "b", "c"):
        store.add(text)

    store.toggle_complete("id-2")
    store.update_text("id-1", "A")
    assert [t.text for t in store.tasks] == ["A", "b", "c"]

    store.delete("id-2")
    assert [t.id for t in store.tasks] == ["id-1", "id-3"]
    await gateway.flush()


@pytest.mark.asyncio
async def test_delete_is_idempotent(store: TaskStore, storage, gateway) -> None:
    await store.initialize()
    store.add("a")
    store.add("b")

    assert store.delete("id-1")
    once = store.tasks
    assert not store.delete("id-1")
    await gateway.flush()

    assert store.tasks == once
    assert len(storage.writes) == 3


@pytest.mark.asyncio
async def test_toggle_twice_restores_flag(store: TaskStore, gateway) -> None:
    await store.initialize()
    store.add("a")

    store.toggle_complete("id-1")
    assert store.get("id-1").completed is True
    store.toggle_complete("id-1")
    assert store.get("id-1").completed is False
    await gateway.flush()


@pytest.mark.asyncio
async def test_missing_id_operations_do_not_save(store: TaskStore, storage, gateway) -> None:
    await store.initialize()
    store.add("a")
    await gateway.flush()
    before = store.tasks

    assert not store.toggle_complete("missing-id")
    assert not store.delete("missing-id")
    assert not store.update_text("missing-id", "x")
    await gateway.flush()

    assert store.tasks == before
    assert len(storage.writes) == 1


@pytest.mark.asyncio
async def test_update_text_preserves_id_position_and_flag(store: TaskStore, storage, gateway) -> None:
    await store.initialize()
    store.add("a")
    store.add("b")
    store.toggle_complete("id-2")

    assert store.update_text("id-2", " B ")
    assert not store.update_text("id-2", "   ")
    assert not store.update_text("id-2", "B")
    await gateway.flush()

    assert store.tasks[1] == Task("id-2", "B", True)
    assert len(storage.writes) == 4


@pytest.mark.asyncio
async def test_colliding_ids_are_redrawn(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway, id_factory=sequence_ids("same", "same", "same", "other"))
    await store.initialize()

    store.add("a")
    store.add("b")

    assert [t.id for t in store.tasks] == ["same", "other"]
    await gateway.flush()


@pytest.mark.asyncio
async def test_default_ids_are_unique_in_rapid_succession(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    await store.initialize()

    for i in range(200):
        store.add(f"task {i}")

    assert len({t.id for t in store.tasks}) == 200
    await gateway.flush()


@pytest.mark.asyncio
async def test_initialize_restores_stored_collection() -> None:
    saved = (Task("1", "Buy milk"), Task("2", "Walk", completed=True))
    storage = FakeKeyValueStorage({"tasks": encode_tasks(saved)})
    store = TaskStore(PersistenceGateway(storage))

    await store.initialize()
    await store.initialize()

    assert store.ready
    assert store.tasks == saved
    assert storage.get_calls == 1


@pytest.mark.asyncio
async def test_mutations_before_load_are_queued_not_lost() -> None:
    storage = FakeKeyValueStorage({"tasks": encode_tasks([Task("old", "from disk")])})
    storage.get_delay = 0.02
    gateway = PersistenceGateway(storage)
    store = TaskStore(gateway, id_factory=sequence_ids())

    loading = asyncio.ensure_future(store.initialize())
    await asyncio.sleep(0)

    assert not store.add("typed early")
    assert not store.toggle_complete("old")
    assert store.tasks == ()
    assert storage.writes == []

    await loading
    await gateway.flush()

    assert store.tasks == (Task("old", "from disk", True), Task("id-1", "typed early"))
    assert _stored(storage) == store.tasks


@pytest.mark.asyncio
async def test_concurrent_initialize_loads_once(storage: FakeKeyValueStorage, store: TaskStore) -> None:
    storage.get_delay = 0.01
    await asyncio.gather(store.initialize(), store.initialize(), store.initialize())
    assert storage.get_calls == 1


@pytest.mark.asyncio
async def test_corrupt_store_starts_empty_and_accepts_mutations() -> None:
    storage = FakeKeyValueStorage({"tasks": json.dumps({"not": "a list"})})
    gateway = PersistenceGateway(storage)
    store = TaskStore(gateway, id_factory=sequence_ids())

    await store.initialize()
    assert store.tasks == ()

    store.add("fresh")
    await gateway.flush()
    assert _stored(storage) == (Task("id-1", "fresh"),)


@pytest.mark.asyncio
async def test_events_are_published_for_successful_mutations_only(store: TaskStore, gateway) -> None:
    events: list[TaskEvent] = []
    store.subscribe(events.append)
    await store.initialize()

    store.add("a")
    store.add("b")
    store.add("")
    store.toggle_complete("id-1")
    store.update_text("id-2", "B")
    store.delete("id-1")
    store.delete("id-1")

    assert [e.kind for e in events] == [
        TaskEventKind.LOADED,
        TaskEventKind.ADDED,
        TaskEventKind.ADDED,
        TaskEventKind.TOGGLED,
        TaskEventKind.UPDATED,
        TaskEventKind.REMOVED,
    ]
    removed = events[-1]
    assert removed.task == Task("id-1", "a", True)
    assert removed.index == 0
    assert store.get("id-1") is None
    await gateway.flush()


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_mutation(store: TaskStore, gateway) -> None:
    seen: list[TaskEventKind] = []

    def broken(event: TaskEvent) -> None:
        raise RuntimeError("render crashed")

    store.subscribe(broken)
    store.subscribe(lambda e: seen.append(e.kind))
    await store.initialize()

    assert store.add("a")
    assert len(store) == 1
    assert seen == [TaskEventKind.LOADED, TaskEventKind.ADDED]
    await gateway.flush()


@pytest.mark.asyncio
async def test_async_listener_and_unsubscribe(store: TaskStore, gateway) -> None:
    seen: list[TaskEventKind] = []

    async def on_event(event: TaskEvent) -> None:
        seen.append(event.kind)

    unsubscribe = store.subscribe(on_event)
    await store.initialize()
    store.add("a")
    await asyncio.sleep(0)

    unsubscribe()
    unsubscribe()
    store.add("b")
    await asyncio.sleep(0)

    assert seen == [TaskEventKind.LOADED, TaskEventKind.ADDED]
    await gateway.flush()


@pytest.mark.asyncio
async def test_tasks_view_is_read_only(store: TaskStore, gateway) -> None:
    await store.initialize()
    store.add("a")

    view = store.tasks
    assert isinstance(view, tuple)
    assert "id-1" in store
    assert "missing" not in store
    with pytest.raises(AttributeError):
        view[0].text = "hacked"  # type: ignore[misc]
    await gateway.flush()


def test_mutation_without_running_loop_changes_nothing(storage: FakeKeyValueStorage) -> None:
    gateway = PersistenceGateway(storage)
    store = TaskStore(gateway, id_factory=sequence_ids())
    asyncio.run(store.initialize())

    with pytest.raises(RuntimeError):
        store.add("a")

    assert store.tasks == ()
    assert storage.writes == []
