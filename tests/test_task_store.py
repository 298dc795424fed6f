from __future__ import annotations

import asyncio
from datetime import date

import pytest

from taskboard_client.errors import MutationFailure
from taskboard_client.schemas import Task, TaskInput, TaskPriority, User
from taskboard_client.services import (
    Applied,
    DirectoryResolver,
    NeedsReconciliation,
    SEED_DIRECTORY,
    TaskStore,
)

from .fakes import ALICE, BOB, FakeBackendState

pytestmark = pytest.mark.asyncio

SEED_ADMIN_ID = "4ab3acf9-5acf-4ef3-a3e7-6aa2701a7411"


def _seed_tasks(state: FakeBackendState) -> None:
    state.tasks = [
        {"id": "t1", "title": "First", "priority": "high", "assignedToId": ALICE["id"]},
        {"id": "t2", "title": "Second", "priority": "medium", "assignedToId": None},
        {"id": "t3", "title": "Third", "priority": "low", "assignedToId": BOB["id"]},
    ]


async def test_load_replaces_collection_in_server_order(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    _seed_tasks(backend_state)

    result = await store.load()

    assert result.ok
    assert [task.id for task in store.tasks] == ["t1", "t2", "t3"]
    assert store.tasks[0].assigned_to is not None
    assert store.tasks[0].assigned_to.name == ALICE["name"]

    backend_state.tasks = backend_state.tasks[1:]
    await store.load()
    assert [task.id for task in store.tasks] == ["t2", "t3"]


async def test_load_failure_keeps_collection(store: TaskStore, backend_state: FakeBackendState) -> None:
    _seed_tasks(backend_state)
    await store.load()
    before = store.tasks

    backend_state.fail("list_tasks", 503, {"message": "Maintenance"})
    result = await store.load()

    assert not result.ok
    assert result.error is not None
    assert result.error.message == "Maintenance"
    assert all(a is b for a, b in zip(store.tasks, before))


async def test_create_with_seed_directory_enriches_and_inserts_first(
    store: TaskStore,
    directory: DirectoryResolver,
    backend_state: FakeBackendState,
) -> None:
    backend_state.user_listing = []
    _seed_tasks(backend_state)
    await store.load()
    await directory.fetch_directory()
    assert directory.is_degraded
    assert len(directory.users) == 2

    result = await store.create_optimistic(
        {"title": "Write release notes", "priority": "high", "assignedToId": SEED_ADMIN_ID}
    )

    assert result.ok
    assert result.applied
    assert len(store) == 4
    created = store.tasks[0]
    assert created.title == "Write release notes"
    assert created.priority is TaskPriority.HIGH
    assert created.assigned_to_id == SEED_ADMIN_ID
    assert created.assigned_to == SEED_DIRECTORY[0]


async def test_create_sends_null_assignee_when_unassigned(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    result = await store.create_optimistic(TaskInput(title="Unassigned", description=""))

    assert result.applied
    assert store.tasks[0].assigned_to is None
    sent = backend_state.requests_for("POST")[-1].body
    assert sent == {
        "title": "Unassigned",
        "description": None,
        "priority": "medium",
        "dueDate": None,
        "assignedToId": None,
    }


async def test_create_reconciles_when_assignee_unknown(
    store: TaskStore,
    directory: DirectoryResolver,
    backend_state: FakeBackendState,
) -> None:
    await directory.fetch_directory()
    newcomer = {
        "id": "9d1c6c1e-5d0b-4b8e-9a31-6f7d1f0a0003",
        "name": "Carol New",
        "email": "carol@example.org",
        "role": "USER",
    }
    backend_state.users.append(newcomer)

    result = await store.create_optimistic({"title": "Onboard", "assignedToId": newcomer["id"]})

    assert result.ok
    assert result.reconciled
    assert not result.applied
    assert backend_state.requests_for("GET")[-1].path == "/api/tasks/get-task"
    assert len(store) == 1
    assert store.tasks[0].assigned_to is not None
    assert store.tasks[0].assigned_to.id == newcomer["id"]


async def test_create_failure_leaves_collection_unchanged(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    _seed_tasks(backend_state)
    await store.load()
    backend_state.fail("create", 400, {"message": "Title already used"})

    result = await store.create_optimistic({"title": "Duplicate"})

    assert not result.ok
    assert isinstance(result.error, MutationFailure)
    assert result.error.message == "Title already used"
    assert result.error.status_code == 400
    assert len(store) == 3
    with pytest.raises(MutationFailure):
        result.raise_for_error()


async def test_create_failure_without_message_uses_fallback(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    backend_state.fail("create", 500)

    result = await store.create_optimistic({"title": "Anything"})

    assert result.error is not None
    assert result.error.message == "Failed to create task"


async def test_create_rejects_blank_title_without_calling_backend(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    result = await store.create_optimistic({"title": "   "})

    assert result.error is not None
    assert result.error.code == "validation_error"
    assert backend_state.requests_for("POST") == []
    assert len(store) == 0


async def test_update_keeps_position_and_other_entries(
    store: TaskStore, directory: DirectoryResolver, backend_state: FakeBackendState
) -> None:
    _seed_tasks(backend_state)
    await store.load()
    await directory.fetch_directory()
    before = store.tasks

    result = await store.update_optimistic("t2", {"priority": "low", "assignedToId": BOB["id"]})

    assert result.ok
    assert result.applied
    after = store.tasks
    assert [task.id for task in after] == ["t1", "t2", "t3"]
    assert after[1].priority is TaskPriority.LOW
    assert after[1].title == "Second"
    assert after[1].assigned_to is not None
    assert after[1].assigned_to.email == BOB["email"]
    assert after[0] is before[0]
    assert after[2] is before[2]


async def test_update_sends_full_field_set(store: TaskStore, backend_state: FakeBackendState) -> None:
    backend_state.tasks = [
        {"id": "t1", "title": "Ship", "description": "v1", "priority": "high", "dueDate": "2024-06-01T00:00:00.000Z"}
    ]
    await store.load()
    assert store.tasks[0].due_date == date(2024, 6, 1)

    await store.update_optimistic("t1", {"title": "Ship it"})

    sent = backend_state.requests_for("PUT")[-1].body
    assert sent == {
        "title": "Ship it",
        "description": "v1",
        "priority": "high",
        "dueDate": "2024-06-01",
        "assignedToId": None,
    }


async def test_update_unknown_id_is_a_noop(store: TaskStore, backend_state: FakeBackendState) -> None:
    result = await store.update_optimistic("missing-id", {"priority": "low"})

    assert result.ok
    assert not result.applied
    assert store.tasks == []
    assert backend_state.requests_for("PUT") == []


async def test_update_failure_leaves_collection_unchanged(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    _seed_tasks(backend_state)
    await store.load()
    before = store.tasks
    backend_state.fail("update", 500, {"message": "Database unavailable"})

    result = await store.update_optimistic("t1", {"title": "Renamed"})

    assert result.error is not None
    assert result.error.message == "Database unavailable"
    assert all(a is b for a, b in zip(store.tasks, before))


async def test_update_reconciles_when_assignee_unknown(
    store: TaskStore, directory: DirectoryResolver, backend_state: FakeBackendState
) -> None:
    backend_state.users = [dict(ALICE)]
    _seed_tasks(backend_state)
    await store.load()
    await directory.fetch_directory()
    backend_state.users.append(dict(BOB))

    result = await store.update_optimistic("t2", {"assignedToId": BOB["id"]})

    assert result.reconciled
    assert store.get("t2") is not None
    assert store.get("t2").assigned_to is not None
    assert store.get("t2").assigned_to.id == BOB["id"]


async def test_delete_removes_entry(store: TaskStore, backend_state: FakeBackendState) -> None:
    _seed_tasks(backend_state)
    await store.load()

    result = await store.delete_task("t2")

    assert result.ok
    assert result.applied
    assert [task.id for task in store.tasks] == ["t1", "t3"]


async def test_delete_failure_keeps_task(store: TaskStore, backend_state: FakeBackendState) -> None:
    _seed_tasks(backend_state)
    await store.load()
    before = store.tasks
    backend_state.fail("delete", 500)

    result = await store.delete_task("t1")

    assert not result.ok
    assert result.error is not None
    assert result.error.message == "Failed to delete task"
    assert result.error.status_code == 500
    assert store.get("t1") is before[0]
    assert all(a is b for a, b in zip(store.tasks, before))


async def test_disposed_store_ignores_late_responses(
    store: TaskStore, backend_state: FakeBackendState
) -> None:
    _seed_tasks(backend_state)
    await store.load()
    store.dispose()

    created = await store.create_optimistic({"title": "Late"})
    deleted = await store.delete_task("t1")

    assert created.ok and not created.applied
    assert deleted.ok and not deleted.applied
    assert [task.id for task in store.tasks] == ["t1", "t2", "t3"]
    assert backend_state.tasks[0]["title"] == "Late"


async def test_concurrent_creates_each_insert_once(store: TaskStore) -> None:
    results = await asyncio.gather(
        store.create_optimistic({"title": "One"}),
        store.create_optimistic({"title": "Two"}),
    )

    assert all(result.applied for result in results)
    assert sorted(task.title for task in store.tasks) == ["One", "Two"]


async def test_enrich_returns_tagged_outcomes(store: TaskStore, directory: DirectoryResolver) -> None:
    await directory.fetch_directory()
    unassigned = Task(id="x", title="No owner")
    known = Task(id="y", title="Known", assignedToId=ALICE["id"])
    unknown = Task(id="z", title="Unknown", assignedToId="not-in-directory")

    assert store.enrich(unassigned) == Applied(unassigned)

    outcome = store.enrich(known)
    assert isinstance(outcome, Applied)
    assert outcome.task.assigned_to == User.model_validate(ALICE)

    missing = store.enrich(unknown)
    assert isinstance(missing, NeedsReconciliation)
    assert missing.assignee_id == "not-in-directory"


async def test_reconcile_reload_shares_request_id(
    store: TaskStore, directory: DirectoryResolver, backend_state: FakeBackendState
) -> None:
    await directory.fetch_directory()

    await store.create_optimistic({"title": "Orphan", "assignedToId": "not-in-directory"})

    create_request = backend_state.requests_for("POST")[-1]
    reload_request = backend_state.requests_for("GET")[-1]
    assert reload_request.path == "/api/tasks/get-task"
    assert create_request.request_id
    assert reload_request.request_id == create_request.request_id
