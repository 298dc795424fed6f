"""Client-side task collection with optimistic mutation and reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from ..api.ports import Backend
from ..core.context import operation_scope
from ..errors import ApiError, ClientError, LoadFailure, MutationFailure, describe_failure
from ..schemas import Task, TaskInput
from .directory import DirectoryResolver

logger = logging.getLogger(__name__)

TaskChanges = Union[TaskInput, Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class Applied:
    """The task is complete and can be written into the collection."""

    task: Task


@dataclass(frozen=True, slots=True)
class NeedsReconciliation:
    """The assignee could not be resolved from the directory cache."""

    task: Task

    @property
    def assignee_id(self) -> str | None:
        return self.task.assigned_to_id


Enrichment = Union[Applied, NeedsReconciliation]


@dataclass(frozen=True, slots=True)
class TaskOperationResult:
    """Outcome of a create, update or delete.

    ``applied`` tells whether the local collection changed as a direct result
    of the call; ``reconciled`` that a full reload replaced it instead.
    """

    task: Task | None = None
    error: ClientError | None = None
    applied: bool = False
    reconciled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "TaskOperationResult":
        if self.error is not None:
            raise self.error
        return self


@dataclass(frozen=True, slots=True)
class LoadResult:
    tasks: tuple[Task, ...] = ()
    error: LoadFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "LoadResult":
        if self.error is not None:
            raise self.error
        return self


class TaskStore:
    """Own the ordered task collection shown on the board.

    Every operation goes through the backend first and only touches the
    collection once the response is in. Failures are returned on the result,
    never raised, and leave the collection as it was.
    """

    def __init__(self, backend: Backend, directory: DirectoryResolver) -> None:
        self._backend = backend
        self._directory = directory
        self._tasks: list[Task] = []
        self._disposed = False

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Stop applying responses that arrive after the owning view is gone."""
        self._disposed = True

    def get(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        return None if index is None else self._tasks[index]

    def _index_of(self, task_id: str) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _dropped(self, operation: str, task_id: str | None) -> bool:
        if self._disposed:
            logger.info(
                "Store disposed; dropping response",
                extra={"operation": operation, "task_id": task_id},
            )
        return self._disposed

    def enrich(self, task: Task) -> Enrichment:
        """Attach the assignee from the directory cache, or ask for a reload."""

        if not task.needs_assignee:
            return Applied(task)
        user = self._directory.resolve(task.assigned_to_id)
        if user is None:
            return NeedsReconciliation(task)
        return Applied(task.with_assignee(user))

    async def load(self) -> LoadResult:
        """Replace the whole collection with the backend snapshot."""

        try:
            snapshot = await self._backend.list_tasks()
        except ApiError as exc:
            logger.warning("Task load failed", extra={"code": exc.code, "status_code": exc.status_code})
            return LoadResult(
                tasks=tuple(self._tasks),
                error=LoadFailure(
                    describe_failure(exc, "Failed to fetch tasks"),
                    status_code=exc.status_code,
                    details=exc.details,
                ),
            )
        if self._dropped("load", None):
            return LoadResult(tasks=tuple(snapshot))
        self._tasks = list(snapshot)
        logger.debug("Task collection loaded", extra={"size": len(self._tasks)})
        return LoadResult(tasks=tuple(self._tasks))

    async def _reconcile(self, pending: NeedsReconciliation, operation: str) -> TaskOperationResult:
        logger.warning(
            "Assignee not in directory; reloading tasks",
            extra={
                "operation": operation,
                "task_id": pending.task.id,
                "assignee_id": pending.assignee_id,
                "directory_degraded": self._directory.is_degraded,
            },
        )
        reload = await self.load()
        return TaskOperationResult(task=pending.task, applied=False, reconciled=reload.ok)

    @staticmethod
    def _invalid_input(exc: ValueError, fallback: str) -> TaskOperationResult:
        errors = exc.errors() if hasattr(exc, "errors") else [str(exc)]
        return TaskOperationResult(
            error=MutationFailure(fallback, code="validation_error", details={"errors": errors}),
        )

    @staticmethod
    def _mutation_failure(exc: ApiError, fallback: str) -> TaskOperationResult:
        return TaskOperationResult(
            error=MutationFailure(
                describe_failure(exc, fallback),
                status_code=exc.status_code,
                details=exc.details,
            ),
        )

    async def create_optimistic(self, data: TaskChanges) -> TaskOperationResult:
        """Create a task and insert it at the front of the collection."""

        with operation_scope():
            return await self._create(data)

    async def _create(self, data: TaskChanges) -> TaskOperationResult:
        try:
            payload = data if isinstance(data, TaskInput) else TaskInput.model_validate(dict(data))
        except ValueError as exc:
            return self._invalid_input(exc, "Failed to create task")
        try:
            created = await self._backend.create_task(payload)
        except ApiError as exc:
            logger.warning("Task create failed", extra={"code": exc.code, "status_code": exc.status_code})
            return self._mutation_failure(exc, "Failed to create task")
        if self._dropped("create", created.id):
            return TaskOperationResult(task=created)

        outcome = self.enrich(created)
        if isinstance(outcome, NeedsReconciliation):
            return await self._reconcile(outcome, "create")
        self._tasks.insert(0, outcome.task)
        logger.info("Task created", extra={"task_id": outcome.task.id})
        return TaskOperationResult(task=outcome.task, applied=True)

    async def update_optimistic(self, task_id: str, changes: TaskChanges) -> TaskOperationResult:
        """Update a task and replace it where it currently sits.

        A ``Mapping`` of changes is merged onto the fields of the locally held
        task. Ids that are not in the collection are ignored.
        """

        with operation_scope():
            return await self._update(task_id, changes)

    async def _update(self, task_id: str, changes: TaskChanges) -> TaskOperationResult:
        current = self.get(task_id)
        if current is None:
            logger.debug("Update for unknown task ignored", extra={"task_id": task_id})
            return TaskOperationResult()
        try:
            if isinstance(changes, TaskInput):
                payload = changes
            else:
                payload = TaskInput.from_task(current).merged(changes)
        except ValueError as exc:
            return self._invalid_input(exc, "Failed to update task")
        try:
            updated = await self._backend.update_task(task_id, payload)
        except ApiError as exc:
            logger.warning(
                "Task update failed",
                extra={"task_id": task_id, "code": exc.code, "status_code": exc.status_code},
            )
            return self._mutation_failure(exc, "Failed to update task")
        if self._dropped("update", task_id):
            return TaskOperationResult(task=updated)

        outcome = self.enrich(updated)
        if isinstance(outcome, NeedsReconciliation):
            return await self._reconcile(outcome, "update")
        # TODO: compare a per-task version token here so two in-flight edits of
        # the same task cannot overwrite each other in arrival order.
        index = self._index_of(task_id)
        if index is None:
            logger.debug("Task removed while update was in flight", extra={"task_id": task_id})
            return TaskOperationResult(task=outcome.task)
        self._tasks[index] = outcome.task
        logger.info("Task updated", extra={"task_id": task_id, "position": index})
        return TaskOperationResult(task=outcome.task, applied=True)

    async def delete_task(self, task_id: str) -> TaskOperationResult:
        """Delete a task; confirming the action is up to the caller."""

        try:
            await self._backend.delete_task(task_id)
        except ApiError as exc:
            logger.warning(
                "Task delete failed",
                extra={"task_id": task_id, "code": exc.code, "status_code": exc.status_code},
            )
            return self._mutation_failure(exc, "Failed to delete task")
        if self._dropped("delete", task_id):
            return TaskOperationResult()

        removed = self.get(task_id)
        self._tasks = [task for task in self._tasks if task.id != task_id]
        logger.info("Task deleted", extra={"task_id": task_id, "was_present": removed is not None})
        return TaskOperationResult(task=removed, applied=removed is not None)


__all__ = [
    "Applied",
    "Enrichment",
    "LoadResult",
    "NeedsReconciliation",
    "TaskChanges",
    "TaskOperationResult",
    "TaskStore",
]
