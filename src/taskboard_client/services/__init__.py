"""Core components: session, directory, task store and route guard."""

from __future__ import annotations

from .directory import SEED_DIRECTORY, DirectoryResolver
from .guard import RouteDecision, RouteGuard, can_manage_tasks, evaluate_route
from .session import SessionManager, SessionState, SessionStatus
from .tasks import Applied, LoadResult, NeedsReconciliation, TaskOperationResult, TaskStore

__all__ = [
    "Applied",
    "DirectoryResolver",
    "LoadResult",
    "NeedsReconciliation",
    "RouteDecision",
    "RouteGuard",
    "SEED_DIRECTORY",
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "TaskOperationResult",
    "TaskStore",
    "can_manage_tasks",
    "evaluate_route",
]
