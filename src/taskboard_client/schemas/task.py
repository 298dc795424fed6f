"""Task-related Pydantic schemas."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .user import User

TASK_EXAMPLE = {
    "id": "0c6f4a52-63a4-4c55-8a0b-0f3a4f3d7f10",
    "title": "Write release notes",
    "description": "Outline the synchronisation layer.",
    "priority": "high",
    "dueDate": "2024-06-01",
    "assignedToId": "4ab3acf9-5acf-4ef3-a3e7-6aa2701a7411",
}


class TaskPriority(str, Enum):
    """Priority levels shown on the board."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _coerce_priority(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower() or TaskPriority.MEDIUM.value
    if value is None:
        return TaskPriority.MEDIUM.value
    return value


def _coerce_date(value: object) -> object:
    """Accept ISO dates or datetimes, keeping only the calendar date."""

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        return stripped.split("T", 1)[0]
    return value


def _coerce_optional_id(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Task(BaseModel):
    """Task as held by the client-side store."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={"example": TASK_EXAMPLE},
    )

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = Field(default=None, alias="dueDate")
    assigned_to_id: str | None = Field(default=None, alias="assignedToId")
    assigned_to: User | None = Field(default=None, alias="assignedTo")

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: object) -> object:
        return _coerce_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalise_due_date(cls, value: object) -> object:
        return _coerce_date(value)

    @field_validator("assigned_to_id", mode="before")
    @classmethod
    def _normalise_assignee_id(cls, value: object) -> object:
        return _coerce_optional_id(value)

    @model_validator(mode="before")
    @classmethod
    def _fill_assignee_id(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        assignee = data.get("assignedTo", data.get("assigned_to"))
        has_id = data.get("assignedToId", data.get("assigned_to_id")) not in (None, "")
        if isinstance(assignee, dict) and not has_id and assignee.get("id"):
            return {**data, "assignedToId": assignee["id"]}
        return data

    @model_validator(mode="after")
    def _check_assignee_consistency(self) -> "Task":
        if self.assigned_to is None:
            return self
        if self.assigned_to.id != self.assigned_to_id:
            raise ValueError("assignedTo does not match assignedToId.")
        return self

    @property
    def needs_assignee(self) -> bool:
        """True when the backend returned an assignee id without the user record."""

        return self.assigned_to_id is not None and self.assigned_to is None

    def with_assignee(self, user: User) -> "Task":
        if user.id != self.assigned_to_id:
            raise ValueError("Assignee does not match assignedToId.")
        return self.model_copy(update={"assigned_to": user})


class TaskInput(BaseModel):
    """Editable task fields sent on create and update."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = Field(min_length=1)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = Field(default=None, alias="dueDate")
    assigned_to_id: str | None = Field(default=None, alias="assignedToId")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: object) -> object:
        return _coerce_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalise_due_date(cls, value: object) -> object:
        return _coerce_date(value)

    @field_validator("assigned_to_id", mode="before")
    @classmethod
    def _normalise_assignee_id(cls, value: object) -> object:
        return _coerce_optional_id(value)

    @classmethod
    def from_task(cls, task: Task) -> "TaskInput":
        """Prefill the editable fields from an existing task."""

        return cls(
            title=task.title,
            description=task.description,
            priority=task.priority,
            due_date=task.due_date,
            assigned_to_id=task.assigned_to_id,
        )

    @classmethod
    def _aliased(cls, changes: Mapping[str, Any]) -> dict[str, Any]:
        aliased: dict[str, Any] = {}
        for key, value in changes.items():
            field = cls.model_fields.get(key)
            if field is not None and field.alias:
                key = field.alias
            aliased[key] = value
        return aliased

    def merged(self, changes: Mapping[str, Any]) -> "TaskInput":
        """Return a validated copy with ``changes`` applied on top."""

        data = self.model_dump(by_alias=True)
        data.update(self._aliased(changes))
        return type(self).model_validate(data)

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the wire shape; ``assignedToId`` is always present."""

        return self.model_dump(mode="json", by_alias=True)


__all__ = ["TASK_EXAMPLE", "Task", "TaskInput", "TaskPriority"]
