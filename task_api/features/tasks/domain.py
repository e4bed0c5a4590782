"""Domain models for the tasks feature"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)


class TaskStatus(str, Enum):
    """Task status enum"""
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TaskPriority(str, Enum):
    """Task priority enum"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# API attribute name -> tasks table column
FIELD_COLUMNS: Dict[str, str] = {
    "id": "id",
    "owner": "user_id",
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "categories": "categories",
    "createdAt": "created_at",
}

COLUMN_FIELDS: Dict[str, str] = {column: field for field, column in FIELD_COLUMNS.items()}


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_CREATE_DEFAULTS = {
    "status": lambda: TaskStatus.TODO,
    "priority": lambda: TaskPriority.MEDIUM,
    "categories": list,
}


def _require_title(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("Title is required")
    return value


class Task(BaseModel):
    """Complete task domain model"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: str = Field(..., alias="owner")
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    categories: List[str] = Field(default_factory=list)
    created_at: datetime = Field(..., alias="createdAt")

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == str(user_id)


class TaskCreate(BaseModel):
    """Task creation input. The owner comes from the caller, never the body."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    categories: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        return _require_title(value)

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @field_validator("status", "priority", "categories", mode="before")
    @classmethod
    def null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        # An explicit null behaves like an omitted field
        if value is None:
            return _CREATE_DEFAULTS[info.field_name]()
        return value


class TaskUpdate(BaseModel):
    """
    Partial task update.

    Only the fields present in the request body are applied. Unknown fields,
    including owner, id and createdAt, are rejected.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    categories: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        return _require_title(value)

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "TaskUpdate":
        for name in ("title", "status", "priority", "categories"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Column values for the fields that were actually sent"""
        values = self.model_dump(exclude_unset=True)
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in values.items()
        }
