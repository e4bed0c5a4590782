"""
Translation of task list parameters into a query.

build_task_query() validates and normalizes the raw query-string values into
a TaskQuery. The helpers below it turn a TaskQuery into SQLAlchemy clauses
for the repository.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, case, or_

from task_api.db.models.task import Task as TaskORM
from task_api.errors import ValidationError
from task_api.features.tasks.domain import (
    FIELD_COLUMNS,
    TaskPriority,
    TaskStatus,
    ensure_utc,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

PRIORITY_RANK = {
    TaskPriority.LOW.value: 1,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.HIGH.value: 3,
}

_datetime_adapter = TypeAdapter(datetime)
_INTEGER = re.compile(r"[+-]?[0-9]+")


class TaskSort(str, Enum):
    """Supported orderings for the task list"""
    CREATED_AT = "createdAt"  # newest first
    DUE_DATE = "dueDate"  # soonest first
    TITLE = "title"  # alphabetical
    PRIORITY = "priority"  # High, Medium, Low

    @classmethod
    def parse(cls, value: Optional[str]) -> "TaskSort":
        if value in (cls.DUE_DATE.value, cls.TITLE.value, cls.PRIORITY.value):
            return cls(value)
        return cls.CREATED_AT


@dataclass
class TaskFilter:
    """Normalized filter; user_id is always applied"""
    user_id: str
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None
    search: Optional[str] = None


@dataclass
class TaskQuery:
    filter: TaskFilter
    sort: TaskSort = TaskSort.CREATED_AT
    # API attribute names to return; empty means all of them
    fields: List[str] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_positive_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    if not _INTEGER.fullmatch(value):
        raise ValidationError("Invalid pagination parameters")
    number = int(value, 10)
    if number < 1:
        raise ValidationError("Invalid pagination parameters")
    return number


def parse_timestamp(value: Optional[str], name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return ensure_utc(_datetime_adapter.validate_python(value))
    except PydanticValidationError:
        raise ValidationError(f"Invalid date for {name}: {value}")


def _parse_enum(enum_cls, value: Optional[str]):
    # Unknown values are ignored rather than rejected
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_fields(value: Optional[str]) -> List[str]:
    """
    Split a comma-separated projection, keeping only known attributes.

    A present but unmatched projection still returns id alone.
    """
    if not value:
        return []

    fields: List[str] = []
    for name in value.split(","):
        name = name.strip()
        if name in FIELD_COLUMNS and name not in fields:
            fields.append(name)

    if "id" not in fields:
        fields.insert(0, "id")
    return fields


def build_task_query(
    user_id: str,
    *,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    due_before: Optional[str] = None,
    due_after: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    fields: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
) -> TaskQuery:
    """
    Build a TaskQuery from raw list parameters.

    Pagination is validated first so a bad request never reaches the store.

    Raises:
        ValidationError: page/limit are not integers >= 1, or a due date
            bound is not a timestamp
    """
    page_number = parse_positive_int(page, DEFAULT_PAGE)
    limit_number = parse_positive_int(limit, DEFAULT_LIMIT)

    task_filter = TaskFilter(
        user_id=str(user_id),
        status=_parse_enum(TaskStatus, status),
        priority=_parse_enum(TaskPriority, priority),
        category=category or None,
        due_before=parse_timestamp(due_before, "dueBefore"),
        due_after=parse_timestamp(due_after, "dueAfter"),
        search=search or None,
    )

    return TaskQuery(
        filter=task_filter,
        sort=TaskSort.parse(sort_by),
        fields=parse_fields(fields),
        page=page_number,
        limit=limit_number,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def filter_clauses(task_filter: TaskFilter) -> List[ColumnElement[bool]]:
    """WHERE clauses for a filter, AND-ed together by the caller"""
    clauses: List[ColumnElement[bool]] = [TaskORM.user_id == task_filter.user_id]

    if task_filter.status is not None:
        clauses.append(TaskORM.status == task_filter.status.value)
    if task_filter.priority is not None:
        clauses.append(TaskORM.priority == task_filter.priority.value)
    if task_filter.category is not None:
        clauses.append(TaskORM.categories.contains([task_filter.category]))
    if task_filter.due_before is not None:
        clauses.append(TaskORM.due_date <= task_filter.due_before)
    if task_filter.due_after is not None:
        clauses.append(TaskORM.due_date >= task_filter.due_after)
    if task_filter.search is not None:
        pattern = f"%{_escape_like(task_filter.search)}%"
        clauses.append(
            or_(
                TaskORM.title.ilike(pattern, escape="\\"),
                TaskORM.description.ilike(pattern, escape="\\"),
            )
        )

    return clauses


def priority_rank():
    """CASE expression ranking High above Medium above Low"""
    return case(PRIORITY_RANK, value=TaskORM.priority, else_=0)


def order_by_clauses(sort: TaskSort) -> list:
    if sort == TaskSort.DUE_DATE:
        primary = TaskORM.due_date.asc().nulls_last()
    elif sort == TaskSort.TITLE:
        primary = TaskORM.title.asc()
    elif sort == TaskSort.PRIORITY:
        primary = priority_rank().desc()
    else:
        primary = TaskORM.created_at.desc()

    # id keeps pages stable when the primary key ties
    return [primary, TaskORM.id.desc() if sort == TaskSort.CREATED_AT else TaskORM.id.asc()]


def projection_columns(fields: List[str]) -> list:
    """Columns to select for the requested API attributes"""
    names = fields or list(FIELD_COLUMNS)
    return [getattr(TaskORM, FIELD_COLUMNS[name]) for name in names]
