"""SQLAlchemy repository for tasks"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from task_api.db.models.task import Task as TaskORM
from task_api.features.tasks.domain import COLUMN_FIELDS, Task, TaskCreate, TaskStatus
from task_api.features.tasks.query_builder import (
    TaskQuery,
    filter_clauses,
    order_by_clauses,
    projection_columns,
)

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for task operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    @staticmethod
    def _to_domain(orm_task: TaskORM) -> Task:
        """Convert ORM model to domain model"""
        return Task(
            id=orm_task.id,
            user_id=orm_task.user_id,
            title=orm_task.title,
            description=orm_task.description,
            status=orm_task.status,
            priority=orm_task.priority,
            due_date=orm_task.due_date,
            categories=list(orm_task.categories or []),
            created_at=orm_task.created_at,
        )

    async def create(self, user_id: str, data: TaskCreate) -> Task:
        orm_task = TaskORM(
            user_id=str(user_id),
            title=data.title,
            description=data.description,
            status=data.status.value,
            priority=data.priority.value,
            due_date=data.due_date,
            categories=list(data.categories),
        )
        self.db.add(orm_task)
        await self.db.commit()
        # created_at is filled in by the database
        await self.db.refresh(orm_task)
        return self._to_domain(orm_task)

    async def get_by_id(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(select(TaskORM).where(TaskORM.id == task_id))
        orm_task = result.scalar_one_or_none()
        return self._to_domain(orm_task) if orm_task else None

    async def find_page(self, query: TaskQuery) -> Tuple[List[Dict[str, Any]], int]:
        """
        Run a list query.

        Returns:
            The projected rows of the requested page (keyed by API attribute
            name) and the number of tasks matching the filter overall
        """
        where = filter_clauses(query.filter)

        stmt = (
            select(*projection_columns(query.fields))
            .where(*where)
            .order_by(*order_by_clauses(query.sort))
            .offset(query.offset)
            .limit(query.limit)
        )
        result = await self.db.execute(stmt)
        rows = [
            {COLUMN_FIELDS[key]: value for key, value in row._mapping.items()}
            for row in result.all()
        ]

        count_stmt = select(func.count()).select_from(TaskORM).where(*where)
        total = (await self.db.execute(count_stmt)).scalar_one()

        return rows, total

    async def update(self, task_id: int, changes: Dict[str, Any]) -> Optional[Task]:
        """Write only the given columns; returns None if the task is gone"""
        if not changes:
            # No fields to update
            return await self.get_by_id(task_id)

        stmt = (
            update(TaskORM)
            .where(TaskORM.id == task_id)
            .values(**changes)
            .returning(TaskORM)
        )
        result = await self.db.execute(stmt)
        orm_task = result.scalar_one_or_none()
        await self.db.commit()
        return self._to_domain(orm_task) if orm_task else None

    async def delete_owned(self, task_id: int, user_id: str) -> Optional[Task]:
        """
        Delete a task only if it belongs to user_id, in a single statement.

        Returns:
            The deleted task, or None if no task matched both id and owner
        """
        stmt = (
            delete(TaskORM)
            .where(TaskORM.id == task_id, TaskORM.user_id == str(user_id))
            .returning(TaskORM)
        )
        result = await self.db.execute(stmt)
        orm_task = result.scalar_one_or_none()
        await self.db.commit()
        return self._to_domain(orm_task) if orm_task else None

    async def count_by_status(self, user_id: str) -> Dict[str, int]:
        stmt = (
            select(TaskORM.status, func.count())
            .where(TaskORM.user_id == str(user_id))
            .group_by(TaskORM.status)
        )
        result = await self.db.execute(stmt)
        return {status: count for status, count in result.all()}

    async def find_upcoming(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> List[Task]:
        """Open tasks due within [start, end], soonest first"""
        stmt = (
            select(TaskORM)
            .where(
                TaskORM.user_id == str(user_id),
                TaskORM.status != TaskStatus.DONE.value,
                TaskORM.due_date >= start,
                TaskORM.due_date <= end,
            )
            .order_by(TaskORM.due_date.asc(), TaskORM.id.asc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [self._to_domain(t) for t in result.scalars().all()]

    async def count_by_category(self, user_id: str) -> List[Tuple[str, int]]:
        """One (label, count) pair per category, counting every task it appears on"""
        labels = (
            select(func.unnest(TaskORM.categories).label("category"))
            .where(TaskORM.user_id == str(user_id))
            .subquery()
        )
        stmt = (
            select(labels.c.category, func.count().label("count"))
            .group_by(labels.c.category)
            .order_by(func.count().desc(), labels.c.category.asc())
        )
        result = await self.db.execute(stmt)
        return [(category, count) for category, count in result.all()]

    async def distinct_categories(self, user_id: str) -> List[str]:
        labels = (
            select(func.unnest(TaskORM.categories).label("category"))
            .where(TaskORM.user_id == str(user_id))
            .subquery()
        )
        stmt = select(labels.c.category).distinct().order_by(labels.c.category.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
