"""Business logic for tasks"""

import logging
import math
from typing import List

from task_api.errors import AuthorizationError, NotFoundError
from task_api.features.tasks.domain import Task, TaskCreate, TaskUpdate
from task_api.features.tasks.query_builder import TaskQuery
from task_api.features.tasks.repository import TaskRepository
from task_api.features.tasks.schemas import Pagination, TaskListResponse

logger = logging.getLogger(__name__)


class TaskService:
    """Service layer for task CRUD with per-user ownership"""

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    async def create_task(self, user_id: str, data: TaskCreate) -> Task:
        """
        Create a task owned by the caller.

        The input model has already enforced a non-empty title and applied
        the status/priority/categories defaults.
        """
        task = await self.repository.create(user_id, data)
        logger.info(f"Created task {task.id} for user {user_id}")
        return task

    async def get_task(self, task_id: int, user_id: str) -> Task:
        """
        Get a single task owned by the caller.

        Raises:
            NotFoundError: no task with this id
            AuthorizationError: the task belongs to someone else
        """
        task = await self.repository.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        if not task.is_owned_by(user_id):
            logger.warning(f"User {user_id} denied access to task {task_id}")
            raise AuthorizationError("User not authorized")
        return task

    async def list_tasks(self, query: TaskQuery) -> TaskListResponse:
        """Run a built list query and attach pagination metadata"""
        rows, total = await self.repository.find_page(query)

        return TaskListResponse(
            success=True,
            pagination=Pagination(
                current_page=query.page,
                page_size=query.limit,
                total_pages=math.ceil(total / query.limit),
                total_items=total,
            ),
            data=rows,
        )

    async def update_task(self, task_id: int, user_id: str, data: TaskUpdate) -> Task:
        """
        Apply a partial update to a task owned by the caller.

        Only the fields present in the request are changed; the owner is
        never writable.

        Raises:
            NotFoundError: no task with this id
            AuthorizationError: the task belongs to someone else
        """
        await self.get_task(task_id, user_id)

        changes = data.changes()
        task = await self.repository.update(task_id, changes)
        if not task:
            # Deleted between the ownership check and the write
            raise NotFoundError("Task not found")

        logger.info(f"Updated task {task_id} fields {sorted(changes)}")
        return task

    async def delete_task(self, task_id: int, user_id: str) -> Task:
        """
        Delete a task owned by the caller.

        Raises:
            NotFoundError: no task matched both the id and the caller
        """
        task = await self.repository.delete_owned(task_id, user_id)
        if not task:
            raise NotFoundError("Task not found or user not authorized")

        logger.info(f"Deleted task {task_id} for user {user_id}")
        return task

    async def get_categories(self, user_id: str) -> List[str]:
        return await self.repository.distinct_categories(user_id)
