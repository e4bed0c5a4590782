"""Tasks feature module"""

from task_api.features.tasks.api import router
from task_api.features.tasks.dashboard import DashboardService
from task_api.features.tasks.domain import (
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)
from task_api.features.tasks.query_builder import TaskFilter, TaskQuery, TaskSort, build_task_query
from task_api.features.tasks.repository import TaskRepository
from task_api.features.tasks.service import TaskService

__all__ = [
    "router",
    "DashboardService",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "TaskFilter",
    "TaskQuery",
    "TaskSort",
    "build_task_query",
    "TaskRepository",
    "TaskService",
]
