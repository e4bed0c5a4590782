"""Request and response schemas for the tasks API"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from task_api.features.tasks.domain import Task


class Pagination(BaseModel):
    """Pagination metadata for the task list"""
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage")
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")
    total_items: int = Field(..., alias="totalItems")


class TaskListResponse(BaseModel):
    """Response model for the task list; data items are projected tasks"""
    success: bool = True
    pagination: Pagination
    data: List[Dict[str, Any]]


class DeleteTaskResponse(BaseModel):
    msg: str
    task: Task


class CategoryCount(BaseModel):
    category: str
    count: int


class DashboardSnapshot(BaseModel):
    """Per-user aggregate counts, upcoming tasks and category histogram"""
    model_config = ConfigDict(populate_by_name=True)

    total_tasks: int = Field(..., alias="totalTasks")
    todo_tasks: int = Field(..., alias="todoTasks")
    in_progress_tasks: int = Field(..., alias="inProgressTasks")
    done_tasks: int = Field(..., alias="doneTasks")
    upcoming_tasks: List[Task] = Field(default_factory=list, alias="upcomingTasks")
    category_counts: List[CategoryCount] = Field(default_factory=list, alias="categoryCounts")
