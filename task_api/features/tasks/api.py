"""Tasks API endpoints"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from task_api.db import get_db
from task_api.features.tasks.dashboard import DashboardService
from task_api.features.tasks.domain import Task, TaskCreate, TaskUpdate
from task_api.features.tasks.query_builder import build_task_query
from task_api.features.tasks.repository import TaskRepository
from task_api.features.tasks.schemas import (
    DashboardSnapshot,
    DeleteTaskResponse,
    TaskListResponse,
)
from task_api.features.tasks.service import TaskService
from task_api.middleware.auth import get_current_user_id

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/tasks", tags=["tasks"])

# tasks.id is a 32-bit INTEGER column
MAX_TASK_ID = 2**31 - 1


def get_task_repository(db: AsyncSession = Depends(get_db)) -> TaskRepository:
    return TaskRepository(db)


def get_task_service(
    repository: TaskRepository = Depends(get_task_repository),
) -> TaskService:
    return TaskService(repository)


def get_dashboard_service(
    repository: TaskRepository = Depends(get_task_repository),
) -> DashboardService:
    return DashboardService(repository)


@router.post("", response_model=Task, status_code=201)
async def create_task(
    request: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """Create a task owned by the authenticated user"""
    return await service.create_task(user_id, request)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    due_before: Optional[str] = Query(None, alias="dueBefore"),
    due_after: Optional[str] = Query(None, alias="dueAfter"),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    fields: Optional[str] = Query(None, description="Comma-separated attributes to return"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """
    List the authenticated user's tasks.

    Unknown status/priority values are ignored. sortBy accepts dueDate,
    title or priority and otherwise sorts newest first.

    Raises:
        400: page/limit are not integers >= 1, or a due date is malformed
    """
    query = build_task_query(
        user_id,
        status=status,
        category=category,
        priority=priority,
        due_before=due_before,
        due_after=due_after,
        search=search,
        sort_by=sort_by,
        fields=fields,
        page=page,
        limit=limit,
    )
    return await service.list_tasks(query)


@router.get("/dashboard", response_model=DashboardSnapshot)
async def get_dashboard(
    user_id: str = Depends(get_current_user_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Status counts, upcoming tasks and category histogram for the user"""
    return await service.get_snapshot(user_id)


@router.get("/categories", response_model=List[str])
async def get_categories(
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """Distinct category labels across the user's tasks"""
    return await service.get_categories(user_id)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: int = Path(..., le=MAX_TASK_ID),
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """Get a single task by ID"""
    return await service.get_task(task_id, user_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    request: TaskUpdate,
    task_id: int = Path(..., le=MAX_TASK_ID),
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """
    Update an existing task.

    Only the fields present in the body are changed.

    Raises:
        400: Invalid body, or task_id outside the id range
        404: Task not found
        401: Task belongs to another user
    """
    return await service.update_task(task_id, user_id, request)


@router.delete("/{task_id}", response_model=DeleteTaskResponse)
async def delete_task(
    task_id: int = Path(..., le=MAX_TASK_ID),
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task; another user's task is reported as not found"""
    task = await service.delete_task(task_id, user_id)
    return {"msg": "Task removed", "task": task}
