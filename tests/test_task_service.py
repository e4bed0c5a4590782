# tests/test_task_service.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from task_api.errors import AuthorizationError, NotFoundError
from task_api.features.tasks.dashboard import DashboardService
from task_api.features.tasks.domain import TaskCreate, TaskPriority, TaskStatus, TaskUpdate
from task_api.features.tasks.query_builder import build_task_query
from task_api.features.tasks.service import TaskService

from .conftest import OTHER_ID, OWNER_ID
from .fakes import FakeTaskRepository

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def service(repo: FakeTaskRepository) -> TaskService:
    return TaskService(repo)


@pytest.fixture()
def dashboard(repo: FakeTaskRepository) -> DashboardService:
    return DashboardService(repo)


@pytest.mark.asyncio
async def test_create_applies_defaults_and_owner(service: TaskService) -> None:
    task = await service.create_task(OWNER_ID, TaskCreate(title="A", priority="High"))

    assert task.user_id == OWNER_ID
    assert task.status is TaskStatus.TODO
    assert task.priority is TaskPriority.HIGH
    assert task.categories == []


@pytest.mark.asyncio
async def test_get_task_checks_owner(service: TaskService, repo: FakeTaskRepository) -> None:
    task = repo.add(OWNER_ID, title="Mine")

    assert (await service.get_task(task.id, OWNER_ID)).title == "Mine"
    with pytest.raises(AuthorizationError):
        await service.get_task(task.id, OTHER_ID)
    with pytest.raises(NotFoundError):
        await service.get_task(999, OWNER_ID)


@pytest.mark.asyncio
async def test_update_changes_only_sent_fields(service: TaskService, repo: FakeTaskRepository) -> None:
    original = repo.add(
        OWNER_ID,
        title="Write report",
        description="Quarterly",
        priority=TaskPriority.LOW,
        categories=["work"],
    )

    updated = await service.update_task(original.id, OWNER_ID, TaskUpdate(status="Done"))

    assert updated.status is TaskStatus.DONE
    assert updated.model_dump(exclude={"status"}) == original.model_dump(exclude={"status"})


@pytest.mark.asyncio
async def test_update_can_clear_optional_fields(service: TaskService, repo: FakeTaskRepository) -> None:
    task = repo.add(OWNER_ID, title="T", description="x", due_date=NOW)

    updated = await service.update_task(
        task.id, OWNER_ID, TaskUpdate.model_validate({"description": None, "dueDate": None})
    )

    assert updated.description is None
    assert updated.due_date is None
    assert updated.title == "T"


@pytest.mark.asyncio
async def test_update_rejects_other_users(service: TaskService, repo: FakeTaskRepository) -> None:
    task = repo.add(OWNER_ID, title="Mine")

    with pytest.raises(AuthorizationError):
        await service.update_task(task.id, OTHER_ID, TaskUpdate(title="Stolen"))
    assert repo.tasks[task.id].title == "Mine"

    with pytest.raises(NotFoundError):
        await service.update_task(404, OWNER_ID, TaskUpdate(title="Nope"))


@pytest.mark.asyncio
async def test_delete_by_other_user_is_not_found(service: TaskService, repo: FakeTaskRepository) -> None:
    task = repo.add(OWNER_ID, title="Mine")

    with pytest.raises(NotFoundError) as exc_info:
        await service.delete_task(task.id, OTHER_ID)
    assert exc_info.value.message == "Task not found or user not authorized"
    assert task.id in repo.tasks

    deleted = await service.delete_task(task.id, OWNER_ID)
    assert deleted.id == task.id
    assert task.id not in repo.tasks


@pytest.mark.asyncio
async def test_list_paginates(service: TaskService, repo: FakeTaskRepository) -> None:
    for i in range(23):
        repo.add(OWNER_ID, title=f"Task {i}")
    repo.add(OTHER_ID, title="Someone else's")

    for page in (1, 2, 3):
        result = await service.list_tasks(build_task_query(OWNER_ID, page=str(page), limit="10"))
        assert result.pagination.total_items == 23
        assert result.pagination.total_pages == 3
        assert len(result.data) <= 10

    last = await service.list_tasks(build_task_query(OWNER_ID, page="3", limit="10"))
    assert len(last.data) == 3

    beyond = await service.list_tasks(build_task_query(OWNER_ID, page="4", limit="10"))
    assert beyond.data == []
    assert beyond.pagination.current_page == 4


@pytest.mark.asyncio
async def test_list_empty_has_zero_pages(service: TaskService) -> None:
    result = await service.list_tasks(build_task_query(OWNER_ID))
    assert result.pagination.total_items == 0
    assert result.pagination.total_pages == 0
    assert result.success is True


@pytest.mark.asyncio
async def test_dashboard_counts(dashboard: DashboardService, repo: FakeTaskRepository) -> None:
    repo.add(OWNER_ID, title="a", status=TaskStatus.TODO, categories=["work", "home"])
    repo.add(OWNER_ID, title="b", status=TaskStatus.IN_PROGRESS, categories=["work"])
    repo.add(OWNER_ID, title="c", status=TaskStatus.DONE, categories=["work", "errands", "home"])
    repo.add(OWNER_ID, title="d", status=TaskStatus.TODO)
    repo.add(OTHER_ID, title="x", categories=["work"])

    snapshot = await dashboard.get_snapshot(OWNER_ID, current_time=NOW)

    assert snapshot.total_tasks == 4
    assert snapshot.todo_tasks == 2
    assert snapshot.in_progress_tasks == 1
    assert snapshot.done_tasks == 1
    assert [(c.category, c.count) for c in snapshot.category_counts] == [
        ("work", 3),
        ("home", 2),
        ("errands", 1),
    ]
    # One bucket entry per (task, category) pair
    assert sum(c.count for c in snapshot.category_counts) == 6


@pytest.mark.asyncio
async def test_dashboard_upcoming_window(dashboard: DashboardService, repo: FakeTaskRepository) -> None:
    repo.add(OWNER_ID, title="past", due_date=NOW - timedelta(hours=1))
    repo.add(OWNER_ID, title="done soon", status=TaskStatus.DONE, due_date=NOW + timedelta(days=1))
    repo.add(OWNER_ID, title="too far", due_date=NOW + timedelta(days=8))
    for day in (6, 2, 5, 1, 4, 3):
        repo.add(OWNER_ID, title=f"day {day}", due_date=NOW + timedelta(days=day))
    repo.add(OTHER_ID, title="not mine", due_date=NOW + timedelta(hours=2))

    snapshot = await dashboard.get_snapshot(OWNER_ID, current_time=NOW)

    assert [t.title for t in snapshot.upcoming_tasks] == ["day 1", "day 2", "day 3", "day 4", "day 5"]


@pytest.mark.asyncio
async def test_categories_distinct(service: TaskService, repo: FakeTaskRepository) -> None:
    repo.add(OWNER_ID, title="a", categories=["work", "home"])
    repo.add(OWNER_ID, title="b", categories=["work"])
    repo.add(OTHER_ID, title="c", categories=["secret"])

    assert await service.get_categories(OWNER_ID) == ["home", "work"]
