"""Dashboard aggregation over a user's tasks"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from task_api.features.tasks.domain import TaskStatus
from task_api.features.tasks.repository import TaskRepository
from task_api.features.tasks.schemas import CategoryCount, DashboardSnapshot

UPCOMING_WINDOW = timedelta(days=7)
UPCOMING_LIMIT = 5


class DashboardService:
    """Computes a fresh snapshot on every call"""

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    async def get_snapshot(
        self,
        user_id: str,
        current_time: Optional[datetime] = None,
    ) -> DashboardSnapshot:
        """
        Build the dashboard for a user.

        Args:
            user_id: The authenticated user ID
            current_time: The reference time for upcoming tasks (defaults to now)

        Returns:
            DashboardSnapshot with status counts, up to five open tasks due in
            the next seven days, and task counts per category
        """
        if current_time is None:
            current_time = datetime.now(timezone.utc)

        status_counts = await self.repository.count_by_status(user_id)
        upcoming = await self.repository.find_upcoming(
            user_id,
            start=current_time,
            end=current_time + UPCOMING_WINDOW,
            limit=UPCOMING_LIMIT,
        )
        category_counts = await self.repository.count_by_category(user_id)

        return DashboardSnapshot(
            total_tasks=sum(status_counts.values()),
            todo_tasks=status_counts.get(TaskStatus.TODO.value, 0),
            in_progress_tasks=status_counts.get(TaskStatus.IN_PROGRESS.value, 0),
            done_tasks=status_counts.get(TaskStatus.DONE.value, 0),
            upcoming_tasks=upcoming,
            category_counts=[
                CategoryCount(category=category, count=count)
                for category, count in category_counts
            ],
        )
