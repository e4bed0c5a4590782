# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from task_api.features.tasks.api import get_task_repository
from task_api.main import app
from task_api.middleware.auth import get_current_user_id

from .fakes import FakeTaskRepository

OWNER_ID = "user-1"
OTHER_ID = "user-2"


class Caller:
    """Mutable stand-in for the authenticated user of the next request"""

    def __init__(self, user_id: str) -> None:
        self.id = user_id


@pytest.fixture()
def repo() -> FakeTaskRepository:
    return FakeTaskRepository()


@pytest.fixture()
def caller() -> Caller:
    return Caller(OWNER_ID)


@pytest.fixture()
def client(repo: FakeTaskRepository, caller: Caller) -> Iterator[TestClient]:
    """
    TestClient with auth and storage replaced.

    The caller fixture decides which user the requests are made as; switch
    users by assigning caller.id.
    """
    app.dependency_overrides[get_current_user_id] = lambda: caller.id
    app.dependency_overrides[get_task_repository] = lambda: repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
