from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from task_api.clock import FixedClock
from task_api.repositories import InMemoryRepository
from task_api.schemas import CreateTaskRequest, TaskResponse, UserProfile, UserRole
from task_api.service import TaskService
from task_api.users import UserDirectory

# User ids have identifier shape (hex and dashes) so they can be assignees
USER_A = "aaaaaaaa-0000-4000-8000-000000000001"
USER_B = "bbbbbbbb-0000-4000-8000-000000000002"
USER_C = "cccccccc-0000-4000-8000-000000000003"
ADMIN = "dddddddd-0000-4000-8000-000000000004"
UNKNOWN_USER = "eeeeeeee-0000-4000-8000-000000000005"
MISSING_TASK = "ffffffff-0000-4000-8000-000000000006"

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock() -> FixedClock:
    """Clock pinned to 2025-06-15 12:00 UTC."""
    return FixedClock(NOW)


@pytest.fixture()
def task_repo() -> InMemoryRepository:
    return InMemoryRepository("tasks")


@pytest.fixture()
def users() -> UserDirectory:
    directory = UserDirectory(InMemoryRepository("users"))
    directory.register(UserProfile(id=USER_A, name="Alice", email="alice@example.com", timezone="Asia/Colombo"))
    directory.register(UserProfile(id=USER_B, name="Bob", email="bob@example.com"))
    directory.register(UserProfile(id=USER_C, name="Carol", email="carol@example.com"))
    directory.register(UserProfile(id=ADMIN, name="Root", email="root@example.com", role=UserRole.ADMIN))
    return directory


@pytest.fixture()
def service(task_repo: InMemoryRepository, users: UserDirectory, clock: FixedClock) -> TaskService:
    return TaskService(tasks=task_repo, users=users, clock=clock)


@pytest.fixture()
def make_task(service: TaskService) -> Callable[..., TaskResponse]:
    """
    Factory creating a task through the service.

    Usage: make_task(USER_A, title="Write docs", priority="HIGH")
    """

    def _make(caller_id: str = USER_A, **overrides) -> TaskResponse:
        payload = {
            "title": "Test task",
            "description": "Something to do",
            "due_date": "2025-07-01",
            "priority": "MEDIUM",
        }
        payload.update(overrides)
        return service.create_task(caller_id, CreateTaskRequest(**payload))

    return _make
