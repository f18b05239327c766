from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import Caller, require_admin
from ..dependencies import get_task_service
from ..schemas import PaginatedTaskResponse, TaskFilterOptions, TaskStatistics
from ..service import TaskService
from .tasks import filter_options

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={403: {"description": "Admin access required"}},
)


# PUBLIC_INTERFACE
@router.get(
    "/tasks",
    response_model=PaginatedTaskResponse,
    summary="List All Tasks",
    description="List every task regardless of creator or assignee. Accepts the same parameters as GET /tasks.",
)
def list_all_tasks(
    options: TaskFilterOptions = Depends(filter_options),
    caller: Caller = Depends(require_admin),
    service: TaskService = Depends(get_task_service),
) -> PaginatedTaskResponse:
    return service.list_tasks(caller.user_id, True, options)


# PUBLIC_INTERFACE
@router.get(
    "/stats/tasks",
    response_model=TaskStatistics,
    summary="Global Task Statistics",
    description="Statistics over every task in the system.",
)
def all_task_statistics(
    caller: Caller = Depends(require_admin),
    service: TaskService = Depends(get_task_service),
) -> TaskStatistics:
    return service.get_statistics(caller.user_id, True)
