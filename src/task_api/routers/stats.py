from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import Caller, get_current_caller
from ..dependencies import get_task_service
from ..schemas import TaskStatistics
from ..service import TaskService

# Scoped to the caller even for admins; /admin/stats/tasks gives the unrestricted view.
router = APIRouter(
    prefix="/stats",
    tags=["statistics"],
)


# PUBLIC_INTERFACE
@router.get(
    "/tasks",
    response_model=TaskStatistics,
    summary="Task Statistics",
    description=(
        "Counts of the caller's tasks (created or assigned) by status and priority, "
        "plus the number that are overdue today."
    ),
)
def task_statistics(
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> TaskStatistics:
    return service.get_statistics(caller.user_id, False)
