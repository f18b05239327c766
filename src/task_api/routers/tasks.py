from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import Caller, get_current_caller
from ..dependencies import get_task_service
from ..schemas import (
    BatchDeleteRequest,
    BatchOperationResult,
    BatchStatusUpdateRequest,
    CreateTaskRequest,
    PaginatedTaskResponse,
    SortField,
    SortOrder,
    TaskFilterOptions,
    TaskPriority,
    TaskResponse,
    TaskStatus,
    UpdateTaskRequest,
)
from ..service import TaskService

# Listing and search here are always scoped to the caller, admins included.
# The unrestricted view lives under /admin; single-task reads still honor the admin flag.
router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
def filter_options(
    status_: Optional[TaskStatus] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo", description="Filter by assignee id"),
    created_by: Optional[str] = Query(None, alias="createdBy", description="Filter by creator id"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Earliest due date, YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Latest due date, YYYY-MM-DD"),
    page: int = Query(1, description="1-based page number; values below 1 are clamped"),
    page_size: int = Query(10, alias="pageSize", description="Items per page; clamped to 1..100"),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy", description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder", description="asc or desc"),
) -> TaskFilterOptions:
    """
    Collect list/search query parameters into TaskFilterOptions.
    """
    return TaskFilterOptions(
        status=status_,
        priority=priority,
        assigned_to=assigned_to,
        created_by=created_by,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task owned by the caller. New tasks start in TODO.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Validation error"},
        404: {"description": "Assignee not found"},
    },
)
def create_task(
    payload: CreateTaskRequest,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return service.create_task(caller.user_id, payload)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=PaginatedTaskResponse,
    summary="List Tasks",
    description=(
        "List the tasks the caller created or is assigned to, with optional filters, "
        "sorting and pagination.\n\n"
        "Query parameters:\n"
        "- status, priority, assignedTo, createdBy: equality filters\n"
        "- startDate, endDate: inclusive due-date range (YYYY-MM-DD)\n"
        "- page, pageSize: pagination, clamped to page >= 1 and pageSize 1..100\n"
        "- sortBy: dueDate, priority, status, createdAt, updatedAt or title\n"
        "- sortOrder: asc or desc"
    ),
)
def list_tasks(
    options: TaskFilterOptions = Depends(filter_options),
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> PaginatedTaskResponse:
    return service.list_tasks(caller.user_id, False, options)


# PUBLIC_INTERFACE
@router.get(
    "/search",
    response_model=PaginatedTaskResponse,
    summary="Search Tasks",
    description="Case-insensitive substring search over title and description of the caller's tasks.",
    responses={400: {"description": "Invalid search query"}},
)
def search_tasks(
    q: str = Query(..., description="Search text (2..100 characters)"),
    options: TaskFilterOptions = Depends(filter_options),
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> PaginatedTaskResponse:
    return service.search_tasks(caller.user_id, False, q, options)


# PUBLIC_INTERFACE
@router.post(
    "/batch/delete",
    response_model=BatchOperationResult,
    summary="Batch Delete Tasks",
    description=(
        "Delete up to 50 tasks. Each id is processed independently; failures are reported "
        "per id and do not undo the deletions that succeeded."
    ),
    responses={
        400: {"description": "Empty, oversized or malformed id list"},
        409: {"description": "Duplicate id in the batch"},
    },
)
def batch_delete(
    payload: BatchDeleteRequest,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> BatchOperationResult:
    return service.batch_delete(caller.user_id, payload.task_ids)


# PUBLIC_INTERFACE
@router.post(
    "/batch/status",
    response_model=BatchOperationResult,
    summary="Batch Update Task Status",
    description="Set the status of up to 50 tasks, reporting success or failure per id.",
    responses={
        400: {"description": "Empty, oversized or malformed id list"},
        409: {"description": "Duplicate id in the batch"},
    },
)
def batch_update_status(
    payload: BatchStatusUpdateRequest,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> BatchOperationResult:
    return service.batch_update_status(caller.user_id, payload.task_ids, payload.status)


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get Task",
    responses={
        403: {"description": "Task not visible to the caller"},
        404: {"description": "Task not found"},
    },
)
def get_task(
    task_id: str,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return service.get_task(task_id, caller.user_id, caller.is_admin)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update Task",
    description="Partially update a task. Only its creator or assignee may do this.",
    responses={
        400: {"description": "Validation error or nothing to update"},
        403: {"description": "Caller is neither creator nor assignee"},
        404: {"description": "Task or assignee not found"},
    },
)
def update_task(
    task_id: str,
    payload: UpdateTaskRequest,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return service.update_task(caller.user_id, task_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task permanently. Only its creator may do this.",
    responses={
        204: {"description": "Task deleted"},
        403: {"description": "Caller is not the creator"},
        404: {"description": "Task not found"},
    },
)
def delete_task(
    task_id: str,
    caller: Caller = Depends(get_current_caller),
    service: TaskService = Depends(get_task_service),
) -> None:
    service.delete_task(caller.user_id, task_id)
    return None
