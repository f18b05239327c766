from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class SortField(str, Enum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Ordinal used whenever tasks are ordered by priority
PRIORITY_RANK: Dict[TaskPriority, int] = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


class CamelModel(BaseModel):
    """Base model exchanging camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class CreateTaskRequest(CamelModel):
    """
    Schema for creating a new task. Content rules (lengths, characters, date
    window) are enforced by the service before anything is stored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Prepare release notes",
                "description": "Summarize the changes since the last release",
                "dueDate": "2025-02-01",
                "priority": "HIGH",
                "assignedTo": "5f0c2a9e-6c1d-4a8e-9b47-0d2f3c4b5a61",
            }
        },
    )

    title: str = Field(..., description="Short title for the task (3..200 characters)")
    description: str = Field(default="", description="Optional detailed description (up to 2000 characters)")
    due_date: str = Field(..., description="Due date as YYYY-MM-DD")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    assigned_to: Optional[str] = Field(default=None, description="Id of the user the task is assigned to")
    timezone: Optional[str] = Field(
        default=None, description="Timezone override; defaults to the creator's profile timezone"
    )


# PUBLIC_INTERFACE
class UpdateTaskRequest(CamelModel):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated. Sending
    ``assignedTo: null`` explicitly removes the assignee.
    """

    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Detailed description")
    status: Optional[TaskStatus] = Field(default=None, description="Task status")
    due_date: Optional[str] = Field(default=None, description="Due date as YYYY-MM-DD")
    priority: Optional[TaskPriority] = Field(default=None, description="Task priority")
    assigned_to: Optional[str] = Field(default=None, description="Id of the assignee")
    timezone: Optional[str] = Field(default=None, description="Timezone from the supported list")


# PUBLIC_INTERFACE
class TaskFilterOptions(CamelModel):
    """
    Filters, pagination and sorting for list and search operations.
    Out-of-range page/pageSize values are clamped, never rejected.
    """

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    start_date: Optional[str] = Field(default=None, description="Earliest due date (inclusive), YYYY-MM-DD")
    end_date: Optional[str] = Field(default=None, description="Latest due date (inclusive), YYYY-MM-DD")
    page: int = 1
    page_size: int = 10
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


# PUBLIC_INTERFACE
class TaskResponse(CamelModel):
    """Schema returned for a task, including the derived overdue flag."""

    id: str = Field(..., description="Unique identifier of the task")
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: str
    created_by: str = Field(..., description="Id of the creator; never changes")
    assigned_to: Optional[str] = None
    timezone: str
    created_at: datetime
    updated_at: datetime
    is_overdue: bool = Field(..., description="Not DONE and due before the current date")


class PaginationInfo(CamelModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool


class PaginatedTaskResponse(CamelModel):
    tasks: List[TaskResponse]
    pagination: PaginationInfo


class BatchDeleteRequest(CamelModel):
    task_ids: List[str] = Field(..., description="Ids of the tasks to delete (1..50, no duplicates)")


class BatchStatusUpdateRequest(CamelModel):
    task_ids: List[str] = Field(..., description="Ids of the tasks to update (1..50, no duplicates)")
    status: TaskStatus


# PUBLIC_INTERFACE
class BatchOperationResult(CamelModel):
    """
    Outcome of a batch operation. Ids appear in the order they were submitted.
    """

    successful: int
    failed: int
    errors: Dict[str, str] = Field(default_factory=dict, description="Failed id -> error message")
    successful_ids: List[str] = Field(default_factory=list)
    failed_ids: List[str] = Field(default_factory=list)


class TaskStatistics(CamelModel):
    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    overdue: int


class UserProfile(CamelModel):
    id: str
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.USER
    timezone: str = "UTC"
