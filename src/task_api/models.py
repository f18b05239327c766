from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .schemas import PRIORITY_RANK, TaskPriority, TaskResponse, TaskStatus

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskDocument(TypedDict, total=False):
    """
    A task as it is written to the document repository.

    Fields:
    - id: UUID string, immutable
    - title / description: validated text
    - status / priority: enum values as strings
    - priority_rank: 1 (LOW) .. 3 (HIGH), kept in step with priority so the
      store can sort priority ordinally
    - due_date: YYYY-MM-DD
    - created_by: creator id, never reassigned
    - assigned_to: assignee id or None
    - timezone: task timezone
    - created_at / updated_at: ISO-8601 UTC timestamps
    """

    id: str
    title: str
    description: str
    status: str
    priority: str
    priority_rank: int
    due_date: str
    created_by: str
    assigned_to: Optional[str]
    timezone: str
    created_at: str
    updated_at: str


class UserDocument(TypedDict, total=False):
    id: str
    name: str
    email: str
    role: str
    timezone: str


# PUBLIC_INTERFACE
class TaskRecord(BaseModel):
    """
    A task read back from the repository.

    Every stored document goes through this model exactly once; anything that
    fails here is treated as a malformed record by the caller.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    title: str
    description: str = ""
    status: TaskStatus
    priority: TaskPriority
    due_date: str = Field(..., pattern=r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
    created_by: str
    assigned_to: Optional[str] = None
    timezone: str = "UTC"
    created_at: datetime
    updated_at: datetime

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK[self.priority]

    def is_overdue(self, today_iso: str) -> bool:
        """DONE tasks are never overdue; other tasks are once their due date has passed."""
        return self.status != TaskStatus.DONE and self.due_date < today_iso

    def to_response(self, today_iso: str) -> TaskResponse:
        return TaskResponse(
            id=self.id,
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            due_date=self.due_date,
            created_by=self.created_by,
            assigned_to=self.assigned_to,
            timezone=self.timezone,
            created_at=self.created_at,
            updated_at=self.updated_at,
            is_overdue=self.is_overdue(today_iso),
        )


# PUBLIC_INTERFACE
def load_task_record(document: Mapping[str, Any]) -> Optional[TaskRecord]:
    """
    Deserialize a stored task document. Legacy or malformed documents are
    logged and skipped by returning None.
    """
    try:
        return TaskRecord.model_validate(document)
    except ValidationError as exc:
        logger.warning(
            "Skipping malformed task document id=%s: %d validation error(s)",
            document.get("id", "<missing>"),
            exc.error_count(),
        )
        return None
