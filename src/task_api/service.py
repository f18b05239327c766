from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence, Union

from .access import can_delete, can_update, can_view, resolve_scope
from .batch import BatchCoordinator
from .clock import Clock, SystemClock
from .exceptions import AuthorizationError, NotFoundError, ValidationError
from .filters import and_
from .models import TaskDocument, TaskRecord, load_task_record
from .query import QueryEngine
from .repositories import DocumentRepository
from .schemas import (
    PRIORITY_RANK,
    BatchOperationResult,
    CreateTaskRequest,
    PaginatedTaskResponse,
    TaskFilterOptions,
    TaskResponse,
    TaskStatistics,
    TaskStatus,
    UpdateTaskRequest,
)
from .search import SearchEngine
from .statistics import StatisticsAggregator
from .users import UserDirectory
from .validators import (
    ALLOWED_TIMEZONES,
    validate_description,
    validate_due_date,
    validate_identifier,
    validate_timezone,
    validate_title,
)

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskService:
    """
    Entry point for every task operation.

    The service only holds its collaborators, so one instance can serve
    concurrent requests. Single-task operations validate everything before
    writing and either apply all requested changes or none.
    """

    def __init__(
        self,
        tasks: DocumentRepository,
        users: UserDirectory,
        clock: Optional[Clock] = None,
        default_timezone: str = "UTC",
        batch_max_workers: int = 1,
    ) -> None:
        self._tasks = tasks
        self._users = users
        self._clock = clock or SystemClock()
        self._default_timezone = validate_timezone(default_timezone)
        self._query = QueryEngine(tasks, self._clock)
        self._search = SearchEngine(tasks, self._clock)
        self._statistics = StatisticsAggregator(tasks, self._clock)
        self._batch = BatchCoordinator(batch_max_workers)

    # ---- helpers ----

    def _timestamp(self) -> str:
        return self._clock.now().isoformat(timespec="microseconds")

    def _load(self, task_id: str) -> TaskRecord:
        doc = self._tasks.find_one({"id": task_id})
        record = load_task_record(doc) if doc is not None else None
        if record is None:
            raise NotFoundError("Task", task_id)
        return record

    def _require_user(self, user_id: str) -> None:
        validate_identifier(user_id, "Assignee id")
        if not self._users.exists(user_id):
            raise NotFoundError("User", user_id)

    def _creator_timezone(self, caller_id: str) -> str:
        profile = self._users.get(caller_id)
        if profile is not None and profile.timezone in ALLOWED_TIMEZONES:
            return profile.timezone
        return self._default_timezone

    # ---- single-task operations ----

    def create_task(self, caller_id: str, request: CreateTaskRequest) -> TaskResponse:
        """Validate and store a new TODO task owned by ``caller_id``."""
        title = validate_title(request.title)
        description = validate_description(request.description)
        due_date = validate_due_date(request.due_date, self._clock.today())
        timezone = validate_timezone(request.timezone) if request.timezone is not None else None
        if request.assigned_to is not None:
            self._require_user(request.assigned_to)

        now = self._timestamp()
        doc: TaskDocument = {
            "id": str(uuid.uuid4()),
            "title": title,
            "description": description,
            "status": TaskStatus.TODO.value,
            "priority": request.priority.value,
            "priority_rank": PRIORITY_RANK[request.priority],
            "due_date": due_date,
            "created_by": caller_id,
            "assigned_to": request.assigned_to,
            "timezone": timezone or self._creator_timezone(caller_id),
            "created_at": now,
            "updated_at": now,
        }
        self._tasks.insert(doc)
        logger.info("Task %s created by %s", doc["id"], caller_id)
        return TaskRecord.model_validate(doc).to_response(self._clock.today_iso())

    def update_task(self, caller_id: str, task_id: str, request: UpdateTaskRequest) -> TaskResponse:
        """
        Apply a partial update. Only the creator or the assignee may update,
        and at least one field has to be supplied.
        """
        validate_identifier(task_id)
        provided = request.model_fields_set
        changes = {}
        if request.title is not None:
            changes["title"] = validate_title(request.title)
        if request.description is not None:
            changes["description"] = validate_description(request.description)
        if request.status is not None:
            changes["status"] = request.status.value
        if request.priority is not None:
            changes["priority"] = request.priority.value
            changes["priority_rank"] = PRIORITY_RANK[request.priority]
        if request.due_date is not None:
            changes["due_date"] = validate_due_date(request.due_date, self._clock.today())
        if request.timezone is not None:
            changes["timezone"] = validate_timezone(request.timezone)
        if "assigned_to" in provided:
            if request.assigned_to is not None:
                validate_identifier(request.assigned_to, "Assignee id")
            changes["assigned_to"] = request.assigned_to
        if not changes:
            raise ValidationError("Nothing to update")

        record = self._load(task_id)
        if not can_update(record, caller_id):
            raise AuthorizationError("Only the creator or the assignee may update this task")
        if changes.get("assigned_to") is not None:
            self._require_user(changes["assigned_to"])

        changes["updated_at"] = self._timestamp()
        # Caller must still be creator or assignee when the write lands
        if not self._tasks.update_one(and_({"id": task_id}, resolve_scope(caller_id, False)), changes):
            if self._tasks.find_one({"id": task_id}) is None:
                raise NotFoundError("Task", task_id)
            raise AuthorizationError("Only the creator or the assignee may update this task")
        logger.info("Task %s updated by %s: %s", task_id, caller_id, sorted(changes))
        return self._load(task_id).to_response(self._clock.today_iso())

    def delete_task(self, caller_id: str, task_id: str) -> bool:
        """Permanently delete a task. Only its creator may do this."""
        validate_identifier(task_id)
        record = self._load(task_id)
        if not can_delete(record, caller_id):
            raise AuthorizationError("Only the creator may delete this task")
        if not self._tasks.delete_one({"id": task_id}):
            raise NotFoundError("Task", task_id)
        logger.info("Task %s deleted by %s", task_id, caller_id)
        return True

    def get_task(self, task_id: str, caller_id: Optional[str] = None, is_admin: bool = False) -> TaskResponse:
        """
        Return a task. When ``caller_id`` is given the task must be visible to
        that caller.
        """
        validate_identifier(task_id)
        record = self._load(task_id)
        if caller_id is not None and not can_view(record, caller_id, is_admin):
            raise AuthorizationError("You do not have access to this task")
        return record.to_response(self._clock.today_iso())

    # ---- collection operations ----

    def list_tasks(
        self, caller_id: str, is_admin: bool, options: Optional[TaskFilterOptions] = None
    ) -> PaginatedTaskResponse:
        return self._query.list(resolve_scope(caller_id, is_admin), options or TaskFilterOptions())

    def search_tasks(
        self, caller_id: str, is_admin: bool, query: str, options: Optional[TaskFilterOptions] = None
    ) -> PaginatedTaskResponse:
        return self._search.search(resolve_scope(caller_id, is_admin), query, options or TaskFilterOptions())

    def batch_delete(self, caller_id: str, task_ids: Sequence[str]) -> BatchOperationResult:
        return self._batch.run("delete", task_ids, lambda task_id: self.delete_task(caller_id, task_id))

    def batch_update_status(
        self, caller_id: str, task_ids: Sequence[str], status: Union[TaskStatus, str]
    ) -> BatchOperationResult:
        try:
            status = TaskStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown task status '{status}'") from None
        request = UpdateTaskRequest(status=status)
        return self._batch.run(
            "status-update", task_ids, lambda task_id: self.update_task(caller_id, task_id, request)
        )

    def get_statistics(self, caller_id: str, is_admin: bool) -> TaskStatistics:
        return self._statistics.aggregate(resolve_scope(caller_id, is_admin))
