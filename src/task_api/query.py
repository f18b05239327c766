from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple

from .clock import Clock
from .exceptions import ValidationError
from .filters import Filter, and_
from .models import TaskRecord, load_task_record
from .repositories import DocumentRepository, SortSpec
from .schemas import PaginatedTaskResponse, SortField, SortOrder, TaskFilterOptions
from .utils import pagination_info
from .validators import MAX_PAGE_SIZE, parse_calendar_date, validate_pagination

logger = logging.getLogger(__name__)

# Stored field each sort option orders by; priority goes through its ordinal rank
SORT_FIELD_KEYS: Dict[SortField, str] = {
    SortField.DUE_DATE: "due_date",
    SortField.PRIORITY: "priority_rank",
    SortField.STATUS: "status",
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
    SortField.TITLE: "title",
}

# The same ordering applied to already-loaded records
RECORD_SORT_KEYS: Dict[SortField, Callable[[TaskRecord], Any]] = {
    SortField.DUE_DATE: lambda r: r.due_date,
    SortField.PRIORITY: lambda r: r.priority_rank,
    SortField.STATUS: lambda r: r.status.value,
    SortField.CREATED_AT: lambda r: r.created_at,
    SortField.UPDATED_AT: lambda r: r.updated_at,
    SortField.TITLE: lambda r: r.title,
}


# PUBLIC_INTERFACE
def clamp_pagination(page: int, page_size: int) -> Tuple[int, int]:
    """Clamp page to >= 1 and page_size to 1..100 instead of rejecting the request."""
    try:
        return validate_pagination(page, page_size)
    except ValidationError as exc:
        clamped = max(page, 1), min(max(page_size, 1), MAX_PAGE_SIZE)
        logger.debug("Clamping pagination page=%s pageSize=%s to %s (%s)", page, page_size, clamped, exc.message)
        return clamped


def build_filter(scope: Filter, options: TaskFilterOptions) -> Filter:
    """
    AND the access scope with the explicit equality filters and the optional
    due-date range from ``options``.
    """
    explicit: Filter = {}
    if options.status is not None:
        explicit["status"] = options.status.value
    if options.priority is not None:
        explicit["priority"] = options.priority.value
    if options.assigned_to is not None:
        explicit["assigned_to"] = options.assigned_to
    if options.created_by is not None:
        explicit["created_by"] = options.created_by

    due_range: Dict[str, str] = {}
    if options.start_date is not None:
        due_range["$gte"] = parse_calendar_date(options.start_date, "Start date").isoformat()
    if options.end_date is not None:
        due_range["$lte"] = parse_calendar_date(options.end_date, "End date").isoformat()
    if "$gte" in due_range and "$lte" in due_range and due_range["$gte"] > due_range["$lte"]:
        raise ValidationError("Start date must not be after end date")
    if due_range:
        explicit["due_date"] = due_range

    return and_(scope, explicit)


def sort_records(records: Iterable[TaskRecord], sort_by: SortField, sort_order: SortOrder) -> List[TaskRecord]:
    """Stable sort of loaded records; equal keys keep their input order."""
    return sorted(records, key=RECORD_SORT_KEYS[sort_by], reverse=sort_order == SortOrder.DESC)


def load_records(documents: Iterable[dict]) -> Iterator[TaskRecord]:
    """Deserialize documents, dropping the ones that are malformed."""
    for doc in documents:
        record = load_task_record(doc)
        if record is not None:
            yield record


# PUBLIC_INTERFACE
class QueryEngine:
    """
    Turns filter options plus an access scope into a repository query and a
    paginated response.
    """

    def __init__(self, repository: DocumentRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    def list(self, scope: Filter, options: TaskFilterOptions) -> PaginatedTaskResponse:
        """
        Return one page of the tasks matching ``scope`` and ``options``.

        Totals come from the repository count, which still includes stored
        documents that fail to load. Those are dropped from the page, so a
        page can hold fewer tasks than ``pageSize`` while totalItems and
        totalPages count them.
        """
        flt = build_filter(scope, options)
        page, page_size = clamp_pagination(options.page, options.page_size)
        skip = (page - 1) * page_size
        sort = SortSpec(
            field=SORT_FIELD_KEYS[options.sort_by],
            descending=options.sort_order == SortOrder.DESC,
        )
        logger.debug("Listing tasks filter=%s sort=%s skip=%d limit=%d", flt, sort, skip, page_size)

        total = self._repository.count(flt)
        documents = self._repository.find(flt, sort=sort, skip=skip, limit=page_size)
        today = self._clock.today_iso()
        tasks = [record.to_response(today) for record in load_records(documents)]
        return PaginatedTaskResponse(tasks=tasks, pagination=pagination_info(page, page_size, total))
