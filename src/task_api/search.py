from __future__ import annotations

import logging

from .clock import Clock
from .filters import Filter
from .models import TaskRecord
from .query import build_filter, clamp_pagination, load_records, sort_records
from .repositories import DocumentRepository
from .schemas import PaginatedTaskResponse, TaskFilterOptions
from .utils import pagination_info
from .validators import validate_search_query

logger = logging.getLogger(__name__)


def matches_query(record: TaskRecord, needle: str) -> bool:
    """Case-insensitive substring match against title or description."""
    return needle in record.title.lower() or needle in record.description.lower()


# PUBLIC_INTERFACE
class SearchEngine:
    """
    Substring search over the caller's tasks.

    The repository has no text index, so the scoped candidates are streamed,
    matched, sorted and paginated in memory. Totals describe the matched set.
    """

    def __init__(self, repository: DocumentRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    def search(self, scope: Filter, query: str, options: TaskFilterOptions) -> PaginatedTaskResponse:
        needle = validate_search_query(query).lower()
        flt = build_filter(scope, options)
        page, page_size = clamp_pagination(options.page, options.page_size)
        skip = (page - 1) * page_size

        candidates = load_records(self._repository.find(flt))
        matched = [record for record in candidates if matches_query(record, needle)]
        ordered = sort_records(matched, options.sort_by, options.sort_order)
        window = ordered[skip:min(skip + page_size, len(ordered))]
        logger.debug("Search %r matched %d task(s), returning %d", needle, len(matched), len(window))

        today = self._clock.today_iso()
        return PaginatedTaskResponse(
            tasks=[record.to_response(today) for record in window],
            pagination=pagination_info(page, page_size, len(matched)),
        )
