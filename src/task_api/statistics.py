from __future__ import annotations

import logging

from .clock import Clock
from .filters import Filter
from .query import load_records
from .repositories import DocumentRepository
from .schemas import TaskPriority, TaskStatistics, TaskStatus

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class StatisticsAggregator:
    """
    Counts the tasks in a scope by status and priority, plus how many are
    overdue relative to the injected clock. The scope is scanned once.
    """

    def __init__(self, repository: DocumentRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    def aggregate(self, scope: Filter) -> TaskStatistics:
        today = self._clock.today_iso()
        by_status = {status.value: 0 for status in TaskStatus}
        by_priority = {priority.value: 0 for priority in TaskPriority}
        total = 0
        overdue = 0

        for record in load_records(self._repository.find(scope)):
            total += 1
            by_status[record.status.value] += 1
            by_priority[record.priority.value] += 1
            if record.is_overdue(today):
                overdue += 1

        logger.debug("Statistics over %d task(s) as of %s: %d overdue", total, today, overdue)
        return TaskStatistics(total=total, by_status=by_status, by_priority=by_priority, overdue=overdue)
