from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .exceptions import ConflictError, TaskServiceError, ValidationError
from .schemas import BatchOperationResult
from .validators import validate_identifier

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 50

ItemOperation = Callable[[str], Any]


@dataclass(frozen=True)
class ItemOutcome:
    """Result of one batch item: ``error`` is None when the item succeeded."""

    task_id: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# PUBLIC_INTERFACE
def validate_batch_ids(task_ids: Sequence[str]) -> List[str]:
    """
    Check whole-batch preconditions before any item runs: at least one id, at
    most 50, no duplicates and every id well-formed.
    """
    if not task_ids:
        raise ValidationError("At least one task id is required")
    if len(task_ids) > MAX_BATCH_SIZE:
        raise ValidationError(f"A batch may contain at most {MAX_BATCH_SIZE} task ids")
    seen = set()
    for task_id in task_ids:
        if task_id in seen:
            raise ConflictError(f"Duplicate task id '{task_id}' in batch")
        seen.add(task_id)
    for task_id in task_ids:
        validate_identifier(task_id)
    return list(task_ids)


def aggregate(outcomes: Iterable[ItemOutcome]) -> BatchOperationResult:
    successful_ids: List[str] = []
    failed_ids: List[str] = []
    errors = {}
    for outcome in outcomes:
        if outcome.ok:
            successful_ids.append(outcome.task_id)
        else:
            failed_ids.append(outcome.task_id)
            errors[outcome.task_id] = outcome.error
    return BatchOperationResult(
        successful=len(successful_ids),
        failed=len(failed_ids),
        errors=errors,
        successful_ids=successful_ids,
        failed_ids=failed_ids,
    )


# PUBLIC_INTERFACE
class BatchCoordinator:
    """
    Applies a single-item operation to each id of a batch.

    Items are independent: a failing item is recorded and the rest still run,
    and items that already succeeded are never rolled back. With
    ``max_workers > 1`` items run on a thread pool; results are still reported
    in input order.
    """

    def __init__(self, max_workers: int = 1) -> None:
        self._max_workers = max(max_workers, 1)

    def run(self, label: str, task_ids: Sequence[str], operation: ItemOperation) -> BatchOperationResult:
        ids = validate_batch_ids(task_ids)

        def run_item(task_id: str) -> ItemOutcome:
            try:
                operation(task_id)
            except TaskServiceError as exc:
                return ItemOutcome(task_id, exc.message)
            except Exception:
                logger.exception("Batch %s failed unexpectedly for task %s", label, task_id)
                return ItemOutcome(task_id, "Internal error")
            return ItemOutcome(task_id)

        if self._max_workers == 1 or len(ids) == 1:
            outcomes = [run_item(task_id) for task_id in ids]
        else:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(ids))) as pool:
                # Executor.map yields results in submission order
                outcomes = list(pool.map(run_item, ids))

        result = aggregate(outcomes)
        logger.info(
            "Batch %s finished: %d succeeded, %d failed", label, result.successful, result.failed
        )
        return result
