import uuid

import pytest

from conftest import MISSING_TASK, USER_A, USER_B, USER_C
from task_api.batch import MAX_BATCH_SIZE, BatchCoordinator, validate_batch_ids
from task_api.exceptions import ConflictError, NotFoundError, ValidationError
from task_api.schemas import TaskStatus
from task_api.service import TaskService


def new_ids(count):
    return [str(uuid.uuid4()) for _ in range(count)]


class TestBatchPreconditions:
    def test_empty_batch_rejected(self):
        with pytest.raises(ValidationError):
            validate_batch_ids([])

    def test_fifty_ids_allowed_fifty_one_rejected(self):
        assert len(validate_batch_ids(new_ids(MAX_BATCH_SIZE))) == 50
        with pytest.raises(ValidationError):
            validate_batch_ids(new_ids(MAX_BATCH_SIZE + 1))

    def test_duplicate_rejected(self):
        ids = new_ids(3)
        with pytest.raises(ConflictError, match=ids[0]):
            validate_batch_ids(ids + [ids[0]])

    def test_malformed_id_rejected(self):
        with pytest.raises(ValidationError):
            validate_batch_ids(new_ids(2) + ["not-an-id!"])

    def test_duplicate_batch_processes_nothing(self, service, make_task):
        task = make_task(USER_A)
        with pytest.raises(ConflictError):
            service.batch_update_status(USER_A, [task.id, MISSING_TASK, task.id], TaskStatus.DONE)
        assert service.get_task(task.id).status == TaskStatus.TODO

    def test_oversized_batch_processes_nothing(self, service, make_task):
        task = make_task(USER_A)
        with pytest.raises(ValidationError):
            service.batch_delete(USER_A, [task.id] + new_ids(MAX_BATCH_SIZE))
        assert service.get_task(task.id).id == task.id

    def test_unknown_status_rejected(self, service, make_task):
        task = make_task(USER_A)
        with pytest.raises(ValidationError):
            service.batch_update_status(USER_A, [task.id], "ARCHIVED")


class TestBatchExecution:
    def test_partial_failure_status_update(self, service, make_task):
        first = make_task(USER_A, title="First")
        second = make_task(USER_A, title="Second")

        result = service.batch_update_status(USER_A, [first.id, MISSING_TASK, second.id], TaskStatus.DONE)

        assert result.successful == 2
        assert result.failed == 1
        assert result.successful_ids == [first.id, second.id]
        assert result.failed_ids == [MISSING_TASK]
        assert "not found" in result.errors[MISSING_TASK]
        assert service.get_task(first.id).status == TaskStatus.DONE
        assert service.get_task(second.id).status == TaskStatus.DONE

    def test_batch_delete_only_removes_own_tasks(self, service, make_task):
        own = make_task(USER_A, title="Own")
        assigned = make_task(USER_B, title="Assigned", assigned_to=USER_A)

        result = service.batch_delete(USER_A, [assigned.id, own.id])

        assert result.successful_ids == [own.id]
        assert result.failed_ids == [assigned.id]
        assert "creator" in result.errors[assigned.id]
        with pytest.raises(NotFoundError):
            service.get_task(own.id)
        assert service.get_task(assigned.id).title == "Assigned"

    def test_unrelated_caller_fails_every_item(self, service, make_task):
        tasks = [make_task(USER_A) for _ in range(3)]
        result = service.batch_update_status(USER_C, [t.id for t in tasks], TaskStatus.IN_PROGRESS)
        assert result.successful == 0
        assert result.failed_ids == [t.id for t in tasks]

    def test_parallel_workers_keep_input_order(self, task_repo, users, clock):
        service = TaskService(tasks=task_repo, users=users, clock=clock, batch_max_workers=4)
        from task_api.schemas import CreateTaskRequest

        ids = []
        for i in range(10):
            ids.append(service.create_task(USER_A, CreateTaskRequest(title=f"Task {i}", due_date="2025-07-01")).id)
        ids.insert(4, MISSING_TASK)

        result = service.batch_update_status(USER_A, ids, TaskStatus.IN_PROGRESS)
        assert result.successful_ids == [i for i in ids if i != MISSING_TASK]
        assert result.failed_ids == [MISSING_TASK]

    def test_unexpected_errors_are_isolated(self):
        ids = new_ids(3)

        def operation(task_id):
            if task_id == ids[1]:
                raise RuntimeError("boom")

        result = BatchCoordinator().run("test", ids, operation)
        assert result.successful_ids == [ids[0], ids[2]]
        assert result.errors == {ids[1]: "Internal error"}
